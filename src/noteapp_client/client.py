"""Async client for the notes REST API."""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

import httpx
from pydantic import TypeAdapter, ValidationError

from .auth import TokenHolder
from .errors import DecodeError, NotesClientError, ServerError, TransportError
from .models import Note, NoteDraft, SubscriptionStatus, UploadedFile
from .outcome import Outcome
from .settings import Settings

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_TIMEOUT_SECONDS = 30.0

_NOTE_LIST = TypeAdapter(list[Note])


async def _log_request(request: httpx.Request) -> None:
    logger.debug("--> %s %s", request.method, request.url)


async def _log_response(response: httpx.Response) -> None:
    request = response.request
    logger.debug("<-- %s %s %s", response.status_code, request.method, request.url)


class NotesClient:
    """Thin wrapper around the notes backend.

    Every public operation returns an :class:`Outcome`; transport, server and
    decode faults are reported there instead of being raised. The client stays
    usable after any failure.
    """

    def __init__(
        self,
        *,
        base_url: str,
        token: str | None = None,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._token = TokenHolder(token)
        self._client = httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            timeout=httpx.Timeout(timeout_seconds),
            transport=transport,
            event_hooks={"request": [_log_request], "response": [_log_response]},
        )

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> NotesClient:
        return cls(
            base_url=str(settings.notes_api_base_url),
            token=settings.notes_api_token,
            timeout_seconds=settings.http_timeout_seconds,
            transport=transport,
        )

    @property
    def base_url(self) -> str:
        return str(self._client.base_url)

    def _url(self, path: str) -> str:
        return str(self._client.base_url.join(path.lstrip("/")))

    def set_auth_token(self, token: str | None) -> None:
        self._token.set(token)

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> NotesClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    # -- request layer --------------------------------------------------

    async def _send(
        self,
        method: str,
        path: str,
        *,
        json_body: dict[str, Any] | None = None,
        files: dict[str, Any] | None = None,
    ) -> httpx.Response:
        method = method.upper()
        url_path = path if path.startswith("/") else f"/{path}"
        # Token is read here, at issue time.
        headers = self._token.headers()

        try:
            resp = await self._client.request(
                method, url_path, headers=headers, json=json_body, files=files
            )
        except httpx.DecodingError as exc:
            raise DecodeError(
                method=method,
                url=self._url(url_path),
                reason=str(exc) or type(exc).__name__,
            ) from exc
        except httpx.RequestError as exc:
            raise TransportError(
                method=method,
                url=self._url(url_path),
                reason=str(exc) or type(exc).__name__,
            ) from exc

        if not resp.is_success:
            raise ServerError(
                status_code=resp.status_code,
                method=method,
                url=str(resp.request.url),
                response_text=resp.text,
            )
        return resp

    async def _request_json(
        self,
        method: str,
        path: str,
        *,
        json_body: dict[str, Any] | None = None,
        files: dict[str, Any] | None = None,
    ) -> Any:
        resp = await self._send(method, path, json_body=json_body, files=files)
        try:
            return resp.json()
        except ValueError as exc:
            raise DecodeError(
                method=resp.request.method,
                url=str(resp.request.url),
                reason=str(exc),
            ) from exc

    async def _decode(
        self, method: str, path: str, parse: Callable[[Any], T], **kwargs: Any
    ) -> T:
        data = await self._request_json(method, path, **kwargs)
        try:
            return parse(data)
        except ValidationError as exc:
            raise DecodeError(
                method=method.upper(),
                url=self._url(path),
                reason=f"{exc.error_count()} validation error(s): {exc.errors()[0]['msg']}",
            ) from exc

    @staticmethod
    async def _deliver(operation: str, call: Awaitable[T]) -> Outcome[T]:
        try:
            value = await call
        except NotesClientError as exc:
            logger.warning("%s failed: %s", operation, exc)
            return Outcome.failure(exc)
        return Outcome.success(value)

    # -- operations -----------------------------------------------------

    async def list_notes(self) -> Outcome[list[Note]]:
        return await self._deliver(
            "list_notes", self._decode("GET", "/notes", _NOTE_LIST.validate_python)
        )

    async def create_note(self, draft: NoteDraft) -> Outcome[Note]:
        return await self._deliver(
            "create_note",
            self._decode("POST", "/notes", Note.model_validate, json_body=draft.to_wire()),
        )

    async def update_note(self, note_id: int, draft: NoteDraft) -> Outcome[Note]:
        return await self._deliver(
            "update_note",
            self._decode(
                "PUT", f"/notes/{note_id}", Note.model_validate, json_body=draft.to_wire()
            ),
        )

    async def delete_note(self, note_id: int) -> Outcome[None]:
        async def call() -> None:
            # Response body is ignored on success.
            await self._send("DELETE", f"/notes/{note_id}")

        return await self._deliver("delete_note", call())

    async def upload_file(
        self,
        data: bytes,
        file_name: str,
        *,
        mime: str = "application/octet-stream",
    ) -> Outcome[UploadedFile]:
        """Upload raw bytes as the multipart part ``file``."""
        files = {"file": (file_name, data, mime)}
        return await self._deliver(
            "upload_file",
            self._decode("POST", "/upload", UploadedFile.model_validate, files=files),
        )

    async def get_subscription_status(self) -> Outcome[SubscriptionStatus]:
        return await self._deliver(
            "get_subscription_status",
            self._decode(
                "GET", "/user/subscription-status", SubscriptionStatus.model_validate
            ),
        )

    async def get_service_config(self, name: str) -> Outcome[dict[str, Any]]:
        """Fetch the public configuration the backend exposes for ``name``."""

        def parse(data: Any) -> dict[str, Any]:
            if not isinstance(data, dict):
                raise DecodeError(
                    method="GET",
                    url=self._url(f"/config/{name}"),
                    reason=f"Unexpected JSON type: {type(data).__name__}",
                )
            return data

        return await self._deliver(
            "get_service_config", self._decode("GET", f"/config/{name}", parse)
        )
