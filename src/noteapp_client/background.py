"""Callback-style facade for callers that live on a plain thread (e.g. a UI loop)."""

from __future__ import annotations

import asyncio
import logging
import threading
from collections.abc import Callable, Coroutine
from concurrent.futures import Future
from typing import Any, TypeVar

import httpx

from .client import DEFAULT_TIMEOUT_SECONDS, NotesClient
from .models import Note, NoteDraft, SubscriptionStatus, UploadedFile
from .outcome import Outcome

logger = logging.getLogger(__name__)

T = TypeVar("T")

Callback = Callable[[Outcome[T]], None]


class BackgroundNotesClient:
    """Runs a :class:`NotesClient` on a private event loop in a worker thread.

    Every operation returns immediately with a ``concurrent.futures.Future``
    resolving to an :class:`Outcome`. An optional callback is invoked exactly
    once with that outcome, on the worker thread; hopping back to the caller's
    own thread is up to the caller.
    """

    def __init__(
        self,
        *,
        base_url: str,
        token: str | None = None,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._loop = asyncio.new_event_loop()
        self._thread = threading.Thread(
            target=self._run_loop, name="notes-client", daemon=True
        )
        self._thread.start()
        self._client = NotesClient(
            base_url=base_url,
            token=token,
            timeout_seconds=timeout_seconds,
            transport=transport,
        )
        self._closed = False

    def _run_loop(self) -> None:
        asyncio.set_event_loop(self._loop)
        self._loop.run_forever()

    def _submit(
        self,
        coro: Coroutine[Any, Any, Outcome[T]],
        callback: Callback[T] | None,
    ) -> Future[Outcome[T]]:
        if self._closed:
            coro.close()
            raise RuntimeError("BackgroundNotesClient is closed")
        return asyncio.run_coroutine_threadsafe(self._run(coro, callback), self._loop)

    @staticmethod
    async def _run(
        coro: Coroutine[Any, Any, Outcome[T]],
        callback: Callback[T] | None,
    ) -> Outcome[T]:
        outcome = await coro
        if callback is not None:
            # Runs on the worker thread, before the future resolves.
            try:
                callback(outcome)
            except Exception:
                logger.exception("completion callback raised")
        return outcome

    def set_auth_token(self, token: str | None) -> None:
        self._client.set_auth_token(token)

    def list_notes(
        self, callback: Callback[list[Note]] | None = None
    ) -> Future[Outcome[list[Note]]]:
        return self._submit(self._client.list_notes(), callback)

    def create_note(
        self, draft: NoteDraft, callback: Callback[Note] | None = None
    ) -> Future[Outcome[Note]]:
        return self._submit(self._client.create_note(draft), callback)

    def update_note(
        self, note_id: int, draft: NoteDraft, callback: Callback[Note] | None = None
    ) -> Future[Outcome[Note]]:
        return self._submit(self._client.update_note(note_id, draft), callback)

    def delete_note(
        self, note_id: int, callback: Callback[None] | None = None
    ) -> Future[Outcome[None]]:
        return self._submit(self._client.delete_note(note_id), callback)

    def upload_file(
        self,
        data: bytes,
        file_name: str,
        callback: Callback[UploadedFile] | None = None,
        *,
        mime: str = "application/octet-stream",
    ) -> Future[Outcome[UploadedFile]]:
        return self._submit(self._client.upload_file(data, file_name, mime=mime), callback)

    def get_subscription_status(
        self, callback: Callback[SubscriptionStatus] | None = None
    ) -> Future[Outcome[SubscriptionStatus]]:
        return self._submit(self._client.get_subscription_status(), callback)

    def get_service_config(
        self, name: str, callback: Callback[dict[str, Any]] | None = None
    ) -> Future[Outcome[dict[str, Any]]]:
        return self._submit(self._client.get_service_config(name), callback)

    def close(self, timeout: float | None = None) -> None:
        if self._closed:
            return
        self._closed = True
        asyncio.run_coroutine_threadsafe(self._client.aclose(), self._loop).result(timeout)
        self._loop.call_soon_threadsafe(self._loop.stop)
        self._thread.join(timeout)
        if self._thread.is_alive():
            logger.warning("notes-client worker did not stop within %s seconds", timeout)
            return
        self._loop.close()

    def __enter__(self) -> BackgroundNotesClient:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
