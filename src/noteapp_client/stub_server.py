"""In-memory ASGI notes backend speaking the same wire contract as the real API.

Meant for tests and local development: pass ``httpx.ASGITransport(app=...)``
to :class:`~noteapp_client.client.NotesClient` to exercise it end-to-end.
"""

from __future__ import annotations

import secrets
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from starlette.applications import Starlette
from starlette.datastructures import UploadFile
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from starlette.routing import Mount, Route


@dataclass(frozen=True, slots=True)
class StubUser:
    user_id: str
    email: str
    plan_name: str | None = None
    expires_at: str | None = None

    @property
    def is_premium(self) -> bool:
        return self.plan_name is not None


@dataclass(slots=True)
class StubStore:
    users: dict[str, StubUser]
    public_config: dict[str, dict[str, Any]] = field(default_factory=dict)
    notes: list[dict[str, Any]] = field(default_factory=list)
    files: dict[int, tuple[str, bytes, str]] = field(default_factory=dict)
    next_id: int = 1

    def user_for(self, authorization: str | None) -> StubUser | None:
        if not authorization or not authorization.startswith("Bearer "):
            return None
        presented = authorization[len("Bearer ") :]
        for token, user in self.users.items():
            if secrets.compare_digest(presented, token):
                return user
        return None

    def find(self, user: StubUser, note_id: int) -> dict[str, Any] | None:
        for note in self.notes:
            if note["id"] == note_id and note["user_id"] == user.user_id:
                return note
        return None


class BearerAuthMiddleware(BaseHTTPMiddleware):
    def __init__(self, app: Starlette, *, store: StubStore) -> None:
        super().__init__(app)
        self._store = store

    @staticmethod
    def _bypass_auth(path: str) -> bool:
        # Health checks and uploaded file links are public.
        return path == "/health" or path.startswith("/files/")

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        if self._bypass_auth(request.url.path):
            return await call_next(request)
        if self._store.user_for(request.headers.get("authorization")) is None:
            return JSONResponse({"error": "unauthorized"}, status_code=401)
        return await call_next(request)


def _error(message: str, status_code: int) -> JSONResponse:
    return JSONResponse({"error": message}, status_code=status_code)


def _now() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


async def _note_fields(request: Request) -> dict[str, Any] | JSONResponse:
    try:
        body = await request.json()
    except ValueError:
        return _error("Invalid JSON body", 400)
    if not isinstance(body, dict):
        return _error("Invalid JSON body", 400)
    title = body.get("title")
    if not isinstance(title, str) or not title.strip():
        return _error("Title is required", 400)
    return {
        "title": title,
        "content": body.get("content") or "",
        "file_url": body.get("file_url"),
        "file_name": body.get("file_name"),
    }


def create_stub_app(
    users: Mapping[str, StubUser],
    *,
    public_config: Mapping[str, dict[str, Any]] | None = None,
) -> Starlette:
    """Build a fresh backend; ``users`` maps bearer tokens to their owners."""
    store = StubStore(users=dict(users), public_config=dict(public_config or {}))

    def current_user(request: Request) -> StubUser | None:
        return store.user_for(request.headers.get("authorization"))

    async def health(_: Request) -> Response:
        return JSONResponse({"ok": True})

    async def list_notes(request: Request) -> Response:
        user = current_user(request)
        if user is None:
            return _error("unauthorized", 401)
        return JSONResponse([n for n in store.notes if n["user_id"] == user.user_id])

    async def create_note(request: Request) -> Response:
        user = current_user(request)
        if user is None:
            return _error("unauthorized", 401)
        fields = await _note_fields(request)
        if isinstance(fields, JSONResponse):
            return fields
        note = {
            "id": store.next_id,
            **fields,
            "user_id": user.user_id,
            "user_email": user.email,
            "created_at": _now(),
        }
        store.next_id += 1
        # Newest first.
        store.notes.insert(0, note)
        return JSONResponse(note, status_code=201)

    async def update_note(request: Request) -> Response:
        user = current_user(request)
        if user is None:
            return _error("unauthorized", 401)
        note = store.find(user, request.path_params["note_id"])
        if note is None:
            return _error("Note not found", 404)
        fields = await _note_fields(request)
        if isinstance(fields, JSONResponse):
            return fields
        note.update(fields)
        return JSONResponse(note)

    async def delete_note(request: Request) -> Response:
        user = current_user(request)
        if user is None:
            return _error("unauthorized", 401)
        note = store.find(user, request.path_params["note_id"])
        if note is None:
            return _error("Note not found", 404)
        store.notes.remove(note)
        return JSONResponse({"success": True})

    async def upload(request: Request) -> Response:
        form = await request.form()
        upload_file = form.get("file")
        if not isinstance(upload_file, UploadFile) or not upload_file.filename:
            return _error("No file uploaded", 400)
        data = await upload_file.read()
        file_id = len(store.files) + 1
        file_name = upload_file.filename
        store.files[file_id] = (
            file_name,
            data,
            upload_file.content_type or "application/octet-stream",
        )
        file_url = request.url_for("download_file", file_id=file_id, file_name=file_name)
        return JSONResponse({"fileUrl": str(file_url), "fileName": file_name})

    async def download_file(request: Request) -> Response:
        stored = store.files.get(request.path_params["file_id"])
        if stored is None or stored[0] != request.path_params["file_name"]:
            return _error("File not found", 404)
        _, data, media_type = stored
        return Response(data, media_type=media_type)

    async def subscription_status(request: Request) -> Response:
        user = current_user(request)
        if user is None:
            return _error("unauthorized", 401)
        if not user.is_premium:
            return JSONResponse({"is_premium": False, "subscription_status": "free"})
        return JSONResponse(
            {
                "is_premium": True,
                "subscription_status": "active",
                "plan_name": user.plan_name,
                "expires_at": user.expires_at,
            }
        )

    async def service_config(request: Request) -> Response:
        config = store.public_config.get(request.path_params["name"])
        if config is None:
            return _error("Unknown configuration", 404)
        return JSONResponse(config)

    app = Starlette(
        routes=[
            Route("/health", endpoint=health, methods=["GET"]),
            Route(
                "/files/{file_id:int}/{file_name}",
                endpoint=download_file,
                methods=["GET"],
                name="download_file",
            ),
            Mount(
                "/api",
                routes=[
                    Route("/notes", endpoint=list_notes, methods=["GET"]),
                    Route("/notes", endpoint=create_note, methods=["POST"]),
                    Route("/notes/{note_id:int}", endpoint=update_note, methods=["PUT"]),
                    Route("/notes/{note_id:int}", endpoint=delete_note, methods=["DELETE"]),
                    Route("/upload", endpoint=upload, methods=["POST"]),
                    Route(
                        "/user/subscription-status",
                        endpoint=subscription_status,
                        methods=["GET"],
                    ),
                    Route("/config/{name}", endpoint=service_config, methods=["GET"]),
                ],
            ),
        ],
    )
    app.state.store = store
    app.add_middleware(BearerAuthMiddleware, store=store)
    return app
