from __future__ import annotations

from collections.abc import AsyncIterator

import httpx
import pytest
from starlette.applications import Starlette

from noteapp_client.client import NotesClient
from noteapp_client.stub_server import StubUser, create_stub_app

ALICE_TOKEN = "alice-token"
BOB_TOKEN = "bob-token"
BASE_URL = "http://testserver/api"


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture
def stub_app() -> Starlette:
    return create_stub_app(
        {
            ALICE_TOKEN: StubUser(user_id="u-alice", email="alice@example.com"),
            BOB_TOKEN: StubUser(
                user_id="u-bob",
                email="bob@example.com",
                plan_name="Pro Monthly",
                expires_at="2030-01-01T00:00:00Z",
            ),
        },
        public_config={"firebase": {"projectId": "noteapp", "apiKey": "public-key"}},
    )


@pytest.fixture
async def notes(stub_app: Starlette) -> AsyncIterator[NotesClient]:
    client = NotesClient(
        base_url=BASE_URL,
        token=ALICE_TOKEN,
        transport=httpx.ASGITransport(app=stub_app),
    )
    yield client
    await client.aclose()
