from __future__ import annotations

import threading
from collections.abc import Iterator

import httpx
import pytest
from starlette.applications import Starlette

from noteapp_client.background import BackgroundNotesClient
from noteapp_client.errors import DecodeError, TransportError
from noteapp_client.models import NoteDraft
from noteapp_client.outcome import Outcome

from conftest import ALICE_TOKEN, BASE_URL


@pytest.fixture
def background(stub_app: Starlette) -> Iterator[BackgroundNotesClient]:
    with BackgroundNotesClient(
        base_url=BASE_URL,
        token=ALICE_TOKEN,
        transport=httpx.ASGITransport(app=stub_app),
    ) as client:
        yield client


def test_callback_fires_once_off_caller_thread(background: BackgroundNotesClient) -> None:
    received: list[tuple[Outcome, str]] = []
    done = threading.Event()

    def on_done(outcome: Outcome) -> None:
        received.append((outcome, threading.current_thread().name))
        done.set()

    future = background.create_note(NoteDraft(title="Groceries", content="milk"), on_done)
    outcome = future.result(timeout=5)
    assert done.wait(timeout=5)

    assert outcome.ok
    assert len(received) == 1
    delivered, thread_name = received[0]
    assert delivered is outcome
    assert thread_name == "notes-client"
    assert delivered.unwrap().title == "Groceries"


def test_concurrent_operations_are_independent(background: BackgroundNotesClient) -> None:
    futures = [background.create_note(NoteDraft(title=f"note {i}")) for i in range(5)]
    created = [f.result(timeout=5).unwrap() for f in futures]
    assert len({n.id for n in created}) == 5

    listed = background.list_notes().result(timeout=5).unwrap()
    assert {n.title for n in listed} == {f"note {i}" for i in range(5)}


def test_full_note_lifecycle(background: BackgroundNotesClient) -> None:
    uploaded = background.upload_file(b"%PDF-1.4", "ticket.pdf").result(timeout=5).unwrap()
    draft = NoteDraft(title="Trip", content="train").with_attachment(uploaded)
    note = background.create_note(draft).result(timeout=5).unwrap()

    background.update_note(note.id, NoteDraft(title="Trip", content="plane")).result(timeout=5)
    assert background.delete_note(note.id).result(timeout=5).ok
    assert background.list_notes().result(timeout=5).unwrap() == []

    status = background.get_subscription_status().result(timeout=5).unwrap()
    assert status.subscription_status == "free"
    assert background.get_service_config("firebase").result(timeout=5).ok


def test_failure_is_delivered_through_callback() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("Name or service not known", request=request)

    outcomes: list[Outcome] = []
    done = threading.Event()

    def on_done(outcome: Outcome) -> None:
        outcomes.append(outcome)
        done.set()

    with BackgroundNotesClient(
        base_url=BASE_URL, transport=httpx.MockTransport(handler)
    ) as client:
        client.set_auth_token("t")
        client.list_notes(on_done)
        assert done.wait(timeout=5)
        # Still usable after a failure.
        again = client.get_subscription_status().result(timeout=5)

    assert len(outcomes) == 1
    assert isinstance(outcomes[0].error, TransportError)
    assert isinstance(again.error, TransportError)


def test_closed_client_rejects_new_work(stub_app: Starlette) -> None:
    client = BackgroundNotesClient(
        base_url=BASE_URL, transport=httpx.ASGITransport(app=stub_app)
    )
    client.close()
    client.close()
    with pytest.raises(RuntimeError):
        client.list_notes()


def test_corrupt_body_still_fires_callback() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, headers={"Content-Encoding": "gzip"}, content=b"not gzip")

    outcomes: list[Outcome] = []
    done = threading.Event()

    def on_done(outcome: Outcome) -> None:
        outcomes.append(outcome)
        done.set()

    with BackgroundNotesClient(
        base_url=BASE_URL, token="t", transport=httpx.MockTransport(handler)
    ) as client:
        future = client.list_notes(on_done)
        outcome = future.result(timeout=5)
        assert done.wait(timeout=5)

    assert future.exception() is None
    assert isinstance(outcome.error, DecodeError)
    assert outcomes == [outcome]
