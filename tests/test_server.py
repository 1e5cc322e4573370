"""Tests for the HTTP API."""

import pytest
from fastapi.testclient import TestClient

from pushbridge.queue import MessageStore, Scheduler
from pushbridge.server import create_app
from tests.conftest import FakeClock

PSK = "test-psk"
AUTH = {"Authorization": f"Bearer {PSK}"}

OK = {"type": "ok", "result": {}}
BAD_REQUEST = {"type": "error", "result": {"message": "bad request"}}
UNAUTHORIZED = {"type": "error", "result": {"message": "unauthorized"}}


@pytest.fixture
def client(scheduler: Scheduler) -> TestClient:
    return TestClient(create_app(scheduler, psk=PSK))


class TestEnqueue:
    """Tests for POST /message_queue.json."""

    def test_accepts_valid_batch(
        self, client: TestClient, store: MessageStore, clock: FakeClock
    ):
        response = client.post(
            "/message_queue.json",
            json={"a": {"message": "hi", "timestamp": clock.ms(10)}},
            headers=AUTH,
        )

        assert response.status_code == 200
        assert response.json() == OK
        assert "a" in store

    def test_missing_auth(
        self, client: TestClient, store: MessageStore, clock: FakeClock
    ):
        response = client.post(
            "/message_queue.json",
            json={"a": {"message": "hi", "timestamp": clock.ms(10)}},
        )

        assert response.status_code == 401
        assert response.json() == UNAUTHORIZED
        assert len(store) == 0

    @pytest.mark.parametrize(
        "header", ["Bearer wrong", PSK, f"bearer {PSK}", f"Bearer {PSK}x"]
    )
    def test_wrong_auth(self, client: TestClient, clock: FakeClock, header: str):
        response = client.post(
            "/message_queue.json",
            json={"a": {"message": "hi", "timestamp": clock.ms(10)}},
            headers={"Authorization": header},
        )
        assert response.status_code == 401

    def test_invalid_json(self, client: TestClient, store: MessageStore):
        response = client.post(
            "/message_queue.json",
            content=b"{not json",
            headers={**AUTH, "Content-Type": "application/json"},
        )

        assert response.status_code == 400
        assert response.json() == BAD_REQUEST

    @pytest.mark.parametrize("literal", ["NaN", "Infinity", "-Infinity", "1e400"])
    def test_non_finite_timestamp_rejected(
        self, client: TestClient, store: MessageStore, literal: str
    ):
        response = client.post(
            "/message_queue.json",
            content=f'{{"a": {{"message": "hi", "timestamp": {literal}}}}}'.encode(),
            headers={**AUTH, "Content-Type": "application/json"},
        )

        assert response.status_code == 400
        assert response.json() == BAD_REQUEST
        assert store.snapshot() == {}
        assert client.get("/message_queue.json").json() == {}

    def test_oversized_integer_timestamp_rejected(
        self, client: TestClient, store: MessageStore
    ):
        response = client.post(
            "/message_queue.json",
            content=b'{"a": {"message": "hi", "timestamp": 1' + b"0" * 400 + b"}}",
            headers={**AUTH, "Content-Type": "application/json"},
        )

        assert response.status_code == 400
        assert store.snapshot() == {}

    def test_non_object_body(self, client: TestClient):
        response = client.post("/message_queue.json", json=["a"], headers=AUTH)
        assert response.status_code == 400

    def test_overlong_message_rejected(
        self, client: TestClient, store: MessageStore, clock: FakeClock
    ):
        response = client.post(
            "/message_queue.json",
            json={"a": {"message": "x" * 1025, "timestamp": clock.ms(10)}},
            headers=AUTH,
        )

        assert response.status_code == 400
        assert response.json() == BAD_REQUEST
        assert store.snapshot() == {}

    def test_one_bad_entry_rejects_batch(
        self, client: TestClient, store: MessageStore, clock: FakeClock
    ):
        response = client.post(
            "/message_queue.json",
            json={
                "good": {"message": "hi", "timestamp": clock.ms(10)},
                "past": {"message": "hi", "timestamp": clock.ms(-10)},
            },
            headers=AUTH,
        )

        assert response.status_code == 400
        assert store.snapshot() == {}

    @pytest.mark.asyncio
    async def test_upsert_cancels_armed_timer(
        self, scheduler: Scheduler, store: MessageStore, clock: FakeClock
    ):
        store.upsert({"a": {"message": "old", "timestamp": clock.ms(10)}})
        scheduler.tick()
        handle = scheduler.timers._handles["a"]

        client = TestClient(create_app(scheduler, psk=PSK))
        response = client.post(
            "/message_queue.json",
            json={"a": {"message": "new", "timestamp": clock.ms(20)}},
            headers=AUTH,
        )

        assert response.status_code == 200
        assert handle.cancelled()
        assert "a" not in scheduler.timers


class TestListMessages:
    """Tests for GET /message_queue.json."""

    def test_empty(self, client: TestClient):
        response = client.get("/message_queue.json")
        assert response.status_code == 200
        assert response.json() == {}

    def test_returns_wire_form(self, client: TestClient, clock: FakeClock):
        batch = {
            "a": {"message": "hi", "title": "Hello", "timestamp": clock.ms(10)},
            "b": {"message": "yo", "timestamp": clock.ms(20)},
        }
        client.post("/message_queue.json", json=batch, headers=AUTH)

        response = client.get("/message_queue.json")
        assert response.json() == batch


class TestHealth:
    """Tests for health routes and lifespan."""

    def test_health(self, client: TestClient):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json() == {"status": "healthy"}

    def test_lifespan_runs_scheduler(
        self, scheduler: Scheduler, store: MessageStore, clock: FakeClock
    ):
        store.upsert({"a": {"message": "hi", "timestamp": clock.ms(100)}})
        app = create_app(scheduler, psk=PSK)

        with TestClient(app) as client:
            assert scheduler.running is True
            response = client.get("/ready")
            assert response.json()["status"] == "ready"
            assert response.json()["pending"] == 1

        assert scheduler.running is False
        assert "a" in store

    def test_ready_before_start(self, client: TestClient):
        response = client.get("/ready")
        assert response.json() == {"status": "starting", "pending": 0, "timers": 0}
