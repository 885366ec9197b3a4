"""Tests for the ingestion API."""

from collections.abc import Iterator

import pytest
from fastapi.testclient import TestClient

from threadwarden.api.app import create_app
from threadwarden.config.settings import Settings
from threadwarden.platform.inmemory import InMemoryPlatform
from threadwarden.service import ThreadWardenService
from threadwarden.threads.stores.inmemory import InMemoryThreadStore

from tests.factories.fakes import CHANNEL_ID, GUILD_ID, LOG_CHANNEL_ID

INGEST_TOKEN = "relay-secret"


def make_service(**api) -> ThreadWardenService:
    settings = Settings(
        storage={"backend": "inmemory"},
        discord={
            "backend": "inmemory",
            "managed_channel_id": CHANNEL_ID,
            "logging_channel_id": LOG_CHANNEL_ID,
        },
        sweeper={"enabled": False},
        api=api,
    )
    return ThreadWardenService(settings, InMemoryThreadStore(), InMemoryPlatform())


def message_payload(message_id: str = "500000000000000001", **overrides) -> dict:
    payload = {
        "message_id": message_id,
        "channel_id": CHANNEL_ID,
        "guild_id": GUILD_ID,
        "author_id": "700000000000000001",
        "author_name": "ana",
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def service() -> ThreadWardenService:
    return make_service()


@pytest.fixture
def client(service: ThreadWardenService) -> Iterator[TestClient]:
    with TestClient(create_app(service=service)) as client:
        yield client


class TestEvents:
    def test_first_message_creates_thread(self, client: TestClient) -> None:
        response = client.post("/v1/events/messages", json=message_payload())

        assert response.status_code == 200
        assert response.json() == {"outcome": "created"}

    def test_second_message_is_duplicate(self, client: TestClient) -> None:
        client.post("/v1/events/messages", json=message_payload("500000000000000001"))

        response = client.post("/v1/events/messages", json=message_payload("500000000000000002"))

        assert response.json() == {"outcome": "duplicate"}

    def test_bot_message_ignored(self, client: TestClient) -> None:
        response = client.post(
            "/v1/events/messages", json=message_payload(author_is_bot=True)
        )
        assert response.json() == {"outcome": "ignored"}

    def test_invalid_payload_rejected(self, client: TestClient) -> None:
        response = client.post("/v1/events/messages", json={"message_id": "1"})
        assert response.status_code == 422

    def test_thread_deleted(
        self, client: TestClient, service: ThreadWardenService
    ) -> None:
        client.post("/v1/events/messages", json=message_payload())
        (thread,) = service.platform.open_threads

        response = client.post(
            "/v1/events/thread-deleted", json={"thread_id": thread.thread_id}
        )

        assert response.status_code == 200
        assert response.json() == {"deactivated": True}

    def test_untracked_thread_deleted(self, client: TestClient) -> None:
        response = client.post(
            "/v1/events/thread-deleted", json={"thread_id": "999999999999999999"}
        )
        assert response.json() == {"deactivated": False}


class TestSweeps:
    def test_manual_sweep(self, client: TestClient) -> None:
        response = client.post("/v1/sweeps")

        assert response.status_code == 200
        body = response.json()
        assert body["examined"] == 0
        assert body["skipped"] is False


class TestAuthentication:
    @pytest.fixture
    def client(self) -> Iterator[TestClient]:
        service = make_service(ingest_token=INGEST_TOKEN)
        with TestClient(create_app(service=service)) as client:
            yield client

    def test_missing_token(self, client: TestClient) -> None:
        response = client.post("/v1/events/messages", json=message_payload())
        assert response.status_code == 401

    def test_wrong_token(self, client: TestClient) -> None:
        response = client.post(
            "/v1/events/messages",
            json=message_payload(),
            headers={"Authorization": "Bearer nope"},
        )
        assert response.status_code == 401

    def test_valid_token(self, client: TestClient) -> None:
        response = client.post(
            "/v1/events/messages",
            json=message_payload(),
            headers={"Authorization": f"Bearer {INGEST_TOKEN}"},
        )
        assert response.status_code == 200

    def test_health_needs_no_token(self, client: TestClient) -> None:
        assert client.get("/health").status_code == 200


class TestHealth:
    def test_healthy(self, client: TestClient) -> None:
        response = client.get("/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["components"] == {"store": True, "platform": True, "sweeper": True}

    def test_unhealthy_store(
        self,
        client: TestClient,
        service: ThreadWardenService,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        async def unhealthy() -> bool:
            return False

        monkeypatch.setattr(service.store, "health_check", unhealthy)

        response = client.get("/health")

        assert response.status_code == 503
        assert response.json()["status"] == "unhealthy"

    def test_metrics(self, client: TestClient) -> None:
        client.post("/v1/events/messages", json=message_payload())

        response = client.get("/metrics")

        assert response.status_code == 200
        assert "threadwarden_events_total" in response.text
