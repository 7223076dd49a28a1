"""
Integration Tests - Chat Flow

Exercises the HTTP surface end to end: request validation, session
lifecycle, the SSE chat stream and the read-only catalogs. Model
backends are replaced by scripted providers.
"""

import json

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from mpt.config import Settings
from mpt.infrastructure.llm import ProviderGateway, RateLimitError
from mpt.main import create_application
from mpt.services.orchestration import SessionOrchestrator


def build_app(store, gateway) -> FastAPI:
    app = create_application(Settings(env="test", metrics_enabled=True))
    app.state.orchestrator = SessionOrchestrator(store, gateway)
    return app


@pytest.fixture
def app(store, gateway) -> FastAPI:
    return build_app(store, gateway)


def client_for(app: FastAPI) -> AsyncClient:
    return AsyncClient(transport=ASGITransport(app=app), base_url="http://test")


def parse_stream(body: str) -> list[tuple[str, dict]]:
    events = []
    for block in body.split("\n\n"):
        if not block.strip():
            continue
        lines = dict(line.split(": ", 1) for line in block.split("\n"))
        events.append((lines["event"], json.loads(lines["data"])))
    return events


class TestChatEndpoint:
    """Tests for POST /api/chat."""

    @pytest.mark.asyncio
    async def test_new_conversation_streams_reply(self, app: FastAPI) -> None:
        async with client_for(app) as client:
            response = await client.post(
                "/api/chat",
                json={"message": "I feel anxious and don't know what to do"},
            )

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/event-stream")
        assert response.headers["cache-control"] == "no-cache"
        assert response.headers["x-accel-buffering"] == "no"

        events = parse_stream(response.text)
        assert events[0][0] == "meta"
        assert events[-1][0] == "done"
        assert events[0][1]["scenarioId"] == "anxiety"
        assert events[0][1]["currentStage"] == "context_gathering"
        assert "".join(p["content"] for e, p in events if e == "chunk") == "Hello there"

    @pytest.mark.asyncio
    async def test_conversation_continues_with_session_id(self, app: FastAPI) -> None:
        async with client_for(app) as client:
            first = await client.post("/api/chat", json={"message": "I feel anxious"})
            session_id = parse_stream(first.text)[0][1]["sessionId"]

            second = await client.post("/api/chat", json={"message": "9", "sessionId": session_id})
            snapshot = await client.get(f"/api/sessions/{session_id}")

        events = parse_stream(second.text)
        assert events[0][1]["sessionId"] == session_id
        assert events[-1][1]["currentStage"] == "request_validation"

        data = snapshot.json()
        assert data["messageCount"] == 4
        assert data["state"]["importanceRating"] == 9
        assert data["state"]["stageHistory"] == ["context_gathering"]

    @pytest.mark.asyncio
    async def test_unknown_session_id_starts_new_session(self, app: FastAPI) -> None:
        async with client_for(app) as client:
            response = await client.post("/api/chat", json={"message": "hello", "sessionId": "stale"})

        meta = parse_stream(response.text)[0][1]
        assert meta["sessionId"] != "stale"

    @pytest.mark.asyncio
    async def test_explicit_scenario(self, app: FastAPI) -> None:
        async with client_for(app) as client:
            response = await client.post("/api/chat", json={"message": "hello", "scenarioId": "anger"})

        assert parse_stream(response.text)[0][1]["scenarioId"] == "anger"

    @pytest.mark.asyncio
    async def test_failover_frames(self, store, secondary, make_provider, clock) -> None:
        primary = make_provider(chunks=(), error=RateLimitError("fake-primary"))
        app = build_app(store, ProviderGateway(primary, secondary, clock=clock))

        async with client_for(app) as client:
            response = await client.post("/api/chat", json={"message": "hello"})

        events = parse_stream(response.text)
        assert [e for e, _ in events] == ["meta", "info", "provider_switch", "chunk", "chunk", "done"]
        assert events[2][1]["provider"] == "secondary"

    @pytest.mark.asyncio
    async def test_overloaded_error_frame(self, store, make_provider, clock) -> None:
        primary = make_provider(chunks=(), error=RateLimitError("fake-primary"))
        app = build_app(store, ProviderGateway(primary, None, clock=clock))

        async with client_for(app) as client:
            response = await client.post("/api/chat", json={"message": "hello"})

        assert response.status_code == 200
        event, payload = parse_stream(response.text)[-1]
        assert event == "error"
        assert payload["message"] == SessionOrchestrator.OVERLOADED_MESSAGE

    @pytest.mark.asyncio
    @pytest.mark.parametrize("body", [
        {},
        {"message": ""},
        {"message": 42},
        {"message": "x" * 8001},
    ])
    async def test_invalid_request(self, app: FastAPI, body: dict) -> None:
        async with client_for(app) as client:
            response = await client.post("/api/chat", json=body)

        assert response.status_code == 400
        data = response.json()
        assert data["error"] == "Invalid request"
        assert data["details"]


class TestSessionEndpoints:
    """Tests for session creation and lookup."""

    @pytest.mark.asyncio
    async def test_create_with_scenario(self, app: FastAPI) -> None:
        async with client_for(app) as client:
            response = await client.post("/api/sessions/new", json={"scenarioId": "anxiety"})

        assert response.status_code == 200
        data = response.json()
        assert data["scenarioId"] == "anxiety"
        assert data["currentStage"] == "context_gathering"
        assert data["sessionId"]

    @pytest.mark.asyncio
    async def test_create_without_body(self, app: FastAPI) -> None:
        async with client_for(app) as client:
            response = await client.post("/api/sessions/new")

        assert response.status_code == 200
        assert response.json()["scenarioId"] is None

    @pytest.mark.asyncio
    async def test_unknown_session(self, app: FastAPI) -> None:
        async with client_for(app) as client:
            response = await client.get("/api/sessions/missing")

        assert response.status_code == 404


class TestCatalogEndpoints:
    """Tests for the read-only catalogs."""

    @pytest.mark.asyncio
    async def test_scenarios(self, app: FastAPI) -> None:
        async with client_for(app) as client:
            response = await client.get("/api/scenarios")

        scenarios = response.json()
        assert scenarios[0]["id"] == "burnout"
        assert {"id", "name", "description", "keywords"} <= set(scenarios[0])

    @pytest.mark.asyncio
    async def test_stages(self, app: FastAPI) -> None:
        async with client_for(app) as client:
            response = await client.get("/api/stages")

        stages = response.json()
        assert len(stages) == 12
        assert list(stages)[0] == "context_gathering"
        assert list(stages)[-1] == "finish"


class TestOperationalEndpoints:
    """Tests for health and metrics."""

    @pytest.mark.asyncio
    async def test_health(self, app: FastAPI) -> None:
        async with client_for(app) as client:
            health = await client.get("/api/health")
            ready = await client.get("/api/health/ready")

        assert health.json()["status"] == "healthy"
        assert ready.json()["ready"] is True
        assert "X-Correlation-ID" in health.headers

    @pytest.mark.asyncio
    async def test_metrics(self, app: FastAPI) -> None:
        async with client_for(app) as client:
            await client.post("/api/chat", json={"message": "hello"})
            response = await client.get("/metrics")

        assert response.status_code == 200
        assert "mpt_chat_turns_total" in response.text
