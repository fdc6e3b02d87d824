"""Pytest fixtures and shared test configuration.

Provides reusable fixtures for unit and integration tests.

Fixtures:
    - service_app: In-process FastAPI fake of the prediction service
    - api_client: PredictionServiceClient routed to the fake service
    - mock_client: Factory for clients backed by an httpx.MockTransport handler

The fake service returns canned, deterministic responses and records every
request it receives in ``app.state.calls``.
"""

from collections.abc import AsyncGenerator, AsyncIterator, Callable
from typing import Any

import httpx
import pytest
from fastapi import FastAPI, HTTPException
from fastapi.responses import StreamingResponse
from httpx import ASGITransport

from src.client.api_client import PredictionServiceClient
from src.config import ClientConfig
from src.models.schemas import (
    ChatRequest,
    EmailSummaryRequest,
    PredictionRequest,
    RecommendationRequest,
)

TEST_BASE_URL = "http://test"

SAMPLES: dict[str, dict[str, Any]] = {
    "weather": {
        "Temperature_C": 31.5,
        "Humidity_Percent": 78.0,
        "Rainfall_mm": 12.4,
        "Wind_Speed_mps": 6.2,
        "Weather_Condition": "Rainy",
    },
    "equipment": {
        "Machine_Type": "Open",
        "Engine_Temperature_C": 96.0,
        "Fuel_Level_Percent": 40.0,
        "Maintenance_Status": "Poor",
        "Working_Hours": 1200.0,
    },
}

PROBABILITIES = {"Clear": 0.15, "Rainy": 0.7, "Storm": 0.15}
CHAT_CHUNKS = ["The haul road ", "is passable ", "with caution."]


def create_fake_service() -> FastAPI:
    """Build a fake prediction service with canned responses."""
    app = FastAPI(title="Fake Prediction Service")
    app.state.calls = []

    def record(path: str, body: Any = None) -> None:
        app.state.calls.append((path, body))

    # Registered before /test/{model_name} so "all" is not taken as a model
    @app.get("/test/all")
    async def test_all() -> dict[str, Any]:
        record("/test/all")
        return {name: {"status": "ok"} for name in SAMPLES}

    @app.get("/test/{model_name}")
    async def test_model(model_name: str) -> dict[str, Any]:
        record(f"/test/{model_name}")
        if model_name not in SAMPLES:
            raise HTTPException(status_code=404, detail=f"Unknown model: {model_name}")
        return SAMPLES[model_name]

    @app.post("/predict")
    async def predict(request: PredictionRequest) -> dict[str, Any]:
        record("/predict", request.model_dump())
        return {
            "timestamp": "2026-10-18T08:30:00",
            "model": request.model_name,
            "prediction": "Rainy",
            "probabilities": PROBABILITIES,
            "inputs_used": request.inputs,
        }

    @app.post("/recommendation")
    async def recommendation(request: RecommendationRequest) -> dict[str, Any]:
        record("/recommendation", request.model_dump())
        top = request.sorted_labels[0] if request.sorted_labels else "unknown"
        return {
            "primary": [
                {
                    "action": f"Prepare for {top} conditions",
                    "justification": f"{top} is the most likely outcome",
                    "expected_impact": "Fewer weather stoppages",
                }
            ],
            "alternative": [
                {
                    "action": "Reschedule blasting",
                    "justification": "Reduce exposure",
                    "expected_impact": "Lower risk",
                }
            ],
            "mitigation": [],
        }

    @app.post("/email-summary")
    async def email_summary(request: EmailSummaryRequest) -> dict[str, str]:
        record("/email-summary", request.model_dump())
        record_model = request.recommendation_record.get("model", "unknown")
        return {
            "subject": f"{record_model} prediction summary",
            "body": f"Predicted {request.recommendation_record.get('prediction')}.",
        }

    @app.post("/chat")
    async def chat(request: ChatRequest) -> StreamingResponse:
        record("/chat", request.model_dump())

        async def reply() -> AsyncIterator[str]:
            for chunk in CHAT_CHUNKS:
                yield chunk

        return StreamingResponse(reply(), media_type="text/plain; charset=utf-8")

    return app


@pytest.fixture
def client_config() -> ClientConfig:
    """Client configuration pointing at the in-process test host."""
    return ClientConfig(base_url=TEST_BASE_URL, timeout=5.0, stream_timeout=5.0)


@pytest.fixture
def service_app() -> FastAPI:
    """Create a fresh fake prediction service for each test."""
    return create_fake_service()


@pytest.fixture
async def api_client(
    service_app: FastAPI, client_config: ClientConfig
) -> AsyncGenerator[PredictionServiceClient]:
    """Create a client talking to the fake service over ASGI.

    Yields:
        PredictionServiceClient bound to the fake service.
    """
    transport = ASGITransport(app=service_app)
    async with PredictionServiceClient(config=client_config, transport=transport) as client:
        yield client


@pytest.fixture
def mock_client(
    client_config: ClientConfig,
) -> Callable[[Callable[[httpx.Request], httpx.Response]], PredictionServiceClient]:
    """Return a factory that builds clients around an httpx mock handler."""

    def factory(handler: Callable[[httpx.Request], httpx.Response]) -> PredictionServiceClient:
        return PredictionServiceClient(
            config=client_config, transport=httpx.MockTransport(handler)
        )

    return factory
