"""Async HTTP client for the prediction service.

Wraps every call the dashboard makes: test data, prediction, recommendation,
email summary, the self-test sweep and chat. Chat replies arrive as a plain
text body that is decoded and handed to the caller chunk by chunk.

All failures (non-success status, transport errors, malformed bodies) are
raised as ``ApiClientError``. There is no retry or reconnection.
"""

import asyncio
import logging
from collections.abc import AsyncIterator, Awaitable, Callable
from typing import Any

import httpx
from pydantic import ValidationError

from src.client.cancellation import CancellationToken
from src.config import ClientConfig, get_client_config
from src.models.schemas import (
    ChatRequest,
    EmailSummary,
    EmailSummaryRequest,
    PredictionRequest,
    PredictionResult,
    Recommendation,
    RecommendationRequest,
)

logger = logging.getLogger(__name__)


class ApiClientError(Exception):
    """Raised when a call to the prediction service fails."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


# Returned by _until_cancelled when the token fires first
_CANCELLED = object()


async def _until_cancelled(awaitable: Awaitable[Any], cancel: CancellationToken | None) -> Any:
    """Await ``awaitable`` unless ``cancel`` fires first.

    When the token wins, the pending operation is cancelled and
    ``_CANCELLED`` is returned.
    """
    if cancel is None:
        return await awaitable

    task = asyncio.ensure_future(awaitable)
    waiter = asyncio.ensure_future(cancel.wait())
    done, _ = await asyncio.wait({task, waiter}, return_when=asyncio.FIRST_COMPLETED)

    if task in done:
        waiter.cancel()
        return task.result()

    task.cancel()
    await asyncio.gather(task, return_exceptions=True)
    return _CANCELLED


async def _next_chunk(
    chunks: AsyncIterator[str],
    cancel: CancellationToken | None,
) -> str | None:
    """Read the next decoded chunk, or None when the stream ends or is cancelled."""
    if cancel is not None and cancel.cancelled:
        return None
    chunk = await _until_cancelled(anext(chunks, None), cancel)
    return None if chunk is _CANCELLED else chunk


class PredictionServiceClient:
    """Client for the prediction service REST and streaming endpoints."""

    def __init__(
        self,
        config: ClientConfig | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            config: Optional client configuration.
                    Loads from environment if not provided.
            transport: Optional httpx transport, used by tests to route
                       requests to an in-process app or mock handler.
        """
        self._config = config or get_client_config()
        self._client = httpx.AsyncClient(
            base_url=self._config.base_url,
            timeout=self._config.timeout,
            headers={"Content-Type": "application/json"},
            transport=transport,
        )

    async def __aenter__(self) -> "PredictionServiceClient":
        return self

    async def __aexit__(self, *_: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _request(self, method: str, path: str, payload: dict | None = None) -> Any:
        """Send a request and return the decoded JSON body.

        Raises:
            ApiClientError: On transport errors, non-success status or a
                body that is not JSON.
        """
        try:
            response = await self._client.request(method, path, json=payload)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            status_code = e.response.status_code
            logger.error(f"{method} {path} failed with HTTP {status_code}")
            raise ApiClientError(f"HTTP error! status: {status_code}", status_code) from e
        except httpx.RequestError as e:
            logger.error(f"{method} {path} failed: {e}")
            raise ApiClientError(f"Connection failed: {e}") from e

        try:
            return response.json()
        except ValueError as e:
            logger.error(f"{method} {path} returned a non-JSON body")
            raise ApiClientError(f"Invalid JSON in response from {path}") from e

    @staticmethod
    def _parse(schema: type, data: Any, path: str) -> Any:
        try:
            return schema.model_validate(data)
        except ValidationError as e:
            logger.error(f"Unexpected response shape from {path}: {e}")
            raise ApiClientError(f"Unexpected response from {path}") from e

    # ========== Test data ==========

    async def test_model(self, model_name: str) -> dict[str, Any]:
        """GET /test/{model_name} - sample feature values for a model."""
        data = await self._request("GET", f"/test/{model_name}")
        if not isinstance(data, dict):
            raise ApiClientError(f"Unexpected test data for {model_name}")
        return data

    async def test_all_models(self) -> Any:
        """GET /test/all - backend self-test sweep, diagnostic only."""
        return await self._request("GET", "/test/all")

    # ========== Prediction pipeline ==========

    async def predict(self, model_name: str, inputs: dict[str, Any]) -> PredictionResult:
        """POST /predict - run a model on the given inputs."""
        request = PredictionRequest(model_name=model_name, inputs=inputs)
        data = await self._request("POST", "/predict", request.model_dump())
        return self._parse(PredictionResult, data, "/predict")

    async def get_recommendation(
        self,
        model_name: str,
        prediction: Any,
        probabilities: dict[str, float],
        sorted_labels: list[str],
        inputs: dict[str, Any],
    ) -> Recommendation:
        """POST /recommendation - actions for a prediction."""
        request = RecommendationRequest(
            model_name=model_name,
            prediction=prediction,
            probabilities=probabilities,
            sorted_labels=sorted_labels,
            inputs=inputs,
        )
        data = await self._request("POST", "/recommendation", request.model_dump())
        return self._parse(Recommendation, data, "/recommendation")

    async def get_email_summary(self, recommendation_record: dict[str, Any]) -> EmailSummary:
        """POST /email-summary - draft an email for a recommendation record."""
        request = EmailSummaryRequest(recommendation_record=recommendation_record)
        data = await self._request("POST", "/email-summary", request.model_dump(mode="json"))
        return self._parse(EmailSummary, data, "/email-summary")

    # ========== Chat ==========

    async def chat(self, message: str) -> Any:
        """POST /chat - full reply in one response."""
        return await self._request("POST", "/chat", ChatRequest(message=message).model_dump())

    async def stream_chat(
        self,
        message: str,
        on_chunk: Callable[[str], None],
        cancel: CancellationToken | None = None,
    ) -> str:
        """Stream the reply to a chat message.

        Bytes are decoded incrementally, so a multi-byte character split
        across network reads is delivered whole. ``on_chunk`` is called once
        per decoded chunk in arrival order.

        Args:
            message: The user's message.
            on_chunk: Called with each piece of reply text.
            cancel: Optional token; when cancelled the pending request or
                    read is aborted and the partial reply is returned.

        Returns:
            The reply text received, complete unless cancelled.

        Raises:
            ApiClientError: If the response status is not successful or the
                transport fails mid-stream. No chunks follow the error.
        """
        received: list[str] = []
        request = self._client.build_request(
            "POST",
            "/chat",
            json=ChatRequest(message=message).model_dump(),
            timeout=self._config.stream_timeout,
        )
        try:
            if cancel is not None and cancel.cancelled:
                response = _CANCELLED
            else:
                # Waiting for headers is abortable too, not just the body reads
                response = await _until_cancelled(
                    self._client.send(request, stream=True), cancel
                )
            if response is _CANCELLED:
                logger.info("Stream chat cancelled before the response arrived")
                return ""

            try:
                response.raise_for_status()
                chunks = response.aiter_text()
                try:
                    while (chunk := await _next_chunk(chunks, cancel)) is not None:
                        received.append(chunk)
                        on_chunk(chunk)
                finally:
                    await chunks.aclose()
            finally:
                await response.aclose()
        except httpx.HTTPStatusError as e:
            status_code = e.response.status_code
            logger.error(f"Stream chat failed with HTTP {status_code}")
            raise ApiClientError(f"HTTP error! status: {status_code}", status_code) from e
        except httpx.RequestError as e:
            logger.error(f"Stream chat error: {e}")
            raise ApiClientError(f"Connection failed: {e}") from e

        if cancel is not None and cancel.cancelled:
            logger.info(f"Stream chat cancelled after {len(received)} chunks")
        return "".join(received)


# Module-level singleton instance
_api_client: PredictionServiceClient | None = None


def get_api_client() -> PredictionServiceClient:
    """Get or create the shared prediction service client.

    Returns:
        The PredictionServiceClient instance.
    """
    global _api_client
    if _api_client is None:
        _api_client = PredictionServiceClient()
    return _api_client


async def close_api_client() -> None:
    """Close the shared client, if one was created."""
    global _api_client
    if _api_client is not None:
        await _api_client.aclose()
        _api_client = None
