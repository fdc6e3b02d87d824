"""Dashboard state coordination.

Holds everything the dashboard page renders (selected model, input values,
latest results, chat transcript) and sequences the multi-step calls to the
prediction service. Contains no NiceGUI code, so it can be driven directly
from tests.

Each async operation is tagged with a request id per slot. A result is only
applied while its id is still the latest for that slot, so a late prediction
for a model the user already switched away from is dropped.
"""

import logging
from collections.abc import Callable
from enum import Enum
from typing import Any

from src.client.api_client import ApiClientError, PredictionServiceClient
from src.client.cancellation import CancellationToken
from src.models.catalog import (
    DEFAULT_MODEL,
    blank_inputs,
    build_input_values,
    get_model,
    rank_labels,
)
from src.models.schemas import (
    ChatMessage,
    EmailSummary,
    ModelDescriptor,
    PredictionResult,
    Recommendation,
    Role,
)

logger = logging.getLogger(__name__)

CHAT_ERROR_MESSAGE = "Error: Failed to get response from AI."
CHAT_CANCELLED_MESSAGE = "(cancelled)"
PREDICTION_FAILED_MESSAGE = "Prediction failed. Please check your inputs."
TEST_ALL_OK_MESSAGE = "All models tested successfully! Check the log for details."
TEST_ALL_FAILED_MESSAGE = "Failed to test all models."

# Sections passed to the change listener
SECTION_INPUTS = "inputs"
SECTION_RESULTS = "results"
SECTION_CHAT = "chat"
SECTION_STATUS = "status"

Notifier = Callable[[str, str], None]
ChangeListener = Callable[[str], None]


class PredictPhase(str, Enum):
    """Phases of the predict action."""

    IDLE = "idle"
    PREDICTING = "predicting"
    HAS_RESULT = "has_result"
    FAILED = "failed"


class RequestTracker:
    """Issues monotonically increasing request ids per logical slot."""

    def __init__(self) -> None:
        self._latest: dict[str, int] = {}

    def issue(self, slot: str) -> int:
        request_id = self._latest.get(slot, 0) + 1
        self._latest[slot] = request_id
        return request_id

    def invalidate(self, slot: str) -> None:
        """Make every request issued so far for ``slot`` stale."""
        self.issue(slot)

    def is_current(self, slot: str, request_id: int) -> bool:
        return self._latest.get(slot) == request_id


class ChatSession:
    """Manages the chat transcript for a dashboard session."""

    def __init__(self) -> None:
        self.messages: list[ChatMessage] = []
        self.is_streaming: bool = False
        self.last_response: str = ""

    def add_message(self, role: Role, content: str) -> int:
        """Append an entry and return its index."""
        self.messages.append(ChatMessage(role=role, content=content))
        return len(self.messages) - 1

    def replace_content(self, index: int, content: str) -> None:
        self.messages[index].content = content

    def clear(self) -> None:
        self.messages.clear()
        self.last_response = ""


def _log_notice(message: str, kind: str) -> None:
    logger.info(f"[{kind}] {message}")


def build_recommendation_record(
    model_name: str,
    prediction: PredictionResult,
    recommendation: Recommendation,
) -> dict[str, Any]:
    """Aggregate a prediction and its recommendation for email drafting."""
    return {
        "model": model_name,
        "prediction": prediction.prediction,
        "probabilities": prediction.probabilities,
        "recommendations": recommendation.model_dump(exclude_none=True),
        "timestamp": prediction.timestamp,
    }


class DashboardState:
    """State and actions behind the AI dashboard page."""

    def __init__(
        self,
        api: PredictionServiceClient,
        notify: Notifier | None = None,
        on_change: ChangeListener | None = None,
    ) -> None:
        """Initialize dashboard state.

        Args:
            api: Client for the prediction service.
            notify: Shows a user-visible notice, called as
                    ``notify(message, kind)`` with kind "positive" or "negative".
            on_change: Called with a section name after that section's state
                       changes, so the page can re-render it.
        """
        self._api = api
        self._notify = notify or _log_notice
        self._on_change = on_change or (lambda section: None)
        self._requests = RequestTracker()
        self._chat_cancel: CancellationToken | None = None

        self.selected_model: str = DEFAULT_MODEL
        self.input_values: dict[str, Any] = blank_inputs(self.current_model)
        self.test_data: dict[str, Any] = {}

        self.phase = PredictPhase.IDLE
        self.is_testing_all = False
        self.last_error: str | None = None
        self.prediction_result: PredictionResult | None = None
        self.recommendation: Recommendation | None = None
        self.email_summary: EmailSummary | None = None

        self.chat = ChatSession()

    @property
    def current_model(self) -> ModelDescriptor:
        return get_model(self.selected_model)

    @property
    def is_busy(self) -> bool:
        """Whether the predict and test-all controls are disabled."""
        return self.phase is PredictPhase.PREDICTING or self.is_testing_all

    def _set_phase(self, phase: PredictPhase) -> None:
        self.phase = phase
        self._on_change(SECTION_STATUS)

    # ========== Model selection and inputs ==========

    async def select_model(self, name: str) -> None:
        """Switch models and prefill inputs with the new model's test data.

        Any in-flight prediction for the previous model becomes stale.

        Raises:
            UnknownModelError: If ``name`` is not in the catalog.
        """
        model = get_model(name)
        self.selected_model = model.name
        self._requests.invalidate("prediction")
        if self.phase is PredictPhase.PREDICTING:
            self._set_phase(PredictPhase.IDLE)

        self.test_data = {}
        self.input_values = blank_inputs(model)
        self._on_change(SECTION_INPUTS)
        await self.load_test_data()

    async def load_test_data(self) -> None:
        """Fetch sample values for the selected model and apply them as inputs."""
        request_id = self._requests.issue("test_data")
        model = self.current_model
        try:
            data = await self._api.test_model(model.name)
        except ApiClientError as e:
            logger.error(f"Failed to load test data for {model.name}: {e}")
            return

        if not self._requests.is_current("test_data", request_id):
            logger.debug(f"Discarding stale test data for {model.name}")
            return
        self.test_data = data
        self.input_values = build_input_values(model, data)
        self._on_change(SECTION_INPUTS)

    def set_input(self, feature: str, value: Any) -> None:
        if feature not in self.input_values:
            raise KeyError(f"{feature} is not an input of {self.selected_model}")
        self.input_values[feature] = value

    def use_test_data(self) -> None:
        """Replace the inputs with the last fetched sample."""
        if self.test_data:
            self.input_values = build_input_values(self.current_model, self.test_data)
            self._on_change(SECTION_INPUTS)

    # ========== Prediction pipeline ==========

    async def predict(self) -> bool:
        """Run predict, then recommendation, then email summary.

        Each step uses exactly what the previous step returned. Results are
        committed together once all three succeed; a failure anywhere keeps
        the previous results and moves to the failed phase.

        Returns:
            True if new results were applied.
        """
        if self.is_busy:
            return False

        request_id = self._requests.issue("prediction")
        model_name = self.selected_model
        inputs = dict(self.input_values)
        self.last_error = None
        self._set_phase(PredictPhase.PREDICTING)

        try:
            prediction = await self._api.predict(model_name, inputs)
            if not self._requests.is_current("prediction", request_id):
                return False

            probabilities = prediction.probabilities
            recommendation = await self._api.get_recommendation(
                model_name,
                prediction.prediction,
                probabilities,
                rank_labels(probabilities),
                inputs,
            )
            if not self._requests.is_current("prediction", request_id):
                return False

            record = build_recommendation_record(model_name, prediction, recommendation)
            email = await self._api.get_email_summary(record)
        except ApiClientError as e:
            if not self._requests.is_current("prediction", request_id):
                return False
            logger.error(f"Prediction failed for {model_name}: {e}")
            self.last_error = str(e)
            self._set_phase(PredictPhase.FAILED)
            self._notify(PREDICTION_FAILED_MESSAGE, "negative")
            return False

        if not self._requests.is_current("prediction", request_id):
            logger.debug(f"Discarding stale prediction for {model_name}")
            return False

        self.prediction_result = prediction
        self.recommendation = recommendation
        self.email_summary = email
        self._on_change(SECTION_RESULTS)
        self._set_phase(PredictPhase.HAS_RESULT)
        return True

    async def test_all_models(self) -> Any:
        """Run the service self-test sweep and log its result."""
        if self.is_busy:
            return None

        self.is_testing_all = True
        self._on_change(SECTION_STATUS)
        try:
            results = await self._api.test_all_models()
        except ApiClientError as e:
            logger.error(f"Test all failed: {e}")
            self._notify(TEST_ALL_FAILED_MESSAGE, "negative")
            return None
        finally:
            self.is_testing_all = False
            self._on_change(SECTION_STATUS)

        logger.info(f"Test all results: {results}")
        self._notify(TEST_ALL_OK_MESSAGE, "positive")
        return results

    # ========== Chat ==========

    async def send_chat(self, message: str) -> None:
        """Send a chat message and grow the assistant reply as it streams.

        Ignored while another reply is streaming. The reply is written into a
        single placeholder entry; on failure the placeholder shows a fixed
        error message.
        """
        if not message.strip() or self.chat.is_streaming:
            return

        request_id = self._requests.issue("chat")
        cancel = CancellationToken()
        self._chat_cancel = cancel
        self.chat.is_streaming = True
        self.chat.add_message(Role.USER, message)
        index = self.chat.add_message(Role.ASSISTANT, "")
        self._on_change(SECTION_CHAT)

        buffer = ""

        def on_chunk(chunk: str) -> None:
            nonlocal buffer
            if not self._requests.is_current("chat", request_id):
                return
            buffer += chunk
            self.chat.replace_content(index, buffer)
            self._on_change(SECTION_CHAT)

        try:
            await self._api.stream_chat(message, on_chunk, cancel=cancel)
        except ApiClientError as e:
            logger.error(f"Chat failed: {e}")
            if self._requests.is_current("chat", request_id):
                self.chat.replace_content(index, CHAT_ERROR_MESSAGE)
                self.chat.last_response = CHAT_ERROR_MESSAGE
        else:
            if self._requests.is_current("chat", request_id):
                if cancel.cancelled and not buffer:
                    self.chat.replace_content(index, CHAT_CANCELLED_MESSAGE)
                self.chat.last_response = buffer
        finally:
            if self._requests.is_current("chat", request_id):
                self.chat.is_streaming = False
                self._chat_cancel = None
                self._on_change(SECTION_CHAT)

    def cancel_chat(self) -> None:
        """Stop the streaming reply, keeping the text received so far."""
        if self._chat_cancel is not None:
            self._chat_cancel.cancel()

    def clear_chat(self) -> None:
        """Start a new conversation, abandoning any streaming reply."""
        self.cancel_chat()
        self._requests.invalidate("chat")
        self._chat_cancel = None
        self.chat.is_streaming = False
        self.chat.clear()
        self._on_change(SECTION_CHAT)
