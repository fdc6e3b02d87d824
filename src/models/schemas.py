from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Role(str, Enum):
    """Speaker of a chat transcript entry."""

    USER = "user"
    ASSISTANT = "assistant"


class ModelDescriptor(BaseModel):
    """A predictive model offered by the service.

    Attributes:
        name: Identifier used in API paths and payloads.
        display_name: Human readable title.
        description: One line summary shown on the model card.
        features: Ordered input feature names.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    display_name: str
    description: str
    features: tuple[str, ...]


class PredictionRequest(BaseModel):
    """Request payload for the prediction endpoint."""

    model_config = ConfigDict(protected_namespaces=())

    model_name: str = Field(..., min_length=1)
    inputs: dict[str, Any]


class PredictionResult(BaseModel):
    """Prediction returned by the service.

    Attributes:
        timestamp: When the service produced the prediction.
        model: Identifier of the model that ran.
        prediction: Predicted label or value.
        probabilities: Confidence score per label, in service order.
        inputs_used: Echo of the inputs the model consumed.
    """

    model_config = ConfigDict(frozen=True)

    timestamp: str
    model: str
    prediction: Any
    probabilities: dict[str, float] = Field(default_factory=dict)
    inputs_used: dict[str, Any] = Field(default_factory=dict)

    @field_validator("probabilities", "inputs_used", mode="before")
    @classmethod
    def none_to_empty(cls, v: Any) -> Any:
        """Treat a null mapping from the service as empty."""
        return {} if v is None else v


class RecommendationItem(BaseModel):
    """A single recommended action."""

    action: str
    justification: str = ""
    expected_impact: str = ""


class Recommendation(BaseModel):
    """Recommended actions grouped by kind.

    The service reports generation problems through ``error`` instead of
    failing the request; the lists are empty in that case.
    """

    model_config = ConfigDict(frozen=True)

    primary: list[RecommendationItem] = Field(default_factory=list)
    alternative: list[RecommendationItem] = Field(default_factory=list)
    mitigation: list[RecommendationItem] = Field(default_factory=list)
    error: str | None = None


class RecommendationRequest(BaseModel):
    """Request payload for the recommendation endpoint."""

    model_config = ConfigDict(protected_namespaces=())

    model_name: str = Field(..., min_length=1)
    prediction: Any
    probabilities: dict[str, float]
    sorted_labels: list[str]
    inputs: dict[str, Any]


class EmailSummary(BaseModel):
    """Drafted email for a recommendation record."""

    model_config = ConfigDict(frozen=True)

    subject: str = ""
    body: str = ""
    error: str | None = None


class EmailSummaryRequest(BaseModel):
    """Request payload for the email summary endpoint."""

    recommendation_record: dict[str, Any]


class ChatRequest(BaseModel):
    """Request payload for the chat endpoints.

    Attributes:
        message: User's question or prompt.
    """

    message: str = Field(..., min_length=1)


class ChatMessage(BaseModel):
    """A single entry in the chat transcript.

    Attributes:
        role: The speaker (user or assistant).
        content: The message text. Rewritten in place while a reply streams.
    """

    role: Role
    content: str = ""
