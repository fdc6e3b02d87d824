"""Pydantic models and the static model catalog.

Provides type safety and validation for everything exchanged with the
prediction service.

Models:
    - ModelDescriptor: A predictive model and its input features
    - PredictionResult: Prediction, confidence scores and echoed inputs
    - Recommendation: Primary, alternative and mitigation actions
    - EmailSummary: Drafted email for a recommendation record
    - ChatMessage: Individual entry in the chat transcript
"""

from src.models.catalog import (
    DEFAULT_MODEL,
    MODELS,
    UnknownModelError,
    get_model,
    rank_labels,
)
from src.models.schemas import (
    ChatMessage,
    ChatRequest,
    EmailSummary,
    EmailSummaryRequest,
    ModelDescriptor,
    PredictionRequest,
    PredictionResult,
    Recommendation,
    RecommendationItem,
    RecommendationRequest,
    Role,
)

__all__ = [
    "DEFAULT_MODEL",
    "MODELS",
    "ChatMessage",
    "ChatRequest",
    "EmailSummary",
    "EmailSummaryRequest",
    "ModelDescriptor",
    "PredictionRequest",
    "PredictionResult",
    "Recommendation",
    "RecommendationItem",
    "RecommendationRequest",
    "Role",
    "UnknownModelError",
    "get_model",
    "rank_labels",
]
