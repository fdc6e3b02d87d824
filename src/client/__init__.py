"""HTTP client for the remote prediction service.

Translates dashboard requests into network calls and normalizes responses.

Responsibilities:
    - Request/response calls for test data, predictions, recommendations
      and email summaries
    - Streaming chat with incremental text decoding
    - Cancellation of in-flight chat streams
    - Mapping every network failure to ApiClientError

Holds no dashboard state. All model computation happens in the service.
"""

from src.client.api_client import (
    ApiClientError,
    PredictionServiceClient,
    close_api_client,
    get_api_client,
)
from src.client.cancellation import CancellationToken

__all__ = [
    "ApiClientError",
    "CancellationToken",
    "PredictionServiceClient",
    "close_api_client",
    "get_api_client",
]
