"""Client configuration with environment variable loading.

Pydantic-based configuration for the prediction service client.
The base URL points at the remote FastAPI service; it defaults to a local
loopback address for development.
"""

import os

from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator

# Load environment variables from .env file
load_dotenv()

DEFAULT_BASE_URL = "http://localhost:8000"


class ClientConfig(BaseModel):
    """Configuration for the prediction service client.

    Attributes:
        base_url: Root URL of the prediction service.
        timeout: Seconds allowed for request/response calls.
        stream_timeout: Seconds allowed between reads of the chat stream.
    """

    base_url: str = Field(
        default_factory=lambda: os.getenv("FASTAPI_URL") or DEFAULT_BASE_URL,
        description="Prediction service base URL",
    )
    # Environment strings are coerced and range-checked by pydantic
    timeout: float = Field(
        default_factory=lambda: os.getenv("API_TIMEOUT", "30"),
        gt=0,
        validate_default=True,
        description="Timeout for request/response calls in seconds",
    )
    stream_timeout: float = Field(
        default_factory=lambda: os.getenv("STREAM_TIMEOUT", "120"),
        gt=0,
        validate_default=True,
        description="Timeout for the streaming chat call in seconds",
    )

    @field_validator("base_url")
    @classmethod
    def validate_base_url(cls, v: str) -> str:
        """Validate the URL scheme and drop trailing slashes."""
        v = v.strip().rstrip("/")
        if not v.startswith(("http://", "https://")):
            raise ValueError(
                "Base URL must start with http:// or https://. Check FASTAPI_URL in .env"
            )
        return v


def get_client_config() -> ClientConfig:
    """Create client configuration from environment.

    Returns:
        Configured ClientConfig instance.

    Raises:
        ValidationError: If FASTAPI_URL is not an http(s) URL or a timeout
            is not a positive number.
    """
    return ClientConfig()
