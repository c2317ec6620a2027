"""Chat client configuration with environment variable loading."""

import os

from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator

from localchat.chat.storage import DEFAULT_STORAGE_KEY

load_dotenv()


class ClientConfig(BaseModel):
    """Configuration for the chat session's connection to the relay.

    Attributes:
        api_base_url: Base URL of the server exposing POST /api/chat.
        storage_key: Key the conversation collection is stored under.
        timeout: Seconds to wait on the relay (None waits forever).
    """

    api_base_url: str = Field(
        default_factory=lambda: os.getenv("API_BASE_URL", "http://localhost:8000"),
        validate_default=True,
        description="Base URL of the chat API",
    )
    storage_key: str = Field(
        default_factory=lambda: os.getenv("CHAT_STORAGE_KEY", DEFAULT_STORAGE_KEY),
        validate_default=True,
        min_length=1,
        description="Storage key for the conversation collection",
    )
    timeout: float | None = Field(
        default_factory=lambda: float(os.environ["CHAT_TIMEOUT"])
        if os.getenv("CHAT_TIMEOUT")
        else None,
        validate_default=True,
        gt=0,
        description="Relay timeout in seconds (unset = no timeout)",
    )

    @field_validator("api_base_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        """Normalize the base URL so paths can be appended."""
        return v.strip().rstrip("/")


def get_client_config() -> ClientConfig:
    """Create client configuration from environment."""
    return ClientConfig()
