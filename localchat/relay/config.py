"""Relay configuration with environment variable loading.

Pydantic-based configuration for the Ollama stream relay.
Points at any Ollama-compatible /api/generate endpoint.
"""

import os

from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator

# Load environment variables from .env file
load_dotenv()


def _timeout_from_env(name: str) -> float | None:
    value = os.getenv(name, "").strip()
    return float(value) if value else None


class RelayConfig(BaseModel):
    """Configuration for the Ollama stream relay.

    Attributes:
        upstream_url: Full URL of the inference server's generate endpoint.
        model_name: Model identifier sent with every request.
        temperature: Sampling temperature (0.0 = deterministic, 2.0 = creative).
        top_p: Nucleus-sampling threshold.
        max_tokens: Maximum tokens in generated response.
        timeout: Seconds to wait on the upstream (None waits forever).
    """

    upstream_url: str = Field(
        default_factory=lambda: os.getenv("OLLAMA_URL", "http://localhost:11434/api/generate"),
        validate_default=True,
        description="Ollama generate endpoint",
    )
    model_name: str = Field(
        default_factory=lambda: os.getenv("OLLAMA_MODEL", "llama3.1:8b"),
        validate_default=True,
        description="Model to use",
    )
    temperature: float = Field(
        default=0.7,
        ge=0.0,
        le=2.0,
        description="Sampling temperature for response generation",
    )
    top_p: float = Field(
        default=0.9,
        ge=0.0,
        le=1.0,
        description="Nucleus-sampling threshold",
    )
    max_tokens: int = Field(
        default=2000,
        ge=1,
        le=128000,
        description="Maximum tokens in generated response",
    )
    timeout: float | None = Field(
        default_factory=lambda: _timeout_from_env("RELAY_TIMEOUT"),
        validate_default=True,
        gt=0,
        description="Upstream timeout in seconds (unset = no timeout)",
    )

    @field_validator("upstream_url")
    @classmethod
    def validate_upstream_url(cls, v: str) -> str:
        """Validate that the upstream URL is an http(s) URL."""
        v = v.strip()
        if not v.startswith(("http://", "https://")):
            raise ValueError("OLLAMA_URL must start with http:// or https://")
        return v

    @field_validator("model_name")
    @classmethod
    def validate_model_name(cls, v: str) -> str:
        """Validate that a model identifier is provided."""
        if not v or not v.strip():
            raise ValueError("Model required. Set OLLAMA_MODEL in .env")
        return v.strip()


def get_relay_config() -> RelayConfig:
    """Create relay configuration from environment.

    Returns:
        Configured RelayConfig instance.

    Raises:
        ValueError: If the upstream URL or model is invalid.
    """
    return RelayConfig()
