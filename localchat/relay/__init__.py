"""Stream relay between the chat API and a local Ollama server.

Responsibilities:
    - Flattening the conversation into a plain-text prompt
    - Issuing the streaming /api/generate request with fixed sampling options
    - Translating newline-delimited JSON into SSE frames
    - Guaranteeing exactly one terminal frame per stream

Stateless per request. Maintains clean separation from the HTTP layer.
"""

from localchat.relay.config import RelayConfig, get_relay_config
from localchat.relay.ollama import OllamaRelay, UpstreamError, build_prompt, get_relay

__all__ = [
    "OllamaRelay",
    "RelayConfig",
    "UpstreamError",
    "build_prompt",
    "get_relay",
    "get_relay_config",
]
