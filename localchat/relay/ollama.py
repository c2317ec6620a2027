"""Ollama stream relay: newline-delimited JSON in, Server-Sent Events out.

Architecture Decisions:

1. **Plain-text prompt** - Ollama's /api/generate takes a single prompt string,
   so the conversation is flattened into "Human:" / "Assistant:" turns with a
   trailing "Assistant:" cue. Role metadata does not survive the trip.

2. **Generator per request** - The relay holds no state between requests. Each
   call opens its own httpx client, reads the upstream body line by line and
   yields ready-to-send SSE frames, so StreamingResponse can forward them as
   they arrive.

3. **Exactly one terminal frame** - Every stream ends with either a `done`
   frame or a single `error` frame. Upstream status errors, network failures
   and a body that ends without `done` all collapse into the error frame.

4. **Skip bad lines** - A malformed upstream line is logged and dropped; it
   never aborts the stream.
"""

import json
import logging
from collections.abc import AsyncGenerator, Sequence

import httpx

from localchat.models.schemas import (
    ChatMessage,
    DoneEvent,
    ErrorEvent,
    TokenEvent,
    format_sse,
)
from localchat.relay.config import RelayConfig, get_relay_config

logger = logging.getLogger(__name__)

ASSISTANT_CUE = "Assistant:"


class UpstreamError(Exception):
    """Raised when the inference server answers with a non-success status."""

    pass


def build_prompt(messages: Sequence[ChatMessage]) -> str:
    """Flatten a conversation into the plain-text prompt Ollama expects.

    Args:
        messages: Conversation context, oldest first.

    Returns:
        Turns joined by blank lines, ending with the assistant cue.
    """
    turns = [
        f"{'Human' if message.role == 'user' else 'Assistant'}: {message.content}"
        for message in messages
    ]
    return "\n\n".join(turns) + f"\n\n{ASSISTANT_CUE}"


class OllamaRelay:
    """Relays a chat request to Ollama and re-encodes the stream as SSE.

    Wraps the upstream call with:
    - Fixed sampling options from RelayConfig
    - Line-by-line decoding of the upstream body
    - A single terminal frame on every exit path
    """

    def __init__(
        self,
        config: RelayConfig | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the relay.

        Args:
            config: Optional relay configuration.
                    Loads from environment if not provided.
            transport: Optional httpx transport, used to stub the upstream.
        """
        self._config = config or get_relay_config()
        self._transport = transport

    def build_payload(self, messages: Sequence[ChatMessage]) -> dict:
        """Build the /api/generate request body."""
        return {
            "model": self._config.model_name,
            "prompt": build_prompt(messages),
            "stream": True,
            "options": {
                "temperature": self._config.temperature,
                "top_p": self._config.top_p,
                "max_tokens": self._config.max_tokens,
            },
        }

    async def stream_events(
        self,
        messages: Sequence[ChatMessage],
    ) -> AsyncGenerator[str]:
        """Stream SSE frames for a conversation.

        Args:
            messages: Conversation context, oldest first.

        Yields:
            `data: {...}\\n\\n` frames: zero or more tokens followed by
            exactly one `done` or `error` frame.
        """
        payload = self.build_payload(messages)
        accumulated: list[str] = []
        frames = 0

        try:
            async with (
                httpx.AsyncClient(
                    timeout=self._config.timeout,
                    transport=self._transport,
                ) as client,
                client.stream("POST", self._config.upstream_url, json=payload) as response,
            ):
                if not response.is_success:
                    body = (await response.aread()).decode("utf-8", errors="replace")
                    raise UpstreamError(f"Ollama error: {response.status_code} - {body}")

                async for line in response.aiter_lines():
                    if not line.strip():
                        continue
                    frame = _parse_line(line)
                    if frame is None:
                        continue
                    frames += 1

                    fragment = frame.get("response")
                    if isinstance(fragment, str) and fragment:
                        accumulated.append(fragment)
                        yield format_sse(TokenEvent(token=fragment))

                    if frame.get("done"):
                        full_response = "".join(accumulated)
                        logger.info(
                            f"Relay finished: {frames} upstream frames, "
                            f"{len(full_response)} characters"
                        )
                        yield format_sse(DoneEvent(full_response=full_response))
                        return

            raise UpstreamError("Ollama stream ended before completion")

        except Exception as e:
            logger.error(f"Streaming error: {e}")
            yield format_sse(ErrorEvent(error=str(e) or type(e).__name__))


def _parse_line(line: str) -> dict | None:
    """Decode one upstream line, returning None for malformed input."""
    try:
        frame = json.loads(line)
    except json.JSONDecodeError as e:
        logger.warning(f"Skipping malformed upstream line: {e}")
        return None
    if not isinstance(frame, dict):
        logger.warning(f"Skipping non-object upstream line: {line[:80]!r}")
        return None
    return frame


# Module-level singleton instance
_relay: OllamaRelay | None = None


def get_relay() -> OllamaRelay:
    """Get or create the global relay.

    Returns:
        The OllamaRelay instance.
    """
    global _relay
    if _relay is None:
        _relay = OllamaRelay()
    return _relay
