"""Chat session: submits user input and streams the reply into the store.

One submit drives one assistant placeholder through the store's lifecycle.
Tokens are appended in place as SSE frames arrive; a `done` frame finalizes
the message, and any failure replaces its content with a fixed error text.
"""

import logging
from collections.abc import Callable
from typing import Any

import httpx

from localchat.chat.config import ClientConfig, get_client_config
from localchat.chat.models import Message
from localchat.chat.sse import SSEDecoder
from localchat.chat.store import (
    ConversationNotFoundError,
    ConversationStore,
    MessageNotFoundError,
)

logger = logging.getLogger(__name__)

ERROR_MESSAGE = "Sorry, I encountered an error while processing your request."
CHAT_ENDPOINT = "/api/chat"


class RelayError(Exception):
    """Raised when the relay reports an error or ends without a terminal frame."""

    pass


class ChatSession:
    """Connects a ConversationStore to the streaming chat endpoint.

    Attributes:
        store: The conversation store being mutated.
        is_loading: True while a request is in flight.
    """

    def __init__(
        self,
        store: ConversationStore,
        config: ClientConfig | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        on_change: Callable[[], None] | None = None,
    ) -> None:
        """Initialize the session.

        Args:
            store: Conversation store to read context from and write replies to.
            config: Optional client configuration.
                    Loads from environment if not provided.
            transport: Optional httpx transport (e.g. ASGITransport in tests).
            on_change: Called after every state change, for re-rendering.
        """
        self.store = store
        self.is_loading = False
        self._config = config or get_client_config()
        self._transport = transport
        self._on_change = on_change

    async def submit(self, text: str) -> Message | None:
        """Send user input and stream the assistant reply.

        Args:
            text: Raw user input.

        Returns:
            The assistant message (Finalized or Failed), or None when the
            input was rejected.
        """
        text = text.strip()
        conversation = self.store.active
        if not text or conversation is None or self.is_loading:
            return None
        if conversation.streaming_message is not None:
            logger.warning(f"Conversation {conversation.id} already has a reply in progress")
            return None

        conversation_id = conversation.id
        placeholder = Message(role="assistant", is_streaming=True)
        self.is_loading = True

        try:
            self.store.append_message(conversation_id, Message(role="user", content=text))
            self.store.append_message(conversation_id, placeholder)
            self.store.update_title_from_input(conversation_id, text)
            self._notify()

            try:
                await self._stream_reply(conversation_id, placeholder.id, conversation.context())
            except (ConversationNotFoundError, MessageNotFoundError):
                logger.warning(f"Conversation {conversation_id} removed while streaming")
            except Exception as e:
                logger.error(f"Chat request failed: {e!r}")
                self.store.fail_message(conversation_id, placeholder.id, ERROR_MESSAGE)
        finally:
            self.is_loading = False
            self._notify()

        return placeholder

    async def _stream_reply(
        self,
        conversation_id: str,
        message_id: str,
        context: list[dict[str, str]],
    ) -> None:
        async with (
            httpx.AsyncClient(
                base_url=self._config.api_base_url,
                timeout=self._config.timeout,
                transport=self._transport,
            ) as client,
            client.stream(
                "POST",
                CHAT_ENDPOINT,
                json={"messages": context},
                headers={"Accept": "text/event-stream"},
            ) as response,
        ):
            response.raise_for_status()

            decoder = SSEDecoder()
            async for chunk in response.aiter_text():
                for payload in decoder.feed(chunk):
                    if self._apply(conversation_id, message_id, payload):
                        return
            for payload in decoder.flush():
                if self._apply(conversation_id, message_id, payload):
                    return

        raise RelayError("Stream closed before a terminal frame")

    def _apply(self, conversation_id: str, message_id: str, payload: dict[str, Any]) -> bool:
        """Apply one decoded frame. Returns True once the reply is complete."""
        token = payload.get("token")
        if isinstance(token, str) and token:
            self.store.append_to_message(conversation_id, message_id, token)
            self._notify()

        if payload.get("done"):
            self.store.finalize_message(conversation_id, message_id)
            return True

        if "error" in payload:
            raise RelayError(str(payload["error"]))

        return False

    def _notify(self) -> None:
        if self._on_change is not None:
            self._on_change()
