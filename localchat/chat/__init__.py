"""Conversation state for the chat client.

Responsibilities:
    - Message / Conversation data model
    - Owned store with explicit mutation operations and message lifecycle
    - Key-value persistence of the whole collection
    - Incremental SSE decoding of the relay's response
    - Submit flow that streams a reply into the store

Free of UI framework code, so it runs and tests without a browser.
"""

from localchat.chat.config import ClientConfig, get_client_config
from localchat.chat.models import Conversation, ConversationCollection, Message
from localchat.chat.session import ERROR_MESSAGE, ChatSession, RelayError
from localchat.chat.sse import SSEDecoder
from localchat.chat.storage import ChatStorage, KeyValueStorage
from localchat.chat.store import (
    ConversationNotFoundError,
    ConversationStore,
    MessageNotFoundError,
    MessageStateError,
)

__all__ = [
    "ERROR_MESSAGE",
    "ChatSession",
    "ChatStorage",
    "ClientConfig",
    "Conversation",
    "ConversationCollection",
    "ConversationNotFoundError",
    "ConversationStore",
    "KeyValueStorage",
    "Message",
    "MessageNotFoundError",
    "MessageStateError",
    "RelayError",
    "SSEDecoder",
    "get_client_config",
]
