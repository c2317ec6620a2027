"""Conversation store: the single owner of chat state.

Every mutation goes through a named operation here and is persisted
immediately through a ChatStorage backend. The store also enforces the
message lifecycle:

    Created -> Streaming -> Finalized
                         -> Failed

Finalized and Failed are terminal. A conversation holds at most one
streaming message at a time.
"""

import logging

from localchat.chat.models import (
    DEFAULT_TITLE,
    Conversation,
    ConversationCollection,
    Message,
    derive_title,
)
from localchat.chat.storage import ChatStorage

logger = logging.getLogger(__name__)


class ConversationNotFoundError(KeyError):
    """Raised when a conversation id is not in the collection."""

    pass


class MessageNotFoundError(KeyError):
    """Raised when a message id is not in the conversation."""

    pass


class MessageStateError(Exception):
    """Raised when an operation does not fit the message's lifecycle state."""

    pass


class ConversationStore:
    """Owns the conversation collection and the current selection."""

    def __init__(self, storage: ChatStorage) -> None:
        """Load the collection and select a conversation.

        Args:
            storage: Persistence backend. Read once here, written on
                     every mutation.
        """
        self._storage = storage
        self._collection = storage.load() or ConversationCollection()
        self._active_id: str | None = None

        # A stream cannot survive a reload; keep whatever text arrived.
        for conversation in self._collection.conversations.values():
            for message in conversation.messages:
                message.is_streaming = False

        latest = self.most_recent()
        if latest is None:
            self.create_conversation()
        else:
            self._active_id = latest.id

        logger.debug(f"Loaded {len(self._collection.conversations)} conversations")

    # Queries

    @property
    def active(self) -> Conversation | None:
        if self._active_id is None:
            return None
        return self._collection.conversations.get(self._active_id)

    @property
    def active_id(self) -> str | None:
        return self._active_id

    def get(self, conversation_id: str) -> Conversation:
        try:
            return self._collection.conversations[conversation_id]
        except KeyError:
            raise ConversationNotFoundError(conversation_id) from None

    def conversations(self) -> list[Conversation]:
        """Return all conversations, most recently updated first."""
        return sorted(
            self._collection.conversations.values(),
            key=lambda c: c.updated_at,
            reverse=True,
        )

    def most_recent(self) -> Conversation | None:
        ordered = self.conversations()
        return ordered[0] if ordered else None

    # Conversation operations

    def create_conversation(self) -> Conversation:
        """Create an empty conversation and select it."""
        conversation = Conversation()
        self._collection.conversations[conversation.id] = conversation
        self._active_id = conversation.id
        self._save()
        return conversation

    def select(self, conversation_id: str) -> Conversation:
        conversation = self.get(conversation_id)
        self._active_id = conversation.id
        return conversation

    def delete_conversation(self, conversation_id: str) -> None:
        """Remove a conversation, moving the selection if it was active.

        The selection falls back to the most recently updated remaining
        conversation, or to a freshly created one when none remain.
        """
        self.get(conversation_id)
        del self._collection.conversations[conversation_id]

        if conversation_id == self._active_id:
            latest = self.most_recent()
            if latest is None:
                self.create_conversation()
                return
            self._active_id = latest.id

        self._save()

    def update_title_from_input(self, conversation_id: str, text: str) -> None:
        """Set the title from user input while it is still the default."""
        conversation = self.get(conversation_id)
        if conversation.title != DEFAULT_TITLE:
            return
        conversation.title = derive_title(text)
        self._save()

    # Message operations

    def append_message(self, conversation_id: str, message: Message) -> Message:
        conversation = self.get(conversation_id)
        if message.is_streaming and conversation.streaming_message is not None:
            raise MessageStateError(
                f"Conversation {conversation_id} already has a streaming message"
            )
        conversation.messages.append(message)
        conversation.touch()
        self._save()
        return message

    def append_to_message(self, conversation_id: str, message_id: str, token: str) -> Message:
        """Append a streamed token to a message still in the Streaming state."""
        message = self._streaming_message(conversation_id, message_id)
        message.content += token
        self._save()
        return message

    def finalize_message(self, conversation_id: str, message_id: str) -> Message:
        """Move a streaming message to Finalized."""
        message = self._streaming_message(conversation_id, message_id)
        message.is_streaming = False
        self._save()
        return message

    def fail_message(self, conversation_id: str, message_id: str, content: str) -> Message:
        """Move a streaming message to Failed, replacing its content."""
        message = self._streaming_message(conversation_id, message_id)
        message.content = content
        message.is_streaming = False
        self._save()
        return message

    def _find_message(self, conversation_id: str, message_id: str) -> Message:
        conversation = self.get(conversation_id)
        for message in conversation.messages:
            if message.id == message_id:
                return message
        raise MessageNotFoundError(message_id)

    def _streaming_message(self, conversation_id: str, message_id: str) -> Message:
        message = self._find_message(conversation_id, message_id)
        if not message.is_streaming:
            raise MessageStateError(f"Message {message_id} is no longer streaming")
        return message

    def _save(self) -> None:
        self._storage.save(self._collection)
