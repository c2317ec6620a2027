"""Conversation data model.

Serialized with camelCase keys so the stored blob reads like the JSON a
browser client would keep under a single storage key.
"""

from datetime import UTC, datetime
from typing import Literal
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

DEFAULT_TITLE = "New Chat"
TITLE_MAX_LENGTH = 30
TITLE_ELLIPSIS = "..."


def new_id() -> str:
    return uuid4().hex


def utcnow() -> datetime:
    return datetime.now(UTC)


def derive_title(text: str) -> str:
    """Build a conversation title from the first user input.

    Args:
        text: The user's message.

    Returns:
        The first 30 characters, with an ellipsis appended when truncated.
    """
    if len(text) > TITLE_MAX_LENGTH:
        return text[:TITLE_MAX_LENGTH] + TITLE_ELLIPSIS
    return text


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Message(_CamelModel):
    """A single chat message.

    Attributes:
        id: Unique identifier, never reused.
        role: Who wrote it (user or assistant).
        content: Message text, mutated in place while streaming.
        timestamp: Creation time.
        is_streaming: True between placeholder creation and completion/failure.
    """

    id: str = Field(default_factory=new_id)
    role: Literal["user", "assistant"]
    content: str = ""
    timestamp: datetime = Field(default_factory=utcnow)
    is_streaming: bool = False


class Conversation(_CamelModel):
    """An ordered chat thread.

    Attributes:
        id: Unique identifier.
        title: Display title, derived once from the first user input.
        messages: Messages in append order.
        created_at: Creation time.
        updated_at: Last append time, never decreasing.
    """

    id: str = Field(default_factory=new_id)
    title: str = DEFAULT_TITLE
    messages: list[Message] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    @property
    def streaming_message(self) -> Message | None:
        return next((m for m in self.messages if m.is_streaming), None)

    def touch(self) -> None:
        """Bump updated_at without ever moving it backwards."""
        self.updated_at = max(self.updated_at, utcnow())

    def context(self) -> list[dict[str, str]]:
        """Return non-streaming messages as `{role, content}` pairs."""
        return [
            {"role": m.role, "content": m.content}
            for m in self.messages
            if not m.is_streaming
        ]


class ConversationCollection(_CamelModel):
    """All conversations keyed by id."""

    conversations: dict[str, Conversation] = Field(default_factory=dict)
