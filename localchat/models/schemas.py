from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class ChatMessage(BaseModel):
    """A single `{role, content}` pair forwarded to the relay.

    Attributes:
        role: The speaker identifier (user or assistant).
        content: The message text.
    """

    role: Literal["user", "assistant"]
    content: str


class ChatRequest(BaseModel):
    """Request payload for the streaming chat endpoint.

    Attributes:
        messages: Conversation context, oldest first. Must not be empty.
    """

    messages: list[ChatMessage] = Field(..., min_length=1)


class TokenEvent(BaseModel):
    """One response fragment relayed from the inference server."""

    token: str


class DoneEvent(BaseModel):
    """Terminal frame for a successful stream.

    Attributes:
        done: Always true.
        full_response: Concatenation of every relayed token.
    """

    model_config = ConfigDict(populate_by_name=True)

    done: Literal[True] = True
    full_response: str = Field(..., alias="fullResponse")


class ErrorEvent(BaseModel):
    """Terminal frame for a failed stream."""

    error: str


StreamEvent = TokenEvent | DoneEvent | ErrorEvent


def format_sse(event: StreamEvent) -> str:
    """Encode an event as a single SSE `data:` frame."""
    return f"data: {event.model_dump_json(by_alias=True)}\n\n"
