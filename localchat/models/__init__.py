"""Pydantic models for API requests and streamed responses.

Provides type safety, validation, and automatic OpenAPI documentation.

Models:
    - ChatMessage: Individual `{role, content}` pair in the context
    - ChatRequest: Incoming chat request payload
    - TokenEvent / DoneEvent / ErrorEvent: SSE frame payloads
"""

from localchat.models.schemas import (
    ChatMessage,
    ChatRequest,
    DoneEvent,
    ErrorEvent,
    StreamEvent,
    TokenEvent,
    format_sse,
)

__all__ = [
    "ChatMessage",
    "ChatRequest",
    "DoneEvent",
    "ErrorEvent",
    "StreamEvent",
    "TokenEvent",
    "format_sse",
]
