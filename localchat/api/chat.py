"""Streaming chat endpoint.

Forwards the conversation to the Ollama relay and returns its frames as
Server-Sent Events.
"""

import logging

from fastapi import APIRouter, Depends
from fastapi.responses import StreamingResponse

from localchat.models.schemas import ChatRequest
from localchat.relay.ollama import OllamaRelay, get_relay

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["chat"])

SSE_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",
}


@router.post("/chat")
async def chat(
    request: ChatRequest,
    relay: OllamaRelay = Depends(get_relay),
) -> StreamingResponse:
    """Stream a model reply for the given conversation.

    Args:
        request: Conversation context, oldest first.
        relay: The Ollama relay (overridable for tests).

    Returns:
        text/event-stream of `{token}` frames followed by one
        `{done, fullResponse}` or `{error}` frame.

    Raises:
        422: Empty or malformed message list.
    """
    logger.info(f"Relaying chat request with {len(request.messages)} messages")

    return StreamingResponse(
        relay.stream_events(request.messages),
        media_type="text/event-stream",
        headers=SSE_HEADERS,
    )
