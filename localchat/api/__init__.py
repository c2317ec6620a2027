"""FastAPI endpoints for the local LLM chat.

HTTP and streaming routes with async request handling.
Supports Server-Sent Events for real-time chat streaming.

Endpoints:
    - GET /health: Service health status
    - POST /api/chat: Streamed chat completion relayed from Ollama
"""

from localchat.api.app import app, create_app

__all__ = ["app", "create_app"]
