"""Local LLM Chat - browser chat client for a locally running Ollama server.

Combines FastAPI for the SSE relay, httpx for upstream and client streaming,
NiceGUI for the chat page, and Pydantic for data validation.

Components:
    - api: HTTP endpoints and streaming responses
    - relay: Ollama request building and NDJSON-to-SSE translation
    - chat: Conversation store, persistence and the streaming submit flow
    - ui: Web interface for chat interactions
    - models: Request schemas and SSE frame payloads
"""

__version__ = "0.1.0"
