"""Integration tests for components working together as a system.

Coverage:
    - POST /api/chat with real HTTP requests over ASGITransport
    - ChatSession submitting through the API into the conversation store

Only the upstream Ollama server is simulated.
"""
