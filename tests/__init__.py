"""Test package for Local LLM Chat.

Unit tests for isolated logic and integration tests for the streaming
chain from the API route to the conversation store.

Structure:
    - unit/: Individual function and class tests
    - integration/: End-to-end workflow tests

The Ollama server is replaced by httpx.MockTransport; nothing else is mocked.
Leverages pytest with pytest-check for soft assertions.
"""
