"""Unit tests for individual components in isolation.

Coverage:
    - relay/: Prompt building, payloads and NDJSON-to-SSE translation
    - chat/: Store lifecycle, persistence and SSE decoding
    - ui/: Code-block splitting and markdown rendering
    - configuration validation
"""
