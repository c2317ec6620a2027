"""Integration tests for the SSE streaming chat endpoint.

Tests real streaming behavior with httpx AsyncClient and ASGITransport.
The FastAPI app and relay run for real; only Ollama is simulated.
"""

import json
from unittest.mock import patch

import httpx
import pytest
import pytest_check as check
from httpx import AsyncClient
from pydantic import ValidationError

from localchat.api.app import create_app, lifespan
from localchat.chat.sse import SSEDecoder

from tests.upstream import UpstreamStub

HELLO = {"messages": [{"role": "user", "content": "hello"}]}


async def stream_events(client: AsyncClient, body: dict) -> tuple[httpx.Response, list[dict]]:
    """POST to /api/chat and decode every SSE frame of the response."""
    decoder = SSEDecoder()
    events: list[dict] = []
    async with client.stream("POST", "/api/chat", json=body) as response:
        async for chunk in response.aiter_text():
            events.extend(decoder.feed(chunk))
    return response, events


class TestStreamingEndpoint:
    """Integration tests for POST /api/chat."""

    async def test_stream_returns_sse_headers(
        self, async_client: AsyncClient, upstream: UpstreamStub
    ) -> None:
        """Response is an uncached, kept-alive event stream."""
        upstream.reply({"response": "ok", "done": True})

        async with async_client.stream("POST", "/api/chat", json=HELLO) as response:
            await response.aread()

        check.equal(response.status_code, 200)
        check.is_in("text/event-stream", response.headers["content-type"])
        check.equal(response.headers["cache-control"], "no-cache")
        check.equal(response.headers["connection"], "keep-alive")

    async def test_tokens_then_done(
        self, async_client: AsyncClient, upstream: UpstreamStub
    ) -> None:
        """Two upstream frames become two tokens and one done frame."""
        upstream.reply({"response": "Hi"}, {"response": " there", "done": True})

        _, events = await stream_events(async_client, HELLO)

        assert events == [
            {"token": "Hi"},
            {"token": " there"},
            {"done": True, "fullResponse": "Hi there"},
        ]

    async def test_frames_are_data_lines(
        self, async_client: AsyncClient, upstream: UpstreamStub
    ) -> None:
        """Every frame is a single `data: <json>` line followed by a blank line."""
        upstream.reply({"response": "a"}, {"done": True})

        response = await async_client.post("/api/chat", json=HELLO)

        frames = response.text.split("\n\n")
        assert frames[-1] == ""
        for frame in frames[:-1]:
            assert frame.startswith("data: ")
            json.loads(frame.removeprefix("data: "))

    async def test_prompt_forwarded_upstream(
        self, async_client: AsyncClient, upstream: UpstreamStub
    ) -> None:
        """The whole conversation reaches Ollama as one prompt."""
        upstream.reply({"done": True})
        body = {
            "messages": [
                {"role": "user", "content": "hi"},
                {"role": "assistant", "content": "Hello!"},
                {"role": "user", "content": "bye"},
            ]
        }

        await stream_events(async_client, body)

        payload = upstream.payloads[0]
        check.equal(
            payload["prompt"],
            "Human: hi\n\nAssistant: Hello!\n\nHuman: bye\n\nAssistant:",
        )
        check.is_true(payload["stream"])

    async def test_health(self, async_client: AsyncClient) -> None:
        response = await async_client.get("/health")

        assert response.json() == {"status": "healthy", "service": "local-llm-chat"}


class TestStreamingErrorHandling:
    """Tests for error scenarios in the streaming endpoint."""

    async def test_upstream_500_single_error_frame(
        self, async_client: AsyncClient, upstream: UpstreamStub
    ) -> None:
        """Upstream failure is reported in-band as exactly one error frame."""
        upstream.fail(500, b"boom")

        response, events = await stream_events(async_client, HELLO)

        assert response.status_code == 200
        assert len(events) == 1
        assert events[0] == {"error": "Ollama error: 500 - boom"}

    async def test_upstream_unreachable(
        self, async_client: AsyncClient, upstream: UpstreamStub
    ) -> None:
        upstream.error = httpx.ConnectError("Connection refused")

        _, events = await stream_events(async_client, HELLO)

        assert events == [{"error": "Connection refused"}]

    async def test_malformed_upstream_line_skipped(
        self, async_client: AsyncClient, upstream: UpstreamStub
    ) -> None:
        upstream.reply_chunks(b'{"response": "a"}\n{oops\n', b'{"done": true}\n')

        _, events = await stream_events(async_client, HELLO)

        assert events == [{"token": "a"}, {"done": True, "fullResponse": "a"}]

    async def test_empty_messages_returns_422(
        self, async_client: AsyncClient, upstream: UpstreamStub
    ) -> None:
        """An empty conversation is rejected before reaching Ollama."""
        response = await async_client.post("/api/chat", json={"messages": []})

        assert response.status_code == 422
        assert upstream.requests == []

    async def test_missing_messages_returns_422(self, async_client: AsyncClient) -> None:
        response = await async_client.post("/api/chat", json={})

        assert response.status_code == 422

    async def test_unknown_role_returns_422(self, async_client: AsyncClient) -> None:
        response = await async_client.post(
            "/api/chat",
            json={"messages": [{"role": "robot", "content": "beep"}]},
        )

        assert response.status_code == 422

    async def test_invalid_json_returns_422(self, async_client: AsyncClient) -> None:
        response = await async_client.post(
            "/api/chat",
            content="not valid json",
            headers={"Content-Type": "application/json"},
        )

        assert response.status_code == 422

    async def test_wrong_http_method_returns_405(self, async_client: AsyncClient) -> None:
        response = await async_client.get("/api/chat")

        assert response.status_code == 405

    async def test_cors_headers_present(
        self, async_client: AsyncClient, upstream: UpstreamStub
    ) -> None:
        upstream.reply({"done": True})

        response = await async_client.post(
            "/api/chat",
            json=HELLO,
            headers={"Origin": "http://localhost:3000"},
        )

        assert "access-control-allow-origin" in response.headers


class TestLifespan:
    """Tests for startup validation of relay settings."""

    async def test_startup_with_valid_settings(self) -> None:
        with patch.dict("os.environ", {"OLLAMA_MODEL": "llama3.1:8b"}, clear=True):
            async with lifespan(create_app()):
                pass

    async def test_startup_rejects_invalid_upstream_url(self) -> None:
        """A malformed OLLAMA_URL stops the app from booting."""
        with (
            patch.dict("os.environ", {"OLLAMA_URL": "ollama:11434"}, clear=True),
            pytest.raises(ValidationError),
        ):
            async with lifespan(create_app()):
                pass
