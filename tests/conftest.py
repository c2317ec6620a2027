"""Pytest fixtures and shared test configuration.

Provides reusable fixtures for unit and integration tests.

Fixtures:
    - upstream: Fake Ollama server recording requests and replaying frames
    - relay: OllamaRelay wired to the fake upstream
    - api_app: FastAPI app with the relay dependency overridden
    - async_client: HTTPX client for API testing
    - backend / store: In-memory persistence and a store on top of it
    - api_transport: ASGITransport into api_app
    - chat_session: ChatSession talking to api_app through api_transport

The upstream is the only stubbed boundary; everything from the API route
to the store runs for real.
"""

from collections.abc import AsyncGenerator, Generator
from typing import Any

import httpx
import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from localchat.api import app
from localchat.chat.config import ClientConfig
from localchat.chat.session import ChatSession
from localchat.chat.storage import KeyValueStorage
from localchat.chat.store import ConversationStore
from localchat.relay.config import RelayConfig
from localchat.relay.ollama import OllamaRelay, get_relay

from tests.upstream import UPSTREAM_URL, UpstreamStub


@pytest.fixture
def upstream() -> UpstreamStub:
    """Return a fake upstream that answers with an empty 200 by default."""
    return UpstreamStub()


@pytest.fixture
def relay_config() -> RelayConfig:
    return RelayConfig(upstream_url=UPSTREAM_URL, model_name="llama3.1:8b", timeout=None)


@pytest.fixture
def relay(relay_config: RelayConfig, upstream: UpstreamStub) -> OllamaRelay:
    return OllamaRelay(relay_config, transport=httpx.MockTransport(upstream.handler))


@pytest.fixture
def api_app(relay: OllamaRelay) -> Generator[FastAPI]:
    """Yield the app with its relay pointed at the fake upstream."""
    app.dependency_overrides[get_relay] = lambda: relay
    yield app
    app.dependency_overrides.clear()


@pytest.fixture
async def async_client(api_app: FastAPI) -> AsyncGenerator[AsyncClient]:
    """Create async HTTP client for API testing.

    Yields:
        Configured AsyncClient for making test requests.
    """
    transport = ASGITransport(app=api_app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
def backend() -> dict[str, Any]:
    """Plain dict standing in for per-browser storage."""
    return {}


@pytest.fixture
def store(backend: dict[str, Any]) -> ConversationStore:
    return ConversationStore(KeyValueStorage(backend))


@pytest.fixture
def client_config() -> ClientConfig:
    return ClientConfig(api_base_url="http://test", timeout=None)


@pytest.fixture
def api_transport(api_app: FastAPI) -> ASGITransport:
    """Transport that routes the session's requests into api_app."""
    return ASGITransport(app=api_app)


@pytest.fixture
def chat_session(
    store: ConversationStore,
    client_config: ClientConfig,
    api_transport: ASGITransport,
) -> ChatSession:
    return ChatSession(store, client_config, transport=api_transport)
