"""Pytest configuration and shared fixtures."""
import json
import os

import httpx
import pytest

from colloquy.chat import ChatSession, create_conversation_store
from colloquy.llm import ChatService, CredentialStore

OPENAI_BODY = {"choices": [{"message": {"role": "assistant", "content": "hello"}}]}
ANTHROPIC_BODY = {"content": [{"type": "text", "text": "hi there"}]}


class RecordingTransport(httpx.MockTransport):
    """Mock transport that answers with a fixed response and records requests."""

    def __init__(self, status_code: int = 200, body: dict | str | None = None):
        self.requests: list[httpx.Request] = []
        self.status_code = status_code
        self.body = OPENAI_BODY if body is None else body
        super().__init__(self._handle)

    def _handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if isinstance(self.body, str):
            return httpx.Response(self.status_code, text=self.body)
        return httpx.Response(self.status_code, json=self.body)

    def last_json(self) -> dict:
        return json.loads(self.requests[-1].content)


@pytest.fixture(scope="session")
def api_keys():
    """Return API keys from environment."""
    return {
        "openai": os.getenv("OPENAI_API_KEY"),
        "anthropic": os.getenv("ANTHROPIC_API_KEY"),
    }


@pytest.fixture
def credentials():
    """Credential store with a key for every provider."""
    return CredentialStore({
        "OpenAIAPIKey": "sk-openai",
        "AnthropicAPIKey": "sk-ant",
        "GroqAPIKey": "gsk-groq",
        "GeminiAPIKey": "gemini-key",
        "CerebrasAPIKey": "csk-cerebras",
        "MistralAPIKey": "mistral-key",
        "OpenRouterAPIKey": "sk-or",
    })


@pytest.fixture
def transport():
    """Transport answering 200 with an OpenAI-shaped body."""
    return RecordingTransport()


@pytest.fixture
async def service(credentials, transport):
    """Chat service wired to the recording transport."""
    client = httpx.AsyncClient(transport=transport)
    service = ChatService(credentials, client=client)
    yield service
    await client.aclose()


@pytest.fixture
async def memory_store():
    """Connected in-memory conversation store."""
    store = create_conversation_store("memory")
    await store.connect()
    yield store
    await store.disconnect()


@pytest.fixture
async def sqlite_store(tmp_path):
    """Connected SQLite conversation store in a temporary directory."""
    store = create_conversation_store("sqlite", path=tmp_path / "conversations.db")
    await store.connect()
    yield store
    await store.disconnect()


@pytest.fixture(params=["memory", "sqlite"])
async def store(request, tmp_path):
    """Each conversation store backend, connected."""
    if request.param == "sqlite":
        store = create_conversation_store("sqlite", path=tmp_path / "conversations.db")
    else:
        store = create_conversation_store("memory")
    await store.connect()
    yield store
    await store.disconnect()


@pytest.fixture
def session(memory_store, service):
    """Chat session over an in-memory store and the mocked service."""
    return ChatSession(memory_store, service)
