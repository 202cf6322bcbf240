"""Unit tests for the chat orchestrator."""
import logging

import httpx
import pytest

from colloquy.llm import (
    APIError,
    ChatMessage,
    ChatService,
    CredentialStore,
    InvalidResponseError,
    MissingCredentialError,
    Provider,
    create_chat_service,
)

from conftest import ANTHROPIC_BODY, RecordingTransport


def _service(transport: httpx.MockTransport, credentials: CredentialStore) -> ChatService:
    return ChatService(credentials, client=httpx.AsyncClient(transport=transport))


class TestChatServiceSend:
    """Tests for ChatService.send."""

    @pytest.mark.asyncio
    async def test_openai_round_trip(self, service, transport):
        """Test a user 'Hi' turn returning the OpenAI-shaped reply."""
        reply = await service.send([ChatMessage(role="user", content="Hi")], Provider.OPENAI, "gpt-x")

        assert reply == "hello"
        assert len(transport.requests) == 1
        request = transport.requests[0]
        assert request.method == "POST"
        assert str(request.url) == "https://api.openai.com/v1/chat/completions"
        assert request.headers["Authorization"] == "Bearer sk-openai"
        assert request.headers["Content-Type"] == "application/json"
        assert transport.last_json() == {
            "model": "gpt-x",
            "messages": [{"role": "user", "content": "Hi"}],
            "temperature": 0.7,
            "max_tokens": 4096,
        }

    @pytest.mark.asyncio
    async def test_anthropic_round_trip(self, credentials):
        """Test that Anthropic requests use header auth and content-block parsing."""
        transport = RecordingTransport(body=ANTHROPIC_BODY)
        service = _service(transport, credentials)

        reply = await service.send(
            [ChatMessage(role="user", content="Hi")], Provider.ANTHROPIC, "claude-sonnet-4-0"
        )

        assert reply == "hi there"
        request = transport.requests[0]
        assert str(request.url) == "https://api.anthropic.com/v1/messages"
        assert request.headers["x-api-key"] == "sk-ant"
        assert request.headers["anthropic-version"] == "2023-06-01"
        assert "authorization" not in request.headers

    @pytest.mark.asyncio
    async def test_missing_credential_sends_nothing(self, transport):
        """Test that an empty key fails before any HTTP call."""
        service = _service(transport, CredentialStore({"OpenAIAPIKey": ""}))

        with pytest.raises(MissingCredentialError):
            await service.send([ChatMessage(role="user", content="Hi")], Provider.OPENAI, "gpt-x")

        assert transport.requests == []

    @pytest.mark.asyncio
    async def test_non_200_raises_api_error(self, credentials, caplog):
        """Test that status 429 raises APIError(429) and the body is only logged."""
        transport = RecordingTransport(
            status_code=429,
            body={"choices": [{"message": {"content": "should not be parsed"}}]},
        )
        service = _service(transport, credentials)

        with caplog.at_level(logging.ERROR, logger="colloquy"):
            with pytest.raises(APIError) as exc_info:
                await service.send([ChatMessage(role="user", content="Hi")], Provider.OPENAI, "gpt-x")

        assert exc_info.value.status_code == 429
        assert "429" in str(exc_info.value)
        assert "should not be parsed" in caplog.text
        assert "sk-openai" not in caplog.text

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status_code", [201, 204, 400, 401, 500, 503])
    async def test_any_status_other_than_200_is_an_error(self, credentials, status_code):
        """Test that only exactly 200 counts as success."""
        service = _service(RecordingTransport(status_code=status_code), credentials)
        with pytest.raises(APIError) as exc_info:
            await service.send([ChatMessage(role="user", content="Hi")], Provider.GROQ, "m")
        assert exc_info.value.status_code == status_code

    @pytest.mark.asyncio
    async def test_malformed_200_raises_invalid_response(self, credentials):
        """Test that a 200 with the wrong shape raises InvalidResponseError."""
        service = _service(RecordingTransport(body={"choices": []}), credentials)
        with pytest.raises(InvalidResponseError):
            await service.send([ChatMessage(role="user", content="Hi")], Provider.OPENAI, "gpt-x")

    @pytest.mark.asyncio
    async def test_non_json_200_raises_invalid_response(self, credentials):
        """Test that an HTML error page with status 200 is an invalid response."""
        service = _service(RecordingTransport(body="<html>oops</html>"), credentials)
        with pytest.raises(InvalidResponseError):
            await service.send([ChatMessage(role="user", content="Hi")], Provider.OPENAI, "gpt-x")

    @pytest.mark.asyncio
    async def test_transport_errors_propagate(self, credentials):
        """Test that connection failures are not retried or rewrapped."""
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            raise httpx.ConnectError("connection refused", request=request)

        service = _service(httpx.MockTransport(handler), credentials)
        with pytest.raises(httpx.ConnectError):
            await service.send([ChatMessage(role="user", content="Hi")], Provider.OPENAI, "gpt-x")
        assert len(calls) == 1

    @pytest.mark.asyncio
    async def test_calls_are_independent(self, service, transport):
        """Test that each send issues exactly one request."""
        for _ in range(3):
            await service.send([ChatMessage(role="user", content="Hi")], Provider.OPENAI, "gpt-x")
        assert len(transport.requests) == 3


class TestChatServiceLifecycle:
    """Tests for client ownership and cleanup."""

    @pytest.mark.asyncio
    async def test_injected_client_is_not_closed(self, credentials, transport):
        """Test that a caller-provided client stays open."""
        client = httpx.AsyncClient(transport=transport)
        async with ChatService(credentials, client=client):
            pass
        assert not client.is_closed
        await client.aclose()

    @pytest.mark.asyncio
    async def test_owned_client_is_closed(self, credentials):
        """Test that the service closes the client it created."""
        service = ChatService(credentials, timeout=5.0)
        async with service:
            pass
        assert service._client.is_closed

    def test_factory_with_explicit_credentials(self, credentials):
        """Test creating a service via the factory."""
        service = create_chat_service(credentials=credentials)
        assert service.credentials is credentials

    def test_factory_reads_file_and_env(self, tmp_path, monkeypatch):
        """Test that environment keys overlay the credential file."""
        path = tmp_path / "credentials.json"
        CredentialStore({"OpenAIAPIKey": "file", "GroqAPIKey": "groq"}).save(path)
        monkeypatch.setenv("OPENAI_API_KEY", "env")

        service = create_chat_service(credentials_file=path)

        assert service.credentials.get(Provider.OPENAI) == "env"
        assert service.credentials.get(Provider.GROQ) == "groq"

    @pytest.mark.asyncio
    @pytest.mark.integration
    async def test_openai_real_api(self, api_keys):
        """Integration test: Send a message with the real API."""
        if not api_keys["openai"]:
            pytest.skip("OPENAI_API_KEY not set")

        async with create_chat_service() as service:
            reply = await service.send(
                [ChatMessage(role="user", content="Reply with the single word: pong")],
                Provider.OPENAI,
                "gpt-4o-mini",
            )
        assert reply.strip()
