"""Tests for the Typer CLI."""
import httpx
import pytest
from typer.testing import CliRunner

from colloquy.chat import ChatSession
from colloquy.cli import app as cli_app
from colloquy.llm import ChatService, CredentialStore, Provider, list_providers

from conftest import RecordingTransport

runner = CliRunner()


@pytest.fixture(autouse=True)
def isolated_env(tmp_path, monkeypatch):
    """Point the CLI at temporary files and clear provider keys."""
    for info in list_providers():
        monkeypatch.delenv(info.env_var, raising=False)
    monkeypatch.setenv("COLLOQUY_HOME", str(tmp_path))
    monkeypatch.delenv("COLLOQUY_CREDENTIALS", raising=False)
    monkeypatch.delenv("COLLOQUY_DB", raising=False)
    return tmp_path


class TestInformationCommands:
    """Tests for provider and model listings."""

    def test_providers_lists_all(self, monkeypatch):
        """Test that every provider appears in the listing."""
        monkeypatch.setenv("GROQ_API_KEY", "gsk")
        result = runner.invoke(cli_app.app, ["providers"])

        assert result.exit_code == 0
        for info in list_providers():
            assert info.provider.value in result.output

    def test_models_lists_provider_models(self):
        """Test that a provider's models are listed."""
        result = runner.invoke(cli_app.app, ["models", "anthropic"])

        assert result.exit_code == 0
        assert "claude-sonnet-4-0" in result.output

    def test_models_unknown_provider(self):
        """Test that unknown providers exit with an error."""
        result = runner.invoke(cli_app.app, ["models", "ollama"])

        assert result.exit_code == 1
        assert "Unsupported provider" in result.output

    def test_unreadable_credential_file_is_reported(self, isolated_env, monkeypatch):
        """Test that a bad credential file at a bracketed path is reported verbatim."""
        monkeypatch.chdir(isolated_env)
        (isolated_env / "[bad].json").write_text("{not json")
        monkeypatch.setenv("COLLOQUY_CREDENTIALS", "[bad].json")

        result = runner.invoke(cli_app.app, ["providers"])

        assert result.exit_code == 1
        assert "[bad].json" in result.output


class TestConfigure:
    """Tests for storing API keys."""

    def test_configure_writes_credential_file(self, isolated_env):
        """Test that the key lands in the credential file."""
        result = runner.invoke(cli_app.app, ["configure", "mistral", "--api-key", " mk-123 "])

        assert result.exit_code == 0
        stored = CredentialStore.from_file(isolated_env / "credentials.json")
        assert stored.get(Provider.MISTRAL) == "mk-123"

    def test_configure_prompts_for_key(self, isolated_env):
        """Test that the key is prompted for when not given."""
        result = runner.invoke(cli_app.app, ["configure", "openai"], input="sk-prompted\n")

        assert result.exit_code == 0
        stored = CredentialStore.from_file(isolated_env / "credentials.json")
        assert stored.get(Provider.OPENAI) == "sk-prompted"


class TestAsk:
    """Tests for single-shot questions."""

    def test_ask_without_key_fails(self):
        """Test that a missing key is reported and exits with code 1."""
        result = runner.invoke(cli_app.app, ["ask", "Hi", "--provider", "openai"])

        assert result.exit_code == 1
        assert "API key is missing" in result.output

    def test_ask_prints_reply(self, monkeypatch):
        """Test that the reply is printed."""
        transport = RecordingTransport()

        def fake_service(console=None):
            credentials = CredentialStore({"OpenAIAPIKey": "sk"})
            return ChatService(credentials, client=httpx.AsyncClient(transport=transport))

        monkeypatch.setattr(cli_app, "get_service", fake_service)
        result = runner.invoke(cli_app.app, ["ask", "Hi", "--system", "Be brief."])

        assert result.exit_code == 0
        assert "hello" in result.output
        assert transport.last_json()["messages"][0] == {"role": "system", "content": "Be brief."}

    def test_ask_reports_api_error(self, monkeypatch):
        """Test that API errors are printed with their status code."""
        def fake_service(console=None):
            credentials = CredentialStore({"OpenAIAPIKey": "sk"})
            client = httpx.AsyncClient(transport=RecordingTransport(status_code=401))
            return ChatService(credentials, client=client)

        monkeypatch.setattr(cli_app, "get_service", fake_service)
        result = runner.invoke(cli_app.app, ["ask", "Hi"])

        assert result.exit_code == 1
        assert "401" in result.output


class TestConversationCommands:
    """Tests for saved conversation management."""

    def test_conversations_empty(self):
        """Test the listing with no saved conversations."""
        result = runner.invoke(cli_app.app, ["conversations"])

        assert result.exit_code == 0
        assert "No conversations yet" in result.output

    def test_history_unknown_conversation(self):
        """Test that unknown ids exit with an error."""
        result = runner.invoke(cli_app.app, ["history", "deadbeef"])

        assert result.exit_code == 1
        assert "Conversation not found" in result.output

    def test_chat_without_any_key_fails(self):
        """Test that chat refuses to start with no configured provider."""
        result = runner.invoke(cli_app.app, ["chat", "--ephemeral"], input="exit\n")

        assert result.exit_code == 1
        assert "No API key configured" in result.output


class TestChatCommands:
    """Tests for in-chat slash commands."""

    @pytest.fixture
    def chat_transport(self, monkeypatch):
        transport = RecordingTransport()

        def fake_session(store, console=None):
            credentials = CredentialStore({"OpenAIAPIKey": "sk"})
            return ChatSession(store, ChatService(credentials, client=httpx.AsyncClient(transport=transport)))

        monkeypatch.setattr(cli_app, "get_session", fake_session)
        return transport

    @pytest.mark.parametrize("command, usage", [
        ("/image", "Usage: /image <path>"),
        ("/model", "Usage: /model <provider> [model]"),
    ])
    def test_bare_command_shows_usage(self, chat_transport, command, usage):
        """Test that a command without arguments is not sent as a message."""
        result = runner.invoke(
            cli_app.app, ["chat", "--ephemeral", "--provider", "openai"], input=f"{command}\nexit\n"
        )

        assert result.exit_code == 0
        assert usage in result.output
        assert chat_transport.requests == []

    def test_model_command_switches(self, chat_transport):
        """Test that /model with arguments switches the provider."""
        result = runner.invoke(
            cli_app.app, ["chat", "--ephemeral", "--provider", "openai"], input="/model groq\nexit\n"
        )

        assert result.exit_code == 0
        assert "Now using groq/llama-3.3-70b-versatile" in result.output
        assert chat_transport.requests == []
