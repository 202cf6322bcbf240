"""Provider factory functions for CLI.

Centralizes creation of credentials, the chat service, and the conversation
store from the environment. Hides configuration details from command
implementations.
"""

from rich.console import Console
from rich.markup import escape

from ..chat import ChatSession, ConversationStore, create_conversation_store
from ..config import credentials_path, database_path
from ..llm import ChatService, ConfigurationError, CredentialStore, create_chat_service

# Default console for output
_console = Console()


def get_credentials(console: Console | None = None) -> CredentialStore:
    """Load API keys from the credential file, overlaid by environment variables.

    Args:
        console: Optional Rich console for output

    Returns:
        Merged credential store

    Raises:
        SystemExit: If the credential file is malformed

    Environment variables:
        COLLOQUY_CREDENTIALS: Credential file (default: ~/.colloquy/credentials.json)
        OPENAI_API_KEY, ANTHROPIC_API_KEY, GROQ_API_KEY, GEMINI_API_KEY,
        CEREBRAS_API_KEY, MISTRAL_API_KEY, OPENROUTER_API_KEY: API keys
    """
    import typer

    con = console or _console
    try:
        stored = CredentialStore.from_file(credentials_path())
    except ConfigurationError as e:
        con.print(f"[red]Error: {escape(str(e))}[/red]")
        raise typer.Exit(code=1)
    return stored.merged(CredentialStore.from_env())


def get_service(console: Console | None = None) -> ChatService:
    """Create the chat service with credentials from file and environment."""
    return create_chat_service(credentials=get_credentials(console))


def get_store(persistent: bool = True) -> ConversationStore:
    """Create the conversation store.

    Args:
        persistent: SQLite store at COLLOQUY_DB (default: ~/.colloquy/conversations.db)
            when True, in-memory store otherwise
    """
    if persistent:
        return create_conversation_store("sqlite", path=database_path())
    return create_conversation_store("memory")


def get_session(store: ConversationStore, console: Console | None = None) -> ChatSession:
    """Create a chat session over a connected store."""
    return ChatSession(store, get_service(console))
