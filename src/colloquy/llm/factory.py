from pathlib import Path
from typing import Any

from .credentials import CredentialStore
from .service import ChatService


def create_chat_service(
    credentials: CredentialStore | None = None,
    credentials_file: str | Path | None = None,
    use_env: bool = True,
    **config: Any
) -> ChatService:
    """Create a chat service.

    This factory function hides where API keys come from.

    Args:
        credentials: Explicit credential store (skips file and environment)
        credentials_file: JSON credential file to load keys from
        use_env: Overlay keys from provider environment variables
        **config: Additional ChatService configuration
            - client: httpx.AsyncClient | None
            - timeout: float (default: 120.0)

    Returns:
        Initialized chat service

    Raises:
        ConfigurationError: If the credential file cannot be parsed

    Examples:
        >>> service = create_chat_service(
        ...     credentials=CredentialStore({"OpenAIAPIKey": "sk-..."})
        ... )

        >>> service = create_chat_service(
        ...     credentials_file="~/.colloquy/credentials.json",
        ...     timeout=30.0
        ... )
    """
    if credentials is None:
        credentials = CredentialStore()
        if credentials_file is not None:
            credentials = CredentialStore.from_file(Path(credentials_file).expanduser())
        if use_env:
            credentials = credentials.merged(CredentialStore.from_env())

    return ChatService(credentials, **config)
