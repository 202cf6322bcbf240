"""Build provider-specific chat-completion requests from uniform messages."""

from collections.abc import Iterable
from typing import Any, Protocol

from ..config import ANTHROPIC_VERSION, DEFAULT_MAX_TOKENS, DEFAULT_TEMPERATURE
from .credentials import CredentialStore
from .errors import MissingCredentialError
from .models import ChatMessage, ChatRequest
from .registry import AuthScheme, Provider, ProviderInfo, get_provider_info


class SupportsRoleContent(Protocol):
    """Anything with a role and a text content (ChatMessage, stored Message)."""

    @property
    def role(self) -> Any: ...

    @property
    def content(self) -> str: ...


def auth_headers(info: ProviderInfo, api_key: str) -> dict[str, str]:
    """Authentication headers for a provider's auth scheme."""
    if info.auth_scheme is AuthScheme.API_KEY_HEADER:
        return {"x-api-key": api_key, "anthropic-version": ANTHROPIC_VERSION}
    return {"Authorization": f"Bearer {api_key}"}


def _role_value(role: Any) -> str:
    # MessageRole enum members and plain strings are both accepted
    return getattr(role, "value", role)


def build_request(
    messages: Iterable[SupportsRoleContent],
    provider: Provider | str,
    model: str,
    credentials: CredentialStore,
) -> ChatRequest:
    """Build the HTTP request for one chat completion.

    Only role and text are sent; image and audio payloads attached to
    stored messages are not forwarded.

    Args:
        messages: Conversation history in display order
        provider: Target provider
        model: Target model identifier
        credentials: Store to read the provider's API key from

    Returns:
        ChatRequest ready to be sent

    Raises:
        MissingCredentialError: If no API key is configured for the provider
    """
    info = get_provider_info(provider)
    api_key = credentials.get(info.provider)
    if not api_key:
        raise MissingCredentialError(info.display_name)

    payload_messages = [
        ChatMessage(role=_role_value(msg.role), content=msg.content).model_dump()
        for msg in messages
    ]

    headers = {"Content-Type": "application/json", **auth_headers(info, api_key)}
    body = {
        "model": model,
        "messages": payload_messages,
        "temperature": DEFAULT_TEMPERATURE,
        "max_tokens": DEFAULT_MAX_TOKENS,
    }
    return ChatRequest(url=info.base_url, headers=headers, body=body)
