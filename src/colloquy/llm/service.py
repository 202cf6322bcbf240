"""Chat orchestrator: build request, call the provider once, parse the reply."""

import logging
from collections.abc import Iterable
from typing import Any

import httpx

from ..config import DEFAULT_TIMEOUT_SECONDS, MAX_LOGGED_BODY_LENGTH
from .credentials import CredentialStore
from .errors import APIError
from .registry import Provider, get_provider_info
from .request_builder import SupportsRoleContent, build_request
from .response_parser import parse_response

logger = logging.getLogger(__name__)


class ChatService:
    """Sends one chat-completion request per call to any registered provider.

    Hidden design decisions:
    - Provider-specific request headers and body shape
    - Provider-specific response parsing
    - HTTP client lifecycle

    Each call is independent: no retries, no streaming, no state kept
    between calls. Supports async context manager protocol:
        async with ChatService(credentials) as service:
            reply = await service.send(messages, Provider.OPENAI, "gpt-4o")
    """

    def __init__(
        self,
        credentials: CredentialStore,
        client: httpx.AsyncClient | None = None,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
    ):
        """Initialize the chat service.

        Args:
            credentials: Store holding provider API keys
            client: Optional HTTP client (the service will not close it)
            timeout: Request timeout in seconds for a client the service creates
        """
        self._credentials = credentials
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=timeout)

    @property
    def credentials(self) -> CredentialStore:
        return self._credentials

    async def send(
        self,
        messages: Iterable[SupportsRoleContent],
        provider: Provider | str,
        model: str,
    ) -> str:
        """Send the conversation to a provider and return the reply text.

        Args:
            messages: Conversation history in display order
            provider: Target provider
            model: Target model identifier

        Returns:
            The assistant's reply

        Raises:
            MissingCredentialError: If the provider has no API key (no request is sent)
            APIError: If the provider answers with a status other than 200
            InvalidResponseError: If a 200 body does not have the expected shape
            httpx.TransportError: If the request cannot be delivered
        """
        info = get_provider_info(provider)
        request = build_request(messages, info.provider, model, self._credentials)

        logger.debug(
            "POST %s model=%s messages=%d headers=%s",
            request.url,
            model,
            len(request.body["messages"]),
            request.redacted_headers(),
        )

        response = await self._client.request(
            request.method,
            request.url,
            headers=request.headers,
            json=request.body,
        )

        if response.status_code != 200:
            logger.error(
                "%s request failed with status code: %d",
                info.display_name,
                response.status_code,
            )
            logger.error("Error response: %s", response.text[:MAX_LOGGED_BODY_LENGTH])
            raise APIError(response.status_code)

        return parse_response(response.content, info.provider)

    async def close(self) -> None:
        """Close the HTTP client if this service created it."""
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> "ChatService":
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Async context manager exit with automatic cleanup.

        Note: Suppresses "Event loop is closed" errors during cleanup.
        This is a known harmless race condition in httpx/anyio cleanup:
        https://github.com/encode/httpx/issues/914
        """
        try:
            await self.close()
        except RuntimeError as e:
            if "Event loop is closed" not in str(e):
                raise
