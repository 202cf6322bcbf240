"""Exceptions raised by the chat request/response layer.

Every failure of a single turn surfaces as a ``ChatError`` subclass whose
``str()`` is a human-readable message suitable for display.
"""


class ChatError(Exception):
    """Base class for errors that end the current chat turn."""


class MissingCredentialError(ChatError):
    """The selected provider has no configured API key."""

    def __init__(self, provider: str):
        self.provider = provider
        super().__init__(
            f"API key is missing. Please configure your API key for {provider}."
        )


class InvalidResponseError(ChatError):
    """The provider answered 200 but the body has an unexpected shape."""

    def __init__(self, detail: str | None = None):
        self.detail = detail
        super().__init__("Invalid response from AI service.")


class APIError(ChatError):
    """The provider answered with a non-200 status code."""

    def __init__(self, status_code: int):
        self.status_code = status_code
        super().__init__(f"API request failed with status code {status_code}.")


class ConfigurationError(Exception):
    """Local configuration (such as the credential file) could not be read."""
