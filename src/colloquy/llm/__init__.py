from .credentials import CredentialStore
from .errors import (
    APIError,
    ChatError,
    ConfigurationError,
    InvalidResponseError,
    MissingCredentialError,
)
from .factory import create_chat_service
from .models import ChatMessage, ChatRequest
from .registry import (
    AuthScheme,
    Provider,
    ProviderInfo,
    ResponseShape,
    describe_model,
    get_provider_info,
    is_known_model,
    list_providers,
)
from .request_builder import auth_headers, build_request
from .response_parser import parse_response
from .service import ChatService

__all__ = [
    "APIError",
    "AuthScheme",
    "ChatError",
    "ChatMessage",
    "ChatRequest",
    "ChatService",
    "ConfigurationError",
    "CredentialStore",
    "InvalidResponseError",
    "MissingCredentialError",
    "Provider",
    "ProviderInfo",
    "ResponseShape",
    "auth_headers",
    "build_request",
    "create_chat_service",
    "describe_model",
    "get_provider_info",
    "is_known_model",
    "list_providers",
    "parse_response",
]
