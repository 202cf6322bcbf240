"""
Colloquy: a provider-agnostic chat client for hosted LLM APIs.

This package follows Parnas's information hiding principles,
where each module hides a specific design decision.
"""

__version__ = "0.1.0"

from .chat import (
    ChatSession,
    Conversation,
    ConversationStore,
    Message,
    create_conversation_store,
)
from .llm import (
    APIError,
    ChatError,
    ChatService,
    CredentialStore,
    InvalidResponseError,
    MissingCredentialError,
    Provider,
    create_chat_service,
)

__all__ = [
    "APIError",
    "ChatError",
    "ChatService",
    "ChatSession",
    "Conversation",
    "ConversationStore",
    "CredentialStore",
    "InvalidResponseError",
    "Message",
    "MissingCredentialError",
    "Provider",
    "create_chat_service",
    "create_conversation_store",
]
