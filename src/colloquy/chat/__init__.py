"""Conversation module for colloquy.

Provides conversation storage and the per-turn chat session logic.
"""

from .base import ConversationStore
from .errors import ConversationNotFoundError, TurnInProgressError
from .factory import create_conversation_store
from .models import ContentType, Conversation, Message, MessageRole
from .session import ChatSession, load_attachment

__all__ = [
    "ChatSession",
    "ContentType",
    "Conversation",
    "ConversationNotFoundError",
    "ConversationStore",
    "Message",
    "MessageRole",
    "TurnInProgressError",
    "create_conversation_store",
    "load_attachment",
]
