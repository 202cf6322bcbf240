"""Abstract base class for conversation store backends.

This module defines the interface for conversation and message storage.
The abstraction hides:
- Storage format (in-memory objects, SQLite rows)
- Persistence mechanism (process memory, database file)
- Connection management
"""

from abc import ABC, abstractmethod

from .models import Conversation, Message


class ConversationStore(ABC):
    """Abstract conversation store backend.

    Writes are single-writer and non-transactional: each call commits on
    its own. Messages are found by conversation id, never by a containment
    list on the conversation.
    """

    @abstractmethod
    async def connect(self) -> None:
        """Initialize the store backend."""

    @abstractmethod
    async def disconnect(self) -> None:
        """Close the store backend gracefully."""

    @abstractmethod
    async def create_conversation(self, conversation: Conversation) -> Conversation:
        """Insert a new conversation."""

    @abstractmethod
    async def get_conversation(self, conversation_id: str) -> Conversation:
        """Fetch a conversation.

        Raises:
            ConversationNotFoundError: If no such conversation exists
        """

    @abstractmethod
    async def list_conversations(self) -> list[Conversation]:
        """All conversations, most recently updated first."""

    @abstractmethod
    async def save_conversation(self, conversation: Conversation) -> None:
        """Persist changes to an existing conversation's fields.

        Raises:
            ConversationNotFoundError: If no such conversation exists
        """

    @abstractmethod
    async def delete_conversation(self, conversation_id: str) -> None:
        """Delete a conversation together with its messages."""

    @abstractmethod
    async def add_message(self, message: Message) -> Message:
        """Insert a message.

        Raises:
            ConversationNotFoundError: If the owning conversation does not exist
        """

    @abstractmethod
    async def list_messages(self, conversation_id: str) -> list[Message]:
        """Messages of a conversation ordered by timestamp."""

    @abstractmethod
    async def clear_messages(self, conversation_id: str) -> int:
        """Delete all messages of a conversation and return how many were removed."""

    @property
    @abstractmethod
    def backend_type(self) -> str:
        """Get the backend type identifier."""

    async def __aenter__(self) -> "ConversationStore":
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.disconnect()
