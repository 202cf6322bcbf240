"""In-memory conversation store backend.

Simple dict-based storage for session-only conversations.
Data is lost when the application exits.
"""

from .base import ConversationStore
from .errors import ConversationNotFoundError
from .models import Conversation, Message


class InMemoryConversationStore(ConversationStore):
    """In-memory conversation store (session-only).

    Data is stored in memory and lost when the app exits.
    Suitable for single-session use or testing.
    """

    def __init__(self):
        self._conversations: dict[str, Conversation] = {}
        self._messages: list[Message] = []

    async def connect(self) -> None:
        """Initialize store (no-op for in-memory)."""
        pass

    async def disconnect(self) -> None:
        """Close store (no-op for in-memory)."""
        pass

    async def create_conversation(self, conversation: Conversation) -> Conversation:
        self._conversations[conversation.id] = conversation.model_copy()
        return conversation

    async def get_conversation(self, conversation_id: str) -> Conversation:
        try:
            return self._conversations[conversation_id].model_copy()
        except KeyError:
            raise ConversationNotFoundError(conversation_id) from None

    async def list_conversations(self) -> list[Conversation]:
        conversations = sorted(
            self._conversations.values(), key=lambda c: c.updated_at, reverse=True
        )
        return [c.model_copy() for c in conversations]

    async def save_conversation(self, conversation: Conversation) -> None:
        if conversation.id not in self._conversations:
            raise ConversationNotFoundError(conversation.id)
        self._conversations[conversation.id] = conversation.model_copy()

    async def delete_conversation(self, conversation_id: str) -> None:
        self._conversations.pop(conversation_id, None)
        await self.clear_messages(conversation_id)

    async def add_message(self, message: Message) -> Message:
        if message.conversation_id not in self._conversations:
            raise ConversationNotFoundError(message.conversation_id)
        self._messages.append(message)
        return message

    async def list_messages(self, conversation_id: str) -> list[Message]:
        # sorted() is stable, so equal timestamps keep insertion order
        return sorted(
            (m for m in self._messages if m.conversation_id == conversation_id),
            key=lambda m: m.timestamp,
        )

    async def clear_messages(self, conversation_id: str) -> int:
        before = len(self._messages)
        self._messages = [m for m in self._messages if m.conversation_id != conversation_id]
        return before - len(self._messages)

    @property
    def backend_type(self) -> str:
        return "memory"
