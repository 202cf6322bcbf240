"""Turn-level chat logic on top of a conversation store and chat service.

A turn persists the user's message, sends the whole conversation to the
conversation's provider, and persists the reply. When the provider call
fails the user's message stays stored and no reply is appended.
"""

import logging
from pathlib import Path

from ..llm.registry import Provider, get_provider_info
from ..llm.service import ChatService
from .base import ConversationStore
from .errors import TurnInProgressError
from .models import ContentType, Conversation, Message, MessageRole

logger = logging.getLogger(__name__)


def load_attachment(path: str | Path) -> bytes | None:
    """Read an optional image attachment.

    Read failures are not fatal: the attachment is ignored and None returned.
    """
    try:
        return Path(path).expanduser().read_bytes()
    except OSError as e:
        logger.warning("Ignoring attachment %s: %s", path, e)
        return None


class ChatSession:
    """Runs chat turns for conversations held in a store.

    Only one turn may be pending per conversation at a time.
    """

    def __init__(self, store: ConversationStore, service: ChatService):
        self._store = store
        self._service = service
        self._in_flight: set[str] = set()

    @property
    def store(self) -> ConversationStore:
        return self._store

    @property
    def service(self) -> ChatService:
        return self._service

    def is_sending(self, conversation_id: str) -> bool:
        return conversation_id in self._in_flight

    async def start_conversation(
        self,
        provider: Provider | str,
        model: str | None = None,
    ) -> Conversation:
        """Create and store an empty conversation.

        Args:
            provider: Provider to chat with
            model: Model id (default: the provider's default model)
        """
        info = get_provider_info(provider)
        conversation = Conversation(provider=info.provider, model=model or info.default_model)
        await self._store.create_conversation(conversation)
        logger.info("Started conversation %s with %s/%s", conversation.id, info.provider.value, conversation.model)
        return conversation

    async def send(
        self,
        conversation_id: str,
        text: str,
        image_data: bytes | None = None,
    ) -> Message:
        """Run one turn and return the stored assistant reply.

        Args:
            conversation_id: Conversation to send in
            text: User message text (surrounding whitespace is trimmed)
            image_data: Optional image attached to the user message

        Returns:
            The assistant message appended to the conversation

        Raises:
            ValueError: If there is neither text nor an image to send
            TurnInProgressError: If a turn is already pending for this conversation
            ConversationNotFoundError: If the conversation does not exist
            ChatError: If the provider call fails (the user message stays stored)
        """
        text = text.strip()
        if not text and image_data is None:
            raise ValueError("Cannot send an empty message")
        if conversation_id in self._in_flight:
            raise TurnInProgressError(conversation_id)

        self._in_flight.add(conversation_id)
        try:
            conversation = await self._store.get_conversation(conversation_id)

            user_message = Message(
                conversation_id=conversation_id,
                role=MessageRole.USER,
                content=text,
                content_type=ContentType.MULTIMODAL if image_data is not None else ContentType.TEXT,
                image_data=image_data,
            )
            await self._store.add_message(user_message)

            history = await self._store.list_messages(conversation_id)
            if len(history) == 1:
                conversation.title_from(text)
            conversation.touch()
            await self._store.save_conversation(conversation)

            reply = await self._service.send(
                [m.to_chat_message() for m in history],
                conversation.provider,
                conversation.model,
            )

            assistant_message = Message(
                conversation_id=conversation_id,
                role=MessageRole.ASSISTANT,
                content=reply,
            )
            await self._store.add_message(assistant_message)
            # Renames and model switches may have landed during the call.
            conversation = await self._store.get_conversation(conversation_id)
            conversation.touch()
            await self._store.save_conversation(conversation)
            return assistant_message
        finally:
            self._in_flight.discard(conversation_id)

    async def switch_model(
        self,
        conversation_id: str,
        provider: Provider | str,
        model: str | None = None,
    ) -> Conversation:
        """Point a conversation at another provider/model pair."""
        info = get_provider_info(provider)
        current = await self._store.get_conversation(conversation_id)
        conversation = Conversation.model_validate({
            **current.model_dump(),
            "provider": info.provider,
            "model": model or info.default_model,
        })
        conversation.touch()
        await self._store.save_conversation(conversation)
        return conversation

    async def rename(self, conversation_id: str, title: str) -> Conversation:
        title = title.strip()
        if not title:
            raise ValueError("Title cannot be empty")
        conversation = await self._store.get_conversation(conversation_id)
        conversation.title = title
        await self._store.save_conversation(conversation)
        return conversation

    async def history(self, conversation_id: str) -> list[Message]:
        return await self._store.list_messages(conversation_id)

    async def conversations(self) -> list[Conversation]:
        return await self._store.list_conversations()

    async def clear(self, conversation_id: str) -> int:
        """Delete every message of a conversation, keeping the conversation."""
        await self._store.get_conversation(conversation_id)
        return await self._store.clear_messages(conversation_id)

    async def delete(self, conversation_id: str) -> None:
        await self._store.get_conversation(conversation_id)
        await self._store.delete_conversation(conversation_id)
