"""Data models for conversations and their messages.

These models define the structure of stored chat state,
independent of the storage backend used.
"""

from datetime import datetime, timezone
from enum import Enum
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, model_validator

from ..config import DEFAULT_TITLE, TITLE_MAX_LENGTH
from ..llm.models import ChatMessage
from ..llm.registry import Provider, get_provider_info, is_known_model


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class MessageRole(str, Enum):
    USER = "user"
    ASSISTANT = "assistant"
    SYSTEM = "system"


class ContentType(str, Enum):
    TEXT = "text"
    IMAGE = "image"
    AUDIO = "audio"
    MULTIMODAL = "multimodal"  # Text + image


class Message(BaseModel):
    """A single stored chat message.

    Messages are immutable once created. They reference their conversation
    by id; display order is by timestamp.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=lambda: str(uuid4()))
    conversation_id: str
    role: MessageRole
    content: str
    content_type: ContentType = ContentType.TEXT
    image_data: bytes | None = None
    audio_data: bytes | None = None
    timestamp: datetime = Field(default_factory=utc_now)
    metadata: str | None = Field(default=None, description="JSON string for additional metadata")

    def to_chat_message(self) -> ChatMessage:
        """Role and text only; binary payloads are not sent to providers."""
        return ChatMessage(role=self.role.value, content=self.content)


class Conversation(BaseModel):
    """A thread of messages bound to one provider/model pair."""

    model_config = ConfigDict(validate_assignment=True)

    id: str = Field(default_factory=lambda: str(uuid4()))
    title: str = DEFAULT_TITLE
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)
    provider: Provider
    model: str

    @model_validator(mode="after")
    def _model_belongs_to_provider(self) -> "Conversation":
        if not is_known_model(self.provider, self.model):
            info = get_provider_info(self.provider)
            raise ValueError(
                f"Unknown model {self.model!r} for {info.display_name}. "
                f"Available models: {', '.join(info.available_models)}"
            )
        return self

    def touch(self) -> None:
        """Mark the conversation as updated now."""
        self.updated_at = utc_now()

    def title_from(self, text: str) -> None:
        """Derive the title from the first user message."""
        text = text.strip()
        if text:
            self.title = text[:TITLE_MAX_LENGTH]
