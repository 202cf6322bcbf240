from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field


class ChatMessage(BaseModel):
    """Represents a chat message in a conversation."""

    model_config = ConfigDict(frozen=True)

    role: Literal["user", "assistant", "system"] = Field(
        description="Role of the message sender: 'user', 'assistant', or 'system'"
    )
    content: str = Field(description="Content of the message")


class ChatRequest(BaseModel):
    """Provider-specific HTTP request for one chat completion."""

    model_config = ConfigDict(frozen=True)

    method: Literal["POST"] = "POST"
    url: str = Field(description="Provider chat-completion endpoint")
    headers: dict[str, str] = Field(description="Content type and authentication headers")
    body: dict[str, Any] = Field(description="JSON request body")

    def redacted_headers(self) -> dict[str, str]:
        """Headers with secret values masked, for logging."""
        secret = {"authorization", "x-api-key"}
        return {k: ("***" if k.lower() in secret else v) for k, v in self.headers.items()}
