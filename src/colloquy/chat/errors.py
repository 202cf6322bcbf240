class ConversationNotFoundError(KeyError):
    """No conversation exists with the given id."""

    def __init__(self, conversation_id: str):
        self.conversation_id = conversation_id
        super().__init__(conversation_id)

    def __str__(self) -> str:
        return f"Conversation not found: {self.conversation_id}"


class TurnInProgressError(RuntimeError):
    """A reply is still pending for this conversation."""

    def __init__(self, conversation_id: str):
        self.conversation_id = conversation_id
        super().__init__(f"A message is already being sent in conversation {conversation_id}")
