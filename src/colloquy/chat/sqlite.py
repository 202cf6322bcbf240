"""SQLite conversation store backend.

Provides persistent conversation storage using SQLite database.
Uses aiosqlite for async access.
"""

import logging
from datetime import datetime
from pathlib import Path

import aiosqlite
from pydantic import ValidationError

from .base import ConversationStore
from .errors import ConversationNotFoundError
from .models import ContentType, Conversation, Message, MessageRole

logger = logging.getLogger(__name__)

_CONVERSATION_COLUMNS = "id, title, created_at, updated_at, provider, model"
_MESSAGE_COLUMNS = (
    "id, conversation_id, role, content, content_type, "
    "image_data, audio_data, timestamp, metadata"
)


class SQLiteConversationStore(ConversationStore):
    """SQLite-backed conversation store.

    Stores conversations and messages in a SQLite database file.
    Supports persistent storage across sessions.
    """

    def __init__(self, path: str | Path = "./conversations.db"):
        self._db_path = Path(path)
        self._connection: aiosqlite.Connection | None = None

    async def connect(self) -> None:
        """Initialize database connection and schema."""
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._connection = await aiosqlite.connect(self._db_path)
        await self._connection.execute("PRAGMA foreign_keys = ON")
        await self._create_schema()

    async def _create_schema(self) -> None:
        """Create database tables."""
        await self._connection.execute("""
            CREATE TABLE IF NOT EXISTS conversations (
                id TEXT PRIMARY KEY,
                title TEXT NOT NULL,
                created_at TEXT NOT NULL,
                updated_at TEXT NOT NULL,
                provider TEXT NOT NULL,
                model TEXT NOT NULL
            )
        """)

        await self._connection.execute("""
            CREATE TABLE IF NOT EXISTS messages (
                seq INTEGER PRIMARY KEY AUTOINCREMENT,
                id TEXT NOT NULL UNIQUE,
                conversation_id TEXT NOT NULL,
                role TEXT NOT NULL,
                content TEXT NOT NULL,
                content_type TEXT NOT NULL DEFAULT 'text',
                image_data BLOB,
                audio_data BLOB,
                timestamp TEXT NOT NULL,
                metadata TEXT,
                FOREIGN KEY (conversation_id) REFERENCES conversations(id) ON DELETE CASCADE
            )
        """)

        await self._connection.execute("""
            CREATE INDEX IF NOT EXISTS idx_messages_conversation
            ON messages(conversation_id, timestamp)
        """)

        await self._connection.commit()

    async def disconnect(self) -> None:
        """Close database connection."""
        if self._connection:
            await self._connection.close()
            self._connection = None

    @staticmethod
    def _row_to_conversation(row: tuple) -> Conversation:
        conv_id, title, created_at, updated_at, provider, model = row
        return Conversation(
            id=conv_id,
            title=title,
            created_at=datetime.fromisoformat(created_at),
            updated_at=datetime.fromisoformat(updated_at),
            provider=provider,
            model=model,
        )

    @staticmethod
    def _row_to_message(row: tuple) -> Message:
        (msg_id, conv_id, role, content, content_type,
         image_data, audio_data, ts, metadata) = row
        return Message(
            id=msg_id,
            conversation_id=conv_id,
            role=MessageRole(role),
            content=content,
            content_type=ContentType(content_type),
            image_data=image_data,
            audio_data=audio_data,
            timestamp=datetime.fromisoformat(ts),
            metadata=metadata,
        )

    async def create_conversation(self, conversation: Conversation) -> Conversation:
        await self._connection.execute(
            f"INSERT INTO conversations ({_CONVERSATION_COLUMNS}) VALUES (?, ?, ?, ?, ?, ?)",
            (
                conversation.id,
                conversation.title,
                conversation.created_at.isoformat(),
                conversation.updated_at.isoformat(),
                conversation.provider.value,
                conversation.model,
            ),
        )
        await self._connection.commit()
        return conversation

    async def get_conversation(self, conversation_id: str) -> Conversation:
        async with self._connection.execute(
            f"SELECT {_CONVERSATION_COLUMNS} FROM conversations WHERE id = ?",
            (conversation_id,)
        ) as cursor:
            row = await cursor.fetchone()

        if row is None:
            raise ConversationNotFoundError(conversation_id)
        return self._row_to_conversation(row)

    async def list_conversations(self) -> list[Conversation]:
        async with self._connection.execute(
            f"SELECT {_CONVERSATION_COLUMNS} FROM conversations ORDER BY updated_at DESC"
        ) as cursor:
            rows = await cursor.fetchall()

        conversations = []
        for row in rows:
            try:
                conversations.append(self._row_to_conversation(row))
            except ValidationError as e:
                # Rows whose provider/model left the registry are skipped
                logger.warning("Skipping conversation %s: %s", row[0], e.errors()[0]["msg"])
        return conversations

    async def save_conversation(self, conversation: Conversation) -> None:
        cursor = await self._connection.execute("""
            UPDATE conversations
            SET title = ?, updated_at = ?, provider = ?, model = ?
            WHERE id = ?
        """, (
            conversation.title,
            conversation.updated_at.isoformat(),
            conversation.provider.value,
            conversation.model,
            conversation.id,
        ))
        await self._connection.commit()
        if cursor.rowcount == 0:
            raise ConversationNotFoundError(conversation.id)

    async def delete_conversation(self, conversation_id: str) -> None:
        await self._connection.execute(
            "DELETE FROM conversations WHERE id = ?",
            (conversation_id,)
        )
        await self._connection.commit()

    async def add_message(self, message: Message) -> Message:
        try:
            await self._connection.execute(
                f"INSERT INTO messages ({_MESSAGE_COLUMNS}) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)",
                (
                    message.id,
                    message.conversation_id,
                    message.role.value,
                    message.content,
                    message.content_type.value,
                    message.image_data,
                    message.audio_data,
                    message.timestamp.isoformat(),
                    message.metadata,
                ),
            )
        except aiosqlite.IntegrityError as e:
            if "FOREIGN KEY" in str(e):
                raise ConversationNotFoundError(message.conversation_id) from e
            raise
        await self._connection.commit()
        return message

    async def list_messages(self, conversation_id: str) -> list[Message]:
        async with self._connection.execute(
            f"""
            SELECT {_MESSAGE_COLUMNS}
            FROM messages
            WHERE conversation_id = ?
            ORDER BY timestamp ASC, seq ASC
            """,
            (conversation_id,)
        ) as cursor:
            rows = await cursor.fetchall()
        return [self._row_to_message(row) for row in rows]

    async def clear_messages(self, conversation_id: str) -> int:
        cursor = await self._connection.execute(
            "DELETE FROM messages WHERE conversation_id = ?",
            (conversation_id,)
        )
        await self._connection.commit()
        return cursor.rowcount

    @property
    def backend_type(self) -> str:
        return "sqlite"

    @property
    def db_path(self) -> Path:
        return self._db_path
