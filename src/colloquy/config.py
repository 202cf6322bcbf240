"""Configuration constants and logging setup.

Centralizes magic numbers, default paths and log configuration.
"""

import logging
import os
from pathlib import Path

from rich.logging import RichHandler


class LogLevel:
    """Log level constants with numeric values for comparison.

    Standard logging hierarchy: DEBUG < INFO < WARNING < ERROR
    Lower numeric value = more verbose (shows more messages).
    """

    DEBUG = 10
    INFO = 20
    WARNING = 30
    ERROR = 40

    _names = {
        DEBUG: "DEBUG",
        INFO: "INFO",
        WARNING: "WARNING",
        ERROR: "ERROR",
    }

    _from_string = {
        "debug": DEBUG,
        "info": INFO,
        "warning": WARNING,
        "error": ERROR,
    }

    @classmethod
    def name(cls, level: int) -> str:
        """Get the name for a log level."""
        return cls._names.get(level, "UNKNOWN")

    @classmethod
    def from_string(cls, level_str: str) -> int:
        """Convert string to log level. Returns WARNING if invalid."""
        return cls._from_string.get(level_str.lower(), cls.WARNING)


# Request body parameters sent with every chat completion
DEFAULT_TEMPERATURE = 0.7
DEFAULT_MAX_TOKENS = 4096

# Version header required by the Anthropic messages API
ANTHROPIC_VERSION = "2023-06-01"

# HTTP timeout for a single chat completion call
DEFAULT_TIMEOUT_SECONDS = 120.0

# Conversation defaults
DEFAULT_TITLE = "New Conversation"
TITLE_MAX_LENGTH = 50  # Characters of the first user message used as title

# Characters of an error response body written to the log
MAX_LOGGED_BODY_LENGTH = 1000

# Chat display configuration
CHAT_MESSAGE_MAX_PREVIEW = 80  # Characters before truncating in listings


def colloquy_home() -> Path:
    """Directory holding the credential file and conversation database."""
    return Path(os.getenv("COLLOQUY_HOME", Path.home() / ".colloquy"))


def credentials_path() -> Path:
    """Path of the JSON credential file (override: COLLOQUY_CREDENTIALS)."""
    override = os.getenv("COLLOQUY_CREDENTIALS")
    return Path(override) if override else colloquy_home() / "credentials.json"


def database_path() -> Path:
    """Path of the SQLite conversation database (override: COLLOQUY_DB)."""
    override = os.getenv("COLLOQUY_DB")
    return Path(override) if override else colloquy_home() / "conversations.db"


def setup_logging(level: str | int = LogLevel.WARNING) -> None:
    """Configure the root ``colloquy`` logger with a Rich handler.

    Args:
        level: Numeric level or one of 'debug', 'info', 'warning', 'error'
    """
    if isinstance(level, str):
        level = LogLevel.from_string(level)

    logger = logging.getLogger("colloquy")
    logger.setLevel(level)
    if not any(isinstance(h, RichHandler) for h in logger.handlers):
        handler = RichHandler(show_path=False, rich_tracebacks=True)
        handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))
        logger.addHandler(handler)
    logger.debug("Log level set to %s", LogLevel.name(level))
