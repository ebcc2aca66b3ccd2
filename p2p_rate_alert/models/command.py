"""
Operator command models.

Commands arrive from the messaging platform as a name plus a free-text
argument string; results are sent back as the reply.
"""

from dataclasses import dataclass


@dataclass
class BotCommand:
    """Represents a parsed operator command."""

    command: str
    args: str
    user_id: str
    chat_id: str


@dataclass
class CommandResult:
    """Result of a command execution."""

    success: bool
    message: str
