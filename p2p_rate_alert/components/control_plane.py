"""
Control plane for operator commands.

This module processes the commands received from the messaging platform:
pausing and resuming rate polling, and editing the advertiser blacklist.
"""

import asyncio
import threading
from typing import Callable, Dict, Optional

from ..interfaces import IConfigurationManager
from ..models.command import BotCommand, CommandResult
from ..models.config import BLACKLIST_CHANNELS, Configuration
from ..utils.error_handling import CommandError
from ..utils.logging import get_logger

logger = get_logger("control.plane")

HELP_TEXT = (
    "Available commands:\n"
    "• `/pause` - stop fetching rates\n"
    "• `/resume` (or `/restart`) - start fetching rates again\n"
    "• `/blacklist` - show the blacklist\n"
    "• `/blacklist <nickname> <line|bank>` - blacklist an advertiser"
)


class PauseFlag:
    """Process-wide pause switch, safe to share between tasks and threads."""

    def __init__(self, paused: bool = False):
        self._paused = paused
        self._lock = threading.Lock()

    @property
    def paused(self) -> bool:
        with self._lock:
            return self._paused

    def pause(self) -> None:
        with self._lock:
            self._paused = True

    def resume(self) -> None:
        with self._lock:
            self._paused = False


def format_blacklist(config: Configuration) -> str:
    return (
        f"Line: {', '.join(config.black_list.line)}\n"
        f"Bank: {', '.join(config.black_list.bank)}"
    )


class ControlPlane:
    """Applies operator commands to the shared pause flag and configuration."""

    def __init__(self, config_manager: IConfigurationManager, pause_flag: PauseFlag):
        """
        Initialize the control plane.

        Args:
            config_manager: Configuration persistence collaborator
            pause_flag: Pause flag shared with the rate poller
        """
        self.config_manager = config_manager
        self.pause_flag = pause_flag

        self._handlers: Dict[str, Callable[[str], str]] = {
            "pause": self.pause,
            "resume": self.resume,
            "restart": self.resume,
            "blacklist": self.edit_blacklist,
            "help": lambda args: HELP_TEXT,
        }

    def pause(self, args: str = "") -> str:
        self.pause_flag.pause()
        logger.info("PAUSE activated")
        return "paused"

    def resume(self, args: str = "") -> str:
        self.pause_flag.resume()
        logger.info("PAUSE deactivated")
        return "restarted"

    def edit_blacklist(self, args: str = "") -> str:
        """
        Show or extend the blacklist.

        Args:
            args: Empty to list the blacklist, or ``"<nickname> <channel>"``
                where channel is ``line`` or ``bank``.

        Returns:
            The blacklist formatted as text.

        Raises:
            CommandError: If the arguments are malformed or the channel unknown.
        """
        config = self.config_manager.get_config()

        if not args or not args.strip():
            return format_blacklist(config)

        tokens = args.split()
        if len(tokens) < 2:
            raise CommandError("invalid arguments")

        identity, channel = tokens[0], tokens[1].lower()
        if channel not in BLACKLIST_CHANNELS:
            raise CommandError(f"method '{channel}' not supported")

        if config.black_list.add(identity, channel):
            self.config_manager.save_config(config)
            logger.info(
                "Advertiser blacklisted",
                extra={"advertiser": identity, "channel": channel},
            )
        else:
            logger.info(
                "Advertiser already blacklisted",
                extra={"advertiser": identity, "channel": channel},
            )

        return format_blacklist(config)

    async def process_command(self, command: BotCommand) -> Optional[CommandResult]:
        """
        Route a command to its handler.

        Returns:
            The command result, or None for commands this plane does not
            handle (those are logged and ignored).
        """
        handler = self._handlers.get(command.command)
        if handler is None:
            logger.info("Command not handled", extra={"command": command.command})
            return None

        # Handlers do blocking file I/O
        loop = asyncio.get_running_loop()
        try:
            reply = await loop.run_in_executor(None, handler, command.args)
        except CommandError as e:
            logger.warning(
                "Command rejected",
                extra={"command": command.command, "args": command.args, "error": str(e)},
            )
            return CommandResult(success=False, message=str(e))

        logger.info(
            f"Command executed: {command.command} by user {command.user_id}",
            extra={"command": command.command, "args": command.args},
        )
        return CommandResult(success=True, message=reply)
