"""
Telegram bot handler for operator commands.

This module receives the pause, resume and blacklist commands over the
Telegram Bot API, forwards them to the control plane and replies with the
result.
"""

import asyncio
from typing import List, Optional

from telegram import Update
from telegram.ext import (
    Application,
    CommandHandler,
    ContextTypes,
    MessageHandler,
    filters,
)

from ..models.command import BotCommand
from ..utils.logging import get_logger
from .control_plane import ControlPlane

logger = get_logger("control.plane")


class TelegramBotHandler:
    """Polls Telegram for commands and routes them to the control plane."""

    COMMANDS = ("pause", "resume", "restart", "blacklist", "help")

    def __init__(
        self,
        bot_token: str,
        authorized_users: List[str],
        control_plane: ControlPlane,
    ):
        """
        Initialize Telegram bot handler.

        Args:
            bot_token: Telegram bot token
            authorized_users: User IDs allowed to issue commands; an empty
                list denies every user
            control_plane: Command processor
        """
        self.bot_token = bot_token
        self.authorized_users = set(authorized_users)
        self.control_plane = control_plane

        self.application = Application.builder().token(bot_token).build()

        self.is_polling = False
        self._lock = asyncio.Lock()

        if not self.authorized_users:
            logger.warning("No authorized users configured, all commands will be refused")

        self._setup_handlers()

    def _setup_handlers(self) -> None:
        for command in self.COMMANDS:
            self.application.add_handler(CommandHandler(command, self._handle_command))
        self.application.add_handler(CommandHandler("start", self._handle_start))

        # Registered last so it only sees commands nobody else handled
        self.application.add_handler(
            MessageHandler(filters.COMMAND, self._handle_unknown)
        )

    async def start_polling(self) -> None:
        """Start polling for messages from Telegram."""
        if self.is_polling:
            logger.warning("Bot is already polling")
            return

        try:
            self.is_polling = True
            logger.info("Starting Telegram bot polling...")

            await self.application.initialize()
            await self.application.start()
            await self.application.updater.start_polling()

            logger.info("Telegram bot polling started successfully")

        except Exception as e:
            logger.error(f"Error starting bot polling: {e}")
            self.is_polling = False
            raise

    async def stop_polling(self) -> None:
        """Stop polling for messages."""
        if not self.is_polling:
            return

        try:
            self.is_polling = False
            logger.info("Stopping Telegram bot polling...")

            if self.application.updater:
                await self.application.updater.stop()

            await self.application.stop()
            await self.application.shutdown()

            logger.info("Telegram bot polling stopped")

        except Exception as e:
            logger.error(f"Error stopping bot polling: {e}")

    def is_authorized(self, user_id: str) -> bool:
        if user_id in self.authorized_users:
            return True

        logger.warning(f"Unauthorized access attempt from user: {user_id}")
        return False

    async def _handle_start(
        self, update: Update, context: ContextTypes.DEFAULT_TYPE
    ) -> None:
        """Handle /start command."""
        await self.process_update(update, "help", [])

    async def _handle_command(
        self, update: Update, context: ContextTypes.DEFAULT_TYPE
    ) -> None:
        if not update.message or not update.message.text:
            return

        command = update.message.text.split()[0][1:].split("@")[0].lower()
        await self.process_update(update, command, context.args or [])

    async def _handle_unknown(
        self, update: Update, context: ContextTypes.DEFAULT_TYPE
    ) -> None:
        text = update.message.text if update.message else ""
        logger.info("Unknown command ignored", extra={"text": text})

    async def process_update(
        self, update: Update, command: str, args: List[str]
    ) -> Optional[str]:
        """
        Authorize the sender, run the command and reply.

        Returns:
            The reply text, or None when nothing was sent.
        """
        if not update.effective_user or not update.effective_chat:
            logger.warning("Received update without user or chat information")
            return None

        user_id = str(update.effective_user.id)
        chat_id = str(update.effective_chat.id)

        if not self.is_authorized(user_id):
            reply = "❌ User not authorized to use this bot"
            await self.send_response(chat_id, reply)
            return reply

        bot_command = BotCommand(
            command=command,
            args=" ".join(args),
            user_id=user_id,
            chat_id=chat_id,
        )

        # Commands are applied one at a time
        async with self._lock:
            try:
                result = await self.control_plane.process_command(bot_command)
            except Exception as e:
                logger.error(f"Error processing command {command}: {e}", exc_info=True)
                reply = "❌ An error occurred processing your command"
                await self.send_response(chat_id, reply)
                return reply

        if result is None:
            return None

        reply = result.message if result.success else f"❌ {result.message}"
        await self.send_response(chat_id, reply)
        return reply

    async def send_response(self, chat_id: str, text: str) -> bool:
        """
        Send response message to chat.

        Returns:
            True if message was sent successfully
        """
        try:
            await self.application.bot.send_message(
                chat_id=int(chat_id), text=text, parse_mode="Markdown"
            )
            logger.debug(f"Sent response to chat {chat_id}")
            return True

        except Exception as e:
            logger.error(f"Error sending response to chat {chat_id}: {e}")

            # Nicknames may contain Markdown characters; retry as plain text
            try:
                await self.application.bot.send_message(chat_id=int(chat_id), text=text)
                return True
            except Exception as e2:
                logger.error(f"Error sending fallback response: {e2}")
                return False
