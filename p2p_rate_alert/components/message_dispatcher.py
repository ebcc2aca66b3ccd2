"""
Message dispatching components for the P2P rate alert system.

This module delivers notification text through Slack incoming webhooks or
the Telegram Bot API. Each call makes a single delivery attempt and reports
the outcome as a DeliveryResult.
"""

import logging
from abc import abstractmethod
from datetime import datetime
from typing import Any, Dict

import requests

from ..interfaces import IMessageDispatcher
from ..models.delivery import DeliveryResult

logger = logging.getLogger(__name__)


class BaseMessageDispatcher(IMessageDispatcher):
    """Base class for message dispatchers."""

    def __init__(self, timeout: float = 30.0):
        """
        Initialize base dispatcher.

        Args:
            timeout: Request timeout in seconds
        """
        self.timeout = timeout
        self.session = requests.Session()

    def send_message(self, message: str) -> DeliveryResult:
        """
        Send a message once.

        Args:
            message: Notification text

        Returns:
            DeliveryResult: Result of the delivery attempt
        """
        start_time = datetime.now()

        try:
            self._send_message(message)
        except Exception as e:
            result = DeliveryResult.failed(f"{type(e).__name__}: {e}")
            logger.error(f"Failed to send message: {result.error_message}")
            return result

        result = DeliveryResult.delivered()
        logger.info(
            f"Message sent successfully in "
            f"{(result.delivery_time - start_time).total_seconds():.2f}s"
        )
        return result

    @abstractmethod
    def _send_message(self, message: str) -> None:
        """
        Platform-specific message sending implementation.

        Raises:
            Exception: If sending fails
        """

    @abstractmethod
    def test_connection(self) -> bool:
        """Test connection to the messaging platform."""


class SlackDispatcher(BaseMessageDispatcher):
    """Slack incoming-webhook dispatcher."""

    def __init__(self, webhook_url: str, timeout: float = 30.0):
        """
        Initialize Slack dispatcher.

        Args:
            webhook_url: Slack webhook URL
            timeout: Request timeout in seconds
        """
        super().__init__(timeout)
        self.webhook_url = webhook_url

    def _send_message(self, message: str) -> None:
        response = self.session.post(
            self.webhook_url, json={"text": message}, timeout=self.timeout
        )
        response.raise_for_status()

        # Slack returns "ok" for successful webhook calls
        if response.text.strip() != "ok":
            raise Exception(f"Slack webhook error: {response.text}")

        logger.info("Message sent to Slack webhook")

    def test_connection(self) -> bool:
        """
        Check that the webhook host is reachable.

        Posting would publish a message, so this only checks reachability.
        """
        try:
            response = self.session.head(self.webhook_url, timeout=10)
        except requests.exceptions.RequestException as e:
            logger.error(f"Failed to reach Slack webhook: {e}")
            return False

        # The webhook answers HEAD with 4xx when the route exists
        reachable = response.status_code < 500
        if not reachable:
            logger.error(f"Slack webhook test failed: HTTP {response.status_code}")
        return reachable


class TelegramDispatcher(BaseMessageDispatcher):
    """Telegram Bot API message dispatcher."""

    def __init__(self, bot_token: str, chat_id: str, timeout: float = 30.0):
        """
        Initialize Telegram dispatcher.

        Args:
            bot_token: Telegram bot token
            chat_id: Target chat ID for messages
            timeout: Request timeout in seconds
        """
        super().__init__(timeout)
        self.bot_token = bot_token
        self.chat_id = chat_id
        self.base_url = f"https://api.telegram.org/bot{bot_token}"

    def _send_message(self, message: str) -> None:
        payload = {
            "chat_id": self.chat_id,
            "text": message,
            "disable_web_page_preview": True,
        }

        response = self.session.post(
            f"{self.base_url}/sendMessage", json=payload, timeout=self.timeout
        )
        response.raise_for_status()

        result = response.json()
        if not result.get("ok"):
            raise Exception(
                f"Telegram API error: {result.get('description', 'Unknown error')}"
            )

        logger.info(f"Message sent to Telegram chat {self.chat_id}")

    def test_connection(self) -> bool:
        """Test connection to Telegram Bot API."""
        try:
            response = self.session.get(f"{self.base_url}/getMe", timeout=10)
            response.raise_for_status()

            result = response.json()
            if result.get("ok"):
                bot_info = result.get("result", {})
                logger.info(
                    f"Connected to Telegram bot: {bot_info.get('username', 'Unknown')}"
                )
                return True

            logger.error(
                f"Telegram API error: {result.get('description', 'Unknown error')}"
            )
            return False

        except Exception as e:
            logger.error(f"Failed to connect to Telegram: {e}")
            return False


class MessageDispatcherFactory:
    """Factory for creating message dispatchers."""

    @staticmethod
    def create_dispatcher(platform: str, config: Dict[str, Any]) -> IMessageDispatcher:
        """
        Create a message dispatcher for the specified platform.

        Args:
            platform: Platform name (slack, telegram)
            config: Platform-specific configuration

        Raises:
            ValueError: If platform is not supported or config is invalid
        """
        platform = platform.lower()

        if platform == "slack":
            if not config.get("webhook_url"):
                raise ValueError("Missing required Slack config: webhook_url")

            return SlackDispatcher(
                webhook_url=config["webhook_url"],
                timeout=config.get("timeout", 30.0),
            )

        elif platform == "telegram":
            for key in ("bot_token", "chat_id"):
                if not config.get(key):
                    raise ValueError(f"Missing required Telegram config: {key}")

            return TelegramDispatcher(
                bot_token=config["bot_token"],
                chat_id=config["chat_id"],
                timeout=config.get("timeout", 30.0),
            )

        else:
            raise ValueError(f"Unsupported messaging platform: {platform}")
