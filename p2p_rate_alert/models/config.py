"""
Configuration models for the system.
"""

import math
import os
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional

DEFAULT_MAX_SURPLUS_PERCENTAGE = 1.0
DEFAULT_TARGET_CURRENCY = "JPY"

BLACKLIST_CHANNELS = ("line", "bank")


@dataclass
class BlackList:
    """Advertiser nicknames excluded from notifications, per enforcement channel."""

    line: List[str] = field(default_factory=list)
    bank: List[str] = field(default_factory=list)

    def add(self, identity: str, channel: str) -> bool:
        """
        Add an identity to a channel.

        Returns:
            True if the identity was added, False if it was already listed.
        """
        if channel not in BLACKLIST_CHANNELS:
            raise ValueError(f"Unknown blacklist channel: {channel}")

        entries = getattr(self, channel)
        if identity in entries:
            return False

        entries.append(identity)
        return True

    def contains(self, identity: str) -> bool:
        # Channels are a plain union for exclusion purposes
        return identity in self.line or identity in self.bank

    def to_dict(self) -> Dict[str, List[str]]:
        return {"line": list(self.line), "bank": list(self.bank)}

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> "BlackList":
        """
        Build a blacklist from its serialised form.

        Raises:
            ValueError: If the root is not a mapping or a channel is not a list.
        """
        if data is None:
            data = {}
        if not isinstance(data, Mapping):
            raise ValueError("blackList must be a mapping of channel to nicknames")

        return cls(
            line=_unique_names("line", data.get("line")),
            bank=_unique_names("bank", data.get("bank")),
        )


def _unique_names(channel: str, values: Any) -> List[str]:
    if values is None:
        return []
    if not isinstance(values, list):
        raise ValueError(f"blackList.{channel} must be a list of nicknames")

    names: List[str] = []
    for value in values:
        name = str(value).strip()
        if name and name not in names:
            names.append(name)
    return names


@dataclass
class Configuration:
    """Operator-editable configuration, persisted to the config file."""

    black_list: BlackList = field(default_factory=BlackList)
    max_surplus_percentage: float = DEFAULT_MAX_SURPLUS_PERCENTAGE
    target_currency: str = DEFAULT_TARGET_CURRENCY

    def set_defaults(self) -> "Configuration":
        """Fill in defaults for absent values."""
        if not self.max_surplus_percentage:
            self.max_surplus_percentage = DEFAULT_MAX_SURPLUS_PERCENTAGE

        if not self.target_currency:
            self.target_currency = DEFAULT_TARGET_CURRENCY

        return self

    def validate(self) -> bool:
        """Validate configuration values."""
        if not isinstance(self.max_surplus_percentage, (int, float)) or isinstance(
            self.max_surplus_percentage, bool
        ):
            raise ValueError("maxSurplusPercentage must be a number")

        if not math.isfinite(self.max_surplus_percentage):
            raise ValueError("maxSurplusPercentage must be finite")

        if not isinstance(self.target_currency, str) or not self.target_currency.strip():
            raise ValueError("targetCurrency must be a non-empty string")

        if len(self.target_currency.strip()) != 3:
            raise ValueError("targetCurrency must be a 3-letter currency code")

        return True

    def to_dict(self) -> Dict[str, Any]:
        return {
            "blackList": self.black_list.to_dict(),
            "maxSurplusPercentage": self.max_surplus_percentage,
            "targetCurrency": self.target_currency,
        }

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> "Configuration":
        """Build a configuration from its serialised form, applying defaults."""
        data = data or {}
        surplus = data.get("maxSurplusPercentage") or 0
        currency = data.get("targetCurrency") or ""

        config = cls(
            black_list=BlackList.from_dict(data.get("blackList")),
            max_surplus_percentage=float(surplus),
            target_currency=str(currency).strip().upper(),
        )
        return config.set_defaults()


@dataclass
class RuntimeSettings:
    """Process-level settings supplied through the environment."""

    config_path: str
    telegram_bot_token: str
    notification_platform: str = "slack"
    slack_webhook_url: Optional[str] = None
    telegram_chat_id: Optional[str] = None
    authorized_users: List[str] = field(default_factory=list)
    forex_provider: str = "fastforex"
    forex_api_key: Optional[str] = None
    log_level: str = "INFO"
    log_dir: str = "logs"

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "RuntimeSettings":
        """Read settings from environment variables."""
        env = os.environ if environ is None else environ

        forex_provider = env.get("FOREX_PROVIDER", "fastforex").strip().lower()
        forex_key_var = (
            "ALPHAVANTAGE_API_KEY"
            if forex_provider == "alphavantage"
            else "FASTFOREX_API_KEY"
        )

        authorized = env.get("TELEGRAM_AUTHORIZED_USERS", "")

        return cls(
            config_path=env.get("CONFIG_FILEPATH", ""),
            telegram_bot_token=env.get("TELEGRAM_BOT_TOKEN", ""),
            notification_platform=env.get("NOTIFICATION_PLATFORM", "slack")
            .strip()
            .lower(),
            slack_webhook_url=env.get("SLACK_NOTIFICATION_WEBHOOK_URL") or None,
            telegram_chat_id=env.get("TELEGRAM_CHAT_ID") or None,
            authorized_users=[u.strip() for u in authorized.split(",") if u.strip()],
            forex_provider=forex_provider,
            forex_api_key=env.get(forex_key_var) or None,
            log_level=env.get("LOG_LEVEL", "INFO"),
            log_dir=env.get("LOG_DIR", "logs"),
        )

    def notification_config(self) -> Dict[str, str]:
        """Platform-specific configuration for the message dispatcher."""
        if self.notification_platform == "telegram":
            return {
                "bot_token": self.telegram_bot_token,
                "chat_id": self.telegram_chat_id or "",
            }
        return {"webhook_url": self.slack_webhook_url or ""}

    def validate(self) -> bool:
        """Validate that every required credential is present."""
        if not self.config_path:
            raise ValueError("env CONFIG_FILEPATH not set")

        if not self.telegram_bot_token:
            raise ValueError("env TELEGRAM_BOT_TOKEN not set")

        if not self.authorized_users:
            raise ValueError("env TELEGRAM_AUTHORIZED_USERS not set")

        if self.notification_platform == "slack":
            if not self.slack_webhook_url:
                raise ValueError("env SLACK_NOTIFICATION_WEBHOOK_URL not set")
            if not self.slack_webhook_url.startswith("https://hooks.slack.com/"):
                raise ValueError("Invalid Slack webhook URL format")
        elif self.notification_platform == "telegram":
            if not self.telegram_chat_id:
                raise ValueError("env TELEGRAM_CHAT_ID not set")
        else:
            raise ValueError(
                f"Unsupported notification platform: {self.notification_platform}"
            )

        if self.forex_provider not in ("fastforex", "alphavantage"):
            raise ValueError(f"Unsupported forex provider: {self.forex_provider}")

        if not self.forex_api_key:
            var = (
                "ALPHAVANTAGE_API_KEY"
                if self.forex_provider == "alphavantage"
                else "FASTFOREX_API_KEY"
            )
            raise ValueError(f"env {var} not set")

        return True
