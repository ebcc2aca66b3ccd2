"""
Notification delivery outcome.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

MAX_ERROR_LENGTH = 500


@dataclass
class DeliveryResult:
    """Outcome of one notification attempt."""

    success: bool
    delivery_time: datetime
    error_message: Optional[str] = None

    @classmethod
    def delivered(cls) -> "DeliveryResult":
        return cls(success=True, delivery_time=datetime.now())

    @classmethod
    def failed(cls, error: str) -> "DeliveryResult":
        """A failed attempt; the error text is never empty and capped in length."""
        message = (error or "notification not delivered")[:MAX_ERROR_LENGTH]
        return cls(success=False, delivery_time=datetime.now(), error_message=message)
