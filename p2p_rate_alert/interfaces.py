"""
Protocol interfaces for the P2P rate alert system.

This module defines the narrow capability interfaces of every external
collaborator, so production clients and test doubles are interchangeable.
"""

from typing import TYPE_CHECKING, Any, Dict, List, Optional, Protocol

from .models.delivery import DeliveryResult
from .models.offer import Offer

if TYPE_CHECKING:
    from .models.config import Configuration
    from .utils.error_handling import ErrorCategory


class IRateSource(Protocol):
    """Protocol for reference exchange-rate providers."""

    def fetch_rate(self, base: str, quote: str) -> float:
        """Fetch the current rate for base/quote. Raises FetchError on failure."""
        ...

    def preferred_poll_interval(self) -> float:
        """Minimum polling interval the provider asks for, in seconds."""
        ...


class IOfferSource(Protocol):
    """Protocol for P2P offer listings."""

    def list_offers(self, asset: str, fiat: str) -> List[Offer]:
        """List current offers. Raises FetchError on failure."""
        ...


class IMessageDispatcher(Protocol):
    """Protocol for dispatching notification messages."""

    def send_message(self, message: str) -> DeliveryResult:
        """Send a message through the configured messaging platform."""
        ...

    def test_connection(self) -> bool:
        """Test connection to the messaging platform."""
        ...


class IConfigurationManager(Protocol):
    """Protocol for loading and persisting the operator configuration."""

    def get_config(self) -> "Configuration":
        """Read the current configuration."""
        ...

    def save_config(self, config: "Configuration") -> None:
        """Persist the configuration (best-effort)."""
        ...


class IErrorSink(Protocol):
    """Protocol for the shared error sink."""

    async def report(
        self,
        component: str,
        category: "ErrorCategory",
        error: BaseException,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        """Report an error."""
        ...


class ICommandListener(Protocol):
    """Protocol for the inbound operator command channel."""

    async def start_polling(self) -> None:
        """Start listening for commands."""
        ...

    async def stop_polling(self) -> None:
        """Stop listening for commands."""
        ...
