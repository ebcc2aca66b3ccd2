"""
Offer scanner.

Every reference rate taken from the rate handoff triggers exactly one scan:
the current offers are listed, scored against the rate, run through the
eligibility pipeline, and the eligible ones are dispatched as alerts.
"""

import asyncio
import math
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Optional

from ..interfaces import (
    IConfigurationManager,
    IErrorSink,
    IMessageDispatcher,
    IOfferSource,
)
from ..models.offer import Offer
from ..utils.error_handling import (
    DispatchError,
    ErrorCategory,
    FetchError,
    OfferParseError,
)
from ..utils.handoff import Handoff
from ..utils.logging import get_logger
from .alert_formatter import AlertFormatter
from .eligibility import EligibilityPipeline
from .spam_filter import SpamFilterStore

logger = get_logger("offer.scanner")

QUOTE_ASSET = "USDT"


def is_usable_rate(rate) -> bool:
    """A reference rate must be a finite, positive number."""
    return (
        isinstance(rate, (int, float))
        and not isinstance(rate, bool)
        and math.isfinite(rate)
        and rate > 0
    )


def compute_surplus(price: float, rate: float) -> float:
    """Percentage by which ``price`` exceeds ``rate``."""
    return (price / rate) * 100 - 100


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class ScanSummary:
    """Counters for one scan cycle."""

    rate: float
    offers_seen: int = 0
    notified: int = 0
    rejected: int = 0
    errors: int = 0


class OfferScanner:
    """Event-driven task turning reference rates into offer alerts."""

    COMPONENT = "offer.scanner"

    def __init__(
        self,
        offer_source: IOfferSource,
        dispatcher: IMessageDispatcher,
        config_manager: IConfigurationManager,
        pipeline: EligibilityPipeline,
        spam_filter: SpamFilterStore,
        error_sink: IErrorSink,
        asset: str = QUOTE_ASSET,
        formatter: Optional[AlertFormatter] = None,
        now: Callable[[], datetime] = _utc_now,
    ):
        self.offer_source = offer_source
        self.dispatcher = dispatcher
        self.config_manager = config_manager
        self.pipeline = pipeline
        self.spam_filter = spam_filter
        self.error_sink = error_sink
        self.asset = asset
        self.formatter = formatter or AlertFormatter()
        self._now = now

        self.cycles = 0

    async def scan(self, rate: float) -> ScanSummary:
        """
        Run one scan cycle against ``rate``.

        Offers are processed sequentially in listing order.
        """
        summary = ScanSummary(rate=rate)
        if not is_usable_rate(rate):
            summary.errors += 1
            await self.error_sink.report(
                self.COMPONENT,
                ErrorCategory.PARSING,
                ValueError(f"unusable reference rate {rate!r}"),
                {"rate": rate},
            )
            return summary

        loop = asyncio.get_running_loop()
        config = await loop.run_in_executor(None, self.config_manager.get_config)

        try:
            offers = await loop.run_in_executor(
                None, self.offer_source.list_offers, self.asset, config.target_currency
            )
        except Exception as e:
            summary.errors += 1
            if not isinstance(e, FetchError):
                e = FetchError(f"cannot list offers: {e}")
            await self.error_sink.report(
                self.COMPONENT,
                ErrorCategory.NETWORK,
                e,
                {"asset": self.asset, "fiat": config.target_currency},
            )
            return summary

        for offer in offers:
            summary.offers_seen += 1
            await self._process_offer(offer, rate, config, summary)

        self.cycles += 1
        logger.info(
            "Scan cycle completed",
            extra={
                "rate": rate,
                "offers_seen": summary.offers_seen,
                "notified": summary.notified,
                "rejected": summary.rejected,
                "errors": summary.errors,
            },
        )
        return summary

    async def _process_offer(self, offer: Offer, rate, config, summary: ScanSummary):
        try:
            price = offer.parse_price()
        except OfferParseError as e:
            summary.errors += 1
            await self.error_sink.report(
                self.COMPONENT,
                ErrorCategory.PARSING,
                e,
                {"advertiser": offer.advertiser, "adv_no": offer.adv_no},
            )
            return

        surplus = compute_surplus(price, rate)
        if not surplus <= config.max_surplus_percentage:
            summary.rejected += 1
            return

        now = self._now()
        result = self.pipeline.evaluate(offer, config.black_list, now)
        if not result.eligible:
            logger.debug(
                "Offer rejected",
                extra={
                    "advertiser": offer.advertiser,
                    "surplus": surplus,
                    "rejected_by": result.rejected_by,
                },
            )
            summary.rejected += 1
            return

        message = self.formatter.format_alert(
            offer, rate, price, surplus, result.usable_methods
        )

        loop = asyncio.get_running_loop()
        try:
            delivery = await loop.run_in_executor(
                None, self.dispatcher.send_message, message
            )
            error = None if delivery.success else DispatchError(
                delivery.error_message or "notification not delivered"
            )
        except Exception as e:
            error = DispatchError(f"cannot send notification: {e}")

        if error is not None:
            summary.errors += 1
            await self.error_sink.report(
                self.COMPONENT,
                ErrorCategory.MESSAGE_DELIVERY,
                error,
                {"advertiser": offer.advertiser, "adv_no": offer.adv_no},
            )
            return

        self.spam_filter.record(offer.advertiser, now.timestamp())
        summary.notified += 1
        logger.info(
            "Offer alert sent",
            extra={
                "advertiser": offer.advertiser,
                "surplus": surplus,
                "methods": result.usable_methods,
            },
        )

    async def run(self, rate_handoff: Handoff[float]) -> None:
        """Scan once per received rate until the handoff is closed."""
        logger.info("Offer scanner started", extra={"asset": self.asset})

        async for rate in rate_handoff:
            await self.scan(rate)

        logger.info("Offer scanner stopped", extra={"cycles": self.cycles})
