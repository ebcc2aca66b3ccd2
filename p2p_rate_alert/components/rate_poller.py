"""
Reference rate poller.

Fetches the USD rate for the configured target currency on a fixed cadence
and hands each sample to the offer scanner.
"""

import asyncio
from typing import Optional

from ..interfaces import IConfigurationManager, IErrorSink, IRateSource
from ..utils.error_handling import ErrorCategory, FetchError
from ..utils.handoff import Handoff
from ..utils.logging import get_logger
from .control_plane import PauseFlag
from .offer_scanner import is_usable_rate

logger = get_logger("rate.poller")

BASE_CURRENCY = "USD"
MIN_POLL_INTERVAL_SECONDS = 60.0


class RatePoller:
    """Periodic task producing the current reference rate."""

    COMPONENT = "rate.poller"

    def __init__(
        self,
        rate_source: IRateSource,
        config_manager: IConfigurationManager,
        pause_flag: PauseFlag,
        rate_handoff: Handoff[float],
        error_sink: IErrorSink,
        base_currency: str = BASE_CURRENCY,
        min_interval: float = MIN_POLL_INTERVAL_SECONDS,
    ):
        """
        Initialize the poller.

        Args:
            rate_source: Reference rate provider
            config_manager: Source of the target currency, read every tick
            pause_flag: Shared pause flag toggled by the control plane
            rate_handoff: Channel to the offer scanner
            error_sink: Receiver of fetch failures
            base_currency: Currency the rate is quoted from
            min_interval: Lower bound for the polling interval in seconds
        """
        self.rate_source = rate_source
        self.config_manager = config_manager
        self.pause_flag = pause_flag
        self.rate_handoff = rate_handoff
        self.error_sink = error_sink
        self.base_currency = base_currency
        self.interval = max(min_interval, rate_source.preferred_poll_interval())

        self.polls = 0
        self.failures = 0

    async def poll_once(self) -> Optional[float]:
        """
        Run one tick.

        Returns:
            The published rate, or None when paused or the fetch failed.
        """
        if self.pause_flag.paused:
            logger.debug("Paused, skipping rate fetch")
            return None

        loop = asyncio.get_running_loop()
        config = await loop.run_in_executor(None, self.config_manager.get_config)
        quote = config.target_currency
        self.polls += 1

        try:
            rate = await loop.run_in_executor(
                None, self.rate_source.fetch_rate, self.base_currency, quote
            )
            if not is_usable_rate(rate):
                raise FetchError(
                    f"unusable rate {rate!r} for {self.base_currency}/{quote}"
                )
        except Exception as e:
            self.failures += 1
            if not isinstance(e, FetchError):
                e = FetchError(f"cannot fetch rate: {e}")
            await self.error_sink.report(
                self.COMPONENT,
                ErrorCategory.NETWORK,
                e,
                {"base": self.base_currency, "quote": quote},
            )
            return None

        logger.info(
            "Rate fetched",
            extra={"base": self.base_currency, "quote": quote, "rate": rate},
        )
        await self.rate_handoff.send(rate)
        return rate

    async def run(self, shutdown_event: asyncio.Event) -> None:
        """Poll immediately, then once per interval until shutdown."""
        logger.info(
            "Rate poller started", extra={"interval_seconds": self.interval}
        )

        await self.poll_once()

        while not shutdown_event.is_set():
            try:
                await asyncio.wait_for(shutdown_event.wait(), timeout=self.interval)
            except asyncio.TimeoutError:
                await self.poll_once()

        logger.info(
            "Rate poller stopped",
            extra={"polls": self.polls, "failures": self.failures},
        )
