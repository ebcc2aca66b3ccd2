"""Eligibility pipeline deciding which offers may become notifications."""

import logging
from dataclasses import dataclass, field
from datetime import datetime, time
from typing import FrozenSet, List, Optional

from dateutil import tz

from ..models.config import BlackList
from ..models.offer import Offer, PaymentMethod
from .spam_filter import SpamFilterStore

logger = logging.getLogger(__name__)

OPERATING_TIMEZONE = tz.gettz("Asia/Tokyo")


class PaymentWindowRule:
    """Decides whether a payment method can be used at a given moment."""

    ALWAYS_ALLOWED: FrozenSet[str] = frozenset({"LINEPay"})
    WINDOWED: FrozenSet[str] = frozenset({"BANK"})

    # Bank transfers: Monday to Friday, after 06:00 and up to 14:30 local time
    WINDOW_START = time(6, 0)
    WINDOW_END = time(14, 30)

    def __init__(self, timezone=OPERATING_TIMEZONE):
        self.timezone = timezone

    def in_bank_window(self, now: datetime) -> bool:
        local = now.astimezone(self.timezone)
        if local.weekday() > 4:
            return False

        clock = local.time()
        # The closing minute is inclusive: 14:30:59 is still inside
        return (
            self.WINDOW_START < clock
            and time(clock.hour, clock.minute) <= self.WINDOW_END
        )

    def is_usable(self, method: PaymentMethod, now: datetime) -> bool:
        if method.identifier in self.ALWAYS_ALLOWED:
            return True

        if method.identifier in self.WINDOWED:
            return self.in_bank_window(now)

        return False

    def usable_methods(self, offer: Offer, now: datetime) -> List[str]:
        """Display names of the offer's methods usable at ``now``."""
        return [
            method.name
            for method in offer.payment_methods
            if self.is_usable(method, now)
        ]


@dataclass
class EligibilityResult:
    """Outcome of running an offer through the pipeline."""

    eligible: bool
    rejected_by: Optional[str] = None
    usable_methods: List[str] = field(default_factory=list)


class EligibilityPipeline:
    """
    Ordered checks an offer's advertiser must pass: spam, blacklist,
    payment window. The first failing check short-circuits the rest.
    """

    SPAM = "spam"
    BLACKLIST = "blacklist"
    PAYMENT_WINDOW = "payment_window"

    def __init__(
        self,
        spam_filter: SpamFilterStore,
        payment_rule: Optional[PaymentWindowRule] = None,
    ):
        self.spam_filter = spam_filter
        self.payment_rule = payment_rule or PaymentWindowRule()

    def evaluate(
        self, offer: Offer, black_list: BlackList, now: datetime
    ) -> EligibilityResult:
        """Evaluate an offer. ``now`` must be timezone-aware."""
        identity = offer.advertiser

        if self.spam_filter.is_suppressed(identity, now.timestamp()):
            logger.debug(f"Advertiser {identity} rejected: notified recently")
            return EligibilityResult(eligible=False, rejected_by=self.SPAM)

        if black_list.contains(identity):
            logger.debug(f"Advertiser {identity} rejected: blacklisted")
            return EligibilityResult(eligible=False, rejected_by=self.BLACKLIST)

        methods = self.payment_rule.usable_methods(offer, now)
        if not methods:
            logger.debug(
                f"Advertiser {identity} rejected: no payment method usable at "
                f"{now.astimezone(self.payment_rule.timezone).isoformat()}"
            )
            return EligibilityResult(eligible=False, rejected_by=self.PAYMENT_WINDOW)

        return EligibilityResult(eligible=True, usable_methods=methods)

    def is_eligible(self, offer: Offer, black_list: BlackList, now: datetime) -> bool:
        return self.evaluate(offer, black_list, now).eligible
