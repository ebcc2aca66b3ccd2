"""
P2P offer models.
"""

import math
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from ..utils.error_handling import OfferParseError


@dataclass
class PaymentMethod:
    """A payment method accepted by an offer."""

    identifier: str
    name: str


@dataclass
class Offer:
    """A single P2P advertisement, fetched fresh every scan cycle."""

    advertiser: str
    price: str
    surplus_amount: str
    payment_methods: List[PaymentMethod] = field(default_factory=list)
    adv_no: Optional[str] = None

    def parse_price(self) -> float:
        """Quoted price as a finite float."""
        try:
            price = float(self.price)
        except (TypeError, ValueError) as e:
            raise OfferParseError(
                f"cannot parse price {self.price!r} of advertiser '{self.advertiser}'"
            ) from e

        if not math.isfinite(price):
            raise OfferParseError(
                f"price {self.price!r} of advertiser '{self.advertiser}' is not finite"
            )
        return price

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "Offer":
        """Build an offer from one entry of the Binance P2P search response."""
        adv = data.get("adv") or {}
        advertiser = data.get("advertiser") or {}

        methods = [
            PaymentMethod(
                identifier=method.get("identifier") or "",
                name=method.get("tradeMethodName") or method.get("identifier") or "",
            )
            for method in adv.get("tradeMethods") or []
            if method
        ]

        return cls(
            advertiser=advertiser.get("nickName") or "",
            price=adv.get("price") or "",
            surplus_amount=adv.get("surplusAmount") or "",
            payment_methods=methods,
            adv_no=adv.get("advNo"),
        )
