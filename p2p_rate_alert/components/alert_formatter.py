"""
Alert message formatting.
"""

from typing import List

from ..models.offer import Offer


class AlertFormatter:
    """Builds the notification text for an attractive offer."""

    TEMPLATE = (
        "advertiser '{advertiser}' has a good offer.\n"
        "\tFX rate: {rate:f}\n"
        "\tOffer rate: {price:f}\n"
        "\tDistance: {surplus:f}\n"
        "\tAmount: {amount}\n"
        "\tMethods: {methods}"
    )

    def format_alert(
        self,
        offer: Offer,
        rate: float,
        price: float,
        surplus: float,
        usable_methods: List[str],
    ) -> str:
        """
        Format an alert message.

        Args:
            offer: The eligible offer
            rate: Reference exchange rate
            price: Parsed offer price
            surplus: Surplus of the offer over the reference rate, in percent
            usable_methods: Display names of the currently usable payment methods

        Returns:
            Notification text
        """
        return self.TEMPLATE.format(
            advertiser=offer.advertiser,
            rate=rate,
            price=price,
            surplus=surplus,
            amount=offer.surplus_amount,
            methods=", ".join(usable_methods),
        )
