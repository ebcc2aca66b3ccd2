"""
Binance P2P offer listing client.
"""

import logging
from typing import List, Optional

import requests

from ..interfaces import IOfferSource
from ..models.offer import Offer
from ..utils.error_handling import FetchError

logger = logging.getLogger(__name__)


class BinanceP2PClient(IOfferSource):
    """Lists buy-side advertisements from the Binance P2P search endpoint."""

    P2P_HOST = "https://p2p.binance.com"
    SEARCH_PATH = "/bapi/c2c/v2/friendly/c2c/adv/search"

    def __init__(
        self,
        rows: int = 20,
        trade_type: str = "BUY",
        timeout: float = 15.0,
        session: Optional[requests.Session] = None,
    ):
        """
        Initialize the client.

        Args:
            rows: Number of advertisements requested (first page only)
            trade_type: Binance trade side
            timeout: Request timeout in seconds
            session: Optional pre-configured requests session
        """
        self.rows = rows
        self.trade_type = trade_type
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({"Content-Type": "application/json"})

    def list_offers(self, asset: str, fiat: str) -> List[Offer]:
        payload = {
            "proMerchantAds": False,
            "page": 1,
            "rows": self.rows,
            "asset": asset,
            "fiat": fiat,
            "tradeType": self.trade_type,
        }

        try:
            response = self.session.post(
                f"{self.P2P_HOST}{self.SEARCH_PATH}", json=payload, timeout=self.timeout
            )
        except requests.exceptions.RequestException as e:
            logger.error(f"ListP2PAdvs error: {e}")
            raise FetchError(f"ListP2PAdvs error: {e}") from e

        if response.status_code != 200:
            logger.error(f"ListP2PAdvs status code != 200: {response.text[:200]}")
            raise FetchError(
                f"ListP2PAdvs status code {response.status_code} != 200"
            )

        try:
            body = response.json()
        except ValueError as e:
            logger.error(f"ListP2PAdvs invalid resp: {response.text[:200]}")
            raise FetchError("ListP2PAdvs invalid resp") from e

        if not isinstance(body, dict) or not body.get("success"):
            logger.error(f"ListP2PAdvs no success: {str(body)[:200]}")
            raise FetchError("ListP2PAdvs no success")

        return [Offer.from_api(item) for item in body.get("data") or [] if item]
