"""
Reference exchange-rate clients.

This module provides the FastForex and Alpha Vantage rate sources. Both
make a single attempt per call and raise FetchError on any failure; the
caller decides when to try again.
"""

import logging
from typing import Any, Dict, Optional

import requests

from ..interfaces import IRateSource
from ..utils.error_handling import FetchError

logger = logging.getLogger(__name__)


class BaseRateClient(IRateSource):
    """Shared HTTP plumbing for rate clients."""

    def __init__(
        self,
        api_key: str,
        timeout: float = 10.0,
        session: Optional[requests.Session] = None,
    ):
        """
        Initialize rate client.

        Args:
            api_key: Provider API key
            timeout: Request timeout in seconds
            session: Optional pre-configured requests session
        """
        self.api_key = api_key
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({"accept": "application/json"})

    def _get_json(self, url: str, params: Dict[str, str]) -> Dict[str, Any]:
        try:
            response = self.session.get(url, params=params, timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            raise FetchError(f"cannot fetch rate: {e}") from e

        if response.status_code != 200:
            logger.error(
                f"Rate API status code {response.status_code}: {response.text[:200]}"
            )
            raise FetchError(f"rate API status code {response.status_code} != 200")

        try:
            payload = response.json()
        except ValueError as e:
            logger.error(f"Invalid rate API response: {response.text[:200]}")
            raise FetchError("invalid rate API response") from e

        if not isinstance(payload, dict):
            raise FetchError("invalid rate API response")

        return payload


class FastForexClient(BaseRateClient):
    """FastForex ``fetch-one`` rate source."""

    API_URL = "https://api.fastforex.io"

    def preferred_poll_interval(self) -> float:
        return 30.0

    def fetch_rate(self, base: str, quote: str) -> float:
        payload = self._get_json(
            f"{self.API_URL}/fetch-one",
            {"from": base, "to": quote, "api_key": self.api_key},
        )

        if payload.get("error"):
            raise FetchError(f"rate API returned error: {payload['error']}")

        rate = (payload.get("result") or {}).get(quote.upper())
        if not isinstance(rate, (int, float)) or isinstance(rate, bool):
            logger.error(f"Unexpected FastForex result: {payload}")
            raise FetchError("result is incorrect")

        return float(rate)


class AlphavantageClient(BaseRateClient):
    """Alpha Vantage ``CURRENCY_EXCHANGE_RATE`` rate source."""

    API_URL = "https://www.alphavantage.co/query"

    def preferred_poll_interval(self) -> float:
        return 12.0

    def fetch_rate(self, base: str, quote: str) -> float:
        payload = self._get_json(
            self.API_URL,
            {
                "function": "CURRENCY_EXCHANGE_RATE",
                "from_currency": base,
                "to_currency": quote,
                "apikey": self.api_key,
            },
        )

        if payload.get("Error Message"):
            raise FetchError(f"rate API returned error: {payload['Error Message']}")

        raw_rate = (payload.get("Realtime Currency Exchange Rate") or {}).get(
            "5. Exchange Rate"
        )
        try:
            return float(raw_rate)
        except (TypeError, ValueError) as e:
            logger.error(f"Unexpected Alpha Vantage result: {payload}")
            raise FetchError("cannot convert rate to float") from e


def create_rate_client(provider: str, api_key: str) -> IRateSource:
    """
    Create a rate client for the named provider.

    Raises:
        ValueError: If the provider is not supported.
    """
    provider = provider.lower()

    if provider == "fastforex":
        return FastForexClient(api_key)
    elif provider == "alphavantage":
        return AlphavantageClient(api_key)
    else:
        raise ValueError(f"Unsupported forex provider: {provider}")
