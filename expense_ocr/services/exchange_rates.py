"""
Exchange rate service for converting receipt amounts to USD.

Rates are USD-based and cached in memory. When the rate API is unreachable
or returns garbage, an approximate fixed table is used instead.
"""

import logging
import time
from decimal import Decimal, ROUND_HALF_UP
from typing import Callable, Dict, Optional, Union

import requests

from expense_ocr.config import settings

logger = logging.getLogger(__name__)

# Approximate USD-base rates, used when the API is unavailable
FALLBACK_RATES: Dict[str, float] = {
    'USD': 1.0,
    'EUR': 0.92,
    'GBP': 0.79,
    'BRL': 5.05,
    'CAD': 1.36,
    'MXN': 17.15,
    'JPY': 149.50,
    'CNY': 7.24,
    'INR': 83.12,
    'AUD': 1.52,
}

CENTS = Decimal('0.01')


class ExchangeRateService:
    """Fetches and caches exchange rates relative to USD."""

    def __init__(
        self,
        api_base: Optional[str] = None,
        cache_seconds: Optional[int] = None,
        timeout: Optional[float] = None,
        session: Optional[requests.Session] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.api_base = (api_base or settings.EXCHANGE_RATE_API_BASE).rstrip('/')
        self.cache_seconds = settings.EXCHANGE_RATE_CACHE_SECONDS if cache_seconds is None else cache_seconds
        self.timeout = settings.EXCHANGE_RATE_TIMEOUT if timeout is None else timeout
        self.session = session or requests.Session()
        self._clock = clock
        self._cached_rates: Optional[Dict[str, float]] = None
        self._cached_at = 0.0

    def fetch_rates(self) -> Dict[str, float]:
        """
        Return USD-base rates, from cache when still fresh.

        Never raises; falls back to FALLBACK_RATES on any API failure.
        Fallback rates are not cached, so the next call retries the API.
        """
        now = self._clock()
        if self._cached_rates is not None and now - self._cached_at < self.cache_seconds:
            return self._cached_rates

        url = f"{self.api_base}/USD"
        try:
            response = self.session.get(url, timeout=self.timeout)
            response.raise_for_status()
            rates = response.json().get('rates')
        except (requests.RequestException, ValueError, AttributeError) as e:
            logger.warning("Failed to fetch exchange rates, using fallback table", extra={
                "url": url,
                "error": str(e),
            })
            return dict(FALLBACK_RATES)

        if not isinstance(rates, dict) or not rates:
            logger.warning("Invalid response from exchange rate API, using fallback table", extra={
                "url": url,
            })
            return dict(FALLBACK_RATES)

        self._cached_rates = rates
        self._cached_at = now
        logger.info("Exchange rates refreshed", extra={"currencies": len(rates)})

        return rates

    def get_rate(self, currency: str) -> float:
        """Rate of ``currency`` per 1 USD; 1.0 for USD or an unknown code."""
        if currency == 'USD':
            return 1.0
        rate = self.fetch_rates().get(currency)
        return float(rate) if rate else 1.0

    def convert_to_usd(self, amount: Union[Decimal, float], currency: str) -> Decimal:
        """
        Convert an amount in ``currency`` to USD, rounded to cents.

        Unknown currencies convert 1:1.
        """
        amount = Decimal(str(amount))
        if currency == 'USD':
            return amount.quantize(CENTS, rounding=ROUND_HALF_UP)

        rate = self.fetch_rates().get(currency)
        if not rate:
            logger.warning("Exchange rate not found, using 1:1", extra={"currency": currency})
            return amount.quantize(CENTS, rounding=ROUND_HALF_UP)

        return (amount / Decimal(str(rate))).quantize(CENTS, rounding=ROUND_HALF_UP)

    def clear_cache(self) -> None:
        """Drop cached rates so the next lookup hits the API."""
        self._cached_rates = None
        self._cached_at = 0.0
