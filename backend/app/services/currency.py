"""Currency conversion with cached exchange rates and static fallbacks."""
import logging
import time
from decimal import Decimal, InvalidOperation
from typing import Callable, Optional, Union

import httpx

from app.config import settings

logger = logging.getLogger(__name__)

SUPPORTED_CURRENCIES = ("GBP", "EUR", "USD", "DKK")

CURRENCY_SYMBOLS = {
    "GBP": "£",
    "EUR": "€",
    "USD": "$",
    "DKK": "kr",
}

RateMatrix = dict[str, dict[str, Decimal]]
Amount = Union[Decimal, float, int]

# Approximate rates (May 2024), used whenever the rate service is unavailable
FALLBACK_RATES: RateMatrix = {
    "GBP": {"GBP": Decimal("1.0"), "EUR": Decimal("1.17"), "USD": Decimal("1.28"), "DKK": Decimal("8.72")},
    "EUR": {"GBP": Decimal("0.85"), "EUR": Decimal("1.0"), "USD": Decimal("1.09"), "DKK": Decimal("7.46")},
    "USD": {"GBP": Decimal("0.78"), "EUR": Decimal("0.92"), "USD": Decimal("1.0"), "DKK": Decimal("6.84")},
    "DKK": {"GBP": Decimal("0.11"), "EUR": Decimal("0.13"), "USD": Decimal("0.15"), "DKK": Decimal("1.0")},
}


class UnsupportedCurrencyError(ValueError):
    """Raised for currency codes outside SUPPORTED_CURRENCIES."""


def check_currency(code: Optional[str]) -> str:
    normalized = (code or "").upper()
    if normalized not in SUPPORTED_CURRENCIES:
        raise UnsupportedCurrencyError(f"Unsupported currency: {code}")
    return normalized


def format_currency(amount: Amount, currency: str) -> str:
    """Format ``amount`` with the currency symbol, e.g. ``£1,234.50``."""
    symbol = CURRENCY_SYMBOLS.get(currency.upper(), f"{currency.upper()} ")
    return f"{symbol}{Decimal(str(amount)):,.2f}"


def _parse_rate(value) -> Optional[Decimal]:
    """Positive finite rate from a service payload value, else None."""
    if isinstance(value, bool) or not isinstance(value, (int, float, str)):
        return None
    try:
        rate = Decimal(str(value))
    except (InvalidOperation, TypeError, ValueError):
        return None
    if not rate.is_finite() or rate <= 0:
        return None
    return rate


class ExchangeRateCache:
    """Rate matrix memoized for ``ttl_seconds``.

    The clock is injectable so expiry can be tested without sleeping.
    """

    def __init__(self, ttl_seconds: Optional[int] = None, clock: Callable[[], float] = time.monotonic):
        self.ttl_seconds = ttl_seconds if ttl_seconds is not None else settings.EXCHANGE_RATE_CACHE_TTL_SECONDS
        self.clock = clock
        self.timestamp: Optional[float] = None
        self.rates: Optional[RateMatrix] = None

    def get(self) -> Optional[RateMatrix]:
        if self.rates is None or self.timestamp is None:
            return None
        if self.clock() - self.timestamp >= self.ttl_seconds:
            return None
        return self.rates

    def set(self, rates: RateMatrix) -> None:
        self.rates = rates
        self.timestamp = self.clock()

    def clear(self) -> None:
        self.rates = None
        self.timestamp = None


class CurrencyNormalizer:
    """Converts amounts between the supported currencies.

    Rates come from the external rate service, one request per base
    currency. A failed base request falls back to the static row for that
    base, and a missing target rate falls back per entry, so ``convert``
    always returns a value.
    """

    def __init__(
        self,
        cache: Optional[ExchangeRateCache] = None,
        api_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.cache = cache or ExchangeRateCache()
        self.api_url = api_url or settings.EXCHANGE_RATE_API_URL
        self.timeout = timeout or settings.EXCHANGE_RATE_TIMEOUT_SECONDS
        self.transport = transport

    async def get_rates(self) -> RateMatrix:
        """Full source -> target rate matrix, from cache when fresh."""
        cached = self.cache.get()
        if cached is not None:
            return cached

        rates: RateMatrix = {}
        fetched_any = False
        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            for base in SUPPORTED_CURRENCIES:
                row = await self._fetch_row(client, base)
                if row is None:
                    rates[base] = dict(FALLBACK_RATES[base])
                else:
                    fetched_any = True
                    rates[base] = row

        # A complete outage is not cached so the next call retries the service
        if fetched_any:
            self.cache.set(rates)
        else:
            logger.warning("Exchange rate service unavailable, using fallback rates")
        return rates

    async def _fetch_row(self, client: httpx.AsyncClient, base: str) -> Optional[dict[str, Decimal]]:
        try:
            response = await client.get(self.api_url, params={"base": base})
            response.raise_for_status()
            data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"Error fetching exchange rates for {base}: {e}")
            return None

        live = data.get("rates") if isinstance(data, dict) else None
        if not isinstance(live, dict) or not live:
            logger.error(f"Exchange rate response for {base} has no rates")
            return None

        row = {}
        for target in SUPPORTED_CURRENCIES:
            value = _parse_rate(live.get(target))
            if value is None:
                if target != base and target in live:
                    logger.warning(f"Ignoring malformed {base}->{target} rate: {live[target]!r}")
                value = FALLBACK_RATES[base][target]
            row[target] = value
        row[base] = Decimal("1")
        return row

    async def rate(self, from_currency: str, to_currency: str) -> Decimal:
        source = check_currency(from_currency)
        target = check_currency(to_currency)
        if source == target:
            return Decimal("1")
        rates = await self.get_rates()
        return rates.get(source, {}).get(target) or FALLBACK_RATES[source][target]

    async def convert(self, amount: Amount, from_currency: str, to_currency: str) -> Amount:
        """Convert ``amount``; same-currency conversion returns it unchanged."""
        if check_currency(from_currency) == check_currency(to_currency):
            return amount
        return Decimal(str(amount)) * await self.rate(from_currency, to_currency)


_default_normalizer: Optional[CurrencyNormalizer] = None


def get_currency_normalizer() -> CurrencyNormalizer:
    """Dependency returning the process-wide normalizer (and its rate cache)."""
    global _default_normalizer
    if _default_normalizer is None:
        _default_normalizer = CurrencyNormalizer()
    return _default_normalizer
