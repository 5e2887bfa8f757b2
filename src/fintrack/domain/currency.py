"""Currency conversion backed by a public exchange-rate provider."""

import logging
import os
import time
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, Optional

import requests

from fintrack.domain.errors import ValidationError

logger = logging.getLogger(__name__)

DEFAULT_RATES_URL = "https://api.frankfurter.app/latest?from=USD"
CACHE_SECONDS = 3600
FALLBACK_RETRY_SECONDS = 300
REQUEST_TIMEOUT = 10

# Units per 1 USD, used when the provider cannot be reached
FALLBACK_RATES: dict[str, Decimal] = {
    "USD": Decimal("1"),
    "EUR": Decimal("0.92"),
    "GBP": Decimal("0.79"),
    "JPY": Decimal("149.50"),
    "CAD": Decimal("1.36"),
    "AUD": Decimal("1.53"),
    "CHF": Decimal("0.88"),
    "CNY": Decimal("7.24"),
    "UAH": Decimal("36.50"),
}

CURRENCY_SYMBOLS = {
    "USD": "$",
    "EUR": "€",
    "GBP": "£",
    "JPY": "¥",
    "CAD": "C$",
    "AUD": "A$",
    "CHF": "CHF",
    "CNY": "¥",
    "UAH": "₴",
}

_CENTS = Decimal("0.01")


class CurrencyService:
    """Converts amounts between currencies through USD.

    Rates are fetched at most once per hour; when the provider fails the
    static FALLBACK_RATES table is used instead and the fetch is retried
    after FALLBACK_RETRY_SECONDS.
    """

    def __init__(self, rates_url: Optional[str] = None, cache_seconds: int = CACHE_SECONDS):
        self.rates_url = rates_url or os.environ.get("FINTRACK_RATES_URL", DEFAULT_RATES_URL)
        self.cache_seconds = cache_seconds
        self._rates: Optional[dict[str, Decimal]] = None
        self._fetched_at = 0.0
        self._ttl = cache_seconds

    def get_rates(self) -> dict[str, Decimal]:
        """Return the USD based rate table."""
        if self._rates is not None and time.monotonic() - self._fetched_at < self._ttl:
            return self._rates

        try:
            response = requests.get(self.rates_url, timeout=REQUEST_TIMEOUT)
            response.raise_for_status()
            payload = response.json()
            rates = {"USD": Decimal("1")}
            rates.update({code: Decimal(str(value)) for code, value in payload["rates"].items()})
        except (requests.exceptions.RequestException, ValueError, KeyError, TypeError) as e:
            logger.warning("Failed to fetch exchange rates, using fallback rates: %s", e)
            self._rates = dict(FALLBACK_RATES)
            self._fetched_at = time.monotonic()
            self._ttl = min(self.cache_seconds, FALLBACK_RETRY_SECONDS)
            return self._rates

        self._rates = rates
        self._fetched_at = time.monotonic()
        self._ttl = self.cache_seconds
        logger.debug("Fetched %d exchange rates", len(rates))
        return rates

    def clear_cache(self) -> None:
        self._rates = None
        self._fetched_at = 0.0

    def get_exchange_rate(self, from_currency: str, to_currency: str = "USD") -> Decimal:
        """Rate to multiply an amount in ``from_currency`` by to get ``to_currency``.

        Raises:
            ValidationError: If either currency has no known rate
        """
        from_currency = from_currency.upper()
        to_currency = to_currency.upper()
        if from_currency == to_currency:
            return Decimal("1")

        rates = self.get_rates()
        for code in (from_currency, to_currency):
            if code not in rates:
                raise ValidationError(f"No exchange rate available for {code}")
        return rates[to_currency] / rates[from_currency]

    def convert_currency(
        self, amount: Decimal, from_currency: str, to_currency: str = "USD"
    ) -> Decimal:
        """Convert an amount, rounded to cents."""
        if from_currency.upper() == to_currency.upper():
            return Decimal(amount)
        rate = self.get_exchange_rate(from_currency, to_currency)
        return (Decimal(amount) * rate).quantize(_CENTS, rounding=ROUND_HALF_UP)

    def convert_multiple_currencies(
        self, items: Iterable[tuple[Decimal, str]], to_currency: str = "USD"
    ) -> Decimal:
        """Sum (amount, currency) pairs in ``to_currency``."""
        total = Decimal("0")
        for amount, currency in items:
            if currency.upper() == to_currency.upper():
                total += Decimal(amount)
            else:
                total += Decimal(amount) * self.get_exchange_rate(currency, to_currency)
        return total.quantize(_CENTS, rounding=ROUND_HALF_UP)


def format_currency(amount: Decimal, currency: str) -> str:
    """Format an amount with its currency symbol, e.g. ``₴1234.50``.

    JPY is shown without decimals and with thousands separators.
    """
    currency = currency.upper()
    symbol = CURRENCY_SYMBOLS.get(currency, currency)
    amount = Decimal(amount)
    if currency == "JPY":
        formatted = f"{amount.quantize(Decimal('1'), rounding=ROUND_HALF_UP):,}"
    else:
        formatted = f"{amount.quantize(_CENTS, rounding=ROUND_HALF_UP)}"
    return f"{symbol}{formatted}"
