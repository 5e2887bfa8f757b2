"""Tests for currency conversion."""

from decimal import Decimal

import pytest
import requests
from fintrack.domain import currency as currency_module
from fintrack.domain.currency import FALLBACK_RATES, CurrencyService, format_currency
from fintrack.domain.errors import ValidationError


class FakeResponse:
    def __init__(self, payload, status_code=200):
        self.payload = payload
        self.status_code = status_code

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.exceptions.HTTPError(f"{self.status_code} Server Error")

    def json(self):
        return self.payload


@pytest.fixture
def rates_api(monkeypatch):
    calls = []

    def fake_get(url, timeout):
        calls.append((url, timeout))
        return FakeResponse({"base": "USD", "rates": {"EUR": 0.5, "UAH": 40}})

    monkeypatch.setattr(requests, "get", fake_get)
    return calls


def test_rates_are_fetched_and_cached(rates_api):
    service = CurrencyService(rates_url="http://rates.test/latest")

    rates = service.get_rates()
    service.get_rates()

    assert rates["USD"] == Decimal("1")
    assert rates["EUR"] == Decimal("0.5")
    assert rates_api == [("http://rates.test/latest", currency_module.REQUEST_TIMEOUT)]


def test_clear_cache_refetches(rates_api):
    service = CurrencyService()
    service.get_rates()
    service.clear_cache()
    service.get_rates()

    assert len(rates_api) == 2


def test_rates_url_from_environment(rates_api, monkeypatch):
    monkeypatch.setenv("FINTRACK_RATES_URL", "http://env.test/rates")
    CurrencyService().get_rates()
    assert rates_api[0][0] == "http://env.test/rates"


def test_fallback_when_provider_fails():
    # The autouse fixture makes every request fail
    service = CurrencyService()
    assert service.get_rates() == FALLBACK_RATES


def test_fallback_is_cached_after_failure(monkeypatch):
    calls = []

    def failing_get(url, timeout):
        calls.append(url)
        raise requests.exceptions.ConnectionError("offline")

    monkeypatch.setattr(requests, "get", failing_get)
    service = CurrencyService()
    for _ in range(5):
        service.convert_multiple_currencies(
            [(Decimal("10"), "EUR"), (Decimal("400"), "UAH"), (Decimal("5"), "GBP")], "USD"
        )

    assert len(calls) == 1


def test_fallback_is_retried_after_retry_window(monkeypatch):
    calls = []

    def failing_get(url, timeout):
        calls.append(url)
        raise requests.exceptions.ConnectionError("offline")

    monkeypatch.setattr(requests, "get", failing_get)
    clock = [1000.0]
    monkeypatch.setattr(currency_module.time, "monotonic", lambda: clock[0])
    service = CurrencyService()

    service.get_rates()
    clock[0] += currency_module.FALLBACK_RETRY_SECONDS - 1
    service.get_rates()
    assert len(calls) == 1

    clock[0] += 2
    service.get_rates()
    assert len(calls) == 2


def test_fallback_on_http_error(monkeypatch):
    monkeypatch.setattr(requests, "get", lambda url, timeout: FakeResponse({}, status_code=503))
    assert CurrencyService().get_rates()["UAH"] == FALLBACK_RATES["UAH"]


def test_fallback_on_malformed_payload(monkeypatch):
    monkeypatch.setattr(requests, "get", lambda url, timeout: FakeResponse({"unexpected": 1}))
    assert CurrencyService().get_rates() == FALLBACK_RATES


def test_convert_currency(rates_api):
    service = CurrencyService()

    assert service.convert_currency(Decimal("10"), "USD", "EUR") == Decimal("5.00")
    assert service.convert_currency(Decimal("100"), "UAH", "EUR") == Decimal("1.25")
    assert service.convert_currency(Decimal("7.5"), "eur", "EUR") == Decimal("7.5")


def test_convert_multiple_currencies(rates_api):
    total = CurrencyService().convert_multiple_currencies(
        [(Decimal("10"), "EUR"), (Decimal("400"), "UAH"), (Decimal("1"), "USD")], "USD"
    )
    assert total == Decimal("31.00")


def test_unknown_currency_raises(rates_api):
    with pytest.raises(ValidationError, match="No exchange rate available for XYZ"):
        CurrencyService().get_exchange_rate("XYZ", "USD")


@pytest.mark.parametrize(
    "amount,code,expected",
    [
        (Decimal("1234.5"), "UAH", "₴1234.50"),
        (Decimal("10"), "usd", "$10.00"),
        (Decimal("1234567.4"), "JPY", "¥1,234,567"),
        (Decimal("3.333"), "PLN", "PLN3.33"),
    ],
)
def test_format_currency(amount, code, expected):
    assert format_currency(amount, code) == expected
