"""
Tests for the exchange rate service.

The HTTP session and the clock are mocked; no network access.
"""

from decimal import Decimal
from unittest.mock import Mock

import pytest
import requests

from expense_ocr.services.exchange_rates import FALLBACK_RATES, ExchangeRateService


API_RATES = {'USD': 1.0, 'EUR': 0.5, 'GBP': 0.8}


class FakeClock:
    def __init__(self, now=1000.0):
        self.now = now

    def __call__(self):
        return self.now


def make_session(payload=None, error=None):
    session = Mock()
    if error is not None:
        session.get.side_effect = error
    else:
        response = Mock()
        response.json.return_value = payload if payload is not None else {'rates': API_RATES}
        session.get.return_value = response
    return session


@pytest.fixture
def clock():
    return FakeClock()


def make_service(session, clock):
    return ExchangeRateService(
        api_base="https://rates.example.com/latest/",
        cache_seconds=3600,
        timeout=5,
        session=session,
        clock=clock,
    )


class TestFetchRates:
    """Caching and fallback behaviour."""

    def test_fetches_usd_base(self, clock):
        session = make_session()
        service = make_service(session, clock)

        assert service.fetch_rates() == API_RATES
        session.get.assert_called_once_with("https://rates.example.com/latest/USD", timeout=5)

    def test_cache_hit(self, clock):
        session = make_session()
        service = make_service(session, clock)

        service.fetch_rates()
        clock.now += 3599
        service.fetch_rates()

        assert session.get.call_count == 1

    def test_cache_expires(self, clock):
        session = make_session()
        service = make_service(session, clock)

        service.fetch_rates()
        clock.now += 3600
        service.fetch_rates()

        assert session.get.call_count == 2

    def test_network_error_uses_fallback_without_caching(self, clock):
        session = make_session(error=requests.ConnectionError("down"))
        service = make_service(session, clock)

        assert service.fetch_rates() == FALLBACK_RATES
        service.fetch_rates()

        assert session.get.call_count == 2

    def test_http_error_uses_fallback(self, clock):
        session = make_session()
        session.get.return_value.raise_for_status.side_effect = requests.HTTPError("503")
        service = make_service(session, clock)

        assert service.fetch_rates() == FALLBACK_RATES

    @pytest.mark.parametrize("payload", [{}, {'rates': None}, {'rates': []}, {'rates': {}}, ['rates']])
    def test_invalid_payload_uses_fallback(self, clock, payload):
        service = make_service(make_session(payload=payload), clock)
        assert service.fetch_rates() == FALLBACK_RATES

    def test_non_json_body_uses_fallback(self, clock):
        session = make_session()
        session.get.return_value.json.side_effect = ValueError("not json")
        service = make_service(session, clock)

        assert service.fetch_rates() == FALLBACK_RATES

    def test_fallback_is_a_copy(self, clock):
        service = make_service(make_session(error=requests.Timeout()), clock)

        service.fetch_rates()['EUR'] = 99.0

        assert FALLBACK_RATES['EUR'] == 0.92

    def test_clear_cache_forces_refetch(self, clock):
        session = make_session()
        service = make_service(session, clock)

        service.fetch_rates()
        service.clear_cache()
        service.fetch_rates()

        assert session.get.call_count == 2


class TestConversion:
    """Converting receipt amounts to USD."""

    def test_usd_is_rounded_without_lookup(self, clock):
        session = make_session()
        service = make_service(session, clock)

        assert service.convert_to_usd(Decimal('10'), 'USD') == Decimal('10.00')
        assert service.get_rate('USD') == 1.0
        session.get.assert_not_called()

    def test_divides_by_rate(self, clock):
        service = make_service(make_session(), clock)
        assert service.convert_to_usd(Decimal('10.00'), 'EUR') == Decimal('20.00')

    def test_rounds_half_up_to_cents(self, clock):
        service = make_service(make_session(payload={'rates': {'XAA': 8}}), clock)
        # 0.1 / 8 = 0.0125
        assert service.convert_to_usd(Decimal('0.1'), 'XAA') == Decimal('0.01')
        # 0.2 / 8 = 0.025
        assert service.convert_to_usd(Decimal('0.2'), 'XAA') == Decimal('0.03')

    def test_unknown_currency_is_one_to_one(self, clock):
        service = make_service(make_session(), clock)

        assert service.convert_to_usd(Decimal('7.5'), 'XYZ') == Decimal('7.50')
        assert service.get_rate('XYZ') == 1.0

    def test_fallback_rate_when_api_down(self, clock):
        service = make_service(make_session(error=requests.ConnectionError()), clock)
        assert service.convert_to_usd(Decimal('50.50'), 'BRL') == Decimal('10.00')

    def test_accepts_float(self, clock):
        service = make_service(make_session(), clock)
        assert service.convert_to_usd(8.37, 'GBP') == Decimal('10.46')
