"""
Unit Tests for Currency Normalizer

Tests verify USD identity, conversion by rate and the zero-rate guard.
"""

from decimal import Decimal

import pytest

from academy_engine.calculators.currency import CurrencyNormalizer, to_usd
from academy_engine.models import Currency


@pytest.fixture
def normalizer():
    return CurrencyNormalizer()


class TestDollarIdentity:
    """Dollar amounts are not converted."""

    @pytest.mark.parametrize("name", ["Dollar", "dollar", "DOLLAR", "dólar", "Dólar", "DÓLAR"])
    def test_dollar_names_return_amount(self, name):
        assert to_usd(100, name, 35) == Decimal("100")

    def test_dollar_ignores_zero_rate(self):
        assert to_usd(100, "Dollar", 0) == Decimal("100")

    def test_name_with_padding_still_matches(self):
        assert to_usd(100, "  Dollar ", 7) == Decimal("100")

    def test_similar_names_are_not_dollars(self):
        """Only exact names count; 'Dollars' is another currency."""
        assert to_usd(100, "Dollars", 4) == Decimal("25")


class TestConversion:
    """Other currencies divide by the exchange rate."""

    def test_bolivar_at_35(self):
        """350 Bs / 35 = $10"""
        assert to_usd(350, "Bolivar", 35) == Decimal("10")

    def test_fractional_rate(self):
        assert to_usd(100, "Peso", Decimal("2.5")) == Decimal("40")

    def test_string_inputs_are_coerced(self):
        assert to_usd("350", "Bolivar", "35") == Decimal("10")

    def test_missing_currency_name_converts(self):
        assert to_usd(90, None, 3) == Decimal("30")


class TestRateGuard:
    """Non-positive or missing rates count as 1."""

    def test_zero_rate(self):
        assert to_usd(100, "Bolivar", 0) == Decimal("100")

    def test_negative_rate(self):
        assert to_usd(100, "Bolivar", -5) == Decimal("100")

    def test_vanishing_rate_counts_as_one(self):
        assert to_usd(1, "Bolivar", "1e-999999999") == Decimal("1")

    def test_large_amount_converts(self):
        assert to_usd("1e30", "Bolivar", 35) == Decimal("1e30") / Decimal("35")

    def test_missing_rate(self, normalizer):
        assert normalizer.to_usd(100, "Bolivar", None) == Decimal("100")

    def test_effective_rate(self, normalizer):
        assert normalizer.effective_rate(0) == Decimal("1")
        assert normalizer.effective_rate("abc") == Decimal("1")
        assert normalizer.effective_rate(36.5) == Decimal("36.5")


class TestCurrencyRecords:
    """Conversion using resolved currency records."""

    def test_iso_coded_usd_skips_conversion(self, normalizer):
        usd = Currency.from_dict({"_id": "c1", "name": "US Dollar", "isoCode": "USD"})

        assert normalizer.to_usd_for(100, usd, 40) == Decimal("100")

    def test_iso_code_overrides_name(self, normalizer):
        """A 'Dollar' named record with another ISO code is converted."""
        cad = Currency.from_dict({"_id": "c2", "name": "Dollar", "isoCode": "CAD"})

        assert normalizer.to_usd_for(135, cad, Decimal("1.35")) == Decimal("100")

    def test_normalize_forces_rate_for_dollars(self, normalizer):
        usd = Currency.from_dict({"_id": "c1", "name": "dólar"})

        result = normalizer.normalize(80, usd, 36)

        assert result.exchange_rate == Decimal("1")
        assert result.amount_in_usd == Decimal("80")
        assert result.currency_name == "dólar"

    def test_normalize_keeps_rate_for_other_currencies(self, normalizer):
        bs = Currency.from_dict({"_id": "c3", "name": "Bolivar"})

        result = normalizer.normalize(350, bs, 35)

        assert result.exchange_rate == Decimal("35")
        assert result.amount_in_usd == Decimal("10")

    def test_no_currency_converts_by_rate(self, normalizer):
        assert normalizer.to_usd_for(50, None, 5) == Decimal("10")


class TestConversionPurity:

    def test_same_inputs_same_result(self):
        assert to_usd(123, "Bolivar", 7) == to_usd(123, "Bolivar", 7)
