"""
Currency Normalizer

Converts income amounts to their USD equivalent.
"""

from decimal import Decimal

from ..currencies import is_usd_name
from ..models import Currency, CurrencyAmount
from ..money import ONE, to_decimal


class CurrencyNormalizer:
    """Computes USD-equivalent amounts from an amount, currency and rate.

    The same function serves the live display and the submit-time payload,
    so the two values cannot drift apart.
    """

    def effective_rate(self, exchange_rate) -> Decimal:
        """The rate used as divisor: non-positive or missing rates count as 1."""
        rate = to_decimal(exchange_rate)
        return rate if rate > 0 else ONE

    def to_usd(self, amount, currency_name: str | None, exchange_rate) -> Decimal:
        """
        amountInUSD = amount                    if the currency is dollars
                    = amount / effective_rate   otherwise
        """
        return self._convert(to_decimal(amount), is_usd_name(currency_name), exchange_rate)

    def to_usd_for(self, amount, currency: Currency | None, exchange_rate) -> Decimal:
        """Same as to_usd, using the currency's resolved identity flag."""
        is_usd = currency is not None and currency.is_usd
        return self._convert(to_decimal(amount), is_usd, exchange_rate)

    def rate_for(self, currency: Currency | None, exchange_rate) -> Decimal:
        """The rate the form should hold: forced to 1 for dollars."""
        if currency is not None and currency.is_usd:
            return ONE
        return to_decimal(exchange_rate)

    def normalize(self, amount, currency: Currency | None, exchange_rate) -> CurrencyAmount:
        return CurrencyAmount(
            amount=to_decimal(amount),
            currency_name=currency.name if currency else "",
            exchange_rate=self.rate_for(currency, exchange_rate),
            amount_in_usd=self.to_usd_for(amount, currency, exchange_rate),
        )

    def _convert(self, amount: Decimal, is_usd: bool, exchange_rate) -> Decimal:
        if is_usd:
            return amount
        return amount / self.effective_rate(exchange_rate)


def to_usd(amount, currency_name: str | None, exchange_rate) -> Decimal:
    return CurrencyNormalizer().to_usd(amount, currency_name, exchange_rate)
