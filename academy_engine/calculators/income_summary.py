"""
Income Summarizer

Groups incomes by the payment method they were received through.
"""

from decimal import Decimal

from ..models import Income, IncomeSummaryItem
from .currency import CurrencyNormalizer


class IncomeSummarizer:
    """Builds per-payment-method totals in USD."""

    def __init__(self, normalizer: CurrencyNormalizer | None = None):
        self.normalizer = normalizer or CurrencyNormalizer()

    def summarize(self, incomes: list[Income]) -> list[IncomeSummaryItem]:
        """Return one summary item per payment method, in first-seen order."""
        groups: dict[str, IncomeSummaryItem] = {}

        for income in incomes:
            item = groups.get(income.payment_method_id)
            if item is None:
                item = IncomeSummaryItem(
                    payment_method_id=income.payment_method_id,
                    payment_method_name=income.payment_method_name,
                )
                groups[income.payment_method_id] = item

            item.total_amount += self.amount_in_usd(income)
            item.number_of_incomes += 1

        return list(groups.values())

    def amount_in_usd(self, income: Income) -> Decimal:
        # Older records were saved without amountInDollars (or with 0)
        if income.amount_in_usd:
            return income.amount_in_usd
        return self.normalizer.to_usd_for(income.amount, income.currency, income.exchange_rate)
