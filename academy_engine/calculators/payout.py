"""
Payout Aggregator

Totals a professor payout from class-hour and bonus line items, net of discount.
"""

from decimal import Decimal

from ..models import BonusLineItem, ClassLineItem, PayoutLineItem, PayoutSummary
from ..money import ZERO, to_decimal


class PayoutAggregator:
    """Computes payout totals and the submittable subset of line items."""

    def line_total(self, hours_taught, pay_per_hour) -> Decimal:
        """Total for a class item: hours × rate, with unset fields as 0."""
        return to_decimal(hours_taught) * to_decimal(pay_per_hour)

    def summarize(self, items: list[PayoutLineItem], discount) -> PayoutSummary:
        """
        Summarize all line items currently in the form.

        Subtotal = Σ class item totals + Σ bonus amounts
        Total    = Subtotal - Discount

        Every call recomputes from scratch over all items. The total is not
        floored at zero; a discount above the subtotal yields a negative total.
        """
        subtotal = ZERO
        for item in items:
            subtotal += self.item_value(item)

        discount = to_decimal(discount)
        return PayoutSummary(
            subtotal=subtotal,
            discount=discount,
            total=subtotal - discount,
        )

    def item_value(self, item: PayoutLineItem) -> Decimal:
        if isinstance(item, ClassLineItem):
            return item.total
        return item.amount

    def is_submittable(self, item: PayoutLineItem) -> bool:
        """Class items need hours taught; bonuses need a description."""
        if isinstance(item, ClassLineItem):
            return item.hours_taught > 0
        if isinstance(item, BonusLineItem):
            return bool(item.description)
        return False

    def filter_for_submission(self, items: list[PayoutLineItem]) -> list[PayoutLineItem]:
        """Drop incomplete items from the payload. The form keeps them."""
        return [item for item in items if self.is_submittable(item)]
