"""
Calculators Package

Provides the pricing, payout, currency and report calculation components.
"""

from .currency import CurrencyNormalizer, to_usd
from .income_summary import IncomeSummarizer
from .payout import PayoutAggregator
from .preview import PayoutPreviewCalculator
from .pricing import EnrollmentPricingCalculator, calculate_pricing
from .report import AccountingReportCalculator

__all__ = [
    "EnrollmentPricingCalculator",
    "PayoutAggregator",
    "CurrencyNormalizer",
    "PayoutPreviewCalculator",
    "IncomeSummarizer",
    "AccountingReportCalculator",
    "calculate_pricing",
    "to_usd",
]
