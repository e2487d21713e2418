"""
ACADEMY BILLING ENGINE
Enrollment pricing, payout totals and currency conversion for the academy dashboard.
"""

from .calculators import calculate_pricing, to_usd
from .processor import AcademyProcessor

__all__ = ['AcademyProcessor', 'calculate_pricing', 'to_usd']
