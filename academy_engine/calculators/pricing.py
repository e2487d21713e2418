"""
Enrollment Pricing Calculator

Selects the per-student price tier from the enrollment headcount.
"""

from ..models import PricingResult, PricingTier
from ..money import ZERO


class EnrollmentPricingCalculator:
    """Derives enrollment type and total cost from headcount and plan pricing."""

    def calculate(self, student_count: int, tier: PricingTier) -> PricingResult:
        """
        Calculate pricing for a roster of ``student_count`` students.

        1 student  -> single tier
        2 students -> couple tier
        3+         -> group tier
        0          -> price 0, type "group"

        total_amount = price_per_student × student_count
        """
        enrollment_type = self.enrollment_type_for(student_count)
        if student_count > 0:
            price_per_student = tier.price_for(enrollment_type)
        else:
            price_per_student = ZERO

        return PricingResult(
            price_per_student=price_per_student,
            enrollment_type=enrollment_type,
            total_amount=price_per_student * student_count,
        )

    def enrollment_type_for(self, student_count: int) -> str:
        if student_count == 1:
            return "single"
        if student_count == 2:
            return "couple"
        # Empty rosters fall through to "group" as well
        return "group"


def calculate_pricing(student_count: int, tier: PricingTier) -> PricingResult:
    return EnrollmentPricingCalculator().calculate(student_count, tier)
