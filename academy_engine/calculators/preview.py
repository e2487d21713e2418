"""
Payout Preview Calculator

Totals the backend's monthly payout preview for a professor.
"""

from decimal import Decimal

from ..models import EnrollmentPreviewLine, PayoutPreview, PreviewTotals
from ..money import ZERO


class PayoutPreviewCalculator:
    """Computes preview totals: enrollments + bonuses - penalizations."""

    def totals(self, preview: PayoutPreview) -> PreviewTotals:
        """
        Grand Total = Σ enrollment subtotals
                    + Σ bonuses
                    - Σ penalizations
        """
        subtotal_enrollments = sum((self.line_subtotal(line) for line in preview.enrollments), ZERO)
        total_bonuses = sum(preview.bonuses, ZERO)
        total_penalizations = sum(preview.penalizations, ZERO)

        return PreviewTotals(
            subtotal_enrollments=subtotal_enrollments,
            total_bonuses=total_bonuses,
            total_penalizations=total_penalizations,
            grand_total=subtotal_enrollments + total_bonuses - total_penalizations,
        )

    def line_subtotal(self, line: EnrollmentPreviewLine) -> Decimal:
        """Backend subtotal when present, else hours seen × pay per hour."""
        if line.subtotal is not None:
            return line.subtotal
        return line.hours_seen * line.pay_per_hour
