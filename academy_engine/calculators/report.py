"""
Accounting Report Calculator

Fills in the computed columns of a period's accounting report and
reconciles the system balance against the real total counted by hand.

General report, class rows (status 1):
    Teacher   = hours seen × pay per hour
    Bespoke   = hours seen × price per hour - Teacher
    Remaining = amount in USD + balance - Teacher - Bespoke

Any other row pays its USD amount to the professor and leaves no balance.

Special report rows:
    Total     = payment
    Remaining = amount in USD - payment
"""

from decimal import Decimal

from ..models import (
    CLASS_ITEM,
    NORMAL_LINE,
    SPECIAL_SECTION,
    SUBSTITUTE_LINE,
    AccountingReport,
    ProfessorReport,
    ProfessorTotals,
    ReportLine,
    ReportLineTotals,
    ReportTotals,
    SpecialLineTotals,
    SpecialReportLine,
)
from ..money import ZERO


class AccountingReportCalculator:
    """Computes report columns, subtotals and the balance available to substitutes."""

    def line_totals(self, line: ReportLine) -> ReportLineTotals:
        if line.status != CLASS_ITEM:
            return ReportLineTotals(teacher_pay=line.amount_in_usd)

        teacher_pay = line.hours_seen * line.pay_per_hour
        bespoke = line.price_per_hour * line.hours_seen - teacher_pay
        return ReportLineTotals(
            teacher_pay=teacher_pay,
            bespoke=bespoke,
            balance_remaining=line.amount_in_usd + line.balance - teacher_pay - bespoke,
        )

    def special_line_totals(self, line: SpecialReportLine) -> SpecialLineTotals:
        return SpecialLineTotals(
            total=line.payment,
            balance_remaining=line.amount_in_usd - line.payment,
        )

    def professor_totals(self, professor: ProfessorReport) -> ProfessorTotals:
        lines = [self.line_totals(line) for line in professor.lines]
        return ProfessorTotals(
            professor_id=professor.professor_id,
            professor_name=professor.professor_name,
            lines=lines,
            subtotal=_sum_line_totals(lines),
        )

    def totals(self, report: AccountingReport) -> ReportTotals:
        """
        System Total = Σ general balance remaining
                     + Σ special balance remaining
                     + excess
        Difference   = System Total - Real Total
        """
        professors = [self.professor_totals(p) for p in report.general]
        grand = _sum_line_totals([p.subtotal for p in professors])

        if report.special is None:
            special_lines = None
            special_subtotal = SpecialLineTotals()
        else:
            special_lines = [self.special_line_totals(line) for line in report.special]
            special_subtotal = SpecialLineTotals(
                total=sum((s.total for s in special_lines), ZERO),
                balance_remaining=sum((s.balance_remaining for s in special_lines), ZERO),
            )

        system_total = grand.balance_remaining + special_subtotal.balance_remaining + report.excess_total

        return ReportTotals(
            professors=professors,
            grand=grand,
            special_lines=special_lines,
            special_subtotal=special_subtotal,
            excess_total=report.excess_total,
            system_total=system_total,
            real_total=report.real_total,
            difference=system_total - report.real_total,
        )

    def substitute_balance(
        self,
        report: AccountingReport,
        enrollment_id: str | None,
        initial_balance: Decimal = ZERO,
        exclude: tuple[int, int] | None = None,
    ) -> Decimal:
        """
        Balance an enrollment still has for substitute classes.

        The base is the remaining balance of the enrollment's last normal row
        (a special row wins over general ones), or ``initial_balance`` when
        that is 0. Every substitute row of the enrollment is then charged,
        except the one at ``exclude`` = (section index, row index), where the
        special section is SPECIAL_SECTION. Never negative.
        """
        if not enrollment_id:
            return ZERO

        base = ZERO
        for professor in report.general:
            for line in professor.lines:
                if line.enrollment_id == enrollment_id and line.line_type == NORMAL_LINE:
                    base = line.amount_in_usd + line.balance - line.hours_seen * line.price_per_hour
        for line in report.special or []:
            if line.enrollment_id == enrollment_id and line.line_type == NORMAL_LINE:
                base = line.amount_in_usd - line.payment

        if base == 0:
            base = initial_balance

        for section, professor in enumerate(report.general):
            for index, line in enumerate(professor.lines):
                if self._is_charged_substitute(line, enrollment_id, (section, index), exclude):
                    base -= line.hours_seen * line.price_per_hour
        for index, line in enumerate(report.special or []):
            if self._is_charged_substitute(line, enrollment_id, (SPECIAL_SECTION, index), exclude):
                base -= line.payment

        return max(ZERO, base)

    def _is_charged_substitute(self, line, enrollment_id, position, exclude) -> bool:
        return (
            line.enrollment_id == enrollment_id
            and line.line_type == SUBSTITUTE_LINE
            and position != exclude
        )


def _sum_line_totals(totals: list[ReportLineTotals]) -> ReportLineTotals:
    return ReportLineTotals(
        teacher_pay=sum((t.teacher_pay for t in totals), ZERO),
        bespoke=sum((t.bespoke for t in totals), ZERO),
        balance_remaining=sum((t.balance_remaining for t in totals), ZERO),
    )
