"""
Output Builder

Constructs backend request payloads and API breakdown responses from form state.
"""

from datetime import datetime, timezone

from .calculators import CurrencyNormalizer, PayoutAggregator
from .forms import EnrollmentForm, IncomeForm, PayoutForm
from .models import (
    STUDENT_FIELDS,
    ClassLineItem,
    IncomeSummaryItem,
    PreviewTotals,
    PricingResult,
    ReportLineTotals,
    ReportTotals,
    SpecialLineTotals,
    StudentEntry,
)
from .money import fmt, to_money


def date_string_to_iso(value: str | None) -> str:
    """Convert a YYYY-MM-DD form date to ISO-8601 at UTC midnight.

    Values that already carry a time are passed through. Empty values
    become the current time.
    """
    if not value:
        return _iso(datetime.now(timezone.utc))
    if "T" in value:
        return value
    parsed = datetime.strptime(value[:10], "%Y-%m-%d").replace(tzinfo=timezone.utc)
    return _iso(parsed)


def _iso(moment: datetime) -> str:
    return moment.strftime("%Y-%m-%dT%H:%M:%S.") + f"{moment.microsecond // 1000:03d}Z"


class PayloadBuilder:
    """Builds backend payloads and the calculation breakdowns returned by the API."""

    def __init__(self):
        self.normalizer = CurrencyNormalizer()
        self.aggregator = PayoutAggregator()

    # -------------------------------------------------------------------------
    # Enrollments
    # -------------------------------------------------------------------------

    def enrollment_payload(self, form: EnrollmentForm, is_create: bool = True) -> dict:
        """Build the create/update enrollment request body."""
        pricing = form.pricing
        payload = {
            "planId": form.plan.plan_id if form.plan else "",
            "studentIds": [self._student_payload(s) for s in form.students],
            "professorId": form.professor_id,
            "enrollmentType": pricing.enrollment_type,
            "scheduledDays": [{"day": day} for day in form.scheduled_days],
            "purchaseDate": date_string_to_iso(form.purchase_date),
            "startDate": date_string_to_iso(form.start_date),
            "pricePerStudent": to_money(pricing.price_per_student),
            "totalAmount": to_money(pricing.total_amount),
            "language": form.language,
            "lateFee": to_money(form.late_fee) if form.late_fee is not None else 0,
        }

        if form.alias:
            payload["alias"] = form.alias

        if form.penalization_money is not None:
            payload["penalizationMoney"] = to_money(form.penalization_money)

        if is_create:
            payload["status"] = 1
        elif form.status is not None:
            payload["status"] = form.status

        return payload

    def _student_payload(self, student: StudentEntry) -> dict:
        """Only answered questions are sent, trimmed."""
        payload = {"studentId": student.student_id}
        for attr, key in STUDENT_FIELDS:
            value = student.answer(attr).strip()
            if value:
                payload[key] = value
        if student.willing_homework is not None:
            payload["willingHomework"] = student.willing_homework
        return payload

    def pricing_breakdown(self, student_count: int, pricing: PricingResult) -> dict:
        """Build the pricing section with value and description for each field."""
        price = to_money(pricing.price_per_student)
        total = to_money(pricing.total_amount)
        return {
            "student_count": {
                "value": student_count,
                "description": f"{student_count} student(s) on the roster",
            },
            "enrollment_type": {
                "value": pricing.enrollment_type,
                "description": (
                    f"{student_count} student(s) -> {pricing.enrollment_type} tier"
                    if student_count > 0
                    else "Empty roster; no tier applies"
                ),
            },
            "price_per_student": {
                "value": price,
                "description": f"Plan {pricing.enrollment_type} price: {fmt(price)}",
            },
            "total_amount": {
                "value": total,
                "description": f"{fmt(price)} × {student_count} = {fmt(total)}",
            },
        }

    # -------------------------------------------------------------------------
    # Payouts
    # -------------------------------------------------------------------------

    def payout_payload(self, form: PayoutForm) -> dict:
        """Build the create payout request body from submittable items only."""
        return {
            "professorId": form.professor_id,
            "month": form.month,
            "details": [self._detail_payload(item) for item in form.submittable_items],
            "discount": to_money(form.discount),
            "note": form.note or None,
            "paymentMethodId": form.payment_method_id,
            "paidAt": date_string_to_iso(form.paid_at) if form.paid_at else None,
        }

    def _detail_payload(self, item) -> dict:
        if isinstance(item, ClassLineItem):
            return {
                "enrollmentId": item.enrollment_id,
                "hoursTaught": to_money(item.hours_taught),
                "totalPerStudent": to_money(item.total),
                "amount": None,
                "description": None,
                "status": item.status,
            }
        return {
            "enrollmentId": None,
            "hoursTaught": None,
            "totalPerStudent": None,
            "amount": to_money(item.amount),
            "description": item.description,
            "status": item.status,
        }

    def payout_breakdown(self, form: PayoutForm) -> dict:
        """Build the payout summary with per-item totals."""
        summary = form.summary
        subtotal = to_money(summary.subtotal)
        discount = to_money(summary.discount)
        total = to_money(summary.total)

        items = []
        for item in form.items:
            if isinstance(item, ClassLineItem):
                items.append({
                    "status": item.status,
                    "enrollmentId": item.enrollment_id,
                    "hoursTaught": to_money(item.hours_taught),
                    "payPerHour": to_money(item.pay_per_hour),
                    "total": to_money(item.total),
                    "submittable": self.aggregator.is_submittable(item),
                })
            else:
                items.append({
                    "status": item.status,
                    "description": item.description,
                    "amount": to_money(item.amount),
                    "submittable": self.aggregator.is_submittable(item),
                })

        return {
            "items": items,
            "subtotal": {
                "value": subtotal,
                "description": "Σ class totals (hours × pay per hour) + Σ bonus amounts",
            },
            "discount": {
                "value": discount,
                "description": f"Discount applied to the payout: {fmt(discount)}",
            },
            "total": {
                "value": total,
                "description": f"subtotal ({fmt(subtotal)}) - discount ({fmt(discount)}) = {fmt(total)}",
            },
        }

    def preview_totals(self, totals: PreviewTotals) -> dict:
        return {
            "subtotalEnrollments": to_money(totals.subtotal_enrollments),
            "totalBonuses": to_money(totals.total_bonuses),
            "totalPenalizations": to_money(totals.total_penalizations),
            "grandTotal": to_money(totals.grand_total),
        }

    # -------------------------------------------------------------------------
    # Incomes
    # -------------------------------------------------------------------------

    def income_payload(self, form: IncomeForm) -> dict:
        """Build the create/update income request body.

        amountInDollars is recomputed here from the form inputs, not taken
        from any displayed value.
        """
        rate = form.exchange_rate
        return {
            "deposit_name": form.deposit_name,
            "income_date": date_string_to_iso(form.income_date),
            "amount": to_money(form.amount),
            "amountInDollars": to_money(form.amount_in_usd),
            "tasa": float(rate) if rate > 0 else None,
            "idDivisa": form.currency.currency_id if form.currency else "",
            "idPaymentMethod": form.payment_method_id,
            "idProfessor": form.professor_id or None,
            "idEnrollment": form.enrollment_id or None,
            "note": form.note or None,
            "idPenalization": form.penalization_id or None,
        }

    def currency_breakdown(self, form: IncomeForm) -> dict:
        converted = form.converted
        amount = to_money(converted.amount)
        usd = to_money(converted.amount_in_usd)
        is_usd = form.currency is not None and form.currency.is_usd
        return {
            "amount": {
                "value": amount,
                "description": f"Amount in {converted.currency_name or 'the selected currency'}",
            },
            "exchange_rate": {
                "value": float(converted.exchange_rate),
                "description": "Dollar amounts are not converted; rate is fixed at 1" if is_usd
                else "Units of the currency per US dollar (non-positive rates count as 1)",
            },
            "amount_in_usd": {
                "value": usd,
                "description": f"{fmt(amount)} in dollars" if is_usd
                else f"{amount:,.2f} / {float(self.normalizer.effective_rate(converted.exchange_rate)):,.2f} = {fmt(usd)}",
            },
        }

    def income_summary(self, items: list[IncomeSummaryItem]) -> list[dict]:
        return [
            {
                "paymentMethodId": item.payment_method_id,
                "paymentMethodName": item.payment_method_name,
                "totalAmount": to_money(item.total_amount),
                "numberOfIncomes": item.number_of_incomes,
            }
            for item in items
        ]

    # -------------------------------------------------------------------------
    # Accounting reports
    # -------------------------------------------------------------------------

    def accounting_report(self, totals: ReportTotals) -> dict:
        """Build the computed report columns and the reconciliation summary."""
        system_total = to_money(totals.system_total)
        real_total = to_money(totals.real_total)
        difference = to_money(totals.difference)

        special = None
        if totals.special_lines is not None:
            special = {
                "details": [_special_columns(line) for line in totals.special_lines],
                "subtotal": _special_columns(totals.special_subtotal),
            }

        return {
            "general": [
                {
                    "professorId": professor.professor_id,
                    "professorName": professor.professor_name,
                    "details": [_report_columns(line) for line in professor.lines],
                    "subtotals": _report_columns(professor.subtotal),
                }
                for professor in totals.professors
            ],
            "special": special,
            "grandTotals": _report_columns(totals.grand),
            "excedentsTotal": to_money(totals.excess_total),
            "systemTotal": {
                "value": system_total,
                "description": (
                    f"general balance ({fmt(to_money(totals.grand.balance_remaining))})"
                    f" + special balance ({fmt(to_money(totals.special_subtotal.balance_remaining))})"
                    f" + excess ({fmt(to_money(totals.excess_total))}) = {fmt(system_total)}"
                ),
            },
            "realTotal": real_total,
            "difference": {
                "value": difference,
                "description": f"system total ({fmt(system_total)}) - real total ({fmt(real_total)}) = {fmt(difference)}",
            },
        }


def _report_columns(line: ReportLineTotals) -> dict:
    return {
        "totalTeacher": to_money(line.teacher_pay),
        "totalBespoke": to_money(line.bespoke),
        "balanceRemaining": to_money(line.balance_remaining),
    }


def _special_columns(line: SpecialLineTotals) -> dict:
    return {
        "total": to_money(line.total),
        "balanceRemaining": to_money(line.balance_remaining),
    }
