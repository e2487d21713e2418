"""
Academy Processor - Main Orchestrator

Turns raw request bodies into forms, validates them, runs the calculators
and builds the response. One method per API operation.
"""

import json
import logging
from typing import Any, Dict

from .calculators import (
    AccountingReportCalculator,
    EnrollmentPricingCalculator,
    IncomeSummarizer,
    PayoutPreviewCalculator,
)
from .forms import EnrollmentForm, IncomeForm, PayoutForm
from .models import AccountingReport, Currency, Income, PayoutPreview, Plan, PricingResult, PricingTier
from .money import to_decimal, to_money
from .output import PayloadBuilder
from .validators import InputValidator

logger = logging.getLogger(__name__)


class AcademyProcessor:
    """
    Main orchestrator for the dashboard's billing arithmetic.

    Each operation follows the same steps:
    1. Build form/model from the request body
    2. Validate
    3. Calculate
    4. Build output
    """

    def __init__(self):
        self.validator = InputValidator()
        self.pricing_calculator = EnrollmentPricingCalculator()
        self.preview_calculator = PayoutPreviewCalculator()
        self.income_summarizer = IncomeSummarizer()
        self.report_calculator = AccountingReportCalculator()
        self.payload_builder = PayloadBuilder()

    # -------------------------------------------------------------------------
    # Enrollments
    # -------------------------------------------------------------------------

    def price_enrollment(self, student_count: int, tier: PricingTier) -> PricingResult:
        self.validator.validate_student_count(student_count)
        self.validator.validate_tier(tier)

        if student_count == 0:
            logger.warning("Pricing requested for an empty roster; defaulting to group tier at 0")

        return self.pricing_calculator.calculate(student_count, tier)

    def price_enrollment_from_dict(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """
        Price a roster.

        Accepts ``studentCount`` or a ``studentIds`` list, and tier pricing as
        ``pricing`` or inside ``plan``.
        """
        if "studentCount" in data:
            student_count = int(to_decimal(data["studentCount"]))
        else:
            student_count = len(data.get("studentIds") or [])

        if isinstance(data.get("plan"), dict):
            tier = Plan.from_dict(data["plan"]).pricing
        else:
            tier = PricingTier.from_dict(data.get("pricing"))

        pricing = self.price_enrollment(student_count, tier)
        return {"calculations": self.payload_builder.pricing_breakdown(student_count, pricing)}

    def build_enrollment_payload_from_dict(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """Validate an enrollment form and build its backend payload."""
        plans = [Plan.from_dict(p) for p in data.get("plans") or []]
        form = EnrollmentForm.from_dict(data, plans)
        self.validator.validate_enrollment(form)

        is_create = data.get("mode", "create") == "create"
        return {
            "payload": self.payload_builder.enrollment_payload(form, is_create=is_create),
            "calculations": self.payload_builder.pricing_breakdown(len(form.students), form.pricing),
        }

    # -------------------------------------------------------------------------
    # Payouts
    # -------------------------------------------------------------------------

    def summarize_payout_from_dict(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """Display totals for the payout dialog. No required-field checks."""
        form = PayoutForm.from_dict(data)
        self._warn_if_negative(form)
        return {"summary": self.payload_builder.payout_breakdown(form)}

    def build_payout_payload_from_dict(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """Validate a payout form and build its backend payload."""
        form = PayoutForm.from_dict(data)
        self.validator.validate_payout(form)
        self._warn_if_negative(form)

        dropped = len(form.items) - len(form.submittable_items)
        if dropped:
            logger.info(f"Dropping {dropped} incomplete payout item(s) from payload")

        return {
            "payload": self.payload_builder.payout_payload(form),
            "summary": self.payload_builder.payout_breakdown(form),
        }

    def preview_totals_from_dict(self, data: Dict[str, Any]) -> Dict[str, Any]:
        preview = PayoutPreview.from_dict(data)
        totals = self.preview_calculator.totals(preview)
        return {"totals": self.payload_builder.preview_totals(totals)}

    def _warn_if_negative(self, form: PayoutForm) -> None:
        summary = form.summary
        if summary.total < 0:
            logger.warning(
                f"Payout total is negative: subtotal {summary.subtotal} - discount {summary.discount}"
            )

    # -------------------------------------------------------------------------
    # Incomes
    # -------------------------------------------------------------------------

    def convert_income_from_dict(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """USD equivalent of an income being typed. No required-field checks."""
        form = self._income_form(data)
        return {"calculations": self.payload_builder.currency_breakdown(form)}

    def build_income_payload_from_dict(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """Validate an income form and build its backend payload."""
        form = self._income_form(data)
        self.validator.validate_income(form)
        return {
            "payload": self.payload_builder.income_payload(form),
            "calculations": self.payload_builder.currency_breakdown(form),
        }

    def summarize_incomes_from_dict(self, data: Dict[str, Any]) -> Dict[str, Any]:
        incomes = [Income.from_dict(i) for i in data.get("incomes") or []]
        summary = self.income_summarizer.summarize(incomes)
        return {"summary": self.payload_builder.income_summary(summary)}

    def _income_form(self, data: Dict[str, Any]) -> IncomeForm:
        currencies = [Currency.from_dict(c) for c in data.get("divisas") or []]
        return IncomeForm.from_dict(data, currencies)

    # -------------------------------------------------------------------------
    # Accounting reports
    # -------------------------------------------------------------------------

    def report_totals_from_dict(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """Fill in a report's computed columns and reconcile it against the real total."""
        report = AccountingReport.from_dict(data)
        totals = self.report_calculator.totals(report)

        if totals.difference != 0:
            logger.warning(
                f"Report does not balance: system total {totals.system_total} - real total {totals.real_total}"
                f" = {totals.difference}"
            )

        return {"report": self.payload_builder.accounting_report(totals)}

    def substitute_balance_from_dict(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """
        Balance an enrollment has left for substitute classes in a report.

        ``exclude`` names the row being edited as ``{profIndex, detailIndex}``;
        a ``profIndex`` of -1 points into the special report.
        """
        report = AccountingReport.from_dict(data)
        exclude = None
        if data.get("exclude"):
            row = data["exclude"]
            exclude = (int(row["profIndex"]), int(row["detailIndex"]))

        balance = self.report_calculator.substitute_balance(
            report,
            data.get("enrollmentId"),
            initial_balance=to_decimal(data.get("initialBalance")),
            exclude=exclude,
        )
        return {"enrollmentId": data.get("enrollmentId"), "availableBalance": to_money(balance)}


# =============================================================================
# CONVENIENCE FUNCTIONS
# =============================================================================

OPERATIONS = {
    "price_enrollment": AcademyProcessor.price_enrollment_from_dict,
    "enrollment_payload": AcademyProcessor.build_enrollment_payload_from_dict,
    "payout_summary": AcademyProcessor.summarize_payout_from_dict,
    "payout_payload": AcademyProcessor.build_payout_payload_from_dict,
    "preview_totals": AcademyProcessor.preview_totals_from_dict,
    "convert_income": AcademyProcessor.convert_income_from_dict,
    "income_payload": AcademyProcessor.build_income_payload_from_dict,
    "income_summary": AcademyProcessor.summarize_incomes_from_dict,
    "report_totals": AcademyProcessor.report_totals_from_dict,
    "substitute_balance": AcademyProcessor.substitute_balance_from_dict,
}


def process_from_dict(operation: str, input_data: Dict[str, Any]) -> Dict[str, Any]:
    """Run one named operation on a Python dict and return a Python dict."""
    if operation not in OPERATIONS:
        raise ValueError(f"Unknown operation: {operation}")
    if not isinstance(input_data, dict):
        raise TypeError(f"Input must be a JSON object, got: {type(input_data).__name__}")
    return OPERATIONS[operation](AcademyProcessor(), input_data)


def process_from_json(operation: str, json_input: str) -> str:
    """
    Run one named operation on a JSON string and return a JSON string.
    Errors are reported in the response instead of raised.
    """
    try:
        input_data = json.loads(json_input)
        result = process_from_dict(operation, input_data)
        return json.dumps(result, indent=2)

    except (ValueError, KeyError, TypeError) as e:
        error_response = {"error": str(e), "status": "validation_failed"}
        return json.dumps(error_response, indent=2)

    except Exception as e:
        logger.error(f"Processing error: {str(e)}", exc_info=True)
        error_response = {"error": str(e), "status": "failed"}
        return json.dumps(error_response, indent=2)
