"""
Integration Test Scenarios for the Academy Billing Engine

These tests follow what the academy staff do in the dashboard, dialog by
dialog, and validate the numbers that end up in the backend requests.

Run with: python -m pytest tests/test_integration_scenarios.py -v

IMPORTANT: This file has a companion business summary document:
    docs/test_scenarios_business_summary.md

When adding or modifying tests, please update the business summary document
to keep them in sync. The summary provides plain-English explanations of
each test scenario for business stakeholders.
"""


import pytest

from academy_engine import AcademyProcessor
from academy_engine.forms import EnrollmentForm, IncomeForm, PayoutForm
from academy_engine.models import Currency, Plan, StudentEntry
from academy_engine.output import PayloadBuilder

INTENSIVE = {
    "_id": "plan-intensive",
    "name": "Intensive",
    "weeklyClasses": 3,
    "pricing": {"single": 150, "couple": 120, "group": 95},
}


def _answers(student_id, name=""):
    return {
        "_id": f"row-{student_id}",
        "studentId": {"_id": student_id, "name": name},
        "goals": "Work",
        "preferences": "Evenings",
        "learningType": "Visual, Kinestésico",
        "firstTimeLearningLanguage": "No",
        "previousExperience": "Private tutor",
        "experiencePastClass": "Good",
        "howWhereTheClasses": "In person",
        "roleGroup": "Mediador",
        "dailyLearningTime": "1 hour",
        "learningDifficulties": "None",
        "willingHomework": 1,
    }


class TestGroupEnrollmentLifecycle:
    """A roster built up in the dialog changes tier as students are added."""

    def test_roster_grows_from_single_to_group(self):
        """1 student at $150, 2 at $120 each, 4 at $95 each."""
        form = EnrollmentForm().with_plan(Plan.from_dict(INTENSIVE))
        totals = []
        for student_id in ("s1", "s2", "s3", "s4"):
            form = form.add_student(StudentEntry.from_dict({"_id": student_id}))
            totals.append((form.pricing.enrollment_type, float(form.pricing.total_amount)))

        assert totals == [("single", 150.0), ("couple", 240.0), ("group", 285.0), ("group", 380.0)]

    def test_student_leaves_group_reprices_couple(self):
        """Dropping from 3 students to 2 moves the enrollment to the couple tier."""
        form = EnrollmentForm.from_dict(
            {"planId": "plan-intensive", "studentIds": [_answers("s1"), _answers("s2"), _answers("s3")]},
            [Plan.from_dict(INTENSIVE)],
        )
        assert float(form.pricing.total_amount) == 285.0

        form = form.remove_student("s2")

        assert form.pricing.enrollment_type == "couple"
        assert float(form.pricing.total_amount) == 240.0


class TestEnrollmentEditFromBackendRecord:
    """Editing a stored enrollment recomputes its price from the current plan."""

    @pytest.fixture
    def processor(self):
        return AcademyProcessor()

    def test_stored_price_is_replaced(self, processor):
        """Stored $300 total is replaced by 2 × $120 = $240."""
        record = {
            "mode": "edit",
            "planId": INTENSIVE,
            "studentIds": [_answers("s1", "Ana"), _answers("s2", "Luis")],
            "professorId": "prof1",
            "scheduledDays": [{"day": "Lunes"}, {"day": "Miércoles"}, {"day": "Viernes"}],
            "purchaseDate": "2025-05-28T14:12:00.000Z",
            "startDate": "2025-06-02",
            "language": "English",
            "lateFee": 10,
            "penalizationMoney": 5,
            "alias": "Ana & Luis",
            "status": 1,
            "pricePerStudent": 150,
            "totalAmount": 300,
        }

        result = processor.build_enrollment_payload_from_dict(record)
        payload = result["payload"]

        assert payload["enrollmentType"] == "couple"
        assert payload["pricePerStudent"] == 120.0
        assert payload["totalAmount"] == 240.0
        assert payload["purchaseDate"] == "2025-05-28T14:12:00.000Z"
        assert payload["startDate"] == "2025-06-02T00:00:00.000Z"
        assert payload["alias"] == "Ana & Luis"
        assert payload["penalizationMoney"] == 5.0
        assert payload["studentIds"][0]["studentId"] == "s1"
        assert payload["studentIds"][0]["learningType"] == "Visual, Kinestésico"

    def test_wrong_number_of_days_is_rejected(self, processor):
        """The Intensive plan needs exactly 3 class days."""
        record = {
            "planId": INTENSIVE,
            "studentIds": [_answers("s1")],
            "professorId": "prof1",
            "scheduledDays": [{"day": "Lunes"}],
            "startDate": "2025-06-02",
            "language": "English",
            "lateFee": 0,
        }

        with pytest.raises(ValueError, match="requires 3 classes per week"):
            processor.build_enrollment_payload_from_dict(record)


class TestMonthlyPayout:
    """A professor's month: preview, then the payout that is submitted."""

    @pytest.fixture
    def processor(self):
        return AcademyProcessor()

    def test_preview_then_payout(self, processor):
        """Preview: $160 + $95 + $20 bonus - $15 penalty = $260. Payout: $255 - $5 = $250."""
        preview = processor.preview_totals_from_dict({
            "professorId": "prof1",
            "month": "2025-05",
            "enrollments": [
                {"enrollmentId": "e1", "subtotal": 160, "hoursSeen": 8, "pPerHour": 20},
                {"enrollmentId": "e2", "hoursSeen": 5, "pPerHour": 19},
            ],
            "bonusInfo": [{"amount": 20}],
            "penalizationInfo": [{"penalizationMoney": 15}],
        })
        assert preview["totals"]["grandTotal"] == 260.0

        result = processor.build_payout_payload_from_dict({
            "professorId": "prof1",
            "month": "2025-05",
            "discount": 5,
            "paidAt": "2025-06-05",
            "details": [
                {"status": 1, "enrollmentId": "e1", "hoursTaught": 8, "payPerHour": 20},
                {"status": 1, "enrollmentId": "e2", "hoursTaught": 5, "payPerHour": 19},
                {"status": 1, "enrollmentId": "e3", "hoursTaught": "", "payPerHour": 19},
                {"status": 2, "description": "", "amount": 0},
            ],
        })

        assert result["summary"]["subtotal"]["value"] == 255.0
        assert result["summary"]["total"]["value"] == 250.0
        assert [d["enrollmentId"] for d in result["payload"]["details"]] == ["e1", "e2"]
        assert result["payload"]["paidAt"] == "2025-06-05T00:00:00.000Z"

    def test_discount_larger_than_subtotal(self, processor):
        """$40 subtotal with a $50 discount totals -$10 and is still submitted."""
        result = processor.build_payout_payload_from_dict({
            "professorId": "prof1",
            "month": "2025-05",
            "discount": 50,
            "details": [{"status": 1, "enrollmentId": "e1", "hoursTaught": 2, "payPerHour": 20}],
        })

        assert result["summary"]["total"]["value"] == -10.0
        assert result["payload"]["discount"] == 50.0

    def test_editing_items_keeps_totals_consistent(self):
        """Editing hours in any order gives the same total as a fresh form."""
        edited = (
            PayoutForm().add_class_item("e1", 1, 20).add_class_item("e2", 1, 20)
            .update_item(1, hours_taught=3).update_item(0, hours_taught=2).remove_item(1)
            .add_class_item("e2", 3, 20)
        )
        fresh = PayoutForm().add_class_item("e1", 2, 20).add_class_item("e2", 3, 20)

        assert edited.summary == fresh.summary


class TestMixedCurrencyIncomes:
    """Incomes received in bolívares and dollars during one month."""

    @pytest.fixture
    def processor(self):
        return AcademyProcessor()

    def test_monthly_summary_in_dollars(self, processor):
        """Banesco: 3500 Bs @ 35 + 1820 Bs @ 36.4 = $150. Zelle: $80 + legacy $0 record of $40."""
        result = processor.summarize_incomes_from_dict({"incomes": [
            {"amount": 3500, "tasa": 35, "amountInDollars": 100,
             "idDivisa": {"_id": "c2", "name": "Bolivar"}, "idPaymentMethod": {"_id": "pm1", "bankName": "Banesco"}},
            {"amount": 80, "tasa": 1, "amountInDollars": 80,
             "idDivisa": {"_id": "c1", "name": "Dólar"}, "idPaymentMethod": {"_id": "pm2", "bankName": "Zelle"}},
            {"amount": 1820, "tasa": 36.4,
             "idDivisa": {"_id": "c2", "name": "Bolivar"}, "idPaymentMethod": {"_id": "pm1", "bankName": "Banesco"}},
            {"amount": 40, "tasa": 0, "amountInDollars": 0,
             "idDivisa": {"_id": "c1", "name": "Dólar"}, "idPaymentMethod": {"_id": "pm2", "bankName": "Zelle"}},
        ]})

        assert result["summary"] == [
            {"paymentMethodId": "pm1", "paymentMethodName": "Banesco", "totalAmount": 150.0, "numberOfIncomes": 2},
            {"paymentMethodId": "pm2", "paymentMethodName": "Zelle", "totalAmount": 120.0, "numberOfIncomes": 2},
        ]

    def test_switching_currency_to_dollar(self):
        """Rate typed for bolívares is discarded once dollars are chosen."""
        bolivar = Currency.from_dict({"_id": "c2", "name": "Bolivar"})
        dollar = Currency.from_dict({"_id": "c1", "name": "Dollar"})
        form = IncomeForm(payment_method_id="pm1").with_currency(bolivar).with_amount(200).with_rate(36)
        assert float(form.amount_in_usd) == pytest.approx(5.5556, abs=1e-4)

        form = form.with_currency(dollar)
        payload = PayloadBuilder().income_payload(form)

        assert payload["tasa"] == 1.0
        assert payload["amountInDollars"] == 200.0
        assert payload["idDivisa"] == "c1"

    def test_display_and_payload_agree(self, processor):
        """The converted amount shown while typing is the amount submitted."""
        data = {
            "divisas": [{"_id": "c2", "name": "Bolivar"}],
            "idDivisa": "c2",
            "amount": 1000,
            "tasa": 36.75,
            "idPaymentMethod": "pm1",
        }

        shown = processor.convert_income_from_dict(data)["calculations"]["amount_in_usd"]["value"]
        submitted = processor.build_income_payload_from_dict(data)["payload"]["amountInDollars"]

        assert shown == submitted == 27.21
