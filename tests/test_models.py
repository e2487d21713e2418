"""
Unit Tests for models and money helpers

Tests verify input coercion and how backend records are parsed.
"""

from decimal import Decimal

import pytest

from academy_engine.currencies import is_usd_currency
from academy_engine.models import (
    BONUS_ITEM,
    CLASS_ITEM,
    BonusLineItem,
    ClassLineItem,
    Currency,
    Income,
    Plan,
    StudentEntry,
    line_item_from_dict,
)
from academy_engine.money import quantize_money, to_count, to_decimal, to_money, to_optional_decimal


class TestCoercion:
    """Form values are coerced, never rejected."""

    @pytest.mark.parametrize("value", [None, "", "   ", "abc", "NaN", "inf", True, [], {}])
    def test_non_numeric_becomes_zero(self, value):
        assert to_decimal(value) == Decimal("0")

    def test_numeric_strings(self):
        assert to_decimal("12.50") == Decimal("12.50")
        assert to_decimal(" 3 ") == Decimal("3")

    def test_floats_keep_their_repr(self):
        assert to_decimal(0.1) == Decimal("0.1")

    def test_optional_keeps_blank_as_none(self):
        assert to_optional_decimal(None) is None
        assert to_optional_decimal("") is None
        assert to_optional_decimal(0) == Decimal("0")

    def test_count_is_non_negative_int(self):
        assert to_count("3") == 3
        assert to_count(-2) == 0
        assert to_count(None) == 0

    @pytest.mark.parametrize("value", ["1e-999999999", "1e999999999", "1e101", 1e300])
    def test_out_of_range_becomes_zero(self, value):
        assert to_decimal(value) == Decimal("0")

    def test_large_amounts_are_kept(self):
        assert to_decimal("1e30") == Decimal("1e30")


class TestQuantizeMoney:
    """Test the money rounding utility."""

    def test_rounds_up_at_half(self):
        assert quantize_money(Decimal("0.005")) == Decimal("0.01")

    def test_rounds_down_below_half(self):
        assert quantize_money(Decimal("0.004")) == Decimal("0.00")

    def test_to_money_returns_float(self):
        assert to_money(Decimal("10")) == 10.0
        assert to_money(Decimal("100") / Decimal("3")) == 33.33

    def test_amount_beyond_cent_precision_is_not_rounded(self):
        value = Decimal("1e30") / Decimal("35")

        assert quantize_money(value) == value
        assert to_money(value) == pytest.approx(2.857142857e28)

    def test_large_product_converts(self):
        assert to_money(Decimal("1e15") * Decimal("1e15")) == 1e30


class TestPlanParsing:

    def test_plan_from_backend_record(self):
        plan = Plan.from_dict({
            "_id": "p1",
            "name": "Intensive",
            "weeklyClasses": 3,
            "pricing": {"single": 120, "couple": "100", "group": None},
        })

        assert plan.plan_id == "p1"
        assert plan.weekly_classes == 3
        assert plan.pricing.single == Decimal("120")
        assert plan.pricing.couple == Decimal("100")
        assert plan.pricing.group == Decimal("0")

    def test_missing_pricing_is_all_zero(self):
        plan = Plan.from_dict({"_id": "p2"})

        assert plan.pricing.single == plan.pricing.couple == plan.pricing.group == Decimal("0")


class TestStudentEntry:
    """Rosters arrive as enrollment records or bare briefs."""

    def test_brief_record(self):
        entry = StudentEntry.from_dict({"_id": "s1", "name": "Ana"})

        assert entry.kind == "brief"
        assert entry.student_id == "s1"
        assert entry.answer("goals") == ""

    def test_enrollment_record_with_string_id(self):
        entry = StudentEntry.from_dict({"studentId": "s2", "goals": "Travel", "willingHomework": 1})

        assert entry.kind == "enrollment"
        assert entry.student_id == "s2"
        assert entry.answer("goals") == "Travel"
        assert entry.willing_homework == 1

    def test_enrollment_record_with_populated_student(self):
        entry = StudentEntry.from_dict({
            "_id": "row1",
            "studentId": {"_id": "s3", "name": "Luis"},
            "roleGroup": "Observador",
        })

        assert entry.kind == "enrollment"
        assert entry.student_id == "s3"
        assert entry.name == "Luis"
        assert entry.answer("role_group") == "Observador"

    def test_enrollment_record_with_null_student_falls_back_to_row_id(self):
        entry = StudentEntry.from_dict({"_id": "row2", "studentId": None})

        assert entry.student_id == "row2"

    def test_null_answers_become_empty(self):
        entry = StudentEntry.from_dict({"studentId": "s4", "preferences": None})

        assert entry.answer("preferences") == ""
        assert entry.willing_homework is None


class TestLineItemParsing:
    """Line items are resolved once by their status discriminant."""

    def test_class_item(self):
        item = line_item_from_dict({"status": 1, "enrollmentId": "e1", "hoursTaught": "3", "payPerHour": 20})

        assert isinstance(item, ClassLineItem)
        assert item.status == CLASS_ITEM
        assert item.total == Decimal("60")

    def test_bonus_item(self):
        item = line_item_from_dict({"status": 2, "description": "bonus", "amount": 15})

        assert isinstance(item, BonusLineItem)
        assert item.status == BONUS_ITEM
        assert item.amount == Decimal("15")

    def test_populated_enrollment_reference(self):
        item = line_item_from_dict({"status": 1, "enrollmentId": {"_id": "e9", "alias": "Group A"}})

        assert item.enrollment_id == "e9"

    def test_missing_status_is_inferred(self):
        assert isinstance(line_item_from_dict({"hoursTaught": 2}), ClassLineItem)
        assert isinstance(line_item_from_dict({"description": "x", "amount": 1}), BonusLineItem)

    def test_unknown_status_is_rejected(self):
        with pytest.raises(ValueError, match="Invalid payout item status"):
            line_item_from_dict({"status": 3})


class TestCurrencyIdentity:
    """Explicit identity data beats display-name matching."""

    def test_iso_code_decides(self):
        assert is_usd_currency("Bolívar", "usd") is True
        assert is_usd_currency("Dollar", "CAD") is False

    def test_base_flag_decides_without_iso(self):
        assert is_usd_currency("Anything", None, True) is True
        assert is_usd_currency("Dollar", None, False) is False

    def test_name_fallback(self):
        assert is_usd_currency("Dólar") is True
        assert is_usd_currency("Euro") is False
        assert is_usd_currency(None) is False

    def test_currency_record(self):
        currency = Currency.from_dict({"_id": "c1", "name": "Dollar"})

        assert currency.is_usd
        assert currency.currency_id == "c1"


class TestIncomeParsing:

    def test_populated_references(self):
        income = Income.from_dict({
            "amount": 350,
            "tasa": 35,
            "amountInDollars": 10,
            "idDivisa": {"_id": "c3", "name": "Bolivar"},
            "idPaymentMethod": {"_id": "pm1", "bankName": "Banesco"},
        })

        assert income.amount == Decimal("350")
        assert income.amount_in_usd == Decimal("10")
        assert income.currency.name == "Bolivar"
        assert income.payment_method_id == "pm1"
        assert income.payment_method_name == "Banesco"

    def test_bare_references(self):
        income = Income.from_dict({"amount": 5, "idPaymentMethod": "pm2", "idDivisa": "c1"})

        assert income.currency is None
        assert income.payment_method_id == "pm2"
        assert income.amount_in_usd is None
