"""
Form View-Models

Immutable snapshots of the enrollment, payout and income dialogs. Each
transition returns a new form with every derived value recomputed from
the current inputs, so the result never depends on the order of edits.
"""

from dataclasses import dataclass, field, replace
from decimal import Decimal

from .calculators import CurrencyNormalizer, EnrollmentPricingCalculator, PayoutAggregator
from .models import (
    STUDENT_FIELDS,
    BonusLineItem,
    ClassLineItem,
    Currency,
    CurrencyAmount,
    PayoutLineItem,
    PayoutSummary,
    Plan,
    PricingResult,
    StudentEntry,
    line_item_from_dict,
    ref_id,
)
from .money import ONE, ZERO, to_decimal, to_optional_decimal

_pricing = EnrollmentPricingCalculator()
_aggregator = PayoutAggregator()
_normalizer = CurrencyNormalizer()

# Questionnaire answers stored as comma-separated multi-choice lists
MULTI_CHOICE_FIELDS = ("learning_type", "role_group")
_STUDENT_ATTRS = {attr for attr, _ in STUDENT_FIELDS}


# =============================================================================
# ENROLLMENT FORM
# =============================================================================


@dataclass(frozen=True)
class EnrollmentForm:
    """State of the create/edit enrollment dialog."""

    plan: Plan | None = None
    students: tuple[StudentEntry, ...] = ()
    professor_id: str = ""
    scheduled_days: tuple[str, ...] = ()
    purchase_date: str = ""
    start_date: str = ""
    language: str = ""
    alias: str = ""
    late_fee: Decimal | None = None
    penalization_money: Decimal | None = None
    status: int | None = None
    pricing: PricingResult = field(default_factory=lambda: PricingResult(ZERO, "single", ZERO))

    def with_plan(self, plan: Plan | None) -> "EnrollmentForm":
        return replace(self, plan=plan)._repriced()

    def with_students(self, students) -> "EnrollmentForm":
        return replace(self, students=tuple(students))._repriced()

    def add_student(self, student: StudentEntry) -> "EnrollmentForm":
        if any(s.student_id == student.student_id for s in self.students):
            return self
        return self.with_students(self.students + (student,))

    def remove_student(self, student_id: str) -> "EnrollmentForm":
        return self.with_students(s for s in self.students if s.student_id != student_id)

    def update_student_field(self, index: int, name: str, value) -> "EnrollmentForm":
        """Set one questionnaire answer (or willing_homework) on the student at ``index``."""
        student = self.students[index]
        if name == "willing_homework":
            updated = replace(student, willing_homework=value)
        elif name in _STUDENT_ATTRS:
            updated = replace(student, answers={**student.answers, name: value or ""})
        else:
            raise ValueError(f"Unknown student field: {name}")
        return self._with_student_at(index, updated)

    def toggle_student_choice(self, index: int, name: str, value: str, checked: bool) -> "EnrollmentForm":
        """Add or remove ``value`` from a comma-separated multi-choice answer."""
        if name not in MULTI_CHOICE_FIELDS:
            raise ValueError(f"{name} is not a multi-choice field")
        current = self.students[index].answer(name)
        choices = [c.strip() for c in current.split(",")] if current else []

        if checked and value not in choices:
            choices.append(value)
        elif not checked:
            choices = [c for c in choices if c != value]

        return self.update_student_field(index, name, ", ".join(choices))

    def _with_student_at(self, index: int, student: StudentEntry) -> "EnrollmentForm":
        students = list(self.students)
        students[index] = student
        # Same headcount, pricing is unchanged
        return replace(self, students=tuple(students))

    def _repriced(self) -> "EnrollmentForm":
        # Without a plan there is nothing to price against; keep what we had
        if self.plan is None:
            return self
        return replace(self, pricing=_pricing.calculate(len(self.students), self.plan.pricing))

    @classmethod
    def from_dict(cls, data: dict, plans: list[Plan] | None = None) -> "EnrollmentForm":
        """Build the form from a request body.

        The plan may be given inline (``plan``) or by id (``planId``) against
        ``plans``. Pricing is always recomputed, never taken from the body.
        """
        plan = None
        if isinstance(data.get("plan"), dict):
            plan = Plan.from_dict(data["plan"])
        elif isinstance(data.get("planId"), dict):
            plan = Plan.from_dict(data["planId"])
        elif data.get("planId"):
            plan = next((p for p in plans or [] if p.plan_id == data["planId"]), None)

        status = data.get("status")
        form = cls(
            students=tuple(StudentEntry.from_dict(s) for s in data.get("studentIds") or []),
            professor_id=data.get("professorId") or "",
            scheduled_days=tuple(
                d["day"] if isinstance(d, dict) else d for d in data.get("scheduledDays") or []
            ),
            purchase_date=data.get("purchaseDate") or "",
            start_date=data.get("startDate") or "",
            language=data.get("language") or "",
            alias=data.get("alias") or "",
            late_fee=to_optional_decimal(data.get("lateFee")),
            penalization_money=to_optional_decimal(data.get("penalizationMoney")),
            status=int(status) if status is not None else None,
        )
        return form.with_plan(plan)


# =============================================================================
# PAYOUT FORM
# =============================================================================


@dataclass(frozen=True)
class PayoutForm:
    """State of the create payout dialog."""

    professor_id: str = ""
    month: str = ""
    items: tuple[PayoutLineItem, ...] = ()
    discount: Decimal = ZERO
    note: str = ""
    payment_method_id: str | None = None
    paid_at: str | None = None

    @property
    def summary(self) -> PayoutSummary:
        return _aggregator.summarize(list(self.items), self.discount)

    @property
    def submittable_items(self) -> list[PayoutLineItem]:
        return _aggregator.filter_for_submission(list(self.items))

    def add_class_item(self, enrollment_id: str | None = None, hours_taught=0, pay_per_hour=0) -> "PayoutForm":
        item = ClassLineItem(
            enrollment_id=enrollment_id,
            hours_taught=to_decimal(hours_taught),
            pay_per_hour=to_decimal(pay_per_hour),
        )
        return replace(self, items=self.items + (item,))

    def add_bonus_item(self, description: str = "", amount=0) -> "PayoutForm":
        item = BonusLineItem(description=description, amount=to_decimal(amount))
        return replace(self, items=self.items + (item,))

    def update_item(self, index: int, **changes) -> "PayoutForm":
        """Edit fields of the item at ``index``. Numeric fields are coerced."""
        item = self.items[index]
        for name in ("hours_taught", "pay_per_hour", "amount"):
            if name in changes:
                changes[name] = to_decimal(changes[name])
        items = list(self.items)
        items[index] = replace(item, **changes)
        return replace(self, items=tuple(items))

    def remove_item(self, index: int) -> "PayoutForm":
        return replace(self, items=self.items[:index] + self.items[index + 1:])

    def with_discount(self, discount) -> "PayoutForm":
        return replace(self, discount=to_decimal(discount))

    @classmethod
    def from_dict(cls, data: dict) -> "PayoutForm":
        return cls(
            professor_id=data.get("professorId") or "",
            month=data.get("month") or "",
            items=tuple(line_item_from_dict(d) for d in data.get("details") or []),
            discount=to_decimal(data.get("discount")),
            note=data.get("note") or "",
            payment_method_id=data.get("paymentMethodId") or None,
            paid_at=data.get("paidAt") or None,
        )


# =============================================================================
# INCOME FORM
# =============================================================================


@dataclass(frozen=True)
class IncomeForm:
    """State of the create/edit income dialog."""

    amount: Decimal = ZERO
    exchange_rate: Decimal = ONE
    currency: Currency | None = None
    deposit_name: str = ""
    income_date: str = ""
    payment_method_id: str = ""
    professor_id: str = ""
    enrollment_id: str = ""
    penalization_id: str = ""
    note: str = ""

    @property
    def amount_in_usd(self) -> Decimal:
        return _normalizer.to_usd_for(self.amount, self.currency, self.exchange_rate)

    @property
    def converted(self) -> CurrencyAmount:
        return _normalizer.normalize(self.amount, self.currency, self.exchange_rate)

    def with_amount(self, amount) -> "IncomeForm":
        return replace(self, amount=to_decimal(amount))

    def with_rate(self, exchange_rate) -> "IncomeForm":
        return replace(self, exchange_rate=_normalizer.rate_for(self.currency, exchange_rate))

    def with_currency(self, currency: Currency | None) -> "IncomeForm":
        """Select a currency; choosing dollars resets the rate to 1."""
        return replace(self, currency=currency, exchange_rate=_normalizer.rate_for(currency, self.exchange_rate))

    @classmethod
    def from_dict(cls, data: dict, currencies: list[Currency] | None = None) -> "IncomeForm":
        """Build the form from a request body.

        ``idDivisa`` may be a populated currency record or an id looked up
        in ``currencies``; ``currency`` may also be given inline.
        """
        raw = data.get("currency") or data.get("idDivisa")
        if isinstance(raw, dict):
            currency = Currency.from_dict(raw)
        elif raw:
            currency = next((c for c in currencies or [] if c.currency_id == raw), None)
            if currency is None:
                currency = Currency(currency_id=raw, name="")
        else:
            currency = None

        form = cls(
            amount=to_decimal(data.get("amount")),
            exchange_rate=to_decimal(data.get("tasa")) if data.get("tasa") is not None else ONE,
            deposit_name=data.get("deposit_name") or "",
            income_date=data.get("income_date") or "",
            payment_method_id=ref_id(data.get("idPaymentMethod")),
            professor_id=ref_id(data.get("idProfessor")),
            enrollment_id=ref_id(data.get("idEnrollment")),
            penalization_id=ref_id(data.get("idPenalization")).strip(),
            note=data.get("note") or "",
        )
        return form.with_currency(currency)


