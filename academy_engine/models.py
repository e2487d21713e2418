"""
Domain Models for the Academy Billing Engine

These dataclasses provide type-safe representations of the values the
dashboard forms build while a user fills a dialog.
All monetary values use Decimal for precision.
"""

from dataclasses import dataclass, field
from decimal import Decimal

from .currencies import is_usd_currency
from .money import ZERO, to_count, to_decimal, to_optional_decimal

ENROLLMENT_TYPES = ("single", "couple", "group")

# Payout line item discriminants, as the backend stores them
CLASS_ITEM = 1
BONUS_ITEM = 2

# (attribute, payload key) pairs of the per-student questionnaire
STUDENT_FIELDS = (
    ("preferences", "preferences"),
    ("first_time_learning_language", "firstTimeLearningLanguage"),
    ("previous_experience", "previousExperience"),
    ("goals", "goals"),
    ("daily_learning_time", "dailyLearningTime"),
    ("learning_type", "learningType"),
    ("ideal_class_type", "idealClassType"),
    ("learning_difficulties", "learningDifficulties"),
    ("language_level", "languageLevel"),
    ("experience_past_class", "experiencePastClass"),
    ("how_were_the_classes", "howWhereTheClasses"),
    ("role_group", "roleGroup"),
)


def ref_id(value) -> str:
    """Return the id of a reference that may come populated ({_id: ...}) or bare."""
    if isinstance(value, dict):
        return value.get("_id") or ""
    return value or ""


# =============================================================================
# ENROLLMENTS
# =============================================================================


@dataclass(frozen=True)
class PricingTier:
    """Per-student price for each headcount category."""

    single: Decimal = ZERO
    couple: Decimal = ZERO
    group: Decimal = ZERO

    def price_for(self, enrollment_type: str) -> Decimal:
        return getattr(self, enrollment_type)

    @classmethod
    def from_dict(cls, data: dict | None) -> "PricingTier":
        data = data or {}
        return cls(
            single=to_decimal(data.get("single")),
            couple=to_decimal(data.get("couple")),
            group=to_decimal(data.get("group")),
        )


@dataclass(frozen=True)
class Plan:
    """A sellable plan: weekly class count and tier pricing."""

    plan_id: str
    name: str
    weekly_classes: int
    pricing: PricingTier

    @classmethod
    def from_dict(cls, data: dict) -> "Plan":
        return cls(
            plan_id=data.get("_id", ""),
            name=data.get("name", ""),
            weekly_classes=to_count(data.get("weeklyClasses")),
            pricing=PricingTier.from_dict(data.get("pricing")),
        )


@dataclass(frozen=True)
class PricingResult:
    """Derived pricing for an enrollment."""

    price_per_student: Decimal
    enrollment_type: str
    total_amount: Decimal


@dataclass(frozen=True)
class StudentEntry:
    """One student on an enrollment roster.

    The backend returns rosters in two shapes: full enrollment records
    (carrying a ``studentId`` and questionnaire answers) and bare student
    briefs. ``kind`` records which one was received ("enrollment" or
    "brief"); briefs get empty answers.
    """

    kind: str
    student_id: str
    name: str = ""
    answers: dict = field(default_factory=dict)
    willing_homework: int | None = None

    def answer(self, name: str) -> str:
        return self.answers.get(name, "")

    @classmethod
    def from_dict(cls, data: dict) -> "StudentEntry":
        if "studentId" not in data:
            return cls(kind="brief", student_id=data.get("_id") or "", name=data.get("name", ""))

        ref = data["studentId"]
        if isinstance(ref, dict):
            student_id = ref.get("_id") or ""
            name = ref.get("name", "")
        elif isinstance(ref, str):
            student_id = ref
            name = ""
        else:
            student_id = data.get("_id") or ""
            name = ""

        homework = data.get("willingHomework")
        return cls(
            kind="enrollment",
            student_id=student_id,
            name=name,
            answers={attr: data.get(key) or "" for attr, key in STUDENT_FIELDS},
            willing_homework=int(homework) if homework is not None else None,
        )


# =============================================================================
# PAYOUTS
# =============================================================================


@dataclass(frozen=True)
class ClassLineItem:
    """Hours taught on one enrollment, paid per hour."""

    enrollment_id: str | None = None
    hours_taught: Decimal = ZERO
    pay_per_hour: Decimal = ZERO
    status: int = field(default=CLASS_ITEM, init=False)

    @property
    def total(self) -> Decimal:
        return self.hours_taught * self.pay_per_hour


@dataclass(frozen=True)
class BonusLineItem:
    """A flat amount with a free-text description."""

    description: str = ""
    amount: Decimal = ZERO
    status: int = field(default=BONUS_ITEM, init=False)


PayoutLineItem = ClassLineItem | BonusLineItem


def line_item_from_dict(data: dict) -> PayoutLineItem:
    """Build a payout line item, dispatching on its ``status`` discriminant.

    Items without a status are classified once here: anything carrying
    hours or an enrollment is a class item, the rest are bonuses.
    """
    status = data.get("status")
    if status is None:
        is_class = "hoursTaught" in data or "enrollmentId" in data
        status = CLASS_ITEM if is_class else BONUS_ITEM

    if int(status) == CLASS_ITEM:
        return ClassLineItem(
            enrollment_id=ref_id(data.get("enrollmentId")) or None,
            hours_taught=to_decimal(data.get("hoursTaught")),
            pay_per_hour=to_decimal(data.get("payPerHour")),
        )
    if int(status) == BONUS_ITEM:
        return BonusLineItem(
            description=data.get("description") or "",
            amount=to_decimal(data.get("amount")),
        )
    raise ValueError(f"Invalid payout item status: {status}. Must be 1 (class) or 2 (bonus)")


@dataclass(frozen=True)
class PayoutSummary:
    """Display totals for a payout. The backend recomputes its own."""

    subtotal: Decimal
    discount: Decimal
    total: Decimal


@dataclass(frozen=True)
class EnrollmentPreviewLine:
    """One enrollment row of a backend payout preview."""

    enrollment_id: str
    student_name: str = ""
    plan: str = ""
    subtotal: Decimal | None = None
    total_hours: Decimal = ZERO
    hours_seen: Decimal = ZERO
    pay_per_hour: Decimal = ZERO
    period: str = ""

    @classmethod
    def from_dict(cls, data: dict) -> "EnrollmentPreviewLine":
        return cls(
            enrollment_id=data.get("enrollmentId", ""),
            student_name=data.get("studentName", ""),
            plan=data.get("plan", ""),
            subtotal=to_optional_decimal(data.get("subtotal")),
            total_hours=to_decimal(data.get("totalHours")),
            hours_seen=to_decimal(data.get("hoursSeen")),
            pay_per_hour=to_decimal(data.get("pPerHour")),
            period=data.get("period", ""),
        )


@dataclass(frozen=True)
class PayoutPreview:
    """Backend preview of what a professor is owed for a month."""

    professor_id: str
    month: str
    enrollments: list[EnrollmentPreviewLine] = field(default_factory=list)
    bonuses: list[Decimal] = field(default_factory=list)
    penalizations: list[Decimal] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict) -> "PayoutPreview":
        return cls(
            professor_id=data.get("professorId", ""),
            month=data.get("month", ""),
            enrollments=[EnrollmentPreviewLine.from_dict(e) for e in data.get("enrollments") or []],
            bonuses=[to_decimal(b.get("amount")) for b in data.get("bonusInfo") or []],
            penalizations=[to_decimal(p.get("penalizationMoney")) for p in data.get("penalizationInfo") or []],
        )


@dataclass(frozen=True)
class PreviewTotals:
    subtotal_enrollments: Decimal = ZERO
    total_bonuses: Decimal = ZERO
    total_penalizations: Decimal = ZERO
    grand_total: Decimal = ZERO


# =============================================================================
# INCOMES
# =============================================================================


@dataclass(frozen=True)
class Currency:
    """A currency record ("divisa"). ``is_usd`` is resolved once, on ingestion."""

    currency_id: str
    name: str
    iso_code: str | None = None
    is_usd: bool = False

    @classmethod
    def from_dict(cls, data: dict) -> "Currency":
        name = data.get("name", "")
        iso_code = data.get("isoCode") or data.get("code")
        return cls(
            currency_id=data.get("_id", ""),
            name=name,
            iso_code=iso_code,
            is_usd=is_usd_currency(name, iso_code, data.get("isBase")),
        )


@dataclass(frozen=True)
class CurrencyAmount:
    """An amount in some currency together with its USD equivalent."""

    amount: Decimal
    currency_name: str
    exchange_rate: Decimal
    amount_in_usd: Decimal


@dataclass(frozen=True)
class Income:
    """A recorded income, as listed by the backend."""

    amount: Decimal
    exchange_rate: Decimal
    currency: Currency | None
    payment_method_id: str
    payment_method_name: str
    amount_in_usd: Decimal | None = None

    @classmethod
    def from_dict(cls, data: dict) -> "Income":
        currency = data.get("idDivisa")
        method = data.get("idPaymentMethod")
        if isinstance(method, dict):
            method_id = method.get("_id", "")
            method_name = method.get("bankName") or method.get("name") or ""
        else:
            method_id = method or ""
            method_name = data.get("paymentMethodName", "")
        return cls(
            amount=to_decimal(data.get("amount")),
            exchange_rate=to_decimal(data.get("tasa")),
            currency=Currency.from_dict(currency) if isinstance(currency, dict) else None,
            payment_method_id=method_id,
            payment_method_name=method_name,
            amount_in_usd=to_optional_decimal(data.get("amountInDollars")),
        )


@dataclass
class IncomeSummaryItem:
    """Running total of incomes received through one payment method."""

    payment_method_id: str
    payment_method_name: str
    total_amount: Decimal = ZERO
    number_of_incomes: int = 0


# =============================================================================
# ACCOUNTING REPORTS
# =============================================================================

# Report row kinds, as the backend tags them
NORMAL_LINE = "normal"
SUBSTITUTE_LINE = "substitute"

# Section index of the special report when locating a row
SPECIAL_SECTION = -1


@dataclass(frozen=True)
class ReportLine:
    """One enrollment row of a professor's section in the general report."""

    enrollment_id: str | None
    status: int = CLASS_ITEM
    line_type: str = NORMAL_LINE
    student_name: str = ""
    amount_in_usd: Decimal = ZERO
    price_per_hour: Decimal = ZERO
    pay_per_hour: Decimal = ZERO
    hours_seen: Decimal = ZERO
    balance: Decimal = ZERO

    @classmethod
    def from_dict(cls, data: dict) -> "ReportLine":
        return cls(
            enrollment_id=data.get("enrollmentId") or None,
            status=int(to_decimal(data.get("status", CLASS_ITEM))),
            line_type=data.get("type") or NORMAL_LINE,
            student_name=data.get("studentName", ""),
            amount_in_usd=to_decimal(data.get("amountInDollars")),
            price_per_hour=to_decimal(data.get("pricePerHour")),
            pay_per_hour=to_decimal(data.get("pPerHour")),
            hours_seen=to_decimal(data.get("hoursSeen")),
            balance=to_decimal(data.get("balance")),
        )


@dataclass(frozen=True)
class SpecialReportLine:
    """A row of the special report, where the professor is paid a fixed amount."""

    enrollment_id: str | None
    line_type: str = NORMAL_LINE
    student_name: str = ""
    amount_in_usd: Decimal = ZERO
    payment: Decimal = ZERO

    @classmethod
    def from_dict(cls, data: dict) -> "SpecialReportLine":
        return cls(
            enrollment_id=data.get("enrollmentId") or None,
            line_type=data.get("type") or NORMAL_LINE,
            student_name=data.get("studentName", ""),
            amount_in_usd=to_decimal(data.get("amountInDollars")),
            payment=to_decimal(data.get("payment")),
        )


@dataclass(frozen=True)
class ProfessorReport:
    professor_id: str
    professor_name: str = ""
    lines: list[ReportLine] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict) -> "ProfessorReport":
        return cls(
            professor_id=data.get("professorId", ""),
            professor_name=data.get("professorName", ""),
            lines=[ReportLine.from_dict(d) for d in data.get("details") or []],
        )


@dataclass(frozen=True)
class AccountingReport:
    """
    A period's accounting report: one section per professor, an optional
    special section, the excess collected and the real total counted by hand.
    """

    general: list[ProfessorReport] = field(default_factory=list)
    special: list[SpecialReportLine] | None = None
    excess_total: Decimal = ZERO
    real_total: Decimal = ZERO

    @classmethod
    def from_dict(cls, data: dict) -> "AccountingReport":
        special = data.get("special")
        excess = data.get("excedente")
        return cls(
            general=[ProfessorReport.from_dict(p) for p in data.get("general") or []],
            special=(
                [SpecialReportLine.from_dict(d) for d in special.get("details") or []]
                if isinstance(special, dict)
                else None
            ),
            excess_total=to_decimal(excess.get("totalExcedente")) if isinstance(excess, dict) else ZERO,
            real_total=to_decimal(data.get("realTotal")),
        )


@dataclass(frozen=True)
class ReportLineTotals:
    teacher_pay: Decimal = ZERO
    bespoke: Decimal = ZERO
    balance_remaining: Decimal = ZERO


@dataclass(frozen=True)
class SpecialLineTotals:
    total: Decimal = ZERO
    balance_remaining: Decimal = ZERO


@dataclass(frozen=True)
class ProfessorTotals:
    professor_id: str
    professor_name: str
    lines: list[ReportLineTotals]
    subtotal: ReportLineTotals


@dataclass(frozen=True)
class ReportTotals:
    """Computed columns, subtotals and the reconciliation of a report."""

    professors: list[ProfessorTotals]
    grand: ReportLineTotals
    special_lines: list[SpecialLineTotals] | None
    special_subtotal: SpecialLineTotals
    excess_total: Decimal
    system_total: Decimal
    real_total: Decimal
    difference: Decimal
