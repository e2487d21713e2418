"""
Input Validation for the Academy Billing Engine

Validates form data before a payload is built for the backend.
Raises ValueError with the message the dashboard shows the user.
The calculators themselves never raise; only request-level checks live here.
"""

import re

from .forms import EnrollmentForm, IncomeForm, PayoutForm
from .models import ClassLineItem, PricingTier, StudentEntry

OBJECT_ID_PATTERN = re.compile(r"^[0-9a-fA-F]{24}$")

# (answer, label) pairs every student must fill in, in dialog order
REQUIRED_STUDENT_ANSWERS = (
    ("goals", "Main goal is required."),
    ("preferences", "Preferences is required."),
    ("learning_type", "At least one learning type must be selected."),
    ("first_time_learning_language", "First time learning a language is required."),
    ("previous_experience", "Previous experience is required."),
    ("experience_past_class", "How was that experience is required."),
    ("how_were_the_classes", "How were the classes is required."),
    ("role_group", "Role in a group is required."),
    ("daily_learning_time", "ATP (per day) is required."),
    ("learning_difficulties", "Learning difficulties is required."),
)


class InputValidator:
    """Validates enrollment, payout and income forms according to business rules."""

    def validate_tier(self, tier: PricingTier) -> None:
        """Tier prices must be non-negative."""
        for name in ("single", "couple", "group"):
            price = tier.price_for(name)
            if price < 0:
                raise ValueError(f"{name} price cannot be negative, got: {price}")

    def validate_student_count(self, student_count: int) -> None:
        if student_count < 0:
            raise ValueError(f"student count cannot be negative, got: {student_count}")

    def validate_enrollment(self, form: EnrollmentForm) -> None:
        """
        Run all enrollment checks. Raises ValueError on the first failure.
        """
        if form.plan is None:
            raise ValueError("Plan is required.")
        self.validate_tier(form.plan.pricing)

        if not form.students:
            raise ValueError("At least one student is required.")

        for index, student in enumerate(form.students):
            self._validate_student(student, index)

        if not form.professor_id:
            raise ValueError("Professor is required.")

        if not form.scheduled_days:
            raise ValueError("At least one scheduled day is required.")

        weekly = form.plan.weekly_classes
        if weekly and len(form.scheduled_days) != weekly:
            raise ValueError(
                f"The selected plan requires {weekly} classes per week. "
                f"Please select exactly {weekly} days."
            )

        if not form.start_date:
            raise ValueError("Start date is required.")

        if not form.language:
            raise ValueError("Language is required.")

        if form.late_fee is None or form.late_fee < 0:
            raise ValueError("Late fee is required and must be a non-negative number.")

    def _validate_student(self, student: StudentEntry, index: int) -> None:
        label = student.name or f"Student {index + 1}"
        for answer, message in REQUIRED_STUDENT_ANSWERS:
            if not student.answer(answer).strip():
                raise ValueError(f"{label}: {message}")

    def validate_payout(self, form: PayoutForm) -> None:
        """Validate payout-level constraints and every class item."""
        if not form.professor_id:
            raise ValueError("Professor is required.")

        if not form.month:
            raise ValueError("Month is required.")

        if form.discount < 0:
            raise ValueError(f"discount cannot be negative, got: {form.discount}")

        for index, item in enumerate(form.items):
            if not isinstance(item, ClassLineItem):
                continue
            if item.hours_taught < 0:
                raise ValueError(f"Item {index + 1}: hours taught cannot be negative, got: {item.hours_taught}")
            if item.pay_per_hour < 0:
                raise ValueError(f"Item {index + 1}: pay per hour cannot be negative, got: {item.pay_per_hour}")

    def validate_income(self, form: IncomeForm) -> None:
        """Validate the income dialog before submission."""
        if form.amount <= 0:
            raise ValueError("Amount is required and must be greater than 0.")

        if not form.payment_method_id:
            raise ValueError("Payment method is required.")

        if form.currency is None:
            raise ValueError("Currency is required.")

        if form.professor_id and not form.enrollment_id:
            raise ValueError("If you select a professor, you must also select an enrollment.")

        if form.penalization_id and not OBJECT_ID_PATTERN.match(form.penalization_id):
            raise ValueError("Invalid penalization ID format.")
