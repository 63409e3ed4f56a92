from __future__ import annotations

import math
from dataclasses import dataclass

from domain.schemas import FormCheck, TransactionForm


@dataclass(frozen=True)
class ValidationIssue:
    code: str
    message: str
    path: str = ""
    severity: str = "error"  # "error" | "warn"


DESCRIPTION_REQUIRED = "Description is required"
AMOUNT_REQUIRED = "Amount is required"
AMOUNT_NOT_POSITIVE = "Amount must be a positive number"


class TransactionFormValidator:
    """
    Field-level rules for the add-transaction form.

    Every field is checked independently. `check` reports all problems and
    decides whether a submit may proceed; `field_errors` reports only the
    fields the user has touched, which is what a client displays while the
    form is being filled in.
    """

    def check(self, form: TransactionForm) -> list[ValidationIssue]:
        issues: list[ValidationIssue] = []

        description = form.description or ""
        if not description.strip():
            issues.append(ValidationIssue(
                code="DESCRIPTION_REQUIRED",
                message=DESCRIPTION_REQUIRED,
                path="description",
            ))

        amount = form.amount
        if amount is None or not math.isfinite(amount):
            issues.append(ValidationIssue(
                code="AMOUNT_REQUIRED",
                message=AMOUNT_REQUIRED,
                path="amount",
            ))
        elif amount <= 0:
            issues.append(ValidationIssue(
                code="AMOUNT_NOT_POSITIVE",
                message=AMOUNT_NOT_POSITIVE,
                path="amount",
            ))

        return issues

    def is_submittable(self, form: TransactionForm) -> bool:
        return not self.check(form)

    def field_errors(self, form: TransactionForm) -> dict[str, str]:
        return {
            issue.path: issue.message
            for issue in self.check(form)
            if issue.path in form.touched
        }

    def evaluate(self, form: TransactionForm) -> FormCheck:
        return FormCheck(valid=self.is_submittable(form), errors=self.field_errors(form))


def is_valid_budget_limit(limit: float) -> bool:
    return math.isfinite(limit) and limit > 0
