from __future__ import annotations

import datetime as dt
from typing import Any, Dict, List, Optional, Set

from pydantic import BaseModel, Field, field_validator

from domain.models import DEFAULT_CATEGORY, DEFAULT_TYPE, Budget, Category, Transaction, TransactionType

FORM_FIELDS = ("amount", "description")


class ReceiptData(BaseModel):
    """Fields extracted from a receipt image. Transient, never persisted."""

    amount: float = Field(allow_inf_nan=False)
    description: str
    category: Category
    date: dt.date

    @field_validator("category", mode="before")
    @classmethod
    def coerce_category(cls, value: Any) -> Any:
        if isinstance(value, Category):
            return value
        text = str(value or "").strip()
        for category in Category:
            if category.value.lower() == text.lower():
                return category
        return DEFAULT_CATEGORY

    @field_validator("date", mode="before")
    @classmethod
    def strip_date(cls, value: Any) -> Any:
        return value.strip() if isinstance(value, str) else value


class TransactionForm(BaseModel):
    """
    Unvalidated add-transaction input as a client holds it.

    `touched` lists the fields the user has interacted with; it only controls
    which error messages are shown, never whether the form may be submitted.
    Optional fields left as None fall back to defaults on submit.
    """

    amount: Optional[float] = None
    description: str = ""
    category: Optional[Category] = None
    date: Optional[dt.date] = None
    type: Optional[TransactionType] = None
    touched: Set[str] = Field(default_factory=set)

    @classmethod
    def blank(cls, today: dt.date | None = None) -> "TransactionForm":
        return cls(
            amount=0,
            description="",
            category=DEFAULT_CATEGORY,
            date=today or dt.date.today(),
            type=DEFAULT_TYPE,
        )

    @classmethod
    def from_receipt(cls, receipt: ReceiptData) -> "TransactionForm":
        return cls(
            amount=receipt.amount,
            description=receipt.description,
            category=receipt.category,
            date=receipt.date,
            type=TransactionType.EXPENSE,
            touched=set(FORM_FIELDS),
        )

    def touch_all(self) -> "TransactionForm":
        return self.model_copy(update={"touched": set(FORM_FIELDS)})


class BudgetInput(BaseModel):
    category: Category
    limit: float


class Totals(BaseModel):
    income: float = 0.0
    expenses: float = 0.0
    balance: float = 0.0


class ChartSlice(BaseModel):
    name: str
    value: float


class BudgetProgress(BaseModel):
    category: Category
    limit: float
    spent: float
    percentage: float

    @classmethod
    def for_budget(cls, budget: Budget, spent: float, percentage: float) -> "BudgetProgress":
        return cls(category=budget.category, limit=budget.limit, spent=spent, percentage=percentage)


class Dashboard(BaseModel):
    totals: Totals
    category_breakdown: List[ChartSlice] = Field(default_factory=list)
    current_month_spending: Dict[str, float] = Field(default_factory=dict)
    budget_progress: List[BudgetProgress] = Field(default_factory=list)
    recent_transactions: List[Transaction] = Field(default_factory=list)
    transaction_count: int = 0


class FormCheck(BaseModel):
    valid: bool
    errors: Dict[str, str] = Field(default_factory=dict)


class AddTransactionResult(BaseModel):
    ok: bool
    transaction: Optional[Transaction] = None
    form: TransactionForm
    errors: Dict[str, str] = Field(default_factory=dict)


class CategoryCatalog(BaseModel):
    categories: List[Category]
    budget_categories: List[Category]
