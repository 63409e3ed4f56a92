from __future__ import annotations

import datetime as dt
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Category(str, Enum):
    FOOD_AND_DRINK = "Food & Drink"
    SHOPPING = "Shopping"
    HOUSING = "Housing"
    TRANSPORT = "Transport"
    TRAVEL = "Travel"
    ENTERTAINMENT = "Entertainment"
    HEALTH = "Health"
    INCOME = "Income"
    UTILITIES = "Utilities"
    OTHER = "Other"


class TransactionType(str, Enum):
    INCOME = "income"
    EXPENSE = "expense"


CATEGORIES: tuple[Category, ...] = tuple(Category)

# Budgets and receipts only ever describe spending.
BUDGET_CATEGORIES: tuple[Category, ...] = tuple(c for c in Category if c is not Category.INCOME)
RECEIPT_CATEGORIES: tuple[Category, ...] = BUDGET_CATEGORIES

DEFAULT_CATEGORY = Category.OTHER
DEFAULT_TYPE = TransactionType.EXPENSE


class Transaction(BaseModel):
    """A recorded income or expense event. Never edited after creation."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(min_length=1)
    amount: float = Field(gt=0, allow_inf_nan=False)
    description: str
    category: Category
    date: dt.date
    type: TransactionType

    @field_validator("description")
    @classmethod
    def description_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("description must not be blank")
        return value


class Budget(BaseModel):
    """Monthly spending ceiling for one category."""

    model_config = ConfigDict(frozen=True)

    category: Category
    limit: float = Field(ge=0, allow_inf_nan=False)
