from __future__ import annotations

from collections import defaultdict
from datetime import date
from typing import Iterable, Sequence

from domain.models import Budget, Transaction, TransactionType
from domain.schemas import BudgetProgress, ChartSlice, Dashboard, Totals

RECENT_TRANSACTIONS = 5


def compute_totals(transactions: Iterable[Transaction]) -> Totals:
    income = 0.0
    expenses = 0.0
    for txn in transactions:
        if txn.type is TransactionType.INCOME:
            income += txn.amount
        else:
            expenses += txn.amount
    return Totals(income=income, expenses=expenses, balance=income - expenses)


def _expenses_by_category(transactions: Iterable[Transaction]) -> dict[str, float]:
    groups: dict[str, float] = defaultdict(float)
    for txn in transactions:
        if txn.type is TransactionType.EXPENSE:
            groups[txn.category.value] += txn.amount
    return dict(groups)


def category_breakdown(transactions: Iterable[Transaction]) -> dict[str, float]:
    """Expense totals per category, keyed by category name, in order of first appearance."""
    return _expenses_by_category(transactions)


def category_chart_data(transactions: Iterable[Transaction]) -> list[ChartSlice]:
    return [ChartSlice(name=name, value=value) for name, value in category_breakdown(transactions).items()]


def current_month_spending(transactions: Iterable[Transaction], today: date | None = None) -> dict[str, float]:
    """Expense totals per category for transactions dated from the 1st of this month up to today."""
    today = today or date.today()
    start = today.replace(day=1)
    return _expenses_by_category(txn for txn in transactions if start <= txn.date <= today)


def budget_progress(
    budgets: Iterable[Budget],
    transactions: Iterable[Transaction],
    today: date | None = None,
) -> list[BudgetProgress]:
    spending = current_month_spending(transactions, today=today)
    progress: list[BudgetProgress] = []
    for budget in budgets:
        spent = spending.get(budget.category.value, 0.0)
        percentage = (spent / budget.limit) * 100 if budget.limit > 0 else 0.0
        progress.append(BudgetProgress.for_budget(budget, spent=spent, percentage=percentage))
    return progress


def build_dashboard(
    transactions: Sequence[Transaction],
    budgets: Sequence[Budget],
    today: date | None = None,
) -> Dashboard:
    today = today or date.today()
    return Dashboard(
        totals=compute_totals(transactions),
        category_breakdown=category_chart_data(transactions),
        current_month_spending=current_month_spending(transactions, today=today),
        budget_progress=budget_progress(budgets, transactions, today=today),
        recent_transactions=list(transactions[:RECENT_TRANSACTIONS]),
        transaction_count=len(transactions),
    )
