from __future__ import annotations

import logging
import uuid
from datetime import date
from typing import Callable

from application.validator import TransactionFormValidator, is_valid_budget_limit
from domain.models import DEFAULT_CATEGORY, DEFAULT_TYPE, Budget, Category, Transaction
from domain.schemas import AddTransactionResult, TransactionForm
from infrastructure.persistence.repository import CollectionRepository

logger = logging.getLogger(__name__)


def _new_id() -> str:
    return str(uuid.uuid4())


class FinanceStore:
    """
    Owns the transaction and budget collections.

    Each mutation validates its input, applies the change and rewrites the
    affected collection before returning. Transactions are kept newest first;
    budgets are unique by category and keep their insertion position.
    """

    def __init__(
        self,
        repository: CollectionRepository,
        validator: TransactionFormValidator | None = None,
        today: Callable[[], date] = date.today,
        id_factory: Callable[[], str] = _new_id,
    ):
        self._repository = repository
        self._validator = validator or TransactionFormValidator()
        self._today = today
        self._id_factory = id_factory
        self._transactions: list[Transaction] = repository.load_transactions()
        self._budgets: list[Budget] = repository.load_budgets()
        logger.info("FinanceStore ready transactions=%d budgets=%d", len(self._transactions), len(self._budgets))

    @property
    def transactions(self) -> list[Transaction]:
        return list(self._transactions)

    @property
    def budgets(self) -> list[Budget]:
        return list(self._budgets)

    def today(self) -> date:
        return self._today()

    def get_transaction(self, transaction_id: str) -> Transaction | None:
        return next((txn for txn in self._transactions if txn.id == transaction_id), None)

    # ---- transactions ----
    def add_transaction(self, form: TransactionForm) -> AddTransactionResult:
        issues = self._validator.check(form)
        if issues:
            touched = form.touch_all()
            logger.info("Add transaction rejected issues=%s", ",".join(issue.code for issue in issues))
            return AddTransactionResult(ok=False, form=touched, errors=self._validator.field_errors(touched))

        transaction = Transaction(
            id=self._unique_id(),
            amount=float(form.amount),
            description=form.description,
            category=form.category or DEFAULT_CATEGORY,
            date=form.date or self._today(),
            type=form.type or DEFAULT_TYPE,
        )
        self._transactions.insert(0, transaction)
        self._repository.save_transactions(self._transactions)
        logger.info(
            "Added transaction id=%s type=%s category=%s amount=%.2f",
            transaction.id,
            transaction.type.value,
            transaction.category.value,
            transaction.amount,
        )
        return AddTransactionResult(ok=True, transaction=transaction, form=TransactionForm.blank(self._today()))

    def delete_transaction(self, transaction_id: str) -> bool:
        remaining = [txn for txn in self._transactions if txn.id != transaction_id]
        if len(remaining) == len(self._transactions):
            logger.info("Delete transaction id=%s not found; nothing to do", transaction_id)
            return False

        self._transactions = remaining
        self._repository.save_transactions(self._transactions)
        logger.info("Deleted transaction id=%s", transaction_id)
        return True

    # ---- budgets ----
    def upsert_budget(self, category: Category | str, limit: float) -> bool:
        category = Category(category)
        if not is_valid_budget_limit(limit):
            logger.info("Budget rejected category=%s limit=%s", category.value, limit)
            return False

        budget = Budget(category=category, limit=limit)
        for idx, existing in enumerate(self._budgets):
            if existing.category is category:
                self._budgets[idx] = budget
                break
        else:
            self._budgets.append(budget)

        self._repository.save_budgets(self._budgets)
        logger.info("Saved budget category=%s limit=%.2f", category.value, limit)
        return True

    def _unique_id(self) -> str:
        existing = {txn.id for txn in self._transactions}
        new_id = self._id_factory()
        while new_id in existing:
            new_id = self._id_factory()
        return new_id
