from __future__ import annotations

import json
import unittest
from datetime import date
from itertools import count

from application.store import FinanceStore
from application.validator import AMOUNT_NOT_POSITIVE, DESCRIPTION_REQUIRED
from domain.models import Category, TransactionType
from domain.schemas import TransactionForm
from infrastructure.persistence.key_value_store import InMemoryKeyValueStore
from infrastructure.persistence.repository import BUDGETS_KEY, TRANSACTIONS_KEY, CollectionRepository

TODAY = date(2024, 3, 15)


class _CountingStore(InMemoryKeyValueStore):
    def __init__(self, initial: dict[str, str] | None = None):
        super().__init__(initial)
        self.writes: list[str] = []

    def set(self, key: str, value: str) -> None:
        self.writes.append(key)
        super().set(key, value)


def _sequential_ids():
    counter = count(1)
    return lambda: f"id-{next(counter)}"


class FinanceStoreTests(unittest.TestCase):
    def setUp(self) -> None:
        self.kv = _CountingStore()
        self.store = self._store()

    def _store(self) -> FinanceStore:
        return FinanceStore(CollectionRepository(self.kv), today=lambda: TODAY, id_factory=_sequential_ids())

    def _add(self, amount: float, description: str = "Item", **fields):
        return self.store.add_transaction(TransactionForm(amount=amount, description=description, **fields))

    def test_empty_store_at_startup(self) -> None:
        self.assertEqual(self.store.transactions, [])
        self.assertEqual(self.store.budgets, [])

    def test_add_transaction_persists_and_is_newest_first(self) -> None:
        result = self._add(
            42.5,
            "Coffee",
            category=Category.FOOD_AND_DRINK,
            date=date(2024, 3, 5),
            type=TransactionType.EXPENSE,
        )
        self.assertTrue(result.ok)
        self.assertEqual(len(self.store.transactions), 1)

        first = self.store.transactions[0]
        self._add(10, "Bus")
        txns = self.store.transactions
        self.assertEqual(txns[0].description, "Bus")
        self.assertEqual(txns[1], first)

        stored = json.loads(self.kv.get(TRANSACTIONS_KEY))
        self.assertEqual([row["description"] for row in stored], ["Bus", "Coffee"])
        self.assertEqual(stored[1]["date"], "2024-03-05")
        self.assertEqual(stored[1]["category"], "Food & Drink")

    def test_add_transaction_applies_defaults(self) -> None:
        result = self._add(9.99, "Snack")
        txn = result.transaction
        self.assertEqual(txn.category, Category.OTHER)
        self.assertEqual(txn.type, TransactionType.EXPENSE)
        self.assertEqual(txn.date, TODAY)
        self.assertEqual(txn.id, "id-1")

    def test_add_transaction_returns_blank_form(self) -> None:
        result = self._add(1, "Gum")
        self.assertEqual(result.form.description, "")
        self.assertEqual(result.form.touched, set())
        self.assertEqual(result.form.date, TODAY)

    def test_invalid_form_is_rejected_and_touched(self) -> None:
        result = self._add(0, "")
        self.assertFalse(result.ok)
        self.assertIsNone(result.transaction)
        self.assertEqual(result.form.touched, {"amount", "description"})
        self.assertEqual(result.errors, {"amount": AMOUNT_NOT_POSITIVE, "description": DESCRIPTION_REQUIRED})
        self.assertEqual(self.store.transactions, [])
        self.assertEqual(self.kv.writes, [])

    def test_generated_ids_skip_existing_ones(self) -> None:
        ids = iter(["dup", "dup", "fresh"])
        store = FinanceStore(CollectionRepository(InMemoryKeyValueStore()), id_factory=lambda: next(ids))
        store.add_transaction(TransactionForm(amount=1, description="a"))
        result = store.add_transaction(TransactionForm(amount=1, description="b"))
        self.assertEqual(result.transaction.id, "fresh")

    def test_delete_transaction(self) -> None:
        keep = self._add(5, "Keep").transaction
        drop = self._add(6, "Drop").transaction

        self.assertTrue(self.store.delete_transaction(drop.id))
        self.assertEqual(self.store.transactions, [keep])
        self.assertEqual(len(json.loads(self.kv.get(TRANSACTIONS_KEY))), 1)

    def test_delete_missing_id_is_a_no_op(self) -> None:
        self._add(5, "A")
        self._add(6, "B")
        before = self.store.transactions
        raw_before = self.kv.get(TRANSACTIONS_KEY)
        writes_before = len(self.kv.writes)

        self.assertFalse(self.store.delete_transaction("missing"))
        self.assertEqual(self.store.transactions, before)
        self.assertEqual(self.kv.get(TRANSACTIONS_KEY), raw_before)
        self.assertEqual(len(self.kv.writes), writes_before)

    def test_transactions_property_is_a_copy(self) -> None:
        self._add(5, "A")
        self.store.transactions.clear()
        self.assertEqual(len(self.store.transactions), 1)

    def test_upsert_budget_appends_then_replaces_in_place(self) -> None:
        self.assertTrue(self.store.upsert_budget(Category.SHOPPING, 100))
        self.assertTrue(self.store.upsert_budget(Category.TRAVEL, 300))
        self.assertTrue(self.store.upsert_budget(Category.SHOPPING, 200))

        budgets = self.store.budgets
        self.assertEqual([b.category for b in budgets], [Category.SHOPPING, Category.TRAVEL])
        self.assertEqual(budgets[0].limit, 200)
        self.assertEqual(json.loads(self.kv.get(BUDGETS_KEY)), [
            {"category": "Shopping", "limit": 200.0},
            {"category": "Travel", "limit": 300.0},
        ])

    def test_upsert_budget_accepts_category_name(self) -> None:
        self.assertTrue(self.store.upsert_budget("Health", 40))
        self.assertEqual(self.store.budgets[0].category, Category.HEALTH)

    def test_upsert_budget_rejects_non_positive_limit(self) -> None:
        self.store.upsert_budget(Category.SHOPPING, 100)
        writes_before = len(self.kv.writes)

        self.assertFalse(self.store.upsert_budget(Category.SHOPPING, 0))
        self.assertFalse(self.store.upsert_budget(Category.TRAVEL, -5))
        self.assertEqual(len(self.store.budgets), 1)
        self.assertEqual(self.store.budgets[0].limit, 100)
        self.assertEqual(len(self.kv.writes), writes_before)

    def test_state_survives_reload(self) -> None:
        self._add(12, "Lunch", category=Category.FOOD_AND_DRINK)
        self.store.upsert_budget(Category.FOOD_AND_DRINK, 300)

        reloaded = self._store()
        self.assertEqual(reloaded.transactions, self.store.transactions)
        self.assertEqual(reloaded.budgets, self.store.budgets)


if __name__ == "__main__":
    unittest.main()
