from __future__ import annotations

import json
import logging
from typing import Any

from pydantic import BaseModel, ValidationError

from domain.models import Budget, Transaction
from infrastructure.persistence.key_value_store import KeyValueStore

logger = logging.getLogger(__name__)

TRANSACTIONS_KEY = "expenses"
BUDGETS_KEY = "budgets"
CORRUPT_SUFFIX = ".corrupt"


class CollectionRepository:
    """
    Loads and saves the two top-level collections as whole JSON arrays.

    Load policy:
      - missing key -> empty collection
      - unparseable JSON or a non-array payload -> raw text kept under
        `<key>.corrupt`, empty collection returned
      - records that fail validation are dropped one by one
      - duplicate transaction ids keep the first record only
      - duplicate budgets collapse to one per category
    """

    def __init__(self, store: KeyValueStore):
        self._store = store

    # ---- transactions ----
    def load_transactions(self) -> list[Transaction]:
        transactions: list[Transaction] = []
        seen: set[str] = set()
        for txn in self._load_records(TRANSACTIONS_KEY, Transaction):
            if txn.id in seen:
                logger.warning("Dropping stored transaction with duplicate id=%s", txn.id)
                continue
            seen.add(txn.id)
            transactions.append(txn)
        return transactions

    def save_transactions(self, transactions: list[Transaction]) -> None:
        self._save_records(TRANSACTIONS_KEY, transactions)

    # ---- budgets ----
    def load_budgets(self) -> list[Budget]:
        budgets = self._load_records(BUDGETS_KEY, Budget)
        merged: dict[str, Budget] = {}
        for budget in budgets:
            if budget.category.value in merged:
                logger.warning("Duplicate stored budget for category=%s; keeping latest limit", budget.category.value)
            merged[budget.category.value] = budget
        return list(merged.values())

    def save_budgets(self, budgets: list[Budget]) -> None:
        self._save_records(BUDGETS_KEY, budgets)

    # ---- shared ----
    def _load_records(self, key: str, model: type[BaseModel]) -> list[Any]:
        raw = self._store.get(key)
        if raw is None:
            logger.info("No stored collection key=%s; starting empty", key)
            return []

        try:
            payload = json.loads(raw)
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            self._quarantine(key, raw, f"invalid JSON: {exc}")
            return []

        if not isinstance(payload, list):
            self._quarantine(key, raw, f"expected a JSON array, got {type(payload).__name__}")
            return []

        records: list[Any] = []
        for idx, item in enumerate(payload):
            try:
                records.append(model.model_validate(item))
            except ValidationError as exc:
                logger.warning("Dropping invalid stored record key=%s index=%d: %s", key, idx, exc.errors()[0].get("msg"))
        logger.info("Loaded collection key=%s records=%d dropped=%d", key, len(records), len(payload) - len(records))
        return records

    def _save_records(self, key: str, records: list[Any]) -> None:
        payload = [record.model_dump(mode="json") for record in records]
        self._store.set(key, json.dumps(payload))
        logger.info("Saved collection key=%s records=%d", key, len(records))

    def _quarantine(self, key: str, raw: str, reason: str) -> None:
        logger.error("Stored collection key=%s is corrupt (%s); moved to %s%s", key, reason, key, CORRUPT_SUFFIX)
        self._store.set(f"{key}{CORRUPT_SUFFIX}", raw)
        self._store.delete(key)
