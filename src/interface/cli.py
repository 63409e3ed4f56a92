from __future__ import annotations

import argparse
import json
import logging
import os
import sys
from datetime import date
from pathlib import Path

from dotenv import load_dotenv

from application.aggregates import build_dashboard
from application.receipt import ReceiptService
from application.store import FinanceStore
from domain.models import CATEGORIES, Category, TransactionType
from domain.schemas import TransactionForm
from infrastructure.persistence.key_value_store import JsonFileKeyValueStore
from infrastructure.persistence.repository import CollectionRepository


def build_store(data_dir: str | None = None) -> FinanceStore:
    return FinanceStore(CollectionRepository(JsonFileKeyValueStore(data_dir)))


def _parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="spendwise", description="Track income, expenses and monthly budgets.")
    parser.add_argument("--data-dir", default=None, help="Directory holding expenses.json and budgets.json")
    sub = parser.add_subparsers(dest="command")

    sub.add_parser("dashboard", help="Show totals, category breakdown and budget progress")
    sub.add_parser("list", help="List transactions, newest first")

    add = sub.add_parser("add", help="Record a transaction")
    add.add_argument("amount", type=float)
    add.add_argument("description")
    add.add_argument("--category", choices=[c.value for c in CATEGORIES], default=None)
    add.add_argument("--type", choices=[t.value for t in TransactionType], default=None)
    add.add_argument("--date", type=date.fromisoformat, default=None, help="YYYY-MM-DD (default: today)")

    delete = sub.add_parser("delete", help="Delete a transaction by id")
    delete.add_argument("id")
    delete.add_argument("--yes", action="store_true", help="Skip the confirmation prompt")

    budget = sub.add_parser("budget", help="Set the monthly limit for a category")
    budget.add_argument("category", choices=[c.value for c in CATEGORIES])
    budget.add_argument("limit", type=float)

    scan = sub.add_parser("scan", help="Extract a transaction from a receipt photo")
    scan.add_argument("image", type=Path)
    scan.add_argument("--save", action="store_true", help="Record the extracted transaction")

    serve = sub.add_parser("serve", help="Run the HTTP API")
    serve.add_argument("--host", default=os.getenv("SPENDWISE_HOST", "127.0.0.1"))
    serve.add_argument("--port", type=int, default=int(os.getenv("SPENDWISE_PORT", "8000")))
    return parser


def _print(payload) -> None:
    if hasattr(payload, "model_dump_json"):
        print(payload.model_dump_json(indent=2))
    else:
        print(json.dumps(payload, indent=2, default=str))


def run(argv: list[str] | None = None, store: FinanceStore | None = None, receipts: ReceiptService | None = None) -> int:
    args = _parser().parse_args(argv)
    command = args.command or "dashboard"

    if command == "serve":
        import uvicorn

        from interface.api import create_app

        uvicorn.run(create_app(store=store or build_store(args.data_dir)), host=args.host, port=args.port)
        return 0

    store = store or build_store(args.data_dir)

    if command == "dashboard":
        _print(build_dashboard(store.transactions, store.budgets, today=store.today()))
        return 0

    if command == "list":
        _print([txn.model_dump(mode="json") for txn in store.transactions])
        return 0

    if command == "add":
        form = TransactionForm(
            amount=args.amount,
            description=args.description,
            category=Category(args.category) if args.category else None,
            type=TransactionType(args.type) if args.type else None,
            date=args.date,
            touched={"amount", "description"},
        )
        result = store.add_transaction(form)
        if not result.ok:
            _print({"errors": result.errors})
            return 1
        _print(result.transaction)
        return 0

    if command == "delete":
        txn = store.get_transaction(args.id)
        if txn is None:
            _print({"deleted": False})
            return 0
        if not args.yes:
            answer = input(f"Delete '{txn.description}' ({txn.amount:.2f})? [y/N] ").strip().lower()
            if answer not in {"y", "yes"}:
                _print({"deleted": False})
                return 0
        _print({"deleted": store.delete_transaction(args.id)})
        return 0

    if command == "budget":
        if not store.upsert_budget(Category(args.category), args.limit):
            _print({"errors": {"limit": "Limit must be a positive number"}})
            return 1
        _print([b.model_dump(mode="json") for b in store.budgets])
        return 0

    if command == "scan":
        receipts = receipts or ReceiptService()
        form = receipts.scan(args.image.read_bytes())
        if form is None:
            _print({"scanned": False})
            return 1
        if args.save:
            result = store.add_transaction(form)
            _print(result.transaction if result.ok else {"errors": result.errors})
            return 0 if result.ok else 1
        _print(form)
        return 0

    return 2


def main() -> None:
    load_dotenv()
    logging.basicConfig(
        level=getattr(logging, os.getenv("LOG_LEVEL", "WARNING").upper(), logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )
    raise SystemExit(run())


if __name__ == "__main__":
    main()
