from __future__ import annotations

import logging

from fastapi import FastAPI, File, Response, UploadFile
from fastapi.responses import JSONResponse

from application.aggregates import budget_progress, build_dashboard
from application.receipt import ReceiptService
from application.store import FinanceStore
from application.validator import TransactionFormValidator
from domain.models import BUDGET_CATEGORIES, CATEGORIES, Budget, Transaction
from domain.schemas import BudgetInput, BudgetProgress, CategoryCatalog, Dashboard, FormCheck, TransactionForm
from interface.cli import build_store

logger = logging.getLogger(__name__)


def create_app(store: FinanceStore | None = None, receipts: ReceiptService | None = None) -> FastAPI:
    store = store or build_store()
    receipts = receipts or ReceiptService()
    validator = TransactionFormValidator()

    app = FastAPI(title="Spendwise API")

    @app.get("/health")
    def health() -> dict[str, str]:
        return {"status": "ok"}

    @app.get("/categories")
    def categories() -> CategoryCatalog:
        return CategoryCatalog(categories=list(CATEGORIES), budget_categories=list(BUDGET_CATEGORIES))

    @app.get("/transactions")
    def list_transactions() -> list[Transaction]:
        return store.transactions

    @app.get("/transactions/form")
    def blank_form() -> TransactionForm:
        return TransactionForm.blank(store.today())

    @app.post("/transactions/validate")
    def validate_form(form: TransactionForm) -> FormCheck:
        return validator.evaluate(form)

    @app.post("/transactions", status_code=201)
    def add_transaction(form: TransactionForm):
        result = store.add_transaction(form)
        if not result.ok:
            return JSONResponse(status_code=422, content=result.model_dump(mode="json"))
        return result.transaction.model_dump(mode="json")

    @app.delete("/transactions/{transaction_id}")
    def delete_transaction(transaction_id: str) -> dict[str, bool]:
        return {"deleted": store.delete_transaction(transaction_id)}

    @app.get("/budgets")
    def list_budgets() -> list[Budget]:
        return store.budgets

    @app.put("/budgets")
    def save_budget(payload: BudgetInput):
        if not store.upsert_budget(payload.category, payload.limit):
            return JSONResponse(
                status_code=422,
                content={"errors": {"limit": "Limit must be a positive number"}},
            )
        return [budget.model_dump(mode="json") for budget in store.budgets]

    @app.get("/budgets/progress")
    def get_budget_progress() -> list[BudgetProgress]:
        return budget_progress(store.budgets, store.transactions, today=store.today())

    @app.get("/dashboard")
    def dashboard() -> Dashboard:
        return build_dashboard(store.transactions, store.budgets, today=store.today())

    @app.post("/receipts/scan")
    def scan_receipt(file: UploadFile = File(...)):
        image = file.file.read()
        logger.info("Receipt upload received filename=%s bytes=%d", file.filename, len(image))
        form = receipts.scan(image)
        if form is None:
            return Response(status_code=204)
        return form.model_dump(mode="json")

    return app
