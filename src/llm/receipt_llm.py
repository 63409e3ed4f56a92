from __future__ import annotations

import logging
from typing import Any

from pydantic import ValidationError

from domain.models import RECEIPT_CATEGORIES
from domain.schemas import ReceiptData
from infrastructure.llm.gemini_client import GeminiClient

logger = logging.getLogger(__name__)

RECEIPT_MIME_TYPE = "image/jpeg"

RECEIPT_RESPONSE_SCHEMA: dict[str, Any] = {
    "type": "OBJECT",
    "properties": {
        "amount": {"type": "NUMBER"},
        "description": {"type": "STRING"},
        "category": {"type": "STRING"},
        "date": {"type": "STRING"},
    },
    "required": ["amount", "description", "category", "date"],
}


def split_data_uri(image_data_uri: str) -> str:
    """Return the base64 payload of a `data:<mime>;base64,<payload>` URI (or the input if it has no header)."""
    _, sep, payload = image_data_uri.partition(",")
    return payload if sep else image_data_uri


class ReceiptLLM:
    """Builds the receipt extraction request and parses the strict JSON reply."""

    def __init__(self, client: GeminiClient):
        self._client = client

    def build_prompt(self) -> str:
        categories = ", ".join(category.value for category in RECEIPT_CATEGORIES)
        return (
            "Extract transaction details from this receipt: Total Amount, "
            "Description (Store/Merchant Name), "
            f"Category (pick from: {categories}), "
            "and Date (YYYY-MM-DD)."
        )

    def build_parts(self, image_data_uri: str) -> list[dict[str, Any]]:
        return [
            {"inline_data": {"mime_type": RECEIPT_MIME_TYPE, "data": split_data_uri(image_data_uri)}},
            {"text": self.build_prompt()},
        ]

    def extract(self, image_data_uri: str) -> ReceiptData | None:
        logger.info("ReceiptLLM extract start image_chars=%d", len(image_data_uri))
        raw = self._client.generate_content(self.build_parts(image_data_uri), RECEIPT_RESPONSE_SCHEMA).strip()

        if not raw:
            logger.info("ReceiptLLM empty response; no receipt data")
            return None

        try:
            receipt = ReceiptData.model_validate_json(raw)
        except ValidationError as exc:
            logger.warning("ReceiptLLM response did not match receipt schema: %s", exc.errors()[0].get("msg"))
            return None

        logger.info("ReceiptLLM accepted receipt category=%s amount=%s", receipt.category.value, receipt.amount)
        return receipt
