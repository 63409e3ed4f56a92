from __future__ import annotations

import base64
import logging
import time

from domain.schemas import TransactionForm
from infrastructure.llm.gemini_client import GeminiClient
from llm.receipt_llm import RECEIPT_MIME_TYPE, ReceiptLLM

logger = logging.getLogger(__name__)


def to_data_uri(image: bytes, mime_type: str = RECEIPT_MIME_TYPE) -> str:
    return f"data:{mime_type};base64,{base64.b64encode(image).decode('ascii')}"


class ReceiptService:
    """Turns an uploaded receipt photo into a pre-filled add-transaction form."""

    def __init__(self, receipt_llm: ReceiptLLM | None = None):
        self._receipt_llm = receipt_llm or ReceiptLLM(GeminiClient())

    def scan(self, image: bytes) -> TransactionForm | None:
        if not image:
            logger.info("ReceiptService scan skipped: empty upload")
            return None

        started = time.perf_counter()
        try:
            receipt = self._receipt_llm.extract(to_data_uri(image))
        except Exception:
            # Scanning is best effort; callers treat failure like a cancelled upload.
            logger.exception("ReceiptService scan failed")
            return None

        elapsed = time.perf_counter() - started
        if receipt is None:
            logger.info("ReceiptService scan produced no data in %.2fs", elapsed)
            return None

        logger.info("ReceiptService scan complete in %.2fs", elapsed)
        return TransactionForm.from_receipt(receipt)
