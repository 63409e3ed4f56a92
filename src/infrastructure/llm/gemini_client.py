from __future__ import annotations

import json
import logging
import os
import socket
import time
import urllib.error
import urllib.parse
import urllib.request
from typing import Any

logger = logging.getLogger(__name__)


class GeminiClient:
    """Minimal client for the Gemini `generateContent` REST endpoint."""

    def __init__(
        self,
        api_key: str | None = None,
        model: str | None = None,
        base_url: str | None = None,
        timeout_seconds: float | None = None,
    ) -> None:
        self.api_key = api_key if api_key is not None else (os.getenv("GEMINI_API_KEY") or os.getenv("API_KEY", ""))
        self.model = model or os.getenv("GEMINI_MODEL", "gemini-2.0-flash")
        self.base_url = (base_url or os.getenv("GEMINI_BASE_URL", "https://generativelanguage.googleapis.com")).rstrip("/")
        self.timeout_seconds = timeout_seconds or float(os.getenv("GEMINI_TIMEOUT_SECONDS", "60"))

    @property
    def endpoint(self) -> str:
        model = urllib.parse.quote(self.model, safe="")
        return f"{self.base_url}/v1beta/models/{model}:generateContent"

    def build_payload(self, parts: list[dict[str, Any]], response_schema: dict[str, Any] | None = None) -> dict[str, Any]:
        payload: dict[str, Any] = {"contents": [{"parts": parts}]}
        if response_schema is not None:
            payload["generationConfig"] = {
                "responseMimeType": "application/json",
                "responseSchema": response_schema,
            }
        return payload

    def generate_content(self, parts: list[dict[str, Any]], response_schema: dict[str, Any] | None = None) -> str:
        if not self.api_key:
            logger.warning("GeminiClient has no API key configured; skipping request")
            return ""

        started = time.perf_counter()
        req = urllib.request.Request(
            url=self.endpoint,
            data=json.dumps(self.build_payload(parts, response_schema)).encode("utf-8"),
            headers={
                "Content-Type": "application/json",
                "x-goog-api-key": self.api_key,
            },
            method="POST",
        )

        try:
            logger.info(
                "GeminiClient request start model=%s parts=%d timeout=%.1fs",
                self.model,
                len(parts),
                self.timeout_seconds,
            )
            with urllib.request.urlopen(req, timeout=self.timeout_seconds) as resp:
                body = json.loads(resp.read().decode("utf-8"))
        except (socket.timeout, urllib.error.URLError, TimeoutError, ConnectionError, json.JSONDecodeError, UnicodeDecodeError) as exc:
            elapsed = time.perf_counter() - started
            logger.warning("GeminiClient request failed after %.2fs: %s", elapsed, exc)
            return ""

        text = self._extract_text(body)
        elapsed = time.perf_counter() - started
        logger.info("GeminiClient request complete in %.2fs response_chars=%d", elapsed, len(text))
        return text

    @staticmethod
    def _extract_text(body: Any) -> str:
        # candidates[0].content.parts[*].text
        if not isinstance(body, dict):
            return ""
        candidates = body.get("candidates") or []
        if not candidates or not isinstance(candidates[0], dict):
            return ""
        content = candidates[0].get("content") or {}
        parts = content.get("parts") if isinstance(content, dict) else None
        texts = [part.get("text", "") for part in parts or [] if isinstance(part, dict)]
        return "".join(t for t in texts if isinstance(t, str)).strip()
