from __future__ import annotations

import logging
from typing import Any, Optional, Protocol

import requests

from danfe_tracking.api.transport import RequestsTransport
from danfe_tracking.models import TrackingRecord
from danfe_tracking.models.env_cfg import DEFAULT_GEMINI_MODEL
from .prompt import build_prompt

GEMINI_BASE_URL = "https://generativelanguage.googleapis.com/v1beta"

SUMMARY_NO_KEY = "AI summary unavailable: API key not configured."
SUMMARY_INVALID_KEY = "AI summary unavailable: invalid API key. Please check your configuration."
SUMMARY_QUOTA = "AI summary unavailable right now due to usage limits. Try again later."
SUMMARY_FAILED = "The AI summary could not be generated at this time. (Error: {error})"


class Summarizer(Protocol):
    def summarize(self, record: TrackingRecord) -> Optional[str]:
        ...


def _first_text(body: Any) -> str:
    try:
        parts = body["candidates"][0]["content"]["parts"]
    except (KeyError, IndexError, TypeError):
        return ""
    if not isinstance(parts, list):
        return ""
    return "".join(str(p.get("text") or "") for p in parts if isinstance(p, dict)).strip()


def _error_text(resp) -> str:
    try:
        err = resp.json().get("error")
    except (ValueError, AttributeError):
        return resp.text or ""
    if isinstance(err, dict):
        return " ".join(str(err.get(k) or "") for k in ("status", "message")).strip()
    # {"error": "bad request"} and other loose shapes
    return str(err or resp.text or "")


class GeminiSummarizer:
    """Prose summary of a TrackingRecord via the Gemini generateContent REST API.

    Never raises: every failure becomes one of the SUMMARY_* placeholders.
    Records without events are not summarized (None).
    """

    def __init__(
        self,
        api_key: str,
        *,
        model: str = DEFAULT_GEMINI_MODEL,
        transport: Optional[RequestsTransport] = None,
        base_url: str = GEMINI_BASE_URL,
        language: str = "Brazilian Portuguese",
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.api_key = api_key
        self.model = model
        self.transport = transport or RequestsTransport()
        self.base_url = base_url.rstrip("/")
        self.language = language
        self.logger = logger or logging.getLogger("danfe_tracking.summary.gemini")

    def _classify(self, error: str) -> str:
        low = error.lower()
        if "api key not valid" in low or "api_key_invalid" in low:
            return SUMMARY_INVALID_KEY
        if "quota" in low or "resource_exhausted" in low or "resource has been exhausted" in low:
            return SUMMARY_QUOTA
        return SUMMARY_FAILED.format(error=error or "unknown error")

    def summarize(self, record: TrackingRecord) -> Optional[str]:
        if not record.events:
            return None
        if not self.api_key:
            return SUMMARY_NO_KEY

        url = f"{self.base_url}/models/{self.model}:generateContent"
        body = {"contents": [{"parts": [{"text": build_prompt(record, language=self.language)}]}]}
        headers = {"x-goog-api-key": self.api_key, "Content-Type": "application/json"}

        try:
            resp = self.transport.post(url, headers=headers, json=body)
        except requests.RequestException as ex:
            self.logger.warning("Gemini request failed: %s", ex)
            return self._classify(str(ex))

        if resp.status_code == 429:
            return SUMMARY_QUOTA
        if not 200 <= resp.status_code < 300:
            error = _error_text(resp)
            self.logger.warning("Gemini returned status=%s error=%s", resp.status_code, error)
            return self._classify(error)

        try:
            text = _first_text(resp.json())
        except ValueError:
            text = ""
        if not text:
            self.logger.warning("Gemini returned an empty summary")
            return self._classify("empty summary received")
        return text
