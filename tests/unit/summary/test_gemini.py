from datetime import datetime, timezone

import pytest
import requests

from danfe_tracking.models import TrackingEvent, TrackingRecord
from danfe_tracking.summary.gemini import (
    SUMMARY_INVALID_KEY,
    SUMMARY_NO_KEY,
    SUMMARY_QUOTA,
    GeminiSummarizer,
)


class FakeResp:
    def __init__(self, status_code=200, body=None, text=""):
        self.status_code = status_code
        self._body = body
        self.text = text

    def json(self):
        if self._body is None:
            raise ValueError("no json")
        return self._body


class FakeTransport:
    def __init__(self, resp=None, exc=None):
        self.resp = resp
        self.exc = exc
        self.calls = []

    def post(self, url, *, headers=None, json=None, params=None):
        self.calls.append({"url": url, "headers": headers, "json": json})
        if self.exc is not None:
            raise self.exc
        return self.resp


def _record(with_events=True):
    events = (TrackingEvent(datetime(2025, 12, 3, tzinfo=timezone.utc), "Em rota", "Campinas"),)
    return TrackingRecord(
        id="35240612345678000199550010000123451000123458",
        carrier="RAPIDO SSW",
        estimated_delivery="2025-12-12",
        current_status="Em rota" if with_events else "No tracking events",
        origin="A",
        destination="B",
        events=events if with_events else (),
    )


def _ok(text):
    return FakeResp(200, {"candidates": [{"content": {"parts": [{"text": text}]}}]})


def test_summary_text_is_returned():
    t = FakeTransport(_ok("  Seu pedido esta a caminho.  "))
    s = GeminiSummarizer("k-123", model="gemini-test", transport=t, base_url="https://g.example/v1/")

    assert s.summarize(_record()) == "Seu pedido esta a caminho."
    call = t.calls[0]
    assert call["url"] == "https://g.example/v1/models/gemini-test:generateContent"
    assert call["headers"]["x-goog-api-key"] == "k-123"
    assert "Em rota" in call["json"]["contents"][0]["parts"][0]["text"]


def test_no_events_means_no_summary():
    t = FakeTransport(_ok("x"))
    assert GeminiSummarizer("k", transport=t).summarize(_record(with_events=False)) is None
    assert t.calls == []


def test_missing_key_placeholder():
    t = FakeTransport(_ok("x"))
    assert GeminiSummarizer("", transport=t).summarize(_record()) == SUMMARY_NO_KEY
    assert t.calls == []


@pytest.mark.parametrize("resp,expected", [
    (FakeResp(429, {"error": {"status": "RESOURCE_EXHAUSTED"}}), SUMMARY_QUOTA),
    (FakeResp(400, {"error": {"status": "INVALID_ARGUMENT", "message": "API key not valid."}}),
     SUMMARY_INVALID_KEY),
    (FakeResp(403, {"error": {"message": "Quota exceeded for project"}}), SUMMARY_QUOTA),
])
def test_error_responses_map_to_placeholders(resp, expected):
    s = GeminiSummarizer("k", transport=FakeTransport(resp))
    assert s.summarize(_record()) == expected


def test_other_errors_are_embedded():
    resp = FakeResp(500, None, text="upstream exploded")
    out = GeminiSummarizer("k", transport=FakeTransport(resp)).summarize(_record())
    assert out.startswith("The AI summary could not be generated")
    assert "upstream exploded" in out


def test_transport_failure_never_raises():
    t = FakeTransport(exc=requests.Timeout("read timed out"))
    out = GeminiSummarizer("k", transport=t).summarize(_record())
    assert "read timed out" in out


def test_empty_candidates_is_a_failure_placeholder():
    out = GeminiSummarizer("k", transport=FakeTransport(FakeResp(200, {"candidates": []}))).summarize(_record())
    assert "empty summary received" in out


@pytest.mark.parametrize("resp", [
    FakeResp(400, {"error": "bad request"}),
    FakeResp(400, ["not", "an", "object"], text="bad request"),
    FakeResp(500, {"error": None}, text="bad request"),
])
def test_loose_error_bodies_never_raise(resp):
    out = GeminiSummarizer("k", transport=FakeTransport(resp)).summarize(_record())
    assert out.startswith("The AI summary could not be generated")
    assert "bad request" in out


@pytest.mark.parametrize("body", [
    {"candidates": [{"content": {"parts": None}}]},
    {"candidates": [{"content": {"parts": [{"text": None}, "junk"]}}]},
    "not an object",
])
def test_loose_success_bodies_never_raise(body):
    out = GeminiSummarizer("k", transport=FakeTransport(FakeResp(200, body))).summarize(_record())
    assert "empty summary received" in out
