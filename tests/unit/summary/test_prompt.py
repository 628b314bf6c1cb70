from datetime import datetime, timedelta, timezone

from danfe_tracking.models import TrackingEvent, TrackingRecord
from danfe_tracking.parsing.dates import EPOCH_PLACEHOLDER
from danfe_tracking.summary.prompt import build_prompt, format_for_prompt


def _record(n_events):
    base = datetime(2025, 12, 10, 12, 0, tzinfo=timezone.utc)
    events = tuple(
        TrackingEvent(base - timedelta(days=i), f"Status {i}", f"Cidade {i}",
                      details="obs" if i == 0 else None)
        for i in range(n_events)
    )
    return TrackingRecord(
        id="35240612345678000199550010000123451000123458",
        carrier="RAPIDO SSW",
        estimated_delivery="2025-12-12",
        current_status=events[0].status if events else "No tracking events",
        origin="Fabrica",
        destination="Loja",
        product_name="Nota Fiscal: 1 Série: 1",
        weight="15.50 kg",
        events=events,
    )


def test_format_for_prompt_lists_recent_events():
    text = format_for_prompt(_record(2))
    assert "Package/Invoice ID: 35240612345678000199550010000123451000123458" in text
    assert "Estimated Delivery: 12/12/2025" in text
    assert "Contents/Details: Nota Fiscal: 1 Série: 1" in text
    assert "- 10/12/2025 12:00: Status 0 at Cidade 0 (obs)" in text
    assert "- 09/12/2025 12:00: Status 1 at Cidade 1\n" in text
    assert "earlier events" not in text


def test_format_for_prompt_is_bounded():
    text = format_for_prompt(_record(8))
    assert text.count("\n- ") == 5
    assert "Status 5" not in text
    assert "(... and 3 earlier events)" in text


def test_placeholder_timestamp_is_not_shown_as_1970():
    rec = _record(1)
    rec = TrackingRecord(**{**rec.__dict__, "events": (
        TrackingEvent(EPOCH_PLACEHOLDER, "Sem data", "N/A"),)})
    text = format_for_prompt(rec)
    assert "date not provided" in text
    assert "1970" not in text


def test_sentinel_delivery_passes_through():
    rec = TrackingRecord(**{**_record(1).__dict__, "estimated_delivery": "Not available"})
    assert "Estimated Delivery: Not available" in format_for_prompt(rec)


def test_build_prompt_names_language():
    prompt = build_prompt(_record(1), language="English")
    assert "in English" in prompt
    assert "Tracking data:" in prompt
