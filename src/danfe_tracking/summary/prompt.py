from __future__ import annotations

from typing import List

from danfe_tracking.models import TrackingEvent, TrackingRecord
from danfe_tracking.models.tracking import UNAVAILABLE
from danfe_tracking.parsing.dates import EPOCH_PLACEHOLDER

PROMPT_EVENT_LIMIT = 5

PROMPT_TEMPLATE = """\
You are a helpful assistant giving a customer a concise summary of their parcel tracking.
Using the tracking data below, write a friendly, brief update in {language}.
Focus on the current status, the delivery estimate and any important recent events.
Avoid jargon where possible. Keep it to 2-3 sentences.

Tracking data:
{data}
Concise summary:
"""


def _event_time(ev: TrackingEvent) -> str:
    if ev.timestamp == EPOCH_PLACEHOLDER:
        return "date not provided"
    return ev.timestamp.strftime("%d/%m/%Y %H:%M")


def _delivery(value: str) -> str:
    # ISO calendar dates are shown dd/mm/yyyy; sentinels pass through
    parts = value.split("-")
    if len(parts) == 3 and all(p.isdigit() for p in parts):
        return f"{parts[2]}/{parts[1]}/{parts[0]}"
    return value or UNAVAILABLE


def format_for_prompt(record: TrackingRecord, *, limit: int = PROMPT_EVENT_LIMIT) -> str:
    """Plain-text view of a record, bounded to the `limit` most recent events."""
    lines: List[str] = [
        f"Package/Invoice ID: {record.id}",
        f"Carrier: {record.carrier}",
    ]
    if record.product_name:
        lines.append(f"Contents/Details: {record.product_name}")
    lines += [
        f"Current Status: {record.current_status}",
        f"Estimated Delivery: {_delivery(record.estimated_delivery)}",
        f"Origin: {record.origin}",
        f"Destination: {record.destination}",
    ]
    if record.weight:
        lines.append(f"Weight: {record.weight}")

    lines.append("Event History:")
    for ev in record.events[:limit]:
        suffix = f" ({ev.details})" if ev.details else ""
        lines.append(f"- {_event_time(ev)}: {ev.status} at {ev.location}{suffix}")
    hidden = len(record.events) - limit
    if hidden > 0:
        lines.append(f"(... and {hidden} earlier events)")
    return "\n".join(lines) + "\n"


def build_prompt(record: TrackingRecord, *, language: str = "Brazilian Portuguese") -> str:
    return PROMPT_TEMPLATE.format(language=language, data=format_for_prompt(record))
