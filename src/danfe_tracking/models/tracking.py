from __future__ import annotations

from dataclasses import dataclass, asdict, field
from datetime import datetime
from typing import Any, Optional, Tuple

from danfe_tracking.errors import InvalidKey, KeyNotFound

ACCESS_KEY_LENGTH = 44

# Display fallbacks; a record never carries an empty text field.
UNAVAILABLE = "Not available"
NO_EVENTS = "No tracking events"
UNKNOWN_STATUS = "Unknown status"
UNKNOWN_LOCATION = "N/A"
UNKNOWN_CARRIER = "Unknown carrier"
ORIGIN_UNAVAILABLE = "Origin N/A"
DESTINATION_UNAVAILABLE = "Destination N/A"


def is_access_key(value: Optional[str]) -> bool:
    return (
        isinstance(value, str)
        and len(value) == ACCESS_KEY_LENGTH
        and value.isascii()
        and value.isdigit()
    )


@dataclass(frozen=True)
class AccessKey:
    """44-digit NF-e access key. Construction validates."""

    value: str

    def __post_init__(self) -> None:
        if not is_access_key(self.value):
            raise InvalidKey(str(self.value))

    @classmethod
    def from_input(cls, text: Optional[str]) -> "AccessKey":
        """Validate a typed key. DANFE prints keys in groups, so inner whitespace is dropped."""
        cleaned = "".join((text or "").split())
        if not cleaned:
            raise KeyNotFound()
        return cls(cleaned)

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class TrackingEvent:
    timestamp: datetime               # tz-aware, UTC
    status: str
    location: str
    details: Optional[str] = None
    code: Optional[str] = None        # provider occurrence code, when known


@dataclass(frozen=True)
class VolumeInfo:
    quantity: Optional[float] = None
    species: Optional[str] = None
    net_weight: Optional[float] = None
    gross_weight: Optional[float] = None


@dataclass(frozen=True)
class InvoiceInfo:
    number: Optional[str] = None
    original_value: Optional[float] = None
    discount_value: Optional[float] = None
    net_value: Optional[float] = None


@dataclass(frozen=True)
class Installment:
    number: Optional[str] = None
    due_date: Optional[str] = None    # as written in the XML (YYYY-MM-DD)
    value: Optional[float] = None


@dataclass(frozen=True)
class ShipmentHints:
    """Metadata recovered from an uploaded NF-e; overlays, never overrides, provider data."""

    carrier_name: Optional[str] = None
    volume_info: Optional[VolumeInfo] = None
    invoice_info: Optional[InvoiceInfo] = None
    # None means "no installments"; never an empty tuple
    installments: Optional[Tuple[Installment, ...]] = None
    sender_name: Optional[str] = None
    recipient_name: Optional[str] = None
    document_number: Optional[str] = None
    document_series: Optional[str] = None


@dataclass(frozen=True)
class TrackingRecord:
    id: str
    carrier: str
    estimated_delivery: str
    current_status: str
    origin: str
    destination: str
    product_name: Optional[str] = None
    weight: Optional[str] = None
    events: Tuple[TrackingEvent, ...] = field(default_factory=tuple)
    shipment_hints: Optional[ShipmentHints] = None

    @property
    def has_events(self) -> bool:
        return bool(self.events)

    def to_dict(self) -> dict[str, Any]:
        """JSON-ready view; timestamps become ISO-8601 strings."""
        out = asdict(self)
        out["events"] = [
            {**ev, "timestamp": ev["timestamp"].isoformat()} for ev in out["events"]
        ]
        hints = out.get("shipment_hints")
        if hints and hints.get("installments") is not None:
            hints["installments"] = list(hints["installments"])
        return out

    def to_summary_row(self) -> dict[str, str]:
        """Flat columns written by the batch/export workbooks."""
        latest = self.events[0] if self.events else None
        return {
            "Access Key": self.id,
            "Carrier": self.carrier,
            "Current Status": self.current_status,
            "Estimated Delivery": self.estimated_delivery,
            "Origin": self.origin,
            "Destination": self.destination,
            "Product": self.product_name or "",
            "Weight": self.weight or "",
            "Latest Event Utc": latest.timestamp.isoformat() if latest else "",
            "Events": str(len(self.events)),
        }
