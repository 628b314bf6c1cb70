from __future__ import annotations

from typing import List, Optional

from danfe_tracking.models import ShipmentHints, TrackingRecord
from danfe_tracking.parsing.dates import EPOCH_PLACEHOLDER


def format_brl(value: Optional[float]) -> str:
    if value is None:
        return "N/A"
    us = f"{value:,.2f}"
    return "R$ " + us.replace(",", "_").replace(".", ",").replace("_", ".")


def format_due_date(value: Optional[str]) -> str:
    """YYYY-MM-DD -> DD/MM/YYYY; anything else as-is."""
    if not value:
        return "N/A"
    parts = value.split("-")
    if len(parts) != 3:
        return value
    return f"{parts[2]}/{parts[1]}/{parts[0]}"


def _kg(value: Optional[float]) -> str:
    return f"{value:.3f} kg" if value is not None else "N/A"


def _hint_lines(h: ShipmentHints) -> List[str]:
    lines: List[str] = []
    if h.volume_info:
        v = h.volume_info
        qty = f"{v.quantity:g}" if v.quantity is not None else "N/A"
        lines += [
            "",
            "Volumes (from XML)",
            f"  Quantity: {qty}   Species: {v.species or 'N/A'}",
            f"  Net weight: {_kg(v.net_weight)}   Gross weight: {_kg(v.gross_weight)}",
        ]
    if h.invoice_info:
        i = h.invoice_info
        lines += [
            "",
            "Invoice (from XML)",
            f"  Number: {i.number or 'N/A'}   Original: {format_brl(i.original_value)}",
        ]
        if i.discount_value is not None:
            lines.append(f"  Discount: {format_brl(i.discount_value)}")
        lines.append(f"  Net: {format_brl(i.net_value)}")
    if h.installments:
        lines += ["", "Installments (from XML)"]
        for d in h.installments:
            lines.append(
                f"  {d.number or 'N/A'}  due {format_due_date(d.due_date)}  {format_brl(d.value)}")
    return lines


def render_text(record: TrackingRecord, *, summary: Optional[str] = None) -> str:
    """Terminal rendering of a record: header, optional AI summary, events, XML extras."""
    lines = [
        f"Access key:          {record.id}",
        f"Carrier:             {record.carrier}",
        f"Current status:      {record.current_status}",
        f"Estimated delivery:  {record.estimated_delivery}",
        f"Origin:              {record.origin}",
        f"Destination:         {record.destination}",
    ]
    if record.product_name:
        lines.append(f"Product:             {record.product_name}")
    if record.weight:
        lines.append(f"Weight:              {record.weight}")
    if summary:
        lines += ["", "Summary", f"  {summary}"]

    lines += ["", f"Events ({len(record.events)})"]
    for ev in record.events:
        when = ("date not provided" if ev.timestamp == EPOCH_PLACEHOLDER
                else ev.timestamp.strftime("%d/%m/%Y %H:%M:%S"))
        lines.append(f"  {when}  {ev.status} - {ev.location}")
        if ev.details:
            lines.append(f"      {ev.details}")

    if record.shipment_hints:
        lines += _hint_lines(record.shipment_hints)
    return "\n".join(lines) + "\n"
