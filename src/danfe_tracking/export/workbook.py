from __future__ import annotations

from pathlib import Path
from typing import Iterable, List

import pandas as pd

from danfe_tracking.io.schema import (
    EVENT_COLUMNS,
    EVENTS_SHEET,
    INSTALLMENT_COLUMNS,
    INSTALLMENTS_SHEET,
    SUMMARY_COLUMNS,
    SUMMARY_SHEET,
)
from danfe_tracking.models import TrackingRecord


def records_to_frames(records: Iterable[TrackingRecord]) -> dict[str, pd.DataFrame]:
    """One frame per sheet. Timestamps are ISO strings; Excel has no tz-aware cells."""
    summary: List[dict] = []
    events: List[dict] = []
    installments: List[dict] = []

    for rec in records:
        summary.append(rec.to_summary_row())
        for ev in rec.events:
            events.append({
                "Access Key": rec.id,
                "Timestamp Utc": ev.timestamp.isoformat(),
                "Status": ev.status,
                "Location": ev.location,
                "Details": ev.details or "",
                "Code": ev.code or "",
            })
        hints = rec.shipment_hints
        for d in (hints.installments or ()) if hints else ():
            installments.append({
                "Access Key": rec.id,
                "Number": d.number or "",
                "Due Date": d.due_date or "",
                "Value": d.value,
            })

    return {
        SUMMARY_SHEET: pd.DataFrame(summary, columns=SUMMARY_COLUMNS),
        EVENTS_SHEET: pd.DataFrame(events, columns=EVENT_COLUMNS),
        INSTALLMENTS_SHEET: pd.DataFrame(installments, columns=INSTALLMENT_COLUMNS),
    }


def export_workbook(records: Iterable[TrackingRecord], path: Path) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    frames = records_to_frames(records)
    with pd.ExcelWriter(path, engine="openpyxl", mode="w") as xw:
        for sheet, df in frames.items():
            df.to_excel(xw, sheet_name=sheet, index=False, na_rep="")
    return path
