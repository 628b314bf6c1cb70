from __future__ import annotations

from pathlib import Path
from typing import Any, List

import numpy as np
import pandas as pd

from danfe_tracking.errors import TrackingError
from danfe_tracking.export.workbook import records_to_frames
from danfe_tracking.io.schema import (
    ACCESS_KEY_INPUT_COLUMNS,
    BATCH_COLUMNS,
    ERROR_COLUMN,
    SUMMARY_SHEET,
)
from danfe_tracking.models import TrackingRecord
from .tracking_pipeline import TrackingPipeline


def _is_blank(val: Any) -> bool:
    """True if value is None/NaN/empty/“nan”/“none” (case-insensitive)."""
    if val is None:
        return True
    if isinstance(val, float) and np.isnan(val):
        return True
    s = str(val).strip()
    return s == "" or s.lower() in {"nan", "none"}


class BatchProcessor:
    """Looks up every access key in a workbook/CSV and writes `<stem>_processed.xlsx`.

    A row whose lookup fails keeps its key and gets the error message in the
    Error column; the batch itself never aborts on a single row.
    """

    def __init__(self, logger, *, pipeline: TrackingPipeline) -> None:
        self.logger = logger
        self.pipeline = pipeline

    def process(self, input_path: Path, processed_path: Path) -> dict[str, Any]:
        input_path = Path(input_path)
        processed_path = Path(processed_path)

        if not input_path.exists():
            self.logger.error("Input file does not exist: %s", input_path)
            raise FileNotFoundError(input_path)

        df_in = self._read_input(input_path)
        column = self._key_column(df_in)

        rows: List[dict] = []
        records: List[TrackingRecord] = []
        if column is not None:
            for raw in df_in[column].tolist():
                if _is_blank(raw):
                    continue
                key_text = str(raw).strip()
                try:
                    result = self.pipeline.track_key(key_text)
                except TrackingError as ex:
                    self.logger.warning("Lookup failed for %s: %s", key_text, ex.user_message)
                    rows.append({"Access Key": key_text, ERROR_COLUMN: ex.user_message})
                    continue
                records.append(result.record)
                rows.append({**result.record.to_summary_row(), ERROR_COLUMN: ""})

        df_out = pd.DataFrame(rows, columns=BATCH_COLUMNS).fillna("")
        self._write_workbook(processed_path, df_out, records)

        failed = int((df_out[ERROR_COLUMN] != "").sum()) if len(df_out) else 0
        self.logger.info(
            "Wrote processed workbook → %s (%d keys, %d failed)", processed_path, len(df_out), failed)
        return {
            "output_path": str(processed_path),
            "rows": len(df_out),
            "failed": failed,
        }

    def _read_input(self, input_path: Path) -> pd.DataFrame:
        # dtype=str: 44-digit keys do not survive a float round-trip
        if input_path.suffix.lower() == ".csv":
            df_in = pd.read_csv(input_path, dtype=str)
        else:
            df_in = pd.read_excel(input_path, sheet_name=0, dtype=str, engine="openpyxl")
        self.logger.debug(
            "Opened batch input: %s (rows=%d, cols=%d)", input_path.name, len(df_in), len(df_in.columns))
        return df_in

    def _key_column(self, df: pd.DataFrame):
        for name in ACCESS_KEY_INPUT_COLUMNS:
            if name in df.columns:
                return name
        if len(df.columns):
            self.logger.debug("No access-key header found; using first column %r", df.columns[0])
            return df.columns[0]
        self.logger.warning("Batch input has no columns")
        return None

    def _write_workbook(self, processed_path: Path, df_out: pd.DataFrame, records: List[TrackingRecord]) -> None:
        processed_path.parent.mkdir(parents=True, exist_ok=True)
        frames = records_to_frames(records)
        frames[SUMMARY_SHEET] = df_out
        with pd.ExcelWriter(processed_path, engine="openpyxl", mode="w") as xw:
            for sheet, df in frames.items():
                df.to_excel(xw, sheet_name=sheet, index=False, na_rep="")
