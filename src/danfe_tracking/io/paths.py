from __future__ import annotations

from pathlib import Path
from typing import Tuple

PROCESSED_SUFFIX = "_processed.xlsx"


def processed_path_for(batch_input: Path) -> Path:
    """keys.csv -> keys_processed.xlsx (always a workbook, whatever the input)."""
    p = Path(batch_input)
    return p.with_name(p.stem + PROCESSED_SUFFIX)


def derive_output_paths(batch_input: Path) -> Tuple[Path, Path]:
    """
    (processed workbook, log file), both beside the batch input.

    Raises FileNotFoundError for a missing input so the CLI can fail before
    any lookup is made.
    """
    p = Path(batch_input)
    if not p.exists():
        raise FileNotFoundError(p)
    return processed_path_for(p), p.with_suffix(".log")
