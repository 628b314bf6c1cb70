from __future__ import annotations

import json
import logging
import threading
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional, Union

from danfe_tracking.models import AccessKey
from .client import RECORD_BODY_FIELD, RECORD_KEY_FIELD, TrackingSource


@dataclass
class PayloadWriter:
    """Persist raw SSW bodies as a single JSON array readable by ReplayClient.

    File shape on disk:
        [
          {"accessKey": "...", "body": { ...response body 1... }},
          ...
        ]
    """

    path: Path
    logger: Optional[logging.Logger] = None
    _lock: threading.Lock = field(default_factory=threading.Lock, init=False, repr=False)

    def __post_init__(self) -> None:
        self.path = Path(self.path)
        self.logger = self.logger or logging.getLogger(
            "danfe_tracking.api.payload_writer")

    def add_response(self, access_key: Union[AccessKey, str], body: Any) -> None:
        """Append one body. Write failures are logged, never raised."""
        try:
            with self._lock:
                items = self.read_all()
                items.append({RECORD_KEY_FIELD: str(access_key), RECORD_BODY_FIELD: body})
                self.path.parent.mkdir(parents=True, exist_ok=True)
                with self.path.open("w", encoding="utf-8") as fh:
                    json.dump(items, fh, ensure_ascii=False, indent=2)
        except OSError as ex:
            self.logger.warning(
                "Failed to append SSW response to %s: %s", self.path, ex)

    def read_all(self) -> list:
        if not self.path.exists():
            return []
        try:
            with self.path.open("r", encoding="utf-8") as fh:
                data = json.load(fh)
        except (OSError, ValueError) as ex:
            self.logger.warning(
                "Failed to read SSW bodies from %s: %s", self.path, ex)
            return []
        return data if isinstance(data, list) else []


class RecordingSource:
    """Wraps a TrackingSource and records every body it returns."""

    def __init__(self, inner: TrackingSource, writer: PayloadWriter) -> None:
        self._inner = inner
        self._writer = writer

    def fetch_tracking(self, access_key: Union[AccessKey, str]) -> Dict[str, Any]:
        body = self._inner.fetch_tracking(access_key)
        self._writer.add_response(access_key, body)
        return body
