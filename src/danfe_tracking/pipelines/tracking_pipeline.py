from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Tuple, Union

from danfe_tracking.api.client import TrackingSource
from danfe_tracking.api.normalize import normalize_ssw_with_diagnostics
from danfe_tracking.models import AccessKey, Anomaly, ShipmentHints, TrackingRecord
from danfe_tracking.models.diagnostics import log_anomalies
from danfe_tracking.parsing.nfe_xml import extract_shipment
from danfe_tracking.summary.gemini import Summarizer


@dataclass(frozen=True)
class LookupResult:
    record: TrackingRecord
    anomalies: Tuple[Anomaly, ...] = ()
    summary: Optional[str] = None


class TrackingPipeline:
    """key or NF-e XML -> SSW fetch -> normalized record (-> optional AI summary).

    Fatal problems raise TrackingError subclasses; nothing partial is returned.
    """

    def __init__(
        self,
        source: TrackingSource,
        logger: Optional[logging.Logger] = None,
        *,
        summarizer: Optional[Summarizer] = None,
    ) -> None:
        self.source = source
        self.logger = logger or logging.getLogger("danfe_tracking.pipelines.tracking")
        self.summarizer = summarizer

    def track_key(self, text: Optional[str]) -> LookupResult:
        """Typed key: validated (InvalidKey / KeyNotFound) before any network call."""
        return self.track(AccessKey.from_input(text))

    def track_xml(self, xml: Union[Path, str, bytes]) -> LookupResult:
        """`xml` is a file path or the raw document bytes; files are read fully first."""
        data = Path(xml).read_bytes() if isinstance(xml, (str, Path)) else xml
        extracted = extract_shipment(data)
        self.logger.info("Access key %s extracted from XML", extracted.access_key)
        return self.track(
            extracted.access_key,
            hints=extracted.hints,
            anomalies=extracted.anomalies,
        )

    def track(
        self,
        access_key: AccessKey,
        *,
        hints: Optional[ShipmentHints] = None,
        anomalies: Tuple[Anomaly, ...] = (),
    ) -> LookupResult:
        self.logger.debug("Fetching tracking for %s", access_key)
        payload = self.source.fetch_tracking(access_key)

        record, found = normalize_ssw_with_diagnostics(
            payload, access_key=access_key, hints=hints)
        all_anomalies = tuple(anomalies) + found
        log_anomalies(self.logger, record.id, all_anomalies)
        self.logger.info(
            "%s: %s (%d events)", record.id, record.current_status, len(record.events))

        summary = self.summarizer.summarize(record) if self.summarizer else None
        return LookupResult(record=record, anomalies=all_anomalies, summary=summary)
