# src/danfe_tracking/__init__.py
from .api.normalize import normalize_ssw, normalize_ssw_with_diagnostics
from .parsing.dates import DatePolicy, normalize_date
from .parsing.nfe_xml import extract_shipment
from .pipelines.tracking_pipeline import LookupResult, TrackingPipeline

__all__ = [
    "DatePolicy",
    "LookupResult",
    "TrackingPipeline",
    "extract_shipment",
    "normalize_date",
    "normalize_ssw",
    "normalize_ssw_with_diagnostics",
]
