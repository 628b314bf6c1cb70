from .diagnostics import Anomaly, Diagnostics
from .env_cfg import EnvCfg
from .tracking import (
    AccessKey,
    Installment,
    InvoiceInfo,
    ShipmentHints,
    TrackingEvent,
    TrackingRecord,
    VolumeInfo,
    is_access_key,
)

__all__ = [
    "AccessKey",
    "Anomaly",
    "Diagnostics",
    "EnvCfg",
    "Installment",
    "InvoiceInfo",
    "ShipmentHints",
    "TrackingEvent",
    "TrackingRecord",
    "VolumeInfo",
    "is_access_key",
]
