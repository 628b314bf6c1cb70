# src/danfe_tracking/io/schema.py
from __future__ import annotations


SUMMARY_COLUMNS = [
    "Access Key", "Carrier", "Current Status", "Estimated Delivery", "Origin",
    "Destination", "Product", "Weight", "Latest Event Utc", "Events",
]
EVENT_COLUMNS = ["Access Key", "Timestamp Utc",
                 "Status", "Location", "Details", "Code"]
INSTALLMENT_COLUMNS = ["Access Key", "Number", "Due Date", "Value"]

# Batch output: summary columns plus the per-row fatal error, if any
ERROR_COLUMN = "Error"
BATCH_COLUMNS = SUMMARY_COLUMNS + [ERROR_COLUMN]

SUMMARY_SHEET = "Summary"
EVENTS_SHEET = "Events"
INSTALLMENTS_SHEET = "Installments"

# Input column names accepted by the batch processor, in priority order.
# Falls back to the first column when none match.
ACCESS_KEY_INPUT_COLUMNS = ["Access Key", "Chave de Acesso", "chNFe", "Chave"]
