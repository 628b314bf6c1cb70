# src/danfe_tracking/errors.py
from __future__ import annotations

from typing import Optional


class TrackingError(RuntimeError):
    """Base class for every fatal lookup error.

    `user_message` is the single human-readable line shown to the user.
    """

    def __init__(self, user_message: str) -> None:
        super().__init__(user_message)
        self.user_message = user_message


# --- XML stage ---------------------------------------------------------------

class ExtractionError(TrackingError):
    """Raised when an uploaded NF-e document cannot yield an access key."""

    reason: str = "extraction_failed"


class MalformedXml(ExtractionError):
    reason = "malformed_xml"

    def __init__(self, detail: str = "") -> None:
        msg = "Invalid or malformed XML file."
        if detail:
            msg = f"{msg} ({detail})"
        super().__init__(msg)
        self.detail = detail


class MissingRoot(ExtractionError):
    reason = "missing_root"

    def __init__(self) -> None:
        super().__init__(
            "Element 'infNFe' not found in the XML; cannot extract shipment data.")


class KeyNotFound(ExtractionError):
    reason = "key_not_found"

    def __init__(self) -> None:
        super().__init__(
            "Access key (chNFe or NFe Id) not found. Check that the file is a valid NF-e XML.")


class InvalidKey(ExtractionError):
    """A key candidate was present but is not 44 numeric digits."""

    reason = "invalid_key"

    def __init__(self, found_value: str) -> None:
        shown = found_value if len(found_value) <= 20 else found_value[:20] + "..."
        super().__init__(
            f'Key found ("{shown}") is not a valid access key (44 numeric digits).')
        self.found_value = found_value


# --- provider stage ----------------------------------------------------------

DEFAULT_PROVIDER_MESSAGE = "Tracking key not found or invalid at SSW."


class ProviderError(TrackingError):
    """The provider answered, but its own success flag is false or absent."""

    def __init__(self, message: Optional[str] = None) -> None:
        self.message = (message or "").strip() or DEFAULT_PROVIDER_MESSAGE
        super().__init__(self.message)


class NetworkFailure(TrackingError):
    """Transport-level failure talking to a collaborator; surfaced as-is."""

    def __init__(self, message: str, status: Optional[int] = None) -> None:
        self.message = message
        self.status = status
        text = message if status is None else f"{message} (status: {status})"
        super().__init__(text)


__all__ = [
    "TrackingError",
    "ExtractionError",
    "MalformedXml",
    "MissingRoot",
    "KeyNotFound",
    "InvalidKey",
    "ProviderError",
    "NetworkFailure",
    "DEFAULT_PROVIDER_MESSAGE",
]
