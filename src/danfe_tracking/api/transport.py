from __future__ import annotations

from typing import Any, Dict, Optional
import requests


class RequestsTransport:
    """Thin requests.Session wrapper with a fixed timeout.

    One attempt per call; failures surface to the caller.
    """

    def __init__(self, timeout: int = 30, *, session: Optional[requests.Session] = None) -> None:
        self.session = session or requests.Session()
        self.timeout = timeout

    def get(self, url: str, *, headers: Optional[Dict[str, str]] = None, params: Optional[Dict[str, Any]] = None):
        return self.session.get(url, headers=headers, params=params, timeout=self.timeout)

    def post(self, url: str, *, headers: Optional[Dict[str, str]] = None, json: Any = None, params: Optional[Dict[str, Any]] = None):
        return self.session.post(url, headers=headers, json=json, params=params, timeout=self.timeout)
