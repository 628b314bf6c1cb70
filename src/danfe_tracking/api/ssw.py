from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional, Union
import logging

import requests

from danfe_tracking.errors import NetworkFailure
from danfe_tracking.models import AccessKey
from danfe_tracking.models.env_cfg import DEFAULT_SSW_BASE_URL
from .transport import RequestsTransport

_LOG_BODY_LIMIT = 4000


def _clip(text: Optional[str]) -> Optional[str]:
    if text and len(text) > _LOG_BODY_LIMIT:
        return text[:_LOG_BODY_LIMIT] + "..."
    return text


@dataclass
class SswConfig:
    base_url: str = DEFAULT_SSW_BASE_URL


class SswClient:
    """Live client for the SSW DANFE tracking endpoint.

    One GET per lookup: ``{base_url}/trackingdanfe/{access_key}``. Returns the
    parsed JSON body untouched; deciding whether it is a success is the
    normalizer's job. Anything that keeps us from getting a JSON body raises
    NetworkFailure.
    """

    def __init__(
        self,
        cfg: Optional[SswConfig] = None,
        transport: Optional[RequestsTransport] = None,
        *,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.cfg = cfg or SswConfig()
        self.transport = transport or RequestsTransport()
        self.logger: logging.Logger = logger or logging.getLogger(
            "danfe_tracking.api.ssw"
        )

    def endpoint_for(self, access_key: Union[AccessKey, str]) -> str:
        return f"{self.cfg.base_url.rstrip('/')}/trackingdanfe/{access_key}"

    def fetch_tracking(self, access_key: Union[AccessKey, str]) -> Dict[str, Any]:
        endpoint = self.endpoint_for(access_key)
        self.logger.debug("SSW GET endpoint=%s", endpoint)

        try:
            resp = self.transport.get(
                endpoint, headers={"Accept": "application/json"})
        except requests.RequestException as ex:
            self.logger.warning("SSW transport GET failed for endpoint=%s: %s", endpoint, ex)
            raise NetworkFailure(f"Failed to reach SSW: {ex}") from ex

        status = resp.status_code
        if not 200 <= status < 300:
            message = self._error_message(resp)
            self.logger.warning(
                "SSW GET endpoint=%s returned error status=%s response_body=%s",
                endpoint, status, _clip(resp.text),
            )
            if message:
                raise NetworkFailure(f"SSW API error: {message}", status)
            raise NetworkFailure("Failed to fetch tracking data from SSW", status)

        try:
            body = resp.json()
        except ValueError as ex:
            self.logger.warning(
                "SSW GET endpoint=%s returned non-JSON body=%s", endpoint, _clip(resp.text))
            raise NetworkFailure("SSW returned a non-JSON response", status) from ex

        self.logger.debug(
            "SSW GET endpoint=%s status=%s response_body=%s", endpoint, status, _clip(resp.text))
        return body

    @staticmethod
    def _error_message(resp) -> Optional[str]:
        try:
            body = resp.json()
        except ValueError:
            return None
        if isinstance(body, dict) and isinstance(body.get("message"), str):
            return body["message"].strip() or None
        return None
