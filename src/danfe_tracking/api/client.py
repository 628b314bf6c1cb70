# src/danfe_tracking/api/client.py
from __future__ import annotations
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Protocol, Union
import json

from danfe_tracking.models import AccessKey, is_access_key

# PayloadWriter records wrap the raw body as {"accessKey": ..., "body": {...}}
RECORD_KEY_FIELD = "accessKey"
RECORD_BODY_FIELD = "body"


class TrackingSource(Protocol):
    def fetch_tracking(self, access_key: Union[AccessKey, str]) -> Dict[str, Any]:
        ...


@dataclass
class ReplayClient:
    """Serves SSW payloads from a single JSON file instead of the network.

    The file may hold one object or an array. Entries are either raw SSW
    bodies or PayloadWriter records; each is indexed by every valid access key
    it mentions. Unknown keys get ``{}``, which normalizes to a ProviderError.
    """

    replay_file: Path
    _index: Dict[str, Any] = field(default_factory=dict, init=False, repr=False)

    def __post_init__(self) -> None:
        self.replay_file = Path(self.replay_file)
        if not self.replay_file.is_file():
            raise ValueError(
                f"Replay file does not exist or is not a file: {self.replay_file}")

        raw = json.loads(self.replay_file.read_text(encoding="utf-8"))
        entries: List[Any] = raw if isinstance(raw, list) else [raw]

        for entry in entries:
            body = entry
            keys: List[str] = []
            if isinstance(entry, dict) and RECORD_BODY_FIELD in entry and RECORD_KEY_FIELD in entry:
                body = entry[RECORD_BODY_FIELD]
                keys.append(str(entry[RECORD_KEY_FIELD]))
            keys.extend(self._extract_access_keys(body))
            for k in keys:
                # first entry wins for a key
                self._index.setdefault(k, body)

    @staticmethod
    def _extract_access_keys(payload: Any) -> List[str]:
        found: List[str] = []

        def recurse(obj: Any) -> None:
            if isinstance(obj, dict):
                for k, v in obj.items():
                    if k in ("chave", "chave_nfe", "chNFe", "accessKey") and is_access_key(str(v)):
                        found.append(str(v))
                    else:
                        recurse(v)
            elif isinstance(obj, list):
                for e in obj:
                    recurse(e)

        recurse(payload)
        return list(dict.fromkeys(found))

    @property
    def keys(self) -> List[str]:
        return list(self._index)

    def fetch_tracking(self, access_key: Union[AccessKey, str]) -> Dict[str, Any]:
        return self._index.get(str(access_key), {})
