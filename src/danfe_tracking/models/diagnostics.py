from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, List


@dataclass(frozen=True)
class Anomaly:
    """A non-fatal oddity recovered from with a default (bad date, missing element...)."""

    field: str
    message: str

    def __str__(self) -> str:
        return f"{self.field}: {self.message}"


class Diagnostics:
    """Ordered collector handed through parsing code instead of logging inline."""

    def __init__(self) -> None:
        self._items: List[Anomaly] = []

    def add(self, field: str, message: str) -> None:
        self._items.append(Anomaly(field, message))

    def extend(self, items: Iterable[Anomaly]) -> None:
        self._items.extend(items)

    @property
    def items(self) -> tuple[Anomaly, ...]:
        return tuple(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self):
        return iter(self._items)


def log_anomalies(logger: logging.Logger, context: str, anomalies: Iterable[Anomaly]) -> None:
    for a in anomalies:
        logger.debug("%s anomaly %s", context, a)
