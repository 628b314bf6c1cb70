# src/danfe_tracking/api/normalize.py
from __future__ import annotations

import logging
import re
import unicodedata
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple, Union

from danfe_tracking.errors import ProviderError
from danfe_tracking.models import (
    AccessKey,
    Anomaly,
    Diagnostics,
    ShipmentHints,
    TrackingEvent,
    TrackingRecord,
)
from danfe_tracking.models.diagnostics import log_anomalies
from danfe_tracking.models.tracking import (
    DESTINATION_UNAVAILABLE,
    NO_EVENTS,
    ORIGIN_UNAVAILABLE,
    UNAVAILABLE,
    UNKNOWN_CARRIER,
    UNKNOWN_LOCATION,
    UNKNOWN_STATUS,
)
from danfe_tracking.parsing.dates import (
    DatePolicy,
    EPOCH_PLACEHOLDER,
    format_display_date,
    normalize_date,
)

logger = logging.getLogger("danfe_tracking.api.normalize")

# Issuance-event heuristic. SSW does not flag the issuance record, so this is
# best-effort: if SSW renames the occurrence, delivery/weight simply fall back
# to UNAVAILABLE / None.
ISSUANCE_CODES = frozenset({"80"})
ISSUANCE_PHRASES = ("documento de transporte emitido",)

_TRAILING_CODE_RE = re.compile(r"\((\d{1,3})\)\s*$")
_DELIVERY_RE = re.compile(
    r"previs\w*\s+(?:de\s+)?entrega\W{0,5}(\d{1,2}/\d{1,2}/(?:\d{4}|\d{2}))(?!\d)")
_WEIGHT_RE = re.compile(
    r"(\d{1,3}(?:\.\d{3})+,\d+|\d+(?:[.,]\d+)?)\s*kg\b", re.IGNORECASE)


@dataclass
class _RawEvent:
    timestamp: Optional[str]
    status: Optional[str]
    location: Optional[str]
    details: Optional[str]
    code: Optional[str]


@dataclass
class _RawShipment:
    """Header fields as found (all optional) plus raw events; None = no events collection."""

    carrier: Optional[str] = None
    origin: Optional[str] = None
    destination: Optional[str] = None
    document_number: Optional[str] = None
    document_series: Optional[str] = None
    delivery: Optional[str] = None
    weight_kg: Optional[float] = None
    events: Optional[List[_RawEvent]] = field(default=None)


# --- small coercions ---------------------------------------------------------

def _str(value: Any) -> Optional[str]:
    if value is None or isinstance(value, (dict, list)):
        return None
    s = str(value).strip()
    return s or None


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _name(value: Any) -> Optional[str]:
    """Party names arrive either as plain strings or as {nome|nomeFantasia|razaoSocial}."""
    if isinstance(value, dict):
        for k in ("nome", "nomeFantasia", "razaoSocial"):
            s = _str(value.get(k))
            if s:
                return s
        return None
    return _str(value)


def _to_float(value: Any) -> Optional[float]:
    s = _str(value)
    if s is None:
        return None
    if "," in s and "." in s:
        s = s.replace(".", "").replace(",", ".")
    elif "," in s:
        s = s.replace(",", ".")
    try:
        return float(s)
    except ValueError:
        return None


def _fold(text: Optional[str]) -> str:
    """Lower-case, accent-free form for phrase matching."""
    if not text:
        return ""
    decomposed = unicodedata.normalize("NFKD", text)
    return "".join(c for c in decomposed if not unicodedata.combining(c)).lower()


def _code_of(explicit: Any, status: Optional[str]) -> Optional[str]:
    code = _str(explicit)
    if code:
        return code
    m = _TRAILING_CODE_RE.search(status or "")
    return m.group(1) if m else None


# --- payload shape readers ---------------------------------------------------

def _from_documento(payload: Dict[str, Any], diag: Diagnostics) -> Optional[_RawShipment]:
    """
    Document variant:
      {"documento": {"header": {...}, "tracking": [ {data_hora, ocorrencia, descricao, cidade, filial}, ...]}}
    """
    doc = payload.get("documento")
    if not isinstance(doc, dict):
        return None

    header = _as_dict(doc.get("header"))
    out = _RawShipment(
        carrier=_name(header.get("transportadora")),
        origin=_name(header.get("remetente")),
        destination=_name(header.get("destinatario")),
        document_number=_str(header.get("nro_nf")),
        document_series=_str(header.get("serie_nf")),
        delivery=_str(header.get("previsao_entrega")),
    )
    if header.get("peso") is not None:
        out.weight_kg = _to_float(header.get("peso"))
        if out.weight_kg is None:
            diag.add("header.peso", f"not a number: {header.get('peso')!r}")

    tracking = doc.get("tracking")
    if isinstance(tracking, list):
        out.events = []
        for i, ev in enumerate(tracking):
            if not isinstance(ev, dict):
                diag.add(f"tracking[{i}]", "not an object; skipped")
                continue
            status = _str(ev.get("ocorrencia")) or _str(ev.get("tipo"))
            out.events.append(_RawEvent(
                timestamp=_str(ev.get("data_hora")) or _str(
                    ev.get("data_hora_efetiva")),
                status=status,
                location=_str(ev.get("cidade")) or _str(ev.get("filial")),
                details=_str(ev.get("descricao")),
                code=_code_of(ev.get("codigo"), status),
            ))
    return out


def _event_details_from_result(ev: Dict[str, Any]) -> Optional[str]:
    obs = _str(ev.get("observacao"))
    if obs:
        return obs
    addr = _as_dict(_as_dict(ev.get("unidade")).get("endereco"))
    street = _str(addr.get("logradouro"))
    if street:
        number = _str(addr.get("numero"))
        return f"{street}, {number}" if number else street
    return None


def _from_result(payload: Dict[str, Any], diag: Diagnostics) -> Optional[_RawShipment]:
    """
    Result variant:
      {"result": [ {danfe, transportadora, previsaoEntrega, remetente, destinatario, volumes, eventos} ]}
    """
    res = payload.get("result")
    if isinstance(res, list):
        res = res[0] if res else None
    if not isinstance(res, dict):
        return None

    danfe = _as_dict(res.get("danfe"))
    out = _RawShipment(
        carrier=_name(res.get("transportadora")),
        origin=_name(res.get("remetente")),
        destination=_name(res.get("destinatario")),
        document_number=_str(danfe.get("numero")),
        document_series=_str(danfe.get("serie")),
        delivery=_str(res.get("previsaoEntrega")),
    )

    volumes = res.get("volumes")
    if isinstance(volumes, list) and volumes:
        weights = []
        for i, vol in enumerate(volumes):
            w = _to_float(_as_dict(vol).get("pesoBruto"))
            if w is None:
                diag.add(f"volumes[{i}].pesoBruto", "missing or not a number; skipped")
                continue
            weights.append(w)
        # none readable: weight stays absent
        if weights:
            out.weight_kg = sum(weights)

    eventos = res.get("eventos")
    if isinstance(eventos, list):
        out.events = []
        for i, ev in enumerate(eventos):
            if not isinstance(ev, dict):
                diag.add(f"eventos[{i}]", "not an object; skipped")
                continue
            unidade = _as_dict(ev.get("unidade"))
            status = _str(ev.get("descricao")) or _str(ev.get("codigo"))
            out.events.append(_RawEvent(
                timestamp=_str(ev.get("dataHora")),
                status=status,
                location=_str(unidade.get("nome")) or _str(
                    unidade.get("cidade")),
                details=_event_details_from_result(ev),
                code=_code_of(ev.get("codigo"), status),
            ))
    return out


ShapeReader = Callable[[Dict[str, Any], Diagnostics], Optional[_RawShipment]]

SHAPE_READERS: Sequence[ShapeReader] = (_from_documento, _from_result)


def _read_shipment(payload: Dict[str, Any], diag: Diagnostics) -> _RawShipment:
    for reader in SHAPE_READERS:
        found = reader(payload, diag)
        if found is not None:
            return found
    diag.add("payload", "no documento/result object; treated as empty")
    return _RawShipment()


# --- events ------------------------------------------------------------------

def _build_events(raw_events: List[_RawEvent], diag: Diagnostics) -> Tuple[TrackingEvent, ...]:
    events: List[TrackingEvent] = []
    for i, raw in enumerate(raw_events):
        ts = normalize_date(raw.timestamp, DatePolicy.LENIENT)
        if ts == EPOCH_PLACEHOLDER:
            diag.add(f"events[{i}].timestamp",
                     f"unparseable {raw.timestamp!r}; using epoch placeholder")
        events.append(TrackingEvent(
            timestamp=ts,
            status=raw.status or UNKNOWN_STATUS,
            location=raw.location or UNKNOWN_LOCATION,
            details=raw.details,
            code=raw.code,
        ))
    # sorted() is stable with reverse=True, so ties keep provider order
    return tuple(sorted(events, key=lambda e: e.timestamp, reverse=True))


def is_issuance_event(event: TrackingEvent) -> bool:
    if event.code in ISSUANCE_CODES:
        return True
    status = _fold(event.status)
    return any(p in status for p in ISSUANCE_PHRASES)


def find_issuance_event(events: Sequence[TrackingEvent]) -> Optional[TrackingEvent]:
    """Oldest event that looks like the document issuance record."""
    for ev in reversed(events):
        if is_issuance_event(ev):
            return ev
    return None


# --- delivery / weight -------------------------------------------------------

def _structural_delivery(raw: Optional[str], diag: Diagnostics) -> Optional[datetime]:
    if raw is None:
        return None
    parsed = normalize_date(raw, DatePolicy.STRICT)
    if parsed is None:
        # some endpoints send ISO dates here
        lenient = normalize_date(raw, DatePolicy.LENIENT)
        parsed = None if lenient == EPOCH_PLACEHOLDER else lenient
    if parsed is None:
        diag.add("previsaoEntrega", f"unparseable {raw!r}")
    return parsed


def delivery_from_text(text: Optional[str]) -> Optional[datetime]:
    m = _DELIVERY_RE.search(_fold(text))
    if not m:
        return None
    return normalize_date(m.group(1), DatePolicy.STRICT)


def weight_from_text(text: Optional[str]) -> Optional[float]:
    m = _WEIGHT_RE.search(text or "")
    if not m:
        return None
    return _to_float(m.group(1))


def format_weight(kg: float) -> str:
    return f"{kg:.2f} kg"


# --- public API --------------------------------------------------------------

def _check_success(payload: Any) -> Dict[str, Any]:
    if not isinstance(payload, dict):
        raise ProviderError(None)
    if not payload.get("success"):
        message = payload.get("message")
        raise ProviderError(message if isinstance(message, str) else None)
    return payload


def _product_name(number: Optional[str], series: Optional[str]) -> Optional[str]:
    if not number:
        return None
    return f"Nota Fiscal: {number} Série: {series or 'N/A'}"


def normalize_ssw_with_diagnostics(
    payload: Any,
    *,
    access_key: Union[AccessKey, str],
    hints: Optional[ShipmentHints] = None,
) -> Tuple[TrackingRecord, Tuple[Anomaly, ...]]:
    """
    Build a TrackingRecord from an SSW tracking payload (either variant).

    Only a false/absent success flag is fatal (ProviderError). Every other
    missing or malformed field degrades to its display default and is reported
    in the returned anomalies.
    """
    key = access_key if isinstance(access_key, AccessKey) else AccessKey(str(access_key))
    payload = _check_success(payload)
    diag = Diagnostics()

    raw = _read_shipment(payload, diag)
    if not raw.events:
        diag.add("events", "no tracking events")
    events = _build_events(raw.events or [], diag)
    issuance = find_issuance_event(events)

    delivery = _structural_delivery(raw.delivery, diag)
    if delivery is None and issuance is not None:
        delivery = delivery_from_text(issuance.details)

    weight_kg = raw.weight_kg
    if weight_kg is None and issuance is not None:
        weight_kg = weight_from_text(issuance.details)

    h = hints or ShipmentHints()

    # Defaults are applied here, once.
    record = TrackingRecord(
        id=key.value,
        carrier=raw.carrier or h.carrier_name or UNKNOWN_CARRIER,
        estimated_delivery=format_display_date(
            delivery) if delivery else UNAVAILABLE,
        current_status=events[0].status if events else NO_EVENTS,
        origin=raw.origin or h.sender_name or ORIGIN_UNAVAILABLE,
        destination=raw.destination or h.recipient_name or DESTINATION_UNAVAILABLE,
        product_name=_product_name(
            raw.document_number or h.document_number,
            raw.document_series or h.document_series,
        ),
        weight=format_weight(weight_kg) if weight_kg is not None else None,
        events=events,
        shipment_hints=hints,
    )
    return record, diag.items


def normalize_ssw(
    payload: Any,
    *,
    access_key: Union[AccessKey, str],
    hints: Optional[ShipmentHints] = None,
) -> TrackingRecord:
    """Same as normalize_ssw_with_diagnostics, logging anomalies at DEBUG."""
    record, anomalies = normalize_ssw_with_diagnostics(
        payload, access_key=access_key, hints=hints)
    log_anomalies(logger, record.id, anomalies)
    return record
