# src/danfe_tracking/parsing/nfe_xml.py
"""
Access-key and shipment-hint extraction from NF-e XML.

Handles both the bare ``<NFe>`` document and the processed ``<nfeProc>``
envelope that carries the SEFAZ protocol. XPaths match on local-name() so the
default NF-e namespace (or its absence) does not matter.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Iterator, Optional, Sequence, Tuple, Union

from lxml import etree

from danfe_tracking.errors import InvalidKey, KeyNotFound, MalformedXml, MissingRoot
from danfe_tracking.models import (
    AccessKey,
    Anomaly,
    Diagnostics,
    Installment,
    InvoiceInfo,
    ShipmentHints,
    VolumeInfo,
    is_access_key,
)
from danfe_tracking.models.diagnostics import log_anomalies

logger = logging.getLogger("danfe_tracking.parsing.nfe_xml")

ID_PREFIX = "NFE"

# Most specific first: protocol envelope, bare document, anywhere.
ROOT_CANDIDATES: Tuple[Tuple[str, ...], ...] = (
    ("nfeProc", "NFe", "infNFe"),
    ("NFe", "infNFe"),
    ("infNFe",),
)

PROTOCOL_KEY_CANDIDATES: Tuple[Tuple[str, ...], ...] = (
    ("nfeProc", "protNFe", "infProt", "chNFe"),
    ("protNFe", "infProt", "chNFe"),
)


@dataclass(frozen=True)
class ExtractedShipment:
    access_key: AccessKey
    hints: ShipmentHints
    anomalies: Tuple[Anomaly, ...] = ()


def _xp(*names: str, prefix: str = ".//") -> str:
    return prefix + "/".join(f"*[local-name()='{n}']" for n in names)


def _first(node, *names: str, prefix: str = ".//"):
    found = node.xpath(_xp(*names, prefix=prefix))
    return found[0] if found else None


def _text(node, *names: str, prefix: str = ".//") -> Optional[str]:
    if node is None:
        return None
    el = _first(node, *names, prefix=prefix)
    if el is None or el.text is None:
        return None
    return el.text.strip() or None


def _number(node, diag: Diagnostics, field: str, *names: str) -> Optional[float]:
    raw = _text(node, *names)
    if raw is None:
        return None
    try:
        return float(raw)
    except ValueError:
        diag.add(field, f"not a number: {raw!r}")
        return None


# --- parse + locate ----------------------------------------------------------

def parse_document(data: Union[bytes, str]):
    if isinstance(data, str):
        data = data.encode("utf-8")
    if not data or not data.strip():
        raise MalformedXml("empty document")

    parser = etree.XMLParser(resolve_entities=False, no_network=True)
    try:
        return etree.fromstring(data, parser=parser)
    except (etree.XMLSyntaxError, ValueError) as ex:
        raise MalformedXml(str(ex)) from ex


def locate_inf_nfe(doc):
    for names in ROOT_CANDIDATES:
        el = _first(doc, *names, prefix="//")
        if el is not None:
            return el
    raise MissingRoot()


# --- access key chain --------------------------------------------------------
# Each strategy yields raw candidates (possibly invalid) in priority order.

def _keys_from_protocol(doc, inf) -> Iterator[str]:
    for names in PROTOCOL_KEY_CANDIDATES:
        value = _text(doc, *names, prefix="//")
        if value:
            yield value


def _keys_from_id_attribute(doc, inf) -> Iterator[str]:
    raw = (inf.get("Id") or "").strip()
    if not raw:
        return
    if raw.upper().startswith(ID_PREFIX):
        raw = raw[len(ID_PREFIX):]
    yield raw


def _keys_from_child(doc, inf) -> Iterator[str]:
    value = _text(inf, "chNFe", prefix="./")
    if value:
        yield value


KeyStrategy = Callable[..., Iterator[str]]

KEY_STRATEGIES: Sequence[KeyStrategy] = (
    _keys_from_protocol,
    _keys_from_id_attribute,
    _keys_from_child,
)


def resolve_access_key(doc, inf, strategies: Sequence[KeyStrategy] = KEY_STRATEGIES) -> AccessKey:
    """
    First valid candidate wins. If candidates existed but none was valid, the
    first (most authoritative) invalid value is reported via InvalidKey.
    """
    first_invalid: Optional[str] = None
    for strategy in strategies:
        for candidate in strategy(doc, inf):
            if is_access_key(candidate):
                return AccessKey(candidate)
            if first_invalid is None:
                first_invalid = candidate
    if first_invalid is not None:
        raise InvalidKey(first_invalid)
    raise KeyNotFound()


# --- optional hints ----------------------------------------------------------

def _volume(inf, diag: Diagnostics) -> Optional[VolumeInfo]:
    vol = _first(inf, "transp", "vol")
    if vol is None:
        return None
    return VolumeInfo(
        quantity=_number(vol, diag, "vol.qVol", "qVol"),
        species=_text(vol, "esp"),
        net_weight=_number(vol, diag, "vol.pesoL", "pesoL"),
        gross_weight=_number(vol, diag, "vol.pesoB", "pesoB"),
    )


def _invoice(inf, diag: Diagnostics) -> Optional[InvoiceInfo]:
    fat = _first(inf, "cobr", "fat")
    if fat is None:
        return None
    return InvoiceInfo(
        number=_text(fat, "nFat"),
        original_value=_number(fat, diag, "fat.vOrig", "vOrig"),
        discount_value=_number(fat, diag, "fat.vDesc", "vDesc"),
        net_value=_number(fat, diag, "fat.vLiq", "vLiq"),
    )


def _installments(inf, diag: Diagnostics) -> Optional[Tuple[Installment, ...]]:
    out = []
    for i, dup in enumerate(inf.xpath(_xp("cobr", "dup"))):
        item = Installment(
            number=_text(dup, "nDup"),
            due_date=_text(dup, "dVenc"),
            value=_number(dup, diag, f"dup[{i}].vDup", "vDup"),
        )
        if item.number is None and item.due_date is None and item.value is None:
            diag.add(f"dup[{i}]", "empty installment dropped")
            continue
        out.append(item)
    return tuple(out) or None


def extract_hints(inf, diag: Diagnostics) -> ShipmentHints:
    return ShipmentHints(
        carrier_name=_text(inf, "transp", "transporta", "xNome"),
        volume_info=_volume(inf, diag),
        invoice_info=_invoice(inf, diag),
        installments=_installments(inf, diag),
        sender_name=_text(inf, "emit", "xNome", prefix="./"),
        recipient_name=_text(inf, "dest", "xNome", prefix="./"),
        document_number=_text(inf, "ide", "nNF", prefix="./"),
        document_series=_text(inf, "ide", "serie", prefix="./"),
    )


def extract_shipment(data: Union[bytes, str]) -> ExtractedShipment:
    """
    Parse NF-e XML bytes into an access key plus optional shipment hints.

    Raises MalformedXml, MissingRoot, KeyNotFound or InvalidKey. Missing or
    unreadable hint fields are reported as anomalies, never raised.
    """
    doc = parse_document(data)
    inf = locate_inf_nfe(doc)
    key = resolve_access_key(doc, inf)

    diag = Diagnostics()
    hints = extract_hints(inf, diag)
    log_anomalies(logger, key.value, diag)
    return ExtractedShipment(access_key=key, hints=hints, anomalies=diag.items)


__all__ = [
    "ExtractedShipment",
    "KEY_STRATEGIES",
    "ROOT_CANDIDATES",
    "extract_hints",
    "extract_shipment",
    "locate_inf_nfe",
    "parse_document",
    "resolve_access_key",
]
