from danfe_tracking.api.normalize import normalize_ssw
from danfe_tracking.export.text import format_brl, format_due_date, render_text
from danfe_tracking.parsing.nfe_xml import extract_shipment


def test_format_brl():
    assert format_brl(1234.5) == "R$ 1.234,50"
    assert format_brl(0.0) == "R$ 0,00"
    assert format_brl(None) == "N/A"


def test_format_due_date():
    assert format_due_date("2024-07-10") == "10/07/2024"
    assert format_due_date("10/07/2024") == "10/07/2024"
    assert format_due_date(None) == "N/A"


def test_render_text_with_xml_extras(nfe_xml, documento_payload, access_key):
    hints = extract_shipment(nfe_xml()).hints
    rec = normalize_ssw(documento_payload, access_key=access_key, hints=hints)

    text = render_text(rec, summary="Tudo certo.")

    assert f"Access key:          {access_key}" in text
    assert "Estimated delivery:  2025-12-10" in text
    assert "Weight:              15.50 kg" in text
    assert "Summary\n  Tudo certo." in text
    assert "Events (3)" in text
    assert "05/12/2025 16:45:00  MERCADORIA EM TRANSITO (82) - CAMPINAS / SP" in text
    assert "Gross weight: 15.500 kg" in text
    assert "Original: R$ 1.500,00" in text
    assert "002  due 10/08/2024  R$ 750,00" in text


def test_render_text_without_events(access_key):
    rec = normalize_ssw({"success": True, "documento": {"tracking": []}}, access_key=access_key)
    text = render_text(rec)
    assert "Events (0)" in text
    assert "Summary" not in text
