from __future__ import annotations

import copy

import pytest

ACCESS_KEY = "35240612345678000199550010000123451000123458"
OTHER_KEY = "35240698765432000188550010000543211000543219"

NFE_NS = "http://www.portalfiscal.inf.br/nfe"

_INF_NFE_BODY = """
      <ide><nNF>12345</nNF><serie>1</serie></ide>
      <emit><xNome>Fabrica Exemplo LTDA</xNome></emit>
      <dest><xNome>Loja Destino ME</xNome></dest>
      <transp>
        <transporta><xNome>Transportes Rapidos SA</xNome></transporta>
        <vol><qVol>3</qVol><esp>CAIXA</esp><pesoL>14.200</pesoL><pesoB>15.500</pesoB></vol>
      </transp>
      <cobr>
        <fat><nFat>12345</nFat><vOrig>1500.00</vOrig><vDesc>0.00</vDesc><vLiq>1500.00</vLiq></fat>
        <dup><nDup>001</nDup><dVenc>2024-07-10</dVenc><vDup>750.00</vDup></dup>
        <dup><nDup>002</nDup><dVenc>2024-08-10</dVenc><vDup>750.00</vDup></dup>
      </cobr>
"""


def build_nfe_xml(
    *,
    id_attr: str | None = "NFe" + ACCESS_KEY,
    protocol_key: str | None = None,
    child_key: str | None = None,
    body: str = _INF_NFE_BODY,
    envelope: bool = True,
    namespaced: bool = True,
) -> bytes:
    """Small NF-e document; `envelope` wraps it in nfeProc (+ protNFe when `protocol_key`)."""
    xmlns = f' xmlns="{NFE_NS}"' if namespaced else ""
    id_part = f' Id="{id_attr}"' if id_attr is not None else ""
    child = f"<chNFe>{child_key}</chNFe>" if child_key is not None else ""
    nfe = f'<NFe{xmlns if not envelope else ""}><infNFe versao="4.00"{id_part}>{child}{body}</infNFe></NFe>'
    if not envelope:
        return ('<?xml version="1.0" encoding="UTF-8"?>' + nfe).encode("utf-8")

    prot = ""
    if protocol_key is not None:
        prot = f"<protNFe><infProt><chNFe>{protocol_key}</chNFe><cStat>100</cStat></infProt></protNFe>"
    return (
        '<?xml version="1.0" encoding="UTF-8"?>'
        f'<nfeProc{xmlns} versao="4.00">{nfe}{prot}</nfeProc>'
    ).encode("utf-8")


DOCUMENTO_PAYLOAD = {
    "success": True,
    "message": "Documento localizado com sucesso",
    "documento": {
        "header": {
            "remetente": "FABRICA EXEMPLO LTDA",
            "destinatario": "LOJA DESTINO ME",
            "nro_nf": "12345",
        },
        "tracking": [
            {
                "data_hora": "2025-12-02T08:10:00",
                "ocorrencia": "DOCUMENTO DE TRANSPORTE EMITIDO (80)",
                "descricao": "Documento emitido. Previsao de entrega: 10/12/25. Peso: 15.50 Kg. Volumes: 3",
                "cidade": "SAO PAULO / SP",
                "filial": "SPO",
            },
            {
                "data_hora": "2025-12-05T16:45:00",
                "ocorrencia": "MERCADORIA EM TRANSITO (82)",
                "descricao": "Saida de unidade",
                "cidade": "CAMPINAS / SP",
            },
            {
                "data_hora": "2025-12-03T11:00:00",
                "ocorrencia": "CHEGADA NA UNIDADE (83)",
                "descricao": "",
                "filial": "CPQ",
            },
        ],
    },
}

RESULT_PAYLOAD = {
    "success": True,
    "result": [
        {
            "danfe": {"chave": ACCESS_KEY, "numero": "12345", "serie": "1"},
            "transportadora": {"nomeFantasia": "RAPIDO SSW", "razaoSocial": "Rapido Transportes SA"},
            "previsaoEntrega": "12/12/2025",
            "remetente": {"nome": "Fabrica Exemplo"},
            "destinatario": {"nome": "Loja Destino"},
            "volumes": [{"pesoBruto": "10.25"}, {"pesoBruto": "5.25"}],
            "eventos": [
                {
                    "dataHora": "01/12/2025 09:00:00",
                    "descricao": "Coleta realizada",
                    "codigo": "01",
                    "unidade": {"nome": "Unidade SP", "endereco": {"logradouro": "Rua A", "numero": "10"}},
                },
                {
                    "dataHora": "03/12/2025 14:30:00",
                    "descricao": "Em rota de entrega",
                    "codigo": "02",
                    "unidade": {"cidade": "Campinas"},
                    "observacao": "Saiu para entrega",
                },
            ],
        }
    ],
}


@pytest.fixture
def access_key() -> str:
    return ACCESS_KEY


@pytest.fixture
def documento_payload() -> dict:
    return copy.deepcopy(DOCUMENTO_PAYLOAD)


@pytest.fixture
def result_payload() -> dict:
    return copy.deepcopy(RESULT_PAYLOAD)


@pytest.fixture
def nfe_xml():
    return build_nfe_xml


@pytest.fixture
def other_key() -> str:
    return OTHER_KEY
