"""Pytest configuration and shared fixtures."""

import pytest

from config import ConfigurationManager
from order_extraction.input_handler.text_normalizer import TextNormalizer
from order_extraction.output_handler.database_handler import DatabaseHandler

SAMPLE_ORDER_TEXT = """COMERCIAL AGRICOLA EXEMPLO LTDA
CNPJ: 12.345.678/0001-90 Fone: (42) 3446-1234
Guarapuava/PR
PEDIDO DE VENDA
Local: Guarapuava Data: 05/01/26
Nome: Maria Silva Código do Cliente: 42
E-mail: maria@example.com
Data de Nascimento: 12/03/1980
Endereço: Rua das Flores, 100 Bairro: Centro
Telefone: (42) 9 9999-8888
Cidade: Guarapuava CEP: 85010-000
Estado: Paraná UF: PR
CPF/CNPJ: 123.456.789-01
RG: 12.345.678-9
Cód. Descrição Quant. Valor
A1 Produto X 02 1.200,00
CS3B PENEIRA ROTATIVA 01 16.027,00
com motor trifásico
Condições de Pagamento: A VISTA
Origem Financeira: Recursos próprios
Local: Guarapuava
Sinal de negócio em 10/01/26 R$ 1.500,00
Com vencimento em 10/02/26
Validade da Proposta: 20/01/26
Data prevista para entrega: março
Obs: entregar pela manhã
Assinatura do cliente
"""


@pytest.fixture
def sample_order_text() -> str:
    """OCR text of a complete order form."""
    return SAMPLE_ORDER_TEXT


@pytest.fixture
def normalize():
    """Shortcut: text -> List[NormalizedLine]."""
    normalizer = TextNormalizer()
    return normalizer.normalize


@pytest.fixture
def config(tmp_path) -> ConfigurationManager:
    """Default settings with outputs redirected to a temp directory."""
    return ConfigurationManager(overrides={
        "paths": {"output_dir": str(tmp_path / "outputs"), "log_dir": str(tmp_path / "logs")},
        "ocr": {"google_vision": {"api_key": "test-key"}},
    })


@pytest.fixture
def db(tmp_path) -> DatabaseHandler:
    """Empty SQLite database with default provenance priorities."""
    return DatabaseHandler(
        db_path=str(tmp_path / "cases.db"),
        source_priority={"ocr": 1, "vendor": 2, "admin": 3}
    )
