"""Tests for pt-BR money/date normalization and structural validators."""

import pytest

from order_extraction.postprocessor import (
    DateNormalizer,
    DocumentIdValidator,
    MoneyNormalizer,
    PhoneValidator,
    format_pt_br,
    to_digits,
)


class TestMoneyNormalizer:

    @pytest.fixture
    def money(self) -> MoneyNormalizer:
        return MoneyNormalizer()

    @pytest.mark.parametrize("token, expected", [
        ("16.027,00", 16027.0),
        ("1.200,00", 1200.0),
        ("0,50", 0.5),
        ("R$ 1.500,00", 1500.0),
        ("1.234.567,89", 1234567.89),
    ])
    def test_parse_valid_tokens(self, money: MoneyNormalizer, token: str, expected: float) -> None:
        assert money.parse(token) == expected

    @pytest.mark.parametrize("token", ["1200.00", "1.20,00", "12,5", "85010-000", "", None, "abc"])
    def test_parse_rejects_other_shapes(self, money: MoneyNormalizer, token) -> None:
        assert money.parse(token) is None

    def test_formatted_value_parses_back(self, money: MoneyNormalizer) -> None:
        for value in (0.01, 12.5, 1200.0, 16027.0, 1234567.89):
            assert money.parse(format_pt_br(value)) == value

    def test_find_tokens_ignores_dates_and_ceps(self, money: MoneyNormalizer) -> None:
        text = "Data 05/01/26 CEP 85010-000 Fone 3446-1234 Valor 1.200,00 e 16.027,00"
        assert money.find_tokens(text) == ["1.200,00", "16.027,00"]

    def test_infer_total_takes_largest_token(self, money: MoneyNormalizer) -> None:
        text = "Sinal R$ 1.500,00\nTotal 16.027,00"
        assert money.infer_total(text) == (16027.0, "16.027,00")

    def test_infer_total_falls_back_to_item_sum(self, money: MoneyNormalizer) -> None:
        assert money.infer_total("sem valores", [100.0, None, 250.5]) == (350.5, "350,50")

    def test_infer_total_none_without_values(self, money: MoneyNormalizer) -> None:
        assert money.infer_total("sem valores") is None
        assert money.infer_total("", [0.0]) is None


class TestDateNormalizer:

    @pytest.mark.parametrize("text, expected", [
        ("05/01/26", "05/01/2026"),
        ("5-1-2026", "05/01/2026"),
        ("Data: 12 / 03 / 1980", "12/03/1980"),
        ("entrega em 31/02/26 pela manha", "31/02/2026"),
    ])
    def test_normalize(self, text: str, expected: str) -> None:
        assert DateNormalizer().normalize(text) == expected

    @pytest.mark.parametrize("text", ["março", "", None, "123/45"])
    def test_no_date(self, text) -> None:
        assert DateNormalizer().normalize(text) is None


class TestDocumentIdValidator:

    def test_classify_cpf_and_cnpj(self) -> None:
        validator = DocumentIdValidator()
        assert validator.classify("123.456.789-01") == ("cpf", "12345678901")
        assert validator.classify("12.345.678/0001-90") == ("cnpj", "12345678000190")

    def test_classify_discards_other_lengths(self) -> None:
        assert DocumentIdValidator().classify("123.456.789") is None


class TestPhoneValidator:

    @pytest.mark.parametrize("value, expected", [
        ("(42) 3446-1234", "(42) 3446-1234"),
        ("(42) 9 9999-8888 recado", "(42) 9 9999-8888"),
        ("42  99999 8888", "42 99999 8888"),
    ])
    def test_extract(self, value: str, expected: str) -> None:
        assert PhoneValidator().extract(value) == expected

    def test_rejects_non_phone(self) -> None:
        assert PhoneValidator().extract("sem telefone") is None


def test_to_digits() -> None:
    assert to_digits("123.456.789-01") == "12345678901"
    assert to_digits(None) == ""
