"""Tests for the item table reconstructor."""

import pytest

from order_extraction.extraction.table_reconstructor import TableReconstructor

HEADER = "Cód. Descrição Quant. Valor"
FOOTER = "Condições de Pagamento A VISTA"


@pytest.fixture
def reconstructor() -> TableReconstructor:
    return TableReconstructor()


class TestTableReconstructor:

    def test_single_row_with_footer(self, reconstructor, normalize) -> None:
        lines = normalize(f"{HEADER}\nA1 Produto X 02 1.200,00\n{FOOTER}")
        parse = reconstructor.reconstruct(lines)

        assert parse.header_found is True
        assert len(parse.items) == 1
        item = parse.items[0]
        assert item.line_no == 1
        assert item.code == "A1"
        assert item.description == "Produto X"
        assert item.qty == 2
        assert item.value_raw == "1.200,00"
        assert item.value_num == 1200.0

    def test_continuation_lines_join_description(self, reconstructor, normalize) -> None:
        text = (
            f"{HEADER}\n"
            "CS3B PENEIRA ROTATIVA 01 16.027,00\n"
            "com motor trifásico\n"
            "e painel\n"
            f"{FOOTER}"
        )
        item = reconstructor.reconstruct(normalize(text)).items[0]

        assert item.code == "CS3B"
        assert item.description == "PENEIRA ROTATIVA\ncom motor trifásico\ne painel"
        assert item.qty == 1
        assert item.value_num == 16027.0

    def test_row_with_money_but_no_quantity(self, reconstructor, normalize) -> None:
        lines = normalize(f"{HEADER}\nB22 Kit reparo 350,00\n{FOOTER}")
        item = reconstructor.reconstruct(lines).items[0]

        assert item.code == "B22"
        assert item.qty is None
        assert item.description == "Kit reparo"
        assert item.value_num == 350.0

    def test_description_only_row(self, reconstructor, normalize) -> None:
        lines = normalize(f"{HEADER}\nfrete por conta do cliente\n{FOOTER}")
        parse = reconstructor.reconstruct(lines)

        assert len(parse.items) == 1
        assert parse.items[0].code is None
        assert parse.items[0].description == "frete por conta do cliente"
        assert parse.items[0].value_num is None

    def test_rows_numbered_in_order(self, reconstructor, normalize) -> None:
        text = f"{HEADER}\nA1 Item um 01 10,00\nA2 Item dois 03 20,00\nA3 Item tres 01 30,00\n{FOOTER}"
        parse = reconstructor.reconstruct(normalize(text))

        assert [i.line_no for i in parse.items] == [1, 2, 3]
        assert [i.code for i in parse.items] == ["A1", "A2", "A3"]
        assert parse.rows_parsed == 3
        assert parse.rows_rejected == 0

    def test_row_without_description_rejected(self, reconstructor, normalize) -> None:
        text = f"{HEADER}\nA1 02 1.200,00\nA2 Produto Y 01 50,00\n{FOOTER}"
        parse = reconstructor.reconstruct(normalize(text))

        assert parse.rows_parsed == 2
        assert parse.rows_rejected == 1
        assert [i.code for i in parse.items] == ["A2"]
        assert parse.items[0].line_no == 1

    def test_lines_after_footer_ignored(self, reconstructor, normalize) -> None:
        text = f"{HEADER}\nA1 Produto X 02 1.200,00\n{FOOTER}\nZ9 Outro 01 99,00"
        parse = reconstructor.reconstruct(normalize(text))

        assert [i.code for i in parse.items] == ["A1"]

    def test_table_runs_to_end_without_footer(self, reconstructor, normalize) -> None:
        parse = reconstructor.reconstruct(normalize(f"{HEADER}\nA1 Produto X 02 1.200,00"))

        assert len(parse.items) == 1

    def test_no_header_no_items(self, reconstructor, normalize) -> None:
        parse = reconstructor.reconstruct(normalize("A1 Produto X 02 1.200,00"))

        assert parse.header_found is False
        assert parse.items == []

    def test_separator_and_column_header_lines_skipped(self, reconstructor, normalize) -> None:
        text = f"Cód. Descrição\nQuant. Valor\n-----\nA1 Produto X 02 1.200,00\n{FOOTER}"
        parse = reconstructor.reconstruct(normalize(text))

        assert [i.code for i in parse.items] == ["A1"]

    def test_reconstruction_is_idempotent(self, reconstructor, normalize, sample_order_text) -> None:
        lines = normalize(sample_order_text)

        first = reconstructor.reconstruct(lines)
        second = reconstructor.reconstruct(lines)

        assert [i.to_dict() for i in first.items] == [i.to_dict() for i in second.items]
