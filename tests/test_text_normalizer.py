"""Tests for the text normalizer."""

from order_extraction.input_handler.text_normalizer import (
    TextNormalizer,
    collapse_whitespace,
    fold_diacritics,
)


class TestTextNormalizer:
    """Line splitting, trimming and the folded match key."""

    def test_drops_empty_lines_and_keeps_order(self) -> None:
        text = "  Nome:   João \n\n   \r\nData: 05/01/26\nCódigo"
        lines = TextNormalizer().normalize(text)

        assert [line.text for line in lines] == ["Nome: João", "Data: 05/01/26", "Código"]
        assert [line.index for line in lines] == [0, 1, 2]

    def test_line_count_matches_non_empty_lines(self, sample_order_text: str) -> None:
        lines = TextNormalizer().normalize(sample_order_text)
        expected = [l.strip() for l in sample_order_text.splitlines() if l.strip()]

        assert len(lines) == len(expected)
        assert [line.raw for line in lines] == expected

    def test_empty_and_none_give_no_lines(self) -> None:
        assert TextNormalizer().normalize("") == []
        assert TextNormalizer().normalize(None) == []
        assert TextNormalizer().normalize("\n \n\t\n") == []

    def test_key_is_folded_and_same_length(self) -> None:
        line = TextNormalizer().normalize("Condições de Pagamento à vista")[0]

        assert line.key == "Condicoes de Pagamento a vista"
        assert len(line.key) == len(line.text)

    def test_value_at_slices_display_text(self) -> None:
        line = TextNormalizer().normalize("Descrição: Peneira rotativa")[0]
        start = line.key.index("Peneira")

        assert line.value_at(start) == "Peneira rotativa"

    def test_preview_respects_limits(self) -> None:
        normalizer = TextNormalizer()
        lines = normalizer.normalize("\n".join(f"linha {i}" for i in range(100)))

        assert normalizer.preview(lines, max_lines=3).split("\n") == ["linha 0", "linha 1", "linha 2"]
        assert len(normalizer.preview(lines, max_lines=100, max_chars=50)) == 50


class TestHelpers:

    def test_fold_diacritics(self) -> None:
        assert fold_diacritics("Código Descrição Paraná") == "Codigo Descricao Parana"
        assert fold_diacritics(None) == ""

    def test_collapse_whitespace(self) -> None:
        assert collapse_whitespace("  a \t b   c ") == "a b c"
