"""
Text Normalizer Module.

Splits raw OCR plaintext into ordered, non-empty lines and prepares a
match-oriented form of each one. Line order is the visual top-to-bottom
order of the scanned form; every later stage relies on it.

Usage:
    from order_extraction.input_handler.text_normalizer import TextNormalizer

    lines = TextNormalizer().normalize(ocr_text)
    for line in lines:
        print(line.key)   # "Condicoes de Pagamento A VISTA"
        print(line.text)  # "Condições de Pagamento A VISTA"
"""

import re
import unicodedata
from dataclasses import dataclass
from typing import List, Optional

_LINE_SPLIT = re.compile(r'\r?\n')


def collapse_whitespace(value: Optional[str]) -> str:
    """Collapse whitespace runs to one space and trim."""
    return ' '.join((value or '').split())


def _fold_char(char: str) -> str:
    folded = ''.join(
        c for c in unicodedata.normalize('NFKD', char)
        if not unicodedata.combining(c)
    )
    # Characters that do not fold to exactly one character stay as they are
    return folded if len(folded) == 1 else char


def fold_diacritics(value: Optional[str]) -> str:
    """
    Strip diacritics character by character.

    The result always has the same length as the input, so a span matched
    on the folded string can be used to slice the original.

    Example:
        >>> fold_diacritics("Código Descrição")
        'Codigo Descricao'
    """
    return ''.join(_fold_char(c) for c in (value or ''))


@dataclass(frozen=True)
class NormalizedLine:
    """
    One non-empty line of the document.

    Attributes:
        raw: Original line, trimmed (display form)
        text: Whitespace collapsed; case and diacritics preserved
        key: ``text`` with diacritics folded, for matching
        index: Position among the kept lines
    """
    raw: str
    text: str
    key: str
    index: int

    def value_at(self, start: int, end: Optional[int] = None) -> str:
        """Slice the display text with a span matched on ``key``."""
        return self.text[start:end].strip()


class TextNormalizer:
    """
    Turns OCR plaintext into a list of NormalizedLine.

    Total for any string: the empty string gives an empty list.

    Example:
        >>> lines = TextNormalizer().normalize("  Nome:   João \\n\\n Data: 05/01/26")
        >>> [l.text for l in lines]
        ['Nome: João', 'Data: 05/01/26']
        >>> lines[0].key
        'Nome: Joao'
    """

    def normalize(self, text: Optional[str]) -> List[NormalizedLine]:
        lines = []
        for raw in _LINE_SPLIT.split(text or ''):
            trimmed = raw.strip()
            if not trimmed:
                continue
            collapsed = collapse_whitespace(trimmed)
            lines.append(NormalizedLine(
                raw=trimmed,
                text=collapsed,
                key=fold_diacritics(collapsed),
                index=len(lines)
            ))
        return lines

    def preview(
        self,
        lines: List[NormalizedLine],
        max_lines: int = 40,
        max_chars: int = 1200
    ) -> str:
        """First lines of the document for debugging output."""
        return '\n'.join(line.text for line in lines[:max_lines])[:max_chars]
