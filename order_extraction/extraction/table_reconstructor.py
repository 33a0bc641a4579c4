"""
Table Reconstructor Module.

Rebuilds the item table of a sales-order form from OCR lines that carry
no column delimiters. Descriptions are often handwritten over several
lines; those lines are folded back into the row they belong to.

State machine:
    SEARCHING --(line with "Cod" and "Descricao")--> IN_TABLE
    IN_TABLE  --(payment-terms footer | end of lines)--> DONE

Row classification inside the table:
    new row       starts with a 2-10 character alphanumeric code and has a
                  trailing "qty money" pair or at least one money token
    continuation  any other line while a row is open
    loose row     any other line with no open row, unless it looks like a
                  column header ("Quant", "Valor"); it has no code
"""

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Sequence

from order_extraction.input_handler.text_normalizer import NormalizedLine
from order_extraction.postprocessor.normalizers import MONEY_TOKEN, MoneyNormalizer
from order_extraction.utils.logger import get_logger
from .extraction_result import LineItem

# Initialize module logger
logger = get_logger(__name__)


class TableState(Enum):
    """Parser states."""
    SEARCHING = "searching"
    IN_TABLE = "in_table"
    DONE = "done"


@dataclass
class TableParse:
    """
    Output of one reconstruction.

    Attributes:
        items: Rows kept, line_no from 1
        rows_parsed: Rows opened (kept + rejected)
        rows_rejected: Rows dropped for an empty description
        header_found: Whether a table header was seen
    """
    items: List[LineItem] = field(default_factory=list)
    rows_parsed: int = 0
    rows_rejected: int = 0
    header_found: bool = False


@dataclass
class _OpenRow:
    code: Optional[str]
    lines: List[str]
    qty: Optional[int]
    value_raw: Optional[str]
    value_num: Optional[float]


class TableReconstructor:
    """
    Reconstructs LineItems from the table region of a form.

    Deterministic: the same lines always give the same rows.

    Example:
        >>> lines = TextNormalizer().normalize(
        ...     "Cód. Descrição Quant. Valor\\n"
        ...     "A1 Produto X 02 1.200,00\\n"
        ...     "Condições de Pagamento A VISTA"
        ... )
        >>> parse = TableReconstructor().reconstruct(lines)
        >>> parse.items[0].code, parse.items[0].qty, parse.items[0].value_num
        ('A1', 2, 1200.0)
    """

    HEADER_CODE = re.compile(r'\bCod\b\.?', re.IGNORECASE)
    HEADER_DESCRIPTION = re.compile(r'\bDescricao\b', re.IGNORECASE)
    FOOTER = re.compile(r'\bCondicoes\b', re.IGNORECASE)
    SEPARATOR_LINE = re.compile(r'^[-_]+$')
    COLUMN_HEADER = re.compile(r'\bQuant\b\.?|\bValor\b', re.IGNORECASE)

    CODE = re.compile(r'^([A-Z0-9]{2,10})\b\s*(.*)$', re.IGNORECASE)
    QTY_MONEY_TAIL = re.compile(rf'\b(\d{{1,3}})\b\s*(?:{MONEY_TOKEN})\s*$')

    def __init__(self) -> None:
        self.money_normalizer = MoneyNormalizer()

    def is_header(self, line: NormalizedLine) -> bool:
        return bool(
            self.HEADER_CODE.search(line.key)
            and self.HEADER_DESCRIPTION.search(line.key)
        )

    def is_footer(self, line: NormalizedLine) -> bool:
        return bool(self.FOOTER.search(line.key))

    def reconstruct(self, lines: Sequence[NormalizedLine]) -> TableParse:
        """
        Run the state machine over the document lines.

        Args:
            lines: All normalized lines of the document, in order.

        Returns:
            TableParse with the reconstructed rows and counters.
        """
        parse = TableParse()
        state = TableState.SEARCHING
        current: Optional[_OpenRow] = None

        for line in lines:
            if state is TableState.SEARCHING:
                if self.is_header(line):
                    parse.header_found = True
                    state = TableState.IN_TABLE
                continue

            if self.is_footer(line):
                state = TableState.DONE
                break

            if self.SEPARATOR_LINE.match(line.text):
                continue

            row = self._parse_row(line.text)
            if row is not None:
                self._flush(current, parse)
                current = row
            elif current is not None:
                current.lines.append(line.text)
            elif not self.COLUMN_HEADER.search(line.key):
                current = self._loose_row(line.text)

        if state is TableState.SEARCHING:
            logger.debug("No item table header found")
            return parse

        self._flush(current, parse)

        logger.debug(
            f"Table reconstructed: {len(parse.items)} rows "
            f"({parse.rows_rejected} rejected)"
        )
        return parse

    def _parse_row(self, text: str) -> Optional[_OpenRow]:
        """A new row if the line has a code and a qty or a money value."""
        code_match = self.CODE.match(text)
        if not code_match:
            return None

        money_tokens = self.money_normalizer.find_tokens(text)
        qty_match = self.QTY_MONEY_TAIL.search(text)
        if not money_tokens and not qty_match:
            return None

        rest = code_match.group(2)
        last_money = money_tokens[-1] if money_tokens else None
        qty = None

        tail = self.QTY_MONEY_TAIL.search(rest)
        if tail:
            qty = int(tail.group(1))
            description = rest[:tail.start()]
        elif last_money:
            cut = rest.rfind(last_money)
            description = rest[:cut] + rest[cut + len(last_money):] if cut >= 0 else rest
        else:
            description = rest

        return _OpenRow(
            code=code_match.group(1),
            lines=[description.strip()],
            qty=qty,
            value_raw=last_money,
            value_num=self.money_normalizer.parse(last_money)
        )

    def _loose_row(self, text: str) -> _OpenRow:
        """Description-only row; keeps a money value if one is printed."""
        money_tokens = self.money_normalizer.find_tokens(text)
        last_money = money_tokens[-1] if money_tokens else None
        return _OpenRow(
            code=None,
            lines=[text],
            qty=None,
            value_raw=last_money,
            value_num=self.money_normalizer.parse(last_money)
        )

    def _flush(self, row: Optional[_OpenRow], parse: TableParse) -> None:
        if row is None:
            return
        parse.rows_parsed += 1

        description = '\n'.join(
            ' '.join(part.split()) for part in row.lines if part.strip()
        ).strip()
        if not description:
            parse.rows_rejected += 1
            return

        parse.items.append(LineItem(
            line_no=len(parse.items) + 1,
            code=row.code,
            description=description,
            qty=row.qty,
            value_raw=row.value_raw,
            value_num=row.value_num
        ))
