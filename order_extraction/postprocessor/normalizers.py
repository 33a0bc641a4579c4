"""
Data Normalizers Module.

Brazilian (pt-BR) conventions used on the order forms:
    - Currency: "16.027,00" (thousands ".", decimal ","), optional "R$"
    - Dates: "05/01/26", "5-1-2026" (day first, 2- or 4-digit year)

Every function here is pure: a token that does not have the expected
shape is rejected (None), never partially parsed.
"""

import re
from typing import Iterable, List, Optional, Tuple

from order_extraction.utils.logger import get_logger

# Initialize module logger
logger = get_logger(__name__)

MONEY_TOKEN = r'\d{1,3}(?:\.\d{3})*,\d{2}'


def to_digits(value: Optional[str]) -> str:
    """Keep only the digits of a string ("123.456.789-01" -> "12345678901")."""
    return re.sub(r'\D', '', value or '')


def format_pt_br(value: float) -> str:
    """
    Render a number in pt-BR currency notation, without symbol.

    Example:
        >>> format_pt_br(16027.0)
        '16.027,00'
    """
    us = f"{value:,.2f}"
    return us.replace(',', '_').replace('.', ',').replace('_', '.')


class MoneyNormalizer:
    """
    Parses pt-BR currency tokens into floats.

    Attributes:
        TOKEN_PATTERN: Exact shape of one token.
        SEARCH_PATTERN: Token shape with whole-token boundaries, used to
            scan free text.

    Example:
        >>> normalizer = MoneyNormalizer()
        >>> normalizer.parse("16.027,00")
        16027.0
        >>> normalizer.parse("R$ 1.200,00")
        1200.0
        >>> normalizer.parse("1200.00") is None
        True
    """

    TOKEN_PATTERN = re.compile(rf'^{MONEY_TOKEN}$')
    SEARCH_PATTERN = re.compile(rf'(?<![\d.,]){MONEY_TOKEN}(?!\d)')
    CURRENCY_PREFIX = re.compile(r'^R\$\s*', re.IGNORECASE)

    def parse(self, token: Optional[str]) -> Optional[float]:
        """
        Convert a currency token to a float.

        Args:
            token: Token such as "1.500,00" or "R$ 1.500,00".

        Returns:
            The numeric value, or None when the token is not money-shaped.
        """
        if not token:
            return None

        cleaned = self.CURRENCY_PREFIX.sub('', token.strip())
        if not self.TOKEN_PATTERN.match(cleaned):
            logger.debug(f"Rejected money token: '{token}'")
            return None

        return float(cleaned.replace('.', '').replace(',', '.'))

    def find_tokens(self, text: Optional[str]) -> List[str]:
        """Return every whole currency token in a text, in reading order."""
        return self.SEARCH_PATTERN.findall(text or '')

    def infer_total(
        self,
        text: Optional[str],
        item_values: Iterable[Optional[float]] = ()
    ) -> Optional[Tuple[float, str]]:
        """
        Infer the order total.

        The largest currency token anywhere in the document wins. Without
        any token, the item values are summed; a zero sum means no total.

        Args:
            text: Full OCR text.
            item_values: value_num of each reconstructed line item.

        Returns:
            (value, token) where token is the pt-BR rendering, or None.

        Example:
            >>> MoneyNormalizer().infer_total("Sinal 1.500,00 Total 16.027,00")
            (16027.0, '16.027,00')
        """
        best: Optional[Tuple[float, str]] = None
        for token in self.find_tokens(text):
            value = self.parse(token)
            if value is None:
                continue
            if best is None or value > best[0]:
                best = (value, token)

        if best is not None:
            return best

        items_sum = round(sum(v for v in item_values if v is not None), 2)
        if items_sum > 0:
            return items_sum, format_pt_br(items_sum)

        return None


class DateNormalizer:
    """
    Normalizes pt-BR dates to ``dd/mm/yyyy``.

    Two-digit years get a "20" prefix. Calendar correctness is not
    checked: "31/02/26" comes back as "31/02/2026".

    Example:
        >>> DateNormalizer().normalize("05/01/26")
        '05/01/2026'
        >>> DateNormalizer().normalize("Data: 5-1-2026")
        '05/01/2026'
    """

    DATE_PATTERN = re.compile(
        r'(?<!\d)(\d{1,2})\s*[/\-]\s*(\d{1,2})\s*[/\-]\s*(\d{2,4})(?!\d)'
    )

    def normalize(self, text: Optional[str]) -> Optional[str]:
        """
        Find the first date in a text and return it as ``dd/mm/yyyy``.

        Args:
            text: A date token or a longer text containing one.

        Returns:
            Canonical date string, or None if no date-shaped token exists.
        """
        if not text:
            return None

        match = self.DATE_PATTERN.search(text)
        if not match:
            logger.debug(f"No date found in: '{text}'")
            return None

        day, month, year = match.groups()
        if len(year) == 2:
            year = f"20{year}"

        return f"{day.zfill(2)}/{month.zfill(2)}/{year}"
