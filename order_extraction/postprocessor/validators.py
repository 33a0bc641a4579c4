"""
Structural Validators Module.

Shape checks applied before a value is emitted. A value that fails is
dropped by the caller; it is never emitted with a lowered confidence.

Validators:
    - DocumentIdValidator: CPF (11 digits) / CNPJ (14 digits)
    - PhoneValidator: Brazilian phone digit run inside a labelled value
"""

import re
from typing import Optional, Tuple

from order_extraction.utils.logger import get_logger
from .normalizers import to_digits

# Initialize module logger
logger = get_logger(__name__)


class DocumentIdValidator:
    """
    Classifies Brazilian tax ids by digit count.

    Example:
        >>> validator = DocumentIdValidator()
        >>> validator.classify("123.456.789-01")
        ('cpf', '12345678901')
        >>> validator.classify("12.345.678/0001-90")
        ('cnpj', '12345678000190')
        >>> validator.classify("1234") is None
        True
    """

    LENGTHS = {11: 'cpf', 14: 'cnpj'}

    def classify(self, raw: Optional[str]) -> Optional[Tuple[str, str]]:
        """
        Reduce a tax id to digits and tag it.

        Args:
            raw: Tax id as printed on the form.

        Returns:
            (kind, digits) with kind "cpf" or "cnpj"; None for any other length.
        """
        digits = to_digits(raw)
        kind = self.LENGTHS.get(len(digits))
        if kind is None:
            logger.debug(f"Discarded tax id with {len(digits)} digits: '{raw}'")
            return None
        return kind, digits


class PhoneValidator:
    """
    Finds a phone-shaped digit run: ``(42) 9 9999-9999``, ``42 3446-1234``.

    Only values that came from an explicitly labelled line are handed to
    this validator, so a nearby date is never mistaken for a phone.
    """

    PHONE_PATTERN = re.compile(r'(\(?\d{2}\)?\s*9?\s*\d{4}[-\s]?\d{4})')

    def extract(self, value: Optional[str]) -> Optional[str]:
        """Return the phone run inside a labelled value, whitespace collapsed."""
        if not value:
            return None
        match = self.PHONE_PATTERN.search(value)
        if not match:
            logger.debug(f"No phone shape in: '{value}'")
            return None
        return ' '.join(match.group(1).split())
