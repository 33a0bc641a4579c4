"""
Post-Processing Module for the Sales-Order Extraction Engine.

This module provides functionality for:
    - pt-BR currency parsing and formatting
    - pt-BR date normalization
    - Order total inference
    - Structural checks (tax ids, phones)
"""

from .normalizers import (
    MoneyNormalizer,
    DateNormalizer,
    format_pt_br,
    to_digits,
)
from .validators import DocumentIdValidator, PhoneValidator

__all__ = [
    'MoneyNormalizer',
    'DateNormalizer',
    'format_pt_br',
    'to_digits',
    'DocumentIdValidator',
    'PhoneValidator'
]
