"""
Input Handler Module for Order Extraction System.

This module provides functionality for:
    - Loading order documents (text transcripts or images)
    - Splitting OCR text into normalized lines

Supported formats:
    - Text: TXT (UTF-8)
    - Images: JPG, JPEG, PNG, TIFF, BMP, WEBP
"""

from .handler import InputHandler, InputResult
from .text_normalizer import NormalizedLine, TextNormalizer, fold_diacritics

__all__ = ['InputHandler', 'InputResult', 'NormalizedLine', 'TextNormalizer', 'fold_diacritics']
