"""
Field & Table Extraction Module for Order Extraction System.

This module turns OCR plaintext of a Brazilian sales-order form into
structured fields and item rows.

Features:
    - Ordered label/value rule table
    - Item table reconstruction with multi-line descriptions
    - Total inference from currency tokens
    - Per-field confidence and provenance
"""

from .confidence import ConfidenceAssigner, MatchKind
from .extraction_result import (
    ExtractionDiagnostics,
    ExtractionResult,
    FieldRecord,
    LineItem,
    WriteSummary,
)
from .extractor import OrderExtractor
from .field_rules import FIELD_RULES, CombinedFieldRule, FieldRule
from .label_extractor import LabelValueExtractor
from .table_reconstructor import TableParse, TableReconstructor, TableState

__all__ = [
    'OrderExtractor',
    'ExtractionResult',
    'ExtractionDiagnostics',
    'FieldRecord',
    'LineItem',
    'WriteSummary',
    'ConfidenceAssigner',
    'MatchKind',
    'FIELD_RULES',
    'FieldRule',
    'CombinedFieldRule',
    'LabelValueExtractor',
    'TableReconstructor',
    'TableParse',
    'TableState',
]
