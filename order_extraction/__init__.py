"""
Sales-Order Extraction Engine - Source Package.

This package turns the OCR plaintext of a paper sales-order form into a
structured record: header fields, a reconstructed item table, payment
terms and an inferred total, each value tagged with a confidence score
and a provenance source, and persists it per case.

Modules:
    - input_handler: Text intake and line normalization
    - ocr_engine: Interchangeable OCR providers (image -> plaintext)
    - extraction: Field rules, label/value extraction, table reconstruction
    - postprocessor: pt-BR money/date normalization and structural checks
    - output_handler: SQLite persistence and review workbook export
    - utils: Logging, exceptions, helpers

Architecture:
    Image -> OCR provider -> Text Normalizer -> {Label/Value Extractor,
    Table Reconstructor} -> Confidence Assigner -> Persistence Writer
"""

__version__ = "1.0.0"

__all__ = [
    'input_handler',
    'ocr_engine',
    'extraction',
    'postprocessor',
    'output_handler',
    'pipeline',
    'utils'
]
