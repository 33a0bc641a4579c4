"""
OCR Engine Module for Order Extraction System.

This module turns scanned or photographed order forms into plaintext.

Supports multiple OCR providers:
    - Tesseract (default)
    - Google Cloud Vision
    - EasyOCR (optional)
"""

from .base import OCRProvider
from .engine import OCREngine
from .tesseract_backend import TesseractProvider
from .vision_backend import GoogleVisionProvider

__all__ = ['OCREngine', 'OCRProvider', 'TesseractProvider', 'GoogleVisionProvider']
