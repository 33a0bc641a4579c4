"""
Output Handler Module for Order Extraction System.

This module provides functionality for:
    - Database storage of case fields and items (SQLite)
    - Provenance-aware field upserts
    - Review workbook export (Excel)
"""

from .handler import OutputHandler
from .excel_exporter import ExcelExporter
from .database_handler import PROTECTED, WRITTEN, DatabaseHandler

__all__ = ['OutputHandler', 'ExcelExporter', 'DatabaseHandler', 'WRITTEN', 'PROTECTED']
