"""
Utility Module for the Sales-Order Extraction Engine.

This module provides common utilities used across all other modules:
    - Logging configuration (console/file handlers, per-case adapter)
    - Exception hierarchy
    - Filesystem and dictionary helpers
"""

from .logger import get_case_logger, get_logger, setup_logger, setup_logger_from_config
from .helpers import ensure_directory, get_file_extension, generate_timestamp, merge_dicts

__all__ = [
    'setup_logger',
    'setup_logger_from_config',
    'get_logger',
    'get_case_logger',
    'ensure_directory',
    'get_file_extension',
    'generate_timestamp',
    'merge_dicts'
]
