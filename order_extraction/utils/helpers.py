"""
Helper Utilities Module.

Filesystem and dictionary helpers shared by the input, output and
configuration layers.
"""

import re
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Union

PathLike = Union[str, Path]

_UNSAFE_FILENAME_CHARS = re.compile(r'[<>:"/\\|?*\x00-\x1f]')


def ensure_directory(path: PathLike) -> Path:
    """Create ``path`` (and parents) if missing; returns it as a Path."""
    directory = Path(path)
    directory.mkdir(parents=True, exist_ok=True)
    return directory


def get_file_extension(filepath: PathLike) -> str:
    """
    Lowercased suffix including the dot.

    Example:
        >>> get_file_extension("pedido.JPG")
        '.jpg'
        >>> get_file_extension("pedido")
        ''
    """
    return Path(filepath).suffix.lower()


def generate_timestamp(format_str: str = "%Y%m%d_%H%M%S") -> str:
    return datetime.now().strftime(format_str)


def safe_filename(filename: str, replacement: str = "_") -> str:
    """
    Replace characters that are invalid in filenames.

    Case ids are user supplied and end up in export filenames.

    Example:
        >>> safe_filename("order_review_case:42/a.xlsx")
        'order_review_case_42_a.xlsx'
    """
    cleaned = _UNSAFE_FILENAME_CHARS.sub(replacement, filename).strip('. ')
    return cleaned or "unnamed"


def validate_file_exists(filepath: PathLike) -> bool:
    return Path(filepath).is_file()


def merge_dicts(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """
    Recursive merge; ``override`` wins, nested dicts are merged key by key.

    Neither argument is modified.

    Example:
        >>> merge_dicts({"ocr": {"provider": "tesseract", "timeout": 60}},
        ...             {"ocr": {"provider": "google_vision"}})
        {'ocr': {'provider': 'google_vision', 'timeout': 60}}
    """
    merged = dict(base)
    for key, value in override.items():
        current = merged.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            merged[key] = merge_dicts(current, value)
        else:
            merged[key] = value
    return merged
