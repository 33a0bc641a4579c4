"""
Logging Configuration Module.

Every module logger is a child of ``order_extraction`` and inherits the
handlers installed by setup_logger(): a colorama-coloured console stream
on stderr (stdout is left for the CLI's JSON report) and, optionally, a
rotating log file.

Per-case messages go through CaseLogAdapter so every line of one
extraction pass carries its case id.

Usage:
    from order_extraction.utils.logger import get_case_logger, get_logger, setup_logger

    setup_logger(level="DEBUG")
    logger = get_logger(__name__)
    case_log = get_case_logger(logger, "case-42")
    case_log.info("12 fields written")   # "[case-42] 12 fields written"
"""

import logging
import logging.handlers
import sys
from pathlib import Path
from typing import Optional, Union

import colorama
from colorama import Fore, Style

colorama.init()

ROOT_LOGGER_NAME = "order_extraction"
DEFAULT_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
DEFAULT_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

LEVEL_COLORS = {
    logging.DEBUG: Fore.CYAN,
    logging.INFO: Fore.GREEN,
    logging.WARNING: Fore.YELLOW,
    logging.ERROR: Fore.RED,
    logging.CRITICAL: Fore.RED + Style.BRIGHT,
}


class ColoredFormatter(logging.Formatter):
    """Wraps each formatted record in the colour of its level."""

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        color = LEVEL_COLORS.get(record.levelno)
        if not color:
            return message
        return f"{color}{message}{Style.RESET_ALL}"


class CaseLogAdapter(logging.LoggerAdapter):
    """Prefixes messages with ``[<case_id>]``."""

    def process(self, msg, kwargs):
        return f"[{self.extra['case_id']}] {msg}", kwargs


def _to_level(level: Union[str, int]) -> int:
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(level.upper())
    if not isinstance(resolved, int):
        raise ValueError(f"Unknown logging level: {level}")
    return resolved


def _console_handler(level: int, formatter: logging.Formatter) -> logging.Handler:
    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(formatter)
    return handler


def _file_handler(
    log_file: Union[str, Path],
    level: int,
    formatter: logging.Formatter,
    max_bytes: int,
    backup_count: int
) -> logging.Handler:
    path = Path(log_file)
    path.parent.mkdir(parents=True, exist_ok=True)
    handler = logging.handlers.RotatingFileHandler(
        path,
        maxBytes=max_bytes,
        backupCount=backup_count,
        encoding='utf-8'
    )
    handler.setLevel(level)
    handler.setFormatter(formatter)
    return handler


def setup_logger(
    level: Union[str, int] = "INFO",
    log_format: Optional[str] = None,
    date_format: Optional[str] = None,
    log_file: Optional[str] = None,
    max_bytes: int = 10485760,
    backup_count: int = 5,
    colorize: bool = True
) -> logging.Logger:
    """
    (Re)configure the ``order_extraction`` logger.

    Existing handlers are replaced, so the CLI can call this again after
    reading the configuration.

    Args:
        level: Level name or number for the logger and its handlers.
        log_format: Record format; DEFAULT_FORMAT when None.
        date_format: Timestamp format; DEFAULT_DATE_FORMAT when None.
        log_file: Rotating log file path, or None for console only.
        max_bytes: Size at which the log file rotates.
        backup_count: Rotated files kept.
        colorize: Colour console records by level.

    Returns:
        The application logger.
    """
    numeric_level = _to_level(level)
    log_format = log_format or DEFAULT_FORMAT
    date_format = date_format or DEFAULT_DATE_FORMAT

    app_logger = logging.getLogger(ROOT_LOGGER_NAME)
    app_logger.setLevel(numeric_level)
    for handler in list(app_logger.handlers):
        app_logger.removeHandler(handler)
        handler.close()

    formatter_cls = ColoredFormatter if colorize else logging.Formatter
    app_logger.addHandler(
        _console_handler(numeric_level, formatter_cls(log_format, datefmt=date_format))
    )
    if log_file:
        app_logger.addHandler(_file_handler(
            log_file,
            numeric_level,
            logging.Formatter(log_format, datefmt=date_format),
            max_bytes,
            backup_count
        ))

    app_logger.propagate = False
    app_logger.debug("Logging initialized")
    return app_logger


def get_logger(name: str) -> logging.Logger:
    """Logger ``name`` placed under the ``order_extraction`` namespace."""
    if name == ROOT_LOGGER_NAME or name.startswith(ROOT_LOGGER_NAME + "."):
        return logging.getLogger(name)
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")


def get_case_logger(logger: logging.Logger, case_id: Optional[str]) -> logging.LoggerAdapter:
    """Adapter tagging ``logger`` records with ``case_id`` ("-" when unbound)."""
    return CaseLogAdapter(logger, {'case_id': case_id or "-"})


def setup_logger_from_config(config=None) -> logging.Logger:
    """
    Configure logging from the ``logging`` section of a ConfigurationManager.

    Falls back to the default settings file when ``config`` is None.
    """
    if config is None:
        from config import get_default_config
        config = get_default_config()

    log_file = config.get("logging.file.path") if config.get("logging.file.enabled", False) else None

    return setup_logger(
        level=config.get("logging.level", "INFO"),
        log_format=config.get("logging.format"),
        date_format=config.get("logging.date_format"),
        log_file=log_file,
        max_bytes=config.get("logging.file.max_bytes", 10485760),
        backup_count=config.get("logging.file.backup_count", 5),
        colorize=config.get("logging.console.colorize", True)
    )
