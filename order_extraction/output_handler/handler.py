"""
Main Output Handler Module.

This module provides the OutputHandler class, the persistence writer of
one extraction pass. It commits fields and items through the
DatabaseHandler and, when enabled, writes a review workbook.

Field writes and the item replace are independent: a failing field is
logged and counted, and never stops the other writes.
"""

from typing import Any, Dict, Optional

from order_extraction.utils.logger import get_case_logger, get_logger
from order_extraction.utils.exceptions import DatabaseError, ExcelExportError
from order_extraction.extraction.extraction_result import ExtractionResult, WriteSummary
from .database_handler import PROTECTED, DatabaseHandler
from .excel_exporter import ExcelExporter

# Initialize module logger
logger = get_logger(__name__)


class OutputHandler:
    """
    Persistence writer for extraction results.

    Attributes:
        database_handler: DatabaseHandler for fields and items
        excel_enabled: Whether a review workbook is written per pass
        excel_exporter: ExcelExporter instance, created lazily

    Example:
        >>> handler = OutputHandler(DatabaseHandler(db_path))
        >>> summary = handler.write(result.bind_case("case-1"))
        >>> summary.fields_written
        12
    """

    def __init__(
        self,
        database_handler: DatabaseHandler,
        excel_enabled: bool = False,
        excel_exporter: Optional[ExcelExporter] = None
    ) -> None:
        self.database_handler = database_handler
        self.excel_enabled = excel_enabled
        self._excel_exporter = excel_exporter

        logger.info(f"OutputHandler initialized (excel={self.excel_enabled})")

    @classmethod
    def from_config(cls, config, db_path: Optional[str] = None) -> 'OutputHandler':
        database_handler = DatabaseHandler(db_path=db_path, config=config)
        return cls(
            database_handler,
            excel_enabled=config.get("output.excel.enabled", False),
            excel_exporter=ExcelExporter.from_config(config)
        )

    @property
    def excel_exporter(self) -> ExcelExporter:
        """Get or create the Excel exporter."""
        if self._excel_exporter is None:
            self._excel_exporter = ExcelExporter()
        return self._excel_exporter

    def write(self, result: ExtractionResult) -> WriteSummary:
        """
        Commit one extraction result.

        Args:
            result: Result bound to a case (``result.case_id`` set).

        Returns:
            WriteSummary with per-field and per-row counters.

        Raises:
            DatabaseError: If the result is not bound to a case.
        """
        if not result.case_id:
            raise DatabaseError("write", "extraction result is not bound to a case")

        summary = WriteSummary()
        case_log = get_case_logger(logger, result.case_id)

        for record in result.fields:
            if record.value is None:
                summary.fields_skipped += 1
                continue
            record.case_id = result.case_id
            try:
                outcome = self.database_handler.upsert_field(record)
            except DatabaseError as e:
                summary.fields_failed += 1
                case_log.error(f"Field '{record.key}' failed: {e}")
                continue
            if outcome == PROTECTED:
                summary.fields_protected += 1
            else:
                summary.fields_written += 1

        try:
            inserted, failed = self.database_handler.replace_items(result.case_id, result.items)
            summary.rows_inserted = inserted
            summary.rows_failed = failed
            summary.items_replaced = True
        except DatabaseError as e:
            summary.rows_failed = len(result.items)
            case_log.error(f"Item replace failed: {e}")

        case_log.info(
            f"Persisted: {summary.fields_written} written, "
            f"{summary.fields_protected} protected, {summary.fields_skipped} skipped, "
            f"{summary.fields_failed} failed; {summary.rows_inserted} rows"
        )
        return summary

    def save(self, result: ExtractionResult, output_dir: Optional[str] = None) -> Dict[str, Any]:
        """
        Write to the database and, if enabled, to a review workbook.

        Returns:
            {'summary': WriteSummary, 'excel_path': str or None}
        """
        summary = self.write(result)

        excel_path = None
        if self.excel_enabled:
            excel_path = self.to_excel(result, output_dir=output_dir)

        return {'summary': summary, 'excel_path': excel_path}

    def to_excel(
        self,
        result: ExtractionResult,
        filename: Optional[str] = None,
        output_dir: Optional[str] = None
    ) -> Optional[str]:
        """Review workbook path, or None when the export failed."""
        try:
            return self.excel_exporter.export(result, filename, output_dir)
        except ExcelExportError as e:
            logger.error(f"Excel export failed: {e}")
            return None

    def close(self) -> None:
        self.database_handler.close()

