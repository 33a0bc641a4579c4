"""
Extraction Pipeline.

Wires the stages of one extraction pass around an explicit
ConfigurationManager:

    input (text | image -> OCR) -> OrderExtractor -> OutputHandler

Usage:
    from config import ConfigurationManager
    from order_extraction.pipeline import ExtractionPipeline

    pipeline = ExtractionPipeline(ConfigurationManager())
    report = pipeline.run_text(ocr_text, case_id="case-42")
    print(report['write_summary']['fields_written'])
"""

from pathlib import Path
from typing import Any, Dict, Optional, Union

from order_extraction.extraction import ExtractionResult, OrderExtractor, WriteSummary
from order_extraction.input_handler import InputHandler
from order_extraction.output_handler import OutputHandler
from order_extraction.utils.logger import get_case_logger, get_logger

# Initialize module logger
logger = get_logger(__name__)

ExtractionReport = Dict[str, Any]


def build_report(
    result: ExtractionResult,
    summary: Optional[WriteSummary] = None,
    excel_path: Optional[str] = None
) -> ExtractionReport:
    """
    Reporting dictionary of one pass.

    Keys: case_id, total, fields_extracted, rows_parsed, rows_rejected,
    lines_total, write_summary, text_preview, processing_time, excel_path.
    """
    report: ExtractionReport = {'case_id': result.case_id, 'total': result.total}
    report.update(result.diagnostics.to_dict())
    report['items'] = len(result.items)
    report['write_summary'] = summary.to_dict() if summary is not None else None
    report['text_preview'] = result.text_preview
    report['processing_time'] = round(result.processing_time, 4)
    report['excel_path'] = excel_path
    return report


class ExtractionPipeline:
    """
    One-call entry point: text or image in, stored case data and a report out.

    Components are built from ``config`` unless given explicitly.

    Attributes:
        config: ConfigurationManager used for every stage
        extractor: OrderExtractor
        output_handler: OutputHandler (database + optional workbook)
        input_handler: InputHandler for files

    Example:
        >>> pipeline = ExtractionPipeline(config)
        >>> report = pipeline.run_image("pedido.jpg", case_id="case-42")
        >>> report['items']
        3
    """

    def __init__(
        self,
        config,
        extractor: Optional[OrderExtractor] = None,
        output_handler: Optional[OutputHandler] = None,
        input_handler: Optional[InputHandler] = None,
        db_path: Optional[str] = None
    ) -> None:
        self.config = config
        self.extractor = extractor or OrderExtractor.from_config(config)
        self.output_handler = output_handler or OutputHandler.from_config(config, db_path)
        self.input_handler = input_handler or InputHandler(config=config)

    def extract(self, text: str, case_id: str) -> ExtractionResult:
        """Extraction only; nothing is stored."""
        return self.extractor.extract(text, case_id=case_id)

    def run_text(self, text: str, case_id: str) -> ExtractionReport:
        """
        Extract from OCR text and persist the result for ``case_id``.

        Args:
            text: OCR plaintext of the whole document.
            case_id: Case the fields and items belong to.

        Returns:
            ExtractionReport dictionary.
        """
        case_log = get_case_logger(logger, case_id)
        case_log.info("Running extraction")
        result = self.extract(text, case_id)
        saved = self.output_handler.save(result)

        summary = saved['summary']
        if summary.has_failures:
            case_log.warning(
                f"Persisted with failures: "
                f"{summary.fields_failed} fields, {summary.rows_failed} rows"
            )

        return build_report(result, summary, saved['excel_path'])

    def run_file(self, path: Union[str, Path], case_id: str) -> ExtractionReport:
        """
        Load a text transcript or an image, then extract and persist.

        Raises:
            InputError: If the file is missing or unsupported.
            OCRError: If OCR fails or yields no text; nothing is written.
        """
        text = self.input_handler.load_text(path)
        return self.run_text(text, case_id)

    def run_image(self, path: Union[str, Path], case_id: str) -> ExtractionReport:
        """Alias of run_file for image inputs."""
        return self.run_file(path, case_id)
