"""
Order Extraction Module.

OrderExtractor runs one extraction pass over OCR plaintext: it normalizes
the lines, reads the labelled fields, reconstructs the item table, infers
the total and wraps everything with confidence and provenance. It does
no I/O; persistence is the output handler's job.

Usage:
    from order_extraction.extraction import OrderExtractor

    extractor = OrderExtractor()
    result = extractor.extract(ocr_text)

    print(result.get_value("name"))
    for item in result.items:
        print(item.line_no, item.code, item.value_num)
"""

import re
import time
from typing import Dict, Optional

from order_extraction.input_handler.text_normalizer import TextNormalizer
from order_extraction.postprocessor.normalizers import MoneyNormalizer
from order_extraction.utils.logger import get_logger
from .confidence import ConfidenceAssigner, MatchKind
from .extraction_result import ExtractionDiagnostics, ExtractionResult
from .label_extractor import LabelValueExtractor
from .table_reconstructor import TableReconstructor

# Initialize module logger
logger = get_logger(__name__)

SIGNATURE_PATTERN = re.compile(r'assinatura|\bCLIENTE\b\s*:', re.IGNORECASE)


class OrderExtractor:
    """
    Extraction engine for one sales-order document.

    Stateless between calls: concurrent passes over different documents
    may share one instance.

    Attributes:
        max_items: Rows kept from the item table; extra rows are rejected
        preview_lines: Lines included in the text preview
        preview_chars: Character cap of the text preview

    Example:
        >>> result = OrderExtractor().extract(text)
        >>> result.total
        16027.0
        >>> result.get_confidence("cpf")
        0.85
    """

    def __init__(
        self,
        confidence_overrides: Optional[Dict[str, float]] = None,
        max_items: int = 50,
        preview_lines: int = 40,
        preview_chars: int = 1200
    ) -> None:
        self.assigner = ConfidenceAssigner(confidence_overrides)
        self.text_normalizer = TextNormalizer()
        self.label_extractor = LabelValueExtractor(assigner=self.assigner)
        self.table_reconstructor = TableReconstructor()
        self.money_normalizer = MoneyNormalizer()

        self.max_items = max_items
        self.preview_lines = preview_lines
        self.preview_chars = preview_chars

    @classmethod
    def from_config(cls, config) -> 'OrderExtractor':
        """Build an extractor from the ``extraction`` config section."""
        return cls(
            confidence_overrides=config.get("extraction.confidence", {}) or {},
            max_items=config.get("extraction.max_items", 50),
            preview_lines=config.get("extraction.preview_lines", 40),
            preview_chars=config.get("extraction.preview_chars", 1200)
        )

    def extract(self, text: Optional[str], case_id: Optional[str] = None) -> ExtractionResult:
        """
        Run one extraction pass.

        Never raises for noisy or empty text; missing fields are simply
        absent from the result.

        Args:
            text: OCR plaintext of the whole document.
            case_id: Optional owning case to bind the result to.

        Returns:
            ExtractionResult with fields, items, total and diagnostics.
        """
        start_time = time.time()
        lines = self.text_normalizer.normalize(text)

        fields = [
            self.assigner.assign("ocr_text", text, updated_by="ocr_agent")
        ] if text else []

        fields.extend(self.label_extractor.extract(lines))

        table = self.table_reconstructor.reconstruct(lines)
        items = table.items[:self.max_items]
        rows_rejected = table.rows_rejected + max(0, len(table.items) - len(items))
        if len(table.items) > self.max_items:
            logger.warning(
                f"Item table has {len(table.items)} rows, keeping {self.max_items}"
            )

        total = self.money_normalizer.infer_total(text, (i.value_num for i in items))
        if total is not None:
            fields.append(self.assigner.assign(
                "total_raw", f"R$ {total[1]}", MatchKind.INFERRED
            ))

        signature_present = bool(SIGNATURE_PATTERN.search(text or ''))
        fields.append(self.assigner.assign(
            "signature_present", "yes" if signature_present else "no", MatchKind.PRESENCE
        ))

        result = ExtractionResult(
            fields=fields,
            items=items,
            total=total[0] if total is not None else None,
            diagnostics=ExtractionDiagnostics(
                lines_total=len(lines),
                fields_extracted=len(fields),
                rows_parsed=table.rows_parsed,
                rows_rejected=rows_rejected
            ),
            text_preview=self.text_normalizer.preview(
                lines, self.preview_lines, self.preview_chars
            ),
            processing_time=time.time() - start_time
        )
        if case_id is not None:
            result.bind_case(case_id)

        logger.info(
            f"Extraction complete: {len(fields)} fields, {len(items)} items, "
            f"{rows_rejected} rows rejected, total={result.total}"
        )
        return result
