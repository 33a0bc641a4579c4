"""
Extraction Result Data Classes.

Data structures produced by one extraction pass and consumed by the
persistence writer and the reporting caller.

Classes:
    FieldRecord: One scalar value for a case, with confidence and provenance
    LineItem: One reconstructed row of the item table
    ExtractionDiagnostics: Counters of one pass
    WriteSummary: Counters of one persistence run
    ExtractionResult: Aggregate output of one pass
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union
import json
from datetime import datetime

FieldValue = Union[str, Dict[str, Any], List[Any]]


@dataclass
class FieldRecord:
    """
    A named scalar value extracted for a case.

    Attributes:
        key: Field name (e.g. "name", "cpf", "payment_terms")
        value: Short text or JSON-serialisable structure; None means
            "nothing to write"
        confidence: Score in [0, 1]
        source: Provenance tag ("ocr", "vendor", "admin", ...)
        last_updated_by: Process or actor that produced the value
        case_id: Owning case, set when the result is bound to one

    Example:
        >>> FieldRecord(key="name", value="Maria Silva", confidence=0.75)
        FieldRecord(name='Maria Silva', conf=0.75, source=ocr)
    """
    key: str
    value: Optional[FieldValue]
    confidence: float = 0.0
    source: str = "ocr"
    last_updated_by: str = "extract"
    case_id: Optional[str] = None

    def __post_init__(self):
        if not 0.0 <= self.confidence <= 1.0:
            raise ValueError(f"confidence must be within [0, 1]: {self.confidence}")

    @property
    def is_text(self) -> bool:
        return isinstance(self.value, str)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'case_id': self.case_id,
            'key': self.key,
            'value': self.value,
            'confidence': self.confidence,
            'source': self.source,
            'last_updated_by': self.last_updated_by,
        }

    def __repr__(self) -> str:
        return (
            f"FieldRecord({self.key}={self.value!r}, "
            f"conf={self.confidence}, source={self.source})"
        )


@dataclass
class LineItem:
    """
    One row of the order's item table.

    Attributes:
        line_no: Position in output order, starting at 1
        code: Product code, None for description-only rows
        description: Description; continuation lines are joined with "\\n"
        qty: Quantity, when printed
        value_raw: Currency token as printed ("1.200,00")
        value_num: Parsed value (1200.0)
    """
    line_no: int
    code: Optional[str]
    description: str
    qty: Optional[int] = None
    value_raw: Optional[str] = None
    value_num: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'line_no': self.line_no,
            'code': self.code,
            'description': self.description,
            'qty': self.qty,
            'value_raw': self.value_raw,
            'value_num': self.value_num,
        }


@dataclass
class ExtractionDiagnostics:
    """Counters collected during one pass."""
    lines_total: int = 0
    fields_extracted: int = 0
    rows_parsed: int = 0
    rows_rejected: int = 0

    def to_dict(self) -> Dict[str, int]:
        return {
            'lines_total': self.lines_total,
            'fields_extracted': self.fields_extracted,
            'rows_parsed': self.rows_parsed,
            'rows_rejected': self.rows_rejected,
        }


@dataclass
class WriteSummary:
    """
    Counters of one persistence run.

    Failed writes are counted here instead of aborting the batch.
    """
    fields_written: int = 0
    fields_skipped: int = 0
    fields_protected: int = 0
    fields_failed: int = 0
    rows_inserted: int = 0
    rows_failed: int = 0
    items_replaced: bool = False

    @property
    def has_failures(self) -> bool:
        return self.fields_failed > 0 or self.rows_failed > 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            'fields_written': self.fields_written,
            'fields_skipped': self.fields_skipped,
            'fields_protected': self.fields_protected,
            'fields_failed': self.fields_failed,
            'rows_inserted': self.rows_inserted,
            'rows_failed': self.rows_failed,
            'items_replaced': self.items_replaced,
        }


@dataclass
class ExtractionResult:
    """
    Aggregate output of one extraction pass.

    Attributes:
        fields: Extracted FieldRecords, in rule order
        items: Reconstructed LineItems
        total: Inferred order total
        diagnostics: Pass counters
        text_preview: First normalized lines, for debugging
        case_id: Owning case, once bound
        extraction_timestamp: When the pass ran
        processing_time: Seconds spent extracting

    Example:
        >>> result = extractor.extract(ocr_text)
        >>> result.get_value("name")
        'Maria Silva'
        >>> result.items[0].value_num
        1200.0
    """
    fields: List[FieldRecord] = field(default_factory=list)
    items: List[LineItem] = field(default_factory=list)
    total: Optional[float] = None
    diagnostics: ExtractionDiagnostics = field(default_factory=ExtractionDiagnostics)
    text_preview: Optional[str] = None
    case_id: Optional[str] = None
    extraction_timestamp: Optional[str] = None
    processing_time: float = 0.0

    def __post_init__(self):
        """Initialize timestamp if not provided."""
        if self.extraction_timestamp is None:
            self.extraction_timestamp = datetime.now().isoformat()

    @property
    def field_map(self) -> Dict[str, FieldRecord]:
        """Records by key; a later record for the same key wins."""
        return {record.key: record for record in self.fields}

    @property
    def extracted_fields(self) -> Dict[str, FieldValue]:
        """Only the keys that carry a value."""
        return {
            record.key: record.value
            for record in self.fields
            if record.value is not None
        }

    @property
    def average_confidence(self) -> float:
        scores = [r.confidence for r in self.fields if r.value is not None]
        if not scores:
            return 0.0
        return sum(scores) / len(scores)

    def get_field(self, key: str) -> Optional[FieldRecord]:
        return self.field_map.get(key)

    def get_value(self, key: str) -> Optional[FieldValue]:
        record = self.get_field(key)
        return record.value if record else None

    def get_confidence(self, key: str) -> float:
        record = self.get_field(key)
        return record.confidence if record else 0.0

    def bind_case(self, case_id: str) -> 'ExtractionResult':
        """Attach every field to a case."""
        self.case_id = case_id
        for record in self.fields:
            record.case_id = case_id
        return self

    def to_dict(self) -> Dict[str, Any]:
        return {
            'case_id': self.case_id,
            'fields': [r.to_dict() for r in self.fields],
            'items': [i.to_dict() for i in self.items],
            'total': self.total,
            'diagnostics': self.diagnostics.to_dict(),
            'text_preview': self.text_preview,
            'extraction_timestamp': self.extraction_timestamp,
            'processing_time': self.processing_time,
            'average_confidence': self.average_confidence,
        }

    def to_json(self, indent: int = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent, ensure_ascii=False)

    def __repr__(self) -> str:
        return (
            f"ExtractionResult("
            f"case={self.case_id}, "
            f"fields={len(self.extracted_fields)}, "
            f"items={len(self.items)}, "
            f"total={self.total})"
        )
