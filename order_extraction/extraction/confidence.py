"""
Confidence & Provenance Assigner.

Wraps every extracted value in a FieldRecord. The score is a fixed
constant per field, chosen by how strict its match is:

    explicit labelled match          0.70 - 0.90
    loose or length-only validation  0.40 - 0.55
    presence flags                   0.50

The source is always "ocr" for this engine; manual data entry writes
the same keys with its own source tag.
"""

from enum import Enum
from typing import Dict, Optional

from .extraction_result import FieldRecord, FieldValue

OCR_SOURCE = "ocr"


class MatchKind(Enum):
    """How a value was obtained."""
    EXPLICIT = "explicit"
    INFERRED = "inferred"
    PRESENCE = "presence"


KIND_CONFIDENCE: Dict[MatchKind, float] = {
    MatchKind.EXPLICIT: 0.8,
    MatchKind.INFERRED: 0.5,
    MatchKind.PRESENCE: 0.5,
}

FIELD_CONFIDENCE: Dict[str, float] = {
    # Raw text
    'ocr_text': 0.85,
    # Supplier
    'supplier_name': 0.7,
    'supplier_cnpj': 0.9,
    'supplier_phone': 0.75,
    'supplier_city_uf': 0.6,
    # Customer / header
    'local': 0.8,
    'order_date_text': 0.75,
    'name': 0.75,
    'customer_code': 0.65,
    'email': 0.65,
    'birth_date_text': 0.7,
    'address': 0.6,
    'phone': 0.8,
    'city': 0.6,
    'cep': 0.8,
    'state': 0.55,
    'uf': 0.85,
    'cpf': 0.85,
    'cnpj': 0.85,
    'rg': 0.7,
    'ie': 0.55,
    # Payment
    'payment_terms': 0.6,
    'payment_origin': 0.6,
    'payment_local': 0.6,
    'payment_signal_date_text': 0.65,
    'payment_signal_value_raw': 0.65,
    'payment_due_date_text': 0.65,
    'proposal_validity_date_text': 0.7,
    'delivery_forecast_text': 0.6,
    'obs': 0.55,
    # Totals / signature
    'total_raw': 0.75,
    'signature_present': 0.5,
}


class ConfidenceAssigner:
    """
    Builds FieldRecords with confidence and provenance.

    Attributes:
        overrides: Per-key scores replacing the built-in table
        updated_by: Default ``last_updated_by`` tag

    Example:
        >>> assigner = ConfidenceAssigner()
        >>> assigner.assign("cpf", "12345678901").confidence
        0.85
        >>> assigner.assign("new_field", "x", MatchKind.INFERRED).confidence
        0.5
    """

    def __init__(
        self,
        overrides: Optional[Dict[str, float]] = None,
        updated_by: str = "extract"
    ) -> None:
        self.overrides = dict(overrides or {})
        self.updated_by = updated_by

    def confidence_for(self, key: str, kind: MatchKind = MatchKind.EXPLICIT) -> float:
        if key in self.overrides:
            return float(self.overrides[key])
        if key in FIELD_CONFIDENCE:
            return FIELD_CONFIDENCE[key]
        return KIND_CONFIDENCE[kind]

    def assign(
        self,
        key: str,
        value: Optional[FieldValue],
        kind: MatchKind = MatchKind.EXPLICIT,
        updated_by: Optional[str] = None
    ) -> FieldRecord:
        """
        Wrap a value.

        Args:
            key: Field name.
            value: Extracted value (None is kept; the writer skips it).
            kind: Match kind, used when the key has no constant.
            updated_by: Overrides the default ``last_updated_by``.

        Returns:
            FieldRecord tagged with source "ocr".
        """
        return FieldRecord(
            key=key,
            value=value,
            confidence=self.confidence_for(key, kind),
            source=OCR_SOURCE,
            last_updated_by=updated_by or self.updated_by
        )
