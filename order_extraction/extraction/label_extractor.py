"""
Label/Value Extractor Module.

Reads labelled values from the normalized lines of a form, tolerating a
label alone on its line ("Nome: João") or sharing the line with a second
label ("Local: X Data: Y"). Rules come from field_rules.FIELD_RULES and
are evaluated by a single dispatch loop.

Absence of a field is a normal outcome: every lookup returns None when
nothing matches, and values failing a structural check are dropped.
"""

import re
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from order_extraction.input_handler.text_normalizer import NormalizedLine, fold_diacritics
from order_extraction.postprocessor.normalizers import DateNormalizer, MoneyNormalizer, to_digits
from order_extraction.postprocessor.validators import DocumentIdValidator, PhoneValidator
from order_extraction.utils.logger import get_logger
from .confidence import ConfidenceAssigner
from .extraction_result import FieldRecord
from .field_rules import (
    CAPTURE,
    CUSTOMER_CODE_LABEL,
    FIELD_RULES,
    PAYMENT_TERMS_LABEL,
    CombinedFieldRule,
    FieldRule,
    Rule,
)

# Initialize module logger
logger = get_logger(__name__)

LABEL_SEPARATOR = r'\s*[:\-.]?\s*'
EMAIL_PATTERN = re.compile(r'[\w.+\-]+@[\w\-]+(?:\.[\w\-]+)+')
CUSTOMER_CODE_TAIL = re.compile(rf'\b{CUSTOMER_CODE_LABEL}\b.*$', re.IGNORECASE)


def _label_regex(label: str, flags: int) -> 're.Pattern':
    return re.compile(
        rf'\b(?:{label})(?![A-Za-z0-9]){LABEL_SEPARATOR}(?P<value>[^\s:.\-].*)$',
        flags
    )


def _stop_regex(stop_labels: Sequence[str]) -> Optional['re.Pattern']:
    if not stop_labels:
        return None
    return re.compile(
        r'\b(?:' + '|'.join(stop_labels) + r')(?![A-Za-z0-9])',
        re.IGNORECASE
    )


def strip_customer_code_label(value: Optional[str]) -> Optional[str]:
    """
    Drop a trailing "Código do Cliente ..." from a name value.

    Example:
        >>> strip_customer_code_label("Maria Silva Código do Cliente 42")
        'Maria Silva'
    """
    if not value:
        return None
    match = CUSTOMER_CODE_TAIL.search(fold_diacritics(value))
    if match:
        value = value[:match.start()]
    return value.strip() or None


class LabelValueExtractor:
    """
    Evaluates the field rule table over a list of NormalizedLine.

    Attributes:
        rules: Ordered rule table
        assigner: Wraps values into FieldRecords

    Example:
        >>> lines = TextNormalizer().normalize("Nome: Maria Silva Código do Cliente: 42")
        >>> extractor = LabelValueExtractor()
        >>> {r.key: r.value for r in extractor.extract(lines)}
        {'name': 'Maria Silva', 'customer_code': '42'}
    """

    def __init__(
        self,
        rules: Sequence[Rule] = FIELD_RULES,
        assigner: Optional[ConfidenceAssigner] = None
    ) -> None:
        self.rules = tuple(rules)
        self.assigner = assigner or ConfidenceAssigner()

        self.date_normalizer = DateNormalizer()
        self.money_normalizer = MoneyNormalizer()
        self.document_validator = DocumentIdValidator()
        self.phone_validator = PhoneValidator()

        self._posts: Dict[str, Callable[[str], Optional[str]]] = {
            'date': self.date_normalizer.normalize,
            'phone': self.phone_validator.extract,
            'person_name': strip_customer_code_label,
            'digits': lambda v: to_digits(v) or None,
            'email': self._post_email,
            'money_raw': self._post_money_raw,
        }

    # ------------------------------------------------------------------
    # Primitive lookups
    # ------------------------------------------------------------------

    def extract_label(
        self,
        lines: Sequence[NormalizedLine],
        label: str,
        stop_labels: Sequence[str] = (),
        case_sensitive: bool = False
    ) -> Optional[str]:
        """
        Value following ``label`` on the first line that has one.

        Args:
            lines: Lines to scan, top to bottom.
            label: Label regex (diacritic-folded form).
            stop_labels: Labels that end the value when they appear later
                on the same line.
            case_sensitive: Match without IGNORECASE.

        Returns:
            Trimmed value in display form, or None.
        """
        regex = _label_regex(label, 0 if case_sensitive else re.IGNORECASE)
        stop = _stop_regex(stop_labels)

        for line in lines:
            match = regex.search(line.key)
            if not match:
                continue
            start, end = match.start('value'), match.end('value')
            if stop:
                stop_match = stop.search(line.key, start)
                if stop_match:
                    end = stop_match.start()
            value = line.value_at(start, end)
            if value:
                return value
        return None

    def extract_capture(
        self,
        lines: Sequence[NormalizedLine],
        pattern: str,
        case_sensitive: bool = False
    ) -> Optional[str]:
        """Group 1 of ``pattern`` on the first matching line."""
        regex = re.compile(pattern, 0 if case_sensitive else re.IGNORECASE)
        for line in lines:
            match = regex.search(line.key)
            if match and match.group(1):
                value = line.value_at(match.start(1), match.end(1))
                if value:
                    return value
        return None

    def extract_combined(
        self,
        lines: Sequence[NormalizedLine],
        pattern: str
    ) -> Optional[Tuple[Optional[str], Optional[str]]]:
        """
        Both values of a two-label line, from the first line that matches.

        Returns:
            (first, second), either possibly None; None if no line matches.
        """
        regex = re.compile(pattern, re.IGNORECASE)
        for line in lines:
            match = regex.search(line.key)
            if not match:
                continue
            values = []
            for group in (1, 2):
                if match.group(group) is None:
                    values.append(None)
                else:
                    values.append(line.value_at(match.start(group), match.end(group)) or None)
            return values[0], values[1]
        return None

    # ------------------------------------------------------------------
    # Rule dispatch
    # ------------------------------------------------------------------

    def extract(self, lines: Sequence[NormalizedLine]) -> List[FieldRecord]:
        """
        Run every rule over the lines.

        Args:
            lines: Normalized lines of one document.

        Returns:
            FieldRecords for the fields found, in rule order.
        """
        payment_index = self.find_line_index(lines, PAYMENT_TERMS_LABEL)
        records: List[FieldRecord] = []

        for rule in self.rules:
            if isinstance(rule, CombinedFieldRule):
                found = self.apply_combined_rule(rule, lines)
            else:
                found = self.apply_rule(rule, lines, payment_index)
            for key, value, kind in found:
                records.append(self.assigner.assign(key, value, kind))

        logger.debug(f"Label extraction found {len(records)} fields")
        return records

    def apply_rule(
        self,
        rule: FieldRule,
        lines: Sequence[NormalizedLine],
        payment_index: Optional[int] = None
    ) -> List[Tuple[str, str, object]]:
        """Evaluate one rule; returns [(key, value, kind)] or []."""
        if rule.window is not None:
            if payment_index is None:
                return []
            lines = lines[payment_index:payment_index + rule.window]

        raw = None
        for pattern in rule.patterns:
            if rule.mode == CAPTURE:
                raw = self.extract_capture(lines, pattern, rule.case_sensitive)
            else:
                raw = self.extract_label(lines, pattern, rule.stop_labels, rule.case_sensitive)
            if raw is not None:
                break

        if raw is None:
            return []

        key, value = self._finish(rule, raw)
        if value is None:
            logger.debug(f"Dropped '{rule.key}' value after checks: '{raw}'")
            return []
        return [(key, value, rule.kind)]

    def apply_combined_rule(
        self,
        rule: CombinedFieldRule,
        lines: Sequence[NormalizedLine]
    ) -> List[Tuple[str, str, object]]:
        """Two-label line first, then each missing key on its own."""
        combined = self.extract_combined(lines, rule.pattern) or (None, None)

        found = []
        for sub_rule, raw in zip((rule.first, rule.second), combined):
            if raw is not None:
                key, value = self._finish(sub_rule, raw)
                if value is not None:
                    found.append((key, value, sub_rule.kind))
                    continue
            found.extend(self.apply_rule(sub_rule, lines))
        return found

    def find_line_index(
        self,
        lines: Sequence[NormalizedLine],
        pattern: str
    ) -> Optional[int]:
        """Position of the first line matching ``pattern``, or None."""
        regex = re.compile(rf'\b{pattern}\b', re.IGNORECASE)
        for position, line in enumerate(lines):
            if regex.search(line.key):
                return position
        return None

    # ------------------------------------------------------------------
    # Post-processing
    # ------------------------------------------------------------------

    def _finish(self, rule: FieldRule, raw: str) -> Tuple[str, Optional[str]]:
        value: Optional[str] = raw
        if rule.post:
            value = self._posts[rule.post](value)
        if value is None:
            return rule.key, None

        if rule.classify == 'tax_id':
            classified = self.document_validator.classify(value)
            if classified is None:
                return rule.key, None
            return classified
        if rule.classify == 'cnpj':
            classified = self.document_validator.classify(value)
            if classified is None or classified[0] != 'cnpj':
                return rule.key, None
            return rule.key, classified[1]

        return rule.key, value

    def _post_email(self, value: str) -> Optional[str]:
        match = EMAIL_PATTERN.search(value)
        return match.group(0) if match else value

    def _post_money_raw(self, value: str) -> Optional[str]:
        if self.money_normalizer.parse(value) is None:
            return None
        return f"R$ {value}"
