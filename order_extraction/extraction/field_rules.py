"""
Field Rule Table.

Ordered description of every header and payment field read from the
sales-order form. The LabelValueExtractor evaluates this table top to
bottom with one dispatch loop; adding a field means adding a row here.

Patterns are matched against the diacritic-folded line (``Codigo``,
``Condicoes``), case-insensitively unless a rule says otherwise.

Match modes:
    LABEL    the value is the rest of the line after the label and an
             optional ":", "-" or "." separator
    CAPTURE  the value is group 1 of the pattern

Post-processors (by name):
    date         canonical dd/mm/yyyy
    phone        phone-shaped digit run of a labelled value
    person_name  drop a trailing "Codigo do Cliente" label
    digits       digits only
    email        the address when one is present
    money_raw    "R$ <token>" for a valid currency token

Classifiers (by name):
    tax_id  11 digits -> "cpf", 14 digits -> "cnpj", otherwise dropped
    cnpj    exactly 14 digits, otherwise dropped
"""

from dataclasses import dataclass
from typing import Optional, Tuple, Union

from order_extraction.postprocessor.normalizers import MONEY_TOKEN
from .confidence import MatchKind

LABEL = "label"
CAPTURE = "capture"

PAYMENT_TERMS_LABEL = r'Condicoes\s+de\s+Pagamento'
CUSTOMER_CODE_LABEL = r'Codigo\s+do\s+Cliente'


@dataclass(frozen=True)
class FieldRule:
    """
    One field and how to read it.

    Attributes:
        key: Output field name (a classifier may rename it)
        patterns: Alternatives tried in order, each over all lines
        mode: LABEL or CAPTURE
        post: Post-processor name
        classify: Classifier name
        stop_labels: Labels that end the value when found later on the line
        window: Only search this many lines from the payment-terms line
        kind: Match kind, for the confidence fallback
        case_sensitive: Match without IGNORECASE
    """
    key: str
    patterns: Tuple[str, ...]
    mode: str = LABEL
    post: Optional[str] = None
    classify: Optional[str] = None
    stop_labels: Tuple[str, ...] = ()
    window: Optional[int] = None
    kind: MatchKind = MatchKind.EXPLICIT
    case_sensitive: bool = False


@dataclass(frozen=True)
class CombinedFieldRule:
    """
    Two labels commonly printed on one line ("Local: X Data: Y").

    The combined pattern is tried first; a key it leaves empty falls back
    to its own single-label rule.
    """
    pattern: str
    first: FieldRule
    second: FieldRule

    @property
    def keys(self) -> Tuple[str, str]:
        return self.first.key, self.second.key


Rule = Union[FieldRule, CombinedFieldRule]


FIELD_RULES: Tuple[Rule, ...] = (
    # Supplier (printed letterhead)
    FieldRule('supplier_name', (r'^(.*\b(?:LTDA|EIRELI)\b\.?)',),
              mode=CAPTURE, kind=MatchKind.INFERRED),
    FieldRule('supplier_cnpj', (r'(?<!/)(?<!/\s)\bCNPJ\b\s*[:\-]?\s*([0-9./\-]{11,18})',),
              mode=CAPTURE, classify='cnpj'),
    FieldRule('supplier_phone', (r'Fone',), post='phone'),
    FieldRule('supplier_city_uf', (r'\b([A-Za-z]+\s*/\s*[A-Z]{2})\b',),
              mode=CAPTURE, kind=MatchKind.INFERRED, case_sensitive=True),

    # Customer header
    CombinedFieldRule(
        r'\bLocal\b\s*:\s*(.*?)\s*(?:\bData\b\s*:\s*(.*))?$',
        FieldRule('local', (r'Local',)),
        FieldRule('order_date_text',
                  (r'Data(?!\s+de\s+Nascimento)(?!\s+prevista)',), post='date'),
    ),
    CombinedFieldRule(
        rf'\bNome\b\s*:\s*(.*?)\s*(?:\b{CUSTOMER_CODE_LABEL}\b\s*:\s*(.*))?$',
        FieldRule('name', (r'Nome',), post='person_name'),
        FieldRule('customer_code', (CUSTOMER_CODE_LABEL,)),
    ),
    FieldRule('email', (r'E-?mail',), post='email'),
    FieldRule('birth_date_text', (r'Data\s+de\s+Nascimento',), post='date'),
    FieldRule('address', (r'Endereco',),
              stop_labels=(r'Bairro', r'Cidade', r'CEP', r'Telefone', r'Fone')),
    FieldRule('phone', (r'Telefone',), post='phone'),
    FieldRule('city', (r'Cidade',), stop_labels=(r'CEP', r'Estado', r'UF')),
    FieldRule('cep', (r'\bCEP\b\s*[:\-]?\s*([0-9]{5}-?[0-9]{3})',), mode=CAPTURE),
    FieldRule('state', (r'Estado',), stop_labels=(r'UF', r'CEP')),
    FieldRule('uf', (r'\bUF\b\s*[:\-]?\s*([A-Z]{2})\b',),
              mode=CAPTURE, case_sensitive=True),
    FieldRule('tax_id', (
        r'\bcpf\s*/?\s*cnpj\b\s*[:\-]?\s*([0-9./\-]{11,18})',
        r'\bcpf\b\s*[:\-]?\s*([0-9./\-]{11,18})',
        r'\bcnpj\b\s*[:\-]?\s*([0-9./\-]{11,18})',
    ), mode=CAPTURE, classify='tax_id'),
    FieldRule('ie', (r'Inscr\.?\s*Est\.?',)),
    FieldRule('rg', (r'\bRG\b\s*[:\-]?\s*([0-9.\-]{6,14})',),
              mode=CAPTURE, post='digits'),

    # Payment block
    FieldRule('payment_terms', (PAYMENT_TERMS_LABEL,)),
    FieldRule('payment_origin', (r'Origem\s+Financeira',)),
    FieldRule('payment_local', (r'Local',), window=25),
    FieldRule('payment_signal_date_text', (r'Sinal\s+de\s+negocio\s+em',), post='date'),
    FieldRule('payment_signal_value_raw', (rf'\bR\$\s*({MONEY_TOKEN})(?!\d)',),
              mode=CAPTURE, post='money_raw', window=30),
    FieldRule('payment_due_date_text', (r'Com\s+vencimento\s+em',), post='date'),
    FieldRule('proposal_validity_date_text', (r'Validade\s+da\s+Proposta',), post='date'),
    FieldRule('delivery_forecast_text', (r'Data\s+prevista\s+para\s+entrega',)),
    FieldRule('obs', (r'Obs(?:ervac(?:ao|oes))?\.?',)),
)
