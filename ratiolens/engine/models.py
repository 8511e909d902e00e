"""
Data structures for the RatioLens engine.

- FinancialStatementRecord: the canonical output of extraction
- BalanceCheck: outcome of the accounting identity check
- RatioSet / RatioAssessment: computed ratios and their classification
- Diagnostics: injectable sink for per-run diagnostics
- StatementAnalysis: everything one pipeline run produces
"""

from dataclasses import dataclass, field, fields
from decimal import Decimal
from enum import Enum
from typing import Any, Callable, Dict, Iterator, List, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field


class SourceKind(str, Enum):
    """Shape of the decoded input."""
    DOCUMENT = "document"        # ordered text lines (DOCX, PDF, TXT)
    SPREADSHEET = "spreadsheet"  # rows of cells (XLSX, XLS, CSV)


class RatioStatus(str, Enum):
    """Four-level ratio health status."""
    EXCELLENT = "excellent"
    GOOD = "good"
    WARNING = "warning"
    CRITICAL = "critical"


Row = Tuple[Any, ...]
ExtractionSource = Union[str, List[str], List[Row]]


# =============================================================================
# Diagnostics
# =============================================================================

@dataclass(frozen=True)
class Diagnostic:
    """A single diagnostic entry emitted by the engine."""
    level: str
    event: str
    context: Dict[str, Any] = field(default_factory=dict)


class Diagnostics:
    """
    Collects diagnostics produced during one engine run.

    The engine never touches process-wide logging; callers decide what to do
    with the entries (inspect them in tests, forward them to structlog, ...).
    An optional callback receives every entry as it is added.
    """

    def __init__(self, callback: Optional[Callable[[Diagnostic], None]] = None):
        self._entries: List[Diagnostic] = []
        self._callback = callback

    def add(self, level: str, event: str, **context: Any) -> Diagnostic:
        entry = Diagnostic(level=level, event=event, context=context)
        self._entries.append(entry)
        if self._callback is not None:
            self._callback(entry)
        return entry

    def debug(self, event: str, **context: Any) -> Diagnostic:
        return self.add("debug", event, **context)

    def info(self, event: str, **context: Any) -> Diagnostic:
        return self.add("info", event, **context)

    def warning(self, event: str, **context: Any) -> Diagnostic:
        return self.add("warning", event, **context)

    def by_event(self, event: str) -> List[Diagnostic]:
        return [e for e in self._entries if e.event == event]

    @property
    def entries(self) -> Tuple[Diagnostic, ...]:
        return tuple(self._entries)

    @property
    def warnings(self) -> List[Diagnostic]:
        return [e for e in self._entries if e.level == "warning"]

    def __iter__(self) -> Iterator[Diagnostic]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)


# =============================================================================
# Financial statement record
# =============================================================================

ZERO = Decimal("0")


class FinancialStatementRecord(BaseModel):
    """
    Canonical balance sheet + income statement of one entity.

    Income statement items are None when the source did not contain them;
    this is distinct from a reported zero.
    """

    model_config = ConfigDict(frozen=True)

    # Identity
    okved: Optional[str] = None
    company_name: Optional[str] = None

    # Balance sheet
    current_assets: Decimal = Field(ge=0)
    cash_and_equivalents: Decimal = Field(ge=0)
    short_term_investments: Decimal = Field(ge=0)
    accounts_receivable: Decimal = Field(ge=0)
    inventory: Decimal = Field(ge=0)
    total_assets: Decimal = Field(gt=0)
    current_liabilities: Decimal = Field(ge=0)
    short_term_debt: Decimal = Field(ge=0)
    # Parsed value is replaced by long_term_debt + current_liabilities in normalize
    total_liabilities: Decimal
    equity: Decimal = Field(gt=0)
    long_term_debt: Decimal = Field(ge=0)

    # I. Non-current assets
    intangible_assets: Decimal = ZERO
    research_results: Decimal = ZERO
    fixed_assets: Decimal = ZERO
    long_term_investments: Decimal = ZERO
    deferred_tax_assets: Decimal = ZERO
    other_non_current_assets: Decimal = ZERO
    non_current_assets: Decimal = ZERO

    # II. Current assets
    vat_on_purchases: Decimal = ZERO
    other_current_assets: Decimal = ZERO

    # III. Capital and reserves
    authorized_capital: Decimal = ZERO
    treasury_shares: Decimal = ZERO
    revaluation_reserve: Decimal = ZERO
    additional_capital: Decimal = ZERO
    reserve_capital: Decimal = ZERO
    retained_earnings: Decimal = ZERO

    # IV. Long-term liabilities
    long_term_borrowings: Decimal = ZERO
    deferred_tax_liabilities: Decimal = ZERO
    long_term_provisions: Decimal = ZERO
    other_long_term_liabilities: Decimal = ZERO

    # V. Current liabilities
    accounts_payable: Decimal = ZERO
    deferred_income: Decimal = ZERO
    short_term_provisions: Decimal = ZERO
    other_current_liabilities: Decimal = ZERO

    # Income statement
    revenue: Optional[Decimal] = None
    gross_profit: Optional[Decimal] = None
    operating_income: Optional[Decimal] = None
    profit_before_tax: Optional[Decimal] = None
    net_income: Optional[Decimal] = None


@dataclass(frozen=True)
class BalanceCheck:
    """Result of comparing assets against equity + liabilities."""
    total_assets: Decimal
    passive: Decimal
    difference: Decimal
    tolerance: Decimal

    @property
    def is_balanced(self) -> bool:
        return self.difference <= self.tolerance

    @property
    def difference_percent(self) -> float:
        if self.total_assets == 0:
            return 0.0
        return float(self.difference / self.total_assets * 100)


# =============================================================================
# Ratios
# =============================================================================

@dataclass(frozen=True)
class RatioSet:
    """Computed ratios. Profitability ratios are None when not applicable."""
    current_ratio: float
    quick_ratio: float
    cash_ratio: float
    equity_ratio: float
    debt_ratio: float
    debt_to_equity_ratio: float
    financial_leverage_ratio: float
    working_capital: float
    roa: Optional[float] = None
    roe: Optional[float] = None
    ros: Optional[float] = None
    gross_profit_margin: Optional[float] = None
    net_profit_margin: Optional[float] = None
    # Reported without a benchmark
    equity_maneuverability: Optional[float] = None

    def as_dict(self) -> Dict[str, float]:
        """Present ratios only, in declaration order."""
        values = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if value is not None:
                values[f.name] = value
        return values

    def __contains__(self, key: str) -> bool:
        return getattr(self, key, None) is not None


@dataclass(frozen=True)
class RatioAssessment:
    """A ratio value classified against its benchmark."""
    key: str
    title: str
    value: float
    status: RatioStatus
    benchmark: str
    description: str
    formula: str


@dataclass(frozen=True)
class StatementAnalysis:
    """Everything produced by one analysis run."""
    record: FinancialStatementRecord
    ratios: RatioSet
    assessments: Dict[str, RatioAssessment]
    balance_check: BalanceCheck
    diagnostics: Tuple[Diagnostic, ...] = ()
