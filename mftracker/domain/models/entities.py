"""
Domain Models - Entities
Pure domain objects with no infrastructure dependencies
"""

from dataclasses import dataclass, field, replace
from decimal import Decimal
from enum import Enum
from typing import List, Optional, Union

from mftracker.domain.errors import InvalidHoldingError
from mftracker.domain.strategy.categories import get_risk_for_category
from mftracker.utils.numbers import Number, to_decimal

HoldingId = Union[str, int]


class Severity(str, Enum):
    """Red flag severity tier"""
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class RedFlagCode(str, Enum):
    """Stable machine-readable red flag identifiers"""
    CONCENTRATION_HIGH = "CONCENTRATION_HIGH"
    SMALL_CAP_HIGH = "SMALL_CAP_HIGH"
    THEMATIC_HIGH = "THEMATIC_HIGH"
    EXPENSE_RATIO_HIGH = "EXPENSE_RATIO_HIGH"
    NO_CORE_HOLDINGS = "NO_CORE_HOLDINGS"
    NO_HEDGE = "NO_HEDGE"
    AMC_CONCENTRATION = "AMC_CONCENTRATION"
    DUPLICATE_FOLIO = "DUPLICATE_FOLIO"


class InputSource(str, Enum):
    """Where a holdings list came from"""
    MANUAL = "manual"
    CSV = "csv"
    JSON = "json"
    SCREENSHOT = "screenshot"


def _check_category(fund_name: str, category: str) -> None:
    if not isinstance(category, str):
        raise InvalidHoldingError(f"{fund_name}: category must be a string")


@dataclass(frozen=True)
class Holding:
    """Single fund position (monthly SIP) - Immutable

    `risk` is a snapshot of the category's weight taken when the holding
    was created; use recategorize() to change category and risk together.
    """
    id: HoldingId
    fund_name: str
    amount: Decimal
    category: str
    risk: int
    amc: Optional[str] = None
    folio_id: Optional[str] = None
    expense_ratio: Optional[Decimal] = None

    def __post_init__(self):
        if not isinstance(self.fund_name, str) or not self.fund_name.strip():
            raise InvalidHoldingError("Fund name cannot be empty")
        _check_category(self.fund_name, self.category)

        try:
            amount = to_decimal(self.amount)
        except ValueError as exc:
            raise InvalidHoldingError(f"{self.fund_name}: {exc}") from None
        if amount < Decimal('0'):
            raise InvalidHoldingError(f"{self.fund_name}: amount cannot be negative")
        object.__setattr__(self, "amount", amount)

        if isinstance(self.risk, bool) or not isinstance(self.risk, int):
            raise InvalidHoldingError(f"{self.fund_name}: risk must be an integer")
        if not 0 <= self.risk <= 10:
            raise InvalidHoldingError(f"{self.fund_name}: risk must be within 0-10")

        if self.expense_ratio is not None:
            try:
                expense_ratio = to_decimal(self.expense_ratio)
            except ValueError as exc:
                raise InvalidHoldingError(f"{self.fund_name}: {exc}") from None
            if expense_ratio < Decimal('0'):
                raise InvalidHoldingError(f"{self.fund_name}: expense ratio cannot be negative")
            object.__setattr__(self, "expense_ratio", expense_ratio)

    @classmethod
    def create(
        cls,
        id: HoldingId,
        fund_name: str,
        amount: Number,
        category: str,
        amc: Optional[str] = None,
        folio_id: Optional[str] = None,
        expense_ratio: Optional[Number] = None,
    ) -> "Holding":
        """Build a holding with risk derived from its category"""
        _check_category(fund_name, category)
        return cls(
            id=id,
            fund_name=fund_name,
            amount=amount,
            category=category,
            risk=get_risk_for_category(category),
            amc=amc,
            folio_id=folio_id,
            expense_ratio=expense_ratio,
        )

    def recategorize(self, category: str) -> "Holding":
        """Copy with category and its risk weight refreshed together"""
        _check_category(self.fund_name, category)
        return replace(self, category=category, risk=get_risk_for_category(category))


@dataclass(frozen=True)
class ParsedHolding:
    """Holding as read from an import file, before risk is assigned"""
    id: HoldingId
    fund_name: str
    amount: Decimal
    category: str
    amc: Optional[str] = None
    folio_id: Optional[str] = None
    expense_ratio: Optional[Decimal] = None
    notes: str = ""


@dataclass(frozen=True)
class Allocation:
    """Share of total capital held in one fund"""
    fund_name: str
    amount: Decimal
    pct: float
    category: str


@dataclass(frozen=True)
class TargetAllocation:
    """Profile target for one category"""
    category: str
    target_pct: float
    target_amount: Decimal


@dataclass(frozen=True)
class RedFlag:
    """Detected structural issue"""
    code: RedFlagCode
    message: str
    severity: Severity


@dataclass(frozen=True)
class RebalanceChange:
    """Recommended adjustment for one fund (or a suggested new fund)"""
    fund_name: str
    category: str
    current: Decimal
    recommended: Decimal
    diff: Decimal
    reason: Optional[str] = None
    is_new: bool = False


@dataclass(frozen=True)
class RebalanceData:
    """Rebalance plan toward a profile plus the profile's targets"""
    target_profile: str
    new_allocations: List[TargetAllocation]
    actionable_changes: List[RebalanceChange]


@dataclass(frozen=True)
class PieSlice:
    name: str
    value: Decimal


@dataclass(frozen=True)
class CategoryBar:
    category: str
    amount: Decimal


@dataclass(frozen=True)
class Visuals:
    pie_chart_data: List[PieSlice] = field(default_factory=list)
    allocation_bar_data: List[CategoryBar] = field(default_factory=list)


@dataclass(frozen=True)
class Explanations:
    why_recommendation: str
    assumptions: str


@dataclass(frozen=True)
class AnalysisResult:
    """Everything the presentation/export layer needs for one snapshot"""
    input_source: InputSource
    holdings: List[Holding]
    total_monthly_sip: Decimal
    allocations: List[Allocation]
    portfolio_risk_score: float
    diversification_score: int
    red_flags: List[RedFlag]
    recommended_rebalance: RebalanceData
    visuals: Visuals
    explanations: Explanations
    index_overlap_pct: float = 0.0
