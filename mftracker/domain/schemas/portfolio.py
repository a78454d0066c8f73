"""
Portfolio API Schemas
Request / response models for the portfolio and config routes
"""

from typing import Dict, List, Literal, Optional, Union

from pydantic import BaseModel, Field

from mftracker.domain.models import (
    AnalysisResult,
    Holding,
    RebalanceChange,
    RebalanceData,
)
from mftracker.domain.strategy.categories import categorize_fund


class HoldingIn(BaseModel):
    id: Optional[Union[int, str]] = None
    fund_name: str
    amount: float
    category: Optional[str] = None
    amc: Optional[str] = None
    folio_id: Optional[str] = None
    expense_ratio: Optional[float] = None

    def to_entity(self, position: int) -> Holding:
        """Domain holding; missing id and category are filled in"""
        return Holding.create(
            id=self.id if self.id is not None else f"manual-{position}",
            fund_name=self.fund_name,
            amount=str(self.amount),
            category=self.category or categorize_fund(self.fund_name),
            amc=self.amc,
            folio_id=self.folio_id,
            expense_ratio=str(self.expense_ratio) if self.expense_ratio is not None else None,
        )


class HoldingOut(BaseModel):
    id: Union[int, str]
    fund_name: str
    amount: float
    category: str
    risk: int
    amc: Optional[str] = None
    folio_id: Optional[str] = None
    expense_ratio: Optional[float] = None

    @classmethod
    def from_entity(cls, holding: Holding) -> "HoldingOut":
        return cls(
            id=holding.id,
            fund_name=holding.fund_name,
            amount=float(holding.amount),
            category=holding.category,
            risk=holding.risk,
            amc=holding.amc,
            folio_id=holding.folio_id,
            expense_ratio=float(holding.expense_ratio) if holding.expense_ratio is not None else None,
        )


class AllocationOut(BaseModel):
    fund_name: str
    amount: float
    pct: float
    category: str


class RedFlagOut(BaseModel):
    code: str
    message: str
    severity: str


class RebalanceChangeOut(BaseModel):
    fund_name: str
    category: str
    current: float
    recommended: float
    diff: float
    reason: Optional[str] = None
    is_new: bool = False

    @classmethod
    def from_entity(cls, change: RebalanceChange) -> "RebalanceChangeOut":
        return cls(
            fund_name=change.fund_name,
            category=change.category,
            current=float(change.current),
            recommended=float(change.recommended),
            diff=float(change.diff),
            reason=change.reason,
            is_new=change.is_new,
        )


class TargetAllocationOut(BaseModel):
    category: str
    target_pct: float
    target_amount: float


class RebalanceDataOut(BaseModel):
    target_profile: str
    new_allocations: List[TargetAllocationOut]
    actionable_changes: List[RebalanceChangeOut]

    @classmethod
    def from_entity(cls, data: RebalanceData) -> "RebalanceDataOut":
        return cls(
            target_profile=data.target_profile,
            new_allocations=[
                TargetAllocationOut(
                    category=t.category,
                    target_pct=t.target_pct,
                    target_amount=float(t.target_amount),
                )
                for t in data.new_allocations
            ],
            actionable_changes=[RebalanceChangeOut.from_entity(c) for c in data.actionable_changes],
        )


class PieSliceOut(BaseModel):
    name: str
    value: float


class CategoryBarOut(BaseModel):
    category: str
    amount: float


class VisualsOut(BaseModel):
    pie_chart_data: List[PieSliceOut]
    allocation_bar_data: List[CategoryBarOut]


class ExplanationsOut(BaseModel):
    why_recommendation: str
    assumptions: str


# ======================
# Requests
# ======================

class CategorizeRequest(BaseModel):
    fund_name: str


class AnalyzeRequest(BaseModel):
    holdings: List[HoldingIn]
    target_profile: Optional[str] = None
    input_source: Literal["manual", "csv", "json", "screenshot"] = "manual"


class RebalanceRequest(BaseModel):
    holdings: List[HoldingIn]
    target_profile: str
    total_capital: Optional[float] = Field(default=None, ge=0)


class ImportRequest(BaseModel):
    format: Literal["csv", "json"]
    content: str


# ======================
# Responses
# ======================

class CategorizeResponse(BaseModel):
    category: str
    risk: int


class AnalysisResponse(BaseModel):
    input_source: str
    holdings: List[HoldingOut]
    total_monthly_sip: float
    allocations: List[AllocationOut]
    portfolio_risk_score: float
    diversification_score: int
    red_flags: List[RedFlagOut]
    recommended_rebalance: RebalanceDataOut
    visuals: VisualsOut
    explanations: ExplanationsOut
    index_overlap_pct: float
    summary_text: str

    @classmethod
    def from_entity(cls, result: AnalysisResult, summary_text: str) -> "AnalysisResponse":
        return cls(
            input_source=result.input_source.value,
            holdings=[HoldingOut.from_entity(h) for h in result.holdings],
            total_monthly_sip=float(result.total_monthly_sip),
            allocations=[
                AllocationOut(
                    fund_name=a.fund_name,
                    amount=float(a.amount),
                    pct=a.pct,
                    category=a.category,
                )
                for a in result.allocations
            ],
            portfolio_risk_score=result.portfolio_risk_score,
            diversification_score=result.diversification_score,
            red_flags=[
                RedFlagOut(code=f.code.value, message=f.message, severity=f.severity.value)
                for f in result.red_flags
            ],
            recommended_rebalance=RebalanceDataOut.from_entity(result.recommended_rebalance),
            visuals=VisualsOut(
                pie_chart_data=[
                    PieSliceOut(name=p.name, value=float(p.value))
                    for p in result.visuals.pie_chart_data
                ],
                allocation_bar_data=[
                    CategoryBarOut(category=b.category, amount=float(b.amount))
                    for b in result.visuals.allocation_bar_data
                ],
            ),
            explanations=ExplanationsOut(
                why_recommendation=result.explanations.why_recommendation,
                assumptions=result.explanations.assumptions,
            ),
            index_overlap_pct=result.index_overlap_pct,
            summary_text=summary_text,
        )


class RebalanceResponse(BaseModel):
    target_profile: str
    new_allocations: List[TargetAllocationOut]
    actionable_changes: List[RebalanceChangeOut]
    summary: str
    net_change: float
    within_rounding_tolerance: bool


class ImportResponse(BaseModel):
    count: int
    holdings: List[HoldingOut]
    notes: List[str] = []


class ProfileInfo(BaseModel):
    name: str
    targets: Dict[str, float]
