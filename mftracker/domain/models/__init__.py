"""
Domain Models Package
Export all domain entities
"""

from .entities import (
    # Enums
    InputSource,
    RedFlagCode,
    Severity,

    # Entities
    Allocation,
    AnalysisResult,
    CategoryBar,
    Explanations,
    Holding,
    HoldingId,
    ParsedHolding,
    PieSlice,
    RebalanceChange,
    RebalanceData,
    RedFlag,
    TargetAllocation,
    Visuals,
)
from mftracker.domain.strategy.categories import RiskProfile

__all__ = [
    # Enums
    "InputSource",
    "RedFlagCode",
    "RiskProfile",
    "Severity",

    # Entities
    "Allocation",
    "AnalysisResult",
    "CategoryBar",
    "Explanations",
    "Holding",
    "HoldingId",
    "ParsedHolding",
    "PieSlice",
    "RebalanceChange",
    "RebalanceData",
    "RedFlag",
    "TargetAllocation",
    "Visuals",
]
