"""
ALLOCATION ENGINE
Convert holdings → percentage share of total capital

RESPONSIBILITIES:
- Per-fund allocation percentages
- Per-category capital totals
- Profile target amounts for a given capital

RULES:
❌ No validation (holdings are validated when built)
❌ No mutation of inputs
✅ Output order follows input order
✅ Zero capital → 0%, never an error
"""

import logging
from decimal import Decimal
from typing import Dict, List, Sequence, Union

from mftracker.domain.models import Allocation, Holding, RiskProfile, TargetAllocation
from mftracker.domain.strategy.categories import get_risk_profile
from mftracker.utils.numbers import Number, round_half_up, to_decimal

logger = logging.getLogger(__name__)


def calculate_allocations(
    holdings: Sequence[Holding],
    total_capital: Number,
) -> List[Allocation]:
    """
    Allocation of each holding as a percentage of total capital

    Args:
        holdings: Portfolio snapshot
        total_capital: Normally the sum of amounts; callers may override

    Returns:
        One Allocation per holding, same order as input
    """
    total = to_decimal(total_capital)
    return [
        Allocation(
            fund_name=holding.fund_name,
            amount=holding.amount,
            pct=float(holding.amount / total * Decimal('100')) if total > 0 else 0.0,
            category=holding.category,
        )
        for holding in holdings
    ]


def calculate_category_totals(holdings: Sequence[Holding]) -> Dict[str, Decimal]:
    """Capital per category, in first-seen category order"""
    totals: Dict[str, Decimal] = {}
    for holding in holdings:
        totals[holding.category] = totals.get(holding.category, Decimal('0')) + holding.amount
    return totals


def calculate_target_allocations(
    profile: Union[RiskProfile, str],
    total_capital: Number,
) -> List[TargetAllocation]:
    """
    Target amount per category for a profile, rounded to whole rupees

    Raises:
        UnknownRiskProfileError: If profile is not recognised
    """
    targets = get_risk_profile(profile)
    total = to_decimal(total_capital)
    allocations = [
        TargetAllocation(
            category=category,
            target_pct=float(pct),
            target_amount=round_half_up(total * to_decimal(pct) / Decimal('100')),
        )
        for category, pct in targets.items()
    ]
    logger.debug("Target allocations for %s: %d categories", profile, len(allocations))
    return allocations
