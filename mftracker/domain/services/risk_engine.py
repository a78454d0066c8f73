"""
RISK ENGINE
Portfolio-level risk and diversification scores

RESPONSIBILITIES:
- Capital-weighted risk score (0-10, one decimal)
- Composite diversification score (0-100, integer)
- Index fund overlap estimate

RULES:
✅ Pure functions, no shared state
✅ Zero capital / empty portfolio → 0
✅ ROUND_HALF_UP everywhere
"""

from decimal import Decimal
from typing import Sequence

from mftracker.domain.models import Holding
from mftracker.utils.numbers import Number, round_half_up, to_decimal

# -------------------------------------------------------------------
# Diversification weights
# -------------------------------------------------------------------

BREADTH_MAX_POINTS = Decimal('40')
BREADTH_FULL_CATEGORIES = 6

BALANCE_LOW_CONCENTRATION = Decimal('0.25')
BALANCE_MID_CONCENTRATION = Decimal('0.40')
BALANCE_POINTS_LOW = 40
BALANCE_POINTS_MID = 25
BALANCE_POINTS_HIGH = 10

FUND_COUNT_MAX_POINTS = Decimal('20')
FUND_COUNT_FULL = 8

INDEX_NAME_MARKERS = ("nifty", "sensex")


def calculate_risk_score(holdings: Sequence[Holding], total_capital: Number) -> float:
    """
    Capital-weighted mean of holding risk weights

    Args:
        holdings: Portfolio snapshot
        total_capital: Denominator for the weights

    Returns:
        Score in [0, 10] rounded to one decimal (0.0 for zero capital)
    """
    total = to_decimal(total_capital)
    if total == 0 or not holdings:
        return 0.0

    weighted = sum((Decimal(h.risk) * h.amount for h in holdings), Decimal('0'))
    return float(round_half_up(weighted / total, 1))


def balance_points(max_allocation: Decimal) -> int:
    """Step function on the largest single-fund share (0-1)"""
    if max_allocation < BALANCE_LOW_CONCENTRATION:
        return BALANCE_POINTS_LOW
    if max_allocation < BALANCE_MID_CONCENTRATION:
        return BALANCE_POINTS_MID
    return BALANCE_POINTS_HIGH


def calculate_diversification_score(holdings: Sequence[Holding], total_capital: Number) -> int:
    """
    Composite score from category breadth, concentration and fund count

    - Breadth: up to 40 points, full at 6 distinct categories
    - Balance: 40 / 25 / 10 points by largest allocation (<25%, <40%, else)
    - Fund count: up to 20 points, full at 8 funds

    Returns:
        Integer in [0, 100]; 0 for an empty portfolio
    """
    if not holdings:
        return 0

    total = to_decimal(total_capital)
    category_count = len({h.category for h in holdings})
    breadth = min(Decimal(category_count) / BREADTH_FULL_CATEGORIES, Decimal('1')) * BREADTH_MAX_POINTS

    # Zero capital leaves the largest share undefined; score it as concentrated
    if total > 0:
        balance = balance_points(max(h.amount for h in holdings) / total)
    else:
        balance = BALANCE_POINTS_HIGH

    fund_count = min(Decimal(len(holdings)) / FUND_COUNT_FULL, Decimal('1')) * FUND_COUNT_MAX_POINTS

    return int(round_half_up(breadth + balance + fund_count))


def detect_index_overlap(holdings: Sequence[Holding]) -> float:
    """
    Share of capital (%) in index-like funds when more than one is held.
    Multiple index funds largely track the same stocks.
    """
    index_funds = [
        h for h in holdings
        if h.category == "Index" or any(m in h.fund_name.lower() for m in INDEX_NAME_MARKERS)
    ]
    if len(index_funds) <= 1:
        return 0.0

    total = sum((h.amount for h in holdings), Decimal('0'))
    if total <= 0:
        return 0.0
    index_total = sum((h.amount for h in index_funds), Decimal('0'))
    return float(index_total / total * Decimal('100'))
