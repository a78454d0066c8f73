"""
REBALANCE PLANNER
Move SIP amounts toward a target risk profile's category mix

RESPONSIBILITIES:
- Category targets from the chosen profile
- Split each category target across existing funds by current weight
- Suggest a new fund for every empty target category
- Zero out categories the profile does not include

RULES:
❌ No holding dropped: every input holding appears exactly once
❌ Unknown profile never yields an empty plan (raises)
✅ Amounts quantized to REBALANCE_QUANTUM (₹10) for readable SIPs
✅ Output sorted by recommended amount, descending (stable)
✅ Net change is NOT guaranteed to be zero; see max_rounding_drift()
"""

import logging
from decimal import Decimal
from typing import Dict, List, Optional, Sequence, Union

from mftracker.domain.models import Holding, RebalanceChange, RebalanceData, RiskProfile
from mftracker.domain.services.allocation_engine import calculate_target_allocations
from mftracker.domain.strategy.categories import get_risk_profile, profile_name
from mftracker.utils.numbers import Number, format_amount, round_half_up, to_decimal

logger = logging.getLogger(__name__)

REBALANCE_QUANTUM = Decimal('10')


class RebalancePlanner:
    """
    Rebalance Planner
    Category-target-driven allocation of a fixed total capital
    """

    def __init__(self, quantum: Number = REBALANCE_QUANTUM):
        """
        Initialize planner

        Args:
            quantum: Granularity recommended amounts are rounded to (default ₹10)
        """
        quantum = to_decimal(quantum)
        if quantum <= 0:
            raise ValueError("Rebalance quantum must be positive")
        self.quantum = quantum

    def quantize(self, amount: Decimal) -> Decimal:
        """Round an amount to the nearest multiple of the quantum"""
        return round_half_up(amount / self.quantum) * self.quantum

    def generate_plan(
        self,
        holdings: Sequence[Holding],
        target_profile: Union[RiskProfile, str],
        total_capital: Number,
    ) -> List[RebalanceChange]:
        """
        Build the rebalance plan

        Args:
            holdings: Current portfolio snapshot
            target_profile: One of RiskProfile
            total_capital: Capital to distribute (normally the SIP total)

        Returns:
            Changes sorted by recommended amount, descending

        Raises:
            UnknownRiskProfileError: If target_profile is not recognised
        """
        targets = get_risk_profile(target_profile)
        name = profile_name(target_profile)
        total = to_decimal(total_capital)
        if total == 0:
            return []

        by_category: Dict[str, List[Holding]] = {}
        for holding in holdings:
            by_category.setdefault(holding.category, []).append(holding)

        plan: List[RebalanceChange] = []
        processed = set()

        for category, target_pct in targets.items():
            processed.add(category)
            target_amount = self.quantize(total * to_decimal(target_pct) / Decimal('100'))
            existing = by_category.get(category, [])

            if existing:
                plan.extend(self._distribute(existing, target_amount, name))
            elif target_amount > 0:
                plan.append(RebalanceChange(
                    fund_name=f"Suggested {category} Fund",
                    category=category,
                    current=Decimal('0'),
                    recommended=target_amount,
                    diff=target_amount,
                    reason=f"Add {category} fund to match {name} profile",
                    is_new=True,
                ))

        for category, funds in by_category.items():
            if category in processed:
                continue
            for fund in funds:
                plan.append(RebalanceChange(
                    fund_name=fund.fund_name,
                    category=fund.category,
                    current=fund.amount,
                    recommended=Decimal('0'),
                    diff=-fund.amount,
                    reason=f"{category} not part of {name} profile - consider reducing or removing",
                ))

        plan.sort(key=lambda change: change.recommended, reverse=True)
        logger.debug(
            "Rebalance plan toward %s: %d changes, net %s",
            name, len(plan), net_change(plan),
        )
        return plan

    def _distribute(
        self,
        funds: List[Holding],
        target_amount: Decimal,
        profile: str,
    ) -> List[RebalanceChange]:
        """Split a category target across its funds by current weight"""
        category_total = sum((f.amount for f in funds), Decimal('0'))
        changes = []
        for fund in funds:
            if category_total > 0:
                weight = fund.amount / category_total
            else:
                weight = Decimal('1') / len(funds)
            recommended = self.quantize(target_amount * weight)
            changes.append(RebalanceChange(
                fund_name=fund.fund_name,
                category=fund.category,
                current=fund.amount,
                recommended=recommended,
                diff=recommended - fund.amount,
                reason=f"Not part of {profile} profile" if recommended == 0 else None,
            ))
        return changes

    def max_rounding_drift(self, plan: Sequence[RebalanceChange]) -> Decimal:
        """
        Upper bound on |net_change| introduced by quantization.

        Each category target and each fund's share is rounded once, each
        contributing at most half a quantum. Holds when the profile sums to
        100 and total_capital equals the current SIP total.
        """
        categories = {change.category for change in plan}
        return self.quantum / 2 * (len(plan) + len(categories))


_default_planner = RebalancePlanner()


def generate_rebalance_plan(
    holdings: Sequence[Holding],
    target_profile: Union[RiskProfile, str],
    total_capital: Number,
) -> List[RebalanceChange]:
    """Rebalance plan with the default ₹10 quantum"""
    return _default_planner.generate_plan(holdings, target_profile, total_capital)


def net_change(plan: Sequence[RebalanceChange]) -> Decimal:
    """Sum of all diffs; zero means the plan is capital-neutral"""
    return sum((change.diff for change in plan), Decimal('0'))


def max_rounding_drift(
    plan: Sequence[RebalanceChange],
    quantum: Number = REBALANCE_QUANTUM,
) -> Decimal:
    """Largest net change that rounding to `quantum` alone can produce"""
    return RebalancePlanner(quantum).max_rounding_drift(plan)


def ensure_zero_net_change(
    plan: Sequence[RebalanceChange],
    tolerance: Optional[Number] = None,
) -> bool:
    """
    True when the plan nets to zero within tolerance.

    Default tolerance is the quantization drift bound, not 1 rupee:
    with ₹10 rounding several categories easily drift past ₹1.
    """
    limit = max_rounding_drift(plan) if tolerance is None else to_decimal(tolerance)
    return abs(net_change(plan)) <= limit


def build_rebalance_data(
    holdings: Sequence[Holding],
    target_profile: Union[RiskProfile, str],
    total_capital: Number,
    planner: Optional[RebalancePlanner] = None,
) -> RebalanceData:
    """Plan plus the profile's category targets"""
    planner = planner or _default_planner
    return RebalanceData(
        target_profile=profile_name(target_profile),
        new_allocations=calculate_target_allocations(target_profile, total_capital),
        actionable_changes=planner.generate_plan(holdings, target_profile, total_capital),
    )


def get_rebalance_summary(plan: Sequence[RebalanceChange], currency: str = "₹") -> str:
    """
    One-paragraph text summary of a plan

    e.g. "Increase: Gold Fund (+₹1000). Decrease: Debt Fund (₹-2000). Keep unchanged: 1 fund(s)."
    """
    increases = [c for c in plan if c.diff > 0]
    decreases = [c for c in plan if c.diff < 0]
    unchanged = [c for c in plan if c.diff == 0]

    parts = []
    if increases:
        items = ", ".join(f"{c.fund_name} (+{currency}{format_amount(c.diff)})" for c in increases)
        parts.append(f"Increase: {items}.")
    if decreases:
        items = ", ".join(f"{c.fund_name} ({currency}{format_amount(c.diff)})" for c in decreases)
        parts.append(f"Decrease: {items}.")
    if unchanged:
        parts.append(f"Keep unchanged: {len(unchanged)} fund(s).")
    return " ".join(parts)
