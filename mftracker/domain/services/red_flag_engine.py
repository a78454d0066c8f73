"""
RED FLAG ENGINE
Fixed battery of independent portfolio rules

RESPONSIBILITIES:
- Inspect holdings, allocations and risk score
- Emit RedFlag(code, message, severity) per triggered rule

RULES:
❌ No rule suppresses another
❌ Absent optional fields (amc, folio_id, expense_ratio) never trigger
✅ Emission order = rule declaration order
✅ Empty portfolio / zero capital → no flags
✅ Message percentages formatted to one decimal
"""

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Callable, Dict, Iterable, List, Sequence

from mftracker.domain.models import Holding, RedFlag, RedFlagCode, Severity
from mftracker.domain.services.risk_engine import calculate_risk_score
from mftracker.utils.numbers import Number, format_pct, to_decimal

logger = logging.getLogger(__name__)

# -------------------------------------------------------------------
# Thresholds (percent of total capital unless noted)
# -------------------------------------------------------------------

SINGLE_FUND_MAX_PCT = Decimal('40')
SMALL_CAP_MAX_PCT = Decimal('25')
THEMATIC_MAX_PCT = Decimal('15')
THEMATIC_SEVERE_PCT = Decimal('25')
EXPENSE_RATIO_MAX = Decimal('2')
HIGH_RISK_WEIGHT = 8
HIGH_RISK_MAX_PCT = Decimal('50')
NO_HEDGE_RISK_SCORE = 8
AMC_MAX_PCT = Decimal('40')

SMALL_CAP_CATEGORIES = frozenset({"Small Cap"})
THEMATIC_CATEGORIES = frozenset({"Thematic", "Sector"})
CORE_CATEGORIES = frozenset({"Index", "Large Cap"})
HEDGE_CATEGORIES = frozenset({"Debt", "Gold"})


@dataclass(frozen=True)
class _Portfolio:
    """Read-only view shared by the rules"""
    holdings: Sequence[Holding]
    total_capital: Decimal

    def pct_of(self, amount: Decimal) -> Decimal:
        return amount / self.total_capital * Decimal('100')

    def pct_in(self, categories: frozenset) -> Decimal:
        total = sum((h.amount for h in self.holdings if h.category in categories), Decimal('0'))
        return self.pct_of(total)

    def has_any(self, categories: frozenset) -> bool:
        return any(h.category in categories for h in self.holdings)


def thematic_severity(pct: Decimal) -> Severity:
    """Thematic/sector exposure escalates to high above 25%"""
    return Severity.HIGH if pct > THEMATIC_SEVERE_PCT else Severity.MEDIUM


# -------------------------------------------------------------------
# Rules
# -------------------------------------------------------------------

def _rule_concentration(p: _Portfolio) -> Iterable[RedFlag]:
    for holding in p.holdings:
        pct = p.pct_of(holding.amount)
        if pct > SINGLE_FUND_MAX_PCT:
            yield RedFlag(
                code=RedFlagCode.CONCENTRATION_HIGH,
                message=(
                    f"{holding.fund_name} accounts for {format_pct(pct)}% of your portfolio. "
                    "Recommendation: Keep individual funds below 25%."
                ),
                severity=Severity.HIGH,
            )


def _rule_small_cap(p: _Portfolio) -> Iterable[RedFlag]:
    pct = p.pct_in(SMALL_CAP_CATEGORIES)
    if pct > SMALL_CAP_MAX_PCT:
        yield RedFlag(
            code=RedFlagCode.SMALL_CAP_HIGH,
            message=(
                f"Small Cap funds make up {format_pct(pct)}% of portfolio. High volatility risk. "
                "Recommendation: < 20% for balanced investors."
            ),
            severity=Severity.HIGH,
        )


def _rule_thematic(p: _Portfolio) -> Iterable[RedFlag]:
    pct = p.pct_in(THEMATIC_CATEGORIES)
    if pct > THEMATIC_MAX_PCT:
        yield RedFlag(
            code=RedFlagCode.THEMATIC_HIGH,
            message=(
                f"Thematic/Sector funds account for {format_pct(pct)}% of portfolio. "
                "These are high-risk, concentrated bets. Recommendation: < 15%."
            ),
            severity=thematic_severity(pct),
        )


def _rule_expense_ratio(p: _Portfolio) -> Iterable[RedFlag]:
    expensive = [
        h.fund_name for h in p.holdings
        if h.expense_ratio is not None and h.expense_ratio > EXPENSE_RATIO_MAX
    ]
    if expensive:
        yield RedFlag(
            code=RedFlagCode.EXPENSE_RATIO_HIGH,
            message=(
                f"{len(expensive)} fund(s) have expense ratios > 2%: {', '.join(expensive)}. "
                "Consider lower-cost alternatives."
            ),
            severity=Severity.MEDIUM,
        )


def _rule_no_core(p: _Portfolio) -> Iterable[RedFlag]:
    if p.has_any(CORE_CATEGORIES):
        return
    high_risk = sum((h.amount for h in p.holdings if h.risk >= HIGH_RISK_WEIGHT), Decimal('0'))
    pct = p.pct_of(high_risk)
    if pct > HIGH_RISK_MAX_PCT:
        yield RedFlag(
            code=RedFlagCode.NO_CORE_HOLDINGS,
            message=(
                f"Portfolio lacks core holdings (Index/Large Cap funds) and {format_pct(pct)}% "
                "is in high-risk funds. Add stable core holdings."
            ),
            severity=Severity.HIGH,
        )


def _rule_no_hedge(p: _Portfolio) -> Iterable[RedFlag]:
    if p.has_any(HEDGE_CATEGORIES):
        return
    risk_score = calculate_risk_score(p.holdings, p.total_capital)
    if risk_score >= NO_HEDGE_RISK_SCORE:
        yield RedFlag(
            code=RedFlagCode.NO_HEDGE,
            message=(
                f"Portfolio risk score is {format_pct(risk_score)}/10 (Aggressive) with no debt or gold "
                "allocation. Consider adding 10-15% in debt/gold for stability."
            ),
            severity=Severity.MEDIUM,
        )


def _rule_amc_concentration(p: _Portfolio) -> Iterable[RedFlag]:
    by_amc: Dict[str, Decimal] = {}
    for holding in p.holdings:
        if holding.amc:
            by_amc[holding.amc] = by_amc.get(holding.amc, Decimal('0')) + holding.amount

    for amc, amount in by_amc.items():
        pct = p.pct_of(amount)
        if pct > AMC_MAX_PCT:
            yield RedFlag(
                code=RedFlagCode.AMC_CONCENTRATION,
                message=(
                    f"{amc} funds account for {format_pct(pct)}% of portfolio. "
                    "Diversify across AMCs to reduce fund house risk."
                ),
                severity=Severity.MEDIUM,
            )


def _rule_duplicate_folio(p: _Portfolio) -> Iterable[RedFlag]:
    seen = set()
    duplicates: List[str] = []
    for holding in p.holdings:
        folio = holding.folio_id
        if not folio:
            continue
        if folio in seen and folio not in duplicates:
            duplicates.append(folio)
        seen.add(folio)

    if duplicates:
        yield RedFlag(
            code=RedFlagCode.DUPLICATE_FOLIO,
            message=f"Duplicate folio IDs detected: {', '.join(duplicates)}. Possible data entry error.",
            severity=Severity.LOW,
        )


RULES: Sequence[Callable[[_Portfolio], Iterable[RedFlag]]] = (
    _rule_concentration,
    _rule_small_cap,
    _rule_thematic,
    _rule_expense_ratio,
    _rule_no_core,
    _rule_no_hedge,
    _rule_amc_concentration,
    _rule_duplicate_folio,
)


def detect_red_flags(holdings: Sequence[Holding], total_capital: Number) -> List[RedFlag]:
    """
    Run every rule against the portfolio

    Args:
        holdings: Portfolio snapshot
        total_capital: Denominator for all percentages

    Returns:
        Flags in rule order; empty for an empty portfolio or zero capital
    """
    total = to_decimal(total_capital)
    if total == 0 or not holdings:
        return []

    portfolio = _Portfolio(holdings=holdings, total_capital=total)
    flags: List[RedFlag] = []
    for rule in RULES:
        flags.extend(rule(portfolio))

    logger.debug("Red flags raised: %s", [flag.code.value for flag in flags])
    return flags
