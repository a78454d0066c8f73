"""
Portfolio Service
Holding list management and the full analysis pipeline

Holdings are immutable snapshots: every mutation returns a new list,
so callers can keep the previous state for undo or comparison.
"""

import logging
from decimal import Decimal
from typing import List, Optional, Sequence, Union
from uuid import uuid4

from mftracker.config import settings
from mftracker.domain.errors import (
    DuplicateHoldingIdError,
    HoldingNotFoundError,
    InvalidHoldingError,
    PortfolioImportError,
)
from mftracker.domain.models import (
    AnalysisResult,
    CategoryBar,
    Explanations,
    Holding,
    HoldingId,
    InputSource,
    ParsedHolding,
    PieSlice,
    RebalanceData,
    RiskProfile,
    Visuals,
)
from mftracker.domain.services.allocation_engine import (
    calculate_allocations,
    calculate_category_totals,
)
from mftracker.domain.services.rebalance_service import RebalancePlanner, build_rebalance_data
from mftracker.domain.services.red_flag_engine import detect_red_flags
from mftracker.domain.services.risk_engine import (
    calculate_diversification_score,
    calculate_risk_score,
    detect_index_overlap,
)
from mftracker.domain.strategy.categories import categorize_fund, get_risk_profile, profile_name
from mftracker.infrastructure.parsers import parse_csv, parse_json, to_holdings
from mftracker.utils.numbers import Number, format_pct

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = frozenset({"fund_name", "amount", "category", "amc", "folio_id", "expense_ratio"})


def validate_holdings(holdings: Sequence[Holding]) -> None:
    """
    Raises:
        DuplicateHoldingIdError: If two holdings share an id
    """
    seen = set()
    for holding in holdings:
        if holding.id in seen:
            raise DuplicateHoldingIdError(f"Duplicate holding id: {holding.id!r}")
        seen.add(holding.id)


def total_capital(holdings: Sequence[Holding]) -> Decimal:
    """Sum of monthly SIP amounts"""
    return sum((h.amount for h in holdings), Decimal('0'))


class PortfolioService:
    """
    Portfolio Service

    Responsibilities:
    - Add / update / delete holdings on immutable snapshots
    - Import holdings from CSV or JSON text
    - Run every engine and assemble an AnalysisResult
    """

    def __init__(
        self,
        planner: Optional[RebalancePlanner] = None,
        max_import_rows: Optional[int] = None,
    ):
        self.planner = planner or RebalancePlanner(settings.REBALANCE_QUANTUM)
        self.max_import_rows = max_import_rows or settings.MAX_IMPORT_ROWS

    # ------------------------------------------------------------------
    # Holding list management
    # ------------------------------------------------------------------

    def add_holding(
        self,
        holdings: Sequence[Holding],
        fund_name: str,
        amount: Number,
        category: Optional[str] = None,
        amc: Optional[str] = None,
        folio_id: Optional[str] = None,
        expense_ratio: Optional[Number] = None,
        holding_id: Optional[HoldingId] = None,
    ) -> List[Holding]:
        """
        Append a holding; category defaults to the name-based guess

        Raises:
            DuplicateHoldingIdError: If holding_id is already used
            InvalidHoldingError: If the fields fail validation
        """
        if holding_id is None:
            holding_id = uuid4().hex
        elif any(h.id == holding_id for h in holdings):
            raise DuplicateHoldingIdError(f"Duplicate holding id: {holding_id!r}")

        holding = Holding.create(
            id=holding_id,
            fund_name=fund_name,
            amount=amount,
            category=category or categorize_fund(fund_name),
            amc=amc,
            folio_id=folio_id,
            expense_ratio=expense_ratio,
        )
        logger.debug("Added holding %s (%s)", holding.id, holding.category)
        return [*holdings, holding]

    def update_holding(
        self,
        holdings: Sequence[Holding],
        holding_id: HoldingId,
        **updates,
    ) -> List[Holding]:
        """
        Replace fields of one holding.

        Changing `category` refreshes the risk weight with it. `risk` cannot
        be set directly.

        Raises:
            HoldingNotFoundError: If no holding has holding_id
            InvalidHoldingError: For `risk` or unknown fields, or invalid values
        """
        if "risk" in updates:
            raise InvalidHoldingError("Risk is derived from category and cannot be set directly")
        unknown = set(updates) - UPDATABLE_FIELDS
        if unknown:
            raise InvalidHoldingError(f"Cannot update fields: {', '.join(sorted(unknown))}")

        index = self._index_of(holdings, holding_id)
        current = holdings[index]
        category = updates.pop("category", None)

        updated = Holding(
            id=current.id,
            fund_name=updates.get("fund_name", current.fund_name),
            amount=updates.get("amount", current.amount),
            category=current.category,
            risk=current.risk,
            amc=updates.get("amc", current.amc),
            folio_id=updates.get("folio_id", current.folio_id),
            expense_ratio=updates.get("expense_ratio", current.expense_ratio),
        )
        if category is not None and category != current.category:
            updated = updated.recategorize(category)

        result = list(holdings)
        result[index] = updated
        return result

    def delete_holding(self, holdings: Sequence[Holding], holding_id: HoldingId) -> List[Holding]:
        """
        Raises:
            HoldingNotFoundError: If no holding has holding_id
        """
        index = self._index_of(holdings, holding_id)
        return [h for i, h in enumerate(holdings) if i != index]

    def total_capital(self, holdings: Sequence[Holding]) -> Decimal:
        return total_capital(holdings)

    @staticmethod
    def _index_of(holdings: Sequence[Holding], holding_id: HoldingId) -> int:
        for index, holding in enumerate(holdings):
            if holding.id == holding_id:
                return index
        raise HoldingNotFoundError(f"Holding not found: {holding_id!r}")

    # ------------------------------------------------------------------
    # Import
    # ------------------------------------------------------------------

    def parse_import(self, content: str, fmt: Union[InputSource, str]) -> List[ParsedHolding]:
        """
        Parse CSV or JSON text into rows, keeping per-row import notes

        Raises:
            PortfolioImportError: On malformed input, unsupported format,
                or when no valid row remains
        """
        try:
            source = InputSource(fmt)
        except ValueError:
            raise PortfolioImportError(f"Unsupported import format: {fmt!r}") from None

        if source == InputSource.CSV:
            parsed = parse_csv(content, max_rows=self.max_import_rows)
        elif source == InputSource.JSON:
            parsed = parse_json(content, max_rows=self.max_import_rows)
        else:
            raise PortfolioImportError(f"Unsupported import format: {source.value}")

        if not parsed:
            raise PortfolioImportError("No valid SIP data found")

        for row in parsed:
            if row.notes:
                logger.warning("Import row %s: %s", row.id, row.notes)
        logger.debug("Parsed %d rows from %s", len(parsed), source.value)
        return parsed

    def import_parsed(self, parsed: Sequence[ParsedHolding]) -> List[Holding]:
        """
        Raises:
            DuplicateHoldingIdError: If two rows share an id
        """
        holdings = to_holdings(parsed)
        validate_holdings(holdings)
        logger.info("Imported %d holdings", len(holdings))
        return holdings

    def import_holdings(self, content: str, fmt: Union[InputSource, str]) -> List[Holding]:
        """Parse CSV or JSON text into holdings"""
        return self.import_parsed(self.parse_import(content, fmt))

    # ------------------------------------------------------------------
    # Analysis
    # ------------------------------------------------------------------

    def analyze(
        self,
        holdings: Sequence[Holding],
        target_profile: Optional[Union[RiskProfile, str]] = None,
        input_source: Union[InputSource, str] = InputSource.MANUAL,
    ) -> AnalysisResult:
        """
        Run every engine over one snapshot

        Raises:
            DuplicateHoldingIdError: If two holdings share an id
            UnknownRiskProfileError: If target_profile is not recognised
        """
        validate_holdings(holdings)
        profile = target_profile or settings.DEFAULT_RISK_PROFILE
        get_risk_profile(profile)

        holdings = list(holdings)
        total = total_capital(holdings)
        risk_score = calculate_risk_score(holdings, total)
        rebalance = build_rebalance_data(holdings, profile, total, planner=self.planner)

        result = AnalysisResult(
            input_source=InputSource(input_source),
            holdings=holdings,
            total_monthly_sip=total,
            allocations=calculate_allocations(holdings, total),
            portfolio_risk_score=risk_score,
            diversification_score=calculate_diversification_score(holdings, total),
            red_flags=detect_red_flags(holdings, total),
            recommended_rebalance=rebalance,
            visuals=Visuals(
                pie_chart_data=[PieSlice(name=h.fund_name, value=h.amount) for h in holdings],
                allocation_bar_data=[
                    CategoryBar(category=category, amount=amount)
                    for category, amount in calculate_category_totals(holdings).items()
                ],
            ),
            explanations=self._explain(rebalance),
            index_overlap_pct=detect_index_overlap(holdings),
        )
        logger.info(
            "Analyzed %d holdings: risk=%s diversification=%s flags=%d",
            len(holdings), result.portfolio_risk_score,
            result.diversification_score, len(result.red_flags),
        )
        return result

    def _explain(self, rebalance: RebalanceData) -> Explanations:
        targets = ", ".join(
            f"{t.category} {format_pct(t.target_pct)}%"
            for t in rebalance.new_allocations
            if t.target_pct > 0
        )
        moves = sum(1 for c in rebalance.actionable_changes if c.diff != 0 and not c.is_new)
        new_funds = sum(1 for c in rebalance.actionable_changes if c.is_new)
        why = (
            f"The {profile_name(rebalance.target_profile)} profile targets {targets}. "
            f"The plan adjusts {moves} existing fund(s) and suggests {new_funds} new fund(s)."
        )
        assumptions = (
            "Amounts are monthly SIP values. Each fund's risk comes from its category, "
            f"not its own volatility. Recommended amounts are rounded to the nearest "
            f"{settings.CURRENCY_SYMBOL}{self.planner.quantum}, so the plan may not net to exactly zero."
        )
        return Explanations(why_recommendation=why, assumptions=assumptions)
