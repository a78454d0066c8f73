"""
Portfolio API Routes
Categorize, analyze, rebalance, import and export
"""

import logging
from typing import List, NoReturn

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import PlainTextResponse

from mftracker.config import settings
from mftracker.domain.errors import (
    HoldingNotFoundError,
    MFTrackerError,
    UnknownRiskProfileError,
)
from mftracker.domain.models import Holding
from mftracker.domain.schemas.portfolio import (
    AnalysisResponse,
    AnalyzeRequest,
    CategorizeRequest,
    CategorizeResponse,
    HoldingIn,
    HoldingOut,
    ImportRequest,
    ImportResponse,
    RebalanceDataOut,
    RebalanceRequest,
    RebalanceResponse,
)
from mftracker.domain.services.portfolio_service import PortfolioService, total_capital, validate_holdings
from mftracker.domain.services.rebalance_service import (
    build_rebalance_data,
    ensure_zero_net_change,
    get_rebalance_summary,
    net_change,
)
from mftracker.domain.strategy.categories import categorize_fund, get_risk_for_category
from mftracker.reports.rebalance_export import export_rebalance_csv, generate_summary_text

logger = logging.getLogger(__name__)
router = APIRouter()

_service = PortfolioService()


def get_portfolio_service() -> PortfolioService:
    return _service


def _raise_http(exc: MFTrackerError) -> NoReturn:
    status = 404 if isinstance(exc, (UnknownRiskProfileError, HoldingNotFoundError)) else 422
    logger.warning("Rejected request: %s", exc)
    # KeyError subclasses wrap the message in quotes when str()'d
    detail = exc.args[0] if exc.args else str(exc)
    raise HTTPException(status_code=status, detail=detail) from exc


def _to_holdings(items: List[HoldingIn]) -> List[Holding]:
    holdings = [item.to_entity(position) for position, item in enumerate(items)]
    validate_holdings(holdings)
    return holdings


@router.post("/categorize", response_model=CategorizeResponse)
async def categorize(request: CategorizeRequest):
    """
    Guess a fund's category from its name
    """
    category = categorize_fund(request.fund_name)
    return CategorizeResponse(category=category, risk=get_risk_for_category(category))


@router.post("/analyze", response_model=AnalysisResponse)
async def analyze(
    request: AnalyzeRequest,
    service: PortfolioService = Depends(get_portfolio_service),
):
    """
    Full portfolio health report
    """
    try:
        holdings = _to_holdings(request.holdings)
        result = service.analyze(holdings, request.target_profile, request.input_source)
    except MFTrackerError as exc:
        _raise_http(exc)

    return AnalysisResponse.from_entity(result, generate_summary_text(result))


def _rebalance_data(request: RebalanceRequest, service: PortfolioService):
    holdings = _to_holdings(request.holdings)
    capital = request.total_capital
    if capital is None:
        capital = total_capital(holdings)
    else:
        capital = str(capital)
    return build_rebalance_data(holdings, request.target_profile, capital, planner=service.planner)


@router.post("/rebalance", response_model=RebalanceResponse)
async def rebalance(
    request: RebalanceRequest,
    service: PortfolioService = Depends(get_portfolio_service),
):
    """
    Rebalance plan toward a target risk profile
    """
    try:
        data = _rebalance_data(request, service)
    except MFTrackerError as exc:
        _raise_http(exc)

    plan = data.actionable_changes
    out = RebalanceDataOut.from_entity(data)
    return RebalanceResponse(
        target_profile=out.target_profile,
        new_allocations=out.new_allocations,
        actionable_changes=out.actionable_changes,
        summary=get_rebalance_summary(plan, currency=settings.CURRENCY_SYMBOL),
        net_change=float(net_change(plan)),
        within_rounding_tolerance=ensure_zero_net_change(
            plan, tolerance=service.planner.max_rounding_drift(plan),
        ),
    )


@router.post("/rebalance/export", response_class=PlainTextResponse)
async def export_rebalance(
    request: RebalanceRequest,
    service: PortfolioService = Depends(get_portfolio_service),
):
    """
    Rebalance plan as a CSV download
    """
    try:
        data = _rebalance_data(request, service)
    except MFTrackerError as exc:
        _raise_http(exc)

    return PlainTextResponse(
        content=export_rebalance_csv(data.actionable_changes),
        media_type="text/csv",
        headers={"Content-Disposition": 'attachment; filename="rebalancing-plan.csv"'},
    )


@router.post("/import", response_model=ImportResponse)
async def import_holdings(
    request: ImportRequest,
    service: PortfolioService = Depends(get_portfolio_service),
):
    """
    Parse uploaded CSV / JSON text into holdings
    """
    try:
        parsed = service.parse_import(request.content, request.format)
        holdings = service.import_parsed(parsed)
    except MFTrackerError as exc:
        _raise_http(exc)

    return ImportResponse(
        count=len(holdings),
        holdings=[HoldingOut.from_entity(h) for h in holdings],
        notes=[f"{row.id}: {row.notes}" for row in parsed if row.notes],
    )
