from typing import AsyncGenerator, Callable, List, Optional

import pytest
from fastapi import FastAPI
from httpx import AsyncClient, ASGITransport

from mftracker.api.routes import config as config_routes
from mftracker.api.routes import health, portfolio
from mftracker.domain.models import Holding


def make_holding(
    fund_name: str,
    amount,
    category: str,
    holding_id=None,
    amc: Optional[str] = None,
    folio_id: Optional[str] = None,
    expense_ratio=None,
) -> Holding:
    return Holding.create(
        id=holding_id if holding_id is not None else fund_name,
        fund_name=fund_name,
        amount=amount,
        category=category,
        amc=amc,
        folio_id=folio_id,
        expense_ratio=expense_ratio,
    )


@pytest.fixture()
def holding_factory() -> Callable[..., Holding]:
    return make_holding


@pytest.fixture()
def balanced_holdings() -> List[Holding]:
    return [
        make_holding("UTI Nifty 50 Index Fund", 4000, "Index", amc="UTI"),
        make_holding("Parag Parikh Flexi Cap Fund", 2000, "Flexi Cap", amc="PPFAS"),
        make_holding("Mirae Asset Large & Midcap Fund", 2000, "Large & Mid", amc="Mirae"),
        make_holding("Nippon India Gold Savings Fund", 1000, "Gold", amc="Nippon"),
        make_holding("Axis Small Cap Fund", 500, "Small Cap", amc="Axis"),
        make_holding("HDFC Short Term Debt Fund", 500, "Debt", amc="HDFC"),
    ]


@pytest.fixture()
def app() -> FastAPI:
    app = FastAPI()
    app.include_router(health.router, tags=["Health"])
    app.include_router(config_routes.router, prefix="/api/v1/config", tags=["Config"])
    app.include_router(portfolio.router, prefix="/api/v1/portfolio", tags=["Portfolio"])
    return app


@pytest.fixture()
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
