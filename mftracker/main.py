"""
FastAPI Main Application
Portfolio health analysis and rebalancing API
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from mftracker.api.routes import config as config_routes
from mftracker.api.routes import health, portfolio
from mftracker.config import settings
from mftracker.core.logging import setup_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator:
    """
    Application lifespan manager
    """
    setup_logging()
    logger.info("🚀 Starting %s (%s)", settings.APP_NAME, settings.APP_ENV)
    logger.info("   📊 Default profile: %s", settings.DEFAULT_RISK_PROFILE)
    logger.info("   🔢 Rebalance quantum: %s%s", settings.CURRENCY_SYMBOL, settings.REBALANCE_QUANTUM)
    logger.info("   ✅ API Docs: http://%s:%s/docs", settings.API_HOST, settings.API_PORT)

    yield

    logger.info("👋 %s shutdown complete", settings.APP_NAME)


def create_app() -> FastAPI:
    app = FastAPI(
        title="Mutual Fund Portfolio Health Analyzer",
        description="SIP portfolio risk, red flags and rebalancing toward a target profile",
        version="1.0.0",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=[
            "http://localhost:3000",
            "http://127.0.0.1:3000",
        ],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(health.router, tags=["Health"])
    app.include_router(config_routes.router, prefix="/api/v1/config", tags=["Config"])
    app.include_router(portfolio.router, prefix="/api/v1/portfolio", tags=["Portfolio"])
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("mftracker.main:app", host=settings.API_HOST, port=settings.API_PORT, reload=settings.DEBUG)
