"""
Configuration API Routes
Expose risk profiles and category risk weights
"""

from typing import Dict, List

from fastapi import APIRouter

from mftracker.domain.schemas.portfolio import ProfileInfo
from mftracker.domain.strategy.categories import CATEGORY_RISK_MAP, RISK_PROFILES

router = APIRouter()


@router.get("/profiles", response_model=List[ProfileInfo])
async def get_profiles():
    """
    Target category mix for every risk profile, in plan order
    """
    return [
        ProfileInfo(name=name, targets={category: float(pct) for category, pct in targets.items()})
        for name, targets in RISK_PROFILES.items()
    ]


@router.get("/categories", response_model=Dict[str, int])
async def get_categories():
    """
    Risk weight (0-10) per fund category
    """
    return dict(CATEGORY_RISK_MAP)
