"""
CATEGORY MODEL: STATIC REFERENCE DATA

Category risk weights, target allocation per risk profile, and the keyword
table used to classify a fund by its name.

Tables are read-only views built once at import time and validated before
anything can use them. Nothing in the application mutates them.
"""

from enum import Enum
from types import MappingProxyType
from typing import Mapping, Tuple, Union

from mftracker.domain.errors import UnknownRiskProfileError


class RiskProfile(str, Enum):
    """Target risk profile for rebalancing"""
    CONSERVATIVE = "Conservative"
    BALANCED = "Balanced"
    GROWTH = "Growth"
    AGGRESSIVE = "Aggressive"


DEFAULT_CATEGORY = "Flexi Cap"
DEFAULT_RISK = 5

# -------------------------------------------------------------------
# Category → risk weight (0-10)
# -------------------------------------------------------------------

CATEGORY_RISK_MAP: Mapping[str, int] = MappingProxyType({
    "Small Cap": 9,
    "Thematic": 9,
    "Sector": 10,
    "Flexi Cap": 7,
    "Multi Cap": 7,
    "Large & Mid": 6,
    "Large Cap": 5,
    "Gold": 4,
    "Commodity": 4,
    "Index": 3,
    "Debt": 2,
    "Hybrid": 5,
    "International": 6,
    "ELSS": 6,
})

# -------------------------------------------------------------------
# Risk profile → category target percentages (each sums to 100)
# Declaration order drives rebalance plan order.
# -------------------------------------------------------------------

RISK_PROFILES: Mapping[str, Mapping[str, float]] = MappingProxyType({
    RiskProfile.CONSERVATIVE.value: MappingProxyType({
        "Index": 50,
        "Debt": 30,
        "Gold": 10,
        "Large & Mid": 10,
        "Flexi Cap": 0,
        "Small Cap": 0,
        "Thematic": 0,
    }),
    RiskProfile.BALANCED.value: MappingProxyType({
        "Index": 40,
        "Large & Mid": 20,
        "Flexi Cap": 20,
        "Gold": 10,
        "Small Cap": 5,
        "Debt": 5,
        "Thematic": 0,
    }),
    RiskProfile.GROWTH.value: MappingProxyType({
        "Index": 30,
        "Flexi Cap": 30,
        "Large & Mid": 15,
        "Small Cap": 15,
        "Thematic": 5,
        "Gold": 5,
    }),
    RiskProfile.AGGRESSIVE.value: MappingProxyType({
        "Small Cap": 30,
        "Flexi Cap": 25,
        "Large & Mid": 15,
        "Thematic": 15,
        "Index": 10,
        "Gold": 5,
    }),
})

# -------------------------------------------------------------------
# Fund-name keywords → category (first match wins, in this order)
# -------------------------------------------------------------------

CATEGORY_KEYWORDS: Mapping[str, Tuple[str, ...]] = MappingProxyType({
    "Small Cap": ("small cap", "smallcap", "small-cap"),
    "Large Cap": ("large cap", "largecap", "large-cap", "bluechip", "blue chip"),
    "Large & Mid": ("large & mid", "large and mid", "large mid", "largemid"),
    "Flexi Cap": ("flexi cap", "flexicap", "flexi-cap", "multi cap", "multicap"),
    "Index": ("index", "nifty", "sensex", "nifty 50", "nifty50", "nifty next 50"),
    "Thematic": (
        "thematic", "consumption", "infrastructure", "banking", "pharma",
        "healthcare", "technology", "digital", "new age",
    ),
    "Sector": ("sector", "sectoral"),
    "Gold": ("gold", "silver", "precious metal"),
    "Debt": (
        "debt", "bond", "gilt", "liquid", "money market",
        "short term", "medium term", "long term",
    ),
    "Hybrid": ("hybrid", "balanced", "aggressive hybrid", "conservative hybrid"),
    "ELSS": ("elss", "tax saver", "tax saving"),
    "International": ("international", "global", "us equity", "emerging market"),
})


# -------------------------------------------------------------------
# Lookups
# -------------------------------------------------------------------

def categorize_fund(fund_name: str) -> str:
    """
    Classify a fund by case-insensitive keyword match on its name.

    Args:
        fund_name: Display name of the fund

    Returns:
        First matching category in table order, DEFAULT_CATEGORY otherwise
    """
    lower_name = (fund_name or "").lower()
    for category, keywords in CATEGORY_KEYWORDS.items():
        if any(keyword in lower_name for keyword in keywords):
            return category
    return DEFAULT_CATEGORY


def get_risk_for_category(category: str) -> int:
    """Risk weight for a category, DEFAULT_RISK if unknown"""
    return CATEGORY_RISK_MAP.get(category, DEFAULT_RISK)


def get_risk_profile(profile: Union[RiskProfile, str]) -> Mapping[str, float]:
    """
    Category target table for a profile.

    Raises:
        UnknownRiskProfileError: If the profile is not one of RiskProfile
    """
    key = profile.value if isinstance(profile, RiskProfile) else profile
    try:
        return RISK_PROFILES[key]
    except (KeyError, TypeError):
        raise UnknownRiskProfileError(f"Unknown risk profile: {profile!r}") from None


def profile_name(profile: Union[RiskProfile, str]) -> str:
    """Canonical display name, validating the profile on the way"""
    get_risk_profile(profile)
    return profile.value if isinstance(profile, RiskProfile) else profile


# -------------------------------------------------------------------
# Validation Helper
# -------------------------------------------------------------------

def validate_risk_profiles() -> None:
    """
    Validates the static tables.

    Rules enforced:
    - Every RiskProfile has a target table
    - Target percentages are non-negative and sum to exactly 100
    - Every risk weight is within 0-10

    Raises:
        ValueError: If any rule is violated
    """
    for profile in RiskProfile:
        if profile.value not in RISK_PROFILES:
            raise ValueError(f"Missing target table for profile {profile.value}")

    for name, targets in RISK_PROFILES.items():
        if not targets:
            raise ValueError(f"Profile {name} cannot be empty")
        total_percentage = 0.0
        for category, percentage in targets.items():
            if percentage < 0:
                raise ValueError(f"{name}: allocation for {category} cannot be negative")
            total_percentage += float(percentage)
        if abs(total_percentage - 100.0) > 1e-6:
            raise ValueError(f"{name}: percentages must sum to 100, got {total_percentage}")

    for category, risk in CATEGORY_RISK_MAP.items():
        if not 0 <= risk <= 10:
            raise ValueError(f"Risk for {category} must be within 0-10")


validate_risk_profiles()
