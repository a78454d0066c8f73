from collections import Counter
from decimal import Decimal

import pytest

from mftracker.domain.errors import UnknownRiskProfileError
from mftracker.domain.models import RiskProfile
from mftracker.domain.services.rebalance_service import (
    RebalancePlanner,
    build_rebalance_data,
    ensure_zero_net_change,
    generate_rebalance_plan,
    get_rebalance_summary,
    max_rounding_drift,
    net_change,
)


def _by_name(plan):
    return {change.fund_name: change for change in plan}


@pytest.mark.unit
def test_empty_portfolio_has_empty_plan():
    assert generate_rebalance_plan([], "Balanced", 0) == []


@pytest.mark.unit
def test_unknown_profile_raises_even_with_zero_capital():
    with pytest.raises(UnknownRiskProfileError):
        generate_rebalance_plan([], "Reckless", 0)


@pytest.mark.unit
def test_index_and_debt_toward_conservative(holding_factory):
    holdings = [
        holding_factory("Index Fund", 5000, "Index"),
        holding_factory("Debt Fund", 5000, "Debt"),
    ]
    plan = generate_rebalance_plan(holdings, RiskProfile.CONSERVATIVE, 10000)

    assert [(c.category, c.recommended, c.diff, c.is_new) for c in plan] == [
        ("Index", Decimal("5000"), Decimal("0"), False),
        ("Debt", Decimal("3000"), Decimal("-2000"), False),
        ("Gold", Decimal("1000"), Decimal("1000"), True),
        ("Large & Mid", Decimal("1000"), Decimal("1000"), True),
    ]
    gold = plan[2]
    assert gold.fund_name == "Suggested Gold Fund"
    assert gold.current == 0
    assert gold.reason == "Add Gold fund to match Conservative profile"
    assert net_change(plan) == 0


@pytest.mark.unit
def test_category_target_split_by_current_weight(holding_factory):
    holdings = [
        holding_factory("Index A", 3000, "Index"),
        holding_factory("Index B", 1000, "Index"),
        holding_factory("Debt", 6000, "Debt"),
    ]
    plan = _by_name(generate_rebalance_plan(holdings, "Conservative", 10000))

    assert plan["Index A"].recommended == Decimal("3750")
    assert plan["Index B"].recommended == Decimal("1250")
    assert plan["Debt"].recommended == Decimal("3000")


@pytest.mark.unit
def test_zero_amount_category_splits_evenly(holding_factory):
    holdings = [
        holding_factory("Index A", 0, "Index"),
        holding_factory("Index B", 0, "Index"),
    ]
    plan = _by_name(generate_rebalance_plan(holdings, "Balanced", 10000))
    assert plan["Index A"].recommended == Decimal("2000")
    assert plan["Index B"].recommended == Decimal("2000")


@pytest.mark.unit
def test_zero_target_category_is_zeroed(holding_factory):
    holdings = [
        holding_factory("Index", 8000, "Index"),
        holding_factory("Tech", 2000, "Thematic"),
    ]
    tech = _by_name(generate_rebalance_plan(holdings, "Balanced", 10000))["Tech"]
    assert tech.recommended == 0
    assert tech.diff == Decimal("-2000")
    assert tech.reason == "Not part of Balanced profile"


@pytest.mark.unit
def test_category_outside_profile_is_zeroed(holding_factory):
    holdings = [
        holding_factory("Index", 8000, "Index"),
        holding_factory("Hybrid Fund", 2000, "Hybrid"),
    ]
    hybrid = _by_name(generate_rebalance_plan(holdings, "Balanced", 10000))["Hybrid Fund"]
    assert hybrid.recommended == 0
    assert hybrid.diff == Decimal("-2000")
    assert hybrid.reason == "Hybrid not part of Balanced profile - consider reducing or removing"


@pytest.mark.unit
def test_every_holding_appears_exactly_once(balanced_holdings, holding_factory):
    holdings = balanced_holdings + [
        holding_factory("Hybrid Fund", 700, "Hybrid"),
        holding_factory("Second Index", 300, "Index"),
    ]
    total = sum(h.amount for h in holdings)
    plan = generate_rebalance_plan(holdings, "Growth", total)

    existing = Counter((c.fund_name, c.category) for c in plan if not c.is_new)
    assert existing == Counter((h.fund_name, h.category) for h in holdings)


@pytest.mark.unit
@pytest.mark.parametrize("profile", list(RiskProfile))
def test_empty_target_categories_get_one_suggestion(holding_factory, profile):
    holdings = [holding_factory("Index", 10000, "Index")]
    plan = generate_rebalance_plan(holdings, profile, 10000)

    new_categories = Counter(c.category for c in plan if c.is_new)
    assert all(count == 1 for count in new_categories.values())
    assert "Index" not in new_categories


@pytest.mark.unit
@pytest.mark.parametrize("profile", list(RiskProfile))
def test_plan_sorted_by_recommended(balanced_holdings, profile):
    plan = generate_rebalance_plan(balanced_holdings, profile, 10000)
    recommended = [c.recommended for c in plan]
    assert recommended == sorted(recommended, reverse=True)


@pytest.mark.unit
def test_rounding_drift_is_bounded_not_zero(holding_factory):
    holdings = [holding_factory("Index", 1234, "Index")]
    plan = generate_rebalance_plan(holdings, "Balanced", 1234)

    assert [c.recommended for c in plan] == [
        Decimal("490"), Decimal("250"), Decimal("250"),
        Decimal("120"), Decimal("60"), Decimal("60"),
    ]
    assert [c.category for c in plan[1:3]] == ["Large & Mid", "Flexi Cap"]
    assert net_change(plan) == Decimal("-4")
    assert max_rounding_drift(plan) == Decimal("60")
    assert ensure_zero_net_change(plan)
    assert not ensure_zero_net_change(plan, tolerance=1)


@pytest.mark.unit
def test_planner_quantum_is_configurable(holding_factory):
    holdings = [holding_factory("Index", 1234, "Index")]
    plan = RebalancePlanner(quantum=1).generate_plan(holdings, "Balanced", 1234)
    index = _by_name(plan)["Index"]
    assert index.recommended == Decimal("494")


@pytest.mark.unit
@pytest.mark.parametrize("quantum", [0, -10])
def test_planner_rejects_non_positive_quantum(quantum):
    with pytest.raises(ValueError):
        RebalancePlanner(quantum=quantum)


@pytest.mark.unit
def test_summary_text(holding_factory):
    holdings = [
        holding_factory("Index Fund", 5000, "Index"),
        holding_factory("Debt Fund", 5000, "Debt"),
    ]
    plan = generate_rebalance_plan(holdings, "Conservative", 10000)

    assert get_rebalance_summary(plan) == (
        "Increase: Suggested Gold Fund (+₹1000), Suggested Large & Mid Fund (+₹1000). "
        "Decrease: Debt Fund (₹-2000). "
        "Keep unchanged: 1 fund(s)."
    )
    assert get_rebalance_summary([]) == ""


@pytest.mark.unit
def test_build_rebalance_data(holding_factory):
    holdings = [holding_factory("Index Fund", 10000, "Index")]
    data = build_rebalance_data(holdings, RiskProfile.AGGRESSIVE, 10000)

    assert data.target_profile == "Aggressive"
    assert [t.category for t in data.new_allocations][:2] == ["Small Cap", "Flexi Cap"]
    assert data.new_allocations[0].target_amount == Decimal("3000")
    assert data.actionable_changes[0].fund_name == "Suggested Small Cap Fund"
