from decimal import Decimal

import pytest

from mftracker.domain.services.risk_engine import (
    balance_points,
    calculate_diversification_score,
    calculate_risk_score,
    detect_index_overlap,
)


@pytest.mark.unit
def test_empty_portfolio_scores_zero():
    assert calculate_risk_score([], 0) == 0
    assert calculate_diversification_score([], 0) == 0


@pytest.mark.unit
def test_single_holding_risk_equals_its_weight(holding_factory):
    holdings = [holding_factory("Flexi", 12345, "Flexi Cap")]
    assert calculate_risk_score(holdings, 12345) == 7.0


@pytest.mark.unit
def test_risk_score_is_capital_weighted_and_rounded(holding_factory):
    holdings = [
        holding_factory("Small", 1000, "Small Cap"),  # 9
        holding_factory("Debt", 2000, "Debt"),  # 2
    ]
    # (9*1000 + 2*2000) / 3000 = 4.333...
    assert calculate_risk_score(holdings, 3000) == 4.3


@pytest.mark.unit
def test_risk_score_rounds_half_up(holding_factory):
    holdings = [
        holding_factory("Index", 3000, "Index"),  # 3
        holding_factory("Gold", 1000, "Gold"),  # 4
    ]
    # (9000 + 4000) / 4000 = 3.25
    assert calculate_risk_score(holdings, 4000) == 3.3


@pytest.mark.unit
@pytest.mark.parametrize("category", ["Sector", "Debt", "Index", "Unknown"])
def test_risk_score_bounds(holding_factory, category):
    holdings = [holding_factory("A", 700, category), holding_factory("B", 300, "Small Cap")]
    assert 0 <= calculate_risk_score(holdings, 1000) <= 10


@pytest.mark.unit
def test_balance_points_steps():
    assert balance_points(Decimal("0.10")) == 40
    assert balance_points(Decimal("0.25")) == 25
    assert balance_points(Decimal("0.39")) == 25
    assert balance_points(Decimal("0.40")) == 10


@pytest.mark.unit
def test_ten_funds_ten_categories_scores_100(holding_factory):
    categories = [
        "Small Cap", "Thematic", "Sector", "Flexi Cap", "Large & Mid",
        "Large Cap", "Gold", "Index", "Debt", "Hybrid",
    ]
    holdings = [holding_factory(f"Fund {i}", 1000, c) for i, c in enumerate(categories)]
    assert calculate_diversification_score(holdings, 10000) == 100


@pytest.mark.unit
def test_single_fund_diversification(holding_factory):
    holdings = [holding_factory("X", 50000, "Small Cap")]
    # breadth 40/6 = 6.67, balance 10, funds 20/8 = 2.5 -> 19.17
    assert calculate_diversification_score(holdings, 50000) == 19


@pytest.mark.unit
def test_diversification_with_zero_capital_scores_balance_as_concentrated(holding_factory):
    holdings = [holding_factory("A", 0, "Index"), holding_factory("B", 0, "Debt")]
    # breadth 13.33 + balance 10 + funds 5 = 28.33
    assert calculate_diversification_score(holdings, 0) == 28


@pytest.mark.unit
def test_diversification_bounds(holding_factory):
    holdings = [holding_factory(f"F{i}", 100 * (i + 1), "Index") for i in range(12)]
    score = calculate_diversification_score(holdings, sum(100 * (i + 1) for i in range(12)))
    assert 0 <= score <= 100


@pytest.mark.unit
def test_index_overlap_needs_two_index_funds(holding_factory):
    one = [holding_factory("UTI Nifty 50 Index", 1000, "Index"), holding_factory("Debt", 1000, "Debt")]
    assert detect_index_overlap(one) == 0.0

    two = one + [holding_factory("HDFC Sensex Plan", 2000, "Large Cap")]
    assert detect_index_overlap(two) == pytest.approx(75.0)
