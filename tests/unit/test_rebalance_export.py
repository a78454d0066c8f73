import csv
import io
from decimal import Decimal

import pytest

from mftracker.domain.models import RebalanceChange
from mftracker.domain.services.portfolio_service import PortfolioService
from mftracker.reports.rebalance_export import (
    export_rebalance_csv,
    generate_summary_text,
    risk_level,
)


@pytest.mark.unit
def test_export_rebalance_csv_quotes_every_cell():
    plan = [
        RebalanceChange("Index Fund", "Index", Decimal("5000"), Decimal("5000"), Decimal("0")),
        RebalanceChange(
            "Debt Fund", "Debt", Decimal("5000"), Decimal("3000"), Decimal("-2000"),
            reason="Not part of Growth profile",
        ),
        RebalanceChange(
            "Suggested Gold Fund", "Gold", Decimal("0"), Decimal("1000"), Decimal("1000"),
            is_new=True,
        ),
    ]
    lines = export_rebalance_csv(plan).splitlines()

    assert lines[0] == '"Fund Name","Category","Current Amount","Recommended Amount","Change","Notes"'
    assert lines[1] == '"Index Fund","Index","5000","5000","0",""'
    assert lines[2] == '"Debt Fund","Debt","5000","3000","-2000","Not part of Growth profile"'
    assert lines[3] == '"Suggested Gold Fund","Gold","0","1000","1000","New fund suggestion"'


@pytest.mark.unit
def test_export_rebalance_csv_escapes_quotes():
    plan = [RebalanceChange('Fund "A", Direct', "Index", Decimal("1"), Decimal("0"), Decimal("-1"))]
    rows = list(csv.reader(io.StringIO(export_rebalance_csv(plan))))
    assert rows[1][0] == 'Fund "A", Direct'


@pytest.mark.unit
def test_export_empty_plan_is_header_only():
    assert export_rebalance_csv([]).count("\n") == 1


@pytest.mark.unit
@pytest.mark.parametrize(
    "score, level",
    [(9.0, "Aggressive"), (8.0, "Aggressive"), (6.5, "Moderate-High"), (4.0, "Moderate"), (3.9, "Conservative")],
)
def test_risk_level(score, level):
    assert risk_level(score) == level


@pytest.mark.unit
def test_summary_text_for_risky_portfolio(holding_factory):
    result = PortfolioService().analyze([holding_factory("X", 50000, "Small Cap")], "Aggressive")
    text = generate_summary_text(result)

    assert "• Total Monthly SIP: ₹50000" in text
    assert "• Risk Level: Aggressive (9.0/10)" in text
    assert "• Number of Funds: 1" in text
    assert "Top Red Flags:" in text
    assert "4. " not in text
    assert "Good diversification" not in text
    assert "Aggressive profile" in text


@pytest.mark.unit
def test_summary_text_lists_strengths(balanced_holdings):
    result = PortfolioService().analyze(balanced_holdings, "Balanced")
    text = generate_summary_text(result)

    assert "Top Red Flags" not in text
    assert "• Good diversification across categories" in text
    assert "• Adequate number of funds for diversification" in text
