"""
Rebalance Export
CSV download of a rebalance plan and a plain-text analysis summary
"""

import csv
import io
from typing import List, Sequence

from mftracker.config import settings
from mftracker.domain.models import AnalysisResult, RebalanceChange
from mftracker.utils.numbers import format_amount

CSV_HEADERS = ("Fund Name", "Category", "Current Amount", "Recommended Amount", "Change", "Notes")
NEW_FUND_NOTE = "New fund suggestion"
TOP_FLAGS = 3


def export_rebalance_csv(plan: Sequence[RebalanceChange]) -> str:
    """
    Render a plan as CSV, every cell quoted

    Notes column carries the plan reason, or a marker for suggested funds.
    """
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerow(CSV_HEADERS)
    for change in plan:
        writer.writerow((
            change.fund_name,
            change.category,
            format_amount(change.current),
            format_amount(change.recommended),
            format_amount(change.diff),
            change.reason or (NEW_FUND_NOTE if change.is_new else ""),
        ))
    return buffer.getvalue()


def risk_level(score: float) -> str:
    if score >= 8:
        return "Aggressive"
    if score >= 6:
        return "Moderate-High"
    if score >= 4:
        return "Moderate"
    return "Conservative"


def generate_summary_text(analysis: AnalysisResult) -> str:
    """Short plain-text summary for sharing or chat replies"""
    currency = settings.CURRENCY_SYMBOL
    lines: List[str] = [
        "📊 Portfolio Summary",
        "",
        f"• Total Monthly SIP: {currency}{format_amount(analysis.total_monthly_sip)}",
        f"• Risk Level: {risk_level(analysis.portfolio_risk_score)} ({analysis.portfolio_risk_score}/10)",
        f"• Diversification Score: {analysis.diversification_score}/100",
        f"• Number of Funds: {len(analysis.holdings)}",
        "",
    ]

    top_flags = analysis.red_flags[:TOP_FLAGS]
    if top_flags:
        lines.append("⚠️ Top Red Flags:")
        lines.extend(f"{i}. {flag.message}" for i, flag in enumerate(top_flags, start=1))
        lines.append("")

    lines.append("✅ Strengths:")
    if analysis.diversification_score >= 60:
        lines.append("• Good diversification across categories")
    if len(analysis.holdings) >= 5:
        lines.append("• Adequate number of funds for diversification")

    lines.extend([
        "",
        "📋 Next Actions:",
        f"1. Review the rebalancing recommendations for your {analysis.recommended_rebalance.target_profile} profile",
        "2. Address high-severity red flags first",
        "3. Consider gradual rebalancing over 2-3 months",
    ])
    return "\n".join(lines) + "\n"
