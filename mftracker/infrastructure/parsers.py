"""
Import Parsers
Turn uploaded CSV / JSON text into ParsedHolding rows

- Column / key aliases cover the common export layouts
- Rows without a fund name or a positive amount are dropped silently
- Missing category falls back to the fund-name keyword match
- Malformed documents raise PortfolioImportError
"""

import io
import json
import logging
from decimal import Decimal
from typing import Any, List, Mapping, Optional, Sequence

import pandas as pd

from mftracker.domain.errors import PortfolioImportError
from mftracker.domain.models import Holding, ParsedHolding
from mftracker.domain.strategy.categories import categorize_fund

logger = logging.getLogger(__name__)

DEFAULT_MAX_ROWS = 500

CSV_ALIASES: Mapping[str, Sequence[str]] = {
    "fund_name": ("fund_name", "Fund", "Fund Name"),
    "amount": ("amount", "Amount", "SIP", "SIP Amount"),
    "category": ("category", "Category"),
    "amc": ("amc", "AMC"),
    "folio_id": ("folio_id", "Folio ID"),
    "expense_ratio": ("expense_ratio",),
}

JSON_ALIASES: Mapping[str, Sequence[str]] = {
    "fund_name": ("fund_name", "name"),
    "amount": ("amount", "sip_amount"),
    "category": ("category",),
    "amc": ("amc",),
    "folio_id": ("folio_id",),
    "expense_ratio": ("expense_ratio",),
}


def _first(row: Mapping[str, Any], keys: Sequence[str]) -> Optional[Any]:
    """First non-empty value among alias keys"""
    for key in keys:
        value = row.get(key)
        if isinstance(value, str):
            value = value.strip()
        if value not in (None, ""):
            return value
    return None


def _positive_decimal(value: Any) -> Optional[Decimal]:
    if value is None or isinstance(value, bool):
        return None
    try:
        amount = Decimal(str(value).replace(",", ""))
    except ArithmeticError:
        return None
    if not amount.is_finite() or amount <= 0:
        return None
    return amount


def _text(value: Any) -> Optional[str]:
    return None if value is None else str(value)


def _build_row(
    row: Mapping[str, Any],
    aliases: Mapping[str, Sequence[str]],
    default_id: str,
    row_id: Any = None,
) -> Optional[ParsedHolding]:
    fund_name = _text(_first(row, aliases["fund_name"])) or ""
    amount = _positive_decimal(_first(row, aliases["amount"]))
    if not fund_name or amount is None:
        return None

    notes = ""
    expense_ratio = None
    raw_expense = _first(row, aliases["expense_ratio"])
    if raw_expense is not None:
        try:
            expense_ratio = Decimal(str(raw_expense))
        except ArithmeticError:
            expense_ratio = None
        if expense_ratio is None or not expense_ratio.is_finite() or expense_ratio < 0:
            expense_ratio = None
            notes = f"Ignored invalid expense ratio {raw_expense!r}"

    if isinstance(row_id, bool) or not isinstance(row_id, (str, int)) or row_id == "":
        row_id = default_id

    return ParsedHolding(
        id=row_id,
        fund_name=fund_name,
        amount=amount,
        category=_text(_first(row, aliases["category"])) or categorize_fund(fund_name),
        amc=_text(_first(row, aliases["amc"])),
        folio_id=_text(_first(row, aliases["folio_id"])),
        expense_ratio=expense_ratio,
        notes=notes,
    )


def _check_size(count: int, max_rows: int) -> None:
    if count > max_rows:
        raise PortfolioImportError(f"Too many rows: {count} (maximum {max_rows})")


def parse_csv(text: str, max_rows: int = DEFAULT_MAX_ROWS) -> List[ParsedHolding]:
    """
    Parse CSV text with a header row

    Args:
        text: Raw CSV content
        max_rows: Upper bound on data rows

    Returns:
        Valid rows, ids csv-0, csv-1, ... by source row position

    Raises:
        PortfolioImportError: On malformed CSV or too many rows
    """
    try:
        df = pd.read_csv(
            io.StringIO(text),
            dtype=str,
            keep_default_na=False,
            skip_blank_lines=True,
            skipinitialspace=True,
        )
    except pd.errors.EmptyDataError:
        return []
    except pd.errors.ParserError as exc:
        raise PortfolioImportError(f"CSV parsing error: {exc}") from exc

    _check_size(len(df), max_rows)
    df = df.fillna("")
    df.columns = [str(column).strip() for column in df.columns]

    rows = []
    for index, record in enumerate(df.to_dict(orient="records")):
        parsed = _build_row(record, CSV_ALIASES, default_id=f"csv-{index}")
        if parsed is not None:
            rows.append(parsed)

    logger.debug("CSV import: %d of %d rows kept", len(rows), len(df))
    return rows


def parse_json(text: str, max_rows: int = DEFAULT_MAX_ROWS) -> List[ParsedHolding]:
    """
    Parse a JSON array of holdings, or an object with a "sips" array

    Raises:
        PortfolioImportError: On invalid JSON, wrong shape or too many rows
    """
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise PortfolioImportError(f"Failed to parse JSON: {exc.msg}") from exc

    if isinstance(data, list):
        items = data
    elif isinstance(data, dict):
        items = data.get("sips") or []
    else:
        items = None
    if not isinstance(items, list):
        raise PortfolioImportError("Expected a JSON array or an object with a 'sips' array")

    _check_size(len(items), max_rows)

    rows = []
    for index, item in enumerate(items):
        if not isinstance(item, dict):
            continue
        parsed = _build_row(item, JSON_ALIASES, default_id=f"json-{index}", row_id=item.get("id"))
        if parsed is not None:
            rows.append(parsed)

    logger.debug("JSON import: %d of %d rows kept", len(rows), len(items))
    return rows


def to_holdings(parsed: Sequence[ParsedHolding]) -> List[Holding]:
    """Assign category risk weights to parsed rows"""
    return [
        Holding.create(
            id=row.id,
            fund_name=row.fund_name,
            amount=row.amount,
            category=row.category,
            amc=row.amc,
            folio_id=row.folio_id,
            expense_ratio=row.expense_ratio,
        )
        for row in parsed
    ]
