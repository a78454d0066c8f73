import logging
from decimal import Decimal

import pytest

from mftracker.utils.logging_redaction import (
    RedactingFilter,
    install_redaction_filter,
    redact_message,
)
from mftracker.utils.numbers import format_amount, format_pct, round_half_up, to_decimal


@pytest.mark.unit
def test_to_decimal_avoids_float_noise():
    assert to_decimal(0.1) == Decimal("0.1")
    assert to_decimal("1,500") == Decimal("1500")


@pytest.mark.unit
@pytest.mark.parametrize("value", [True, "abc", float("nan"), float("inf"), "Infinity"])
def test_to_decimal_rejects_non_numbers(value):
    with pytest.raises(ValueError):
        to_decimal(value)


@pytest.mark.unit
def test_round_half_up_ties_away_from_zero():
    assert round_half_up("2.5") == Decimal("3")
    assert round_half_up("0.05", 1) == Decimal("0.1")
    assert round_half_up("-2.5") == Decimal("-3")


@pytest.mark.unit
def test_format_helpers():
    assert format_pct(Decimal("41.666")) == "41.7"
    assert format_pct(9) == "9.0"
    assert format_amount(Decimal("2000.00")) == "2000"
    assert format_amount(Decimal("-150.50")) == "-150.5"


@pytest.mark.unit
def test_redact_message_masks_investor_identifiers():
    message = "folio_id=12345/67 for ABCDE1234F mailed to investor@example.com"
    redacted = redact_message(message)
    assert "12345/67" not in redacted
    assert "ABCDE1234F" not in redacted
    assert "investor@example.com" not in redacted
    assert "[PAN]" in redacted and "[EMAIL]" in redacted


@pytest.mark.unit
def test_redact_message_keeps_plain_mentions_of_folio():
    message = "Duplicate folio IDs detected: F1. Possible data entry error."
    assert redact_message(message) == message


@pytest.mark.unit
def test_filter_rewrites_record_args():
    record = logging.LogRecord("t", logging.INFO, __file__, 1, "Folio No: %s", ("998877",), None)
    assert RedactingFilter().filter(record) is True
    assert record.getMessage() == "Folio No: [REDACTED]"


@pytest.mark.unit
def test_install_redaction_filter_is_idempotent():
    root = logging.getLogger()
    install_redaction_filter()
    install_redaction_filter()
    assert sum(isinstance(f, RedactingFilter) for f in root.filters) == 1
