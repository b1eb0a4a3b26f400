from datetime import datetime, timedelta, timezone

import pytest

from pms.domain.billing import calculate_fee, FeeQuote
from pms.domain.exceptions import ValidationError

ENTRY = datetime(2024, 5, 1, 10, 0, 0, tzinfo=timezone.utc)


def test_half_hour_at_100_per_hour():
    quote = calculate_fee(ENTRY, ENTRY + timedelta(minutes=30), 100)
    assert quote == FeeQuote(duration_minutes=30, total_amount=50.0)


def test_partial_minute_rounds_up():
    quote = calculate_fee(ENTRY, ENTRY + timedelta(seconds=45), 60)
    assert quote.duration_minutes == 1
    assert quote.total_amount == 1.0


def test_zero_length_stay_is_free():
    quote = calculate_fee(ENTRY, ENTRY, 100)
    assert quote.duration_minutes == 0
    assert quote.total_amount == 0


def test_no_minimum_charge_and_no_rounding():
    quote = calculate_fee(ENTRY, ENTRY + timedelta(minutes=1), 100)
    assert quote.duration_minutes == 1
    assert quote.total_amount == pytest.approx(100 / 60)


def test_one_second_past_full_minute_bills_next_minute():
    quote = calculate_fee(ENTRY, ENTRY + timedelta(minutes=2, seconds=1), 60)
    assert quote.duration_minutes == 3
    assert quote.total_amount == 3.0


def test_multi_hour_stay():
    quote = calculate_fee(ENTRY, ENTRY + timedelta(hours=2, minutes=15), 80)
    assert quote.duration_minutes == 135
    assert quote.total_amount == pytest.approx(180.0)


def test_exit_before_entry_is_rejected():
    with pytest.raises(ValidationError, match="before entry"):
        calculate_fee(ENTRY, ENTRY - timedelta(seconds=1), 100)


def test_negative_fee_is_rejected():
    with pytest.raises(ValidationError):
        calculate_fee(ENTRY, ENTRY + timedelta(minutes=5), -1)
