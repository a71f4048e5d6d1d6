from __future__ import annotations

from datetime import timedelta
from decimal import Decimal

import pytest

from conftest import utc
from parkboard.services.intervals import duration_hours, overlaps
from parkboard.services.pricing import PricingError, SlotNotFound, booking_cost, compute_cost

START = utc(2025, 10, 8, 1, 0)


def test_touching_intervals_do_not_overlap():
    assert not overlaps(utc(2025, 1, 1, 9), utc(2025, 1, 1, 11), utc(2025, 1, 1, 11), utc(2025, 1, 1, 13))
    assert not overlaps(utc(2025, 1, 1, 11), utc(2025, 1, 1, 13), utc(2025, 1, 1, 9), utc(2025, 1, 1, 11))


def test_partial_and_contained_intervals_overlap():
    assert overlaps(utc(2025, 1, 1, 9), utc(2025, 1, 1, 11), utc(2025, 1, 1, 10), utc(2025, 1, 1, 12))
    assert overlaps(utc(2025, 1, 1, 9), utc(2025, 1, 1, 17), utc(2025, 1, 1, 10), utc(2025, 1, 1, 11))
    assert overlaps(utc(2025, 1, 1, 10), utc(2025, 1, 1, 11), utc(2025, 1, 1, 9), utc(2025, 1, 1, 17))


def test_duration_hours_is_fractional():
    assert duration_hours(START, START + timedelta(hours=2, minutes=30)) == 2.5


def test_hourly_rate_below_a_day():
    assert booking_cost(Decimal("50"), Decimal("400"), START, START + timedelta(hours=8)) == Decimal("400.00")
    assert booking_cost(Decimal("50"), Decimal("400"), START, START + timedelta(hours=2, minutes=30)) == Decimal("125.00")


def test_hourly_rate_applies_below_a_day_even_when_daily_is_cheaper():
    # 10 hours at 50/h is 500 although the daily rate is 400
    assert booking_cost(Decimal("50"), Decimal("400"), START, START + timedelta(hours=10)) == Decimal("500.00")
    assert booking_cost(Decimal("50"), Decimal("2000"), START, START + timedelta(hours=23)) == Decimal("1150.00")


def test_price_steps_down_at_one_day_when_daily_is_cheaper():
    just_under = booking_cost(Decimal("50"), Decimal("400"), START, START + timedelta(hours=23, minutes=59))
    one_day = booking_cost(Decimal("50"), Decimal("400"), START, START + timedelta(hours=24))
    assert just_under == Decimal("1199.17")
    assert one_day == Decimal("400.00")


def test_cheaper_daily_rate_from_a_day_on():
    # 30 hours: 400 * 1.25 = 500 vs 50 * 30 = 1500
    assert booking_cost(Decimal("50"), Decimal("400"), START, START + timedelta(hours=30)) == Decimal("500.00")


def test_hourly_kept_when_daily_is_more_expensive():
    assert booking_cost(Decimal("10"), Decimal("400"), START, START + timedelta(hours=24)) == Decimal("240.00")


def test_rounds_half_up_to_cents():
    # 20 minutes at 0.35/h = 0.11666...
    assert booking_cost(Decimal("0.35"), None, START, START + timedelta(minutes=20)) == Decimal("0.12")
    # 6 minutes at 0.25/h = 0.025
    assert booking_cost(Decimal("0.25"), None, START, START + timedelta(minutes=6)) == Decimal("0.03")


def test_single_rate_slots():
    assert booking_cost(None, Decimal("240"), START, START + timedelta(hours=12)) == Decimal("120.00")
    assert booking_cost(Decimal("20"), None, START, START + timedelta(hours=48)) == Decimal("960.00")


def test_cost_is_non_decreasing_when_daily_is_at_least_a_day_of_hours():
    # 10/h against 400/day: no step at 24 hours
    previous = Decimal("0")
    for minutes in range(30, 60 * 72, 45):
        cost = booking_cost(Decimal("10"), Decimal("400"), START, START + timedelta(minutes=minutes))
        assert cost >= previous
        previous = cost


@pytest.mark.parametrize("low,high", [(30, 60 * 24), (60 * 24, 60 * 72)])
def test_cost_is_non_decreasing_on_each_side_of_one_day(low, high):
    previous = Decimal("0")
    for minutes in range(low, high, 45):
        cost = booking_cost(Decimal("50"), Decimal("400"), START, START + timedelta(minutes=minutes))
        assert cost >= previous
        previous = cost


def test_invalid_pricing_inputs():
    with pytest.raises(PricingError):
        booking_cost(None, None, START, START + timedelta(hours=1))
    with pytest.raises(PricingError):
        booking_cost(Decimal("50"), None, START, START)


def test_compute_cost_loads_slot_rates(db, priced_slot):
    assert compute_cost(db, slot_id=priced_slot.id, start=START, end=START + timedelta(hours=30)) == Decimal("500.00")
    with pytest.raises(SlotNotFound):
        compute_cost(db, slot_id="missing", start=START, end=START + timedelta(hours=1))
