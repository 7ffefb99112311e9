from datetime import date

import pytest

from services.household_stats import (
    fuel_stats,
    is_active,
    is_renewal_soon,
    monthly_total,
    next_renewal,
)


def test_fuel_stats_between_fill_ups():
    entries = [
        {"odometerKm": 10_000, "liters": 40, "totalPrice": 70},
        {"odometerKm": 10_600, "liters": 36, "totalPrice": 63.9},
        {"odometerKm": 11_100, "liters": 31.5, "totalPrice": 55},
    ]

    stats = fuel_stats(entries)

    assert stats[0].consumption is None
    assert stats[0].cost_per_100km is None
    assert stats[1].consumption == 6.0
    assert stats[1].cost_per_100km == 10.65
    assert stats[2].consumption == 6.3
    assert stats[2].cost_per_100km == 11.0
    assert stats[2].entry is entries[2]


def test_fuel_stats_ignores_non_increasing_odometer():
    stats = fuel_stats(
        [
            {"odometerKm": 500, "liters": 10, "totalPrice": 18},
            {"odometerKm": 500, "liters": 10, "totalPrice": 18},
        ]
    )
    assert stats[1].consumption is None


def test_fuel_stats_empty():
    assert fuel_stats([]) == []


def test_next_renewal_monthly_clamps_month_end():
    assert next_renewal(date(2024, 1, 31), "monthly") == date(2024, 2, 29)
    assert next_renewal("2024-03-15T00:00:00.000Z", "monthly") == date(2024, 4, 15)


def test_next_renewal_yearly():
    assert next_renewal("2024-02-29", "yearly") == date(2025, 2, 28)


def test_next_renewal_rejects_unknown_cycle():
    with pytest.raises(ValueError):
        next_renewal("2024-01-01", "weekly")


def test_monthly_total_counts_active_only():
    today = date(2024, 6, 1)
    subs = [
        {"price": 9.99, "billingCycle": "monthly", "endDate": None},
        {"price": 120, "billingCycle": "yearly", "endDate": "2025-01-01"},
        {"price": 50, "billingCycle": "monthly", "endDate": "2024-05-31"},
    ]
    assert monthly_total(subs, today) == pytest.approx(19.99)
    assert is_active(subs[2], today) is False


def test_is_renewal_soon_window():
    today = date(2024, 6, 1)
    assert is_renewal_soon("2024-06-01", today) is True
    assert is_renewal_soon("2024-06-08", today) is True
    assert is_renewal_soon("2024-06-09", today) is False
    assert is_renewal_soon("2024-05-31", today) is False
    assert is_renewal_soon(None, today) is False
