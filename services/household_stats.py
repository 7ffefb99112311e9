"""Derived figures shown on the fuel and subscriptions pages."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Any, Iterable, List, Mapping, Optional

from dateutil.relativedelta import relativedelta

from datetime_utils import parse_iso_date


BILLING_CYCLES = ("monthly", "yearly")
RENEWAL_SOON_DAYS = 7


@dataclass(frozen=True)
class FuelStats:
    entry: Mapping[str, Any]
    consumption: Optional[float] = None
    cost_per_100km: Optional[float] = None


def fuel_stats(entries: Iterable[Mapping[str, Any]]) -> List[FuelStats]:
    """Consumption (L/100km) and cost per 100km between consecutive fill-ups.

    ``entries`` must be in chronological order and carry ``odometerKm``,
    ``liters`` and ``totalPrice``. The first entry has nothing to compare
    against, and a non-increasing odometer yields no figures.
    """

    result: List[FuelStats] = []
    previous: Optional[Mapping[str, Any]] = None
    for entry in entries:
        if previous is None:
            result.append(FuelStats(entry=entry))
            previous = entry
            continue
        km = float(entry["odometerKm"]) - float(previous["odometerKm"])
        if km <= 0:
            result.append(FuelStats(entry=entry))
        else:
            result.append(
                FuelStats(
                    entry=entry,
                    consumption=round(float(entry["liters"]) / km * 100, 2),
                    cost_per_100km=round(float(entry["totalPrice"]) / km * 100, 2),
                )
            )
        previous = entry
    return result


def next_renewal(start: date | str, billing_cycle: str) -> date:
    start_date = parse_iso_date(start)
    if start_date is None:
        raise ValueError("start date is required")
    if billing_cycle == "monthly":
        return start_date + relativedelta(months=1)
    if billing_cycle == "yearly":
        return start_date + relativedelta(years=1)
    raise ValueError(f"Unsupported billing cycle: {billing_cycle}")


def is_active(subscription: Mapping[str, Any], today: date) -> bool:
    end = parse_iso_date(subscription.get("endDate"))
    return end is None or today < end


def monthly_total(subscriptions: Iterable[Mapping[str, Any]], today: date) -> float:
    total = 0.0
    for sub in subscriptions:
        if not is_active(sub, today):
            continue
        price = float(sub.get("price") or 0)
        total += price if sub.get("billingCycle") == "monthly" else price / 12
    return total


def is_renewal_soon(renewal: date | str | None, today: date) -> bool:
    renewal_date = parse_iso_date(renewal)
    if renewal_date is None:
        return False
    days = (renewal_date - today).days
    return 0 <= days <= RENEWAL_SOON_DAYS


__all__ = [
    "BILLING_CYCLES",
    "FuelStats",
    "fuel_stats",
    "is_active",
    "is_renewal_soon",
    "monthly_total",
    "next_renewal",
]
