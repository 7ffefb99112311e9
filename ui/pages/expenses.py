# ui/pages/expenses.py
from __future__ import annotations

import logging
from datetime import date

import flet as ft

from datetime_utils import parse_iso_date
from services.household_api import HouseholdApiError
from services.household_stats import (
    FuelStats,
    fuel_stats,
    is_active,
    is_renewal_soon,
    monthly_total,
    next_renewal,
)


logger = logging.getLogger(__name__)


def fuel_rows(entries: list[dict]) -> list[FuelStats]:
    """Figures per fill-up, newest first. The API returns entries newest first too."""

    chronological = sorted(entries, key=lambda e: parse_iso_date(e.get("date")) or date.min)
    return list(reversed(fuel_stats(chronological)))


def subscription_rows(subscriptions: list[dict], today: date) -> list[dict]:
    rows = []
    for sub in subscriptions:
        renewal = parse_iso_date(sub.get("nextRenewal"))
        if renewal is None and sub.get("startDate") and sub.get("billingCycle"):
            try:
                renewal = next_renewal(sub["startDate"], sub["billingCycle"])
            except ValueError:
                renewal = None
        rows.append(
            {
                "subscription": sub,
                "renewal": renewal,
                "active": is_active(sub, today),
                "renewal_soon": is_renewal_soon(renewal, today),
            }
        )
    return rows


class ExpensesPage:
    def __init__(self, app):
        self.app = app
        self.fuel_entries: list[dict] = []
        self.subscriptions: list[dict] = []

        self.monthly_text = ft.Text("", size=16, weight=ft.FontWeight.W_600)
        self.status_text = ft.Text("", size=12, color=ft.Colors.GREY_600)
        self.fuel_column = ft.Column(spacing=4)
        self.subs_column = ft.Column(spacing=4)

        content = ft.Column(
            controls=[
                ft.Text("Expenses", size=24, weight=ft.FontWeight.BOLD),
                self.status_text,
                ft.Text("Fuel", size=18, weight=ft.FontWeight.W_600),
                self.fuel_column,
                ft.Text("Subscriptions", size=18, weight=ft.FontWeight.W_600),
                self.monthly_text,
                self.subs_column,
            ],
            spacing=12,
            scroll=ft.ScrollMode.AUTO,
            expand=True,
        )
        self.view = ft.Container(content=content, expand=True, padding=20)

    def load(self):
        try:
            self.fuel_entries = self.app.api.list_fuel_entries()
            self.subscriptions = self.app.api.list_subscriptions()
        except HouseholdApiError as e:
            logger.info("Expenses not refreshed: %s", e)
            self.status_text.value = "Offline: showing the last loaded figures"
        else:
            self.status_text.value = ""
        self.render(date.today())

    def render(self, today: date):
        self.fuel_column.controls = [self._fuel_row(s) for s in fuel_rows(self.fuel_entries)] or [
            ft.Text("No fuel entries", color=ft.Colors.GREY_500)
        ]
        total = monthly_total(self.subscriptions, today)
        self.monthly_text.value = f"Monthly total: {total:.2f} €"
        self.subs_column.controls = [
            self._subscription_row(row) for row in subscription_rows(self.subscriptions, today)
        ] or [ft.Text("No subscriptions", color=ft.Colors.GREY_500)]
        self.app.page.update()

    def _fuel_row(self, stats: FuelStats) -> ft.Control:
        entry = stats.entry
        parts = [str(parse_iso_date(entry.get("date")) or "—"), f"{entry.get('odometerKm')} km"]
        if stats.consumption is not None:
            parts.append(f"{stats.consumption} L/100km")
            parts.append(f"{stats.cost_per_100km:.2f} €/100km")
        return ft.Text(" · ".join(parts))

    def _subscription_row(self, row: dict) -> ft.Control:
        sub = row["subscription"]
        cycle = "month" if sub.get("billingCycle") == "monthly" else "year"
        label = f"{sub.get('name')}: {float(sub.get('price') or 0):.2f} € / {cycle}"
        if not row["active"]:
            label += " (expired)"
        controls: list[ft.Control] = [ft.Text(label, expand=True)]
        if row["renewal"] is not None:
            controls.append(
                ft.Text(
                    f"renews {row['renewal'].isoformat()}",
                    color=ft.Colors.ORANGE_700 if row["renewal_soon"] else ft.Colors.GREY_600,
                )
            )
        return ft.Row(controls)
