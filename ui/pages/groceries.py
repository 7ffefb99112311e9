# ui/pages/groceries.py
from __future__ import annotations

import logging

import flet as ft

from services.actions import GROCERY_STATUSES
from services.household_api import HouseholdApiError
from ui.dialogs import close_alert_dialog, open_alert_dialog


logger = logging.getLogger(__name__)

STATUS_TITLES = {
    "HOME": "At home",
    "MUST_BUY": "To buy",
    "BOUGHT": "Bought",
}

STATUS_ICONS = {
    "HOME": ft.Icons.HOME_OUTLINED,
    "MUST_BUY": ft.Icons.SHOPPING_BAG_OUTLINED,
    "BOUGHT": ft.Icons.CHECK_CIRCLE_OUTLINE,
}

NO_CATEGORY = "No category"


def group_by_category(items: list[dict], status: str) -> dict[str, list[dict]]:
    grouped: dict[str, list[dict]] = {}
    for item in items:
        if item.get("status") != status:
            continue
        category = (item.get("category") or {}).get("name") or NO_CATEGORY
        grouped.setdefault(category, []).append(item)
    return grouped


class GroceriesPage:
    def __init__(self, app):
        self.app = app
        self.items: list[dict] = []
        self.categories: list[dict] = []
        self.list_id: str | None = None
        self._dialog: ft.AlertDialog | None = None

        self.pending_badge = ft.Text("", color=ft.Colors.ORANGE_700)
        self.connection_text = ft.Text("", size=12, color=ft.Colors.GREY_600)
        self.add_btn = ft.ElevatedButton("Add item", icon=ft.Icons.ADD, on_click=self.open_add_dialog)
        self.sections = ft.Column(spacing=16, scroll=ft.ScrollMode.AUTO, expand=True)

        header = ft.Row(
            [
                ft.Text("Groceries", size=24, weight=ft.FontWeight.BOLD),
                self.pending_badge,
                ft.Container(expand=True),
                self.add_btn,
            ],
            vertical_alignment=ft.CrossAxisAlignment.CENTER,
        )
        self.view = ft.Container(
            content=ft.Column([header, self.connection_text, self.sections], expand=True, spacing=12),
            expand=True,
            padding=20,
        )

    # ---------- data ----------
    def fetch(self) -> dict | None:
        """Network half of :meth:`load`; safe to run off the page's loop."""

        try:
            return self.app.api.list_groceries()
        except HouseholdApiError as e:
            logger.info("Groceries not refreshed: %s", e)
            return None

    def load(self):
        self.apply(self.fetch())

    def apply(self, data: dict | None):
        if data is None:
            self.connection_text.value = "Offline: showing the last loaded list"
        else:
            self.items = list(data.get("items") or [])
            self.categories = list(data.get("categories") or [])
            self.list_id = (data.get("list") or {}).get("id")
            self.connection_text.value = ""
        self.render()

    def render(self):
        pending = self.app.pending_count()
        self.pending_badge.value = f"{pending} waiting to sync" if pending else ""
        self.sections.controls = [self._section(status) for status in GROCERY_STATUSES]
        self.app.page.update()

    def _section(self, status: str) -> ft.Control:
        rows: list[ft.Control] = []
        grouped = group_by_category(self.items, status)
        for category in sorted(grouped):
            rows.append(ft.Text(category, weight=ft.FontWeight.W_600, color=ft.Colors.GREY_700))
            rows.extend(self._item_row(item) for item in grouped[category])
        if not rows:
            rows.append(ft.Text("Nothing here", color=ft.Colors.GREY_500))
        return ft.Column(
            [ft.Text(STATUS_TITLES[status], size=18, weight=ft.FontWeight.W_600), *rows],
            spacing=6,
        )

    def _item_row(self, item: dict) -> ft.Control:
        label = item.get("name") or ""
        if item.get("quantity"):
            label = f"{label} ({item['quantity']})"
        buttons = [
            ft.IconButton(
                icon=STATUS_ICONS[target],
                tooltip=STATUS_TITLES[target],
                on_click=lambda _, i=item, s=target: self.change_status(i, s),
            )
            for target in GROCERY_STATUSES
            if target != item.get("status")
        ]
        return ft.Row([ft.Text(label, expand=True), *buttons])

    # ---------- mutations ----------
    def change_status(self, item: dict, status: str):
        item_id = item.get("id")
        if not item_id:
            return
        try:
            result = self.app.mutations.set_item_status(item_id, status)
        except HouseholdApiError:
            return
        if result.queued:
            item["status"] = status
            self.render()
        else:
            self.load()

    def open_add_dialog(self, _):
        if not self.list_id:
            self.app.notifier.show("No grocery list found", "error")
            return
        name = ft.TextField(label="Name", autofocus=True)
        quantity = ft.TextField(label="Quantity")
        category = ft.Dropdown(
            label="Category",
            options=[ft.dropdown.Option(key=c["id"], text=c.get("name")) for c in self.categories if c.get("id")],
        )

        def _save(_):
            if not (name.value or "").strip():
                return
            try:
                result = self.app.mutations.add_item(
                    self.list_id,
                    name.value,
                    quantity=quantity.value or None,
                    category_id=category.value or None,
                )
            except HouseholdApiError:
                return
            close_alert_dialog(self.app.page, self._dialog)
            self._dialog = None
            self.app.notifier.show("Item added", "success")
            if result.queued:
                self.items.insert(0, {"name": name.value.strip(), "quantity": quantity.value or None, "status": "HOME"})
                self.render()
            else:
                self.load()

        def _cancel(_):
            close_alert_dialog(self.app.page, self._dialog)
            self._dialog = None

        self._dialog = open_alert_dialog(
            self.app.page,
            title="New item",
            content=ft.Column([name, quantity, category], tight=True, width=360),
            actions=[ft.TextButton("Cancel", on_click=_cancel), ft.FilledButton("Add", on_click=_save)],
        )
