# ui/app_shell.py
from __future__ import annotations

import asyncio
import logging

import flet as ft

from core.settings import OFFLINE_SYNC, UI
from services.household_api import HouseholdApi
from services.mutations import MutationGateway
from services.notifier import Notifier, Toast
from services.offline_queue import OfflineQueue, StorageError
from services.sync_loop import SyncLoop
from services.sync_service import SyncReport, SyncService
from storage.db import SessionFactory

from .dialogs import show_snack
from .pages.expenses import ExpensesPage
from .pages.groceries import GroceriesPage


logger = logging.getLogger(__name__)


class AppShell:
    def __init__(self, page: ft.Page, session_factory: SessionFactory):
        self.page = page

        self.page.title = UI.app_title
        self.page.horizontal_alignment = ft.CrossAxisAlignment.STRETCH
        self.page.vertical_alignment = ft.MainAxisAlignment.START

        # one store handle and one API client, shared by every component
        self.queue = OfflineQueue(session_factory)
        self.api = HouseholdApi()
        self.notifier = Notifier()
        self.mutations = MutationGateway(self.queue, self.api, notifier=self.notifier)
        self.sync_service = SyncService(self.queue, self.api)
        self.sync_loop = SyncLoop(self.sync_service, OFFLINE_SYNC.interval_sec)

        self.notifier.subscribe(self._on_toasts)
        self.sync_service.subscribe("after_sync", self._on_synced)

        self._groceries = GroceriesPage(self)
        self._expenses = ExpensesPage(self)
        self.content = ft.Container(self._groceries.view, expand=True)
        self._last_toast_id: str | None = None

        self.nav = ft.NavigationRail(
            selected_index=0,
            label_type=ft.NavigationRailLabelType.ALL,
            min_width=90,
            group_alignment=-0.9,
            on_change=self.on_nav_change,
            destinations=[
                ft.NavigationRailDestination(
                    icon=ft.Icons.SHOPPING_CART_OUTLINED,
                    selected_icon=ft.Icons.SHOPPING_CART,
                    label="Groceries",
                ),
                ft.NavigationRailDestination(
                    icon=ft.Icons.RECEIPT_LONG_OUTLINED,
                    selected_icon=ft.Icons.RECEIPT_LONG,
                    label="Expenses",
                ),
            ],
        )
        self.root = ft.Row(
            controls=[self.nav, ft.VerticalDivider(width=1), self.content],
            expand=True,
            spacing=0,
        )

    # ---------- helpers ----------
    def pending_count(self) -> int:
        try:
            return self.queue.count_pending()
        except StorageError as e:
            logger.error("Offline store unavailable: %s", e)
            return 0

    def sync_status(self) -> dict:
        return self.sync_service.status()

    def _on_toasts(self, toasts: list[Toast]):
        if not toasts or toasts[-1].id == self._last_toast_id:
            return
        latest = toasts[-1]
        self._last_toast_id = latest.id
        show_snack(self.page, latest.message, latest.kind)

    def _on_synced(self, report: SyncReport):
        # emitted from the sync worker thread; page state is only touched on the page's loop
        self.page.run_task(self._refresh_after_sync, report)

    async def _refresh_after_sync(self, report: SyncReport):
        if report.synced:
            data = await asyncio.to_thread(self._groceries.fetch)
            self._groceries.apply(data)
        else:
            self._groceries.render()

    # ---------- mounting ----------
    def mount(self):
        self.page.controls.clear()
        self.page.add(self.root)
        self._groceries.load()

        if OFFLINE_SYNC.enabled:
            self.sync_loop.start(self.page.run_task)
        self.page.on_disconnect = lambda _: self.dispose()
        self.page.on_close = lambda _: self.dispose()

    def on_nav_change(self, e: ft.ControlEvent):
        if int(e.control.selected_index) == 1:
            self.content.content = self._expenses.view
            self._expenses.load()
        else:
            self.content.content = self._groceries.view
            self._groceries.load()
        self.page.update()

    def dispose(self):
        self.sync_loop.stop()
        self.sync_service.unsubscribe("after_sync", self._on_synced)
        self.notifier.unsubscribe(self._on_toasts)
