"""Minimal client for the household REST API used by the offline sync."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import requests

from core.settings import API


logger = logging.getLogger(__name__)


class HouseholdApiError(RuntimeError):
    """Base class for failed calls to the household API."""


class NetworkError(HouseholdApiError):
    """The request never got an HTTP answer (connection refused, timeout...)."""


class RemoteRejection(HouseholdApiError):
    def __init__(self, status_code: int, message: str, method: str = "", path: str = ""):
        super().__init__(f"{method} {path} failed with {status_code}: {message}".strip())
        self.status_code = status_code
        self.message = message


def _error_message(response: requests.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.reason or "request failed"
    if isinstance(body, dict) and body.get("error"):
        return str(body["error"])
    return response.reason or "request failed"


class HouseholdApi:
    GROCERIES_PATH = "/api/groceries"
    FUEL_PATH = "/api/fuel"
    SUBSCRIPTIONS_PATH = "/api/subscriptions"

    def __init__(
        self,
        base_url: str | None = None,
        *,
        timeout: float | None = None,
        ping_timeout: float | None = None,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.base_url = (base_url or API.base_url).rstrip("/")
        self.timeout = timeout if timeout is not None else API.timeout_sec
        self.ping_timeout = ping_timeout if ping_timeout is not None else API.ping_timeout_sec
        self.session = session or requests.Session()

    # ------------------------------------------------------------------
    # Transport
    def _request(self, method: str, path: str, json_body: Any = None) -> Dict[str, Any]:
        url = f"{self.base_url}{path}"
        try:
            response = self.session.request(method, url, json=json_body, timeout=self.timeout)
        except requests.RequestException as exc:
            raise NetworkError(f"{method} {path}: {exc}") from exc

        if not response.ok:
            raise RemoteRejection(response.status_code, _error_message(response), method, path)
        if not response.content:
            return {}
        try:
            data = response.json()
        except ValueError:
            return {}
        return data if isinstance(data, dict) else {"data": data}

    def is_online(self) -> bool:
        """Any HTTP answer from the server means the network is usable."""

        try:
            self.session.head(self.base_url, timeout=self.ping_timeout, allow_redirects=False)
        except requests.RequestException as exc:
            logger.debug("Connectivity probe failed: %s", exc)
            return False
        return True

    # ------------------------------------------------------------------
    # Groceries
    def list_groceries(self) -> Dict[str, Any]:
        data = self._request("GET", self.GROCERIES_PATH)
        return {
            "items": data.get("items") or [],
            "categories": data.get("categories") or [],
            "list": data.get("list"),
        }

    def create_grocery_item(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        return self._request("POST", self.GROCERIES_PATH, payload)

    def update_grocery_item_status(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        return self._request("PATCH", self.GROCERIES_PATH, payload)

    # ------------------------------------------------------------------
    # Read-only feature lists
    def list_fuel_entries(self) -> List[Dict[str, Any]]:
        return list(self._request("GET", self.FUEL_PATH).get("entries") or [])

    def list_subscriptions(self) -> List[Dict[str, Any]]:
        return list(self._request("GET", self.SUBSCRIPTIONS_PATH).get("subscriptions") or [])


__all__ = ["HouseholdApi", "HouseholdApiError", "NetworkError", "RemoteRejection"]
