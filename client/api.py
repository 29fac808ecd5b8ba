"""
client/api.py -- HTTP client for the Store Manager REST API.

Used by the CLI for store and user operations. Every request carries the
same Basic-Auth header the CLI verified locally with AuthenticationService.

Errors are not raised: each call returns an ApiResult with the status code
and decoded body so the CLI can print server-side error envelopes verbatim.
Network failures become status 0 with the exception text as the message.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Optional
from urllib.parse import quote

import requests

logger = logging.getLogger("storemgr.client")

_TIMEOUT = 10


@dataclass
class ApiResult:
    status: int
    body: Any = None

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300


class StoreApiClient:
    """Thin wrapper over requests.Session bound to one base URL and credential."""

    def __init__(self, base_url: str, auth_header: str, session: Optional[requests.Session] = None) -> None:
        self.base_url = base_url.rstrip("/")
        self._session = session or requests.Session()
        # Known API, no reason to follow long redirect chains.
        self._session.max_redirects = 3
        self._session.headers["Authorization"] = auth_header

    def _request(self, method: str, path: str, json: Optional[dict] = None) -> ApiResult:
        url = f"{self.base_url}{path}"
        try:
            resp = self._session.request(method, url, json=json, timeout=_TIMEOUT)
        except requests.RequestException as e:
            logger.warning("%s %s failed: %s", method, url, e)
            return ApiResult(status=0, body={"error": {"code": "network_error", "message": str(e)}})
        if not resp.content:
            return ApiResult(status=resp.status_code)
        try:
            body = resp.json()
        except ValueError:
            body = resp.text
        return ApiResult(status=resp.status_code, body=body)

    # ------------------------------------------------------------------
    # Stores
    # ------------------------------------------------------------------

    def list_stores(self) -> ApiResult:
        return self._request("GET", "/stores")

    def get_store(self, store_id: str) -> ApiResult:
        return self._request("GET", f"/stores/{quote(store_id, safe='')}")

    def create_store(self, store_id: str, name: str, address: str, description: Optional[str] = None) -> ApiResult:
        body = {"store_id": store_id, "name": name, "address": address, "description": description}
        return self._request("POST", "/stores", json=body)

    def update_store(
        self, store_id: str, description: Optional[str] = None, address: Optional[str] = None
    ) -> ApiResult:
        body = {"description": description, "address": address}
        return self._request("PUT", f"/stores/{quote(store_id, safe='')}", json=body)

    def delete_store(self, store_id: str) -> ApiResult:
        return self._request("DELETE", f"/stores/{quote(store_id, safe='')}")

    # ------------------------------------------------------------------
    # Users
    # ------------------------------------------------------------------

    def list_users(self) -> ApiResult:
        return self._request("GET", "/users")

    def get_user(self, email: str) -> ApiResult:
        return self._request("GET", f"/users/{quote(email, safe='@')}")

    def create_user(self, email: str, password: str, name: str, role: Optional[str] = None) -> ApiResult:
        body = {"email": email, "password": password, "name": name, "role": role}
        return self._request("POST", "/users", json=body)

    def update_user(self, email: str, password: Optional[str] = None, name: Optional[str] = None) -> ApiResult:
        return self._request("PUT", f"/users/{quote(email, safe='@')}", json={"password": password, "name": name})

    def delete_user(self, email: str) -> ApiResult:
        return self._request("DELETE", f"/users/{quote(email, safe='@')}")
