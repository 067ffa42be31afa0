"""
Venue_POS.integrations.sync_api_client

Thin HTTP client for the venue's sync server.

Endpoints:
    POST {base}/sync/push   body {"items": [{type, data, ts}, ...]}   -> 2xx only = ack, redirects not followed
    GET  {base}/sync/pull   -> {"services"?, "settings"?, "clients"?}

Every call carries an explicit timeout so a hung server cannot stall the
sync worker forever. All failures surface as SyncApiError.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import requests


class SyncApiError(Exception):
    """Network failure, non-2xx status, or unusable response body."""


@dataclass
class PullPayload:
    services: Optional[List[Dict[str, Any]]] = None
    settings: Optional[Dict[str, Any]] = None
    clients: Optional[Dict[str, Dict[str, Any]]] = None


def _is_success(resp: requests.Response) -> bool:
    # resp.ok also accepts 3xx; only a 2xx counts as an ack
    return 200 <= resp.status_code < 300


class SyncApiClient:
    def __init__(
        self,
        base_url: str,
        timeout: float = 5.0,
        session: Optional[requests.Session] = None,
    ) -> None:
        if not base_url:
            raise ValueError("base_url is required for the sync client")
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    def _url(self, path: str) -> str:
        return f"{self.base_url}/{path.lstrip('/')}"

    def push(self, items: List[Dict[str, Any]]) -> None:
        """
        Send one batch of queue entries. Returns only if the server acked it.
        """
        try:
            resp = self.session.post(
                self._url("sync/push"),
                json={"items": items},
                allow_redirects=False,
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            raise SyncApiError(f"push failed: {exc}") from exc

        if not _is_success(resp):
            raise SyncApiError(f"push rejected: HTTP {resp.status_code}")

    def pull(self) -> PullPayload:
        """
        Fetch the server's reference data. Absent keys stay None.
        """
        try:
            resp = self.session.get(self._url("sync/pull"), timeout=self.timeout)
        except requests.RequestException as exc:
            raise SyncApiError(f"pull failed: {exc}") from exc

        if not _is_success(resp):
            raise SyncApiError(f"pull rejected: HTTP {resp.status_code}")

        try:
            data = resp.json()
        except ValueError as exc:
            raise SyncApiError(f"pull returned invalid JSON: {exc}") from exc
        if not isinstance(data, dict):
            raise SyncApiError("pull returned a non-object body")

        services = data.get("services")
        settings = data.get("settings")
        clients = data.get("clients")
        return PullPayload(
            services=services if isinstance(services, list) else None,
            settings=settings if isinstance(settings, dict) else None,
            clients=clients if isinstance(clients, dict) else None,
        )

    def close(self) -> None:
        self.session.close()
