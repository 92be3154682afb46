"""HTTP adapter for the back-office onboarding endpoints."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from sellerhub.bridge.base import BaseBridgeAdapter
from sellerhub.bridge.models import AdapterConfig, ConnectionStatus

logger = logging.getLogger(__name__)

MultipartFiles = list[tuple[str, tuple[str, bytes, str]]]


class OnboardingApiAdapter(BaseBridgeAdapter):
    """Creates, updates and fetches onboarded companies.

    Create and update send multipart bodies. A rejection that carries a JSON
    envelope is returned to the caller as-is (with ``success`` forced false)
    so the server's message can be shown verbatim; anything else raises.
    """

    def __init__(self, config: AdapterConfig | None = None, **kwargs: Any) -> None:
        if config is None:
            config = AdapterConfig(
                name="onboarding_api",
                provider="http",
                description="Company onboarding create/update",
            )
        super().__init__(config, **kwargs)

    def _get_operations(self) -> list[str]:
        return ["create", "update", "fetch"]

    async def create(self, data: dict[str, str], files: MultipartFiles) -> dict[str, Any]:
        resp = await self._send_once("POST", "/onboarding", data=data, files=files or None)
        return self._envelope(resp)

    async def update(
        self,
        company_id: str,
        location_id: str,
        data: dict[str, str],
        files: MultipartFiles,
    ) -> dict[str, Any]:
        resp = await self._send_once(
            "PUT",
            f"/onboarding/{company_id}/{location_id}",
            data=data,
            files=files or None,
        )
        return self._envelope(resp)

    async def fetch(self, company_id: str, location_id: str) -> dict[str, Any]:
        """Fetch a saved company record for editing.

        Raises:
            httpx.HTTPStatusError: If the record cannot be fetched.
        """
        resp = await self._request_with_retry("GET", f"/onboarding/{company_id}/{location_id}")
        resp.raise_for_status()
        body = resp.json()
        return body.get("data", body)

    async def _send_once(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        """Send a write exactly once; a failed submission is never replayed."""
        try:
            resp = await self._http.request(method, url, **kwargs)
        except httpx.TransportError:
            self._status = ConnectionStatus.DISCONNECTED
            raise
        self._status = (
            ConnectionStatus.DEGRADED if resp.status_code >= 500 else ConnectionStatus.CONNECTED
        )
        return resp

    def _envelope(self, resp: httpx.Response) -> dict[str, Any]:
        try:
            body = resp.json()
        except ValueError:
            resp.raise_for_status()
            raise
        if not isinstance(body, dict):
            resp.raise_for_status()
            raise ValueError(f"{self.name}: expected a JSON object")
        if resp.is_error:
            logger.info("%s: rejected with %d", self.name, resp.status_code)
            body["success"] = False
        return body
