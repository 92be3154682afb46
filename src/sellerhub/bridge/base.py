"""Base bridge adapter with Protocol definition and ABC implementation."""

from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Any, Protocol, runtime_checkable

import httpx

from sellerhub.bridge.models import AdapterConfig, AdapterSchema, ConnectionStatus

logger = logging.getLogger(__name__)


@runtime_checkable
class BridgeAdapter(Protocol):
    """Protocol every external collaborator satisfies."""

    @property
    def name(self) -> str: ...

    @property
    def schema(self) -> AdapterSchema: ...

    def health_check(self) -> ConnectionStatus: ...

    async def close(self) -> None: ...


class BaseBridgeAdapter(ABC):
    """Abstract base class for bridge adapters.

    Provides a lazily created ``httpx.AsyncClient`` with the configured
    timeout, bounded retry on 5xx and transport errors, and connection
    status tracking. Errors are not swallowed: once retries are exhausted
    the caller sees the ``httpx`` exception.
    """

    def __init__(
        self,
        config: AdapterConfig,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._config = config
        self._client = client
        self._status = ConnectionStatus.CONNECTED

    @property
    def name(self) -> str:
        return self._config.name

    @property
    def config(self) -> AdapterConfig:
        return self._config

    @property
    def schema(self) -> AdapterSchema:
        return AdapterSchema(
            name=self._config.name,
            description=self._config.description,
            provider=self._config.provider,
            operations=self._get_operations(),
            status=self._status,
        )

    @abstractmethod
    def _get_operations(self) -> list[str]:
        """Return list of supported operation names."""

    def health_check(self) -> ConnectionStatus:
        return self._status

    @property
    def _http(self) -> httpx.AsyncClient:
        if self._client is None:
            headers: dict[str, str] = {}
            if self._config.api_key:
                headers["Authorization"] = f"Bearer {self._config.api_key}"
            self._client = httpx.AsyncClient(
                base_url=self._config.base_url,
                timeout=httpx.Timeout(self._config.timeout_seconds),
                headers=headers,
            )
        return self._client

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def _post_json(self, url: str, payload: dict[str, Any]) -> dict[str, Any]:
        """POST a JSON body and return the decoded JSON response.

        Raises:
            httpx.HTTPStatusError: If the final response is an error status.
            httpx.TransportError: If the collaborator stayed unreachable.
            ValueError: If the body is not a JSON object.
        """
        resp = await self._request_with_retry("POST", url, json=payload)
        resp.raise_for_status()
        body = resp.json()
        if not isinstance(body, dict):
            raise ValueError(f"{self.name}: expected a JSON object from {url}")
        return body

    async def _request_with_retry(
        self,
        method: str,
        url: str,
        **kwargs: Any,
    ) -> httpx.Response:
        """Execute an HTTP request with retry on 5xx and transport errors."""
        max_attempts = max(1, self._config.max_retries + 1)
        last_resp: httpx.Response | None = None

        for attempt in range(max_attempts):
            try:
                resp = await self._http.request(method, url, **kwargs)
                # Don't retry on client errors (4xx)
                if resp.status_code < 500:
                    self._status = ConnectionStatus.CONNECTED
                    return resp
                last_resp = resp
                if attempt < max_attempts - 1:
                    delay = 0.5 * (2 ** attempt)
                    logger.warning(
                        "%s: %s %s returned %d, retrying in %.1fs (%d/%d)",
                        self.name, method, url, resp.status_code, delay,
                        attempt + 1, max_attempts,
                    )
                    await asyncio.sleep(delay)
                    continue
                self._status = ConnectionStatus.DEGRADED
                return resp
            except httpx.TransportError as exc:
                if attempt < max_attempts - 1:
                    delay = 0.5 * (2 ** attempt)
                    logger.warning(
                        "%s: transport error on %s: %s, retrying in %.1fs (%d/%d)",
                        self.name, url, exc, delay, attempt + 1, max_attempts,
                    )
                    await asyncio.sleep(delay)
                    continue
                self._status = ConnectionStatus.DISCONNECTED
                raise

        return last_resp  # type: ignore[return-value]
