"""HTTP adapters for the government registries that back document verification.

Each registry answers with its own envelope; the adapters reduce it to a
``RegistryRecord`` and leave the judgement of what to tell the user to the
caller.
"""

from __future__ import annotations

import logging
from typing import Any

from sellerhub.bridge.base import BaseBridgeAdapter
from sellerhub.bridge.models import AdapterConfig, RegistryRecord

logger = logging.getLogger(__name__)

ACTIVE_STATUS = "Active"
VALID_STATUS = "valid"


def _section(body: dict[str, Any], *keys: str) -> dict[str, Any]:
    """Walk nested objects in a registry answer.

    Raises:
        ValueError: If a level is missing or is not an object.
    """
    node: Any = body
    for key in keys:
        node = node.get(key) if isinstance(node, dict) else None
        if not isinstance(node, dict):
            raise ValueError(f"Registry response has no object at {key!r}")
    return node


class CompanyRegistryAdapter(BaseBridgeAdapter):
    """Corporate registry lookup for incorporation (CIN) numbers."""

    path = "/verification/cin"

    def __init__(self, config: AdapterConfig | None = None, **kwargs: Any) -> None:
        if config is None:
            config = AdapterConfig(
                name="company_registry",
                provider="http",
                description="Corporate registry lookup by incorporation number",
            )
        super().__init__(config, **kwargs)

    def _get_operations(self) -> list[str]:
        return ["verify"]

    async def verify(self, number: str) -> RegistryRecord:
        body = await self._post_json(self.path, {"cinData": {"cin": number}})
        master = _section(body, "data", "company_master_data")
        status = str(master.get("company_status(for_efiling)", ""))
        logger.debug("%s: %s -> %s", self.name, number, status)
        return RegistryRecord(
            number=number,
            status=status,
            active=status == ACTIVE_STATUS,
            raw=body,
        )


class TaxRegistrationAdapter(BaseBridgeAdapter):
    """Tax authority lookup for GST registration numbers."""

    path = "/verification/gst"

    def __init__(self, config: AdapterConfig | None = None, **kwargs: Any) -> None:
        if config is None:
            config = AdapterConfig(
                name="tax_registration",
                provider="http",
                description="Tax authority lookup by GST registration number",
            )
        super().__init__(config, **kwargs)

    def _get_operations(self) -> list[str]:
        return ["verify"]

    async def verify(self, number: str) -> RegistryRecord:
        body = await self._post_json(self.path, {"gstin": number})
        status = str(_section(body, "data", "data").get("sts", ""))
        logger.debug("%s: %s -> %s", self.name, number, status)
        return RegistryRecord(
            number=number,
            status=status,
            active=status == ACTIVE_STATUS,
            raw=body,
        )


class TaxIdentityAdapter(BaseBridgeAdapter):
    """Tax identity lookup for PAN numbers.

    The registry matches the declared name and date alongside the number,
    so both are sent with every request.
    """

    path = "/verification/pan"

    def __init__(self, config: AdapterConfig | None = None, **kwargs: Any) -> None:
        if config is None:
            config = AdapterConfig(
                name="tax_identity",
                provider="http",
                description="Tax identity lookup by PAN",
            )
        super().__init__(config, **kwargs)

    def _get_operations(self) -> list[str]:
        return ["verify"]

    async def verify(self, number: str, name: str, date_of_birth: str) -> RegistryRecord:
        payload = {
            "panData": {
                "pan": number,
                "nameAsPerPan": name,
                "dateOfBirth": date_of_birth,
            }
        }
        body = await self._post_json(self.path, payload)
        data = _section(body, "data")
        status = str(data.get("status", ""))
        logger.debug("%s: %s -> %s", self.name, number, status)
        return RegistryRecord(
            number=number,
            status=status,
            active=status == VALID_STATUS,
            remarks=data.get("remarks"),
            raw=body,
        )

