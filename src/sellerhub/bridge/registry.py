"""Adapter registry for managing bridge adapters."""

from __future__ import annotations

from typing import Any

from sellerhub.bridge.base import BridgeAdapter
from sellerhub.bridge.models import AdapterConfig, AdapterSchema, ConnectionStatus
from sellerhub.core.config import Settings


class AdapterRegistry:
    """Registry for bridge adapters. Provides register/get/list and health checking."""

    def __init__(self) -> None:
        self._adapters: dict[str, BridgeAdapter] = {}

    def register(self, adapter: BridgeAdapter) -> None:
        self._adapters[adapter.name] = adapter

    def get(self, name: str) -> BridgeAdapter | None:
        return self._adapters.get(name)

    def require(self, name: str) -> BridgeAdapter:
        """Get an adapter by name.

        Raises:
            KeyError: If no adapter is registered under ``name``.
        """
        adapter = self._adapters.get(name)
        if adapter is None:
            raise KeyError(f"No adapter registered as {name!r}")
        return adapter

    def list_adapters(self) -> list[AdapterSchema]:
        """List all registered adapters with their schemas."""
        return [adapter.schema for adapter in self._adapters.values()]

    def health_check_all(self) -> dict[str, ConnectionStatus]:
        return {name: adapter.health_check() for name, adapter in self._adapters.items()}

    async def close_all(self) -> None:
        for adapter in self._adapters.values():
            await adapter.close()

    @property
    def adapter_names(self) -> list[str]:
        return list(self._adapters.keys())


def _adapter_config(name: str, provider: str, section: Any, base_url: str) -> AdapterConfig:
    return AdapterConfig(
        name=name,
        provider=provider,
        base_url=base_url,
        api_key=getattr(section, "api_key", None),
        timeout_seconds=section.timeout_seconds,
        max_retries=section.max_retries,
    )


def create_adapter_registry(settings: Settings) -> AdapterRegistry:
    """Factory: build every collaborator adapter from settings.

    Each settings section selects its provider independently, so real
    registries can be combined with a mock OTP service and so on.

    Raises:
        ValueError: If a section names an unknown provider.
    """
    from sellerhub.bridge.adapters import (
        COMPANY_REGISTRY,
        ONBOARDING_API,
        OTP,
        PROVIDER_REGISTRY,
        TAX_IDENTITY,
        TAX_REGISTRATION,
    )

    v = settings.verification
    plan = [
        (COMPANY_REGISTRY, v, v.company_registry_url),
        (TAX_REGISTRATION, v, v.tax_registration_url),
        (TAX_IDENTITY, v, v.tax_identity_url),
        (OTP, settings.otp, settings.otp.base_url),
        (ONBOARDING_API, settings.api, settings.api.base_url),
    ]

    registry = AdapterRegistry()
    for name, section, base_url in plan:
        provider = section.provider.lower()
        if provider not in PROVIDER_REGISTRY:
            available = ", ".join(sorted(PROVIDER_REGISTRY))
            raise ValueError(
                f"Unknown adapter provider {section.provider!r} for {name}. "
                f"Available: {available}"
            )
        cls = PROVIDER_REGISTRY[provider][name]
        registry.register(cls(_adapter_config(name, provider, section, base_url)))
    return registry
