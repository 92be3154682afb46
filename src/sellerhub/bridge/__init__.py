"""Bridge layer: async HTTP collaborators behind a common adapter interface."""

from sellerhub.bridge.base import BaseBridgeAdapter, BridgeAdapter
from sellerhub.bridge.models import AdapterConfig, ConnectionStatus, RegistryRecord
from sellerhub.bridge.registry import AdapterRegistry, create_adapter_registry

__all__ = [
    "AdapterConfig",
    "AdapterRegistry",
    "BaseBridgeAdapter",
    "BridgeAdapter",
    "ConnectionStatus",
    "RegistryRecord",
    "create_adapter_registry",
]
