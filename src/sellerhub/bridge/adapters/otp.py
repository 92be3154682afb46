"""HTTP adapter for the one-time-password service."""

from __future__ import annotations

from typing import Any

from sellerhub.bridge.base import BaseBridgeAdapter
from sellerhub.bridge.models import AdapterConfig

# Wire segment and request key per channel
_CHANNELS: dict[str, tuple[str, str]] = {
    "phone": ("mobile", "phoneNumber"),
    "email": ("email", "email"),
}


def channel_route(channel: str) -> tuple[str, str]:
    try:
        return _CHANNELS[channel]
    except KeyError:
        raise ValueError(f"Unknown OTP channel: {channel!r}") from None


class OtpAdapter(BaseBridgeAdapter):
    """Sends and checks OTP codes over ``/otp/send/{channel}`` and ``/otp/verify/{channel}``."""

    def __init__(self, config: AdapterConfig | None = None, **kwargs: Any) -> None:
        if config is None:
            config = AdapterConfig(name="otp", provider="http", description="OTP send/verify")
        super().__init__(config, **kwargs)

    def _get_operations(self) -> list[str]:
        return ["send", "verify"]

    async def send(self, channel: str, target: str) -> bool:
        segment, key = channel_route(channel)
        body = await self._post_json(f"/otp/send/{segment}", {key: target})
        return bool(body.get("success", True))

    async def verify(self, channel: str, target: str, code: str) -> bool:
        segment, key = channel_route(channel)
        body = await self._post_json(f"/otp/verify/{segment}", {key: target, "otp": code})
        return body.get("success") is True
