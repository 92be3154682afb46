"""OTP round trip for the owner's phone number and email.

This is the only code path that sets ``phone_verified`` / ``email_verified``.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import httpx

from sellerhub.onboarding.models import OtpChannel, OtpResult
from sellerhub.onboarding.validators.common import validate_email, validate_phone

if TYPE_CHECKING:
    from sellerhub.bridge.adapters import OtpAdapter
    from sellerhub.onboarding.session import OnboardingSession

logger = logging.getLogger(__name__)

_LABELS: dict[OtpChannel, str] = {
    OtpChannel.PHONE: "Phone number",
    OtpChannel.EMAIL: "Email",
}


def _target(session: OnboardingSession, channel: OtpChannel) -> str:
    snapshot = session.snapshot
    value = snapshot.phone_number if channel == OtpChannel.PHONE else snapshot.email
    return value.strip()


def _target_error(channel: OtpChannel, target: str) -> str | None:
    label = _LABELS[channel]
    if not target:
        return f"Please enter your {label.lower()} first."
    if channel == OtpChannel.PHONE:
        return validate_phone(target, label=label)
    return validate_email(target)


class OtpService:
    """Sends and checks OTP codes through the OTP adapter."""

    def __init__(self, adapter: OtpAdapter) -> None:
        self._adapter = adapter

    async def send(self, session: OnboardingSession, channel: OtpChannel) -> OtpResult:
        target = _target(session, channel)
        error = _target_error(channel, target)
        if error:
            return OtpResult(success=False, message=error)

        try:
            sent = await self._adapter.send(channel.value, target)
        except (httpx.HTTPError, ValueError) as exc:
            logger.warning("OTP send on %s failed: %s", channel.value, exc)
            return OtpResult(success=False, message="Failed to send OTP. Please try again.")

        if not sent:
            return OtpResult(success=False, message="Failed to send OTP. Please try again.")
        return OtpResult(success=True, message=f"OTP sent to your {_LABELS[channel].lower()}.")

    async def verify(
        self, session: OnboardingSession, channel: OtpChannel, code: str
    ) -> OtpResult:
        label = _LABELS[channel]
        target = _target(session, channel)
        if not code.strip():
            return OtpResult(success=False, message="Please enter the OTP.")
        error = _target_error(channel, target)
        if error:
            return OtpResult(success=False, message=error)

        generation = session.generation
        try:
            ok = await self._adapter.verify(channel.value, target, code.strip())
        except (httpx.HTTPError, ValueError) as exc:
            logger.warning("OTP verify on %s failed: %s", channel.value, exc)
            return OtpResult(success=False, message="Failed to verify OTP. Please try again.")

        if not ok:
            return OtpResult(success=False, message="Invalid OTP. Please try again.")
        if session.generation != generation or _target(session, channel) != target:
            logger.info("Session %s: %s changed during OTP verification", session.id, label)
            return OtpResult(
                success=False,
                message=f"{label} changed during verification. Please verify again.",
            )

        session.mark_contact_verified(channel)
        return OtpResult(success=True, message=f"{label} verified successfully.")
