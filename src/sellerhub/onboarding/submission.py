"""Submission coordinator: packages the snapshot and drives the terminal transition."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

import httpx

from sellerhub.core.types import FormMode
from sellerhub.onboarding.completion import are_all_steps_completed
from sellerhub.onboarding.mapping import DEFAULT_ROLE_ID, build_submission, encode_multipart
from sellerhub.onboarding.models import SubmissionResult
from sellerhub.onboarding.navigation import TERMINAL_BLOCKED_MESSAGE
from sellerhub.onboarding.steps import LAST_FORM_STEP, TERMINAL_STEP, step_title
from sellerhub.onboarding.validation import ValidationEngine

if TYPE_CHECKING:
    from sellerhub.bridge.adapters import OnboardingApiAdapter
    from sellerhub.onboarding.session import OnboardingSession

logger = logging.getLogger(__name__)

SUCCESS_MESSAGE = "Profile submitted successfully!"
FAILURE_MESSAGE = "Failed to submit profile. Please try again."
MISSING_IDS_MESSAGE = "Missing required data for update"


class SubmissionCoordinator:
    """Sends the create/update request and applies its outcome to the session.

    There is no automatic retry: a failed submission leaves the snapshot
    and current step untouched for the user to submit again.
    """

    def __init__(
        self,
        api: OnboardingApiAdapter,
        validation: ValidationEngine,
        role_id: str = DEFAULT_ROLE_ID,
    ) -> None:
        self._api = api
        self._validation = validation
        self._role_id = role_id

    async def submit(
        self,
        payload: dict[str, Any],
        mode: FormMode,
        company_id: str | None = None,
        location_id: str | None = None,
    ) -> SubmissionResult:
        """Send a built payload. Never raises; failures come back as results."""
        if mode == FormMode.VIEW:
            return SubmissionResult(success=False, message="This form is read-only.")
        if mode == FormMode.EDIT and not (company_id and location_id):
            return SubmissionResult(success=False, message=MISSING_IDS_MESSAGE)

        data, files = encode_multipart(payload)
        try:
            if mode == FormMode.EDIT:
                body = await self._api.update(company_id, location_id, data, files)  # type: ignore[arg-type]
            else:
                body = await self._api.create(data, files)
        except (httpx.HTTPError, ValueError) as exc:
            logger.error("Onboarding submission failed: %s", exc)
            return SubmissionResult(success=False, message=FAILURE_MESSAGE)

        if body.get("success") is True:
            logger.info("Onboarding %s accepted", mode.value)
            return SubmissionResult(
                success=True,
                message=body.get("message") or SUCCESS_MESSAGE,
                data=body.get("data"),
            )

        logger.info("Onboarding %s rejected: %s", mode.value, body.get("message"))
        return SubmissionResult(success=False, message=body.get("message") or FAILURE_MESSAGE)

    async def finish(self, session: OnboardingSession) -> SubmissionResult:
        """Validate the whole form, submit it, and on success move to the terminal step.

        On success the snapshot is replaced by a fresh default one so the same
        data cannot be submitted twice.
        """
        if session.current_step != LAST_FORM_STEP:
            return SubmissionResult(
                success=False,
                message=f"The form can only be submitted from the {step_title(LAST_FORM_STEP)} step.",
            )

        validation = self._validation.validate_all(session.snapshot, session.mode)
        session.set_field_errors(validation.errors)
        if not validation.valid:
            return SubmissionResult(
                success=False,
                message="Please fix the highlighted fields before submitting.",
                data={"errors": validation.errors},
            )
        if not are_all_steps_completed(session.snapshot, session.mode, session.kinds):
            return SubmissionResult(success=False, message=TERMINAL_BLOCKED_MESSAGE)

        payload = build_submission(session.snapshot, self._role_id)
        result = await self.submit(payload, session.mode, session.company_id, session.location_id)
        if result.success:
            session.reset()
            session.move_to(TERMINAL_STEP)
        return result
