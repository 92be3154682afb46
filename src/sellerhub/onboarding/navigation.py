"""Navigation guard for the onboarding wizard.

Backward moves are always allowed and never re-run verification. Forward
jumps are allowed only when every earlier step passes the strict check.
``next`` validates the current step's own fields and, out of the documents
step, waits for registry verification before advancing.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from sellerhub.core.types import FormMode
from sellerhub.onboarding.completion import are_all_steps_completed, is_step_complete
from sellerhub.onboarding.models import DocumentKind, FormSnapshot, NavigationResult, StepKey
from sellerhub.onboarding.steps import (
    LAST_FORM_STEP,
    STEP_ORDER,
    TERMINAL_STEP,
    DocumentKindConfig,
    step_index,
    step_title,
)
from sellerhub.onboarding.validation import ValidationEngine
from sellerhub.onboarding.verification import DocumentVerifier

if TYPE_CHECKING:
    from sellerhub.onboarding.session import OnboardingSession

logger = logging.getLogger(__name__)

TERMINAL_BLOCKED_MESSAGE = "Please complete all steps before accessing the thank you page"
VERIFYING_MESSAGE = "Verification is in progress. Please wait."
SUBMIT_TO_FINISH_MESSAGE = "Please submit the form to complete onboarding."


def first_blocking_step(
    snapshot: FormSnapshot,
    target: StepKey,
    mode: FormMode = FormMode.ADD,
    kinds: dict[DocumentKind, DocumentKindConfig] | None = None,
) -> StepKey | None:
    """First step before ``target`` that fails the strict check, if any."""
    for step in STEP_ORDER[: step_index(target)]:
        if not is_step_complete(snapshot, step, strict=True, mode=mode, kinds=kinds):
            return step
    return None


def can_access_step(
    snapshot: FormSnapshot,
    target: StepKey,
    mode: FormMode = FormMode.ADD,
    kinds: dict[DocumentKind, DocumentKindConfig] | None = None,
) -> bool:
    if target == STEP_ORDER[0]:
        return True
    if target == TERMINAL_STEP:
        return are_all_steps_completed(snapshot, mode, kinds)
    return first_blocking_step(snapshot, target, mode, kinds) is None


def blocked_message(blocking: StepKey) -> str:
    return f"Please complete {step_title(blocking)} first before proceeding to the next step."


class NavigationGuard:
    """Applies step-change requests to a session."""

    def __init__(self, validation: ValidationEngine, verifier: DocumentVerifier) -> None:
        self._validation = validation
        self._verifier = verifier

    def go_to(self, session: OnboardingSession, target: StepKey) -> NavigationResult:
        """Jump to ``target``; forward jumps must pass :func:`can_access_step`."""
        current = session.current_step
        if step_index(target) <= step_index(current):
            session.move_to(target)
            return NavigationResult(allowed=True, step=target)

        snapshot = session.snapshot
        if can_access_step(snapshot, target, session.mode, session.kinds):
            session.move_to(target)
            return NavigationResult(allowed=True, step=target)

        blocking = first_blocking_step(snapshot, target, session.mode, session.kinds)
        message = (
            TERMINAL_BLOCKED_MESSAGE
            if target == TERMINAL_STEP
            else blocked_message(blocking or current)
        )
        logger.debug("Session %s: %s -> %s blocked by %s", session.id, current, target, blocking)
        return NavigationResult(
            allowed=False, step=current, blocking_step=blocking, message=message
        )

    def back(self, session: OnboardingSession) -> NavigationResult:
        index = step_index(session.current_step)
        if index == 0:
            return NavigationResult(allowed=True, step=session.current_step)
        return self.go_to(session, STEP_ORDER[index - 1])

    async def next(self, session: OnboardingSession) -> NavigationResult:
        """Validate the current step and advance by one.

        Out of the documents step this awaits the verification orchestrator.
        The last form step never advances here; the terminal step is reached
        by submitting.
        """
        current = session.current_step
        if session.is_verifying:
            return NavigationResult(allowed=False, step=current, message=VERIFYING_MESSAGE)
        if current == TERMINAL_STEP:
            return NavigationResult(allowed=False, step=current)

        result = self._validation.validate_step(session.snapshot, current, session.mode)
        session.set_field_errors(result.errors)
        if not result.valid:
            return NavigationResult(
                allowed=False,
                step=current,
                blocking_step=current,
                message=f"Please fill all required fields in {step_title(current)}",
                errors=result.errors,
            )

        if current == LAST_FORM_STEP:
            return NavigationResult(allowed=False, step=current, message=SUBMIT_TO_FINISH_MESSAGE)

        if current == StepKey.DOCUMENT_DETAILS:
            report = await self._verifier.verify(session)
            if not report.passed:
                if report.discarded:
                    message = "The form changed while documents were being verified. Please try again."
                else:
                    message = "Document verification failed. Please check the highlighted documents."
                return NavigationResult(
                    allowed=False,
                    step=session.current_step,
                    blocking_step=StepKey.DOCUMENT_DETAILS,
                    message=message,
                    errors=report.errors,
                )

        target = STEP_ORDER[step_index(current) + 1]
        session.move_to(target)
        return NavigationResult(allowed=True, step=target)
