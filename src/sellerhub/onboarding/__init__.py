"""Onboarding step-flow engine.

Step registry, completion checks, navigation guard, document verification
and submission for the company onboarding wizard.
"""

from sellerhub.onboarding.completion import (
    are_all_steps_completed,
    compute_first_incomplete_step,
    is_step_complete,
)
from sellerhub.onboarding.navigation import NavigationGuard, can_access_step
from sellerhub.onboarding.session import OnboardingSession
from sellerhub.onboarding.steps import fields_for_step
from sellerhub.onboarding.submission import SubmissionCoordinator
from sellerhub.onboarding.verification import DocumentVerifier

__all__ = [
    "DocumentVerifier",
    "NavigationGuard",
    "OnboardingSession",
    "SubmissionCoordinator",
    "are_all_steps_completed",
    "can_access_step",
    "compute_first_incomplete_step",
    "fields_for_step",
    "is_step_complete",
]
