"""Document verification against external registries.

Runs when the user advances out of the documents step. Every document that
has a number but is not yet verified is checked concurrently; the decision
to advance is taken only after all checks have settled, and only if every
one of them passed. Verified documents are never re-checked.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Awaitable, Callable

import httpx

from sellerhub.bridge.models import RegistryRecord
from sellerhub.onboarding.mapping import format_registration_date
from sellerhub.onboarding.models import (
    DocumentKind,
    FormSnapshot,
    VerificationOutcome,
    VerificationReport,
)
from sellerhub.onboarding.steps import DEFAULT_DOCUMENT_KINDS, DocumentKindConfig

if TYPE_CHECKING:
    from sellerhub.bridge.adapters import (
        CompanyRegistryAdapter,
        TaxIdentityAdapter,
        TaxRegistrationAdapter,
    )
    from sellerhub.bridge.registry import AdapterRegistry
    from sellerhub.onboarding.session import OnboardingSession

logger = logging.getLogger(__name__)

# (number, snapshot) -> registry record
Verifier = Callable[[str, FormSnapshot], Awaitable[RegistryRecord]]

# Fallback reason when the registry gives no remarks
_INACTIVE_REASONS: dict[DocumentKind, str] = {
    DocumentKind.INCORPORATION: "Company status is not active",
    DocumentKind.TAX_REGISTRATION: "GST number is not active",
    DocumentKind.TAX_ID: "Invalid PAN number",
}

# Failures that mean "the registry could not be asked"
_CALL_ERRORS = (httpx.HTTPError, KeyError, ValueError, TypeError)


def build_verifiers(
    company_registry: CompanyRegistryAdapter,
    tax_registration: TaxRegistrationAdapter,
    tax_identity: TaxIdentityAdapter,
) -> dict[DocumentKind, Verifier]:
    """Wire each verifiable document kind to its registry adapter."""

    async def incorporation(number: str, snapshot: FormSnapshot) -> RegistryRecord:
        return await company_registry.verify(number)

    async def registration(number: str, snapshot: FormSnapshot) -> RegistryRecord:
        return await tax_registration.verify(number)

    async def identity(number: str, snapshot: FormSnapshot) -> RegistryRecord:
        return await tax_identity.verify(
            number,
            snapshot.company_name,
            format_registration_date(snapshot.established_in),
        )

    return {
        DocumentKind.INCORPORATION: incorporation,
        DocumentKind.TAX_REGISTRATION: registration,
        DocumentKind.TAX_ID: identity,
    }


def verifiers_from_registry(registry: AdapterRegistry) -> dict[DocumentKind, Verifier]:
    from sellerhub.bridge.adapters import COMPANY_REGISTRY, TAX_IDENTITY, TAX_REGISTRATION

    return build_verifiers(
        registry.require(COMPANY_REGISTRY),  # type: ignore[arg-type]
        registry.require(TAX_REGISTRATION),  # type: ignore[arg-type]
        registry.require(TAX_IDENTITY),  # type: ignore[arg-type]
    )


class DocumentVerifier:
    """Fan-out/fan-in orchestrator for registry checks."""

    def __init__(
        self,
        verifiers: dict[DocumentKind, Verifier],
        kinds: dict[DocumentKind, DocumentKindConfig] | None = None,
    ) -> None:
        self._verifiers = dict(verifiers)
        self._kinds = kinds or DEFAULT_DOCUMENT_KINDS

    def pending(self, snapshot: FormSnapshot) -> list[int]:
        """Indexes of documents that have a number and are not verified yet."""
        return [
            i for i, doc in enumerate(snapshot.documents)
            if doc.number.strip() and not doc.verified
        ]

    async def verify(self, session: OnboardingSession) -> VerificationReport:
        """Check every pending document and fold the results into one decision.

        Results are written back only if the session still holds the same
        snapshot generation and the document's number was not edited while
        its check was in flight; otherwise they are dropped and the run
        reports as not passed.

        Raises:
            RuntimeError: If a run is already in flight for this session.
        """
        snapshot = session.snapshot
        indexes = self.pending(snapshot)
        if not indexes:
            return VerificationReport(passed=True)

        jobs = [
            (i, snapshot.documents[i].kind, snapshot.documents[i].number.strip())
            for i in indexes
        ]
        generation = session.begin_verification()
        logger.info(
            "Session %s: verifying %d document(s): %s",
            session.id, len(jobs), ", ".join(kind.value for _i, kind, _n in jobs),
        )
        try:
            results = await asyncio.gather(
                *(self._check(i, kind, number, snapshot) for i, kind, number in jobs),
                return_exceptions=True,
            )
        finally:
            session.end_verification()

        outcomes = [
            self._settle(job, result) for job, result in zip(jobs, results)
        ]

        if session.generation != generation:
            logger.info(
                "Session %s: discarding verification results for generation %d",
                session.id, generation,
            )
            return VerificationReport(passed=False, outcomes=list(outcomes), discarded=True)

        passed = True
        for outcome in outcomes:
            documents = session.snapshot.documents
            current = documents[outcome.index] if outcome.index < len(documents) else None
            if (
                current is None
                or current.kind != outcome.kind
                or current.number.strip() != outcome.number
            ):
                logger.info(
                    "Session %s: %s changed during verification, result dropped",
                    session.id, outcome.kind.value,
                )
                passed = False
                continue
            if outcome.valid:
                session.mark_document_verified(outcome.index)
            else:
                passed = False
                session.set_verification_error(outcome.index, outcome.message or "")

        logger.info("Session %s: verification %s", session.id, "passed" if passed else "failed")
        return VerificationReport(passed=passed, outcomes=list(outcomes))

    def _settle(
        self,
        job: tuple[int, DocumentKind, str],
        result: VerificationOutcome | BaseException,
    ) -> VerificationOutcome:
        if isinstance(result, VerificationOutcome):
            return result
        if not isinstance(result, Exception):
            raise result
        index, kind, number = job
        cfg = self._kinds.get(kind)
        label = cfg.label if cfg else kind.value
        logger.error(
            "%s verification raised unexpectedly for %s",
            label, number, exc_info=(type(result), result, result.__traceback__),
        )
        return VerificationOutcome(
            index=index,
            kind=kind,
            number=number,
            valid=False,
            message=f"{label} verification failed. Please check your {label} number.",
        )

    async def _check(
        self,
        index: int,
        kind: DocumentKind,
        number: str,
        snapshot: FormSnapshot,
    ) -> VerificationOutcome:
        cfg = self._kinds.get(kind)
        label = cfg.label if cfg else kind.value

        def outcome(valid: bool, message: str | None = None) -> VerificationOutcome:
            return VerificationOutcome(
                index=index, kind=kind, number=number, valid=valid, message=message
            )

        if cfg is None or not cfg.requires_verification:
            return outcome(True)

        verifier = self._verifiers.get(kind)
        if verifier is None:
            logger.error("No verifier configured for %s", kind.value)
            return outcome(False, f"{label} verification is currently unavailable.")

        try:
            record = await verifier(number, snapshot)
        except _CALL_ERRORS as exc:
            logger.warning("%s verification call failed for %s: %s", label, number, exc)
            return outcome(
                False, f"{label} verification failed. Please check your {label} number."
            )

        if record.active:
            return outcome(True)
        reason = record.remarks or _INACTIVE_REASONS.get(kind, "Status is not active")
        return outcome(False, f"{label} verification failed: {reason}")
