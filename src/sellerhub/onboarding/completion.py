"""Step completion checks.

Two bars exist. The lenient bar decides whether a user may move past a
step; the strict bar adds file and verification requirements and gates the
terminal step. Nothing here raises or performs I/O, and nothing is cached:
every call reads the snapshot as it is now.
"""

from __future__ import annotations

from sellerhub.core.types import FormMode
from sellerhub.onboarding.models import AddressType, DocumentKind, FormSnapshot, StepKey
from sellerhub.onboarding.steps import (
    DEFAULT_DOCUMENT_KINDS,
    FORM_STEPS,
    TERMINAL_STEP,
    DocumentKindConfig,
    is_document_required,
)
from sellerhub.onboarding.validators.common import is_blank

_ADDRESS_FIELDS = (
    "address_line",
    "landmark",
    "landline_number",
    "country",
    "state",
    "city",
    "postal_code",
)


def _filled(*values: object) -> bool:
    return all(not is_blank(v) for v in values)


def _company_complete(snapshot: FormSnapshot, strict: bool) -> bool:
    if not _filled(
        snapshot.company_name,
        snapshot.category,
        snapshot.business_type,
        snapshot.established_in,
    ):
        return False
    if snapshot.subsidiary and not _filled(snapshot.headquarter_location):
        return False
    if strict and not (snapshot.logo_files or _filled(snapshot.logo)):
        return False
    return True


def _addresses_complete(snapshot: FormSnapshot) -> bool:
    if not snapshot.addresses:
        return False
    registered = 0
    for address in snapshot.addresses:
        if not _filled(*(getattr(address, name) for name in _ADDRESS_FIELDS)):
            return False
        if address.address_type == AddressType.REGISTERED:
            registered += 1
    return registered == 1


def _brand_complete(snapshot: FormSnapshot) -> bool:
    return _filled(
        snapshot.brand_name,
        snapshot.total_skus,
        snapshot.brand_type,
        snapshot.average_selling_price,
        snapshot.marketing_budget,
    )


def _documents_complete(
    snapshot: FormSnapshot,
    strict: bool,
    kinds: dict[DocumentKind, DocumentKindConfig],
) -> bool:
    for kind, cfg in kinds.items():
        if not is_document_required(snapshot, cfg):
            continue
        found = snapshot.find_document(kind)
        if found is None:
            return False
        _index, doc = found
        numbered = cfg.show_number and cfg.requires_number
        if numbered and not _filled(doc.number):
            return False
        if cfg.requires_upload and not doc.has_upload:
            return False
        if strict and numbered and cfg.requires_verification and not doc.verified:
            return False
    return True


def _personal_complete(snapshot: FormSnapshot, mode: FormMode) -> bool:
    if not _filled(
        snapshot.name,
        snapshot.email,
        snapshot.designation,
        snapshot.phone_number,
    ):
        return False
    if mode == FormMode.ADD and not _filled(snapshot.password):
        return False
    return snapshot.phone_verified and snapshot.email_verified


def is_step_complete(
    snapshot: FormSnapshot,
    step: StepKey,
    strict: bool = False,
    mode: FormMode = FormMode.ADD,
    kinds: dict[DocumentKind, DocumentKindConfig] | None = None,
) -> bool:
    """Whether ``step`` is complete for this snapshot.

    The terminal step is never complete as a form step.
    """
    kinds = kinds or DEFAULT_DOCUMENT_KINDS
    if step == StepKey.COMPANY_DETAILS:
        return _company_complete(snapshot, strict)
    if step == StepKey.ADDRESS_DETAILS:
        return _addresses_complete(snapshot)
    if step == StepKey.BRAND_DETAILS:
        return _brand_complete(snapshot)
    if step == StepKey.DOCUMENT_DETAILS:
        return _documents_complete(snapshot, strict, kinds)
    if step == StepKey.PERSONAL_DETAILS:
        return _personal_complete(snapshot, mode)
    return False


def compute_first_incomplete_step(
    snapshot: FormSnapshot,
    mode: FormMode = FormMode.ADD,
    kinds: dict[DocumentKind, DocumentKindConfig] | None = None,
) -> StepKey:
    """First form step failing the lenient check, or the terminal step."""
    for step in FORM_STEPS:
        if not is_step_complete(snapshot, step, strict=False, mode=mode, kinds=kinds):
            return step
    return TERMINAL_STEP


def are_all_steps_completed(
    snapshot: FormSnapshot,
    mode: FormMode = FormMode.ADD,
    kinds: dict[DocumentKind, DocumentKindConfig] | None = None,
) -> bool:
    return all(
        is_step_complete(snapshot, step, strict=True, mode=mode, kinds=kinds)
        for step in FORM_STEPS
    )


def completion_map(
    snapshot: FormSnapshot,
    strict: bool = False,
    mode: FormMode = FormMode.ADD,
    kinds: dict[DocumentKind, DocumentKindConfig] | None = None,
) -> dict[StepKey, bool]:
    return {
        step: is_step_complete(snapshot, step, strict=strict, mode=mode, kinds=kinds)
        for step in FORM_STEPS
    }
