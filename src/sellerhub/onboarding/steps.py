"""Step registry: the fixed step order and the fields each step owns.

Everything here is pure. The registry decides which field paths apply to a
step for a given snapshot and mode; it never judges the values.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable

import yaml
from pydantic import BaseModel, Field

from sellerhub.core.types import FormMode
from sellerhub.onboarding.models import (
    OTHER_PLATFORM,
    Document,
    DocumentKind,
    FormSnapshot,
    StepKey,
)

STEP_ORDER: tuple[StepKey, ...] = tuple(StepKey)
TERMINAL_STEP = StepKey.THANK_YOU
FORM_STEPS: tuple[StepKey, ...] = STEP_ORDER[:-1]
LAST_FORM_STEP = FORM_STEPS[-1]


class StepDescription(BaseModel):
    step_title: str
    title: str
    description: str = ""


STEP_DESCRIPTIONS: dict[StepKey, StepDescription] = {
    StepKey.COMPANY_DETAILS: StepDescription(
        step_title="Company information",
        title="Build Your Business Identity",
        description="Lay the foundation with your core company details.",
    ),
    StepKey.ADDRESS_DETAILS: StepDescription(
        step_title="Address information",
        title="Tell Us Your Address",
        description="We need your registered address to keep our records accurate and compliant.",
    ),
    StepKey.BRAND_DETAILS: StepDescription(
        step_title="Brand details",
        title="Brand Identity",
        description="Define your brand identity and logo.",
    ),
    StepKey.DOCUMENT_DETAILS: StepDescription(
        step_title="Documents information",
        title="Prove Your Legitimacy",
        description="Upload your legal documents for verification.",
    ),
    StepKey.PERSONAL_DETAILS: StepDescription(
        step_title="Personal",
        title="Build your personal space",
        description="Your journey with us starts here. We're excited to have you on board!",
    ),
    StepKey.THANK_YOU: StepDescription(
        step_title="Thank You",
        title="Thank You for Submitting Your Company Profile!",
        description=(
            "Your details have been successfully submitted for review. "
            "We'll be in touch soon."
        ),
    ),
}


def step_title(step: StepKey) -> str:
    return STEP_DESCRIPTIONS[step].step_title


def step_index(step: StepKey) -> int:
    return STEP_ORDER.index(step)


# --- Document kinds ---


class DocumentKindConfig(BaseModel):
    """Per-kind rules for a registration document."""

    kind: DocumentKind
    label: str
    title: str
    number_label: str = ""
    upload_label: str = ""
    requires_number: bool = False
    requires_upload: bool = False
    requires_verification: bool = False
    show_number: bool = True
    skip_for_business_types: list[str] = Field(default_factory=list)
    new_company_only: bool = False


DEFAULT_DOCUMENT_KINDS: dict[DocumentKind, DocumentKindConfig] = {
    cfg.kind: cfg
    for cfg in (
        DocumentKindConfig(
            kind=DocumentKind.INCORPORATION,
            label="CIN",
            title="Certificate of Incorporation",
            number_label="CIN number",
            upload_label="CIN document upload",
            requires_number=True,
            requires_upload=True,
            requires_verification=True,
            skip_for_business_types=["proprietor"],
            new_company_only=True,
        ),
        DocumentKindConfig(
            kind=DocumentKind.TAX_ID,
            label="PAN",
            title="Permanent Account Number (PAN)",
            number_label="PAN number",
            upload_label="PAN document upload",
            requires_number=True,
            requires_upload=True,
            requires_verification=True,
            new_company_only=True,
        ),
        DocumentKindConfig(
            kind=DocumentKind.TAX_REGISTRATION,
            label="GST",
            title="Goods & Services Tax (GST)",
            number_label="GST number",
            upload_label="GST document upload",
            requires_number=True,
            requires_upload=True,
            requires_verification=True,
        ),
        DocumentKindConfig(
            kind=DocumentKind.MICRO_ENTERPRISE,
            label="MSME",
            title="MSME Registration",
            number_label="MSME number",
            upload_label="MSME document upload",
        ),
        DocumentKindConfig(
            kind=DocumentKind.FOOD_LICENSE,
            label="FSSAI",
            title="FSSAI Registration",
            number_label="FSSAI number",
            upload_label="FSSAI document upload",
        ),
        DocumentKindConfig(
            kind=DocumentKind.DRUG_LICENSE,
            label="Drug License",
            title="Drug License",
            number_label="Drug License number",
            upload_label="Drug License document upload",
        ),
        DocumentKindConfig(
            kind=DocumentKind.BRAND_AUTHORIZATION,
            label="Brand authorisation",
            title="Brand Authorisation Letter",
            upload_label="Brand authorisation document upload",
            requires_upload=True,
            show_number=False,
        ),
    )
}


def load_document_kinds(
    path: str | Path | None = None,
) -> dict[DocumentKind, DocumentKindConfig]:
    """Return the document kind table, applying overrides from a YAML file.

    The file maps wire kind names to partial configs::

        document_kinds:
          msme:
            requires_verification: true

    A missing file leaves the defaults untouched.
    """
    kinds = {kind: cfg.model_copy() for kind, cfg in DEFAULT_DOCUMENT_KINDS.items()}
    if path is None or not Path(path).exists():
        return kinds
    with open(path) as fh:
        data = yaml.safe_load(fh) or {}
    for name, overrides in (data.get("document_kinds") or {}).items():
        kind = DocumentKind(name)
        kinds[kind] = kinds[kind].model_copy(update=overrides or {})
    return kinds


def default_documents(
    kinds: dict[DocumentKind, DocumentKindConfig] | None = None,
) -> list[Document]:
    """One empty document per kind; kinds without a registry check start verified."""
    kinds = kinds or DEFAULT_DOCUMENT_KINDS
    return [
        Document(kind=cfg.kind, verified=not cfg.requires_verification)
        for cfg in kinds.values()
    ]


def new_snapshot(
    kinds: dict[DocumentKind, DocumentKindConfig] | None = None,
) -> FormSnapshot:
    return FormSnapshot(documents=default_documents(kinds))


def is_document_required(snapshot: FormSnapshot, cfg: DocumentKindConfig) -> bool:
    if not (cfg.requires_number or cfg.requires_upload):
        return False
    if snapshot.business_type in cfg.skip_for_business_types:
        return False
    if cfg.new_company_only and not snapshot.is_creating_new_company:
        return False
    return True


def required_document_kinds(
    snapshot: FormSnapshot,
    kinds: dict[DocumentKind, DocumentKindConfig] | None = None,
) -> list[DocumentKind]:
    kinds = kinds or DEFAULT_DOCUMENT_KINDS
    return [kind for kind, cfg in kinds.items() if is_document_required(snapshot, cfg)]


# --- Field specs ---

# (snapshot, mode, item) -> bool; item is the collection entry for
# per-row fields and None for scalar fields.
Predicate = Callable[[FormSnapshot, FormMode, Any], bool]


def _always(snapshot: FormSnapshot, mode: FormMode, item: Any) -> bool:
    return True


def _never(snapshot: FormSnapshot, mode: FormMode, item: Any) -> bool:
    return False


def _subsidiary(snapshot: FormSnapshot, mode: FormMode, item: Any) -> bool:
    return snapshot.subsidiary


def _creating(snapshot: FormSnapshot, mode: FormMode, item: Any) -> bool:
    return mode == FormMode.ADD


def _other_platform(snapshot: FormSnapshot, mode: FormMode, item: Any) -> bool:
    return item is not None and item.platform.strip().lower() == OTHER_PLATFORM


@dataclass(frozen=True)
class FieldSpec:
    """A form field and the predicates deciding whether it applies / is required."""

    name: str
    label: str
    required: Predicate = _always
    applies: Predicate = _always
    validators: tuple[str, ...] = ()


COMPANY_FIELDS: tuple[FieldSpec, ...] = (
    FieldSpec("company_name", "Company name"),
    FieldSpec("category", "Category"),
    FieldSpec("business_type", "Business type"),
    FieldSpec("established_in", "Established year", validators=("month", "not_future_month")),
    FieldSpec("website", "Website", required=_never, validators=("url",)),
    FieldSpec("is_subsidiary", "Subsidiary", validators=("choice:options=true|false",)),
    FieldSpec("headquarter_location", "Headquarter location", applies=_subsidiary),
    FieldSpec("description", "Description", required=_never),
    FieldSpec("logo_files", "Company logo", required=_never, validators=("image_files",)),
)

ADDRESS_FIELDS: tuple[FieldSpec, ...] = (
    FieldSpec("address_type", "Address type", validators=("choice:options=registered|office",)),
    FieldSpec("address_line", "Address"),
    FieldSpec("landmark", "Landmark"),
    FieldSpec("landline_number", "Landline number", validators=("phone",)),
    FieldSpec("country", "Country"),
    FieldSpec("state", "State"),
    FieldSpec("city", "City"),
    FieldSpec("postal_code", "Postal code", validators=("postal_code",)),
)

BRAND_FIELDS: tuple[FieldSpec, ...] = (
    FieldSpec("brand_name", "Brand name"),
    FieldSpec("brand_type", "Category"),
    FieldSpec("total_skus", "Total SKUs", validators=("numeric:min_val=0",)),
    FieldSpec("average_selling_price", "Average selling price", validators=("numeric:min_val=0",)),
    FieldSpec("marketing_budget", "Marketing budget", validators=("numeric:min_val=0",)),
    FieldSpec("website_url", "Website", required=_never, validators=("url",)),
    FieldSpec("instagram_url", "Instagram", required=_never, validators=("url",)),
    FieldSpec("facebook_url", "Facebook", required=_never, validators=("url",)),
    FieldSpec("youtube_url", "YouTube", required=_never, validators=("url",)),
    FieldSpec("brand_logo_files", "Brand logo", required=_never, validators=("image_files",)),
)

SELLING_PLATFORM_FIELDS: tuple[FieldSpec, ...] = (
    FieldSpec("platform", "Platform"),
    FieldSpec("url", "URL", required=_other_platform, validators=("url",)),
)

PERSONAL_FIELDS: tuple[FieldSpec, ...] = (
    FieldSpec("name", "Name"),
    FieldSpec("email", "Email", validators=("email",)),
    FieldSpec("designation", "Designation"),
    FieldSpec("phone_number", "Phone number", validators=("phone",)),
    FieldSpec("password", "Password", applies=_creating, validators=("password",)),
    FieldSpec("phone_verified", "Phone number", validators=("verified",)),
    FieldSpec("email_verified", "Email", validators=("verified",)),
)


def document_field_specs(
    snapshot: FormSnapshot,
    cfg: DocumentKindConfig,
) -> tuple[FieldSpec, ...]:
    required = is_document_required(snapshot, cfg)
    specs: list[FieldSpec] = []
    if cfg.show_number:
        specs.append(
            FieldSpec(
                "number",
                cfg.number_label,
                required=_always if required and cfg.requires_number else _never,
            )
        )
    specs.append(
        FieldSpec(
            "url",
            cfg.upload_label,
            required=_always if required and cfg.requires_upload else _never,
        )
    )
    specs.append(
        FieldSpec("url_files", cfg.upload_label, required=_never, validators=("pdf_files",))
    )
    return tuple(specs)


def field_specs_for_step(
    step: StepKey,
    snapshot: FormSnapshot,
    mode: FormMode = FormMode.ADD,
    kinds: dict[DocumentKind, DocumentKindConfig] | None = None,
) -> list[tuple[str, FieldSpec, Any]]:
    """Expand a step's field specs into ``(path, spec, item)`` triples.

    Only specs whose ``applies`` predicate currently holds are returned.
    """
    kinds = kinds or DEFAULT_DOCUMENT_KINDS
    entries: list[tuple[str, FieldSpec, Any]] = []

    def add(prefix: str, specs: tuple[FieldSpec, ...], item: Any = None) -> None:
        for spec in specs:
            if spec.applies(snapshot, mode, item):
                entries.append((f"{prefix}{spec.name}", spec, item))

    if step == StepKey.COMPANY_DETAILS:
        add("", COMPANY_FIELDS)
    elif step == StepKey.ADDRESS_DETAILS:
        for i, address in enumerate(snapshot.addresses):
            add(f"addresses.{i}.", ADDRESS_FIELDS, address)
    elif step == StepKey.BRAND_DETAILS:
        add("", BRAND_FIELDS)
        for i, platform in enumerate(snapshot.selling_on):
            add(f"selling_on.{i}.", SELLING_PLATFORM_FIELDS, platform)
    elif step == StepKey.DOCUMENT_DETAILS:
        for i, doc in enumerate(snapshot.documents):
            cfg = kinds.get(doc.kind)
            if cfg is not None:
                add(f"documents.{i}.", document_field_specs(snapshot, cfg), doc)
        # Verification needs these as auxiliary inputs
        if not snapshot.company_name.strip():
            entries.append(("company_name", COMPANY_FIELDS[0], None))
        if not snapshot.established_in.strip():
            entries.append(("established_in", COMPANY_FIELDS[3], None))
    elif step == StepKey.PERSONAL_DETAILS:
        add("", PERSONAL_FIELDS)
    return entries


def fields_for_step(
    step: StepKey,
    snapshot: FormSnapshot,
    mode: FormMode = FormMode.ADD,
    kinds: dict[DocumentKind, DocumentKindConfig] | None = None,
) -> list[str]:
    """Ordered field paths that belong to ``step`` for this snapshot and mode."""
    return [path for path, _spec, _item in field_specs_for_step(step, snapshot, mode, kinds)]


def field_value(snapshot: FormSnapshot, path: str) -> Any:
    """Resolve a dotted field path against the snapshot.

    Upload fields count an attached file as a value: ``logo`` resolves to
    the first filename in ``logo_files`` when no URL is stored yet.

    Raises:
        KeyError: If the path does not name a field.
    """
    target: Any = snapshot
    parts = path.split(".")
    for part in parts[:-1]:
        target = step_into(target, part, path)
    leaf = parts[-1]
    if isinstance(target, list):
        return step_into(target, leaf, path)
    if leaf not in type(target).model_fields:
        raise KeyError(path)
    value = getattr(target, leaf)
    files = getattr(target, f"{leaf}_files", None)
    if isinstance(value, str) and not value.strip() and files:
        return files[0].filename
    return value


def step_into(target: Any, part: str, path: str) -> Any:
    if isinstance(target, list):
        try:
            return target[int(part)]
        except (ValueError, IndexError):
            raise KeyError(path) from None
    if not isinstance(target, BaseModel) or part not in type(target).model_fields:
        raise KeyError(path)
    return getattr(target, part)
