"""Validation engine for onboarding steps."""

from __future__ import annotations

from typing import Any, Callable, Iterable

from sellerhub.core.types import FormMode
from sellerhub.onboarding.models import DocumentKind, FormSnapshot, StepKey, ValidationResult
from sellerhub.onboarding.steps import (
    DEFAULT_DOCUMENT_KINDS,
    FORM_STEPS,
    DocumentKindConfig,
    FieldSpec,
    field_specs_for_step,
    field_value,
)
from sellerhub.onboarding.validators.common import VALIDATORS
from sellerhub.onboarding.validators.cross_field import CrossFieldValidator

# Collection roots owned by a step; errors about the collection as a whole
# (e.g. no registered address) are reported under these keys.
STEP_COLLECTIONS: dict[StepKey, tuple[str, ...]] = {
    StepKey.ADDRESS_DETAILS: ("addresses",),
    StepKey.BRAND_DETAILS: ("selling_on",),
    StepKey.DOCUMENT_DETAILS: ("documents",),
}

TERMS_FIELD = "agree_terms_conditions"


def _parse_validator(validator_name: str) -> tuple[str, dict[str, Any]]:
    # Validator name may include params like "numeric:min_val=0"
    parts = validator_name.split(":", 1)
    params: dict[str, Any] = {}
    if len(parts) > 1:
        for pair in parts[1].split(","):
            k, _, v = pair.partition("=")
            params[k.strip()] = v.strip()
    return parts[0], params


class ValidationEngine:
    """Registry-based validation engine.

    Field-level checks come from each step's field specs; snapshot-wide
    checks come from the cross-field validator. Every entry point can be
    restricted to a set of field paths so a step only reports on the fields
    it owns.
    """

    def __init__(
        self,
        kinds: dict[DocumentKind, DocumentKindConfig] | None = None,
        cross_field: CrossFieldValidator | None = None,
    ) -> None:
        self._validators: dict[str, Callable[..., str | None]] = dict(VALIDATORS)
        self._kinds = kinds or DEFAULT_DOCUMENT_KINDS
        self._cross_field = cross_field or CrossFieldValidator()

    @property
    def kinds(self) -> dict[DocumentKind, DocumentKindConfig]:
        return self._kinds

    def register(self, name: str, fn: Callable[..., str | None]) -> None:
        self._validators[name] = fn

    def validate_field(
        self,
        spec: FieldSpec,
        value: Any,
        required: bool = False,
        params: dict[str, Any] | None = None,
    ) -> list[str]:
        """Validate a single field value. Returns list of error messages."""
        errors: list[str] = []
        params = {"label": spec.label, **(params or {})}

        if required:
            err = self._validators["required"](value, label=spec.label)
            if err:
                errors.append(err)
                return errors

        for validator_name in spec.validators:
            name, extra_params = _parse_validator(validator_name)
            fn = self._validators.get(name)
            if fn is None:
                continue
            err = fn(value, **{**params, **extra_params})
            if err:
                errors.append(err)

        return errors

    def validate_fields(
        self,
        snapshot: FormSnapshot,
        names: Iterable[str],
        mode: FormMode = FormMode.ADD,
    ) -> ValidationResult:
        """Validate the given field paths, field-level and cross-field."""
        wanted = set(names)
        all_errors: dict[str, list[str]] = {}

        for step in FORM_STEPS:
            for path, spec, item in field_specs_for_step(step, snapshot, mode, self._kinds):
                if path not in wanted or path in all_errors:
                    continue
                field_errors = self.validate_field(
                    spec,
                    field_value(snapshot, path),
                    required=spec.required(snapshot, mode, item),
                )
                if field_errors:
                    all_errors[path] = field_errors

        for path, msgs in self._cross_field.validate(snapshot, mode).items():
            if path in wanted:
                all_errors.setdefault(path, []).extend(
                    m for m in msgs if m not in all_errors.get(path, [])
                )

        return ValidationResult(valid=len(all_errors) == 0, errors=all_errors)

    def step_field_names(
        self, snapshot: FormSnapshot, step: StepKey, mode: FormMode = FormMode.ADD
    ) -> list[str]:
        paths = [
            path for path, _spec, _item in field_specs_for_step(step, snapshot, mode, self._kinds)
        ]
        return paths + list(STEP_COLLECTIONS.get(step, ()))

    def validate_step(
        self, snapshot: FormSnapshot, step: StepKey, mode: FormMode = FormMode.ADD
    ) -> ValidationResult:
        """Validate only the fields owned by ``step``."""
        return self.validate_fields(snapshot, self.step_field_names(snapshot, step, mode), mode)

    def validate_all(
        self, snapshot: FormSnapshot, mode: FormMode = FormMode.ADD
    ) -> ValidationResult:
        """Validate the whole form, including terms acceptance."""
        names: list[str] = [TERMS_FIELD]
        for step in FORM_STEPS:
            names.extend(self.step_field_names(snapshot, step, mode))
        return self.validate_fields(snapshot, names, mode)
