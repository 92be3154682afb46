"""Cross-field validation over the whole onboarding snapshot."""

from __future__ import annotations

from collections import Counter
from typing import Callable

from sellerhub.core.types import FormMode
from sellerhub.onboarding.models import OTHER_PLATFORM, AddressType, FormSnapshot

Rule = Callable[[FormSnapshot, FormMode], dict[str, list[str]]]


def check_subsidiary_headquarters(
    snapshot: FormSnapshot, mode: FormMode
) -> dict[str, list[str]]:
    if snapshot.subsidiary and not snapshot.headquarter_location.strip():
        return {"headquarter_location": ["Headquarter location is required for subsidiaries."]}
    return {}


def check_registered_address(
    snapshot: FormSnapshot, mode: FormMode
) -> dict[str, list[str]]:
    """Exactly one address in the collection must be the registered one."""
    if not snapshot.addresses:
        return {"addresses": ["You must provide your registered address."]}

    registered = [
        i for i, a in enumerate(snapshot.addresses)
        if a.address_type == AddressType.REGISTERED
    ]
    if not registered:
        return {"addresses": ["At least one address must be 'registered'."]}

    errors: dict[str, list[str]] = {}
    for i in registered[1:]:
        errors[f"addresses.{i}.address_type"] = ["Only one address can be 'registered'."]
    return errors


def check_unique_platforms(
    snapshot: FormSnapshot, mode: FormMode
) -> dict[str, list[str]]:
    """Selling platforms may repeat only for the catch-all 'other'."""
    seen: Counter[str] = Counter()
    errors: dict[str, list[str]] = {}
    for i, entry in enumerate(snapshot.selling_on):
        platform = entry.platform.strip().lower()
        if not platform or platform == OTHER_PLATFORM:
            continue
        seen[platform] += 1
        if seen[platform] > 1:
            errors[f"selling_on.{i}.platform"] = [
                f"Platform '{entry.platform}' is already selected."
            ]
    return errors


def check_platform_url_pairing(
    snapshot: FormSnapshot, mode: FormMode
) -> dict[str, list[str]]:
    errors: dict[str, list[str]] = {}
    for i, entry in enumerate(snapshot.selling_on):
        if not entry.platform.strip() and entry.url.strip():
            errors[f"selling_on.{i}.platform"] = ["Platform is required when URL is provided."]
    return errors


def check_brand_name_unique(
    snapshot: FormSnapshot, mode: FormMode
) -> dict[str, list[str]]:
    name = snapshot.brand_name.strip().lower()
    existing = {b.strip().lower() for b in snapshot.existing_brands}
    if name and name in existing:
        return {"brand_name": ["Brand name already exists."]}
    return {}


def check_terms_accepted(
    snapshot: FormSnapshot, mode: FormMode
) -> dict[str, list[str]]:
    if mode == FormMode.ADD and not snapshot.agree_terms_conditions:
        return {"agree_terms_conditions": ["You must agree to the Terms & Conditions."]}
    return {}


DEFAULT_RULES: tuple[Rule, ...] = (
    check_subsidiary_headquarters,
    check_registered_address,
    check_unique_platforms,
    check_platform_url_pairing,
    check_brand_name_unique,
    check_terms_accepted,
)


class CrossFieldValidator:
    """Validates relationships between fields across the snapshot.

    Each rule takes the whole snapshot and the form mode and returns a
    mapping of field path to error messages.
    """

    def __init__(self, rules: tuple[Rule, ...] | None = None) -> None:
        self._rules: list[Rule] = list(rules if rules is not None else DEFAULT_RULES)

    def add_rule(self, rule: Rule) -> None:
        self._rules.append(rule)

    def validate(
        self, snapshot: FormSnapshot, mode: FormMode = FormMode.ADD
    ) -> dict[str, list[str]]:
        """Run every rule.

        Returns:
            Dict mapping field paths to lists of error messages. Empty dict means valid.
        """
        errors: dict[str, list[str]] = {}
        for rule in self._rules:
            for path, msgs in rule(snapshot, mode).items():
                errors.setdefault(path, []).extend(msgs)
        return errors
