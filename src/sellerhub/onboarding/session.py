"""Onboarding session: the single owner of a snapshot and its UI-facing state.

Every mutation goes through the session so it can apply edit side effects
(un-verifying an edited document number, for instance) and notify
subscribers. Derived values such as completion are never cached here; they
are recomputed from the snapshot on every read.
"""

from __future__ import annotations

import logging
import uuid
from typing import Any, Callable

from pydantic import BaseModel, Field

from sellerhub.core.types import FormMode
from sellerhub.onboarding.completion import (
    are_all_steps_completed,
    completion_map,
    compute_first_incomplete_step,
)
from sellerhub.onboarding.models import (
    Address,
    AddressType,
    DocumentKind,
    FormSnapshot,
    OtpChannel,
    SellingPlatform,
    StepKey,
)
from sellerhub.onboarding.steps import (
    DEFAULT_DOCUMENT_KINDS,
    LAST_FORM_STEP,
    STEP_ORDER,
    DocumentKindConfig,
    new_snapshot,
    step_into,
)

logger = logging.getLogger(__name__)

Subscriber = Callable[["OnboardingSession"], None]

# Flags only the OTP flow or the verification orchestrator may set
_PROTECTED_LEAVES = frozenset({"phone_verified", "email_verified", "verified"})

# Collections whose items carry a verification flag; edited per field only
_PROTECTED_ROOTS = frozenset({"documents"})

_CONTACT_FLAGS: dict[str, str] = {
    "phone_number": "phone_verified",
    "email": "email_verified",
}

VERIFYING_LABEL = "Verifying..."


class SessionState(BaseModel):
    """Serializable view of a session for the HTTP layer."""

    id: str
    mode: FormMode
    current_step: StepKey
    company_id: str | None = None
    location_id: str | None = None
    is_verifying: bool = False
    next_label: str
    generation: int
    first_incomplete_step: StepKey
    can_finish: bool
    completion: dict[StepKey, bool]
    errors: dict[str, list[str]] = Field(default_factory=dict)
    snapshot: dict[str, Any]


class OnboardingSession:
    """Observable store for one onboarding wizard run."""

    def __init__(
        self,
        mode: FormMode = FormMode.ADD,
        company_id: str | None = None,
        location_id: str | None = None,
        snapshot: FormSnapshot | None = None,
        kinds: dict[DocumentKind, DocumentKindConfig] | None = None,
        session_id: str | None = None,
    ) -> None:
        self.id = session_id or uuid.uuid4().hex
        self.mode = mode
        self.company_id = company_id
        self.location_id = location_id
        self._kinds = kinds or DEFAULT_DOCUMENT_KINDS
        self._snapshot = snapshot or new_snapshot(self._kinds)
        self.current_step: StepKey = STEP_ORDER[0]
        self.field_errors: dict[str, list[str]] = {}
        self.verification_errors: dict[str, list[str]] = {}
        self.generation = 0
        self.is_verifying = False
        self._subscribers: list[Subscriber] = []

    # -- read side --

    @property
    def snapshot(self) -> FormSnapshot:
        return self._snapshot

    @property
    def kinds(self) -> dict[DocumentKind, DocumentKindConfig]:
        return self._kinds

    @property
    def read_only(self) -> bool:
        return self.mode == FormMode.VIEW

    @property
    def next_label(self) -> str:
        if self.is_verifying:
            return VERIFYING_LABEL
        if self.current_step == LAST_FORM_STEP:
            return "Submit"
        return "Next"

    @property
    def errors(self) -> dict[str, list[str]]:
        merged = {path: list(msgs) for path, msgs in self.field_errors.items()}
        for path, msgs in self.verification_errors.items():
            merged.setdefault(path, []).extend(msgs)
        return merged

    def state(self) -> SessionState:
        return SessionState(
            id=self.id,
            mode=self.mode,
            current_step=self.current_step,
            company_id=self.company_id,
            location_id=self.location_id,
            is_verifying=self.is_verifying,
            next_label=self.next_label,
            generation=self.generation,
            first_incomplete_step=compute_first_incomplete_step(
                self._snapshot, self.mode, self._kinds
            ),
            can_finish=are_all_steps_completed(self._snapshot, self.mode, self._kinds),
            completion=completion_map(self._snapshot, mode=self.mode, kinds=self._kinds),
            errors=self.errors,
            snapshot=self._snapshot.model_dump(mode="json", exclude={"password"}),
        )

    # -- subscriptions --

    def subscribe(self, fn: Subscriber) -> Callable[[], None]:
        """Register ``fn`` to run after every mutation. Returns an unsubscribe callable."""
        self._subscribers.append(fn)

        def unsubscribe() -> None:
            if fn in self._subscribers:
                self._subscribers.remove(fn)

        return unsubscribe

    def _notify(self) -> None:
        for fn in list(self._subscribers):
            fn(self)

    # -- field edits --

    def _ensure_writable(self) -> None:
        if self.read_only:
            raise ValueError("Session is read-only")

    def _resolve_parent(self, path: str) -> tuple[Any, str]:
        parts = path.split(".")
        target: Any = self._snapshot
        for part in parts[:-1]:
            target = step_into(target, part, path)
        leaf = parts[-1]
        if not isinstance(target, BaseModel) or leaf not in type(target).model_fields:
            raise KeyError(path)
        return target, leaf

    def set_field(self, path: str, value: Any) -> None:
        """Set one field by dotted path.

        Raises:
            KeyError: If the path does not name a field.
            ValueError: If the value is invalid for the field, the field is
                a verification flag, or the session is read-only.
        """
        self._ensure_writable()
        self._apply(path, value)
        self._notify()

    def update(self, fields: dict[str, Any]) -> None:
        """Set several fields at once.

        All paths are checked before any is written, and if any value is
        rejected the snapshot is left exactly as it was.
        """
        self._ensure_writable()
        for path in fields:
            self._resolve_parent(path)
        saved_snapshot = self._snapshot.model_copy(deep=True)
        saved_errors = {path: list(msgs) for path, msgs in self.field_errors.items()}
        try:
            for path, value in fields.items():
                self._apply(path, value)
        except (KeyError, ValueError):
            self._snapshot = saved_snapshot
            self.field_errors = saved_errors
            raise
        self._notify()

    def _apply(self, path: str, value: Any) -> None:
        parent, leaf = self._resolve_parent(path)
        if leaf in _PROTECTED_LEAVES:
            raise ValueError(f"{path} can only be set by verification")
        if path in _PROTECTED_ROOTS:
            raise ValueError(f"{path} can only be edited one field at a time")

        previous = getattr(parent, leaf)
        setattr(parent, leaf, value)
        self.field_errors.pop(path, None)
        if getattr(parent, leaf) == previous:
            return

        if path in _CONTACT_FLAGS:
            setattr(self._snapshot, _CONTACT_FLAGS[path], False)
        elif path.startswith("documents.") and leaf == "number":
            cfg = self._kinds.get(parent.kind)
            parent.verified = cfg is not None and not cfg.requires_verification

    # -- collections --

    def add_address(self) -> int:
        """Append an empty address. It is an office address once a registered one exists."""
        self._ensure_writable()
        has_registered = any(
            a.address_type == AddressType.REGISTERED for a in self._snapshot.addresses
        )
        address_type = AddressType.OFFICE if has_registered else AddressType.REGISTERED
        self._snapshot.addresses = [*self._snapshot.addresses, Address(address_type=address_type)]
        self._notify()
        return len(self._snapshot.addresses) - 1

    def remove_address(self, index: int) -> None:
        """Remove an address.

        Raises:
            KeyError: If there is no address at ``index``.
            ValueError: If it is the only address.
        """
        self._ensure_writable()
        addresses = list(self._snapshot.addresses)
        if not 0 <= index < len(addresses):
            raise KeyError(f"addresses.{index}")
        if len(addresses) == 1:
            raise ValueError("At least one address is required")
        del addresses[index]
        self._snapshot.addresses = addresses
        self._drop_indexed_errors("addresses")
        self._notify()

    def add_selling_platform(self) -> int:
        self._ensure_writable()
        self._snapshot.selling_on = [*self._snapshot.selling_on, SellingPlatform()]
        self._notify()
        return len(self._snapshot.selling_on) - 1

    def remove_selling_platform(self, index: int) -> None:
        """Remove a selling-platform row.

        Raises:
            KeyError: If there is no row at ``index``.
        """
        self._ensure_writable()
        entries = list(self._snapshot.selling_on)
        if not 0 <= index < len(entries):
            raise KeyError(f"selling_on.{index}")
        del entries[index]
        self._snapshot.selling_on = entries
        self._drop_indexed_errors("selling_on")
        self._notify()

    def _drop_indexed_errors(self, root: str) -> None:
        prefix = f"{root}."
        self.field_errors = {
            p: m for p, m in self.field_errors.items() if not p.startswith(prefix)
        }

    # -- navigation / engine hooks --

    def move_to(self, step: StepKey) -> None:
        self.current_step = step
        self._notify()

    def set_field_errors(self, errors: dict[str, list[str]]) -> None:
        self.field_errors = {path: list(msgs) for path, msgs in errors.items()}
        self._notify()

    def begin_verification(self) -> int:
        """Mark a verification run as in flight. Returns the generation it belongs to.

        Raises:
            RuntimeError: If a run is already in flight.
        """
        if self.is_verifying:
            raise RuntimeError("Verification already in progress")
        self.is_verifying = True
        self._notify()
        return self.generation

    def end_verification(self) -> None:
        self.is_verifying = False
        self._notify()

    def mark_document_verified(self, index: int) -> None:
        path = f"documents.{index}.number"
        self._snapshot.documents[index].verified = True
        self.verification_errors.pop(path, None)
        self._notify()

    def set_verification_error(self, index: int, message: str) -> None:
        self.verification_errors[f"documents.{index}.number"] = [message]
        self._notify()

    def mark_contact_verified(self, channel: OtpChannel) -> None:
        if channel == OtpChannel.PHONE:
            self._snapshot.phone_verified = True
            self.field_errors.pop("phone_verified", None)
        else:
            self._snapshot.email_verified = True
            self.field_errors.pop("email_verified", None)
        self._notify()

    # -- lifecycle --

    def reset(self) -> None:
        """Replace the snapshot with a fresh default one."""
        self.load(new_snapshot(self._kinds))

    def load(
        self,
        snapshot: FormSnapshot,
        mode: FormMode | None = None,
        company_id: str | None = None,
        location_id: str | None = None,
    ) -> None:
        """Replace the snapshot wholesale.

        Bumps ``generation`` so results of in-flight calls made against the
        old snapshot are discarded.
        """
        self._snapshot = snapshot
        if mode is not None:
            self.mode = mode
        if company_id is not None:
            self.company_id = company_id
        if location_id is not None:
            self.location_id = location_id
        self.generation += 1
        self.current_step = STEP_ORDER[0]
        self.field_errors = {}
        self.verification_errors = {}
        logger.debug("Session %s loaded generation %d", self.id, self.generation)
        self._notify()
