"""Shared test fixtures and helpers."""

from __future__ import annotations

from typing import Callable

import pytest

from sellerhub.bridge.models import RegistryRecord
from sellerhub.onboarding.models import (
    Address,
    AddressType,
    DocumentKind,
    FormSnapshot,
    SellingPlatform,
    UploadedFile,
)
from sellerhub.onboarding.steps import new_snapshot

VALID_NUMBERS: dict[DocumentKind, str] = {
    DocumentKind.INCORPORATION: "U72900MH2007PTC123456",
    DocumentKind.TAX_ID: "AAPFU0939F",
    DocumentKind.TAX_REGISTRATION: "27AAPFU0939F1ZV",
}


def _build_complete_snapshot() -> FormSnapshot:
    snapshot = new_snapshot()
    snapshot.company_name = "Acme Foods Pvt Ltd"
    snapshot.category = "principal"
    snapshot.business_type = "private"
    snapshot.established_in = "2019-04"
    snapshot.logo_files = [UploadedFile(filename="logo.png", content_type="image/png", content=b"png")]

    snapshot.addresses = [
        Address(
            address_type=AddressType.REGISTERED,
            address_line="12 MG Road",
            landmark="Opp. Metro",
            landline_number="02212345678",
            country="India",
            state="Maharashtra",
            city="Mumbai",
            postal_code="400001",
        )
    ]

    snapshot.brand_name = "Acme"
    snapshot.brand_type = ["snacks"]
    snapshot.total_skus = "25"
    snapshot.average_selling_price = "199"
    snapshot.marketing_budget = "50000"
    snapshot.selling_on = [SellingPlatform(platform="amazon", url="https://amazon.in/acme")]

    for doc in snapshot.documents:
        if doc.kind in VALID_NUMBERS:
            doc.number = VALID_NUMBERS[doc.kind]
            doc.url = f"{doc.kind.value}.pdf"
            doc.verified = True
        elif doc.kind == DocumentKind.BRAND_AUTHORIZATION:
            doc.url = "authorisation.pdf"

    snapshot.name = "Priya Shah"
    snapshot.email = "priya@acme.in"
    snapshot.phone_number = "9876543210"
    snapshot.designation = "Director"
    snapshot.password = "Secure@123"
    snapshot.phone_verified = True
    snapshot.email_verified = True
    snapshot.agree_terms_conditions = True
    return snapshot


@pytest.fixture
def complete_snapshot() -> Callable[[], FormSnapshot]:
    """Factory for a snapshot that passes every step under the strict check."""
    return _build_complete_snapshot


def doc_index(snapshot: FormSnapshot, kind: DocumentKind) -> int:
    found = snapshot.find_document(kind)
    assert found is not None
    return found[0]


class FakeRegistry:
    """Stand-in verifier: answers from a status table, optionally raising."""

    def __init__(self, active: dict[str, bool] | None = None, error: Exception | None = None):
        self.active = dict(active or {})
        self.error = error
        self.calls: list[str] = []
        self.hook: Callable[[], None] | None = None

    async def __call__(self, number: str, snapshot: FormSnapshot) -> RegistryRecord:
        self.calls.append(number)
        if self.hook is not None:
            self.hook()
        if self.error is not None:
            raise self.error
        active = self.active.get(number, False)
        return RegistryRecord(number=number, status="Active" if active else "Inactive", active=active)


@pytest.fixture
def fake_registry() -> type[FakeRegistry]:
    return FakeRegistry


@pytest.fixture
def find_doc() -> Callable[[FormSnapshot, DocumentKind], int]:
    return doc_index
