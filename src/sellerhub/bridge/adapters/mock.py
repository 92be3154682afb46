"""Fixture-backed adapters for local development and demos.

They keep the HTTP adapters' method signatures but never touch the network,
so a full onboarding run works with ``provider = "mock"``.
"""

from __future__ import annotations

import re
import uuid
from typing import Any

from sellerhub.bridge.adapters.onboarding_api import MultipartFiles, OnboardingApiAdapter
from sellerhub.bridge.adapters.otp import OtpAdapter, channel_route
from sellerhub.bridge.adapters.registries import (
    ACTIVE_STATUS,
    VALID_STATUS,
    CompanyRegistryAdapter,
    TaxIdentityAdapter,
    TaxRegistrationAdapter,
)
from sellerhub.bridge.models import AdapterConfig, RegistryRecord

MOCK_OTP_CODE = "123456"

_FIXTURE_COMPANIES: dict[str, str] = {
    "U72900MH2007PTC123456": ACTIVE_STATUS,
    "L17110MH1973PLC019786": ACTIVE_STATUS,
    "U12345MH2020PTC000001": "Strike Off",
}

_FIXTURE_GST: dict[str, str] = {
    "27AAPFU0939F1ZV": ACTIVE_STATUS,
    "29AAGCB7383J1Z4": ACTIVE_STATUS,
    "07AAACR5055K1Z1": "Cancelled",
}

_FIXTURE_PAN: dict[str, tuple[str, str | None]] = {
    "AAPFU0939F": (VALID_STATUS, None),
    "AAGCB7383J": (VALID_STATUS, None),
    "ABCDE1234F": ("invalid", "PAN does not exist"),
}

_FIXTURE_RECORDS: list[dict[str, Any]] = [
    {
        "_id": "cmp-001",
        "locationId": "loc-001",
        "companyName": "TechNova Solutions Pvt. Ltd.",
        "companyCategory": "principal",
        "businessType": "public",
        "establishedIn": "06/2007",
        "website": "https://www.technova.com",
        "subsidiaryOfGlobalBusiness": False,
        "landlineNo": "02240001234",
        "cinNumber": "U72900MH2007PTC123456",
        "ownerName": "Rohit Sharma",
        "ownerEmail": "rohit.sharma@example.com",
        "phoneNumber": "8424847449",
        "addresses": [
            {
                "addressId": "addr-001",
                "addressType": "registered",
                "line1": "4th Floor, Orbit Tower",
                "landmark": "Near Andheri Station",
                "city": "Mumbai",
                "state": "Maharashtra",
                "postalCode": "400069",
                "country": "India",
                "gstNumber": "27AAPFU0939F1ZV",
                "panNumber": "AAPFU0939F",
                "brands": [{"name": "NovaAI"}],
            }
        ],
    },
]

_INDEXED_KEY = re.compile(r"^(\w+)\[(\d+)\](?:\[(\w+)\])?$")


def _unflatten(data: dict[str, str]) -> dict[str, Any]:
    """Rebuild nested lists from ``key[i][field]`` / ``key[i]`` form keys."""
    record: dict[str, Any] = {}
    for key, value in data.items():
        m = _INDEXED_KEY.match(key)
        if m is None:
            record[key] = value
            continue
        name, index, field = m.group(1), int(m.group(2)), m.group(3)
        items = record.setdefault(name, [])
        while len(items) <= index:
            items.append({} if field else "")
        if field:
            items[index][field] = value
        else:
            items[index] = value
    return record


class MockCompanyRegistryAdapter(CompanyRegistryAdapter):
    """Company registry with fixture statuses; unknown numbers are inactive."""

    def __init__(self, config: AdapterConfig | None = None, **kwargs: Any) -> None:
        super().__init__(config or AdapterConfig(name="company_registry"), **kwargs)
        self._statuses = dict(_FIXTURE_COMPANIES)
        self.calls: list[str] = []

    def set_status(self, number: str, status: str) -> None:
        self._statuses[number] = status

    async def verify(self, number: str) -> RegistryRecord:
        self.calls.append(number)
        status = self._statuses.get(number, "Not Found")
        return RegistryRecord(number=number, status=status, active=status == ACTIVE_STATUS)


class MockTaxRegistrationAdapter(TaxRegistrationAdapter):
    """Tax authority with fixture statuses; unknown numbers are inactive."""

    def __init__(self, config: AdapterConfig | None = None, **kwargs: Any) -> None:
        super().__init__(config or AdapterConfig(name="tax_registration"), **kwargs)
        self._statuses = dict(_FIXTURE_GST)
        self.calls: list[str] = []

    def set_status(self, number: str, status: str) -> None:
        self._statuses[number] = status

    async def verify(self, number: str) -> RegistryRecord:
        self.calls.append(number)
        status = self._statuses.get(number, "Not Found")
        return RegistryRecord(number=number, status=status, active=status == ACTIVE_STATUS)


class MockTaxIdentityAdapter(TaxIdentityAdapter):
    """Tax identity registry with fixture statuses and remarks."""

    def __init__(self, config: AdapterConfig | None = None, **kwargs: Any) -> None:
        super().__init__(config or AdapterConfig(name="tax_identity"), **kwargs)
        self._statuses = dict(_FIXTURE_PAN)
        self.calls: list[tuple[str, str, str]] = []

    def set_status(self, number: str, status: str, remarks: str | None = None) -> None:
        self._statuses[number] = (status, remarks)

    async def verify(self, number: str, name: str, date_of_birth: str) -> RegistryRecord:
        self.calls.append((number, name, date_of_birth))
        status, remarks = self._statuses.get(number, ("invalid", None))
        return RegistryRecord(
            number=number,
            status=status,
            active=status == VALID_STATUS,
            remarks=remarks,
        )


class MockOtpAdapter(OtpAdapter):
    """Accepts ``MOCK_OTP_CODE`` for any target an OTP was sent to."""

    def __init__(self, config: AdapterConfig | None = None, **kwargs: Any) -> None:
        super().__init__(config or AdapterConfig(name="otp"), **kwargs)
        self.sent: list[tuple[str, str]] = []

    async def send(self, channel: str, target: str) -> bool:
        channel_route(channel)
        self.sent.append((channel, target))
        return True

    async def verify(self, channel: str, target: str, code: str) -> bool:
        channel_route(channel)
        return (channel, target) in self.sent and code == MOCK_OTP_CODE


class MockOnboardingApiAdapter(OnboardingApiAdapter):
    """In-memory onboarding backend seeded with one saved company."""

    def __init__(self, config: AdapterConfig | None = None, **kwargs: Any) -> None:
        super().__init__(config or AdapterConfig(name="onboarding_api"), **kwargs)
        self._records: dict[tuple[str, str], dict[str, Any]] = {}
        self._load_fixtures()

    def _load_fixtures(self) -> None:
        for record in _FIXTURE_RECORDS:
            self._records[(record["_id"], record["locationId"])] = dict(record)

    @property
    def records(self) -> dict[tuple[str, str], dict[str, Any]]:
        return dict(self._records)

    async def create(self, data: dict[str, str], files: MultipartFiles) -> dict[str, Any]:
        record = _unflatten(data)
        company_id = f"cmp-{uuid.uuid4().hex[:8]}"
        location_id = f"loc-{uuid.uuid4().hex[:8]}"
        record.update({"_id": company_id, "locationId": location_id})
        record["files"] = [name for name, _part in files]
        self._records[(company_id, location_id)] = record
        return {
            "success": True,
            "message": "Company onboarded successfully",
            "data": {"companyId": company_id, "locationId": location_id},
        }

    async def update(
        self,
        company_id: str,
        location_id: str,
        data: dict[str, str],
        files: MultipartFiles,
    ) -> dict[str, Any]:
        key = (company_id, location_id)
        if key not in self._records:
            return {"success": False, "message": f"Company {company_id!r} not found"}
        record = {**self._records[key], **_unflatten(data)}
        record.update({"_id": company_id, "locationId": location_id})
        self._records[key] = record
        return {
            "success": True,
            "message": "Company updated successfully",
            "data": {"companyId": company_id, "locationId": location_id},
        }

    async def fetch(self, company_id: str, location_id: str) -> dict[str, Any]:
        try:
            return dict(self._records[(company_id, location_id)])
        except KeyError:
            raise KeyError(f"Company {company_id!r} not found") from None
