"""Shared models for the onboarding wizard."""

from __future__ import annotations

from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class StepKey(StrEnum):
    """Wizard steps. Declaration order is the navigation order."""

    COMPANY_DETAILS = "company-details"
    ADDRESS_DETAILS = "address-details"
    BRAND_DETAILS = "brand-details"
    DOCUMENT_DETAILS = "document-details"
    PERSONAL_DETAILS = "personal-details"
    THANK_YOU = "thank-you"


class AddressType(StrEnum):
    REGISTERED = "registered"
    OFFICE = "office"


class DocumentKind(StrEnum):
    """Registration documents. Values are the wire names used by the API."""

    INCORPORATION = "coi"
    TAX_ID = "pan"
    TAX_REGISTRATION = "gstLicense"
    MICRO_ENTERPRISE = "msme"
    FOOD_LICENSE = "fssai"
    DRUG_LICENSE = "drug_license"
    BRAND_AUTHORIZATION = "brandAuthorisation"


class OtpChannel(StrEnum):
    PHONE = "phone"
    EMAIL = "email"


OTHER_PLATFORM = "other"


class UploadedFile(BaseModel):
    """A file attached in the browser, carried inline until submission."""

    filename: str
    content_type: str = "application/octet-stream"
    content: bytes = Field(default=b"", exclude=True)


class Address(BaseModel):
    """One entry of the company's address list."""

    model_config = ConfigDict(validate_assignment=True)

    address_id: str = ""
    address_type: AddressType = AddressType.REGISTERED
    address_line: str = ""
    landmark: str = ""
    landline_number: str = ""
    country: str = ""
    state: str = ""
    city: str = ""
    postal_code: str = ""


class Document(BaseModel):
    """A registration document declared during onboarding."""

    model_config = ConfigDict(validate_assignment=True)

    kind: DocumentKind
    number: str = ""
    url: str = ""
    url_files: list[UploadedFile] = Field(default_factory=list)
    verified: bool = False

    @property
    def has_upload(self) -> bool:
        return bool(self.url.strip() or self.url_files)


class SellingPlatform(BaseModel):
    model_config = ConfigDict(validate_assignment=True)

    platform: str = ""
    url: str = ""


class FormSnapshot(BaseModel):
    """Every field of the onboarding form across all steps."""

    model_config = ConfigDict(validate_assignment=True)

    id: str | None = None

    # Company details
    company_name: str = ""
    category: str = ""
    business_type: str = ""
    established_in: str = ""
    website: str = ""
    is_subsidiary: str = "false"
    headquarter_location: str = ""
    description: str = ""
    logo: str = ""
    logo_files: list[UploadedFile] = Field(default_factory=list)
    is_creating_new_company: bool = True
    existing_brands: list[str] = Field(default_factory=list)

    # Address details
    addresses: list[Address] = Field(default_factory=lambda: [Address()])

    # Brand details
    brand_name: str = ""
    brand_type: list[str] = Field(default_factory=list)
    total_skus: str = ""
    average_selling_price: str = ""
    marketing_budget: str = ""
    selling_on: list[SellingPlatform] = Field(default_factory=lambda: [SellingPlatform()])
    instagram_url: str = ""
    facebook_url: str = ""
    youtube_url: str = ""
    website_url: str = ""
    brand_logo: str = ""
    brand_logo_files: list[UploadedFile] = Field(default_factory=list)

    # Document details
    documents: list[Document] = Field(default_factory=list)

    # Personal details
    name: str = ""
    email: str = ""
    phone_number: str = ""
    designation: str = ""
    password: str = ""
    phone_verified: bool = False
    email_verified: bool = False

    agree_terms_conditions: bool = False

    def find_document(self, kind: DocumentKind) -> tuple[int, Document] | None:
        for index, doc in enumerate(self.documents):
            if doc.kind == kind:
                return index, doc
        return None

    @property
    def subsidiary(self) -> bool:
        return self.is_subsidiary.strip().lower() == "true"


class ValidationResult(BaseModel):
    """Result of validating a field or step."""

    valid: bool
    errors: dict[str, list[str]] = Field(default_factory=dict)


class NavigationResult(BaseModel):
    """Outcome of a step-change request."""

    allowed: bool
    step: StepKey
    blocking_step: StepKey | None = None
    message: str | None = None
    errors: dict[str, list[str]] = Field(default_factory=dict)


class VerificationOutcome(BaseModel):
    """Result of checking one document against its registry."""

    index: int
    kind: DocumentKind
    number: str
    valid: bool
    message: str | None = None


class VerificationReport(BaseModel):
    """Aggregate of one verification fan-out."""

    passed: bool
    outcomes: list[VerificationOutcome] = Field(default_factory=list)
    discarded: bool = False

    @property
    def checked(self) -> int:
        return len(self.outcomes)

    @property
    def errors(self) -> dict[str, list[str]]:
        return {
            f"documents.{o.index}.number": [o.message]
            for o in self.outcomes
            if not o.valid and o.message
        }


class OtpResult(BaseModel):
    success: bool
    message: str | None = None


class SubmissionResult(BaseModel):
    """Outcome of an onboarding create/update request."""

    success: bool
    message: str
    data: Any = None
