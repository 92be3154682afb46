"""Transforms between the onboarding snapshot and the back-office wire format.

``build_submission`` produces the JSON-shaped payload with the API's field
names; ``encode_multipart`` flattens it into form fields and file parts;
``snapshot_from_record`` goes the other way for EDIT and VIEW sessions.
"""

from __future__ import annotations

import json
from typing import Any

from sellerhub.onboarding.models import (
    Address,
    AddressType,
    Document,
    DocumentKind,
    FormSnapshot,
    SellingPlatform,
    UploadedFile,
)
from sellerhub.onboarding.steps import DEFAULT_DOCUMENT_KINDS, DocumentKindConfig

DEFAULT_ROLE_ID = "6875fc068683bb026013181b"
DEFAULT_COMPANY_DESCRIPTION = "Company description not provided"
ARRAY_KEYS = ("addresses", "sellingOn")

# Multipart file field per document kind
_DOCUMENT_FILE_KEYS: dict[DocumentKind, str] = {
    DocumentKind.TAX_REGISTRATION: "gst",
    DocumentKind.TAX_ID: "pan",
    DocumentKind.BRAND_AUTHORIZATION: "authorizationLetter",
    DocumentKind.INCORPORATION: "coiCertificate",
    DocumentKind.MICRO_ENTERPRISE: "msmeCertificate",
    DocumentKind.FOOD_LICENSE: "fssaiCertificate",
    DocumentKind.DRUG_LICENSE: "drugLicenseCertificate",
}

# Top-level number field per document kind; GST and PAN travel on addresses
_DOCUMENT_NUMBER_KEYS: dict[DocumentKind, str] = {
    DocumentKind.INCORPORATION: "cinNumber",
    DocumentKind.MICRO_ENTERPRISE: "msmeNumber",
    DocumentKind.FOOD_LICENSE: "fssaiNumber",
    DocumentKind.DRUG_LICENSE: "drugLicenseNumber",
}


def format_established_date(value: str) -> str:
    """``YYYY-MM`` -> ``MM/YYYY``. ``MM/YYYY`` passes through; bare years become January."""
    if not value:
        return ""
    if "-" in value:
        year, month = value.split("-", 1)
        return f"{month}/{year}"
    if "/" in value:
        return value
    if len(value) == 4:
        return f"01/{value}"
    return value


def parse_established_date(value: str) -> str:
    """``MM/YYYY`` -> ``YYYY-MM``, the inverse of :func:`format_established_date`."""
    if not value:
        return ""
    if "/" in value:
        month, year = value.split("/", 1)
        return f"{year}-{month.zfill(2)}"
    if "-" in value:
        return value
    if len(value) == 4:
        return f"{value}-01"
    return value


def format_registration_date(value: str) -> str:
    """``YYYY-MM`` -> ``MM/01/YYYY``, the date format the tax identity registry expects."""
    month_year = format_established_date(value)
    if "/" not in month_year:
        return month_year
    month, year = month_year.split("/", 1)
    return f"{month}/01/{year}"


def _document(snapshot: FormSnapshot, kind: DocumentKind) -> Document | None:
    found = snapshot.find_document(kind)
    return found[1] if found else None


def _number(snapshot: FormSnapshot, kind: DocumentKind) -> str:
    doc = _document(snapshot, kind)
    return doc.number.strip() if doc else ""


def build_submission(snapshot: FormSnapshot, role_id: str = DEFAULT_ROLE_ID) -> dict[str, Any]:
    """Map the snapshot onto the onboarding API's request body.

    Files are embedded as ``UploadedFile`` lists under their wire keys rather
    than uploaded ahead of time. The password is only included when set.
    """
    gst_number = _number(snapshot, DocumentKind.TAX_REGISTRATION)
    pan_number = _number(snapshot, DocumentKind.TAX_ID)

    payload: dict[str, Any] = {
        "_id": snapshot.id,
        "ownerName": snapshot.name,
        "ownerEmail": snapshot.email,
        "phoneNumber": snapshot.phone_number,
        "designation": snapshot.designation,
        "roleId": role_id,
        "companyName": snapshot.company_name,
        "companyDescription": snapshot.description or DEFAULT_COMPANY_DESCRIPTION,
        "businessType": snapshot.business_type,
        "establishedIn": format_established_date(snapshot.established_in),
        "subsidiaryOfGlobalBusiness": snapshot.subsidiary,
        "headquarterLocation": snapshot.headquarter_location if snapshot.subsidiary else "",
        "companyCategory": snapshot.category,
        "website": snapshot.website,
        "instagramUrl": snapshot.instagram_url,
        "facebookUrl": snapshot.facebook_url,
        "youtubeUrl": snapshot.youtube_url,
        "landlineNo": snapshot.phone_number,
        "isCompanyBrand": False,
        "brandName": snapshot.brand_name,
        "brandDescription": snapshot.description,
        "brandWebsite": snapshot.website_url or snapshot.website,
        "productCategory": [tag for tag in snapshot.brand_type if tag.strip()],
        "totalSkus": snapshot.total_skus,
        "averageSellingPrice": snapshot.average_selling_price,
        "marketingBudget": snapshot.marketing_budget,
        "addresses": [
            _address_payload(address, gst_number, pan_number) for address in snapshot.addresses
        ],
        "sellingOn": [
            {"platform": entry.platform, "url": entry.url}
            for entry in snapshot.selling_on
            if entry.platform.strip() or entry.url.strip()
        ],
    }
    if snapshot.password:
        payload["password"] = snapshot.password

    for kind, key in _DOCUMENT_NUMBER_KEYS.items():
        number = _number(snapshot, kind)
        if number or kind in (DocumentKind.INCORPORATION, DocumentKind.MICRO_ENTERPRISE):
            payload[key] = number

    if snapshot.logo_files:
        payload["logo"] = list(snapshot.logo_files)
    if snapshot.brand_logo_files:
        payload["brandLogo"] = list(snapshot.brand_logo_files)
    for kind, key in _DOCUMENT_FILE_KEYS.items():
        doc = _document(snapshot, kind)
        if doc is not None and doc.url_files:
            payload[key] = list(doc.url_files)

    return payload


def _address_payload(address: Address, gst_number: str, pan_number: str) -> dict[str, Any]:
    entry: dict[str, Any] = {
        "addressType": address.address_type.value,
        "gstNumber": gst_number,
        "panNumber": pan_number,
        "line1": address.address_line,
        "line2": "",
        "landmark": address.landmark,
        "city": address.city,
        "state": address.state,
        "postalCode": address.postal_code,
        "country": address.country,
        "phoneNumber": address.landline_number,
        "isPrimary": address.address_type == AddressType.REGISTERED,
    }
    if address.address_id:
        entry["addressId"] = address.address_id
    return entry


def _stringify(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def encode_multipart(
    payload: dict[str, Any],
    array_keys: tuple[str, ...] = ARRAY_KEYS,
) -> tuple[dict[str, str], list[tuple[str, tuple[str, bytes, str]]]]:
    """Flatten a submission payload into multipart ``(data, files)``.

    - ``None`` values are skipped; booleans become ``"true"``/``"false"``.
    - Lists under ``array_keys`` become ``key[i][field]`` entries.
    - A list of files sends only its first file, under the bare key.
    - Other lists become ``key[i]``; dicts are JSON-encoded.
    """
    data: dict[str, str] = {}
    files: list[tuple[str, tuple[str, bytes, str]]] = []

    def add_file(key: str, upload: UploadedFile) -> None:
        files.append((key, (upload.filename, upload.content, upload.content_type)))

    for key, value in payload.items():
        if value is None:
            continue
        if key in array_keys and isinstance(value, list):
            for index, item in enumerate(value):
                for item_key, item_value in item.items():
                    if item_value is None:
                        continue
                    field = f"{key}[{index}][{item_key}]"
                    if isinstance(item_value, UploadedFile):
                        add_file(field, item_value)
                    else:
                        data[field] = _stringify(item_value)
        elif isinstance(value, UploadedFile):
            add_file(key, value)
        elif isinstance(value, list) and value and isinstance(value[0], UploadedFile):
            add_file(key, value[0])
        elif isinstance(value, dict):
            data[key] = json.dumps(value)
        elif isinstance(value, list):
            for index, item in enumerate(value):
                data[f"{key}[{index}]"] = _stringify(item)
        else:
            data[key] = _stringify(value)

    return data, files


def snapshot_from_record(
    record: dict[str, Any],
    kinds: dict[DocumentKind, DocumentKindConfig] | None = None,
) -> FormSnapshot:
    """Hydrate a snapshot from a saved company record.

    Documents whose numbers were saved load as verified: they passed
    verification when first submitted. The company already exists, so the
    new-company-only documents are no longer asked for, and contact details
    on file count as verified.
    """
    kinds = kinds or DEFAULT_DOCUMENT_KINDS
    addresses_data = record.get("addresses") or []
    first = addresses_data[0] if addresses_data else {}

    numbers: dict[DocumentKind, str] = {
        DocumentKind.TAX_REGISTRATION: first.get("gstNumber") or "",
        DocumentKind.TAX_ID: first.get("panNumber") or "",
    }
    for kind, key in _DOCUMENT_NUMBER_KEYS.items():
        numbers[kind] = record.get(key) or ""

    documents = []
    for kind, cfg in kinds.items():
        number = numbers.get(kind, "")
        documents.append(
            Document(
                kind=kind,
                number=number,
                verified=bool(number) or not cfg.requires_verification,
            )
        )

    addresses = [
        Address(
            address_id=a.get("addressId") or "",
            address_type=AddressType(a.get("addressType") or AddressType.REGISTERED),
            address_line=a.get("line1") or "",
            landmark=a.get("landmark") or "",
            landline_number=a.get("phoneNumber") or record.get("landlineNo") or "",
            country=a.get("country") or "",
            state=a.get("state") or "",
            city=a.get("city") or "",
            postal_code=a.get("postalCode") or "",
        )
        for a in addresses_data
    ] or [Address()]

    brands = [
        b.get("name", "")
        for a in addresses_data
        for b in (a.get("brands") or [])
        if b.get("name")
    ]

    selling_on = [
        SellingPlatform(platform=s.get("platform") or "", url=s.get("url") or "")
        for s in record.get("sellingOn") or []
    ] or [SellingPlatform()]

    email = record.get("ownerEmail") or ""
    phone = record.get("phoneNumber") or ""

    return FormSnapshot(
        id=record.get("_id"),
        company_name=record.get("companyName") or "",
        category=record.get("companyCategory") or "",
        business_type=record.get("businessType") or "",
        established_in=parse_established_date(record.get("establishedIn") or ""),
        website=record.get("website") or "",
        is_subsidiary="true" if record.get("subsidiaryOfGlobalBusiness") else "false",
        headquarter_location=record.get("headquarterLocation") or "",
        description=record.get("companyDescription") or "",
        logo=record.get("logo") or record.get("brandLogo") or "",
        is_creating_new_company=False,
        existing_brands=brands,
        addresses=addresses,
        brand_type=list(record.get("productCategory") or []),
        total_skus=str(record.get("totalSkus") or ""),
        average_selling_price=str(record.get("averageSellingPrice") or ""),
        marketing_budget=str(record.get("marketingBudget") or ""),
        selling_on=selling_on,
        instagram_url=record.get("instagramUrl") or "",
        facebook_url=record.get("facebookUrl") or "",
        youtube_url=record.get("youtubeUrl") or "",
        brand_logo=record.get("brandLogo") or "",
        documents=documents,
        name=record.get("ownerName") or "",
        email=email,
        phone_number=phone,
        designation=record.get("designation") or "",
        phone_verified=bool(phone),
        email_verified=bool(email),
    )
