"""Tests for field validators, cross-field rules and the validation engine."""

from __future__ import annotations

from datetime import date

import pytest

from sellerhub.core.types import FormMode
from sellerhub.onboarding.models import (
    Address,
    AddressType,
    DocumentKind,
    SellingPlatform,
    StepKey,
    UploadedFile,
)
from sellerhub.onboarding.steps import FieldSpec, new_snapshot
from sellerhub.onboarding.validation import ValidationEngine
from sellerhub.onboarding.validators.common import (
    MAX_FILE_SIZE,
    validate_email,
    validate_image_files,
    validate_not_future_month,
    validate_numeric,
    validate_password,
    validate_pdf_files,
    validate_phone,
    validate_postal_code,
    validate_required,
    validate_url,
)
from sellerhub.onboarding.validators.cross_field import CrossFieldValidator


class TestFieldValidators:
    def test_required(self):
        assert validate_required("", label="Brand name") == "Brand name is required."
        assert validate_required(["  "]) == "This field is required."
        assert validate_required("x") is None
        assert validate_required(False) is None

    @pytest.mark.parametrize("value", ["a@b.co", "priya@acme.in"])
    def test_valid_email(self, value):
        assert validate_email(value) is None

    def test_invalid_email(self):
        assert validate_email("not-an-email") == "Please enter a valid email address."

    def test_phone_uses_label(self):
        assert validate_phone("12345", label="Landline number") == "Invalid landline number."
        assert validate_phone("+91 98765-43210") is None

    def test_postal_code(self):
        assert validate_postal_code("400001") is None
        assert validate_postal_code("4000") == "Must be exactly 6 digits."

    def test_established_month_not_in_future(self):
        today = date(2024, 6, 15)
        assert validate_not_future_month("2024-06", today=today) is None
        assert validate_not_future_month("2024-07", today=today).startswith(
            "Established date cannot be in the future"
        )

    def test_numeric_min(self):
        assert validate_numeric("-1", min_val="0") == "Value must be at least 0."
        assert validate_numeric("abc") == "Please enter a valid number."
        assert validate_numeric("10", min_val="0") is None

    def test_url(self):
        assert validate_url("https://amazon.in/acme") is None
        assert validate_url("www.acme.in") is None
        assert validate_url("not a url", label="Website") == "Please enter a valid Website URL."

    @pytest.mark.parametrize(
        "value",
        ["Secure@123", "abc#1defg"],
    )
    def test_password_accepts(self, value):
        assert validate_password(value) is None

    @pytest.mark.parametrize(
        "value",
        ["Sh@1", "1Secure@123", "Secure1234", "Secure @123", "A@1" + "x" * 20],
    )
    def test_password_rejects(self, value):
        assert validate_password(value) is not None

    def test_file_types_and_size(self):
        png = UploadedFile(filename="a.png", content_type="image/png")
        pdf = UploadedFile(filename="a.pdf", content_type="application/pdf")
        big = UploadedFile(
            filename="b.pdf", content_type="application/pdf", content=b"0" * (MAX_FILE_SIZE + 1)
        )
        assert validate_image_files([png]) is None
        assert validate_image_files([pdf]) == "Only .jpg and .png files are accepted."
        assert validate_pdf_files([pdf]) is None
        assert validate_pdf_files([big]) == "Max file size is 5MB."


class TestCrossFieldRules:
    def test_subsidiary_needs_headquarters(self):
        snapshot = new_snapshot()
        snapshot.is_subsidiary = "true"
        errors = CrossFieldValidator().validate(snapshot)
        assert "headquarter_location" in errors

        snapshot.headquarter_location = "Mumbai"
        assert "headquarter_location" not in CrossFieldValidator().validate(snapshot)

    def test_no_addresses(self):
        snapshot = new_snapshot()
        snapshot.addresses = []
        errors = CrossFieldValidator().validate(snapshot)
        assert errors["addresses"] == ["You must provide your registered address."]

    def test_no_registered_address(self):
        snapshot = new_snapshot()
        snapshot.addresses = [Address(address_type=AddressType.OFFICE)]
        errors = CrossFieldValidator().validate(snapshot)
        assert errors["addresses"] == ["At least one address must be 'registered'."]

    def test_second_registered_address_flagged(self):
        snapshot = new_snapshot()
        snapshot.addresses = [Address(), Address(), Address(address_type=AddressType.OFFICE)]
        errors = CrossFieldValidator().validate(snapshot)
        assert errors["addresses.1.address_type"] == ["Only one address can be 'registered'."]
        assert "addresses.0.address_type" not in errors

    def test_duplicate_platform_flagged_then_cleared_by_other(self):
        snapshot = new_snapshot()
        snapshot.selling_on = [
            SellingPlatform(platform="amazon", url="https://amazon.in/a"),
            SellingPlatform(platform="amazon", url="https://amazon.in/b"),
        ]
        errors = CrossFieldValidator().validate(snapshot)
        assert errors["selling_on.1.platform"] == ["Platform 'amazon' is already selected."]

        snapshot.selling_on[1].platform = "other"
        errors = CrossFieldValidator().validate(snapshot)
        assert not any(path.startswith("selling_on") for path in errors)

    def test_other_may_repeat(self):
        snapshot = new_snapshot()
        snapshot.selling_on = [
            SellingPlatform(platform="other", url="https://a.in"),
            SellingPlatform(platform="other", url="https://b.in"),
        ]
        assert not any(p.startswith("selling_on") for p in CrossFieldValidator().validate(snapshot))

    def test_url_without_platform(self):
        snapshot = new_snapshot()
        snapshot.selling_on = [SellingPlatform(url="https://shop.in")]
        errors = CrossFieldValidator().validate(snapshot)
        assert errors["selling_on.0.platform"] == ["Platform is required when URL is provided."]

    def test_brand_name_collision_is_case_insensitive(self):
        snapshot = new_snapshot()
        snapshot.existing_brands = ["Acme"]
        snapshot.brand_name = " acme "
        assert CrossFieldValidator().validate(snapshot)["brand_name"] == [
            "Brand name already exists."
        ]

    def test_terms_only_checked_when_creating(self):
        snapshot = new_snapshot()
        assert "agree_terms_conditions" in CrossFieldValidator().validate(snapshot, FormMode.ADD)
        assert "agree_terms_conditions" not in CrossFieldValidator().validate(
            snapshot, FormMode.EDIT
        )

    def test_custom_rule(self):
        validator = CrossFieldValidator(rules=())
        validator.add_rule(lambda snapshot, mode: {"brand_name": ["nope"]})
        assert validator.validate(new_snapshot()) == {"brand_name": ["nope"]}


class TestValidationEngine:
    def test_validate_field_required_short_circuits(self):
        engine = ValidationEngine()
        spec = FieldSpec("email", "Email", validators=("email",))
        assert engine.validate_field(spec, "", required=True) == ["Email is required."]
        assert engine.validate_field(spec, "bad", required=True) == [
            "Please enter a valid email address."
        ]

    def test_parameterised_validator(self):
        engine = ValidationEngine()
        spec = FieldSpec("total_skus", "Total SKUs", validators=("numeric:min_val=0",))
        assert engine.validate_field(spec, "-3") == ["Value must be at least 0."]

    def test_registered_validator(self):
        engine = ValidationEngine()
        engine.register("upper", lambda v, **kw: None if v.isupper() else "Must be upper case.")
        spec = FieldSpec("x", "X", validators=("upper",))
        assert engine.validate_field(spec, "abc") == ["Must be upper case."]

    def test_complete_snapshot_passes_everything(self, complete_snapshot):
        result = ValidationEngine().validate_all(complete_snapshot())
        assert result.valid, result.errors

    def test_step_reports_only_its_own_fields(self):
        snapshot = new_snapshot()
        result = ValidationEngine().validate_step(snapshot, StepKey.COMPANY_DETAILS)
        assert not result.valid
        assert "company_name" in result.errors
        assert "brand_name" not in result.errors
        assert not any(path.startswith("addresses") for path in result.errors)
        assert "agree_terms_conditions" not in result.errors

    def test_duplicate_platform_surfaces_on_brand_step(self, complete_snapshot):
        snapshot = complete_snapshot()
        snapshot.selling_on = [
            SellingPlatform(platform="amazon", url="https://amazon.in/a"),
            SellingPlatform(platform="amazon", url="https://amazon.in/b"),
        ]
        engine = ValidationEngine()
        result = engine.validate_step(snapshot, StepKey.BRAND_DETAILS)
        assert result.errors == {
            "selling_on.1.platform": ["Platform 'amazon' is already selected."]
        }
        assert engine.validate_step(snapshot, StepKey.COMPANY_DETAILS).valid

    def test_other_platform_requires_url(self, complete_snapshot):
        snapshot = complete_snapshot()
        snapshot.selling_on = [SellingPlatform(platform="other")]
        result = ValidationEngine().validate_step(snapshot, StepKey.BRAND_DETAILS)
        assert result.errors == {"selling_on.0.url": ["URL is required."]}

    def test_missing_registered_address_on_address_step(self, complete_snapshot):
        snapshot = complete_snapshot()
        snapshot.addresses[0].address_type = AddressType.OFFICE
        result = ValidationEngine().validate_step(snapshot, StepKey.ADDRESS_DETAILS)
        assert result.errors == {"addresses": ["At least one address must be 'registered'."]}

    def test_documents_step_requires_numbers_and_uploads(self, find_doc):
        snapshot = new_snapshot()
        snapshot.company_name = "Acme"
        snapshot.established_in = "2020-01"
        result = ValidationEngine().validate_step(snapshot, StepKey.DOCUMENT_DETAILS)
        gst = find_doc(snapshot, DocumentKind.TAX_REGISTRATION)
        msme = find_doc(snapshot, DocumentKind.MICRO_ENTERPRISE)
        assert result.errors[f"documents.{gst}.number"] == ["GST number is required."]
        assert result.errors[f"documents.{gst}.url"] == ["GST document upload is required."]
        assert f"documents.{msme}.number" not in result.errors

    def test_password_not_required_when_editing(self, complete_snapshot):
        snapshot = complete_snapshot()
        snapshot.password = ""
        engine = ValidationEngine()
        assert "password" in engine.validate_step(
            snapshot, StepKey.PERSONAL_DETAILS, FormMode.ADD
        ).errors
        assert engine.validate_step(snapshot, StepKey.PERSONAL_DETAILS, FormMode.EDIT).valid

    def test_unverified_contacts_fail_personal_step(self, complete_snapshot):
        snapshot = complete_snapshot()
        snapshot.phone_verified = False
        result = ValidationEngine().validate_step(snapshot, StepKey.PERSONAL_DETAILS)
        assert result.errors == {"phone_verified": ["Phone number is not verified."]}

    def test_validate_all_includes_terms(self, complete_snapshot):
        snapshot = complete_snapshot()
        snapshot.agree_terms_conditions = False
        result = ValidationEngine().validate_all(snapshot)
        assert result.errors == {
            "agree_terms_conditions": ["You must agree to the Terms & Conditions."]
        }

    def test_validate_fields_subset(self):
        snapshot = new_snapshot()
        result = ValidationEngine().validate_fields(snapshot, ["brand_name"])
        assert result.errors == {"brand_name": ["Brand name is required."]}
