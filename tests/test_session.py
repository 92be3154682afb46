"""Tests for the onboarding session store."""

from __future__ import annotations

import pytest

from sellerhub.core.types import FormMode
from sellerhub.onboarding.models import AddressType, DocumentKind, OtpChannel, StepKey
from sellerhub.onboarding.session import OnboardingSession
from sellerhub.onboarding.steps import TERMINAL_STEP
from sellerhub.onboarding.store import OnboardingStore


class TestFieldEdits:
    def test_set_field_by_path(self):
        session = OnboardingSession()
        session.set_field("addresses.0.city", "Pune")
        assert session.snapshot.addresses[0].city == "Pune"

    def test_unknown_path(self):
        session = OnboardingSession()
        with pytest.raises(KeyError):
            session.set_field("addresses.3.city", "Pune")
        with pytest.raises(KeyError):
            session.set_field("not_a_field", "x")

    def test_invalid_value_rejected(self):
        session = OnboardingSession()
        with pytest.raises(ValueError):
            session.set_field("addresses.0.address_type", "warehouse")

    @pytest.mark.parametrize("path", ["phone_verified", "email_verified", "documents.0.verified"])
    def test_verification_flags_are_protected(self, path):
        session = OnboardingSession()
        with pytest.raises(ValueError):
            session.set_field(path, True)

    def test_update_checks_every_path_first(self):
        session = OnboardingSession()
        with pytest.raises(KeyError):
            session.update({"company_name": "Acme", "bogus": 1})
        assert session.snapshot.company_name == ""

    def test_update_is_all_or_nothing(self):
        session = OnboardingSession()
        session.set_field_errors({"company_name": ["Company name is required."]})
        seen: list[str] = []
        session.subscribe(lambda s: seen.append(s.snapshot.company_name))

        with pytest.raises(ValueError):
            session.update({"company_name": "Acme", "addresses": "not-a-list"})

        assert session.snapshot.company_name == ""
        assert len(session.snapshot.addresses) == 1
        assert session.errors == {"company_name": ["Company name is required."]}
        assert seen == []

    def test_documents_cannot_be_replaced_wholesale(self, complete_snapshot, find_doc):
        snapshot = complete_snapshot()
        coi = find_doc(snapshot, DocumentKind.INCORPORATION)
        snapshot.documents[coi].verified = False
        session = OnboardingSession(snapshot=snapshot)
        docs = [doc.model_dump() for doc in session.snapshot.documents]
        docs[coi]["number"] = "U99999MH2021PTC999999"
        docs[coi]["verified"] = True

        with pytest.raises(ValueError):
            session.update({"documents": docs})
        with pytest.raises(ValueError):
            session.set_field("documents", docs)

        assert session.snapshot.documents[coi].verified is False
        assert session.snapshot.documents[coi].number == "U72900MH2007PTC123456"

    def test_editing_clears_that_fields_error(self):
        session = OnboardingSession()
        session.set_field_errors({"company_name": ["Company name is required."], "city": ["x"]})
        session.set_field("company_name", "Acme")
        assert "company_name" not in session.errors
        assert "city" in session.errors

    def test_editing_phone_resets_verification(self, complete_snapshot):
        session = OnboardingSession(snapshot=complete_snapshot())
        session.set_field("phone_number", "9123456780")
        assert session.snapshot.phone_verified is False
        assert session.snapshot.email_verified is True

    def test_same_value_keeps_verification(self, complete_snapshot):
        session = OnboardingSession(snapshot=complete_snapshot())
        session.set_field("email", "priya@acme.in")
        assert session.snapshot.email_verified is True

    def test_editing_document_number_resets_verified(self, complete_snapshot, find_doc):
        snapshot = complete_snapshot()
        gst = find_doc(snapshot, DocumentKind.TAX_REGISTRATION)
        session = OnboardingSession(snapshot=snapshot)
        session.set_field(f"documents.{gst}.number", "29AAGCB7383J1Z4")
        assert session.snapshot.documents[gst].verified is False

    def test_editing_unchecked_kind_stays_verified(self, find_doc):
        session = OnboardingSession()
        msme = find_doc(session.snapshot, DocumentKind.MICRO_ENTERPRISE)
        session.set_field(f"documents.{msme}.number", "UDYAM-1")
        assert session.snapshot.documents[msme].verified is True


class TestSubscriptions:
    def test_subscriber_sees_every_mutation(self):
        session = OnboardingSession()
        seen: list[str] = []
        unsubscribe = session.subscribe(lambda s: seen.append(s.snapshot.company_name))
        session.set_field("company_name", "A")
        session.update({"company_name": "B", "category": "principal"})
        assert seen == ["A", "B"]

        unsubscribe()
        session.set_field("company_name", "C")
        assert seen == ["A", "B"]

    def test_completion_recomputed_on_read(self, complete_snapshot):
        session = OnboardingSession(snapshot=complete_snapshot())
        assert session.state().completion[StepKey.BRAND_DETAILS] is True
        session.set_field("brand_name", "")
        assert session.state().completion[StepKey.BRAND_DETAILS] is False


class TestCollections:
    def test_new_address_is_office_when_registered_exists(self):
        session = OnboardingSession()
        index = session.add_address()
        assert index == 1
        assert session.snapshot.addresses[1].address_type == AddressType.OFFICE

    def test_new_address_is_registered_when_none_exists(self):
        session = OnboardingSession()
        session.set_field("addresses.0.address_type", "office")
        session.add_address()
        assert session.snapshot.addresses[1].address_type == AddressType.REGISTERED

    def test_remove_address(self):
        session = OnboardingSession()
        session.add_address()
        session.set_field_errors({"addresses.1.city": ["City is required."]})
        session.remove_address(1)
        assert len(session.snapshot.addresses) == 1
        assert session.errors == {}

    def test_cannot_remove_last_address(self):
        session = OnboardingSession()
        with pytest.raises(ValueError):
            session.remove_address(0)
        with pytest.raises(KeyError):
            session.remove_address(5)

    def test_selling_platform_rows(self):
        session = OnboardingSession()
        assert session.add_selling_platform() == 1
        session.remove_selling_platform(0)
        session.remove_selling_platform(0)
        assert session.snapshot.selling_on == []
        with pytest.raises(KeyError):
            session.remove_selling_platform(0)


class TestEngineHooks:
    def test_verification_flag_and_label(self):
        session = OnboardingSession()
        assert session.next_label == "Next"
        session.begin_verification()
        assert session.is_verifying
        assert session.next_label == "Verifying..."
        with pytest.raises(RuntimeError):
            session.begin_verification()
        session.end_verification()
        assert session.next_label == "Next"

    def test_submit_label_on_last_form_step(self):
        session = OnboardingSession()
        session.move_to(StepKey.PERSONAL_DETAILS)
        assert session.next_label == "Submit"

    def test_document_verified_clears_its_error(self):
        session = OnboardingSession()
        session.set_verification_error(0, "CIN verification failed: Strike Off")
        assert session.errors == {"documents.0.number": ["CIN verification failed: Strike Off"]}
        session.mark_document_verified(0)
        assert session.errors == {}
        assert session.snapshot.documents[0].verified is True

    def test_mark_contact_verified(self):
        session = OnboardingSession()
        session.set_field_errors({"email_verified": ["Email is not verified."]})
        session.mark_contact_verified(OtpChannel.EMAIL)
        assert session.snapshot.email_verified is True
        assert session.errors == {}


class TestLifecycle:
    def test_reset_bumps_generation_and_clears(self, complete_snapshot):
        session = OnboardingSession(snapshot=complete_snapshot())
        session.move_to(TERMINAL_STEP)
        session.set_field_errors({"x": ["y"]})
        session.reset()
        assert session.generation == 1
        assert session.current_step == StepKey.COMPANY_DETAILS
        assert session.errors == {}
        assert session.snapshot.company_name == ""

    def test_load_switches_mode_and_ids(self, complete_snapshot):
        session = OnboardingSession()
        session.load(complete_snapshot(), mode=FormMode.EDIT, company_id="c1", location_id="l1")
        assert session.mode == FormMode.EDIT
        assert (session.company_id, session.location_id) == ("c1", "l1")
        assert session.generation == 1

    def test_view_mode_is_read_only(self):
        session = OnboardingSession(mode=FormMode.VIEW)
        with pytest.raises(ValueError):
            session.set_field("company_name", "x")
        with pytest.raises(ValueError):
            session.add_address()

    def test_state_hides_password(self, complete_snapshot):
        state = OnboardingSession(snapshot=complete_snapshot()).state()
        assert "password" not in state.snapshot
        assert state.can_finish is True
        assert state.first_incomplete_step == TERMINAL_STEP


class TestOnboardingStore:
    def test_save_get_delete(self):
        store = OnboardingStore()
        session = OnboardingSession()
        store.save(session)
        assert store.get(session.id) is session
        assert [s.id for s in store.list_sessions()] == [session.id]
        assert store.delete(session.id) is True
        assert store.get(session.id) is None
        assert store.delete(session.id) is False
