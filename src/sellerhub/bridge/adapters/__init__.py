"""Provider registry for bridge adapters."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from sellerhub.bridge.base import BaseBridgeAdapter

from sellerhub.bridge.adapters.mock import (
    MockCompanyRegistryAdapter,
    MockOnboardingApiAdapter,
    MockOtpAdapter,
    MockTaxIdentityAdapter,
    MockTaxRegistrationAdapter,
)
from sellerhub.bridge.adapters.onboarding_api import OnboardingApiAdapter
from sellerhub.bridge.adapters.otp import OtpAdapter
from sellerhub.bridge.adapters.registries import (
    CompanyRegistryAdapter,
    TaxIdentityAdapter,
    TaxRegistrationAdapter,
)

COMPANY_REGISTRY = "company_registry"
TAX_REGISTRATION = "tax_registration"
TAX_IDENTITY = "tax_identity"
OTP = "otp"
ONBOARDING_API = "onboarding_api"

# provider -> adapter name -> class
PROVIDER_REGISTRY: dict[str, dict[str, type[BaseBridgeAdapter]]] = {
    "http": {
        COMPANY_REGISTRY: CompanyRegistryAdapter,
        TAX_REGISTRATION: TaxRegistrationAdapter,
        TAX_IDENTITY: TaxIdentityAdapter,
        OTP: OtpAdapter,
        ONBOARDING_API: OnboardingApiAdapter,
    },
    "mock": {
        COMPANY_REGISTRY: MockCompanyRegistryAdapter,
        TAX_REGISTRATION: MockTaxRegistrationAdapter,
        TAX_IDENTITY: MockTaxIdentityAdapter,
        OTP: MockOtpAdapter,
        ONBOARDING_API: MockOnboardingApiAdapter,
    },
}

__all__ = [
    "COMPANY_REGISTRY",
    "ONBOARDING_API",
    "OTP",
    "PROVIDER_REGISTRY",
    "TAX_IDENTITY",
    "TAX_REGISTRATION",
    "CompanyRegistryAdapter",
    "MockCompanyRegistryAdapter",
    "MockOnboardingApiAdapter",
    "MockOtpAdapter",
    "MockTaxIdentityAdapter",
    "MockTaxRegistrationAdapter",
    "OnboardingApiAdapter",
    "OtpAdapter",
    "TaxIdentityAdapter",
    "TaxRegistrationAdapter",
]
