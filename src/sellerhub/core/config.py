"""Application configuration loaded from environment and config files."""

from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings


class OnboardingConfig(BaseSettings):
    """Onboarding wizard configuration."""

    model_config = {"env_prefix": "SELLERHUB_ONBOARDING_"}

    role_id: str = "6875fc068683bb026013181b"
    document_kinds_path: str = "config/document_kinds.yml"


class VerificationConfig(BaseSettings):
    """Document registry verification configuration."""

    model_config = {"env_prefix": "SELLERHUB_VERIFICATION_"}

    provider: str = "mock"
    company_registry_url: str = "http://localhost:8100"
    tax_registration_url: str = "http://localhost:8101"
    tax_identity_url: str = "http://localhost:8102"
    api_key: str | None = None
    timeout_seconds: int = 30
    max_retries: int = 1


class OtpConfig(BaseSettings):
    """OTP collaborator configuration."""

    model_config = {"env_prefix": "SELLERHUB_OTP_"}

    provider: str = "mock"
    base_url: str = "http://localhost:8000/api/v1"
    timeout_seconds: int = 15
    max_retries: int = 0


class OnboardingApiConfig(BaseSettings):
    """Back-office REST API used for onboarding submission."""

    model_config = {"env_prefix": "SELLERHUB_API_"}

    provider: str = "mock"
    base_url: str = "http://localhost:8000/api/v1"
    timeout_seconds: int = 60
    max_retries: int = 0


class Settings(BaseSettings):
    """Root application settings."""

    model_config = {"env_prefix": "SELLERHUB_"}

    environment: str = "development"
    debug: bool = False
    log_level: str = "INFO"

    onboarding: OnboardingConfig = Field(default_factory=OnboardingConfig)
    verification: VerificationConfig = Field(default_factory=VerificationConfig)
    otp: OtpConfig = Field(default_factory=OtpConfig)
    api: OnboardingApiConfig = Field(default_factory=OnboardingApiConfig)
