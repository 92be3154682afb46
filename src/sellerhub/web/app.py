"""FastAPI application for the SellerHub onboarding engine.

Exposes the onboarding wizard as a JSON API so a browser client (or a test)
can drive a session step by step.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel

from sellerhub import __version__
from sellerhub.bridge.adapters import ONBOARDING_API, OTP
from sellerhub.bridge.registry import AdapterRegistry, create_adapter_registry
from sellerhub.core.config import Settings
from sellerhub.onboarding.navigation import NavigationGuard
from sellerhub.onboarding.otp import OtpService
from sellerhub.onboarding.steps import load_document_kinds
from sellerhub.onboarding.store import OnboardingStore
from sellerhub.onboarding.submission import SubmissionCoordinator
from sellerhub.onboarding.validation import ValidationEngine
from sellerhub.onboarding.verification import DocumentVerifier, verifiers_from_registry
from sellerhub.web.onboarding_router import router as onboarding_router

logger = logging.getLogger(__name__)


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    service: str
    version: str = __version__
    adapters: dict[str, str] = {}


def create_app(
    settings: Settings | None = None,
    adapter_registry: AdapterRegistry | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Uses the factory pattern so tests can create isolated app instances
    with mock dependencies.

    Args:
        settings: Application settings. Defaults to Settings().
        adapter_registry: Optional pre-built adapters. Defaults to the
            adapters selected by ``settings``.

    Returns:
        A configured FastAPI instance.
    """
    if settings is None:
        settings = Settings()

    logging.getLogger("sellerhub").setLevel(settings.log_level.upper())

    if adapter_registry is None:
        adapter_registry = create_adapter_registry(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        await adapter_registry.close_all()

    app = FastAPI(
        title="SellerHub Onboarding",
        description="Company and brand onboarding wizard engine",
        version=__version__,
        debug=settings.debug,
        lifespan=lifespan,
    )

    # CORS for development
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    kinds = load_document_kinds(settings.onboarding.document_kinds_path)
    validation_engine = ValidationEngine(kinds=kinds)
    document_verifier = DocumentVerifier(verifiers_from_registry(adapter_registry), kinds=kinds)
    navigation_guard = NavigationGuard(validation_engine, document_verifier)
    otp_service = OtpService(adapter_registry.require(OTP))  # type: ignore[arg-type]
    submission_coordinator = SubmissionCoordinator(
        adapter_registry.require(ONBOARDING_API),  # type: ignore[arg-type]
        validation_engine,
        role_id=settings.onboarding.role_id,
    )

    # Store on app state for access in route handlers
    app.state.settings = settings
    app.state.document_kinds = kinds
    app.state.adapter_registry = adapter_registry
    app.state.onboarding_store = OnboardingStore()
    app.state.validation_engine = validation_engine
    app.state.document_verifier = document_verifier
    app.state.navigation_guard = navigation_guard
    app.state.otp_service = otp_service
    app.state.submission_coordinator = submission_coordinator

    app.include_router(onboarding_router)

    @app.get("/api/health", response_model=HealthResponse)
    async def health_check() -> HealthResponse:
        """Health check endpoint."""
        return HealthResponse(
            status="healthy",
            service="sellerhub-onboarding",
            adapters={
                name: status.value
                for name, status in adapter_registry.health_check_all().items()
            },
        )

    logger.info(
        "SellerHub app created (environment=%s, adapters=%s)",
        settings.environment, ", ".join(adapter_registry.adapter_names),
    )
    return app
