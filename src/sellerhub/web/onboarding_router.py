"""FastAPI router for the onboarding wizard."""

from __future__ import annotations

from typing import Any

import httpx
from fastapi import APIRouter, HTTPException, Request
from pydantic import BaseModel, Field

from sellerhub.bridge.adapters import ONBOARDING_API
from sellerhub.core.types import FormMode
from sellerhub.onboarding.mapping import snapshot_from_record
from sellerhub.onboarding.models import (
    NavigationResult,
    OtpChannel,
    OtpResult,
    StepKey,
    SubmissionResult,
    ValidationResult,
)
from sellerhub.onboarding.session import OnboardingSession, SessionState

router = APIRouter(prefix="/api/onboarding")


# --- Request/Response models ---


class StartSessionRequest(BaseModel):
    mode: FormMode = FormMode.ADD
    company_id: str | None = None
    location_id: str | None = None
    record: dict[str, Any] | None = None


class UpdateFieldsRequest(BaseModel):
    fields: dict[str, Any] = Field(default_factory=dict)


class OtpVerifyRequest(BaseModel):
    code: str


class NavigationResponse(BaseModel):
    result: NavigationResult
    state: SessionState


class OtpResponse(BaseModel):
    result: OtpResult
    state: SessionState


class SubmissionResponse(BaseModel):
    result: SubmissionResult
    state: SessionState


def _get_session(request: Request, session_id: str) -> OnboardingSession:
    session = request.app.state.onboarding_store.get(session_id)
    if session is None:
        raise HTTPException(status_code=404, detail=f"Session {session_id!r} not found")
    return session


def _ensure_writable(session: OnboardingSession) -> None:
    if session.read_only:
        raise HTTPException(status_code=409, detail="Session is read-only")


# --- Session endpoints ---


@router.post("/sessions", status_code=201)
async def start_session(body: StartSessionRequest, request: Request) -> SessionState:
    state = request.app.state
    kinds = state.document_kinds
    snapshot = None

    if body.mode != FormMode.ADD:
        if not (body.company_id and body.location_id):
            raise HTTPException(status_code=400, detail="Missing required data for update")
        record = body.record
        if record is None:
            api = state.adapter_registry.require(ONBOARDING_API)
            try:
                record = await api.fetch(body.company_id, body.location_id)
            except KeyError as e:
                raise HTTPException(status_code=404, detail=str(e))
            except httpx.HTTPError as e:
                raise HTTPException(status_code=502, detail=f"Could not load company: {e}")
        try:
            snapshot = snapshot_from_record(record, kinds)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))

    session = OnboardingSession(
        mode=body.mode,
        company_id=body.company_id,
        location_id=body.location_id,
        snapshot=snapshot,
        kinds=kinds,
    )
    state.onboarding_store.save(session)
    return session.state()


@router.get("/sessions/{session_id}")
async def get_session(session_id: str, request: Request) -> SessionState:
    return _get_session(request, session_id).state()


@router.delete("/sessions/{session_id}", status_code=204)
async def discard_session(session_id: str, request: Request) -> None:
    if not request.app.state.onboarding_store.delete(session_id):
        raise HTTPException(status_code=404, detail=f"Session {session_id!r} not found")


@router.patch("/sessions/{session_id}/fields")
async def update_fields(
    session_id: str, body: UpdateFieldsRequest, request: Request
) -> SessionState:
    session = _get_session(request, session_id)
    _ensure_writable(session)
    try:
        session.update(body.fields)
    except KeyError as e:
        raise HTTPException(status_code=404, detail=f"Unknown field {e.args[0]!r}")
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return session.state()


@router.post("/sessions/{session_id}/validate")
async def validate_session(
    session_id: str, request: Request, step: StepKey | None = None
) -> ValidationResult:
    session = _get_session(request, session_id)
    engine = request.app.state.validation_engine
    if step is None:
        return engine.validate_all(session.snapshot, session.mode)
    return engine.validate_step(session.snapshot, step, session.mode)


# --- Collections ---


@router.post("/sessions/{session_id}/addresses", status_code=201)
async def add_address(session_id: str, request: Request) -> SessionState:
    session = _get_session(request, session_id)
    _ensure_writable(session)
    session.add_address()
    return session.state()


@router.delete("/sessions/{session_id}/addresses/{index}")
async def remove_address(session_id: str, index: int, request: Request) -> SessionState:
    session = _get_session(request, session_id)
    _ensure_writable(session)
    try:
        session.remove_address(index)
    except KeyError:
        raise HTTPException(status_code=404, detail=f"Address {index} not found")
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return session.state()


@router.post("/sessions/{session_id}/selling-platforms", status_code=201)
async def add_selling_platform(session_id: str, request: Request) -> SessionState:
    session = _get_session(request, session_id)
    _ensure_writable(session)
    session.add_selling_platform()
    return session.state()


@router.delete("/sessions/{session_id}/selling-platforms/{index}")
async def remove_selling_platform(
    session_id: str, index: int, request: Request
) -> SessionState:
    session = _get_session(request, session_id)
    _ensure_writable(session)
    try:
        session.remove_selling_platform(index)
    except KeyError:
        raise HTTPException(status_code=404, detail=f"Selling platform {index} not found")
    return session.state()


# --- Navigation ---


@router.post("/sessions/{session_id}/next")
async def next_step(session_id: str, request: Request) -> NavigationResponse:
    session = _get_session(request, session_id)
    result = await request.app.state.navigation_guard.next(session)
    return NavigationResponse(result=result, state=session.state())


@router.post("/sessions/{session_id}/back")
async def previous_step(session_id: str, request: Request) -> NavigationResponse:
    session = _get_session(request, session_id)
    result = request.app.state.navigation_guard.back(session)
    return NavigationResponse(result=result, state=session.state())


@router.post("/sessions/{session_id}/steps/{step}")
async def go_to_step(session_id: str, step: StepKey, request: Request) -> NavigationResponse:
    session = _get_session(request, session_id)
    result = request.app.state.navigation_guard.go_to(session, step)
    return NavigationResponse(result=result, state=session.state())


# --- OTP ---


@router.post("/sessions/{session_id}/otp/{channel}/send")
async def send_otp(session_id: str, channel: OtpChannel, request: Request) -> OtpResponse:
    session = _get_session(request, session_id)
    _ensure_writable(session)
    result = await request.app.state.otp_service.send(session, channel)
    return OtpResponse(result=result, state=session.state())


@router.post("/sessions/{session_id}/otp/{channel}/verify")
async def verify_otp(
    session_id: str, channel: OtpChannel, body: OtpVerifyRequest, request: Request
) -> OtpResponse:
    session = _get_session(request, session_id)
    _ensure_writable(session)
    result = await request.app.state.otp_service.verify(session, channel, body.code)
    return OtpResponse(result=result, state=session.state())


# --- Submission ---


@router.post("/sessions/{session_id}/submit")
async def submit(session_id: str, request: Request) -> SubmissionResponse:
    session = _get_session(request, session_id)
    _ensure_writable(session)
    result = await request.app.state.submission_coordinator.finish(session)
    return SubmissionResponse(result=result, state=session.state())
