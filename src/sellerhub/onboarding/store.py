"""In-memory store for onboarding sessions."""

from __future__ import annotations

from sellerhub.onboarding.session import OnboardingSession


class OnboardingStore:
    """In-memory dict store for onboarding sessions.

    Suitable for single-instance deployment; sessions are lost on restart,
    which matches the browser flow where a reload discards the form.
    """

    def __init__(self) -> None:
        self._sessions: dict[str, OnboardingSession] = {}

    def save(self, session: OnboardingSession) -> None:
        self._sessions[session.id] = session

    def get(self, session_id: str) -> OnboardingSession | None:
        return self._sessions.get(session_id)

    def delete(self, session_id: str) -> bool:
        return self._sessions.pop(session_id, None) is not None

    def list_sessions(self) -> list[OnboardingSession]:
        return list(self._sessions.values())
