"""In-memory store for intake wizard sessions."""

from __future__ import annotations

from casework.core.types import SessionStatus
from casework.intake.controller import WizardController


class IntakeStore:
    """In-memory dict of live wizard controllers keyed by session id.

    Suitable for single-instance deployment; sessions do not survive a restart.
    """

    def __init__(self) -> None:
        self._sessions: dict[str, WizardController] = {}

    def save(self, controller: WizardController) -> None:
        self._sessions[controller.id] = controller

    def get(self, session_id: str) -> WizardController | None:
        return self._sessions.get(session_id)

    def remove(self, session_id: str) -> bool:
        return self._sessions.pop(session_id, None) is not None

    def list_sessions(self, status: SessionStatus | None = None) -> list[WizardController]:
        return [
            c for c in self._sessions.values()
            if status is None or c.status == status
        ]
