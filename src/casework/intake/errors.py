"""Exceptions raised at the boundary with the case service."""

from __future__ import annotations


class IntakeError(Exception):
    """Base class for intake transport and lifecycle failures."""


class ReferenceDataLoadError(IntakeError):
    """A catalogue (facilities, case workers, programs, expense types) failed to load.

    The session cannot proceed without reference data.
    """


class RecordLoadError(IntakeError):
    """The existing record requested for edit could not be loaded."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class SubmissionError(IntakeError):
    """The service rejected or never received a submission. Safe to retry."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code
