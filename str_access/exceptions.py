"""Exception hierarchy for the guest access service."""

from __future__ import annotations


class StrAccessError(Exception):
    """Base exception for all str_access errors."""


class InvalidRequestError(StrAccessError):
    """A required request field is missing or empty."""


class ReservationNotFoundError(StrAccessError):
    """No reservation record matches the access code."""

    def __init__(self, code: str) -> None:
        self.code = code
        super().__init__(f"Reservation not found for code {code!r}")


class AccessNotActiveError(StrAccessError):
    """The reservation is outside its check-in/check-out window."""

    def __init__(self, phase: str, *, code: str = "", step_id: str = "") -> None:
        self.phase = phase
        self.code = code
        self.step_id = step_id
        super().__init__(f"Access not active (phase={phase})")


class AgentDispatchError(StrAccessError):
    """The access agent rejected the unlock or could not be reached.

    Never propagated to callers of the authorizer: ``result`` is reported
    as the outcome string instead.
    """

    def __init__(
        self,
        message: str,
        *,
        result: str,
        response: dict | None = None,
        status_code: int | None = None,
    ) -> None:
        self.result = result
        self.response = response
        self.status_code = status_code
        super().__init__(message)


class StoreUnavailableError(StrAccessError):
    """A backing store could not be read or written."""
