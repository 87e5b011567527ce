"""Domain errors raised by the service layer and mapped to HTTP responses by the API."""
from __future__ import annotations


class ReportError(RuntimeError):
    """Base class for report lifecycle failures."""


class ReportValidationError(ReportError):
    """Raised when an inbound report payload fails validation.

    ``errors`` always holds every failing field, never just the first one.
    """

    def __init__(self, errors: list[dict[str, str]]) -> None:
        self.errors = errors
        fields = ", ".join(error["field"] for error in errors)
        super().__init__(f"Invalid report data: {fields}")


class InvalidStatusError(ReportError):
    def __init__(self, status: object) -> None:
        self.status = status
        super().__init__(f"Invalid status: {status!r}")


class InvalidTransitionError(ReportError):
    def __init__(self, current: str, target: str) -> None:
        self.current = current
        self.target = target
        super().__init__(f"Cannot move report from {current} to {target}")


class StoreError(RuntimeError):
    """Raised when the database rejects or fails an operation."""


class AuthError(RuntimeError):
    """Raised for any credential mismatch. The message never says which part was wrong."""

    def __init__(self) -> None:
        super().__init__("Invalid credentials")


class UsernameTakenError(ValueError):
    def __init__(self, username: str) -> None:
        self.username = username
        super().__init__("Username already taken")
