from __future__ import annotations


class LiftlogError(Exception):
    """Base for every error the tracker reports back to the user."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(LiftlogError):
    """Missing or malformed input, raised before anything touches the database."""


class LockedWeekError(LiftlogError):
    def __init__(self, message: str = "This week is locked and cannot be edited."):
        super().__init__(message)


class StoreError(LiftlogError):
    """Persistence failure or a row that does not exist for this owner."""
