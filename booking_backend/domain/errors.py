"""Failure types shared by the repository and service layers."""

from __future__ import annotations


class BookingEngineError(Exception):
    """Base exception for availability, pricing and calendar workflows."""


class StayValidationError(BookingEngineError):
    """Raised when stay parameters are missing, malformed or inconsistent."""


class CategoryNotFoundError(BookingEngineError):
    """Raised when a room category is absent from the CRM response."""


class RoomUnavailableError(BookingEngineError):
    """Raised when a booking targets a room that is taken for the range."""


class CollaboratorError(BookingEngineError):
    """Raised when the CRM (transport, credentials or payload) fails."""

    retryable = False


class CollaboratorTimeoutError(CollaboratorError):
    """Raised when the CRM does not answer in time. Safe to retry."""

    retryable = True


class CredentialDecryptionError(CollaboratorError):
    """Raised when the stored endpoint cannot be decrypted."""


class BatchQueryError(CollaboratorError):
    """Raised when any sub-query of a batch call reports an error."""

    def __init__(self, errors: dict[str, object]) -> None:
        self.errors = dict(errors)
        super().__init__(f"Batch request errors: {self.errors}")


class UnsupportedRoomFieldError(CollaboratorError):
    """Raised when a category field is neither an enumeration nor a boolean."""
