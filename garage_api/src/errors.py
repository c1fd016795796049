"""
Domain-specific exceptions for the vehicle and parts API.

These exceptions represent business rule violations and store failures.
The GraphQL layer reports them in the ``errors`` array with their message
and ``extensions.code``; anything else is masked.
"""

from typing import Any, Dict, Optional


class GarageError(Exception):
    """Base exception for all vehicle/part domain errors."""

    code = "GARAGE_ERROR"

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)

    @property
    def extensions(self) -> Dict[str, Any]:
        """GraphQL error extensions (picked up by graphql-core)."""
        return {"code": self.code, **self.details}


class ValidationFailure(GarageError):
    """
    Raised when input is rejected before any store call.

    Examples:
    - Blank vehicle or part name
    - Year range with start after end
    """

    code = "BAD_USER_INPUT"


class InvalidIdentifierError(ValidationFailure):
    """Raised when an id is not a valid ObjectId string."""

    def __init__(self, field: str, value: str):
        super().__init__(
            f"Invalid {field}: '{value}' is not a valid identifier",
            {"field": field},
        )


class NotFoundError(GarageError):
    """
    Raised when a mutation targets a record that does not exist.

    Reads never raise this; they return ``None`` or an empty list.
    """

    code = "NOT_FOUND"


class MalformedRecordError(GarageError):
    """Raised when a stored document lacks a mandatory attribute."""

    code = "MALFORMED_RECORD"

    def __init__(self, record_type: str, missing: str, record_id: Optional[str] = None):
        super().__init__(
            f"Stored {record_type} is missing mandatory attribute '{missing}'",
            {"record_type": record_type, "attribute": missing, "record_id": record_id},
        )


class StoreFailure(GarageError):
    """Raised when MongoDB rejects or cannot serve an operation."""

    code = "STORE_FAILURE"


class EnrichmentError(Exception):
    """Raised by enrichment providers; always absorbed by the resolver."""
