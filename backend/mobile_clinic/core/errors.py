"""Domain errors raised by services and rendered by the application's exception handlers.

Each error carries the HTTP status it maps to and a machine-stable ``kind`` so
clients can branch on the failure without parsing the message.
"""

from __future__ import annotations

from typing import Any


class ClinicError(Exception):
    status_code = 500
    kind = "internal_error"
    default_message = "Internal server error"

    def __init__(self, message: str | None = None, *, errors: list[dict[str, Any]] | None = None) -> None:
        self.message = message or self.default_message
        self.errors = errors
        super().__init__(self.message)

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"kind": self.kind, "detail": self.message}
        if self.errors:
            payload["errors"] = self.errors
        return payload


class ValidationError(ClinicError):
    status_code = 400
    kind = "validation_error"
    default_message = "Validation failed"

    @classmethod
    def for_field(cls, field: str, message: str) -> "ValidationError":
        return cls(message, errors=[{"loc": [field], "msg": message, "type": "value_error"}])


class Unauthorized(ClinicError):
    status_code = 401
    kind = "unauthorized"
    default_message = "Invalid or missing bearer token"


class Forbidden(ClinicError):
    status_code = 403
    kind = "forbidden"
    default_message = "Forbidden"


class NotFound(ClinicError):
    status_code = 404
    kind = "not_found"
    default_message = "Not found"


class DuplicateQueueEntry(ClinicError):
    status_code = 409
    kind = "duplicate_queue_entry"
    default_message = "Duplicate queue number for this location and date"


class DuplicateName(ClinicError):
    status_code = 409
    kind = "duplicate_name"
    default_message = "Name already exists"


class ResourceExhausted(ClinicError):
    status_code = 503
    kind = "resource_exhausted"
    default_message = "Database is busy, please retry"


class InternalError(ClinicError):
    pass
