# regionhub/utils/errors.py
from typing import Dict, Optional


class ServiceError(Exception):
    """Base error raised by the service layer.

    Carries a machine readable ``kind``, the HTTP status used at the request
    boundary and an optional field-keyed ``errors`` map.
    """

    kind = "internal"
    status_code = 500

    def __init__(self, message: str, errors: Optional[Dict[str, str]] = None):
        super().__init__(message)
        self.message = message
        self.errors = errors or {}

    def to_dict(self) -> dict:
        return {"kind": self.kind, "message": self.message, "errors": self.errors}


class ValidationFailed(ServiceError):
    kind = "validation"
    status_code = 422


class NotFound(ServiceError):
    kind = "not_found"
    status_code = 404


class Conflict(ServiceError):
    kind = "conflict"
    status_code = 409


class InsufficientStock(ServiceError):
    kind = "insufficient_stock"
    status_code = 409


class Forbidden(ServiceError):
    kind = "forbidden"
    status_code = 403


class RetryableError(ServiceError):
    kind = "timeout"
    status_code = 503


class InternalError(ServiceError):
    kind = "internal"
    status_code = 500


def require_fields(**values) -> Dict[str, str]:
    # Collect "<field> is required" for every empty value
    return {name: f"{name.replace('_', ' ').capitalize()} is required"
            for name, value in values.items()
            if value is None or (isinstance(value, str) and not value.strip())}
