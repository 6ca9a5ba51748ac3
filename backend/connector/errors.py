from __future__ import annotations

from typing import Any


class LifecycleError(Exception):
    """Base for every error the lifecycle layer reports to callers.

    Each subclass carries the HTTP status the API should answer with; the
    service layer itself never depends on Flask.
    """

    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict[str, Any]:
        return {"error": self.message}


class InvalidTransition(LifecycleError):
    """Entity is not in the source state the operation requires."""

    status_code = 409


class TermsNotConfirmed(LifecycleError):
    status_code = 409

    def __init__(self, message: str = "Seller must confirm the rules of engagement first"):
        super().__init__(message)


class NotFound(LifecycleError):
    status_code = 404

    def __init__(self, entity: str, entity_id: Any = None):
        label = entity if entity_id is None else f"{entity} {entity_id}"
        super().__init__(f"{label} not found")
        self.entity = entity
        self.entity_id = entity_id


class ValidationError(LifecycleError):
    status_code = 400

    def __init__(self, message: str = "Invalid input", fields: dict | None = None):
        super().__init__(message)
        self.fields = fields or {}

    def to_dict(self) -> dict[str, Any]:
        payload = super().to_dict()
        if self.fields:
            payload["fields"] = self.fields
        return payload


class Forbidden(LifecycleError):
    status_code = 403


class AuthenticationRequired(LifecycleError):
    status_code = 401

    def __init__(self, message: str = "Authentication required"):
        super().__init__(message)
