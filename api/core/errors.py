"""
Service error taxonomy.

Each error carries the HTTP status it maps to; `main.py` renders every
`ServiceError` as a `{success: false, message, ...}` envelope.
"""

from __future__ import annotations

from typing import Any


class ServiceError(RuntimeError):
    status_code = 500

    def __init__(self, message: str, *, error: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.error = error

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"success": False, "message": self.message}
        if self.error:
            payload["error"] = self.error
        return payload


class ValidationError(ServiceError):
    status_code = 400

    def __init__(self, message: str, *, fields: list[str] | None = None) -> None:
        super().__init__(message)
        self.fields = list(fields or [])

    def to_payload(self) -> dict[str, Any]:
        payload = super().to_payload()
        if self.fields:
            payload["fields"] = self.fields
        return payload


class ConfigurationError(ServiceError):
    pass


class StorageError(ServiceError):
    pass
