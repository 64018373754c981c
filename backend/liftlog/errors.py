# liftlog/errors.py
"""
Error taxonomy shared by the spreadsheet layer and the HTTP handlers.

Every class maps to one structured JSON payload (see `to_payload`); the
handlers registered in `liftlog.main` turn them into responses so the client
can always parse a JSON body.
"""
from __future__ import annotations
from typing import Any, Optional


class LiftLogError(Exception):
    status_code: int = 500
    code: str = "error"

    def __init__(self, message: str, **extra: Any):
        super().__init__(message)
        self.message = message
        self.extra = extra

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"error": self.code, "message": self.message}
        payload.update(self.extra)
        return payload

    @property
    def headers(self) -> Optional[dict[str, str]]:
        return None


class Unauthorized(LiftLogError):
    status_code = 401
    code = "unauthorized"

    def __init__(self, message: str = "Not signed in", **extra: Any):
        super().__init__(message, **extra)

    @property
    def headers(self) -> Optional[dict[str, str]]:
        return {"WWW-Authenticate": "Bearer"}


class Misconfigured(LiftLogError):
    status_code = 500
    code = "misconfigured"

    def __init__(self, missing: list[str]):
        super().__init__(
            f"Missing required configuration: {', '.join(missing)}",
            missing=list(missing),
        )
        self.missing = list(missing)


class NotFound(LiftLogError):
    status_code = 404
    code = "not_found"

    def __init__(self, entity: str, key: str):
        super().__init__(f"{entity} not found", entity=entity, id=key)


class BackendFailure(LiftLogError):
    code = "backend_failure"

    def __init__(self, operation: str, status: Optional[int], payload: Any = None):
        super().__init__(
            f"Sheets {operation} failed",
            operation=operation,
            status=status,
            payload=payload,
        )
        # Pass the backend's client/server status through; anything odd becomes a 502
        self.status_code = status if status and 400 <= status < 600 else 502


class ValidationFailure(LiftLogError):
    status_code = 400
    code = "validation_failed"
