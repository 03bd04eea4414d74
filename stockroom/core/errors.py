"""Error taxonomy shared by services and the HTTP layer.

Every domain failure is a StockroomError carrying a caller-safe message and the
HTTP status it maps to. Credential failures keep their cause out of the message;
domain errors (NotFound, Conflict, InsufficientStock) use the diagnostic itself.
"""

from typing import Any


class StockroomError(Exception):
    """Base class for errors surfaced to API callers as {"message": ...}."""

    status_code: int = 500

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)

    def to_payload(self) -> dict[str, Any]:
        return {"message": self.message}


class Unauthenticated(StockroomError):
    """No usable identity could be extracted from the request."""

    status_code = 401


class InvalidCredential(Unauthenticated):
    """Bearer token failed signature, structure, or expiry checks."""

    def __init__(self, message: str = "Invalid or expired token") -> None:
        super().__init__(message)


class Forbidden(StockroomError):
    """Identity is known but its role does not grant the capability."""

    status_code = 403


class NotFound(StockroomError):
    status_code = 404


class Conflict(StockroomError):
    """Uniqueness violation (sku, username, or article/location pair)."""

    status_code = 409


class InsufficientStock(StockroomError):
    """An adjustment would drive a stock record below zero."""

    status_code = 400

    def __init__(self, current_quantity: int, requested_delta: int) -> None:
        self.current_quantity = current_quantity
        self.requested_delta = requested_delta
        self.attempted_quantity = current_quantity + requested_delta
        super().__init__(
            f"Insufficient stock. Current quantity: {current_quantity}, "
            f"requested adjustment: {requested_delta}"
        )

    def to_payload(self) -> dict[str, Any]:
        return {
            "message": self.message,
            "current_quantity": self.current_quantity,
            "requested_delta": self.requested_delta,
            "attempted_quantity": self.attempted_quantity,
        }


class ValidationError(StockroomError):
    """Malformed or inconsistent input (e.g. path id differs from body id)."""

    status_code = 400


class ConfigurationError(StockroomError):
    """Fatal misconfiguration detected at startup (e.g. missing JWT_SECRET)."""

    status_code = 500


class PersistenceError(StockroomError):
    """Unexpected storage failure; never retried."""

    status_code = 500
