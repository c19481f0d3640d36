# Overview: Domain error taxonomy shared by services and routes.

"""
Domain errors for ordering, stock and billing.

Every error carries a stable ``code`` that is returned to API callers as
the ``error`` field, and an HTTP status used by the route layer. Services
raise these; routes translate them with ``to_response()``.
"""

from __future__ import annotations


class FoodbookError(Exception):
    """Base class for business-rule failures."""
    code = "Error"
    http_status = 400
    default_message = "Request failed"

    def __init__(self, message: str | None = None, details: dict | None = None):
        super().__init__(message or self.default_message)
        self.details = details or {}

    def to_dict(self) -> dict:
        body = {"error": self.code, "message": str(self)}
        if self.details:
            body["details"] = self.details
        return body

    def to_response(self) -> tuple[dict, int]:
        return self.to_dict(), self.http_status


class NotFound(FoodbookError):
    """Product or order missing, or not owned by the caller."""
    code = "NotFound"
    http_status = 404
    default_message = "Not found"


class InsufficientStock(FoodbookError):
    code = "InsufficientStock"
    http_status = 409
    default_message = "Not enough stock"


class OutOfStock(InsufficientStock):
    """Raised when a single unit cannot be added to a bill."""
    code = "OutOfStock"
    default_message = "Out of stock"


class EmptyOrder(FoodbookError):
    code = "EmptyOrder"
    http_status = 400
    default_message = "Order has no items"


class MixedOwnerError(FoodbookError):
    code = "MixedOwnerError"
    http_status = 400
    default_message = "Order items belong to different restaurants"


class ItemNotFound(FoodbookError):
    code = "ItemNotFound"
    http_status = 404
    default_message = "Item not found in any active order"


class InvalidTransition(FoodbookError):
    code = "InvalidTransition"
    http_status = 409
    default_message = "Status change not allowed"


class NoOrdersFound(FoodbookError):
    code = "NoOrdersFound"
    http_status = 404
    default_message = "No completed orders found to pay"


class Unauthorized(FoodbookError):
    code = "Unauthorized"
    http_status = 401
    default_message = "Authentication required"
