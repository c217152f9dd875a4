"""
Transaction engine errors.

Every error aborts exactly one operation and leaves prior state untouched.
Routes turn them into {"error", "code", "details"} JSON with `http_status`.
"""


class PosError(Exception):
    """Base class for recoverable till errors."""
    code = "OPERATION_FAILED"
    http_status = 400

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> dict:
        return {"error": self.message, "code": self.code, "details": self.details}


class ValidationError(PosError):
    """Malformed input (bad delta, unknown payment method, bad amount)."""
    code = "VALIDATION_ERROR"


class StockExceeded(PosError):
    code = "STOCK_EXCEEDED"
    http_status = 409


class InsufficientPayment(PosError):
    code = "INSUFFICIENT_PAYMENT"


class NoCreditCustomer(PosError):
    code = "NO_CREDIT_CUSTOMER"


class EmptyCart(PosError):
    code = "EMPTY_CART"


class ConcurrentStockChange(PosError):
    """A product changed or vanished between cart assembly and commit."""
    code = "CONCURRENT_STOCK_CHANGE"
    http_status = 409


class NotFound(PosError):
    code = "NOT_FOUND"
    http_status = 404


class SaleNotFound(NotFound):
    code = "SALE_NOT_FOUND"


class InvalidReturnRequest(PosError):
    code = "INVALID_RETURN_REQUEST"


class PrivilegeDenied(PosError):
    code = "PRIVILEGE_DENIED"
    http_status = 403


class StoreUnavailable(PosError):
    """The document store rejected or failed a write; safe to retry."""
    code = "STORE_UNAVAILABLE"
    http_status = 503
