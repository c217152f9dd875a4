# Overview: Validates how a sale total is paid and derives the settlement breakdown.

"""
Payment Reconciliation

DESIGN PRINCIPLES:
- Pure: no store access, recomputed from inputs on every call
- Every channel amount is whole MMK; blank inputs count as 0
- `reconcile` raises on an unacceptable payment, `preview` never does
"""

from __future__ import annotations

from dataclasses import dataclass, asdict

from ..errors import InsufficientPayment, NoCreditCustomer, ValidationError
from ..money import to_amount


# =============================================================================
# PAYMENT METHODS (CONSTANTS)
# =============================================================================

METHOD_CASH = "cash"
METHOD_CREDIT = "credit"
METHOD_MOBILE = "mobile"
METHOD_SPLIT = "split"

VALID_PAYMENT_METHODS = [
    METHOD_CASH,
    METHOD_CREDIT,
    METHOD_MOBILE,
    METHOD_SPLIT,
]


@dataclass
class PendingPayment:
    """Raw payment inputs as typed at the till."""
    method: str = METHOD_CASH
    cash_received: object = ""
    cash_amount: object = ""
    credit_amount: object = ""
    mobile_amount: object = ""

    def set_method(self, method: str) -> None:
        if method not in VALID_PAYMENT_METHODS:
            raise ValidationError(
                f"Invalid payment method: {method}. Must be one of {VALID_PAYMENT_METHODS}"
            )
        self.method = method

    def set_amounts(self, **amounts) -> None:
        for key, value in amounts.items():
            if key not in ("cash_received", "cash_amount", "credit_amount", "mobile_amount"):
                raise ValidationError(f"Unknown payment field: {key}")
            setattr(self, key, value)

    def reset(self) -> None:
        self.method = METHOD_CASH
        self.cash_received = ""
        self.cash_amount = ""
        self.credit_amount = ""
        self.mobile_amount = ""

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class Settlement:
    method: str
    total: int
    cash_paid: int = 0
    credit_paid: int = 0
    mobile_paid: int = 0
    change: int = 0

    @property
    def paid_total(self) -> int:
        return self.cash_paid + self.credit_paid + self.mobile_paid

    def to_dict(self) -> dict:
        data = asdict(self)
        data["paid_total"] = self.paid_total
        return data


def _channel(payment: PendingPayment, field: str) -> int:
    amount = to_amount(getattr(payment, field))
    if amount < 0:
        raise ValidationError(
            "Payment amounts cannot be negative.",
            details={field: amount},
        )
    return amount


def reconcile(total, payment: PendingPayment, customer_id: int | None = None) -> Settlement:
    """
    Validate `payment` against `total` and return the settlement.

    Raises:
        InsufficientPayment: cash or split amounts do not cover the total
        NoCreditCustomer: credit sale for a walk-in customer
        ValidationError: unknown payment method, or a negative amount
    """
    total = to_amount(total)
    method = payment.method

    if method == METHOD_CASH:
        received = _channel(payment, "cash_received")
        if received < total:
            raise InsufficientPayment(
                "Insufficient cash received!",
                details={"total": total, "cash_received": received},
            )
        return Settlement(method=method, total=total, cash_paid=received, change=received - total)

    if method == METHOD_CREDIT:
        if customer_id is None:
            raise NoCreditCustomer(
                "Cannot process credit payment for walk-in customer. Please select a customer."
            )
        return Settlement(method=method, total=total, credit_paid=total)

    if method == METHOD_MOBILE:
        return Settlement(method=method, total=total, mobile_paid=total)

    if method == METHOD_SPLIT:
        cash = _channel(payment, "cash_amount")
        credit = _channel(payment, "credit_amount")
        mobile = _channel(payment, "mobile_amount")
        paid = cash + credit + mobile
        if paid < total:
            raise InsufficientPayment(
                "Split payment amounts do not cover total!",
                details={"total": total, "paid_total": paid, "remaining": total - paid},
            )
        return Settlement(
            method=method,
            total=total,
            cash_paid=cash,
            credit_paid=credit,
            mobile_paid=mobile,
            change=paid - total,
        )

    raise ValidationError(
        f"Invalid payment method: {method}. Must be one of {VALID_PAYMENT_METHODS}"
    )


def preview(total, payment: PendingPayment) -> dict:
    """
    Live figures for the payment panel while amounts are being typed.

    `change` is never negative; `remaining` is what is still owed.
    """
    total = to_amount(total)
    method = payment.method

    if method == METHOD_CASH:
        paid = to_amount(payment.cash_received)
    elif method == METHOD_SPLIT:
        paid = (
            to_amount(payment.cash_amount)
            + to_amount(payment.credit_amount)
            + to_amount(payment.mobile_amount)
        )
    else:
        # Credit and mobile always settle the exact total
        paid = total

    return {
        "method": method,
        "total": total,
        "paid_total": paid,
        "change": max(paid - total, 0),
        "remaining": max(total - paid, 0),
        "sufficient": paid >= total,
    }
