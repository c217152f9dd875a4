# Overview: Plain-text receipt for a committed sale.

from __future__ import annotations

from ..money import format_mmk
from ..time_utils import parse_iso_datetime, format_local
from .payment_service import METHOD_CASH, METHOD_SPLIT
from .pricing_service import unit_price

RULE = "-" * 41


def _centered(text: str) -> str:
    return text.center(len(RULE)).rstrip()


def render_receipt(sale: dict, shop_name: str = "Family Cake") -> str:
    """
    Render the fixed receipt layout.

    Line prices are recomputed from the snapshotted prices and the sale's
    customer class, so the receipt matches what was charged.
    """
    customer_class = sale.get("customer_class") or "retail"
    created_at = parse_iso_datetime(sale.get("created_at"))

    lines = [
        RULE,
        _centered(f"{shop_name} Receipt"),
        RULE,
        f"Date: {format_local(created_at)}",
        f"Customer: {sale.get('customer_name') or 'Walk-in Customer'}",
        f"Customer Type: {customer_class.upper()}",
        RULE,
        "Items:",
    ]

    for item in sale.get("items") or []:
        price = unit_price(item, customer_class)
        quantity = item.get("quantity") or 0
        lines.append(
            f"{item.get('name')} x {quantity} @ {format_mmk(price)} = {format_mmk(price * quantity)}"
        )

    method = sale.get("payment_method") or ""
    lines += [
        RULE,
        f"Subtotal: {format_mmk(sale.get('total_amount'))}",
        f"Total   : {format_mmk(sale.get('total_amount'))}",
        f"Payment : {method.upper()}",
    ]

    if method == METHOD_CASH:
        lines.append(f"Cash Recvd: {format_mmk(sale.get('cash_paid'))}")
        lines.append(f"Change    : {format_mmk(sale.get('change'))}")
    elif method == METHOD_SPLIT:
        if (sale.get("cash_paid") or 0) > 0:
            lines.append(f"Cash Paid: {format_mmk(sale.get('cash_paid'))}")
        if (sale.get("credit_paid") or 0) > 0:
            lines.append(f"Credit Paid: {format_mmk(sale.get('credit_paid'))}")
        if (sale.get("mobile_paid") or 0) > 0:
            lines.append(f"Mobile Paid: {format_mmk(sale.get('mobile_paid'))}")
        if (sale.get("change") or 0) > 0:
            lines.append(f"Change    : {format_mmk(sale.get('change'))}")

    lines += [
        "",
        f"Profit  : {format_mmk(sale.get('profit'))}",
        RULE,
        _centered("Thank You!"),
        RULE,
    ]
    return "\n".join(lines) + "\n"
