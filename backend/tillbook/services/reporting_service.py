# Overview: Read-only text reports over the sales and expense ledgers, plus file export.

from __future__ import annotations

from collections import OrderedDict
from datetime import date
from pathlib import Path

from ..errors import ValidationError
from ..money import format_mmk, to_amount
from tillbook.time_utils import parse_iso_date, parse_iso_datetime, utcnow
from .catalog_store import CatalogStore
from .pricing_service import unit_price

REPORT_TYPES = ["daily", "monthly", "product", "profit"]


def _title(expense_type: str) -> str:
    return expense_type.replace("_", " ").title()


def _on(records: list[dict], prefix: str) -> list[dict]:
    return [r for r in records if (r.get("created_at") or "").startswith(prefix)]


def _time(record: dict) -> str:
    dt = parse_iso_datetime(record.get("created_at"))
    return dt.strftime("%H:%M:%S") if dt else ""


def _items_summary(sale: dict) -> str:
    return ", ".join(f"{i.get('name')} x {i.get('quantity')}" for i in sale.get("items") or [])


def _sum(records: list[dict], field: str) -> int:
    return sum(to_amount(r.get(field)) for r in records)


def _stats(lines: list[str], *pairs: tuple[str, int]) -> None:
    width = max(len(label) for label, _ in pairs)
    for label, value in pairs:
        lines.append(f"{label.ljust(width)} : {format_mmk(value)}")


def _daily(sales: list[dict], expenses: list[dict], target: date) -> list[str]:
    day = target.isoformat()
    day_sales = _on(sales, day)
    day_expenses = _on(expenses, day)
    total_sales = _sum(day_sales, "total_amount")
    total_expenses = _sum(day_expenses, "amount")

    lines = [f"Daily Report for {day}", ""]
    _stats(
        lines,
        ("Total Sales", total_sales),
        ("Total Expenses", total_expenses),
        ("Net Profit", total_sales - total_expenses),
        ("Gross Profit", _sum(day_sales, "profit")),
    )

    lines += ["", "Sales Details:"]
    for s in day_sales:
        lines.append(
            f"{_time(s)}  #{s['id']}  {_items_summary(s)}  "
            f"Total: {format_mmk(s.get('total_amount'))}  Profit: {format_mmk(s.get('profit'))}"
        )

    lines += ["", "Expense Details:"]
    for e in day_expenses:
        lines.append(
            f"{_time(e)}  {_title(e['type'])}  {e.get('description') or 'N/A'}  {format_mmk(e.get('amount'))}"
        )
    return lines


def _monthly(sales: list[dict], expenses: list[dict], target: date) -> list[str]:
    month = target.isoformat()[:7]
    month_sales = _on(sales, month)
    month_expenses = _on(expenses, month)
    total_sales = _sum(month_sales, "total_amount")
    total_expenses = _sum(month_expenses, "amount")

    lines = [f"Monthly Report for {month}", ""]
    _stats(
        lines,
        ("Total Sales", total_sales),
        ("Total Expenses", total_expenses),
        ("Net Profit", total_sales - total_expenses),
        ("Gross Profit", _sum(month_sales, "profit")),
    )

    by_product: "OrderedDict[str, dict]" = OrderedDict()
    for s in month_sales:
        cls = s.get("customer_class") or "retail"
        for item in s.get("items") or []:
            entry = by_product.setdefault(item.get("name"), {"quantity": 0, "total": 0, "profit": 0})
            quantity = to_amount(item.get("quantity"))
            price = unit_price(item, cls)
            entry["quantity"] += quantity
            entry["total"] += price * quantity
            entry["profit"] += (price - to_amount(item.get("purchase_price"))) * quantity

    lines += ["", "Sales Summary by Product:"]
    for name, entry in by_product.items():
        lines.append(
            f"{name}  Qty Sold: {entry['quantity']}  Total Sales: {format_mmk(entry['total'])}  "
            f"Total Profit: {format_mmk(entry['profit'])}"
        )

    by_type: "OrderedDict[str, int]" = OrderedDict()
    for e in month_expenses:
        key = _title(e["type"])
        by_type[key] = by_type.get(key, 0) + to_amount(e.get("amount"))

    lines += ["", "Expense Summary by Type:"]
    for expense_type, amount in by_type.items():
        lines.append(f"{expense_type}  {format_mmk(amount)}")
    return lines


def _product(products: list[dict], sales: list[dict]) -> list[str]:
    lines = ["Product Report (Performance)", ""]
    for product in products:
        qty = revenue = profit = 0
        for s in sales:
            cls = s.get("customer_class") or "retail"
            for item in s.get("items") or []:
                if item.get("id") != product["id"]:
                    continue
                quantity = to_amount(item.get("quantity"))
                price = unit_price(item, cls)
                qty += quantity
                revenue += price * quantity
                profit += (price - to_amount(item.get("purchase_price"))) * quantity
        lines.append(
            f"{product['name']}  Stock: {product.get('stock', 0)}  Qty Sold: {qty}  "
            f"Revenue: {format_mmk(revenue)}  Profit: {format_mmk(profit)}"
        )
    return lines


def _profit(sales: list[dict], expenses: list[dict]) -> list[str]:
    revenue = _sum(sales, "total_amount")
    cogs = sum(
        to_amount(item.get("purchase_price")) * to_amount(item.get("quantity"))
        for s in sales
        for item in s.get("items") or []
    )
    total_expenses = _sum(expenses, "amount")
    gross = revenue - cogs

    lines = ["Profit Report Analysis", ""]
    _stats(
        lines,
        ("Total Revenue", revenue),
        ("Cost of Goods Sold", cogs),
        ("Gross Profit", gross),
        ("Total Expenses", total_expenses),
        ("Net Profit", gross - total_expenses),
    )
    return lines


def render_report(store: CatalogStore, report_type: str, target_date: str | date | None = None) -> str:
    """
    Render a report body.

    `target_date` selects the day (daily) or month (monthly); ignored by the
    product and profit reports. Defaults to today (UTC).
    """
    if report_type not in REPORT_TYPES:
        raise ValidationError(f"Invalid report type: {report_type}. Must be one of {REPORT_TYPES}")

    if isinstance(target_date, date):
        target = target_date
    else:
        try:
            target = parse_iso_date(target_date) or utcnow().date()
        except ValueError:
            raise ValidationError(f"Invalid date: {target_date}") from None

    sales = store.list_all("sales")
    expenses = store.list_all("expenses")

    if report_type == "daily":
        lines = _daily(sales, expenses, target)
    elif report_type == "monthly":
        lines = _monthly(sales, expenses, target)
    elif report_type == "product":
        lines = _product(store.list_all("products"), sales)
    else:
        lines = _profit(sales, expenses)

    return "\n".join(lines) + "\n"


def report_filename(report_type: str, on: date | None = None) -> str:
    on = on or utcnow().date()
    return f"{report_type}_report_{on.isoformat()}.txt"


def export_report(
    store: CatalogStore,
    report_type: str,
    export_dir: str | Path,
    target_date: str | date | None = None,
    on: date | None = None,
) -> Path:
    """Write the rendered report to `{type}_report_{date}.txt` and return its path."""
    body = render_report(store, report_type, target_date)
    directory = Path(export_dir)
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / report_filename(report_type, on)
    path.write_text(body, encoding="utf-8")
    return path


def low_stock(store: CatalogStore, threshold: int = 5) -> list[dict]:
    products = store.list_all("products")
    return [p for p in products if to_amount(p.get("stock")) <= threshold]
