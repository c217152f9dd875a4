from datetime import date

import pytest

from tillbook.errors import ValidationError
from tillbook.services import expense_service, reporting_service, return_service, sales_service
from tillbook.time_utils import utcnow


def _stat(report: str, label: str) -> str:
    for line in report.splitlines():
        if line.startswith(label):
            return line.split(":", 1)[1].strip()
    raise AssertionError(f"{label} not in report")


@pytest.fixture
def day_of_trade(store, terminal, admin_terminal, make_product):
    cake = make_product(stock=10, individual_price=500, purchase_price=300)
    for _ in range(3):
        terminal.cart.add_item(cake["id"])
    terminal.set_payment_amounts(cash_received=2000)
    sale = sales_service.checkout(terminal, store).sale
    expense_service.add_expense(admin_terminal, store, "rent", "Stall rent", 200)
    return sale


def test_daily_report_totals(store, day_of_trade):
    report = reporting_service.render_report(store, "daily")

    assert report.startswith(f"Daily Report for {utcnow().date().isoformat()}")
    assert _stat(report, "Total Sales") == "1500 MMK"
    assert _stat(report, "Total Expenses") == "200 MMK"
    assert _stat(report, "Net Profit") == "1300 MMK"
    assert _stat(report, "Gross Profit") == "600 MMK"
    assert "Butter Cake x 3" in report
    assert "Stall rent" in report


def test_daily_report_for_another_day_is_empty(store, day_of_trade):
    report = reporting_service.render_report(store, "daily", "2001-01-01")
    assert _stat(report, "Total Sales") == "0 MMK"
    assert "Butter Cake" not in report


def test_monthly_report_groups_by_product_and_type(store, day_of_trade):
    report = reporting_service.render_report(store, "monthly", utcnow().date())

    assert "Butter Cake  Qty Sold: 3  Total Sales: 1500 MMK  Total Profit: 600 MMK" in report
    assert "Rent  200 MMK" in report


def test_profit_report_after_return(store, admin_terminal, day_of_trade):
    return_service.process_return(admin_terminal, store, day_of_trade["id"], "damaged")

    report = reporting_service.render_report(store, "profit")

    assert _stat(report, "Total Revenue") == "1500 MMK"
    assert _stat(report, "Cost of Goods Sold") == "900 MMK"
    assert _stat(report, "Gross Profit") == "600 MMK"
    assert _stat(report, "Total Expenses") == "1700 MMK"
    assert _stat(report, "Net Profit") == "-1100 MMK"


def test_product_report(store, day_of_trade, make_product):
    make_product(name="Milk Tea", stock=4)
    report = reporting_service.render_report(store, "product")

    assert "Butter Cake  Stock: 7  Qty Sold: 3  Revenue: 1500 MMK  Profit: 600 MMK" in report
    assert "Milk Tea  Stock: 4  Qty Sold: 0  Revenue: 0 MMK  Profit: 0 MMK" in report


def test_unknown_report_type(store):
    with pytest.raises(ValidationError):
        reporting_service.render_report(store, "weekly")


def test_bad_date(store):
    with pytest.raises(ValidationError):
        reporting_service.render_report(store, "daily", "18/10/2026")


def test_export_writes_named_file(store, day_of_trade, tmp_path):
    path = reporting_service.export_report(
        store, "daily", tmp_path / "out", on=date(2026, 10, 18),
    )

    assert path.name == "daily_report_2026-10-18.txt"
    assert path.read_text(encoding="utf-8") == reporting_service.render_report(store, "daily")


def test_low_stock(store, make_product):
    make_product(name="Plenty", stock=50)
    scarce = make_product(name="Scarce", stock=5)
    gone = make_product(name="Gone", stock=0)

    names = [p["name"] for p in reporting_service.low_stock(store, threshold=5)]
    assert names == [scarce["name"], gone["name"]]
