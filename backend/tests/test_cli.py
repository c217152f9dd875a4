import pytest

from tillbook.services import sales_service


@pytest.fixture
def runner(app, db_session):
    return app.test_cli_runner()


def test_catalog_list_and_low_stock(runner, make_product):
    make_product(name="Butter Cake", stock=20)
    make_product(name="Milk Tea", stock=1)

    result = runner.invoke(args=["catalog", "list"])
    assert result.exit_code == 0
    assert "Butter Cake" in result.output
    assert "retail=500 MMK" in result.output

    result = runner.invoke(args=["catalog", "low-stock"])
    assert result.exit_code == 0
    assert "Milk Tea: 1 left" in result.output
    assert "Butter Cake" not in result.output


def test_add_product(runner, store):
    result = runner.invoke(args=[
        "catalog", "add-product",
        "--name", "Shwe Yin Aye", "--category", "sweets", "--supplier", "Local",
        "--purchase-price", "800", "--bulk-price", "1000", "--individual-price", "1200",
        "--stock", "6",
    ])
    assert result.exit_code == 0, result.output
    assert [p["name"] for p in store.list_all("products")] == ["Shwe Yin Aye"]


def test_add_product_rejects_bad_stock(runner, store):
    result = runner.invoke(args=[
        "catalog", "add-product",
        "--name", "Broken", "--supplier", "Local",
        "--purchase-price", "1", "--bulk-price", "1", "--individual-price", "1",
        "--stock", "-3",
    ])
    assert result.exit_code != 0
    assert store.list_all("products") == []


def test_reports_show(runner):
    result = runner.invoke(args=["reports", "show", "profit"])
    assert result.exit_code == 0
    assert "Profit Report Analysis" in result.output


def test_wipe_keeps_catalog(runner, store, terminal, make_product):
    cake = make_product()
    terminal.cart.add_item(cake["id"])
    terminal.set_payment_amounts(cash_received=500)
    sales_service.checkout(terminal, store)

    result = runner.invoke(args=["system", "wipe", "--yes"])

    assert result.exit_code == 0
    assert store.list_all("sales") == []
    assert store.get("products", cake["id"])["stock"] == 9
