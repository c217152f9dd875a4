import pytest
from sqlalchemy.exc import OperationalError

from tillbook.errors import InvalidReturnRequest, PrivilegeDenied, SaleNotFound, StoreUnavailable
from tillbook.services import return_service, sales_service


@pytest.fixture
def sold(store, terminal, make_product):
    """A committed sale of 3 x Butter Cake for 1500 MMK cash."""
    cake = make_product(stock=10)
    for _ in range(3):
        terminal.cart.add_item(cake["id"])
    terminal.set_payment_amounts(cash_received=2000)
    sale = sales_service.checkout(terminal, store).sale
    return cake, sale


def test_return_restocks_and_books_refund(store, admin_terminal, sold):
    cake, sale = sold
    assert store.get("products", cake["id"])["stock"] == 7

    expense = return_service.process_return(admin_terminal, store, sale["id"], "damaged")

    assert store.get("products", cake["id"])["stock"] == 10
    assert expense["type"] == "refund"
    assert expense["amount"] == 1500
    assert expense["supplier"] == "N/A"
    assert expense["sale_id"] == sale["id"]
    assert expense["description"] == (
        f"Refund for sale ID {sale['id']} (Walk-in Customer) - Reason: damaged"
    )

    after = store.get("sales", sale["id"])
    assert after == sale


def test_return_keeps_sales_count_and_credit(store, terminal, admin_terminal, make_product, make_customer):
    cake = make_product()
    customer = make_customer(credit=0)
    terminal.cart.add_item(cake["id"])
    terminal.select_customer(customer["id"])
    terminal.set_payment_method("credit")
    sale = sales_service.checkout(terminal, store).sale

    return_service.process_return(admin_terminal, store, sale["id"], "wrong flavour")

    assert store.get("customers", customer["id"])["credit"] == 500
    assert store.get("products", cake["id"])["sales_count"] == 1


def test_cashier_cannot_return(store, terminal, sold):
    _, sale = sold
    with pytest.raises(PrivilegeDenied):
        return_service.process_return(terminal, store, sale["id"], "damaged")
    assert store.list_all("expenses") == []


@pytest.mark.parametrize("sale_id, reason", [
    (None, "damaged"),
    ("", "damaged"),
    (1, ""),
    (1, "   "),
    (1, None),
    ("abc", "damaged"),
])
def test_invalid_request(store, admin_terminal, sale_id, reason):
    with pytest.raises(InvalidReturnRequest):
        return_service.process_return(admin_terminal, store, sale_id, reason)


def test_unknown_sale(store, admin_terminal):
    with pytest.raises(SaleNotFound):
        return_service.process_return(admin_terminal, store, 999, "damaged")
    assert store.list_all("expenses") == []


def test_deleted_product_is_skipped(store, terminal, admin_terminal, make_product):
    cake = make_product()
    tea = make_product(name="Milk Tea", stock=5)
    terminal.cart.add_item(cake["id"])
    terminal.cart.add_item(tea["id"])
    terminal.set_payment_amounts(cash_received=1000)
    sale = sales_service.checkout(terminal, store).sale

    store.delete("products", cake["id"])
    expense = return_service.process_return(admin_terminal, store, sale["id"], "customer changed mind")

    assert store.get("products", tea["id"])["stock"] == 5
    assert expense["amount"] == 1000


def test_sale_id_as_string(store, admin_terminal, sold):
    cake, sale = sold
    return_service.process_return(admin_terminal, store, str(sale["id"]), "stale")
    assert store.get("products", cake["id"])["stock"] == 10


def test_failed_refund_write_undoes_restock(store, admin_terminal, sold, monkeypatch, no_backoff):
    cake, sale = sold
    create = store.create

    def refund_fails(collection, fields, owner_id=None):
        if collection == "expenses":
            raise OperationalError("INSERT INTO expenses", {}, Exception("disk I/O error"))
        return create(collection, fields, owner_id=owner_id)

    monkeypatch.setattr(store, "create", refund_fails)

    with pytest.raises(StoreUnavailable):
        return_service.process_return(admin_terminal, store, sale["id"], "damaged")

    assert store.get("products", cake["id"])["stock"] == 7
    assert store.list_all("expenses") == []

    # The same return goes through once the store recovers
    monkeypatch.setattr(store, "create", create)
    return_service.process_return(admin_terminal, store, sale["id"], "damaged")
    assert store.get("products", cake["id"])["stock"] == 10
    assert len(store.list_all("expenses")) == 1
