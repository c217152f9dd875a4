import pytest

from tillbook.errors import NotFound, PrivilegeDenied, ValidationError
from tillbook.services import expense_service


def test_add_expense(store, admin_terminal):
    expense = expense_service.add_expense(
        admin_terminal, store, "rent", "  October rent ", "150000.4",
    )

    assert expense["type"] == "rent"
    assert expense["description"] == "October rent"
    assert expense["amount"] == 150000
    assert expense["supplier"] == "N/A"
    assert expense["sale_id"] is None


def test_supplier_payment_keeps_supplier(store, admin_terminal):
    expense = expense_service.add_expense(
        admin_terminal, store, "supplier_payment", "Flour", 42000, supplier="Golden Flour Co.",
    )
    assert expense["supplier"] == "Golden Flour Co."


@pytest.mark.parametrize("expense_type, description, amount", [
    ("rent", "", 100),
    ("rent", "Rent", 0),
    ("rent", "Rent", -5),
    ("rent", "Rent", ""),
    ("refund", "Sneaky refund", 100),
    ("bribes", "Nope", 100),
])
def test_invalid_expense(store, admin_terminal, expense_type, description, amount):
    with pytest.raises(ValidationError) as exc:
        expense_service.add_expense(admin_terminal, store, expense_type, description, amount)
    assert exc.value.message == "Please fill in all expense fields correctly, ensuring amount is positive."
    assert store.list_all("expenses") == []


def test_cashier_cannot_touch_expenses(store, terminal, admin_terminal):
    with pytest.raises(PrivilegeDenied):
        expense_service.add_expense(terminal, store, "rent", "Rent", 100)

    expense = expense_service.add_expense(admin_terminal, store, "rent", "Rent", 100)
    with pytest.raises(PrivilegeDenied):
        expense_service.delete_expense(terminal, store, expense["id"])


def test_delete_expense(store, admin_terminal):
    expense = expense_service.add_expense(admin_terminal, store, "utilities", "Power", 30000)

    expense_service.delete_expense(admin_terminal, store, expense["id"])

    assert expense_service.list_expenses(store) == []
    with pytest.raises(NotFound):
        expense_service.delete_expense(admin_terminal, store, expense["id"])


def test_list_newest_first(store, admin_terminal):
    first = expense_service.add_expense(admin_terminal, store, "transport", "Taxi", 3000)
    second = expense_service.add_expense(admin_terminal, store, "supplies", "Boxes", 5000)

    assert [e["id"] for e in expense_service.list_expenses(store)] == [second["id"], first["id"]]
