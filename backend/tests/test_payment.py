import pytest

from tillbook.errors import InsufficientPayment, NoCreditCustomer, ValidationError
from tillbook.services.payment_service import PendingPayment, preview, reconcile


def pay(method, **amounts):
    payment = PendingPayment()
    payment.set_method(method)
    payment.set_amounts(**amounts)
    return payment


class TestReconcile:
    def test_cash_exact(self):
        s = reconcile(1500, pay("cash", cash_received=1500))
        assert (s.cash_paid, s.credit_paid, s.mobile_paid, s.change) == (1500, 0, 0, 0)

    def test_cash_with_change(self):
        s = reconcile(1500, pay("cash", cash_received="2000"))
        assert s.cash_paid == 2000
        assert s.change == 500

    def test_cash_short(self):
        with pytest.raises(InsufficientPayment) as exc:
            reconcile(1500, pay("cash", cash_received=1000))
        assert exc.value.message == "Insufficient cash received!"

    def test_blank_cash_counts_as_zero(self):
        with pytest.raises(InsufficientPayment):
            reconcile(1500, pay("cash", cash_received=""))

    def test_credit_needs_customer(self):
        with pytest.raises(NoCreditCustomer):
            reconcile(1200, pay("credit"))

    def test_credit_settles_total(self):
        s = reconcile(1200, pay("credit"), customer_id=4)
        assert (s.cash_paid, s.credit_paid, s.mobile_paid, s.change) == (0, 1200, 0, 0)

    def test_mobile_settles_total(self):
        s = reconcile(800, pay("mobile"))
        assert s.mobile_paid == 800
        assert s.change == 0

    def test_split_with_change(self):
        s = reconcile(1000, pay("split", cash_amount=600, credit_amount="", mobile_amount=500))
        assert (s.cash_paid, s.credit_paid, s.mobile_paid, s.change) == (600, 0, 500, 100)

    def test_split_short(self):
        with pytest.raises(InsufficientPayment) as exc:
            reconcile(1000, pay("split", cash_amount=300, mobile_amount=300))
        assert exc.value.details["remaining"] == 400

    def test_split_credit_part_allowed_for_walk_in(self):
        # Only the "credit" method itself demands a customer
        s = reconcile(1000, pay("split", credit_amount=1000))
        assert s.credit_paid == 1000

    @pytest.mark.parametrize("method, amounts", [
        ("split", {"cash_amount": 3000, "credit_amount": -1500, "mobile_amount": 0}),
        ("split", {"cash_amount": -100, "mobile_amount": 1600}),
        ("split", {"mobile_amount": "-1"}),
        ("cash", {"cash_received": -2000}),
    ])
    def test_negative_amount_rejected(self, method, amounts):
        with pytest.raises(ValidationError) as exc:
            reconcile(1500, pay(method, **amounts), customer_id=4)
        assert exc.value.message == "Payment amounts cannot be negative."

    @pytest.mark.parametrize("method, amounts", [
        ("cash", {"cash_received": 5000}),
        ("credit", {}),
        ("mobile", {}),
        ("split", {"cash_amount": 1000, "credit_amount": 2000, "mobile_amount": 999}),
    ])
    def test_paid_total_minus_change_equals_total(self, method, amounts):
        s = reconcile(3999, pay(method, **amounts), customer_id=1)
        assert s.paid_total - s.change == 3999
        assert s.change >= 0

    def test_unknown_method(self):
        payment = PendingPayment()
        payment.method = "barter"
        with pytest.raises(ValidationError):
            reconcile(100, payment)


def test_set_method_rejects_unknown():
    with pytest.raises(ValidationError):
        PendingPayment().set_method("cheque")


def test_set_amounts_rejects_unknown_field():
    with pytest.raises(ValidationError):
        PendingPayment().set_amounts(tip=100)


def test_preview_split_remaining():
    p = preview(1000, pay("split", cash_amount=400, mobile_amount=100))
    assert p["paid_total"] == 500
    assert p["remaining"] == 500
    assert p["change"] == 0
    assert p["sufficient"] is False


def test_preview_cash_change():
    p = preview(1000, pay("cash", cash_received=1200))
    assert p["change"] == 200
    assert p["remaining"] == 0
    assert p["sufficient"] is True


def test_preview_credit_is_exact():
    p = preview(700, pay("credit"))
    assert (p["paid_total"], p["change"], p["remaining"]) == (700, 0, 0)


def test_reset_returns_to_cash():
    payment = pay("split", cash_amount=5)
    payment.reset()
    assert payment.method == "cash"
    assert payment.cash_amount == ""
