from tillbook.services.cart_service import CartLineItem
from tillbook.services.pricing_service import unit_price, unit_margin


PRODUCT = {"id": 1, "purchase_price": 300, "bulk_price": 400, "individual_price": 500}


def test_retail_uses_individual_price():
    assert unit_price(PRODUCT, "retail") == 500
    assert unit_margin(PRODUCT, "retail") == 200


def test_wholesale_uses_bulk_price():
    assert unit_price(PRODUCT, "wholesale") == 400
    assert unit_margin(PRODUCT, "wholesale") == 100


def test_missing_prices_default_to_zero():
    assert unit_price({"id": 2}, "retail") == 0
    assert unit_price({"id": 2, "bulk_price": None}, "wholesale") == 0
    assert unit_margin({"id": 2, "individual_price": 250}, "retail") == 250


def test_works_on_cart_lines():
    line = CartLineItem(product_id=1, name="Cake", purchase_price=300,
                        bulk_price=400, individual_price=500, quantity=2)
    assert unit_price(line, "wholesale") == 400
    assert unit_margin(line, "retail") == 200
