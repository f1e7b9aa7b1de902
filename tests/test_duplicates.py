from datetime import datetime

from amazon_wrapped.duplicates import dedupe_orders, order_line_key
from amazon_wrapped.models import Order


def _order(order_id: str, *, asin: str = "", name: str = "Widget", total: float = 10.0) -> Order:
    return Order(
        order_id=order_id,
        order_date=datetime(2025, 3, 10),
        total_owed=total,
        unit_price=total,
        product_name=name,
        quantity=1,
        asin=asin,
        currency="USD",
        is_digital=False,
    )


def test_key_prefers_asin_then_product_name():
    assert order_line_key(_order("A", asin="B01", name="x")) == ("A", "B01")
    assert order_line_key(_order("A", name="Widget")) == ("A", "Widget")


def test_first_occurrence_wins_and_order_is_kept():
    first = _order("A", asin="B01", name="Widget", total=10.0)
    later_copy = _order("A", asin="B01", name="Widget  (renamed)", total=11.0)
    other_line = _order("A", asin="B02")
    other_order = _order("B", asin="B01")

    out = dedupe_orders([first, other_line, later_copy, other_order])

    assert out == [first, other_line, other_order]


def test_dedupe_is_idempotent():
    orders = [_order("A", asin="B01"), _order("A", asin="B01"), _order("C", name="Pen")]
    once = dedupe_orders(orders)
    assert dedupe_orders(once) == once
    assert len(once) == 2
