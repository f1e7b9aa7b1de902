from datetime import datetime

from amazon_wrapped.aggregate import (
    build_monthly_data,
    calculate_yearly_data_from_orders,
    daily_orders,
    favorite_day,
    monthly_spending,
    peak_month,
    top_by_unit_price,
    top_items,
    top_publisher,
    weekday_index,
)
from amazon_wrapped.config import DAYS_FULL, MONTHS_FULL
from amazon_wrapped.models import Order


def _order(
    order_id: str,
    when: datetime,
    total: float,
    *,
    name: str = "Widget",
    qty: int = 1,
    asin: str = "",
    currency: str = "USD",
    publisher: str | None = None,
) -> Order:
    return Order(
        order_id=order_id,
        order_date=when,
        total_owed=total,
        unit_price=total / qty,
        product_name=name,
        quantity=qty,
        asin=asin,
        currency=currency,
        is_digital=publisher is not None,
        publisher=publisher,
    )


def test_weekday_index_starts_on_sunday():
    assert weekday_index(datetime(2025, 3, 9)) == 0  # Sunday
    assert weekday_index(datetime(2025, 3, 10)) == 1  # Monday
    assert weekday_index(datetime(2025, 3, 15)) == 6  # Saturday


def test_peak_month_earliest_maximum_and_counts_all_lines():
    orders = [
        _order("1", datetime(2025, 2, 1), 50.0),
        _order("2", datetime(2025, 5, 1), 50.0),
        _order("3", datetime(2025, 5, 2), 0.0, currency="EUR"),
    ]
    spending = monthly_spending([o for o in orders if o.currency == "USD"])
    peak = peak_month(spending, orders)
    assert (peak.month, peak.amount, peak.order_count) == ("February", 50.0, 1)


def test_peak_month_and_favorite_day_defaults_when_empty():
    peak = peak_month(monthly_spending([]), [])
    assert (peak.month, peak.amount, peak.order_count) == ("January", 0.0, 0)
    fav = favorite_day(daily_orders([]))
    assert (fav.day, fav.count) == ("Monday", 0)


def test_favorite_day_is_bounded_and_tie_goes_to_earlier_weekday():
    orders = [
        _order("1", datetime(2025, 3, 15), 1.0),  # Saturday
        _order("2", datetime(2025, 3, 10), 1.0),  # Monday
        _order("3", datetime(2025, 3, 9), 1.0),  # Sunday
    ]
    days = daily_orders(orders)
    fav = favorite_day(days)

    assert [d.day for d in days] == list(DAYS_FULL)
    assert fav.day == "Sunday"
    assert fav.count == max(d.count for d in days)


def test_build_monthly_data_has_twelve_months_newest_first():
    orders = [
        _order("1", datetime(2025, 3, 1), 5.0),
        _order("2", datetime(2025, 3, 20), 7.0),
        _order("3", datetime(2025, 12, 31), 1.0),
    ]
    months = build_monthly_data(orders, orders)

    assert [m.month for m in months] == list(MONTHS_FULL)
    march = months[2]
    assert march.month_index == 2
    assert march.total_spend == 12.0
    assert march.order_count == 2
    assert [o.order_id for o in march.orders] == ["2", "1"]
    assert months[0].orders == ()


def test_top_items_groups_by_name_and_sums_quantity():
    orders = [
        _order("1", datetime(2025, 1, 1), 2.0, name="Pen", qty=2),
        _order("2", datetime(2025, 1, 2), 3.0, name="Paper"),
        _order("3", datetime(2025, 1, 3), 4.0, name="Pen", qty=3),
        _order("4", datetime(2025, 1, 4), 1.0, name="Ink"),
    ]
    ranked = top_items(orders, limit=2)
    assert [(i.name, i.count) for i in ranked] == [("Pen", 5), ("Paper", 1)]


def test_top_by_unit_price_does_not_group():
    orders = [
        _order("1", datetime(2025, 1, 1), 10.0, name="Lamp"),
        _order("2", datetime(2025, 1, 2), 10.0, name="Lamp"),
        _order("3", datetime(2025, 1, 3), 3.0, name="Pen"),
    ]
    assert [(i.name, i.price) for i in top_by_unit_price(orders, 10)] == [
        ("Lamp", 10.0),
        ("Lamp", 10.0),
        ("Pen", 3.0),
    ]


def test_top_publisher_by_quantity():
    orders = [
        _order("1", datetime(2025, 1, 1), 1.0, publisher="Tor"),
        _order("2", datetime(2025, 1, 2), 1.0, publisher="Orbit", qty=2),
        _order("3", datetime(2025, 1, 3), 1.0),
    ]
    assert top_publisher(orders) == "Orbit"
    assert top_publisher([]) is None


def test_yearly_rollup_dedupes_and_filters_currency_per_year():
    orders = [
        _order("1", datetime(2024, 6, 1), 10.0, asin="A"),
        _order("1", datetime(2024, 6, 1), 10.0, asin="A"),
        _order("2", datetime(2025, 1, 1), 20.0, asin="B"),
        _order("3", datetime(2025, 2, 1), 30.0, asin="C"),
        _order("4", datetime(2025, 3, 1), 99.0, asin="D", currency="EUR"),
    ]
    rollup = calculate_yearly_data_from_orders(orders)

    assert [(y.year, y.total_spend, y.order_count, y.primary_currency) for y in rollup] == [
        (2024, 10.0, 1, "USD"),
        (2025, 50.0, 3, "USD"),
    ]
    assert [o.order_id for o in rollup[1].orders] == ["4", "3", "2"]
