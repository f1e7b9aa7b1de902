import math
from dataclasses import fields
from datetime import date

import pytest

from amazon_wrapped.stats import (
    calculate_stats_with_data,
    calculate_yearly_data,
    default_target_year,
    get_available_years,
    recalculate_stats_for_year,
)
from tests.helpers.exports import digital_file, refund_file, retail_file, retail_row


def _refund(order_id: str, amount: str, when: str, currency: str = "USD") -> dict[str, str]:
    return {
        "OrderID": order_id,
        "AmountRefunded": amount,
        "RefundCompletionDate": when,
        "Currency": currency,
    }


def test_basic_spend():
    files = [retail_file([retail_row("A", "2025-03-10T12:00:00Z", "29.99", "Widget", asin="W1")])]

    result = calculate_stats_with_data(files, 2025)
    stats = result.stats

    assert stats.total_gross_spend == 29.99
    assert stats.net_spend == 29.99
    assert stats.total_orders == 1
    assert stats.retail_orders == 1
    assert stats.digital_orders == 0
    assert stats.total_items == 1
    assert stats.peak_month.month == "March"
    assert stats.peak_month.order_count == 1
    assert stats.favorite_day.day == "Monday"
    assert stats.monthly_average == pytest.approx(29.99 / 12)
    assert stats.orders_per_day == pytest.approx(1 / 365)
    assert stats.top_items[0].name == "Widget"
    assert len(result.processed_data.monthly_data) == 12


def test_refund_nets_out_spend_and_joins_product_name():
    files = [
        retail_file([retail_row("A", "2025-03-10T12:00:00Z", "29.99", "Widget", asin="W1")]),
        refund_file([_refund("A", "29.99", "2025-03-20T12:00:00Z")]),
    ]

    result = calculate_stats_with_data(files, 2025)
    stats = result.stats

    assert stats.total_refunds == 29.99
    assert stats.total_refund_amount == 29.99
    assert stats.net_spend == 0
    assert stats.return_count == 1
    assert stats.return_rate == 100.0
    assert stats.average_refund_time == pytest.approx(10.0)

    (enriched,) = result.processed_data.enriched_refunds
    assert enriched.product_name == "Widget"
    assert enriched.original_order is not None
    assert enriched.original_order.order_id == "A"


def test_refund_without_matching_order_has_no_product_name():
    files = [refund_file([_refund("Z", "5.00", "2025-01-02")])]
    result = calculate_stats_with_data(files, 2025)

    (enriched,) = result.processed_data.enriched_refunds
    assert enriched.product_name is None
    assert result.stats.return_rate == 0.0
    assert result.stats.average_refund_time is None


def test_overlapping_exports_are_deduplicated():
    row = retail_row("A", "2025-03-10T12:00:00Z", "29.99", "Widget", asin="W1")
    files = [
        retail_file([row], name="Retail.OrderHistory.1.csv"),
        retail_file([row], name="Retail.OrderHistory.2.csv"),
    ]

    result = calculate_stats_with_data(files, 2025)

    assert result.stats.total_orders == 1
    assert result.stats.total_gross_spend == 29.99
    assert len(result.all_orders) == 1


def test_mixed_currency_only_sums_primary():
    files = [
        retail_file(
            [
                retail_row("A", "2025-01-05", "10.00", "Pen", asin="P1"),
                retail_row("B", "2025-02-05", "10.00", "Ink", asin="P2"),
                retail_row("C", "2025-03-05", "10.00", "Pad", asin="P3"),
                retail_row("D", "2025-04-05", "100.00", "Lamp", asin="P4", currency="EUR"),
            ]
        )
    ]

    stats = calculate_stats_with_data(files, 2025).stats

    assert stats.primary_currency == "USD"
    assert stats.has_mixed_currencies is True
    assert stats.total_gross_spend == 30.0
    assert stats.total_orders == 4
    assert stats.total_items == 4
    assert stats.average_item_cost == 10.0
    assert [(e.currency, e.order_count) for e in stats.currency_breakdown] == [
        ("USD", 3),
        ("EUR", 1),
    ]
    # The EUR month carries no spend but its order still counts.
    assert stats.monthly_spending[3].amount == 0.0
    assert stats.peak_month.month == "January"
    assert sum(e.order_count for e in stats.currency_breakdown) == stats.total_items
    assert stats.peak_month.amount == max(m.amount for m in stats.monthly_spending)
    assert stats.favorite_day.count == max(d.count for d in stats.daily_orders)


def test_digital_and_book_figures():
    files = [
        retail_file([retail_row("A", "2025-06-01", "12.00", "The Hobbit (Paperback)", asin="H1")]),
        digital_file(
            [
                {
                    "ASIN": "K1",
                    "ProductName": "Dune (Kindle Edition)",
                    "OrderId": "D1",
                    "OrderDate": "2025-06-02",
                    "OurPrice": "0.00",
                    "ListPriceAmount": "9.99",
                    "Publisher": "Ace",
                    "SellerOfRecord": "Not Applicable",
                    "QuantityOrdered": "1",
                    "Currency": "USD",
                },
                {
                    "ASIN": "S1",
                    "ProductName": "Kindle Unlimited Membership",
                    "OrderId": "D2",
                    "OrderDate": "2025-06-03",
                    "OurPrice": "11.99",
                    "ListPriceAmount": "11.99",
                    "Publisher": "Penguin",
                    "SellerOfRecord": "Penguin",
                    "QuantityOrdered": "1",
                    "Currency": "USD",
                },
            ]
        ),
    ]

    stats = calculate_stats_with_data(files, 2025).stats

    assert stats.digital_orders == 2
    assert stats.digital_spend == pytest.approx(21.98)
    assert stats.digital_item_count == 2
    assert stats.book_count == 2
    assert stats.kindle_book_count == 1
    assert stats.physical_book_count == 1
    assert stats.book_spend == pytest.approx(21.99)
    assert stats.top_book_publisher == "Ace"
    assert [b.name for b in stats.top_books] == ["The Hobbit (Paperback)", "Dune (Kindle Edition)"]


def test_year_switch_matches_from_scratch():
    files = [
        retail_file(
            [
                retail_row("A", "2023-04-01", "15.00", "Pen", asin="P1"),
                retail_row("B", "2024-05-01", "25.00", "Lamp", asin="P2"),
                retail_row("C", "2025-06-01", "35.00", "Desk", asin="P3"),
            ]
        ),
        refund_file([_refund("A", "15.00", "2023-04-10")]),
    ]

    latest = calculate_stats_with_data(files, 2025)
    switched = recalculate_stats_for_year(latest.all_orders, latest.all_refunds, 2023)
    scratch = calculate_stats_with_data(files, 2023)

    assert switched.stats == scratch.stats
    assert switched.processed_data == scratch.processed_data
    assert switched.all_orders == latest.all_orders
    assert switched.all_refunds == latest.all_refunds
    assert switched.stats.net_spend == 0


def test_empty_year_is_zeroed_without_nan():
    files = [retail_file([retail_row("A", "2025-03-10", "29.99", "Widget")])]

    stats = calculate_stats_with_data(files, 2019).stats

    for f in fields(stats):
        value = getattr(stats, f.name)
        if isinstance(value, int | float):
            assert not math.isnan(value) and not math.isinf(value), f.name
            assert value == 0, f.name
    assert stats.total_orders == 0
    assert stats.net_spend == 0.0
    assert stats.average_item_cost == 0.0
    assert stats.return_rate == 0.0
    assert stats.peak_month.month == "January"
    assert stats.favorite_day.day == "Monday"
    assert stats.primary_currency == "USD"


def test_available_years_and_yearly_rollup():
    files = [
        retail_file(
            [
                retail_row("A", "2023-04-01", "15.00", "Pen", asin="P1"),
                retail_row("B", "2025-05-01", "25.00", "Lamp", asin="P2"),
            ]
        ),
        refund_file([_refund("Z", "1.00", "2024-01-01")]),
    ]

    assert get_available_years(files) == [2025, 2024, 2023]
    assert [(y.year, y.total_spend) for y in calculate_yearly_data(files)] == [
        (2023, 15.0),
        (2025, 25.0),
    ]


def test_default_target_year():
    assert default_target_year([2023, 2025, 2024]) == 2025
    assert default_target_year([], today=date(2026, 1, 2)) == 2026


def test_off_currency_refund_is_counted_but_not_summed_in_mixed_year():
    files = [
        retail_file(
            [
                retail_row("A", "2025-01-05", "10.00", "Pen", asin="P1"),
                retail_row("B", "2025-02-05", "10.00", "Ink", asin="P2"),
                retail_row("D", "2025-04-05", "100.00", "Lamp", asin="P4", currency="EUR"),
            ]
        ),
        refund_file(
            [
                _refund("A", "10.00", "2025-01-15"),
                _refund("D", "100.00", "2025-04-15", currency="EUR"),
            ]
        ),
    ]

    stats = calculate_stats_with_data(files, 2025).stats

    assert stats.has_mixed_currencies is True
    assert stats.total_refunds == 10.0
    assert stats.net_spend == 10.0
    assert stats.return_count == 2


def test_off_currency_refund_is_not_summed_in_single_currency_year():
    files = [
        retail_file([retail_row("A", "2025-03-10", "100.00", "Lamp", asin="L1")]),
        refund_file([_refund("Z", "80.00", "2025-03-20", currency="EUR")]),
    ]

    stats = calculate_stats_with_data(files, 2025).stats

    assert stats.has_mixed_currencies is False
    assert stats.primary_currency == "USD"
    assert stats.total_refunds == 0.0
    assert stats.total_refund_amount == 0.0
    assert stats.net_spend == 100.0
    assert stats.return_count == 1


def test_refunds_only_year_uses_default_currency():
    files = [
        retail_file([retail_row("A", "2024-03-10", "40.00", "Lamp", asin="L1")]),
        refund_file(
            [
                _refund("A", "40.00", "2025-01-05"),
                _refund("Z", "12.00", "2025-01-06", currency="EUR"),
            ]
        ),
    ]

    stats = calculate_stats_with_data(files, 2025).stats

    assert stats.total_orders == 0
    assert stats.primary_currency == "USD"
    assert stats.total_refunds == 40.0
    assert stats.net_spend == -40.0
    assert stats.return_count == 2


def test_orders_per_day_uses_leap_year_length():
    files = [retail_file([retail_row("A", "2024-02-29", "5.00", "Pen", asin="P1")])]

    stats = calculate_stats_with_data(files, 2024).stats

    assert stats.orders_per_day == pytest.approx(1 / 366)
