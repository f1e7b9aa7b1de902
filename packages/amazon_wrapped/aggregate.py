"""Year/month rollups and ranking helpers.

Functions here operate on already deduplicated order lines. Callers pass the
order set to use for each figure: monetary sums get the primary-currency
subset, counts get every order line (see :mod:`amazon_wrapped.currency`).

Tie-breaks are "first occurrence wins": the peak month is the earliest month
reaching the maximum spend, the favorite day is the earliest weekday (Sunday
first) reaching the maximum count, and rankings keep input order among equal
values.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from datetime import datetime

from .config import DAYS_FULL, LIMITS, MONTHS_FULL
from .currency import resolve_currency
from .duplicates import dedupe_orders
from .models import (
    DailyCount,
    FavoriteDay,
    ItemCount,
    ItemPrice,
    MonthlyData,
    MonthlySpend,
    Order,
    PeakMonth,
    YearlyData,
)


def month_index(dt: datetime) -> int:
    """0 = January."""

    return dt.month - 1


def weekday_index(dt: datetime) -> int:
    """0 = Sunday, 6 = Saturday."""

    return (dt.weekday() + 1) % 7


def sort_newest_first(orders: Iterable[Order]) -> list[Order]:
    return sorted(orders, key=lambda o: o.order_date, reverse=True)


# ---------------------------------------------------------------------------
# Monthly
# ---------------------------------------------------------------------------


def monthly_spending(monetary_orders: Iterable[Order]) -> list[MonthlySpend]:
    totals = [0.0] * 12
    for order in monetary_orders:
        totals[month_index(order.order_date)] += order.total_owed
    return [MonthlySpend(month=MONTHS_FULL[i], amount=totals[i]) for i in range(12)]


def peak_month(spending: Sequence[MonthlySpend], orders: Sequence[Order]) -> PeakMonth:
    """Month with the highest spend; ``order_count`` counts all its order lines."""

    peak = PeakMonth()
    for idx, entry in enumerate(spending):
        if entry.amount > peak.amount:
            count = sum(1 for o in orders if month_index(o.order_date) == idx)
            peak = PeakMonth(month=entry.month, amount=entry.amount, order_count=count)
    return peak


def build_monthly_data(
    orders: Sequence[Order], monetary_orders: Sequence[Order]
) -> list[MonthlyData]:
    """Twelve monthly rollups; order detail newest first."""

    spend = monthly_spending(monetary_orders)
    by_month: list[list[Order]] = [[] for _ in range(12)]
    for order in orders:
        by_month[month_index(order.order_date)].append(order)

    return [
        MonthlyData(
            month=MONTHS_FULL[i],
            month_index=i,
            total_spend=spend[i].amount,
            order_count=len(by_month[i]),
            orders=tuple(sort_newest_first(by_month[i])),
        )
        for i in range(12)
    ]


# ---------------------------------------------------------------------------
# Weekdays
# ---------------------------------------------------------------------------


def daily_orders(orders: Iterable[Order]) -> list[DailyCount]:
    counts = [0] * 7
    for order in orders:
        counts[weekday_index(order.order_date)] += 1
    return [DailyCount(day=DAYS_FULL[i], count=counts[i]) for i in range(7)]


def favorite_day(days: Sequence[DailyCount]) -> FavoriteDay:
    fav = FavoriteDay()
    for entry in days:
        if entry.count > fav.count:
            fav = FavoriteDay(day=entry.day, count=entry.count)
    return fav


# ---------------------------------------------------------------------------
# Rankings
# ---------------------------------------------------------------------------


def top_items(orders: Iterable[Order], limit: int = LIMITS.top_items) -> list[ItemCount]:
    """Products by total quantity, grouped on the exact product name."""

    counts: dict[str, int] = {}
    for order in orders:
        counts[order.product_name] = counts.get(order.product_name, 0) + order.quantity
    ranked = sorted(counts.items(), key=lambda kv: kv[1], reverse=True)
    return [ItemCount(name=name, count=n) for name, n in ranked[:limit]]


def top_by_unit_price(orders: Iterable[Order], limit: int) -> list[ItemPrice]:
    # No grouping: a repeated purchase can appear more than once.
    ranked = sorted(orders, key=lambda o: o.unit_price, reverse=True)
    return [ItemPrice(name=o.product_name, price=o.unit_price) for o in ranked[:limit]]


def top_publisher(orders: Iterable[Order]) -> str | None:
    """Publisher with the highest summed quantity, ``None`` when none is known."""

    counts: dict[str, int] = {}
    for order in orders:
        if order.publisher:
            counts[order.publisher] = counts.get(order.publisher, 0) + order.quantity
    best: str | None = None
    best_count = 0
    for pub, n in counts.items():
        if n > best_count:
            best, best_count = pub, n
    return best


def sum_owed(orders: Iterable[Order]) -> float:
    return sum((o.total_owed for o in orders), 0.0)


def sum_quantity(orders: Iterable[Order]) -> int:
    return sum((o.quantity for o in orders), 0)


def distinct_order_count(orders: Iterable[Order]) -> int:
    return len({o.order_id for o in orders})


# ---------------------------------------------------------------------------
# Cross-year
# ---------------------------------------------------------------------------


def calculate_yearly_data_from_orders(orders: Iterable[Order]) -> list[YearlyData]:
    """One rollup per calendar year present, oldest year first.

    Input is deduplicated here, and each year's spend only sums that year's
    primary currency when the year mixes currencies.
    """

    by_year: dict[int, list[Order]] = {}
    for order in dedupe_orders(orders):
        by_year.setdefault(order.order_date.year, []).append(order)

    out: list[YearlyData] = []
    for year in sorted(by_year):
        year_orders = by_year[year]
        resolution = resolve_currency(year_orders)
        out.append(
            YearlyData(
                year=year,
                total_spend=sum_owed(resolution.monetary(year_orders)),
                order_count=len(year_orders),
                orders=tuple(sort_newest_first(year_orders)),
                primary_currency=resolution.primary_currency,
            )
        )
    return out


__all__ = [
    "build_monthly_data",
    "calculate_yearly_data_from_orders",
    "daily_orders",
    "distinct_order_count",
    "favorite_day",
    "month_index",
    "monthly_spending",
    "peak_month",
    "sort_newest_first",
    "sum_owed",
    "sum_quantity",
    "top_by_unit_price",
    "top_items",
    "top_publisher",
    "weekday_index",
]
