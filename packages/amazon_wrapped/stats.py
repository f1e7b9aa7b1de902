"""Stats assembly: the single entry point callers use.

Two paths produce a :class:`~amazon_wrapped.models.CalculateStatsResult`:

- :func:`calculate_stats_with_data` starts from tokenized files: normalize
  every file, deduplicate across *all* years (the same line may sit in two
  overlapping exports covering different years), then compute the target
  year.
- :func:`recalculate_stats_for_year` starts from already normalized
  ``all_orders``/``all_refunds`` (e.g. a restored bundle with no raw files)
  and repeats only the per-year steps. Both paths share
  :func:`_compute_year`, so a year switch reproduces a from-scratch run.

Malformed data never raises here: unknown files are skipped, rows with bad
dates were already dropped by the normalizers, and an empty year produces a
zeroed snapshot.
"""

from __future__ import annotations

import calendar
import logging
from collections.abc import Iterable, Sequence
from datetime import date

from .aggregate import (
    build_monthly_data,
    calculate_yearly_data_from_orders,
    daily_orders,
    distinct_order_count,
    favorite_day,
    monthly_spending,
    peak_month,
    sort_newest_first,
    sum_owed,
    sum_quantity,
    top_by_unit_price,
    top_items,
    top_publisher,
)
from .books import is_likely_book
from .config import LIMITS
from .currency import resolve_currency
from .duplicates import dedupe_orders
from .logging_setup import resolve_logger
from .models import (
    CalculateStatsResult,
    EnrichedRefund,
    Order,
    ParsedFile,
    ProcessedData,
    Refund,
    WrappedStats,
    YearlyData,
)
from .normalizers import OrderNormalizer


def _index_first_line(orders: Iterable[Order]) -> dict[str, Order]:
    first: dict[str, Order] = {}
    for order in orders:
        first.setdefault(order.order_id, order)
    return first


def enrich_refunds(refunds: Iterable[Refund], orders: Iterable[Order]) -> list[EnrichedRefund]:
    """Attach the first order line sharing each refund's ``order_id``."""

    by_id = _index_first_line(orders)
    return [EnrichedRefund.from_refund(r, by_id.get(r.order_id)) for r in refunds]


def sort_refunds_newest_first(refunds: Iterable[EnrichedRefund]) -> list[EnrichedRefund]:
    return sorted(refunds, key=lambda r: r.refund_date, reverse=True)


def _average_refund_days(enriched: Sequence[EnrichedRefund]) -> float | None:
    spans = [
        (r.refund_date - r.original_order.order_date).total_seconds() / 86400
        for r in enriched
        if r.original_order is not None
    ]
    if not spans:
        return None
    return sum(spans) / len(spans)


def _compute_year(
    all_orders: Sequence[Order],
    all_refunds: Sequence[Refund],
    target_year: int,
    log: logging.Logger,
) -> tuple[WrappedStats, ProcessedData]:
    orders = [o for o in all_orders if o.order_date.year == target_year]
    refunds = [r for r in all_refunds if r.refund_date.year == target_year]

    currency = resolve_currency(orders, logger=log)
    monetary = currency.monetary(orders)
    monetary_refunds = [r for r in refunds if currency.is_primary(r.currency)]

    retail = [o for o in orders if not o.is_digital]
    digital = [o for o in orders if o.is_digital]

    # Spending (primary currency only)
    total_gross_spend = sum_owed(monetary)
    total_refunds = sum((r.amount_refunded for r in monetary_refunds), 0.0)
    net_spend = total_gross_spend - total_refunds
    primary_items = sum_quantity(monetary)

    # Counts (every order line)
    total_items = sum_quantity(orders)
    total_orders = distinct_order_count(orders)
    days_in_year = 366 if calendar.isleap(target_year) else 365

    spending = monthly_spending(monetary)
    weekdays = daily_orders(orders)

    books = [o for o in orders if is_likely_book(o.product_name, o.publisher)]

    enriched = sort_refunds_newest_first(enrich_refunds(refunds, all_orders))
    return_count = len(refunds)

    stats = WrappedStats(
        total_gross_spend=total_gross_spend,
        total_refunds=total_refunds,
        net_spend=net_spend,
        monthly_average=net_spend / 12,
        average_item_cost=total_gross_spend / primary_items if primary_items > 0 else 0.0,
        total_orders=total_orders,
        retail_orders=distinct_order_count(retail),
        digital_orders=distinct_order_count(digital),
        total_items=total_items,
        average_items_per_month=total_items / 12,
        orders_per_day=total_orders / days_in_year,
        peak_month=peak_month(spending, orders),
        favorite_day=favorite_day(weekdays),
        monthly_spending=tuple(spending),
        daily_orders=tuple(weekdays),
        top_items=tuple(top_items(orders, LIMITS.top_items)),
        top_expensive_items=tuple(top_by_unit_price(orders, LIMITS.top_expensive)),
        digital_spend=sum_owed(currency.monetary(digital)),
        digital_item_count=sum_quantity(digital),
        top_publisher=top_publisher(digital),
        book_count=sum_quantity(books),
        book_spend=sum_owed(currency.monetary(books)),
        kindle_book_count=sum_quantity(o for o in books if o.is_digital),
        physical_book_count=sum_quantity(o for o in books if not o.is_digital),
        top_book_publisher=top_publisher(books),
        top_books=tuple(top_by_unit_price(books, LIMITS.top_books)),
        return_count=return_count,
        total_refund_amount=total_refunds,
        average_refund_time=_average_refund_days(enriched),
        return_rate=(return_count / total_orders) * 100 if total_orders > 0 else 0.0,
        primary_currency=currency.primary_currency,
        has_mixed_currencies=currency.has_mixed_currencies,
        currency_breakdown=currency.breakdown,
    )

    processed = ProcessedData(
        orders=tuple(sort_newest_first(orders)),
        refunds=tuple(sorted(refunds, key=lambda r: r.refund_date, reverse=True)),
        enriched_refunds=tuple(enriched),
        monthly_data=tuple(build_monthly_data(orders, monetary)),
    )

    log.info(
        "stats:computed year=%d order_lines=%d orders=%d refunds=%d primary=%s mixed=%s",
        target_year,
        len(orders),
        total_orders,
        return_count,
        currency.primary_currency,
        currency.has_mixed_currencies,
    )
    return stats, processed


# ---------------------------------------------------------------------------
# Public entry points
# ---------------------------------------------------------------------------


def calculate_stats_with_data(
    files: Iterable[ParsedFile],
    target_year: int,
    *,
    logger: logging.Logger | None = None,
) -> CalculateStatsResult:
    """Compute the snapshot for ``target_year`` from tokenized export files.

    The returned ``all_orders``/``all_refunds`` are the deduplicated sets for
    every year, not just ``target_year``.
    """

    log = resolve_logger(logger, "amazon_wrapped.stats")

    batch = OrderNormalizer.normalize_files(files)
    for name in batch.skipped_files:
        log.info("stats:skipped_unknown_file file=%s", name)
    if batch.dropped_rows:
        log.debug("stats:dropped_rows count=%d", batch.dropped_rows)

    all_orders = dedupe_orders(batch.orders)
    if len(all_orders) != len(batch.orders):
        log.debug("stats:deduplicated removed=%d", len(batch.orders) - len(all_orders))
    all_refunds = batch.refunds

    stats, processed = _compute_year(all_orders, all_refunds, target_year, log)
    return CalculateStatsResult(
        stats=stats,
        processed_data=processed,
        all_orders=tuple(all_orders),
        all_refunds=tuple(all_refunds),
    )


def recalculate_stats_for_year(
    all_orders: Sequence[Order],
    all_refunds: Sequence[Refund],
    target_year: int,
    *,
    logger: logging.Logger | None = None,
) -> CalculateStatsResult:
    """Switch the snapshot to another year using already normalized data.

    ``all_orders`` is expected to be deduplicated already (as returned by
    :func:`calculate_stats_with_data`); it is not deduplicated again. The
    held arrays are passed through unchanged on the result.
    """

    log = resolve_logger(logger, "amazon_wrapped.stats")
    stats, processed = _compute_year(all_orders, all_refunds, target_year, log)
    return CalculateStatsResult(
        stats=stats,
        processed_data=processed,
        all_orders=tuple(all_orders),
        all_refunds=tuple(all_refunds),
    )


def calculate_yearly_data(files: Iterable[ParsedFile]) -> list[YearlyData]:
    """Cross-year rollup straight from tokenized files."""

    batch = OrderNormalizer.normalize_files(files)
    return calculate_yearly_data_from_orders(batch.orders)


def get_available_years_from_orders(
    orders: Iterable[Order], refunds: Iterable[Refund] = ()
) -> list[int]:
    """Distinct calendar years present, most recent first."""

    years = {o.order_date.year for o in orders}
    years.update(r.refund_date.year for r in refunds)
    return sorted(years, reverse=True)


def get_available_years(files: Iterable[ParsedFile]) -> list[int]:
    batch = OrderNormalizer.normalize_files(files)
    return get_available_years_from_orders(batch.orders, batch.refunds)


def default_target_year(years: Sequence[int], *, today: date | None = None) -> int:
    """Most recent year with data, or the current year when there is none."""

    if years:
        return max(years)
    return (today or date.today()).year


__all__ = [
    "calculate_stats_with_data",
    "calculate_yearly_data",
    "default_target_year",
    "enrich_refunds",
    "get_available_years",
    "get_available_years_from_orders",
    "recalculate_stats_for_year",
]
