"""Helpers for transaction tables and display strings.

Sorting, search filtering, and pagination over the order/refund detail kept
in :class:`~amazon_wrapped.models.ProcessedData`, plus the number/date
formatters used when printing a summary.
"""

from __future__ import annotations

import math
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime
from functools import cmp_to_key
from typing import Any, Generic, Literal, TypeVar

from .config import DEFAULT_CURRENCY, MONTHS_SHORT
from .models import EnrichedRefund, Order

T = TypeVar("T")

type SortDirection = Literal["asc", "desc"]

_CURRENCY_SYMBOLS: dict[str, str] = {
    "USD": "$",
    "EUR": "€",
    "GBP": "£",
    "JPY": "¥",
    "INR": "₹",
    "CAD": "CA$",
    "AUD": "A$",
}


# ---------------------------------------------------------------------------
# Tables
# ---------------------------------------------------------------------------


def _compare(a: Any, b: Any) -> int:
    if isinstance(a, datetime) and isinstance(b, datetime):
        return (a > b) - (a < b)
    if (
        isinstance(a, int | float)
        and isinstance(b, int | float)
        and not isinstance(a, bool)
        and not isinstance(b, bool)
    ):
        return (a > b) - (a < b)
    sa, sb = str(a).lower(), str(b).lower()
    return (sa > sb) - (sa < sb)


def sort_by(items: Sequence[T], key: str, direction: SortDirection = "desc") -> list[T]:
    """Return a sorted copy of ``items`` ordered by attribute ``key``.

    Dates and numbers compare by value; anything else compares as a
    case-insensitive string. Equal values keep their input order.
    """

    sign = 1 if direction == "asc" else -1
    return sorted(
        items,
        key=cmp_to_key(lambda x, y: sign * _compare(getattr(x, key), getattr(y, key))),
    )


def filter_orders(orders: Sequence[Order], term: str) -> list[Order]:
    """Orders whose product name or order id contains ``term`` (case-insensitive)."""

    if not term.strip():
        return list(orders)
    t = term.lower()
    return [o for o in orders if t in o.product_name.lower() or t in o.order_id.lower()]


def filter_refunds(refunds: Sequence[EnrichedRefund], term: str) -> list[EnrichedRefund]:
    if not term.strip():
        return list(refunds)
    t = term.lower()
    return [
        r
        for r in refunds
        if (r.product_name is not None and t in r.product_name.lower()) or t in r.order_id.lower()
    ]


@dataclass(frozen=True, slots=True)
class Page(Generic[T]):
    items: tuple[T, ...]
    page: int
    per_page: int
    total: int

    @property
    def total_pages(self) -> int:
        return total_pages(self)


def total_pages(page: Page[Any]) -> int:
    return math.ceil(page.total / page.per_page) if page.per_page > 0 else 0


def paginate(items: Sequence[T], page: int, per_page: int) -> Page[T]:
    """Slice one page of ``items``; ``page`` is 1-based and clamped into range."""

    if per_page < 1:
        raise ValueError("per_page must be a positive integer")
    total = len(items)
    pages = math.ceil(total / per_page)
    safe_page = min(max(1, page), pages or 1)
    start = (safe_page - 1) * per_page
    return Page(
        items=tuple(items[start : start + per_page]),
        page=safe_page,
        per_page=per_page,
        total=total,
    )


# ---------------------------------------------------------------------------
# Formatters
# ---------------------------------------------------------------------------


def _round_half_up(x: float) -> int:
    return int(math.floor(x + 0.5))


def format_currency(amount: float, currency: str = DEFAULT_CURRENCY) -> str:
    """Whole-unit money string, e.g. ``$1,235`` or ``-€40``."""

    symbol = _CURRENCY_SYMBOLS.get(currency.upper(), f"{currency.upper()} ")
    whole = _round_half_up(abs(amount))
    sign = "-" if amount < 0 and whole != 0 else ""
    return f"{sign}{symbol}{whole:,}"


def format_number(num: float) -> str:
    return f"{_round_half_up(num):,}"


def format_decimal(num: float) -> str:
    return f"{num:.1f}"


def format_percent(num: float) -> str:
    return f"{num:.1f}%"


def format_table_date(dt: datetime) -> str:
    """``Mar 10, 2025``."""

    return f"{MONTHS_SHORT[dt.month - 1]} {dt.day}, {dt.year}"


__all__ = [
    "Page",
    "SortDirection",
    "filter_orders",
    "filter_refunds",
    "format_currency",
    "format_decimal",
    "format_number",
    "format_percent",
    "format_table_date",
    "paginate",
    "sort_by",
    "total_pages",
]
