"""Duplicate order-line removal across overlapping export files.

The same order line can show up in more than one export when their date
ranges overlap. A line is identified by ``order_id`` plus its ASIN, falling
back to the product name when the ASIN is blank; ASINs are stable across
exports while product names may differ in whitespace or encoding.
"""

from __future__ import annotations

from collections.abc import Iterable

from .models import Order


def order_line_key(order: Order) -> tuple[str, str]:
    return (order.order_id, order.asin or order.product_name)


def dedupe_orders(orders: Iterable[Order]) -> list[Order]:
    """Keep the first occurrence of each order line, preserving input order."""

    seen: set[tuple[str, str]] = set()
    out: list[Order] = []
    for order in orders:
        key = order_line_key(order)
        if key in seen:
            continue
        seen.add(key)
        out.append(order)
    return out


__all__ = ["dedupe_orders", "order_line_key"]
