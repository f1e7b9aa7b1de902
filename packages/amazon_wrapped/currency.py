"""Currency tallies and the primary-currency guardrail.

A year of orders may mix currencies (e.g. orders shipped from another
marketplace). Amounts in different currencies are never summed together: when
more than one currency is present, monetary aggregates only include orders in
the *primary* currency, the one with the most order lines. Counts are not
affected.

Refund totals always require the primary currency, mixed year or not. A year
with refunds but no orders falls back to ``USD`` as its primary currency.

Ties on order-line count go to the currency that reached the maximum first
while iterating in input order.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from .config import DEFAULT_CURRENCY
from .logging_setup import resolve_logger
from .models import CurrencyBreakdownEntry, Order


def _currency_of(order: Order) -> str:
    return order.currency or DEFAULT_CURRENCY


def get_primary_currency(orders: Iterable[Order]) -> str:
    counts: dict[str, int] = {}
    for order in orders:
        cur = _currency_of(order)
        counts[cur] = counts.get(cur, 0) + 1

    primary = DEFAULT_CURRENCY
    best = 0
    for cur, n in counts.items():
        if n > best:
            primary, best = cur, n
    return primary


def currency_breakdown(orders: Iterable[Order]) -> list[CurrencyBreakdownEntry]:
    """Per-currency amount and order-line count, most order lines first."""

    amounts: dict[str, float] = {}
    counts: dict[str, int] = {}
    for order in orders:
        cur = _currency_of(order)
        amounts[cur] = amounts.get(cur, 0.0) + order.total_owed
        counts[cur] = counts.get(cur, 0) + 1

    entries = [
        CurrencyBreakdownEntry(currency=cur, amount=amounts[cur], order_count=counts[cur])
        for cur in counts
    ]
    # sorted() is stable: equal counts keep first-seen order.
    return sorted(entries, key=lambda e: e.order_count, reverse=True)


@dataclass(frozen=True, slots=True)
class CurrencyResolution:
    primary_currency: str
    has_mixed_currencies: bool
    breakdown: tuple[CurrencyBreakdownEntry, ...]

    def in_primary(self, currency: str | None) -> bool:
        """Whether an amount in ``currency`` may join monetary totals."""

        return not self.has_mixed_currencies or (currency or DEFAULT_CURRENCY) == (
            self.primary_currency
        )

    def is_primary(self, currency: str | None) -> bool:
        """Whether ``currency`` is exactly the primary currency.

        Refunds use this stricter test: a year whose orders are all USD still
        keeps a EUR refund out of the USD totals.
        """

        return (currency or DEFAULT_CURRENCY) == self.primary_currency

    def monetary(self, orders: Sequence[Order]) -> list[Order]:
        return [o for o in orders if self.in_primary(o.currency)]


def resolve_currency(
    orders: Sequence[Order],
    *,
    logger: logging.Logger | None = None,
) -> CurrencyResolution:
    log = resolve_logger(logger, "amazon_wrapped.currency")

    breakdown = tuple(currency_breakdown(orders))
    primary = breakdown[0].currency if breakdown else DEFAULT_CURRENCY
    resolution = CurrencyResolution(
        primary_currency=primary,
        has_mixed_currencies=len(breakdown) > 1,
        breakdown=breakdown,
    )
    log.debug(
        "currency:resolved primary=%s mixed=%s breakdown=%s",
        primary,
        resolution.has_mixed_currencies,
        [(e.currency, e.order_count) for e in breakdown],
    )
    return resolution


__all__ = [
    "CurrencyResolution",
    "currency_breakdown",
    "get_primary_currency",
    "resolve_currency",
]
