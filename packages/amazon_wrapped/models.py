"""Data models for ``amazon_wrapped``.

Canonical records (orders, refunds, rollups, the stats snapshot) are frozen
``dataclass`` values: they are created once per computation pass and never
mutated afterwards. Collections on them are tuples for the same reason.

The on-disk bundle is described by Pydantic models at the bottom of this
module so that reads are validated before anything downstream sees them.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, TypeAdapter

# ---------------------------------------------------------------------------
# Raw input
# ---------------------------------------------------------------------------

# One CSV row keyed by the exact header text of the export.
type RawRow = Mapping[str, str]

type FileType = Literal["retail_orders", "digital_items", "refund_payments", "unknown"]


@dataclass(frozen=True, slots=True)
class ParsedFile:
    """A tokenized export file handed to the core.

    ``type`` is the result of header classification; ``data`` holds the rows
    as header→cell mappings in file order.
    """

    type: FileType
    file_name: str
    data: Sequence[RawRow]
    row_count: int


# ---------------------------------------------------------------------------
# Canonical records
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class Order:
    """One product line within one order.

    Several ``Order`` values may share an ``order_id`` (multi-item orders).
    ``order_date`` is always a real date; rows without one never become an
    ``Order``.
    """

    order_id: str
    order_date: datetime
    total_owed: float
    unit_price: float
    product_name: str
    quantity: int
    asin: str
    currency: str
    is_digital: bool
    publisher: str | None = None


@dataclass(frozen=True, slots=True)
class Refund:
    order_id: str
    amount_refunded: float
    refund_date: datetime
    currency: str


@dataclass(frozen=True, slots=True)
class EnrichedRefund:
    """A refund joined (best effort) to the first order line with its ``order_id``."""

    order_id: str
    amount_refunded: float
    refund_date: datetime
    currency: str
    original_order: Order | None = None
    product_name: str | None = None

    @classmethod
    def from_refund(cls, refund: Refund, original_order: Order | None) -> EnrichedRefund:
        return cls(
            order_id=refund.order_id,
            amount_refunded=refund.amount_refunded,
            refund_date=refund.refund_date,
            currency=refund.currency,
            original_order=original_order,
            product_name=original_order.product_name if original_order else None,
        )


# ---------------------------------------------------------------------------
# Rollups
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class MonthlyData:
    month: str
    month_index: int
    total_spend: float
    order_count: int
    orders: tuple[Order, ...] = ()


@dataclass(frozen=True, slots=True)
class YearlyData:
    year: int
    total_spend: float
    order_count: int
    orders: tuple[Order, ...] = ()
    primary_currency: str | None = None


@dataclass(frozen=True, slots=True)
class CurrencyBreakdownEntry:
    currency: str
    amount: float
    order_count: int


@dataclass(frozen=True, slots=True)
class PeakMonth:
    month: str = "January"
    amount: float = 0.0
    order_count: int = 0


@dataclass(frozen=True, slots=True)
class FavoriteDay:
    day: str = "Monday"
    count: int = 0


@dataclass(frozen=True, slots=True)
class MonthlySpend:
    month: str
    amount: float


@dataclass(frozen=True, slots=True)
class DailyCount:
    day: str
    count: int


@dataclass(frozen=True, slots=True)
class ItemCount:
    name: str
    count: int


@dataclass(frozen=True, slots=True)
class ItemPrice:
    name: str
    price: float


# ---------------------------------------------------------------------------
# Stats snapshot and result bundle
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class WrappedStats:
    """Headline statistics for one target year.

    Monetary figures only include orders in ``primary_currency`` when the year
    mixes currencies; counts always include every order line. Every field has
    a zero default so an empty year is a valid snapshot.
    """

    # Spending
    total_gross_spend: float = 0.0
    total_refunds: float = 0.0
    net_spend: float = 0.0
    monthly_average: float = 0.0
    average_item_cost: float = 0.0

    # Orders
    total_orders: int = 0
    retail_orders: int = 0
    digital_orders: int = 0
    total_items: int = 0
    average_items_per_month: float = 0.0
    orders_per_day: float = 0.0

    # Time-based
    peak_month: PeakMonth = field(default_factory=PeakMonth)
    favorite_day: FavoriteDay = field(default_factory=FavoriteDay)
    monthly_spending: tuple[MonthlySpend, ...] = ()
    daily_orders: tuple[DailyCount, ...] = ()

    # Products
    top_items: tuple[ItemCount, ...] = ()
    top_expensive_items: tuple[ItemPrice, ...] = ()

    # Digital
    digital_spend: float = 0.0
    digital_item_count: int = 0
    top_publisher: str | None = None

    # Books (physical + digital)
    book_count: int = 0
    book_spend: float = 0.0
    kindle_book_count: int = 0
    physical_book_count: int = 0
    top_book_publisher: str | None = None
    top_books: tuple[ItemPrice, ...] = ()

    # Returns
    return_count: int = 0
    total_refund_amount: float = 0.0
    average_refund_time: float | None = None
    return_rate: float = 0.0

    # Currency
    primary_currency: str = "USD"
    has_mixed_currencies: bool = False
    currency_breakdown: tuple[CurrencyBreakdownEntry, ...] = ()


@dataclass(frozen=True, slots=True)
class ProcessedData:
    """Year-filtered detail kept for exploration views."""

    orders: tuple[Order, ...] = ()
    refunds: tuple[Refund, ...] = ()
    enriched_refunds: tuple[EnrichedRefund, ...] = ()
    monthly_data: tuple[MonthlyData, ...] = ()


@dataclass(frozen=True, slots=True)
class CalculateStatsResult:
    """Output of one assembler pass.

    ``all_orders``/``all_refunds`` are the deduplicated, unfiltered sets
    across every year; they feed the cross-year view and year switches
    without re-reading files.
    """

    stats: WrappedStats
    processed_data: ProcessedData
    all_orders: tuple[Order, ...] = ()
    all_refunds: tuple[Refund, ...] = ()


# ---------------------------------------------------------------------------
# DTOs for the persisted bundle
# ---------------------------------------------------------------------------


class StoredBundle(BaseModel):
    """Top-level schema for the saved bundle JSON file.

    Bulky sections default to empty so a bundle trimmed to fit the storage
    budget still validates. ``dropped`` records which sections were trimmed.
    """

    model_config = ConfigDict(extra="forbid")

    schema_version: int
    saved_at: datetime
    target_year: int | None = None
    stats: WrappedStats
    processed_data: ProcessedData = ProcessedData()
    all_orders: tuple[Order, ...] = ()
    all_refunds: tuple[Refund, ...] = ()
    dropped: tuple[str, ...] = ()

    def to_result(self) -> CalculateStatsResult:
        return CalculateStatsResult(
            stats=self.stats,
            processed_data=self.processed_data,
            all_orders=self.all_orders,
            all_refunds=self.all_refunds,
        )


def as_plain(value: Any) -> Any:
    """Return a JSON-friendly rendering of a model value (dates as ISO strings)."""

    return TypeAdapter(type(value)).dump_python(value, mode="json")


__all__ = [
    "CalculateStatsResult",
    "CurrencyBreakdownEntry",
    "DailyCount",
    "EnrichedRefund",
    "FavoriteDay",
    "FileType",
    "ItemCount",
    "ItemPrice",
    "MonthlyData",
    "MonthlySpend",
    "Order",
    "ParsedFile",
    "PeakMonth",
    "ProcessedData",
    "RawRow",
    "Refund",
    "StoredBundle",
    "WrappedStats",
    "YearlyData",
    "as_plain",
]
