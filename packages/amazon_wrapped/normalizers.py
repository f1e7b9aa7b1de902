"""Row → canonical record normalizers for the three export schemas.

Each schema has one generator that:

1. keeps only rows carrying the schema's identifying keys,
2. maps the row to an :class:`~amazon_wrapped.models.Order` or
   :class:`~amazon_wrapped.models.Refund`,
3. drops rows whose date cannot be parsed.

Keys are matched with their exact export spelling (``Order ID`` in retail
exports, ``OrderId`` in digital exports, ``OrderID`` in refund exports).

Retail order headers (subset used): Order ID, Order Date, Total Owed,
Unit Price, Product Name, Quantity, ASIN, Currency.

Digital item headers (subset used): OrderId, OrderDate, ProductName,
OurPrice, ListPriceAmount, Publisher, SellerOfRecord, QuantityOrdered, ASIN.

Refund payment headers (subset used): OrderID, AmountRefunded,
RefundCompletionDate, Currency.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass, field

from .models import Order, ParsedFile, RawRow, Refund
from .parsing import extract_currency, parse_amazon_date, parse_currency

_INT_PREFIX_RE = re.compile(r"^\s*[+-]?\d+")

# Placeholder values seen in the digital export's seller/publisher columns.
_SELLER_PLACEHOLDERS = frozenset({"Not Applicable", "Vendor Details Not Available"})
_PUBLISHER_PLACEHOLDER = "Not Applicable"


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _text(row: Mapping[str, str | None], key: str) -> str:
    v = row.get(key)
    return v.strip() if isinstance(v, str) else ""


def _quantity(raw: str | None) -> int:
    # Integer prefix of the cell; missing, invalid, or zero means one unit.
    if not raw:
        return 1
    m = _INT_PREFIX_RE.match(raw)
    if not m:
        return 1
    return int(m.group(0)) or 1


def _effective_publisher(seller_of_record: str, publisher: str) -> str | None:
    if seller_of_record and seller_of_record not in _SELLER_PLACEHOLDERS:
        return seller_of_record
    if publisher and publisher != _PUBLISHER_PLACEHOLDER:
        return publisher
    return None


# ---------------------------------------------------------------------------
# Row shape guards
# ---------------------------------------------------------------------------


def is_retail_order_row(row: object) -> bool:
    return isinstance(row, Mapping) and "Order ID" in row and "Order Date" in row


def is_refund_payment_row(row: object) -> bool:
    return isinstance(row, Mapping) and "OrderID" in row and "AmountRefunded" in row


def is_digital_item_row(row: object) -> bool:
    return isinstance(row, Mapping) and "OrderId" in row and "OurPrice" in row


# ---------------------------------------------------------------------------
# Schema-specific normalizers
# ---------------------------------------------------------------------------


def normalize_retail_orders(rows: Iterable[RawRow]) -> Iterator[Order]:
    for r in rows:
        if not is_retail_order_row(r):
            continue
        order_date = parse_amazon_date(r.get("Order Date"))
        if order_date is None:
            continue
        yield Order(
            order_id=_text(r, "Order ID"),
            order_date=order_date,
            total_owed=parse_currency(r.get("Total Owed")),
            unit_price=parse_currency(r.get("Unit Price")),
            product_name=_text(r, "Product Name") or "Unknown Item",
            quantity=_quantity(r.get("Quantity")),
            asin=_text(r, "ASIN"),
            currency=extract_currency(r),
            is_digital=False,
        )


def normalize_digital_items(rows: Iterable[RawRow]) -> Iterator[Order]:
    for r in rows:
        if not is_digital_item_row(r):
            continue
        order_date = parse_amazon_date(r.get("OrderDate"))
        if order_date is None:
            continue

        # Credit-based purchases carry a zero OurPrice; the list price is the
        # value actually spent.
        our_price = parse_currency(r.get("OurPrice"))
        price = our_price if our_price > 0 else parse_currency(r.get("ListPriceAmount"))

        yield Order(
            order_id=_text(r, "OrderId"),
            order_date=order_date,
            total_owed=price,
            unit_price=price,
            product_name=_text(r, "ProductName") or "Unknown Digital Item",
            quantity=_quantity(r.get("QuantityOrdered")),
            asin=_text(r, "ASIN"),
            currency=extract_currency(r),
            is_digital=True,
            publisher=_effective_publisher(_text(r, "SellerOfRecord"), _text(r, "Publisher")),
        )


def normalize_refunds(rows: Iterable[RawRow]) -> Iterator[Refund]:
    for r in rows:
        if not is_refund_payment_row(r):
            continue
        refund_date = parse_amazon_date(r.get("RefundCompletionDate"))
        if refund_date is None:
            continue
        yield Refund(
            order_id=_text(r, "OrderID"),
            amount_refunded=parse_currency(r.get("AmountRefunded")),
            refund_date=refund_date,
            currency=extract_currency(r),
        )


# ---------------------------------------------------------------------------
# Dispatch
# ---------------------------------------------------------------------------


@dataclass(slots=True)
class NormalizedFiles:
    """Orders and refunds gathered from a batch of files, in file order."""

    orders: list[Order] = field(default_factory=list)
    refunds: list[Refund] = field(default_factory=list)
    skipped_files: list[str] = field(default_factory=list)
    dropped_rows: int = 0


class OrderNormalizer:
    """Normalize tokenized export files into canonical orders and refunds.

    Usage
    -----
    batch = OrderNormalizer.normalize_files(parsed_files)
    """

    @staticmethod
    def normalize_file(parsed: ParsedFile) -> tuple[list[Order], list[Refund]]:
        if parsed.type == "retail_orders":
            return list(normalize_retail_orders(parsed.data)), []
        if parsed.type == "digital_items":
            return list(normalize_digital_items(parsed.data)), []
        if parsed.type == "refund_payments":
            return [], list(normalize_refunds(parsed.data))
        return [], []

    @staticmethod
    def normalize_files(files: Iterable[ParsedFile]) -> NormalizedFiles:
        batch = NormalizedFiles()
        for parsed in files:
            if parsed.type == "unknown":
                batch.skipped_files.append(parsed.file_name)
                continue
            orders, refunds = OrderNormalizer.normalize_file(parsed)
            batch.orders.extend(orders)
            batch.refunds.extend(refunds)
            batch.dropped_rows += max(0, len(parsed.data) - len(orders) - len(refunds))
        return batch


__all__ = [
    "NormalizedFiles",
    "OrderNormalizer",
    "is_digital_item_row",
    "is_refund_payment_row",
    "is_retail_order_row",
    "normalize_digital_items",
    "normalize_refunds",
    "normalize_retail_orders",
]
