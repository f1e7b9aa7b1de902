"""Export-file tokenization, schema detection, and field parsers.

Tokenization follows RFC 4180 via the stdlib :mod:`csv` module (UTF-8 with an
optional BOM, quoted fields with embedded commas/newlines, doubled quotes).
Rows come back as ``dict[str, str]`` keyed by the exact header text; field
extraction downstream matches those keys literally, while schema detection
compares headers case-insensitively.

Field parsers never raise for malformed data: a date that cannot be read is
``None`` (the caller drops the row) and a money value that cannot be read is
``0.0``.
"""

from __future__ import annotations

import csv
import logging
import re
from collections.abc import Iterable, Mapping, Sequence
from datetime import UTC, datetime
from io import StringIO
from os import PathLike
from pathlib import Path

from .config import CURRENCY_HEADERS, DEFAULT_CURRENCY, get_parse_workers
from .logging_setup import resolve_logger
from .models import FileType, ParsedFile
from .pmap import p_map, p_map_skip

_US_DATE_RE = re.compile(r"^(\d{1,2})/(\d{1,2})/(\d{4})")
_MONEY_STRIP_RE = re.compile(r"[^0-9.\-]")
# Longest numeric prefix, the way a lenient float parse reads it.
_FLOAT_PREFIX_RE = re.compile(r"-?(?:\d+(?:\.\d*)?|\.\d+)")


# ---------------------------------------------------------------------------
# Schema detection
# ---------------------------------------------------------------------------


def detect_file_type(headers: Iterable[str]) -> FileType:
    """Classify an export by its header set.

    Checked in order, first match wins:

    - retail orders: ``product name`` and (``shipment item subtotal`` or
      ``total owed``)
    - refund payments: ``amountrefunded`` and ``refundcompletiondate``
    - digital items: ``ourprice`` and ``publisher``
    """

    header_set = {h.strip().lower() for h in headers if h is not None}

    if "product name" in header_set and (
        "shipment item subtotal" in header_set or "total owed" in header_set
    ):
        return "retail_orders"
    if "amountrefunded" in header_set and "refundcompletiondate" in header_set:
        return "refund_payments"
    if "ourprice" in header_set and "publisher" in header_set:
        return "digital_items"
    return "unknown"


# ---------------------------------------------------------------------------
# Field parsers
# ---------------------------------------------------------------------------


def parse_amazon_date(value: str | None) -> datetime | None:
    """Parse an export date into a naive ``datetime``.

    Accepts ISO dates and timestamps (``2025-01-15``, ``2025-01-15T10:30:00Z``,
    offsets, fractional seconds), then falls back to a leading ``MM/DD/YYYY``.
    Timezone-aware values are converted to UTC and made naive so every date in
    a dataset compares on the same wall clock.
    """

    if not value:
        return None
    s = value.strip()
    if not s:
        return None

    try:
        dt = datetime.fromisoformat(s)
    except ValueError:
        dt = None
    if dt is not None:
        if dt.tzinfo is not None:
            dt = dt.astimezone(UTC).replace(tzinfo=None)
        return dt

    m = _US_DATE_RE.match(s)
    if m:
        month, day, year = (int(g) for g in m.groups())
        try:
            return datetime(year, month, day)
        except ValueError:
            return None
    return None


def parse_currency(value: str | None) -> float:
    """Read a money string as a float, ``0.0`` when nothing numeric is left.

    Every character other than digits, ``.`` and ``-`` is removed first, so
    ``"$1,234.50"`` reads as ``1234.5``. Locales that use ``,`` as the decimal
    separator are misread; that loss is accepted.
    """

    if not value:
        return 0.0
    cleaned = _MONEY_STRIP_RE.sub("", value)
    m = _FLOAT_PREFIX_RE.match(cleaned)
    if not m:
        return 0.0
    try:
        return float(m.group(0))
    except ValueError:
        return 0.0


def extract_currency(row: Mapping[str, str | None]) -> str:
    for key in CURRENCY_HEADERS:
        raw = row.get(key)
        if raw and raw.strip():
            return raw.strip().upper()
    return DEFAULT_CURRENCY


# ---------------------------------------------------------------------------
# Tokenization
# ---------------------------------------------------------------------------


def read_csv_rows(csv_text: str) -> tuple[list[str], list[dict[str, str]]]:
    """Return ``(headers, rows)`` for CSV text, skipping fully blank rows."""

    with StringIO(csv_text) as f:
        reader = csv.DictReader(f)
        headers = list(reader.fieldnames or [])
        rows: list[dict[str, str]] = []
        for row in reader:
            # DictReader collects surplus cells under a ``None`` key; drop it.
            normalized = {k: (v if v is not None else "") for k, v in row.items() if k is not None}
            if all(not str(v).strip() for v in normalized.values()):
                continue
            rows.append(normalized)
    return headers, rows


def parse_csv_text(csv_text: str, *, file_name: str) -> ParsedFile:
    """Tokenize CSV text and tag it with its detected schema.

    Raises ``csv.Error`` when the text has no header row.
    """

    headers, rows = read_csv_rows(csv_text.lstrip("\ufeff"))
    if not headers:
        raise csv.Error(f"CSV appears to have no header row: {file_name}")
    return ParsedFile(
        type=detect_file_type(headers),
        file_name=file_name,
        data=rows,
        row_count=len(rows),
    )


def parse_csv_file(csv_path: str | PathLike[str]) -> ParsedFile:
    p = Path(csv_path)
    text = p.read_text(encoding="utf-8-sig")
    return parse_csv_text(text, file_name=p.name)


def parse_files(
    paths: Sequence[str | PathLike[str]],
    *,
    concurrency: int | None = None,
    logger: logging.Logger | None = None,
) -> list[ParsedFile]:
    """Tokenize several files concurrently and return them in input order.

    Files are independent: one that cannot be read or tokenized is dropped
    with a warning and the rest of the batch is still returned. Files whose
    headers match no known schema are kept (tagged ``unknown``) so callers can
    report them.
    """

    log = resolve_logger(logger, "amazon_wrapped.parsing")

    def _one(path: str | PathLike[str]) -> ParsedFile | object:
        try:
            return parse_csv_file(path)
        except (OSError, UnicodeDecodeError, csv.Error) as e:
            log.warning("parse_files:skipped path=%s error=%s", path, e)
            return p_map_skip

    parsed: list[ParsedFile] = p_map(
        paths, _one, concurrency=concurrency or get_parse_workers()
    )
    for pf in parsed:
        log.debug(
            "parse_files:parsed file=%s type=%s rows=%d", pf.file_name, pf.type, pf.row_count
        )
    return parsed


__all__ = [
    "detect_file_type",
    "extract_currency",
    "parse_amazon_date",
    "parse_csv_file",
    "parse_csv_text",
    "parse_currency",
    "parse_files",
    "read_csv_rows",
]
