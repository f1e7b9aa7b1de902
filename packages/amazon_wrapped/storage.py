"""Saved bundle I/O.

A computed :class:`~amazon_wrapped.models.CalculateStatsResult` is written as
one JSON file (default ``<data dir>/bundle.json``, see
:func:`amazon_wrapped.config.get_data_dir`) so the explore views and year
switches work later without the original export files.

Size budget: when the serialized bundle exceeds the byte budget, bulky detail
is dropped in a fixed order until it fits:

1. ``monthly_data.orders`` (per-month order detail)
2. ``enriched_refunds.original_order`` (the joined order; product name stays)
3. ``all_orders`` and ``all_refunds`` (year switches then fall back to the
   saved snapshot)
4. ``processed_data.orders``

Aggregates are never dropped. Readers must accept any of these trimmed
shapes; ``StoredBundle.dropped`` lists what was removed.

Atomicity: writes target ``.tmp`` first and then ``os.replace`` into place.
"""

from __future__ import annotations

import contextlib
import dataclasses
import logging
import os
from collections.abc import Callable
from datetime import UTC, datetime
from os import PathLike
from pathlib import Path

from pydantic import ValidationError

from .config import get_data_dir, get_storage_budget
from .logging_setup import resolve_logger
from .models import CalculateStatsResult, StoredBundle

# Bump only when the on-disk bundle shape changes.
SCHEMA_VERSION: int = 1

BUNDLE_FILE_NAME = "bundle.json"


def default_bundle_path() -> Path:
    return get_data_dir() / BUNDLE_FILE_NAME


def _encoded_size(bundle: StoredBundle) -> int:
    return len(bundle.model_dump_json().encode("utf-8"))


# ----------------------------------------------------------------------------
# Trimming steps
# ----------------------------------------------------------------------------


def _drop_monthly_orders(bundle: StoredBundle) -> StoredBundle:
    pd = bundle.processed_data
    months = tuple(dataclasses.replace(m, orders=()) for m in pd.monthly_data)
    return bundle.model_copy(
        update={"processed_data": dataclasses.replace(pd, monthly_data=months)}
    )


def _drop_refund_orders(bundle: StoredBundle) -> StoredBundle:
    pd = bundle.processed_data
    refunds = tuple(dataclasses.replace(r, original_order=None) for r in pd.enriched_refunds)
    return bundle.model_copy(
        update={"processed_data": dataclasses.replace(pd, enriched_refunds=refunds)}
    )


def _drop_all_years(bundle: StoredBundle) -> StoredBundle:
    return bundle.model_copy(update={"all_orders": (), "all_refunds": ()})


def _drop_processed_orders(bundle: StoredBundle) -> StoredBundle:
    pd = bundle.processed_data
    return bundle.model_copy(
        update={"processed_data": dataclasses.replace(pd, orders=())}
    )


_TRIM_STEPS: tuple[tuple[str, Callable[[StoredBundle], StoredBundle]], ...] = (
    ("monthly_data.orders", _drop_monthly_orders),
    ("enriched_refunds.original_order", _drop_refund_orders),
    ("all_orders", _drop_all_years),
    ("processed_data.orders", _drop_processed_orders),
)


def fit_to_budget(
    bundle: StoredBundle,
    budget_bytes: int,
    *,
    logger: logging.Logger | None = None,
) -> StoredBundle:
    """Return ``bundle`` trimmed step by step until it fits ``budget_bytes``.

    When even the fully trimmed bundle is over budget it is returned anyway
    (with a warning); the aggregates are what the views need most.
    """

    log = resolve_logger(logger, "amazon_wrapped.storage")
    size = _encoded_size(bundle)
    log.debug("storage:size bytes=%d budget=%d", size, budget_bytes)

    dropped = list(bundle.dropped)
    for label, step in _TRIM_STEPS:
        if size <= budget_bytes:
            break
        bundle = step(bundle)
        dropped.append(label)
        size = _encoded_size(bundle.model_copy(update={"dropped": tuple(dropped)}))
        log.info("storage:trimmed field=%s bytes=%d budget=%d", label, size, budget_bytes)

    if size > budget_bytes:
        log.warning("storage:over_budget bytes=%d budget=%d", size, budget_bytes)
    return bundle.model_copy(update={"dropped": tuple(dropped)})


# ----------------------------------------------------------------------------
# Public API
# ----------------------------------------------------------------------------


def save_bundle(
    result: CalculateStatsResult,
    path: str | PathLike[str] | None = None,
    *,
    target_year: int | None = None,
    budget_bytes: int | None = None,
    logger: logging.Logger | None = None,
) -> tuple[str, ...]:
    """Write ``result`` to disk and return the names of any trimmed sections."""

    p = Path(path) if path is not None else default_bundle_path()
    p.parent.mkdir(parents=True, exist_ok=True)
    tmp = p.with_suffix(p.suffix + ".tmp")

    bundle = StoredBundle(
        schema_version=SCHEMA_VERSION,
        saved_at=datetime.now(UTC),
        target_year=target_year,
        stats=result.stats,
        processed_data=result.processed_data,
        all_orders=result.all_orders,
        all_refunds=result.all_refunds,
    )
    bundle = fit_to_budget(
        bundle,
        budget_bytes if budget_bytes is not None else get_storage_budget(),
        logger=logger,
    )

    try:
        tmp.write_text(bundle.model_dump_json(), encoding="utf-8")
        os.replace(tmp, p)
    except Exception:
        with contextlib.suppress(FileNotFoundError):
            tmp.unlink()
        raise
    return bundle.dropped


def load_bundle_file(
    path: str | PathLike[str] | None = None,
    *,
    logger: logging.Logger | None = None,
) -> StoredBundle | None:
    """Return the validated stored bundle, or ``None`` when absent or unusable."""

    log = resolve_logger(logger, "amazon_wrapped.storage")
    p = Path(path) if path is not None else default_bundle_path()
    if not p.exists():
        return None

    try:
        bundle = StoredBundle.model_validate_json(p.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, ValidationError):
        log.warning("storage:read_failed path=%s", os.fspath(p), exc_info=True)
        return None

    if bundle.schema_version != SCHEMA_VERSION:
        log.warning(
            "storage:schema_mismatch path=%s found=%d expected=%d",
            os.fspath(p),
            bundle.schema_version,
            SCHEMA_VERSION,
        )
        return None
    return bundle


def load_bundle(
    path: str | PathLike[str] | None = None,
    *,
    logger: logging.Logger | None = None,
) -> CalculateStatsResult | None:
    bundle = load_bundle_file(path, logger=logger)
    return bundle.to_result() if bundle is not None else None


def clear_bundle(path: str | PathLike[str] | None = None) -> bool:
    """Delete the saved bundle; return whether a file was removed."""

    p = Path(path) if path is not None else default_bundle_path()
    try:
        p.unlink()
    except FileNotFoundError:
        return False
    return True


__all__ = [
    "SCHEMA_VERSION",
    "clear_bundle",
    "default_bundle_path",
    "fit_to_budget",
    "load_bundle",
    "load_bundle_file",
    "save_bundle",
]
