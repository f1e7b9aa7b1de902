"""Public interface for the ``amazon_wrapped`` package.

This module exposes the pipeline entry points and public models/types as the
stable import surface. There is no runtime logic here, only symbol re-exports.
"""

from .books import is_likely_book
from .duplicates import dedupe_orders
from .models import (
    CalculateStatsResult,
    EnrichedRefund,
    MonthlyData,
    Order,
    ParsedFile,
    ProcessedData,
    Refund,
    WrappedStats,
    YearlyData,
)
from .normalizers import OrderNormalizer
from .parsing import (
    detect_file_type,
    parse_amazon_date,
    parse_csv_file,
    parse_csv_text,
    parse_currency,
    parse_files,
)
from .stats import (
    calculate_stats_with_data,
    calculate_yearly_data,
    get_available_years,
    recalculate_stats_for_year,
)
from .storage import clear_bundle, load_bundle, save_bundle

__all__ = [
    # Parsing
    "detect_file_type",
    "parse_amazon_date",
    "parse_csv_file",
    "parse_csv_text",
    "parse_currency",
    "parse_files",
    # Normalization
    "OrderNormalizer",
    "dedupe_orders",
    "is_likely_book",
    # Stats
    "calculate_stats_with_data",
    "calculate_yearly_data",
    "get_available_years",
    "recalculate_stats_for_year",
    # Storage
    "clear_bundle",
    "load_bundle",
    "save_bundle",
    # Models / types
    "CalculateStatsResult",
    "EnrichedRefund",
    "MonthlyData",
    "Order",
    "ParsedFile",
    "ProcessedData",
    "Refund",
    "WrappedStats",
    "YearlyData",
]
