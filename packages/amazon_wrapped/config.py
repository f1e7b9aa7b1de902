"""Configuration for the ``amazon_wrapped`` package.

Two kinds of settings live here:

- Data constants (display limits, month/day labels, book-detection keyword
  lists). These are tuned by editing this module; the algorithms that consume
  them never hard-code their own copies.
- Environment-driven settings, read lazily through small helpers so tests and
  entrypoints can override them with ``monkeypatch.setenv`` or a local
  ``.env`` file.
"""

from __future__ import annotations

import os
import re
from dataclasses import dataclass
from pathlib import Path

# ---------------------------------------------------------------------------
# App settings
# ---------------------------------------------------------------------------

# Currency assumed when a row carries no currency column.
DEFAULT_CURRENCY = "USD"

# Header names probed (in order) for a row's currency code.
CURRENCY_HEADERS: tuple[str, ...] = (
    "Currency",
    "currency",
    "Currency Code",
    "CurrencyCode",
    "Ordering Currency Code",
)


@dataclass(frozen=True, slots=True)
class Limits:
    top_items: int = 5
    top_expensive: int = 10
    top_books: int = 5
    items_per_page: int = 20


LIMITS = Limits()

# ---------------------------------------------------------------------------
# Labels
# ---------------------------------------------------------------------------

MONTHS_FULL: tuple[str, ...] = (
    "January",
    "February",
    "March",
    "April",
    "May",
    "June",
    "July",
    "August",
    "September",
    "October",
    "November",
    "December",
)

MONTHS_SHORT: tuple[str, ...] = tuple(m[:3] for m in MONTHS_FULL)

# Index 0 is Sunday.
DAYS_FULL: tuple[str, ...] = (
    "Sunday",
    "Monday",
    "Tuesday",
    "Wednesday",
    "Thursday",
    "Friday",
    "Saturday",
)

# ---------------------------------------------------------------------------
# Book detection
# ---------------------------------------------------------------------------

BOOK_PUBLISHERS: tuple[str, ...] = (
    "penguin",
    "random house",
    "hachette",
    "harpercollins",
    "simon & schuster",
    "macmillan",
    "scholastic",
    "audible",
    "brilliance audio",
    "blackstone",
    "recorded books",
    "tantor",
    "harlequin",
    "kensington",
    "sourcebooks",
    "tor",
    "del rey",
    "ace",
    "orbit",
    "berkley",
    "dutton",
    "putnam",
    "viking",
    "bantam",
    "doubleday",
    "knopf",
    "crown",
    "ballantine",
    "anchor",
    "vintage",
    "little, brown",
    "grand central",
    "st. martin",
    "minotaur",
    "flatiron",
    "bloomsbury",
    "wiley",
    "o'reilly",
    "pearson",
    "mcgraw-hill",
    "cambridge university press",
    "oxford university press",
    "mit press",
    "chronicle books",
    "hay house",
    "sounds true",
)

# Publisher values that say nothing about the product.
GENERIC_PUBLISHERS: frozenset[str] = frozenset(
    {
        "vendor details not available",
        "amazon.com services, inc",
        "amazon.com services, inc.",
    }
)

SUBSCRIPTION_EXCLUSIONS: tuple[str, ...] = (
    "membership",
    "subscription",
    "unlimited",
    "prime",
    "audible plus",
    "kindle unlimited",
    "gold member",
    "platinum member",
    "trial",
    "renewal",
    "monthly plan",
    "annual plan",
)

PRODUCT_EXCLUSIONS: tuple[str, ...] = (
    "water bottle", "bottle", "tumbler", "mug", "cup",
    "phone case", "cable", "charger", "adapter", "battery", "headphone",
    "speaker", "keyboard", "mouse", "monitor", "laptop", "tablet case",
    "screen protector", "stylus", "holder", "stand", "mount", "bracket",
    "shelf", "organizer", "storage", "container", "bag", "backpack", "wallet",
    "watch", "clock", "lamp", "light", "bulb", "tool", "screwdriver", "wrench",
    "drill", "tape", "glue", "paint", "brush", "cleaner", "soap", "shampoo",
    "lotion", "cream", "vitamin", "supplement", "protein", "snack", "food",
    "coffee", "tea", "rice", "spices", "spice", "seasoning", "flour", "sugar",
    "salt", "cooking", "meals", "lbs)", "oz)", "kg)", "shirt", "t-shirt",
    "pants", "shorts", "dress", "jacket", "coat", "shoes", "socks", "underwear",
    "toy", "game", "puzzle", "lego", "figure", "doll", "pet", "dog", "cat",
    "fish", "bird", "plant", "seed", "garden", "furniture", "mattress", "pillow",
    "blanket", "towel", "curtain", "rug", "mat", "simple modern",
)  # fmt: skip

STRONG_BOOK_INDICATORS: tuple[str, ...] = (
    "kindle edition",
    "paperback",
    "hardcover",
    "hardback",
    "audiobook",
    "audible",
    "(book",
    "book)",
    "novel",
    "ebook",
    "e-book",
    "mass market",
    "library binding",
    "board book",
    "spiral-bound",
    "leather bound",
)

MEDIUM_BOOK_INDICATORS: tuple[str, ...] = (
    "memoir",
    "biography",
    "autobiography",
    "anthology",
    "novella",
    "short stories",
    "poetry",
    "poems",
    "textbook",
    "workbook",
    "handbook",
    "guide to",
    "manual",
    "cookbook",
    "recipe book",
    "100 recipes",
    "101 recipes",
    "recipes for",
)

BOOK_SERIES_PATTERN = re.compile(r"book\s*\d+", re.IGNORECASE)
BOOK_SERIES_PAREN_PATTERN = re.compile(r"\(.*book\s*\d+.*\)", re.IGNORECASE)

# ---------------------------------------------------------------------------
# Environment-driven settings
# ---------------------------------------------------------------------------

ENV_LOG_LEVEL = "AMAZON_WRAPPED_LOG_LEVEL"
ENV_DATA_DIR = "AMAZON_WRAPPED_DATA_DIR"
ENV_STORAGE_BUDGET = "AMAZON_WRAPPED_STORAGE_BUDGET"
ENV_PARSE_WORKERS = "AMAZON_WRAPPED_PARSE_WORKERS"

DEFAULT_STORAGE_BUDGET_BYTES = 5 * 1024 * 1024
DEFAULT_PARSE_WORKERS = 4


def _env_positive_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if not raw or not raw.strip():
        return default
    try:
        value = int(raw.strip())
    except ValueError:
        return default
    return value if value > 0 else default


def get_data_dir() -> Path:
    """Return the directory that holds the saved bundle.

    Default: ``./.amazon_wrapped`` under the current working directory.
    Override: ``AMAZON_WRAPPED_DATA_DIR`` (absolute or relative).
    """

    root = os.getenv(ENV_DATA_DIR)
    if root and root.strip():
        return Path(root).expanduser().resolve()
    return (Path.cwd() / ".amazon_wrapped").resolve()


def get_storage_budget() -> int:
    """Byte budget for the serialized bundle (``AMAZON_WRAPPED_STORAGE_BUDGET``)."""

    return _env_positive_int(ENV_STORAGE_BUDGET, DEFAULT_STORAGE_BUDGET_BYTES)


def get_parse_workers() -> int:
    """Worker cap for concurrent file tokenization, capped at 16."""

    return min(_env_positive_int(ENV_PARSE_WORKERS, DEFAULT_PARSE_WORKERS), 16)


__all__ = [
    "BOOK_PUBLISHERS",
    "BOOK_SERIES_PAREN_PATTERN",
    "BOOK_SERIES_PATTERN",
    "CURRENCY_HEADERS",
    "DAYS_FULL",
    "DEFAULT_CURRENCY",
    "GENERIC_PUBLISHERS",
    "LIMITS",
    "Limits",
    "MEDIUM_BOOK_INDICATORS",
    "MONTHS_FULL",
    "MONTHS_SHORT",
    "PRODUCT_EXCLUSIONS",
    "STRONG_BOOK_INDICATORS",
    "SUBSCRIPTION_EXCLUSIONS",
    "get_data_dir",
    "get_parse_workers",
    "get_storage_budget",
]
