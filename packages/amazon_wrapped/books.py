"""Heuristic book detection from product name and publisher text.

Layers are checked in order and the first decisive one wins:

1. subscription/membership keywords in the name → not a book (even when a
   book publisher sells it)
2. a known book publisher (placeholder publishers ignored) → book
3. product exclusion keywords (household, electronics, apparel, food, ...) →
   not a book
4. strong book indicators (format words like "paperback") → book
5. a "Book <n>" series marker → book
6. medium literary keywords (memoir, cookbook, ...) → book, else not

Keyword lists live in :mod:`amazon_wrapped.config`.
"""

from __future__ import annotations

from .config import (
    BOOK_PUBLISHERS,
    BOOK_SERIES_PAREN_PATTERN,
    BOOK_SERIES_PATTERN,
    GENERIC_PUBLISHERS,
    MEDIUM_BOOK_INDICATORS,
    PRODUCT_EXCLUSIONS,
    STRONG_BOOK_INDICATORS,
    SUBSCRIPTION_EXCLUSIONS,
)


def _contains_any(text: str, needles: tuple[str, ...]) -> bool:
    return any(n in text for n in needles)


def is_likely_book(product_name: str | None, publisher: str | None = None) -> bool:
    name = (product_name or "").lower()

    if _contains_any(name, SUBSCRIPTION_EXCLUSIONS):
        return False

    if publisher:
        pub = publisher.lower()
        if pub not in GENERIC_PUBLISHERS and _contains_any(pub, BOOK_PUBLISHERS):
            return True

    if _contains_any(name, PRODUCT_EXCLUSIONS):
        return False

    if _contains_any(name, STRONG_BOOK_INDICATORS):
        return True

    if BOOK_SERIES_PATTERN.search(name) or BOOK_SERIES_PAREN_PATTERN.search(name):
        return True

    return _contains_any(name, MEDIUM_BOOK_INDICATORS)


__all__ = ["is_likely_book"]
