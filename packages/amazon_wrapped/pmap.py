"""Order-preserving bounded parallel map over a ``ThreadPoolExecutor``.

Used to tokenize several export files at once: each file is an independent
unit of work and the caller waits for all of them before computing anything.

- ``concurrency`` caps how many mapper calls run at the same time.
- A mapper returns ``p_map_skip`` to leave its item out of the result while
  the remaining items keep their relative order.
- Mapper exceptions propagate to the caller once all running work settles;
  work that has not started yet is cancelled.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from concurrent.futures import FIRST_EXCEPTION, ThreadPoolExecutor, wait
from typing import TypeVar

InT = TypeVar("InT")
OutT = TypeVar("OutT")


class _Skip:
    __slots__ = ()

    def __repr__(self) -> str:  # pragma: no cover - trivial
        return "p_map_skip"


p_map_skip: object = _Skip()


def p_map(
    iterable: Iterable[InT],
    mapper: Callable[[InT], OutT | object],
    *,
    concurrency: int,
) -> list[OutT]:
    if not isinstance(concurrency, int) or concurrency < 1:
        raise ValueError("concurrency must be a positive integer")

    items = list(iterable)
    if not items:
        return []

    with ThreadPoolExecutor(
        max_workers=min(concurrency, len(items)), thread_name_prefix="aw-parse"
    ) as pool:
        futures = [pool.submit(mapper, item) for item in items]
        done, pending = wait(futures, return_when=FIRST_EXCEPTION)
        failed = next((f for f in futures if f in done and f.exception() is not None), None)
        if failed is not None:
            for fut in pending:
                fut.cancel()
            raise failed.exception()  # type: ignore[misc]

    out: list[OutT] = []
    for fut in futures:
        val = fut.result()
        if val is p_map_skip:
            continue
        out.append(val)  # type: ignore[arg-type]
    return out


__all__ = ["p_map", "p_map_skip"]
