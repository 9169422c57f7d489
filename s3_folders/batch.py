from __future__ import annotations
"""Bounded fan-out of independent per-item work."""
from concurrent.futures import ThreadPoolExecutor
import threading
from typing import Callable, Iterable, Optional, TypeVar

T = TypeVar("T")
R = TypeVar("R")

CANCELLED_MESSAGE = "Operation cancelled"
DEFAULT_MAX_WORKERS = 4


def run_batch(
    items: Iterable[T],
    worker: Callable[[T], R],
    on_cancelled: Callable[[T], R],
    *,
    max_workers: int = DEFAULT_MAX_WORKERS,
    cancel_requested: Optional[Callable[[], bool]] = None,
) -> tuple[list[R], bool]:
    """Run ``worker`` over ``items`` on at most ``max_workers`` threads.

    ``worker`` must turn per-item failures into its own result value. Once
    ``cancel_requested`` returns true, items that have not started yet are
    mapped through ``on_cancelled`` instead. Results keep the input order;
    the flag reports whether cancellation happened.
    """

    pending = list(items)
    stop = threading.Event()

    def task(item: T) -> R:
        if stop.is_set() or (cancel_requested is not None and cancel_requested()):
            stop.set()
            return on_cancelled(item)
        return worker(item)

    if max_workers <= 1 or len(pending) <= 1:
        results = [task(item) for item in pending]
    else:
        with ThreadPoolExecutor(max_workers=max_workers) as executor:
            results = list(executor.map(task, pending))
    return results, stop.is_set()
