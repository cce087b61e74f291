"""Run independent fetches concurrently and wait for every one of them."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Generic, TypeVar

T = TypeVar("T")
R = TypeVar("R")

_MAX_WORKERS = 8


@dataclass(frozen=True)
class Settled(Generic[T, R]):
    arg: T
    value: R | None = None
    error: BaseException | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


def settle_all(
    fn: Callable[[T], R], args: Sequence[T], max_workers: int = _MAX_WORKERS
) -> list[Settled[T, R]]:
    """Apply *fn* to every arg in parallel; results come back in input order.

    A failing call only yields an error entry for its own arg.
    """
    if not args:
        return []

    workers = min(max_workers, len(args))
    with ThreadPoolExecutor(max_workers=workers) as executor:
        futures = [executor.submit(fn, arg) for arg in args]
        settled: list[Settled[T, R]] = []
        for arg, fut in zip(args, futures):
            try:
                settled.append(Settled(arg, value=fut.result()))
            except Exception as exc:
                settled.append(Settled(arg, error=exc))
    return settled
