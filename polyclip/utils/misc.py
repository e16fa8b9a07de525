"""Miscellaneous python utils"""
from typing import Callable, Iterable, Iterator, List, TypeVar

T = TypeVar("T")


def batch_by_weight(
    iterable: Iterable[T], weight: Callable[[T], int], limit: int
) -> Iterator[List[T]]:
    """Batch an iterable into chunks whose total weight reaches limit.

    A batch is closed as soon as its accumulated weight is at least limit,
    so a single heavy item closes whichever batch it lands in.
    """
    current: List[T] = []
    total = 0

    for item in iterable:
        current.append(item)
        total += weight(item)

        if total >= limit:
            yield current
            current = []
            total = 0

    if current:
        yield current
