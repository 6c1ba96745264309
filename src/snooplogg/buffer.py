"""
Fixed-capacity circular history buffer.

Stores the most recent N values. Pushing into a full buffer overwrites the
oldest value. Iteration always runs oldest to newest, wherever the head
currently sits in the backing list.
"""

import math
from typing import Generic, Iterator, Optional, TypeVar

T = TypeVar("T")


def check_size(value, what: str) -> int:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise TypeError(f"Expected {what} to be a number")
    if math.isnan(value) or value < 0:
        raise ValueError(f"Expected {what} to be zero or greater")
    if math.isinf(value):
        raise ValueError(f"Expected {what} to be finite")
    return int(value)


class HistoryBuffer(Generic[T]):
    """
    Ring buffer with O(1) push and live resize.

    Usage:
        buf = HistoryBuffer(3)
        for i in range(5):
            buf.push(i)
        list(buf)        # [2, 3, 4]
        buf.max_size = 2
        list(buf)        # [3, 4]
    """

    def __init__(self, max_size: int = 10):
        size = check_size(max_size, "max size")
        self._buffer: list[Optional[T]] = [None] * size
        self._head = 0
        self._max_size = size
        self._size = 0

    @property
    def head(self) -> int:
        """Index of the newest value in the backing list."""
        return self._head

    @property
    def max_size(self) -> int:
        return self._max_size

    @max_size.setter
    def max_size(self, value: int) -> None:
        self.resize(value)

    @property
    def size(self) -> int:
        return self._size

    def __len__(self) -> int:
        return self._size

    def resize(self, max_size: int) -> "HistoryBuffer[T]":
        """
        Change capacity. Existing values are replayed into a fresh buffer,
        so shrinking drops the oldest excess and growing keeps everything.
        Nothing is touched if validation fails.
        """
        size = check_size(max_size, "new max size")
        if size == self._max_size:
            return self

        tmp: HistoryBuffer[T] = HistoryBuffer(size)
        for value in self:
            tmp.push(value)

        self._buffer = tmp._buffer
        self._head = tmp._head
        self._max_size = tmp._max_size
        self._size = tmp._size
        return self

    def push(self, value: T) -> "HistoryBuffer[T]":
        if self._max_size:
            if self._size > 0:
                self._head = (self._head + 1) % self._max_size
            self._buffer[self._head] = value
            self._size = min(self._size + 1, self._max_size)
        return self

    def clear(self) -> "HistoryBuffer[T]":
        self._buffer = [None] * self._max_size
        self._head = 0
        self._size = 0
        return self

    def __iter__(self) -> Iterator[T]:
        start = self._head - (self._size - 1)
        for i in range(self._size):
            yield self._buffer[(start + i) % self._max_size]

    def __repr__(self) -> str:
        return f"HistoryBuffer(size={self._size}, max_size={self._max_size})"
