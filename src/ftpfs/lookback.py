from __future__ import annotations

from .constants import BUFFER_CAPACITY


class LookbackBuffer:
    """Fixed-capacity ring holding the most recently streamed bytes.

    The buffer always covers the contiguous byte range ``[start, end)`` of a
    remote file, where ``end`` is the offset the stream has reached and
    ``end - start <= capacity``. Appending past capacity evicts the oldest
    bytes and advances ``start``.
    """

    __slots__ = ("capacity", "start", "_data", "_head", "_length")

    def __init__(self, capacity: int = BUFFER_CAPACITY, start: int = 0):
        if capacity <= 0:
            raise ValueError(f"capacity must be positive, got {capacity}")
        self.capacity = capacity
        self._data = bytearray(capacity)
        self.reset(start)

    def __len__(self) -> int:
        return self._length

    def __contains__(self, offset: object) -> bool:
        return isinstance(offset, int) and self.start <= offset < self.end

    @property
    def end(self) -> int:
        return self.start + self._length

    def reset(self, start: int) -> None:
        if start < 0:
            raise ValueError(f"negative buffer start: {start}")
        self.start = start
        self._head = 0
        self._length = 0

    def append(self, data: bytes | bytearray | memoryview) -> None:
        n = len(data)
        if n == 0:
            return
        cap = self.capacity
        if n >= cap:
            self._data[:] = data[n - cap :]
            self.start = self.end + n - cap
            self._head = 0
            self._length = cap
            return

        tail = (self._head + self._length) % cap
        first = min(n, cap - tail)
        self._data[tail : tail + first] = data[:first]
        self._data[: n - first] = data[first:]

        self._length += n
        if self._length > cap:
            overflow = self._length - cap
            self._head = (self._head + overflow) % cap
            self.start += overflow
            self._length = cap

    def slice_from(self, offset: int, size: int) -> bytes:
        """Return up to ``size`` buffered bytes starting at file ``offset``."""
        if offset not in self:
            raise IndexError(f"offset {offset} outside buffered window [{self.start}, {self.end})")
        if size < 0:
            raise ValueError(f"negative size: {size}")
        count = min(size, self.end - offset)
        pos = (self._head + offset - self.start) % self.capacity
        first = min(count, self.capacity - pos)
        return bytes(self._data[pos : pos + first]) + bytes(self._data[: count - first])
