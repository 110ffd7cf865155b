from typing import Generic, Iterator, List, Optional, TypeVar

T = TypeVar("T")


class RingBuffer(Generic[T]):
    """Буфер фиксированной ёмкости: при переполнении вытесняется самый старый элемент"""

    def __init__(self, capacity: int):
        if capacity < 1:
            raise ValueError("Capacity must be at least 1")
        self.capacity = capacity
        self._items: List[Optional[T]] = [None] * capacity
        self._start = 0
        self._size = 0

    def append(self, item: T):
        end = (self._start + self._size) % self.capacity
        self._items[end] = item
        if self._size < self.capacity:
            self._size += 1
        else:
            self._start = (self._start + 1) % self.capacity

    def clear(self):
        self._items = [None] * self.capacity
        self._start = 0
        self._size = 0

    def __len__(self) -> int:
        return self._size

    def __iter__(self) -> Iterator[T]:
        """От старых к новым"""
        for i in range(self._size):
            yield self._items[(self._start + i) % self.capacity]

    def newest_first(self) -> List[T]:
        return list(self)[::-1]

    @property
    def latest(self) -> Optional[T]:
        if not self._size:
            return None
        return self._items[(self._start + self._size - 1) % self.capacity]
