import asyncio
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable

from .resolver import ResolvedDart


@dataclass(frozen=True)
class PendingThrow:
    """Бросок, ожидающий анимации"""
    target_x: float     # % окна (0-100)
    target_y: float
    color: str
    dart: ResolvedDart
    dart_index: int
    total_darts: int


class DartAnimator(ABC):
    """Внешний отрисовщик бросков"""

    @abstractmethod
    def present(self, pending: PendingThrow, done: Callable[[], None]) -> None:
        """Показать бросок. done() вызывается ровно один раз по окончании анимации"""
        ...


class InstantAnimator(DartAnimator):
    """Без анимации: бросок подтверждается на следующей итерации цикла событий"""

    def present(self, pending: PendingThrow, done: Callable[[], None]) -> None:
        asyncio.get_running_loop().call_soon(done)
