"""
Раунд дартс: idle → throwing → result → idle

Вся работа идёт в одном цикле событий asyncio. Раунд приостанавливается
только в двух местах: ожидание исходов от источника и ожидание анимации
каждого дротика. Каждое отложенное продолжение проверяет, жив ли ещё
раунд (номер последовательности), поэтому reset/play_again безопасно
отменяют всё, что уже запланировано.
"""

import asyncio
import enum
import logging
from collections import deque
from dataclasses import dataclass, field
from typing import Callable, Deque, List, Optional, Sequence, Tuple

from .animation import DartAnimator, InstantAnimator, PendingThrow
from .board import Difficulty, Zone, to_difficulty
from .buffers import RingBuffer
from .outcomes import OutcomeRequest, OutcomeSource, OutcomeSourceError
from .resolver import DartMarker, DartResult, OutcomeResolver, ResolvedDart
from .segments import Segment, get_segments

logger = logging.getLogger(__name__)


class GameState(enum.Enum):
    IDLE = "idle"
    THROWING = "throwing"
    RESULT = "result"


@dataclass
class SessionStats:
    total_rounds: int = 0
    wins: int = 0
    losses: int = 0
    net_pnl: float = 0.0
    biggest_win: float = 0.0
    biggest_multiplier: float = 0.0

    def record_round(self, total_bet: float, payout: float, best_multiplier: float):
        """Единственное место, где меняется статистика"""
        profit = payout - total_bet
        self.total_rounds += 1
        if payout >= total_bet:
            self.wins += 1
        else:
            self.losses += 1
        self.net_pnl += profit
        if profit > 0:
            self.biggest_win = max(self.biggest_win, profit)
        self.biggest_multiplier = max(self.biggest_multiplier, best_multiplier)

    def to_dict(self) -> dict:
        return {
            "total_rounds": self.total_rounds,
            "wins": self.wins,
            "losses": self.losses,
            "net_pnl": round(self.net_pnl, 2),
            "biggest_win": round(self.biggest_win, 2),
            "biggest_multiplier": self.biggest_multiplier,
        }


@dataclass(frozen=True)
class RoundSummary:
    """Итог завершённого раунда"""
    difficulty: Difficulty
    total_bet: float
    payout: float
    is_win: bool
    darts: Tuple[DartResult, ...]

    @property
    def profit(self) -> float:
        return self.payout - self.total_bet

    @property
    def best_multiplier(self) -> float:
        return max((d.multiplier for d in self.darts), default=0.0)


@dataclass
class RoundTimings:
    """Паузы между шагами раунда (секунды)"""
    first_dart_delay: float = 0.15
    dart_gap: float = 0.12
    dart_gap_fast: float = 0.08    # когда в очереди больше 5 дротиков
    finalize_delay: float = 0.2


@dataclass
class _Round:
    difficulty: Difficulty
    total_bet: float
    darts_count: int
    request: OutcomeRequest
    queue: Deque[PendingThrow] = field(default_factory=deque)
    placed: List[DartResult] = field(default_factory=list)


StateListener = Callable[["DartsGame", GameState], None]


class DartsGame:
    """Машина состояний раунда и сессии одного игрока"""

    def __init__(
        self,
        outcome_source: OutcomeSource,
        animator: DartAnimator = None,
        balance: float = 1000.0,
        difficulty=Difficulty.EASY,
        bet_amount: float = 10.0,
        darts_per_round: int = 1,
        max_darts_per_round: int = 10,
        max_visible_darts: int = 10,
        history_size: int = 4,
        resolver: OutcomeResolver = None,
        timings: RoundTimings = None,
    ):
        self.outcome_source = outcome_source
        self.animator = animator or InstantAnimator()
        self.resolver = resolver or OutcomeResolver()
        self.timings = timings or RoundTimings()
        self.max_darts_per_round = max(1, max_darts_per_round)

        self.balance = balance
        self.difficulty = to_difficulty(difficulty)
        self.bet_amount = bet_amount
        self.darts_per_round = 1
        self.set_darts_per_round(darts_per_round)

        self.state = GameState.IDLE
        self.stats = SessionStats()
        self.segments: Tuple[Segment, ...] = get_segments(self.difficulty)
        self.markers: RingBuffer[DartMarker] = RingBuffer(max_visible_darts)
        self.history: RingBuffer[Tuple[float, str]] = RingBuffer(history_size)

        self.last_result: Optional[DartResult] = None
        self.last_round: Optional[RoundSummary] = None
        self.pending_throw: Optional[PendingThrow] = None
        self.current_dart_index = 0
        self.total_darts_in_round = 0
        self.round_payout = 0.0

        self._round: Optional[_Round] = None
        self._sequence = 0
        self._live = False
        self._timer: Optional[asyncio.TimerHandle] = None
        self._outcome_task: Optional[asyncio.Task] = None
        self._listeners: List[StateListener] = []

    # ==================== НАСТРОЙКИ ====================

    def set_difficulty(self, difficulty):
        difficulty = to_difficulty(difficulty)
        if self.state is GameState.THROWING:
            logger.info("Смена сложности во время броска проигнорирована")
            return
        self.difficulty = difficulty
        self.segments = get_segments(difficulty)
        self.markers.clear()
        self.history.clear()

    def set_bet_amount(self, amount: float):
        self.bet_amount = float(amount)

    def set_darts_per_round(self, count: int):
        self.darts_per_round = min(max(int(count), 1), self.max_darts_per_round)

    # ==================== ПОДПИСКИ ====================

    def subscribe(self, listener: StateListener):
        self._listeners.append(listener)

    def unsubscribe(self, listener: StateListener):
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _set_state(self, state: GameState):
        self.state = state
        for listener in list(self._listeners):
            listener(self, state)

    @property
    def is_throwing(self) -> bool:
        return self.state is GameState.THROWING

    @property
    def visible_markers(self) -> List[DartMarker]:
        return list(self.markers)

    @property
    def result_history(self) -> List[Tuple[float, str]]:
        """(множитель, цвет), новые первыми"""
        return self.history.newest_first()

    # ==================== РАУНД ====================

    def play(self) -> bool:
        """Начать раунд. False, если ставка отклонена или раунд уже идёт"""
        if self.state is not GameState.IDLE:
            return False
        total_bet = self.bet_amount
        if total_bet <= 0 or total_bet > self.balance:
            logger.info(f"Ставка отклонена: bet={total_bet}, balance={self.balance}")
            return False

        # Вся ставка списывается сразу
        self.balance -= total_bet
        self.round_payout = 0.0
        self.current_dart_index = 0
        self.total_darts_in_round = self.darts_per_round
        self.last_result = None

        self._sequence += 1
        self._live = True
        request = OutcomeRequest(self.difficulty, self.darts_per_round, self._sequence)
        self._round = _Round(self.difficulty, total_bet, self.darts_per_round, request)

        logger.info(
            f"Раунд #{self._sequence}: ставка={total_bet}, дротиков={self.darts_per_round}, "
            f"сложность={self.difficulty.value}"
        )
        self._outcome_task = asyncio.get_running_loop().create_task(self._await_outcomes(request))
        self._set_state(GameState.THROWING)
        return True

    async def _await_outcomes(self, request: OutcomeRequest):
        try:
            codes = await self.outcome_source.fetch(request)
            self.deliver_outcomes(request, codes)
        except OutcomeSourceError as e:
            logger.error(f"Не удалось получить исходы для раунда #{request.sequence}: {e}", exc_info=True)
        except ValueError as e:
            # неизвестный код зоны или неверное число исходов
            logger.error(f"Некорректные исходы для раунда #{request.sequence}: {e}", exc_info=True)

    def _is_live(self, sequence: int) -> bool:
        return self._live and sequence == self._sequence

    def deliver_outcomes(self, request: OutcomeRequest, codes: Sequence) -> bool:
        """Исходы пришли: превращаем их в очередь анимаций"""
        if not self._is_live(request.sequence) or self._round is None or self._round.request != request:
            logger.info(f"Устаревший ответ для раунда #{request.sequence} отброшен")
            return False

        zones = [Zone.from_code(code) for code in codes]
        if len(zones) != self._round.darts_count:
            raise ValueError(f"Expected {self._round.darts_count} outcomes, got {len(zones)}")

        bet_per_dart = self._round.total_bet / len(zones)
        resolved = self.resolver.resolve_many(zones, bet_per_dart, self._round.difficulty)
        self._round.queue.extend(self._to_pending(resolved))

        self._schedule(self.timings.first_dart_delay, self._show_next)
        return True

    def _to_pending(self, resolved: List[ResolvedDart]) -> List[PendingThrow]:
        pending = []
        for i, dart in enumerate(resolved):
            x, y = self.resolver.screen_position(dart.marker)
            pending.append(PendingThrow(
                target_x=x,
                target_y=y,
                color=dart.result.color,
                dart=dart,
                dart_index=i,
                total_darts=len(resolved),
            ))
        return pending

    def _schedule(self, delay: float, step: Callable[[], None]):
        sequence = self._sequence

        def run():
            self._timer = None
            if not self._is_live(sequence):
                return
            step()

        self._timer = asyncio.get_running_loop().call_later(delay, run)

    def _show_next(self):
        pending = self._round.queue[0]
        self.pending_throw = pending
        self.animator.present(pending, self._completion(self._sequence, pending.dart_index))

    def _completion(self, sequence: int, dart_index: int) -> Callable[[], None]:
        """Одноразовый колбэк окончания анимации"""
        fired = False

        def done():
            nonlocal fired
            if fired:
                logger.debug(f"Повторное подтверждение дротика {dart_index} проигнорировано")
                return
            fired = True
            if not self._is_live(sequence) or dart_index != self.current_dart_index:
                return
            self._on_throw_complete()

        return done

    def _on_throw_complete(self):
        pending = self._round.queue.popleft()
        result = pending.dart.result

        self.markers.append(pending.dart.marker)
        self.round_payout += result.payout
        self.history.append((result.multiplier, result.color))
        self.last_result = result
        self._round.placed.append(result)
        self.current_dart_index = pending.dart_index + 1
        self.pending_throw = None

        if self._round.queue:
            gap = self.timings.dart_gap_fast if len(self._round.queue) > 5 else self.timings.dart_gap
            self._schedule(gap, self._show_next)
        else:
            self._schedule(self.timings.finalize_delay, self._finalize)

    def _finalize(self):
        current = self._round
        payout = self.round_payout

        self.balance += payout
        summary = RoundSummary(
            difficulty=current.difficulty,
            total_bet=current.total_bet,
            payout=payout,
            is_win=payout >= current.total_bet,
            darts=tuple(current.placed),
        )
        self.stats.record_round(current.total_bet, payout, summary.best_multiplier)
        self.last_round = summary
        self._round = None
        self._live = False

        logger.info(
            f"Раунд #{self._sequence} завершён: ставка={current.total_bet}, выплата={payout:.2f}, "
            f"{'выигрыш' if summary.is_win else 'проигрыш'}"
        )
        self._set_state(GameState.RESULT)

    # ==================== ОТМЕНА ====================

    def _invalidate(self):
        """Все отложенные продолжения текущего раунда становятся no-op"""
        self._live = False
        self._sequence += 1
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        if self._outcome_task is not None and not self._outcome_task.done():
            self._outcome_task.cancel()
        self._outcome_task = None
        if self._round is not None:
            logger.info(f"Раунд отменён, ставка {self._round.total_bet} не возвращается")
        self._round = None
        self.pending_throw = None

    def reset(self):
        self._invalidate()
        self.last_result = None
        self.markers.clear()
        self.history.clear()
        self.current_dart_index = 0
        self.total_darts_in_round = 0
        self._set_state(GameState.IDLE)

    def play_again(self):
        self._invalidate()
        self.last_result = None
        self.current_dart_index = 0
        self.total_darts_in_round = 0
        self._set_state(GameState.IDLE)
