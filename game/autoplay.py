import asyncio
import logging
from typing import Callable, List, Optional

from .engine import DartsGame, GameState

logger = logging.getLogger(__name__)

AUTO_THROW_OPTIONS = (10, 25, 50)


class AutoThrower:
    """
    Автоигра поверх DartsGame: после каждого завершённого раунда
    запускает следующий, пока не кончатся раунды или баланс.
    Результаты бросков не смотрит - только состояние и баланс.
    """

    def __init__(self, game: DartsGame, delay: float = 0.5):
        self.game = game
        self.delay = delay
        self.active = False
        self.paused = False
        self.total_rounds = 0
        self.remaining_rounds = 0
        # текущий раунд запущен автоигрой
        self.round_is_automatic = False
        self._driving = False
        self._timer: Optional[asyncio.TimerHandle] = None
        self._finish_listeners: List[Callable[["AutoThrower"], None]] = []
        game.subscribe(self._on_state_change)

    def on_finish(self, listener: Callable[["AutoThrower"], None]):
        """Вызывается, когда автоигра закончилась сама (раунды или баланс)"""
        self._finish_listeners.append(listener)

    def start(self, count: int):
        if count < 1:
            return
        self._cancel_timer()
        self.active = True
        self.total_rounds = count
        self.remaining_rounds = count
        logger.info(f"Автоигра: {count} раундов")
        if not self._throw() and not self.game.is_throwing:
            logger.info("Автоигра не стартовала: ставка отклонена")
            self._finish()

    def stop(self):
        self._halt()
        self.round_is_automatic = False

    def _halt(self):
        self.active = False
        self.total_rounds = 0
        self.remaining_rounds = 0
        self._cancel_timer()

    def pause(self):
        self.paused = True
        self._cancel_timer()

    def resume(self):
        self.paused = False
        if self.active and self.game.state is GameState.RESULT:
            self._advance()

    def _throw(self) -> bool:
        self._driving = True
        try:
            if self.game.state is GameState.RESULT:
                self.game.play_again()
            return self.game.play()
        finally:
            self._driving = False

    def _on_state_change(self, game: DartsGame, state: GameState):
        if state is GameState.THROWING:
            self.round_is_automatic = self._driving
        elif state is GameState.IDLE:
            # сброс игры снаружи автоигры
            if self.active and not self._driving:
                logger.info("Автоигра остановлена: игра сброшена")
                self.stop()
        elif state is GameState.RESULT and self.active and not self.paused:
            self._advance()

    def _advance(self):
        if self.remaining_rounds <= 1 or self.game.balance < self.game.bet_amount:
            self._finish()
            return
        self._cancel_timer()
        self._timer = asyncio.get_running_loop().call_later(self.delay, self._next_round)

    def _next_round(self):
        self._timer = None
        if not self.active or self.paused:
            return
        self.remaining_rounds -= 1
        if not self._throw():
            self._finish()

    def _finish(self):
        logger.info(f"Автоигра завершена (осталось раундов: {self.remaining_rounds}, баланс: {self.game.balance:.2f})")
        self._halt()
        for listener in list(self._finish_listeners):
            listener(self)

    def _cancel_timer(self):
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
