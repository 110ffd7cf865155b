import logging
from typing import Callable, Dict, Optional

from config import settings
from game.autoplay import AutoThrower
from game.engine import DartsGame, RoundTimings
from game.outcomes import OutcomeSource, create_outcome_source
from .animator import TelegramDartAnimator

logger = logging.getLogger(__name__)


class ChatSession:
    """Игра, автоигра и отрисовщик одного чата"""

    def __init__(self, chat_id: int, game: DartsGame, autoplay: AutoThrower, animator: TelegramDartAnimator):
        self.chat_id = chat_id
        self.game = game
        self.autoplay = autoplay
        self.animator = animator


def build_outcome_source() -> OutcomeSource:
    return create_outcome_source(
        settings.OUTCOME_SOURCE,
        delay=settings.OUTCOME_DELAY,
        url=settings.ORACLE_URL,
        token=settings.ORACLE_TOKEN,
    )


class SessionRegistry:
    """Сессии в памяти процесса, по одной на чат"""

    def __init__(self):
        self.bot = None
        self.outcome_source: Optional[OutcomeSource] = None
        self._sessions: Dict[int, ChatSession] = {}
        self._on_create: Optional[Callable[[ChatSession], None]] = None

    def set_bot(self, bot):
        self.bot = bot

    def on_create(self, hook: Callable[[ChatSession], None]):
        self._on_create = hook

    def find(self, chat_id: int) -> Optional[ChatSession]:
        return self._sessions.get(chat_id)

    def get(self, chat_id: int) -> ChatSession:
        session = self._sessions.get(chat_id)
        if session is None:
            session = self._create(chat_id)
            self._sessions[chat_id] = session
        return session

    def _create(self, chat_id: int) -> ChatSession:
        if self.outcome_source is None:
            self.outcome_source = build_outcome_source()

        animator = TelegramDartAnimator(self.bot, chat_id, throw_duration=settings.DART_THROW_DURATION)
        game = DartsGame(
            self.outcome_source,
            animator=animator,
            balance=settings.STARTING_BALANCE,
            difficulty=settings.DEFAULT_DIFFICULTY,
            bet_amount=settings.DEFAULT_BET,
            max_darts_per_round=settings.MAX_DARTS_PER_ROUND,
            max_visible_darts=settings.MAX_VISIBLE_DARTS,
            history_size=settings.RESULT_HISTORY_SIZE,
            timings=RoundTimings(
                first_dart_delay=settings.FIRST_DART_DELAY,
                dart_gap=settings.DART_GAP,
                dart_gap_fast=settings.DART_GAP_FAST,
                finalize_delay=settings.FINALIZE_DELAY,
            ),
        )
        session = ChatSession(chat_id, game, AutoThrower(game, delay=settings.AUTO_PLAY_DELAY), animator)
        if self._on_create:
            self._on_create(session)
        logger.info(f"Новая сессия для чата {chat_id}")
        return session

    def shutdown(self):
        """Останавливает автоигры и незавершённые раунды всех чатов"""
        for session in self._sessions.values():
            session.autoplay.stop()
            if session.game.is_throwing:
                session.game.reset()
        logger.info(f"Сессий остановлено: {len(self._sessions)}")

    def __len__(self) -> int:
        return len(self._sessions)


registry = SessionRegistry()
