import asyncio
import logging
from typing import Callable, Optional, Set

from aiogram import Bot
from aiogram.exceptions import TelegramAPIError

from game.animation import DartAnimator, PendingThrow
from .texts import dart_text

logger = logging.getLogger(__name__)


class TelegramDartAnimator(DartAnimator):
    """
    Показывает каждый дротик в чате, редактируя одно сообщение,
    и через throw_duration подтверждает движку, что анимация окончена.
    """

    def __init__(self, bot: Bot, chat_id: int, throw_duration: float = 0.8):
        self.bot = bot
        self.chat_id = chat_id
        self.throw_duration = throw_duration
        self.message_id: Optional[int] = None
        self._tasks: Set[asyncio.Task] = set()

    def new_message(self):
        """Следующий бросок начнёт новое сообщение"""
        self.message_id = None

    def present(self, pending: PendingThrow, done: Callable[[], None]) -> None:
        task = asyncio.get_running_loop().create_task(self._present(pending, done))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _present(self, pending: PendingThrow, done: Callable[[], None]):
        text = dart_text(
            pending.dart.result,
            pending.dart_index,
            pending.total_darts,
            pending.target_x,
            pending.target_y,
        )
        try:
            await self._show(text)
        except TelegramAPIError as e:
            logger.error(f"Ошибка при показе броска в чате {self.chat_id}: {e}")
        await asyncio.sleep(self.throw_duration)
        done()

    async def _show(self, text: str):
        if self.message_id is not None:
            await self.bot.edit_message_text(
                text=text,
                chat_id=self.chat_id,
                message_id=self.message_id,
                parse_mode="HTML"
            )
            return
        message = await self.bot.send_message(self.chat_id, text, parse_mode="HTML")
        self.message_id = message.message_id
