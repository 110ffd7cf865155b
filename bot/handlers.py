from aiogram import Router, F
from aiogram.filters import CommandStart, Command
from aiogram.types import Message, CallbackQuery
from aiogram.fsm.context import FSMContext
from aiogram.exceptions import TelegramAPIError
import asyncio
import logging

from .keyboards import *
from .states import SetupFlow
from .sessions import registry, ChatSession
from .texts import panel_text, round_text, stats_text, help_text
from config import settings
from game.autoplay import AutoThrower
from game.engine import DartsGame, GameState

router = Router()
bot_instance = None
logger = logging.getLogger(__name__)
_background_tasks = set()


def set_bot(bot):
    global bot_instance
    bot_instance = bot
    registry.set_bot(bot)


def _spawn(coro):
    task = asyncio.get_running_loop().create_task(coro)
    _background_tasks.add(task)
    task.add_done_callback(_background_tasks.discard)


async def _send(chat_id: int, text: str, reply_markup=None):
    try:
        await bot_instance.send_message(chat_id, text, reply_markup=reply_markup, parse_mode="HTML")
    except TelegramAPIError as e:
        logger.error(f"Ошибка отправки сообщения в чат {chat_id}: {e}")

# ==================== ПОДПИСКИ СЕССИИ ====================

def attach_session(session: ChatSession):
    """Сообщения об итогах раунда и автоигры"""

    def on_state(game: DartsGame, state: GameState):
        if state is not GameState.RESULT or game.last_round is None:
            return
        # Итоги раундов автоигры не присылаем, в конце придёт общий итог
        if session.autoplay.round_is_automatic:
            return
        _spawn(_send(session.chat_id, round_text(game.last_round, game), get_result_keyboard()))

    def on_auto_finish(autoplay: AutoThrower):
        game = autoplay.game
        text = "🔁 <b>Автоигра завершена</b>\n\n" + stats_text(game.stats, game.balance)
        _spawn(_send(session.chat_id, text, get_result_keyboard()))

    session.game.subscribe(on_state)
    session.autoplay.on_finish(on_auto_finish)


registry.on_create(attach_session)

# ==================== СТАРТ ====================

@router.message(CommandStart())
async def cmd_start(message: Message, state: FSMContext):
    await state.clear()
    session = registry.get(message.chat.id)
    await message.answer(
        f"👋 Привет, <b>{message.from_user.first_name or 'игрок'}</b>!\n\n"
        f"🎯 Бросай дротики и попадай в цветные сегменты.\n"
        f"💰 Стартовый баланс: <b>{session.game.balance:.2f}</b>",
        reply_markup=get_main_menu(),
        parse_mode="HTML"
    )


@router.message(F.text == "🎯 Играть")
@router.message(Command("play"))
async def show_panel(message: Message):
    session = registry.get(message.chat.id)
    await message.answer(
        panel_text(session.game),
        reply_markup=get_game_panel(session.autoplay.active),
        parse_mode="HTML"
    )


@router.message(F.text == "📊 Статистика")
@router.message(Command("stats"))
async def show_stats(message: Message):
    session = registry.get(message.chat.id)
    await message.answer(stats_text(session.game.stats, session.game.balance), parse_mode="HTML")


@router.message(F.text == "ℹ️ Помощь")
@router.message(Command("help"))
async def show_help(message: Message):
    await message.answer(help_text(), parse_mode="HTML")

# ==================== ПАНЕЛЬ ====================

async def _edit_panel(callback: CallbackQuery, session: ChatSession):
    try:
        await callback.message.edit_text(
            panel_text(session.game),
            reply_markup=get_game_panel(session.autoplay.active),
            parse_mode="HTML"
        )
    except TelegramAPIError as e:
        logger.error(f"Ошибка при редактировании панели: {e}")


@router.callback_query(F.data == "back_panel")
async def back_panel(callback: CallbackQuery, state: FSMContext):
    await state.clear()
    await _edit_panel(callback, registry.get(callback.message.chat.id))
    await callback.answer()

# ==================== БРОСОК ====================

def _reject_reason(game: DartsGame) -> str:
    if game.is_throwing:
        return "Дротики ещё летят"
    if game.bet_amount > game.balance:
        return "Недостаточно средств"
    return "Ставка отклонена"


@router.callback_query(F.data == "throw")
async def throw(callback: CallbackQuery):
    session = registry.get(callback.message.chat.id)
    game = session.game
    if game.state is GameState.RESULT:
        game.play_again()
    session.animator.new_message()
    if not game.play():
        await callback.answer(_reject_reason(game), show_alert=True)
        return
    await callback.answer("🎯 Бросок!")


@router.callback_query(F.data == "play_again")
async def play_again(callback: CallbackQuery):
    session = registry.get(callback.message.chat.id)
    session.game.play_again()
    session.animator.new_message()
    if not session.game.play():
        await callback.answer(_reject_reason(session.game), show_alert=True)
        return
    await callback.answer("🎯 Бросок!")


@router.callback_query(F.data == "reset")
async def reset(callback: CallbackQuery):
    session = registry.get(callback.message.chat.id)
    session.autoplay.stop()
    session.game.reset()
    session.animator.new_message()
    await _edit_panel(callback, session)
    await callback.answer("Игра сброшена")

# ==================== СЛОЖНОСТЬ ====================

@router.callback_query(F.data == "menu_difficulty")
async def menu_difficulty(callback: CallbackQuery):
    await callback.message.edit_text(
        "⚙️ <b>Выбери сложность</b>\n\nЧем сложнее, тем тоньше выигрышное кольцо и дороже bullseye.",
        reply_markup=get_difficulty_keyboard(),
        parse_mode="HTML"
    )
    await callback.answer()


@router.callback_query(F.data.startswith("difficulty_"))
async def set_difficulty(callback: CallbackQuery):
    session = registry.get(callback.message.chat.id)
    if session.game.is_throwing:
        await callback.answer("Дождись окончания раунда", show_alert=True)
        return
    session.game.set_difficulty(callback.data.replace("difficulty_", ""))
    await _edit_panel(callback, session)
    await callback.answer()

# ==================== СТАВКА ====================

@router.callback_query(F.data == "menu_bet")
async def menu_bet(callback: CallbackQuery):
    await callback.message.edit_text(
        "💵 <b>Сумма ставки за раунд</b>",
        reply_markup=get_amount_keyboard(),
        parse_mode="HTML"
    )
    await callback.answer()


@router.callback_query(F.data == "amount_custom")
async def amount_custom(callback: CallbackQuery, state: FSMContext):
    await state.set_state(SetupFlow.entering_amount)
    await callback.message.edit_text(
        f"✍️ Введи сумму ставки (минимум {settings.MIN_BET}):",
        reply_markup=get_cancel_keyboard()
    )
    await callback.answer()


@router.callback_query(F.data.startswith("amount_"))
async def set_amount(callback: CallbackQuery):
    session = registry.get(callback.message.chat.id)
    session.game.set_bet_amount(float(callback.data.replace("amount_", "")))
    await _edit_panel(callback, session)
    await callback.answer()


@router.message(SetupFlow.entering_amount)
async def process_custom_amount(message: Message, state: FSMContext):
    try:
        amount = float((message.text or "").replace(",", "."))
    except ValueError:
        await message.answer("❌ Введи число, например 12.5", reply_markup=get_cancel_keyboard())
        return

    if amount < settings.MIN_BET:
        await message.answer(f"❌ Минимальная ставка: {settings.MIN_BET}", reply_markup=get_cancel_keyboard())
        return

    session = registry.get(message.chat.id)
    session.game.set_bet_amount(amount)
    await state.clear()
    await message.answer(
        panel_text(session.game),
        reply_markup=get_game_panel(session.autoplay.active),
        parse_mode="HTML"
    )


@router.callback_query(F.data == "cancel")
async def cancel(callback: CallbackQuery, state: FSMContext):
    await state.clear()
    await _edit_panel(callback, registry.get(callback.message.chat.id))
    await callback.answer()

# ==================== ДРОТИКИ ====================

@router.callback_query(F.data == "menu_darts")
async def menu_darts(callback: CallbackQuery):
    await callback.message.edit_text(
        "🎯 <b>Сколько дротиков за раунд?</b>\n\nСтавка делится поровну между дротиками.",
        reply_markup=get_darts_keyboard(settings.MAX_DARTS_PER_ROUND),
        parse_mode="HTML"
    )
    await callback.answer()


@router.callback_query(F.data.startswith("darts_"))
async def set_darts(callback: CallbackQuery):
    session = registry.get(callback.message.chat.id)
    session.game.set_darts_per_round(int(callback.data.replace("darts_", "")))
    await _edit_panel(callback, session)
    await callback.answer()

# ==================== АВТОИГРА ====================

@router.callback_query(F.data == "menu_auto")
async def menu_auto(callback: CallbackQuery):
    await callback.message.edit_text(
        "🔁 <b>Автоигра</b>\n\nСколько раундов сыграть подряд?",
        reply_markup=get_auto_keyboard(),
        parse_mode="HTML"
    )
    await callback.answer()


@router.callback_query(F.data == "auto_stop")
async def auto_stop(callback: CallbackQuery):
    session = registry.get(callback.message.chat.id)
    session.autoplay.stop()
    await _edit_panel(callback, session)
    await callback.answer("Автоигра остановлена")


@router.callback_query(F.data.startswith("auto_"))
async def auto_start(callback: CallbackQuery):
    session = registry.get(callback.message.chat.id)
    count = int(callback.data.replace("auto_", ""))
    session.animator.new_message()
    session.autoplay.start(count)
    if not session.autoplay.active:
        await callback.answer(_reject_reason(session.game), show_alert=True)
        return
    await _edit_panel(callback, session)
    await callback.answer(f"🔁 Автоигра: {count} раундов")
