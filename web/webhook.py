from fastapi import FastAPI, Request, HTTPException
import json
import logging

from aiogram import Bot, Dispatcher

from bot.sessions import registry
from config import settings

# Настройка логирования
logger = logging.getLogger(__name__)

# Глобальные переменные
bot: Bot = None
dp: Dispatcher = None


# --- Установка экземпляров ---
def set_webhook_bot(bot_instance):
    global bot
    bot = bot_instance
    logger.info("Экземпляр бота успешно установлен")


def set_webhook_dispatcher(dispatcher):
    global dp
    dp = dispatcher
    logger.info("Dispatcher успешно установлен")


def session_snapshot(chat_id: int) -> dict:
    """Баланс, состояние и статистика сессии чата"""
    session = registry.find(chat_id)
    if session is None:
        raise KeyError(chat_id)
    game = session.game
    return {
        "chat_id": chat_id,
        "state": game.state.value,
        "difficulty": game.difficulty.value,
        "balance": round(game.balance, 2),
        "bet_amount": game.bet_amount,
        "darts_per_round": game.darts_per_round,
        "auto_throwing": session.autoplay.active,
        "remaining_rounds": session.autoplay.remaining_rounds,
        "history": [mult for mult, _ in game.result_history],
        "stats": game.stats.to_dict(),
    }


# --- Регистрация эндпоинтов ---
def setup_webhooks(app: FastAPI):
    @app.post(settings.WEBHOOK_PATH)
    async def telegram_webhook(request: Request):
        body = await request.body()
        logger.debug(f"Получен запрос webhook: {body.decode('utf-8', errors='replace')}")
        try:
            data = json.loads(body)
        except ValueError as e:
            logger.error(f"Ошибка декодирования JSON: {e}")
            raise HTTPException(status_code=400, detail="Invalid JSON")

        if bot and dp:
            await dp.feed_raw_update(bot, data)
        else:
            logger.warning("Обновление не обработано: bot или dp не инициализированы")
        return {"ok": True}

    @app.get("/sessions/{chat_id}/stats")
    async def session_stats(chat_id: int):
        try:
            return session_snapshot(chat_id)
        except KeyError:
            raise HTTPException(status_code=404, detail="Session not found")

    logger.info("Webhook endpoints registered")
