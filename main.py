import asyncio
import logging
from contextlib import asynccontextmanager

import uvicorn
from aiogram import Bot, Dispatcher
from aiogram.client.default import DefaultBotProperties
from aiogram.enums import ParseMode
from aiogram.types import BotCommand
from fastapi import FastAPI

from bot import handlers
from bot.sessions import registry
from config import settings, BOT_TOKEN, WEBHOOK_URL, WEBHOOK_PATH
from utils.logger import setup_logger
from web.webhook import setup_webhooks, set_webhook_bot, set_webhook_dispatcher

setup_logger()
logger = logging.getLogger(__name__)

BOT_COMMANDS = [
    BotCommand(command="start", description="Начать игру"),
    BotCommand(command="play", description="Панель броска"),
    BotCommand(command="stats", description="Статистика сессии"),
    BotCommand(command="help", description="Правила и множители"),
]


async def start_bot() -> Dispatcher:
    """Бот, диспетчер и Telegram webhook"""
    bot = Bot(token=BOT_TOKEN, default=DefaultBotProperties(parse_mode=ParseMode.HTML))
    dp = Dispatcher()
    dp.include_router(handlers.router)

    handlers.set_bot(bot)
    set_webhook_bot(bot)
    set_webhook_dispatcher(dp)

    await bot.set_my_commands(BOT_COMMANDS)
    webhook_url = f"{WEBHOOK_URL}{WEBHOOK_PATH}"
    await bot.set_webhook(url=webhook_url, drop_pending_updates=True)
    logger.info(f"Telegram webhook установлен: {webhook_url}")
    return dp


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Запуск и остановка бота вместе с сервером"""
    if not BOT_TOKEN:
        raise RuntimeError("BOT_TOKEN is not set")

    logger.info(f"Источник исходов: {settings.OUTCOME_SOURCE}, сложность по умолчанию: {settings.DEFAULT_DIFFICULTY}")

    try:
        await start_bot()
        yield
    except Exception as e:
        logger.error(f"Ошибка при инициализации: {e}")
        raise
    finally:
        # Незавершённые раунды и автоигры останавливаются, ставки не возвращаются
        registry.shutdown()
        if handlers.bot_instance:
            await handlers.bot_instance.delete_webhook(drop_pending_updates=True)
            await handlers.bot_instance.session.close()
        logger.info("Бот остановлен")


app = FastAPI(title="Darts Arcade", lifespan=lifespan)
setup_webhooks(app)


async def main():
    config = uvicorn.Config(
        app,
        host="0.0.0.0",
        port=settings.WEBHOOK_PORT,
        log_level="debug" if settings.debug else "info"
    )
    await uvicorn.Server(config).serve()


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        logger.info("Остановка сервера...")
