from pydantic_settings import BaseSettings
from typing import Optional

class Settings(BaseSettings):
    # Telegram Bot
    BOT_TOKEN: Optional[str] = None

    # Debug mode
    debug: Optional[bool] = False

    # Webhook
    WEBHOOK_URL: str = "https://localhost:8443"
    WEBHOOK_PORT: int = 8000
    WEBHOOK_PATH: str = "/webhook-secret-path"

    # Logging
    LOG_FILE: str = "darts_bot.log"

    # Wallet / table defaults
    STARTING_BALANCE: float = 1000.0
    DEFAULT_BET: float = 10.0
    MIN_BET: float = 0.1
    DEFAULT_DIFFICULTY: str = "easy"
    MAX_DARTS_PER_ROUND: int = 10

    # Board display
    MAX_VISIBLE_DARTS: int = 10
    RESULT_HISTORY_SIZE: int = 4

    # Outcome source: "local" (simulated) or "remote" (oracle over HTTP)
    OUTCOME_SOURCE: str = "local"
    OUTCOME_DELAY: float = 0.5
    ORACLE_URL: Optional[str] = None
    ORACLE_TOKEN: Optional[str] = None

    # Pacing (seconds)
    FIRST_DART_DELAY: float = 0.15
    DART_GAP: float = 0.12
    DART_GAP_FAST: float = 0.08
    FINALIZE_DELAY: float = 0.2
    DART_THROW_DURATION: float = 0.8
    AUTO_PLAY_DELAY: float = 0.5

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"

settings = Settings()

# Экспортируем для обратной совместимости
BOT_TOKEN = settings.BOT_TOKEN
WEBHOOK_URL = settings.WEBHOOK_URL
WEBHOOK_PATH = settings.WEBHOOK_PATH
