import logging
from logging.handlers import RotatingFileHandler
import sys

from config import settings

def setup_logger(log_file: str = None):
    """Настройка логирования"""

    # Формат логов
    formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    logger = logging.getLogger()
    # Повторный вызов не должен дублировать handlers
    if getattr(logger, "_darts_configured", False):
        return logger

    # Консольный handler
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)

    # Файловый handler (автоматическая ротация)
    file_handler = RotatingFileHandler(
        log_file or settings.LOG_FILE,
        maxBytes=10 * 1024 * 1024,  # 10 MB
        backupCount=5,
        encoding="utf-8"
    )
    file_handler.setFormatter(formatter)

    # Корневой logger
    logger.setLevel(logging.DEBUG if settings.debug else logging.INFO)
    logger.addHandler(console_handler)
    logger.addHandler(file_handler)
    logger._darts_configured = True

    # aiogram очень многословен на DEBUG
    logging.getLogger("aiogram.event").setLevel(logging.WARNING)

    return logger
