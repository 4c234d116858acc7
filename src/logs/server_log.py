import logging
import sys
from pathlib import Path

from src.core import get_settings


def get_log_dir() -> Path:
    """Directory for log files: LOG_DIR setting or the logs package itself"""
    configured = get_settings().LOG_DIR
    log_dir = Path(configured) if configured else Path(__file__).parent
    # Создаем директорию для логов, если её нет
    log_dir.mkdir(parents=True, exist_ok=True)
    return log_dir


# Настраиваем логирование в файл и консоль
def setup_logging():
    # Создаем логгер
    logger = logging.getLogger("api_logger")
    logger.setLevel(logging.INFO)
    
    # Повторный импорт не должен дублировать обработчики
    if logger.handlers:
        return logger
    
    # Форматтер для логов
    formatter = logging.Formatter('%(asctime)s - %(levelname)s - %(message)s')
    
    # Обработчик для вывода в файл
    file_handler = logging.FileHandler(get_log_dir() / "api_requests.log", encoding='utf-8')
    file_handler.setFormatter(formatter)
    
    # Обработчик для вывода в консоль
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    
    # Добавляем обработчики к логгеру
    logger.addHandler(file_handler)
    logger.addHandler(console_handler)
    
    return logger

# Создаем экземпляр логгера
api_logger = setup_logging()
