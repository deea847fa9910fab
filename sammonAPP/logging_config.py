"""
logging_config.py

Налаштування логера пакета "sammonAPP".
"""

from __future__ import annotations

import logging
import sys
from typing import Optional, Union


def setup_logging(level: Union[int, str] = logging.INFO, log_file: Optional[str] = None) -> logging.Logger:
    """
    Налаштувати логер простору імен 'sammonAPP'.

    Args:
        level: рівень логування (logging.DEBUG, "INFO", ...)
        log_file: необов'язковий шлях до файлу логу.
    """
    if isinstance(level, str):
        level = getattr(logging, level.upper())

    logger = logging.getLogger("sammonAPP")
    logger.setLevel(level)

    # Прибираємо старі обробники, щоб не дублювати рядки при повторному виклику
    if logger.hasHandlers():
        logger.handlers.clear()

    formatter = logging.Formatter(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%H:%M:%S",
    )

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file, mode="w", encoding="utf-8")
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    logger.debug("Логування налаштовано")
    return logger


__all__ = ["setup_logging"]
