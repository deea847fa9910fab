"""
errors.py

Винятки, якими ядро проєктора повідомляє про некоректні виклики.

Таксономія:
    ProjectionError      - базовий клас для всіх помилок пакета;
    InvalidInputError    - некоректні вхідні дані або параметри
                           (рвані записи, max_iterations <= 0,
                           decay поза (0, 1], старт без даних тощо).

Числові виродження (нульові відстані, нульовий діапазон сум) помилками
НЕ є - вони обробляються явним clamp/fallback у відповідних модулях.
"""

from __future__ import annotations


class ProjectionError(Exception):
    """Базовий виняток пакета sammonAPP."""


class InvalidInputError(ProjectionError, ValueError):
    """
    Некоректні вхідні дані або параметри виклику.

    Піднімається синхронно на межі виклику; стан об'єкта, що його підняв,
    лишається незмінним, тож виклик можна повторити з іншими аргументами.
    """


__all__ = [
    "ProjectionError",
    "InvalidInputError",
]
