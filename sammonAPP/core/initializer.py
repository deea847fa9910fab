"""
initializer.py

Початкове розміщення точок на площині.

Кожна координата кожної точки незалежно береться з рівномірного розподілу
на [0, sqrt(maxDist)], де maxDist - найбільша вихідна відстань.
Так початковий розкид має масштаб, близький до відстаней, які треба
відтворити, і перший прохід не дає надто великих зсувів.

Джерело випадковості передається явно (numpy.random.Generator або seed),
глобальний стан генератора не використовується.
"""

from __future__ import annotations

from math import sqrt
from typing import Union

import numpy as np

from .distances import DistanceMatrix

RandomSource = Union[None, int, np.random.SeedSequence, np.random.BitGenerator, np.random.Generator]


def make_rng(rng: RandomSource = None) -> np.random.Generator:
    """Привести seed / Generator до numpy.random.Generator."""
    return np.random.default_rng(rng)


def initialize_positions(
    distances: DistanceMatrix,
    rng: RandomSource = None,
) -> np.ndarray:
    """
    Повернути масив (N, 2) з початковими позиціями.

    Координати тягнуться точка за точкою: спершу x, потім y.
    Для N <= 1 пар немає, maxDist = 0, і всі точки стоять у (0, 0).
    """
    generator = make_rng(rng)
    upper = sqrt(distances.max())
    return generator.uniform(0.0, upper, size=(distances.n, 2))


__all__ = [
    "RandomSource",
    "initialize_positions",
    "make_rng",
]
