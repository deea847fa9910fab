"""
stress.py

Метрики якості розміщення (stress).

    raw_stress    = Σ_{i<j} (D_ij - d_ij)^2
    sammon_stress = (1 / Σ D_ij) * Σ_{i<j, D_ij>0} (D_ij - d_ij)^2 / D_ij

де D_ij - вихідні відстані, d_ij - відстані між точками на площині.
Використовуються для трасування прогресу та порівняння запусків;
на крок оптимізатора не впливають.
"""

from __future__ import annotations

import numpy as np

from .distances import ArrayLike, DistanceMatrix, pairwise_distances
from .errors import InvalidInputError


def _residuals(distances: DistanceMatrix, positions: ArrayLike) -> np.ndarray:
    pts = np.asarray(positions, dtype=float)
    if pts.ndim != 2 or pts.shape[0] != distances.n:
        raise InvalidInputError(
            f"Очікувалось {distances.n} точок, отримано масив форми {pts.shape}"
        )
    return distances.values - pairwise_distances(pts)


def raw_stress(distances: DistanceMatrix, positions: ArrayLike) -> float:
    """Сума квадратів похибок відстаней по всіх парах."""
    residuals = _residuals(distances, positions)
    return float(np.sum(residuals * residuals))


def sammon_stress(distances: DistanceMatrix, positions: ArrayLike) -> float:
    """
    Канонічний нормований stress Саммона.

    Пари з D_ij = 0 пропускаються (ділення на нуль); якщо всі відстані
    нульові, повертається 0.0.
    """
    residuals = _residuals(distances, positions)
    target = distances.values
    total = float(target.sum())
    if total == 0.0:
        return 0.0

    mask = target > 0.0
    return float(np.sum(residuals[mask] ** 2 / target[mask]) / total)


__all__ = [
    "raw_stress",
    "sammon_stress",
]
