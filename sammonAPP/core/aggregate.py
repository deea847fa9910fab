"""
aggregate.py

Сумарна оцінка кожного запису для розфарбовування точок.

Для кожного запису рахується сума його D ознак, далі всі N сум
нормуються min-max у [0, 1]:
    norm_i = (sum_i - min) / (max - min)

Якщо всі суми однакові (max == min), кожен запис отримує 0.5.
Результат суто презентаційний і в оптимізатор не потрапляє.
"""

from __future__ import annotations

from typing import Any

import numpy as np

from .distances import as_record_table

# Значення для випадку нульового діапазону сум
FLAT_SCORE: float = 0.5


def normalize_aggregates(records: Any) -> np.ndarray:
    """Нормовані суми ознак, масив форми (N,) тільки для читання."""
    table = as_record_table(records)
    sums = table.sum(axis=1)

    if sums.size == 0:
        scores = np.zeros(0, dtype=float)
    else:
        lo = float(sums.min())
        span = float(sums.max()) - lo
        if span == 0.0:
            scores = np.full(sums.size, FLAT_SCORE, dtype=float)
        else:
            scores = (sums - lo) / span

    scores.setflags(write=False)
    return scores


__all__ = [
    "FLAT_SCORE",
    "normalize_aggregates",
]
