"""
iteration_result.py

Структура даних для представлення результатів окремих ітерацій
розміщення. Використовується як у движку, так і в хості (таблиця, кадри).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional

import numpy as np


@dataclass
class IterationResult:
    """
    Опис однієї ітерації процесу розміщення.

    Атрибути:
        index         - номер ітерації (0 - стан перед першим проходом)
        stress        - сирий stress після ітерації
        learning_rate - крок λ, з яким виконувався прохід
        step_norm     - норма зсуву позицій (для k=0 = 0.0)
        positions     - копія позицій (N, 2), якщо движок їх зберігає
        meta          - довільна додаткова інформація (pairs, clamped, ...)
    """
    index: int
    stress: float
    learning_rate: float
    step_norm: float
    positions: Optional[np.ndarray] = None
    meta: Dict[str, Any] = field(default_factory=dict)


__all__ = [
    "IterationResult",
]
