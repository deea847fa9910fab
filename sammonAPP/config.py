"""
config.py

Конфігурація запуску розміщення.

За замовчуванням: 5000 ітерацій, λ = 0.8, decay = 0.999;
"скинути параметри" повертає λ = 1.0, decay = 0.999.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from sammonAPP.core.optimizer_base import (
    DEFAULT_DECAY,
    DEFAULT_LEARNING_RATE,
    DEFAULT_MAX_ITERATIONS,
)
from sammonAPP.core.sammon import UPDATE_GAUSS_SEIDEL

DEFAULT_RESET_LEARNING_RATE: float = 1.0
DEFAULT_RESET_DECAY: float = 0.999


@dataclass
class ProjectionConfig:
    max_iterations: int = DEFAULT_MAX_ITERATIONS
    learning_rate: float = DEFAULT_LEARNING_RATE
    decay: float = DEFAULT_DECAY
    # значення для reset()
    reset_learning_rate: float = DEFAULT_RESET_LEARNING_RATE
    reset_decay: float = DEFAULT_RESET_DECAY
    # seed генератора початкових позицій; None - випадковий
    seed: Optional[int] = None
    # "gauss_seidel" або "jacobi"
    update: str = UPDATE_GAUSS_SEIDEL
    log_every: int = 100
    tol_stress: Optional[float] = None
