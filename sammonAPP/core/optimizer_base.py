"""
optimizer_base.py

Базові класи та типи для ітераційного розміщення точок (Strategy).

Ідея:
    - Є абстрактний клас Optimizer, який володіє станом ітерацій
      (OptimizerState) та масивом позицій (N, 2) і реалізує машину станів:
          Idle --start()--> Running --step()/stop()--> Finished
    - Конкретні варіанти проходу наслідуються від Optimizer:
        * GaussSeidelSammon
        * JacobiSammon
    - Кожен варіант реалізує _sweep_impl(), а користувач/движок викликає step().

Формат:
    step() -> Optional[StepResult]   (None, якщо оптимізатор не запущений)
"""

from __future__ import annotations

import logging
import math
import numbers
from abc import ABC, abstractmethod
from dataclasses import dataclass, field, replace
from typing import Any, Dict, Optional, Tuple

import numpy as np

from .distances import ArrayLike, DistanceMatrix
from .errors import InvalidInputError

logger = logging.getLogger(__name__)

DEFAULT_MAX_ITERATIONS: int = 5000
DEFAULT_LEARNING_RATE: float = 0.8
DEFAULT_DECAY: float = 0.999


# ---------------------------------------------------------------------------
# Стан оптимізатора та результат одного кроку
# ---------------------------------------------------------------------------

@dataclass
class OptimizerState:
    """
    Стан ітераційного процесу.

    Атрибути:
        iteration      - кількість виконаних проходів
        max_iterations - межа, на якій процес переходить у Finished
        learning_rate  - поточний крок λ (після кожного проходу λ *= decay)
        decay          - множник згасання кроку, (0, 1]
        running        - процес запущений
        finished       - процес завершений (досягнуто межі або stop())
    """
    iteration: int = 0
    max_iterations: int = DEFAULT_MAX_ITERATIONS
    learning_rate: float = DEFAULT_LEARNING_RATE
    decay: float = DEFAULT_DECAY
    running: bool = False
    finished: bool = False

    @property
    def status(self) -> str:
        """'idle', 'running' або 'finished'."""
        if self.running:
            return "running"
        if self.finished:
            return "finished"
        return "idle"

    def copy(self) -> "OptimizerState":
        return replace(self)


@dataclass
class StepResult:
    """
    Результат одного проходу.

    Атрибути:
        iteration     - номер завершеного проходу (1, 2, ...)
        learning_rate - крок λ, з яким виконувався прохід
        step_norm     - норма зсуву всіх позицій ||P_new - P_old||
        meta          - додаткова інформація (кількість пар, варіант, ...)
    """
    iteration: int
    learning_rate: float
    step_norm: float
    meta: Dict[str, Any] = field(default_factory=dict)


# ---------------------------------------------------------------------------
# Перевірка параметрів
# ---------------------------------------------------------------------------

def validate_max_iterations(max_iterations: Any) -> int:
    """Кількість ітерацій має бути додатним цілим."""
    if isinstance(max_iterations, bool) or not isinstance(max_iterations, numbers.Integral):
        raise InvalidInputError(
            f"max_iterations має бути цілим числом, отримано {max_iterations!r}"
        )
    if max_iterations <= 0:
        raise InvalidInputError(
            f"max_iterations має бути > 0, отримано {max_iterations}"
        )
    return int(max_iterations)


def validate_schedule(learning_rate: Any, decay: Any) -> Tuple[float, float]:
    """
    Перевірити крок та згасання.

        learning_rate : скінченне число > 0
        decay         : скінченне число з (0, 1]
    """
    try:
        lr = float(learning_rate)
        dc = float(decay)
    except (TypeError, ValueError) as exc:
        raise InvalidInputError(
            f"learning_rate та decay мають бути числами: {learning_rate!r}, {decay!r}"
        ) from exc

    if not math.isfinite(lr) or lr <= 0.0:
        raise InvalidInputError(f"learning_rate має бути > 0, отримано {learning_rate!r}")
    if not math.isfinite(dc) or not 0.0 < dc <= 1.0:
        raise InvalidInputError(f"decay має лежати в (0, 1], отримано {decay!r}")

    return lr, dc


# ---------------------------------------------------------------------------
# Базовий клас Optimizer (Strategy)
# ---------------------------------------------------------------------------

class Optimizer(ABC):
    """
    Абстрактний базовий клас для варіантів проходу Саммона.

    Кожен конкретний варіант:
        - наслідується від Optimizer;
        - реалізує _sweep_impl(), що змінює позиції на місці.

    Використання:
        opt = GaussSeidelSammon(distances, positions)
        opt.start(max_iterations=5000, learning_rate=0.8, decay=0.999)
        while opt.state.running:
            opt.step()
    """

    def __init__(
        self,
        distances: DistanceMatrix,
        positions: ArrayLike,
        name: Optional[str] = None,
    ) -> None:
        """
        Parameters
        ----------
        distances : DistanceMatrix
            Вихідні відстані D_ij (спільні, тільки для читання).
        positions : ArrayLike
            Початкові позиції форми (N, 2). Копіюються: далі масивом
            володіє лише оптимізатор.
        name : Optional[str]
            Людяна назва варіанта (для логів/таблиць).
        """
        pts = np.array(positions, dtype=float, copy=True)
        if pts.ndim != 2 or pts.shape != (distances.n, 2):
            raise InvalidInputError(
                f"Очікувались позиції форми ({distances.n}, 2), отримано {pts.shape}"
            )

        self.distances = distances
        self._positions = pts
        self.name: str = name or self.__class__.__name__
        self.state = OptimizerState()

        # Лічильник оброблених пар (для зведених таблиць)
        self.pair_updates: int = 0

    # ------------------------------------------------------------------
    # Доступ до позицій
    # ------------------------------------------------------------------

    @property
    def positions(self) -> np.ndarray:
        """Поточні позиції (N, 2), подання тільки для читання."""
        view = self._positions.view()
        view.flags.writeable = False
        return view

    # ------------------------------------------------------------------
    # Машина станів
    # ------------------------------------------------------------------

    def start(self, max_iterations: int, learning_rate: float, decay: float) -> None:
        """
        Idle/Finished -> Running.

        Позиції та лічильник iteration не скидаються: повторний старт
        продовжує розміщення з останнього стану зі свіжим кроком.
        """
        if self.state.running:
            raise InvalidInputError("Оптимізатор уже запущений")
        if self.distances.n == 0:
            raise InvalidInputError("Немає записів для розміщення (N = 0)")

        max_iter = validate_max_iterations(max_iterations)
        lr, dc = validate_schedule(learning_rate, decay)

        self.state.max_iterations = max_iter
        self.state.learning_rate = lr
        self.state.decay = dc
        self.state.running = True
        self.state.finished = False

        logger.info(
            "%s: старт, ітерація %d / %d, λ = %.8f, decay = %.3f",
            self.name, self.state.iteration, max_iter, lr, dc,
        )

    def step(self) -> Optional[StepResult]:
        """
        Виконати один повний прохід, якщо процес запущений.

        Повертає StepResult або None, якщо нічого не виконувалось.
        """
        state = self.state
        if not state.running:
            return None

        if state.iteration >= state.max_iterations:
            # відновлений запуск без reset(): межу вже досягнуто
            self._finish()
            return None

        previous = self._positions.copy()
        lr = state.learning_rate

        meta = self._sweep_impl(self._positions, lr)
        if meta is not None and not isinstance(meta, dict):
            raise TypeError(
                f"{self.__class__.__name__}._sweep_impl() "
                f"повинен повертати dict або None, отримано: {type(meta)}"
            )
        meta = dict(meta or {})
        self.pair_updates += int(meta.get("pairs", 0))

        state.learning_rate = lr * state.decay
        state.iteration += 1

        if state.iteration >= state.max_iterations:
            self._finish()
            meta["finished"] = True

        return StepResult(
            iteration=state.iteration,
            learning_rate=lr,
            step_norm=float(np.linalg.norm(self._positions - previous)),
            meta=meta,
        )

    def stop(self) -> None:
        """Running -> Finished; поточне розміщення заморожується."""
        if self.state.running:
            self._finish()

    def reset(self, default_learning_rate: float, default_decay: float) -> None:
        """
        Повернути λ і decay до значень за замовчуванням та обнулити iteration.

        Позиції та прапорці running/finished не змінюються.
        Під час роботи (Running) виклик ігнорується.
        """
        if self.state.running:
            logger.warning("%s: reset() під час роботи проігноровано", self.name)
            return

        lr, dc = validate_schedule(default_learning_rate, default_decay)
        self.state.learning_rate = lr
        self.state.decay = dc
        self.state.iteration = 0
        logger.debug("%s: параметри скинуто, λ = %.8f, decay = %.3f", self.name, lr, dc)

    def _finish(self) -> None:
        self.state.running = False
        self.state.finished = True
        logger.info(
            "%s: завершено на ітерації %d / %d",
            self.name, self.state.iteration, self.state.max_iterations,
        )

    # ------------------------------------------------------------------
    # Абстрактний метод, який реалізують конкретні стратегії
    # ------------------------------------------------------------------

    @abstractmethod
    def _sweep_impl(self, positions: np.ndarray, learning_rate: float) -> Optional[Dict[str, Any]]:
        """
        Реалізація одного проходу по всіх парах i < j.

        Parameters
        ----------
        positions : np.ndarray
            Масив (N, 2), який треба змінити на місці.
        learning_rate : float
            Поточний крок λ.

        Returns
        -------
        Optional[dict]
            Додаткова інформація про прохід (наприклад, {"pairs": ...}).
        """
        raise NotImplementedError


__all__ = [
    "DEFAULT_DECAY",
    "DEFAULT_LEARNING_RATE",
    "DEFAULT_MAX_ITERATIONS",
    "Optimizer",
    "OptimizerState",
    "StepResult",
    "validate_max_iterations",
    "validate_schedule",
]
