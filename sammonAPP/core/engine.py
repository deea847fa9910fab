"""
engine.py

Ітераційний двигун для запуску SammonProjector без GUI.

Функціонал:
    - запускає проєктор і викликає step() до завершення;
    - формує трасу ітерацій (stress, λ, норма зсуву);
    - фіксує причину зупинки (max_iter, зміна stress, зовнішній stop());
    - підтримує callback для оновлення кадру / логів на кожній ітерації.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, List, Optional

import numpy as np

from .iteration_result import IterationResult
from .optimizer_base import DEFAULT_DECAY, DEFAULT_LEARNING_RATE, DEFAULT_MAX_ITERATIONS
from .projector import SammonProjector

logger = logging.getLogger(__name__)


@dataclass
class ProjectionRunResult:
    """
    Підсумок одного запуску розміщення.

    Атрибути:
        method_name         - назва варіанта (Optimizer.name).
        iterations          - список IterationResult (траса процесу).
        positions           - кінцеві позиції (N, 2).
        stress_initial      - stress перед першим проходом.
        stress_final        - stress після останнього проходу.
        n_iter              - кількість виконаних проходів у цьому запуску.
        learning_rate_final - λ після останнього проходу.
        pair_updates        - скільки разів оброблено пару (i, j).
        stopped_by          - причина зупинки ("max_iter", "stress_change", "stopped").
    """
    method_name: str
    iterations: List[IterationResult]
    positions: np.ndarray
    stress_initial: float
    stress_final: float
    n_iter: int
    learning_rate_final: float
    pair_updates: int
    stopped_by: str


# Тип callback'а для кадрів/логів
IterationCallback = Callable[[IterationResult], None]

# Позначка "параметр не передано" для tol_stress, де None означає "вимкнено"
_UNSET: Any = object()


class ProjectionEngine:
    """
    Движок, який керує ітераційним процесом для заданого SammonProjector.

    Налаштування за замовчуванням (можуть бути переозначені у run()):
        max_iterations : межа проходів (default: 5000)
        learning_rate  : початковий λ (default: 0.8)
        decay          : згасання λ (default: 0.999)
        tol_stress     : поріг |stress_k - stress_{k-1}|; None - вимкнено
        log_every      : як часто писати прогрес у лог (0 - не писати)
        keep_positions : зберігати копію позицій у кожному IterationResult
    """

    def __init__(
        self,
        max_iterations: int = DEFAULT_MAX_ITERATIONS,
        learning_rate: float = DEFAULT_LEARNING_RATE,
        decay: float = DEFAULT_DECAY,
        tol_stress: Optional[float] = None,
        log_every: int = 100,
        keep_positions: bool = False,
    ) -> None:
        self.max_iterations_default = max_iterations
        self.learning_rate_default = learning_rate
        self.decay_default = decay
        self.tol_stress_default = tol_stress
        self.log_every = log_every
        self.keep_positions = keep_positions

    def _record(
        self,
        projector: SammonProjector,
        index: int,
        stress: float,
        learning_rate: float,
        step_norm: float,
        meta: dict,
    ) -> IterationResult:
        positions = None
        if self.keep_positions:
            positions = np.array(projector.get_projected_points(), copy=True)
        return IterationResult(
            index=index,
            stress=stress,
            learning_rate=learning_rate,
            step_norm=step_norm,
            positions=positions,
            meta=meta,
        )

    def run(
        self,
        projector: SammonProjector,
        max_iterations: Optional[int] = None,
        learning_rate: Optional[float] = None,
        decay: Optional[float] = None,
        tol_stress: Optional[float] = _UNSET,
        callback: Optional[IterationCallback] = None,
    ) -> ProjectionRunResult:
        """
        Запустити процес розміщення до завершення.

        Позиції не скидаються: повторний run() продовжує з останнього
        розміщення. Callback може зупинити процес через projector.stop().

        tol_stress=None вимикає критерій зупинки по stress навіть тоді,
        коли в движку задано tol_stress за замовчуванням.
        """
        max_iterations = max_iterations if max_iterations is not None else self.max_iterations_default
        learning_rate = learning_rate if learning_rate is not None else self.learning_rate_default
        decay = decay if decay is not None else self.decay_default
        if tol_stress is _UNSET:
            tol_stress = self.tol_stress_default

        projector.start(max_iterations, learning_rate, decay)
        optimizer = projector.optimizer
        pairs_before = optimizer.pair_updates

        state = projector.get_state()
        stress0 = projector.stress()
        rec0 = self._record(projector, state.iteration, stress0, state.learning_rate, 0.0, {"initial": True})
        iterations: List[IterationResult] = [rec0]
        if callback is not None:
            callback(rec0)

        stopped_by: Optional[str] = None
        stress_prev = stress0

        # Основний ітераційний цикл
        while projector.get_state().running:
            step_res = projector.step()
            if step_res is None:
                break

            stress = projector.stress()
            rec = self._record(
                projector,
                step_res.iteration,
                stress,
                step_res.learning_rate,
                step_res.step_norm,
                dict(step_res.meta),
            )
            iterations.append(rec)

            if callback is not None:
                callback(rec)

            if self.log_every and step_res.iteration % self.log_every == 0:
                logger.info(
                    "Ітерація %d / %d: stress = %.6e, λ = %.8f",
                    step_res.iteration, max_iterations, stress, step_res.learning_rate,
                )

            # Критерій по зміні stress
            if tol_stress is not None and abs(stress_prev - stress) < tol_stress:
                if projector.get_state().running:
                    projector.stop()
                    stopped_by = "stress_change"
                break
            stress_prev = stress

        final_state = projector.get_state()
        if stopped_by is None:
            if final_state.iteration >= final_state.max_iterations:
                stopped_by = "max_iter"
            else:
                stopped_by = "stopped"

        last = iterations[-1]
        result = ProjectionRunResult(
            method_name=optimizer.name,
            iterations=iterations,
            positions=np.array(projector.get_projected_points(), copy=True),
            stress_initial=stress0,
            stress_final=float(last.stress),
            n_iter=len(iterations) - 1,  # без стартового запису
            learning_rate_final=final_state.learning_rate,
            pair_updates=optimizer.pair_updates - pairs_before,
            stopped_by=stopped_by,
        )

        logger.info(
            "%s: зупинка %s після %d ітерацій, stress %.6e -> %.6e",
            result.method_name, stopped_by, result.n_iter, stress0, result.stress_final,
        )
        return result


__all__ = [
    "IterationCallback",
    "IterationResult",
    "ProjectionEngine",
    "ProjectionRunResult",
]
