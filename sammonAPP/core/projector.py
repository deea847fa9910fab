"""
projector.py

Фасад проєктора для хоста (вікно, таблиця, CLI).

Зв'язує:
    - distances.build_distance_matrix   (вихідні відстані)
    - aggregate.normalize_aggregates    (кольори точок)
    - initializer.initialize_positions  (старт розміщення)
    - sammon.create_optimizer           (машина станів + прохід)

Життєвий цикл з боку хоста:
    projector.initialize(records, rng=seed)
    projector.start(max_iterations, learning_rate, decay)
    на кожному кадрі:
        projector.step()
        points = projector.get_projected_points()
"""

from __future__ import annotations

import logging
from typing import Any, Optional

import numpy as np

from .aggregate import normalize_aggregates
from .distances import DistanceMatrix, as_record_table, build_distance_matrix
from .errors import InvalidInputError
from .initializer import RandomSource, initialize_positions
from .optimizer_base import Optimizer, OptimizerState, StepResult
from .sammon import UPDATE_GAUSS_SEIDEL, create_optimizer
from .stress import raw_stress

logger = logging.getLogger(__name__)


def _read_only(array: np.ndarray) -> np.ndarray:
    view = array.view()
    view.flags.writeable = False
    return view


class SammonProjector:
    """
    Проєкція N записів з D ознаками на площину.

    До initialize() набір даних порожній (N = 0): start() відхиляється,
    step() нічого не робить, геттери повертають порожні масиви.
    """

    def __init__(self, update: str = UPDATE_GAUSS_SEIDEL) -> None:
        self.update = update
        self._records = as_record_table(np.zeros((0, 0)))
        self._scores = normalize_aggregates(self._records)
        self._optimizer: Optimizer = create_optimizer(
            update, DistanceMatrix(0, []), np.zeros((0, 2))
        )

    # ------------------------------------------------------------------
    # Дані
    # ------------------------------------------------------------------

    def initialize(
        self,
        records: Any,
        n_records: Optional[int] = None,
        n_features: Optional[int] = None,
        rng: RandomSource = None,
    ) -> None:
        """
        Побудувати матрицю відстаней, сумарні оцінки та початкові позиції.

        records може бути таблицею (N, D), списком записів або пласким
        списком довжини N*D разом із n_records / n_features.
        rng - seed або numpy.random.Generator.

        При помилці попередній стан проєктора не змінюється.
        """
        if self._optimizer.state.running:
            raise InvalidInputError("Не можна змінити дані під час роботи оптимізатора")

        try:
            table = as_record_table(records, n_records=n_records, n_features=n_features)
        except InvalidInputError as exc:
            logger.warning("Записи відхилено: %s", exc)
            raise

        # Усе рахуємо в локальні змінні, стан змінюємо лише наприкінці
        distances = build_distance_matrix(table)
        scores = normalize_aggregates(table)
        positions = initialize_positions(distances, rng)
        optimizer = create_optimizer(self.update, distances, positions)

        self._records = table
        self._scores = scores
        self._optimizer = optimizer

        logger.info(
            "Завантажено %d записів з %d ознаками, пар: %d, max D = %.6g",
            table.shape[0], table.shape[1], len(distances), distances.max(),
        )

    @property
    def n_records(self) -> int:
        return int(self._records.shape[0])

    @property
    def n_features(self) -> int:
        return int(self._records.shape[1])

    @property
    def records(self) -> np.ndarray:
        return self._records

    @property
    def distances(self) -> DistanceMatrix:
        return self._optimizer.distances

    @property
    def optimizer(self) -> Optimizer:
        return self._optimizer

    # ------------------------------------------------------------------
    # Керування оптимізатором
    # ------------------------------------------------------------------

    def start(self, max_iterations: int, learning_rate: float, decay: float) -> None:
        try:
            self._optimizer.start(max_iterations, learning_rate, decay)
        except InvalidInputError as exc:
            logger.warning("Старт відхилено: %s", exc)
            raise

    def step(self) -> Optional[StepResult]:
        return self._optimizer.step()

    def stop(self) -> None:
        self._optimizer.stop()

    def reset(self, default_learning_rate: float, default_decay: float) -> None:
        self._optimizer.reset(default_learning_rate, default_decay)

    # ------------------------------------------------------------------
    # Читання для відображення (між кроками)
    # ------------------------------------------------------------------

    def get_projected_points(self) -> np.ndarray:
        """Позиції (N, 2) у порядку записів, тільки для читання."""
        return self._optimizer.positions

    def get_aggregate_scores(self) -> np.ndarray:
        """Оцінки записів у [0, 1], тільки для читання."""
        return _read_only(self._scores)

    def get_state(self) -> OptimizerState:
        """Знімок стану оптимізатора (копія)."""
        return self._optimizer.state.copy()

    def stress(self) -> float:
        """Сирий stress поточного розміщення."""
        return raw_stress(self.distances, self._optimizer.positions)


__all__ = ["SammonProjector"]
