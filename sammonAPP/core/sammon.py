"""
sammon.py

Варіанти проходу розміщення Саммона як стратегії Optimizer.

Для кожної пари i < j:
    d'    = ||P_i - P_j||                  (поточна відстань на площині)
    d'    = 1e-3, якщо d' <= 1e-5          (позиції при цьому не змінюються)
    f     = λ * (D_ij - d') / d'
    delta = f * (P_i - P_j)
    P_i  += delta,  P_j -= delta

Після всіх пар движок множить λ на decay.

Варіанти:
    GaussSeidelSammon - зсув застосовується одразу, наступні пари того ж
                        проходу бачать уже оновлені позиції; порядок
                        пар: зростання i, потім j. Варіант за замовчуванням.
    JacobiSammon      - усі зсуви рахуються з "замороженої" копії позицій
                        і додаються разом (векторизовано через numpy);
                        результат відрізняється від Gauss-Seidel.

Примітка: f не ділиться на D_ij, як у канонічному stress Саммона;
формула залишена саме такою.
"""

from __future__ import annotations

from math import sqrt
from typing import Any, Dict, Optional, Type

import numpy as np

from .distances import ArrayLike, DistanceMatrix
from .errors import InvalidInputError
from .optimizer_base import Optimizer

# Поріг "нульової" відстані на площині та значення, яким її замінюють
MIN_DISTANCE: float = 1e-5
CLAMPED_DISTANCE: float = 1e-3

UPDATE_GAUSS_SEIDEL = "gauss_seidel"
UPDATE_JACOBI = "jacobi"


class GaussSeidelSammon(Optimizer):
    """
    Послідовний (Gauss-Seidel) прохід.

    Особливості:
        - кожна поправка застосовується негайно;
        - пари обробляються строго по порядку, тому прохід не паралелиться;
        - за однакових seed та даних результат відтворюється точно.
    """

    def __init__(
        self,
        distances: DistanceMatrix,
        positions: ArrayLike,
        name: Optional[str] = None,
    ) -> None:
        super().__init__(
            distances=distances,
            positions=positions,
            name=name or "Sammon (Gauss-Seidel)",
        )

    def _sweep_impl(self, positions: np.ndarray, learning_rate: float) -> Dict[str, Any]:
        n = positions.shape[0]
        if n < 2:
            return {"pairs": 0, "clamped": 0}

        # внутрішній цикл працює з пласкими списками float
        xs = positions[:, 0].tolist()
        ys = positions[:, 1].tolist()
        target = self.distances.values.tolist()

        k = 0
        clamped = 0
        for i in range(n - 1):
            for j in range(i + 1, n):
                dx = xs[i] - xs[j]
                dy = ys[i] - ys[j]

                current = sqrt(dx * dx + dy * dy)
                if current <= MIN_DISTANCE:
                    current = CLAMPED_DISTANCE
                    clamped += 1

                f = learning_rate * (target[k] - current) / current
                xs[i] += f * dx
                ys[i] += f * dy
                xs[j] -= f * dx
                ys[j] -= f * dy
                k += 1

        positions[:, 0] = xs
        positions[:, 1] = ys

        return {"pairs": k, "clamped": clamped}


class JacobiSammon(Optimizer):
    """
    Синхронний (Jacobi) прохід.

    Особливості:
        - усі поправки рахуються з позицій на початок проходу;
        - поправки незалежні між парами, прохід векторизований;
        - еквівалентний градієнтному кроку λ/2 по сирому stress, тому для
          великих N потрібен менший λ, ніж для Gauss-Seidel.
    """

    def __init__(
        self,
        distances: DistanceMatrix,
        positions: ArrayLike,
        name: Optional[str] = None,
    ) -> None:
        super().__init__(
            distances=distances,
            positions=positions,
            name=name or "Sammon (Jacobi)",
        )
        self._rows, self._cols = np.triu_indices(distances.n, k=1)

    def _sweep_impl(self, positions: np.ndarray, learning_rate: float) -> Dict[str, Any]:
        if self._rows.size == 0:
            return {"pairs": 0, "clamped": 0}

        diff = positions[self._rows] - positions[self._cols]
        current = np.sqrt(np.sum(diff * diff, axis=1))

        small = current <= MIN_DISTANCE
        current = np.where(small, CLAMPED_DISTANCE, current)

        f = learning_rate * (self.distances.values - current) / current
        delta = f[:, None] * diff

        update = np.zeros_like(positions)
        np.add.at(update, self._rows, delta)
        np.add.at(update, self._cols, -delta)
        positions += update

        return {"pairs": int(self._rows.size), "clamped": int(small.sum())}


# ---------------------------------------------------------------------------
# Реєстр варіантів
# ---------------------------------------------------------------------------

OPTIMIZERS: Dict[str, Type[Optimizer]] = {
    UPDATE_GAUSS_SEIDEL: GaussSeidelSammon,
    UPDATE_JACOBI: JacobiSammon,
}


def create_optimizer(
    update: str,
    distances: DistanceMatrix,
    positions: ArrayLike,
) -> Optimizer:
    """
    Створити Optimizer за ключем варіанта.

    update:
        "gauss_seidel" (за замовчуванням) або "jacobi";
        допускаються також "gauss-seidel" та регістр літер.
    """
    key = str(update).lower().strip().replace("-", "_")
    if key not in OPTIMIZERS:
        raise InvalidInputError(
            f"Невідомий варіант оновлення: {update!r}. "
            f"Доступні: {', '.join(sorted(OPTIMIZERS))}"
        )
    return OPTIMIZERS[key](distances=distances, positions=positions)


__all__ = [
    "CLAMPED_DISTANCE",
    "MIN_DISTANCE",
    "OPTIMIZERS",
    "UPDATE_GAUSS_SEIDEL",
    "UPDATE_JACOBI",
    "GaussSeidelSammon",
    "JacobiSammon",
    "create_optimizer",
]
