"""
results_summary.py

Зведена таблиця результатів кількох запусків розміщення
(різні варіанти оновлення, seed-и, параметри кроку) для одного набору даних.

Працює поверх об'єктів, які мають інтерфейс як ProjectionRunResult:
    - method_name
    - stress_initial
    - stress_final
    - n_iter
    - learning_rate_final
    - pair_updates
    - stopped_by
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass
class ResultsSummary:
    """
    Зведення результатів кількох запусків.

    Приклад використання:
        summary = ResultsSummary()
        summary.add_run(run_gauss_seidel)
        summary.add_run(run_jacobi)
        rows = summary.as_rows()  # для таблиці / pandas
    """
    runs: List[Any] = field(default_factory=list)

    def add_run(self, run: Any) -> None:
        """Додати результат одного запуску до зведення."""
        self.runs.append(run)

    # ------------------------------------------------------------------
    # Перетворення в "табличний" вигляд
    # ------------------------------------------------------------------

    def as_rows(self) -> List[Dict[str, Any]]:
        """
        Повернути список dict-рядків з полями:
            method, n_iter, stress_initial, stress_final, reduction,
            learning_rate_final, pair_updates, stopped_by

        reduction = 1 - stress_final / stress_initial
        (None, якщо початковий stress нульовий або невідомий).
        """
        rows: List[Dict[str, Any]] = []

        for run in self.runs:
            stress_initial = getattr(run, "stress_initial", None)
            stress_final = getattr(run, "stress_final", None)
            n_iter = getattr(run, "n_iter", None)
            lr_final = getattr(run, "learning_rate_final", None)
            pair_updates = getattr(run, "pair_updates", None)

            reduction = None
            if stress_initial and stress_final is not None:
                reduction = 1.0 - float(stress_final) / float(stress_initial)

            rows.append(
                {
                    "method": getattr(run, "method_name", "<unknown>"),
                    "n_iter": int(n_iter) if n_iter is not None else None,
                    "stress_initial": float(stress_initial) if stress_initial is not None else None,
                    "stress_final": float(stress_final) if stress_final is not None else None,
                    "reduction": reduction,
                    "learning_rate_final": float(lr_final) if lr_final is not None else None,
                    "pair_updates": int(pair_updates) if pair_updates is not None else None,
                    "stopped_by": getattr(run, "stopped_by", None),
                }
            )

        return rows

    # ------------------------------------------------------------------
    # Вибір "найкращого" запуску
    # ------------------------------------------------------------------

    def best_by_stress(self) -> Optional[Any]:
        """
        Повернути run з найменшим stress_final.
        Якщо список порожній або stress_final не визначені - повертає None.
        """
        best_run = None
        best_stress = None

        for run in self.runs:
            stress_final = getattr(run, "stress_final", None)
            if stress_final is None:
                continue
            value = float(stress_final)
            if best_stress is None or value < best_stress:
                best_stress = value
                best_run = run

        return best_run

    # ------------------------------------------------------------------
    # Опційно: повернути pandas.DataFrame
    # ------------------------------------------------------------------

    def to_dataframe(self):
        """
        Повернути pandas.DataFrame зі зведеною таблицею.

        Вимога: встановлений пакет pandas (extra "table").
        """
        try:
            import pandas as pd  # type: ignore
        except ImportError as exc:  # pragma: no cover
            raise RuntimeError(
                "Для використання ResultsSummary.to_dataframe() "
                "потрібно встановити пакет 'pandas'."
            ) from exc

        return pd.DataFrame(self.as_rows())


__all__ = ["ResultsSummary"]
