"""
app.py

Контролер хоста для проєктора Саммона.

Зв'язує:
    - config.ProjectionConfig
    - core.SammonProjector
    - core.ProjectionEngine
    - core.ResultsSummary

Функціонал:
    - перевіряє конфігурацію перед запуском;
    - ініціалізує проєктор записами;
    - покадровий цикл: один step() на кадр, після нього кадр читає
      позиції, оцінки та стан;
    - запуск до завершення через движок;
    - порівняння варіантів оновлення (Gauss-Seidel / Jacobi) на одних даних.

Точка входу командного рядка:
    sammon-app data.txt --max-iter 2000 --seed 7
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import Any, Callable, Optional, Sequence

import numpy as np

from sammonAPP.config import ProjectionConfig
from sammonAPP.logging_config import setup_logging
from sammonAPP.core.engine import IterationCallback, ProjectionEngine, ProjectionRunResult
from sammonAPP.core.errors import InvalidInputError
from sammonAPP.core.optimizer_base import (
    OptimizerState,
    validate_max_iterations,
    validate_schedule,
)
from sammonAPP.core.projector import SammonProjector
from sammonAPP.core.results_summary import ResultsSummary
from sammonAPP.core.sammon import OPTIMIZERS, UPDATE_GAUSS_SEIDEL, UPDATE_JACOBI

logger = logging.getLogger(__name__)

# Кадр отримує: позиції (N, 2), оцінки (N,), знімок стану
FrameCallback = Callable[[np.ndarray, np.ndarray, OptimizerState], None]


# ---------------------------------------------------------------------------
# Контролер
# ---------------------------------------------------------------------------

class ProjectionController:
    """
    Зв'язує хост (кадри, CLI) з SammonProjector та ProjectionEngine.

    Схема:
        хост --[ProjectionConfig, записи]--> Controller
        Controller -- initialize/start проєктора
        кожен кадр: Controller.step_frame() -> on_frame(points, scores, state)
    """

    def __init__(
        self,
        config: Optional[ProjectionConfig] = None,
        engine: Optional[ProjectionEngine] = None,
    ) -> None:
        self.config = config or ProjectionConfig()
        self.validate_config(self.config)
        self.projector = SammonProjector(update=self.config.update)
        self.engine = engine or ProjectionEngine(log_every=self.config.log_every)

    # ------------------------------------------------------------------
    # Валідація вхідних даних
    # ------------------------------------------------------------------

    @staticmethod
    def validate_config(cfg: ProjectionConfig) -> None:
        """
        Перевіряє коректність параметрів перед запуском.

        Якщо щось не так - піднімає InvalidInputError.
        """
        validate_max_iterations(cfg.max_iterations)
        validate_schedule(cfg.learning_rate, cfg.decay)
        validate_schedule(cfg.reset_learning_rate, cfg.reset_decay)

        if str(cfg.update).lower().replace("-", "_") not in OPTIMIZERS:
            raise InvalidInputError(f"Невідомий варіант оновлення: {cfg.update!r}")
        if cfg.log_every < 0:
            raise InvalidInputError("log_every має бути >= 0")
        if cfg.tol_stress is not None and cfg.tol_stress < 0:
            raise InvalidInputError("tol_stress має бути >= 0")

    # ------------------------------------------------------------------
    # Дані та керування
    # ------------------------------------------------------------------

    def load(
        self,
        records: Any,
        n_records: Optional[int] = None,
        n_features: Optional[int] = None,
    ) -> None:
        self.projector.initialize(
            records,
            n_records=n_records,
            n_features=n_features,
            rng=self.config.seed,
        )

    def start(self) -> None:
        cfg = self.config
        self.projector.start(cfg.max_iterations, cfg.learning_rate, cfg.decay)

    def stop(self) -> None:
        self.projector.stop()

    def reset_parameters(self) -> None:
        """Кнопка "скинути параметри": λ і decay за замовчуванням, iteration = 0."""
        cfg = self.config
        self.projector.reset(cfg.reset_learning_rate, cfg.reset_decay)

    # ------------------------------------------------------------------
    # Покадровий режим
    # ------------------------------------------------------------------

    def step_frame(self, on_frame: Optional[FrameCallback] = None) -> bool:
        """
        Один кадр: не більше одного проходу, потім читання стану.

        Повертає True, якщо в цьому кадрі виконувався прохід.
        """
        stepped = self.projector.step() is not None
        if on_frame is not None:
            on_frame(
                self.projector.get_projected_points(),
                self.projector.get_aggregate_scores(),
                self.projector.get_state(),
            )
        return stepped

    def run_frames(self, n_frames: int, on_frame: Optional[FrameCallback] = None) -> int:
        """Прокрутити n_frames кадрів; повертає кількість виконаних проходів."""
        sweeps = 0
        for _ in range(n_frames):
            if self.step_frame(on_frame):
                sweeps += 1
        return sweeps

    # ------------------------------------------------------------------
    # Запуск до завершення
    # ------------------------------------------------------------------

    def run_to_completion(self, callback: Optional[IterationCallback] = None) -> ProjectionRunResult:
        cfg = self.config
        return self.engine.run(
            self.projector,
            max_iterations=cfg.max_iterations,
            learning_rate=cfg.learning_rate,
            decay=cfg.decay,
            tol_stress=cfg.tol_stress,
            callback=callback,
        )

    def compare_updates(
        self,
        records: Any,
        updates: Sequence[str] = (UPDATE_GAUSS_SEIDEL, UPDATE_JACOBI),
    ) -> ResultsSummary:
        """
        Запустити кожен варіант оновлення на тих самих записах і з тим самим seed.

        Без seed у конфігурації один seed генерується перед циклом, тож
        усі варіанти стартують з однакового розміщення.
        Основний проєктор контролера не змінюється.
        """
        cfg = self.config
        summary = ResultsSummary()

        seed = cfg.seed
        if seed is None:
            seed = int(np.random.SeedSequence().entropy)
            logger.info("Порівняння варіантів з seed = %d", seed)

        for update in updates:
            projector = SammonProjector(update=update)
            projector.initialize(records, rng=seed)
            run = self.engine.run(
                projector,
                max_iterations=cfg.max_iterations,
                learning_rate=cfg.learning_rate,
                decay=cfg.decay,
                tol_stress=cfg.tol_stress,
            )
            summary.add_run(run)

        best = summary.best_by_stress()
        if best is not None:
            logger.info("Найкращий варіант за stress: %s (%.6e)", best.method_name, best.stress_final)
        return summary


# ---------------------------------------------------------------------------
# Командний рядок
# ---------------------------------------------------------------------------

def load_table(path: str) -> np.ndarray:
    """Прочитати числову таблицю (рядок - запис, стовпці через пробіл)."""
    return np.loadtxt(path, dtype=float, ndmin=2)


def build_parser() -> argparse.ArgumentParser:
    defaults = ProjectionConfig()
    parser = argparse.ArgumentParser(
        prog="sammon-app",
        description="Розміщення багатовимірних записів на площині методом Саммона.",
    )
    parser.add_argument("data", help="файл з числовою таблицею (N рядків по D чисел)")
    parser.add_argument("--max-iter", type=int, default=defaults.max_iterations)
    parser.add_argument("--learning-rate", type=float, default=defaults.learning_rate)
    parser.add_argument("--decay", type=float, default=defaults.decay)
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument(
        "--update",
        choices=sorted(OPTIMIZERS),
        default=defaults.update,
        help="варіант проходу (за замовчуванням gauss_seidel)",
    )
    parser.add_argument("--tol-stress", type=float, default=None)
    parser.add_argument("--log-every", type=int, default=defaults.log_every)
    parser.add_argument(
        "--log-level",
        type=str.upper,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default="INFO",
    )
    parser.add_argument("--log-file", default=None)
    parser.add_argument(
        "--compare",
        action="store_true",
        help="запустити обидва варіанти оновлення і показати зведення",
    )
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(args.log_level, args.log_file)

    config = ProjectionConfig(
        max_iterations=args.max_iter,
        learning_rate=args.learning_rate,
        decay=args.decay,
        seed=args.seed,
        update=args.update,
        log_every=args.log_every,
        tol_stress=args.tol_stress,
    )

    try:
        controller = ProjectionController(config)
        records = load_table(args.data)

        if args.compare:
            summary = controller.compare_updates(records)
            for row in summary.as_rows():
                logger.info(
                    "%s: ітерацій %d, stress %.6e -> %.6e, зупинка: %s",
                    row["method"], row["n_iter"], row["stress_initial"],
                    row["stress_final"], row["stopped_by"],
                )
            return 0

        controller.load(records)
        result = controller.run_to_completion()
    except InvalidInputError as exc:
        logger.error("Некоректні вхідні дані: %s", exc)
        return 2
    except (OSError, ValueError) as exc:
        logger.error("Не вдалося прочитати %s: %s", args.data, exc)
        return 2

    state = controller.projector.get_state()
    print(
        f"Метод: {result.method_name}, зупинка: {result.stopped_by}, "
        f"ітерацій: {state.iteration} / {state.max_iterations}, "
        f"stress: {result.stress_initial:.6e} -> {result.stress_final:.6e}"
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
