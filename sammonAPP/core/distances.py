"""
distances.py

Таблиця записів та матриця попарних евклідових відстаней.

Формат:
    - записи: numpy.ndarray форми (N, D), float64, тільки для читання;
      D завжди береться з даних, а не з константи;
    - матриця відстаней зберігається лише верхнім трикутником (i < j)
      у стиснутому вигляді довжини N(N-1)/2, рядок за рядком:
          (0,1), (0,2), ..., (0,N-1), (1,2), ..., (N-2,N-1)
      діагональ неявно 0, симетрія неявна.
"""

from __future__ import annotations

import numbers
from typing import Any, Iterator, Optional, Sequence, Tuple

import numpy as np

from .errors import InvalidInputError

ArrayLike = np.ndarray


# ---------------------------------------------------------------------------
# Таблиця записів
# ---------------------------------------------------------------------------

def _is_scalar(value: Any) -> bool:
    if isinstance(value, np.ndarray):
        return value.ndim == 0
    return isinstance(value, numbers.Number)


def _rows_to_array(records: Sequence[Any]) -> np.ndarray:
    """Перетворити список записів (або плаский список чисел) у масив."""
    items = list(records)

    if all(_is_scalar(item) for item in items):
        # плаский список: N і D мають прийти окремо
        return np.asarray(items, dtype=float)

    lengths = set()
    for index, row in enumerate(items):
        try:
            lengths.add(len(row))
        except TypeError as exc:
            raise InvalidInputError(
                f"Запис #{index} не є послідовністю ознак: {row!r}"
            ) from exc

    if len(lengths) > 1:
        raise InvalidInputError(
            f"Записи мають різну довжину: {sorted(lengths)}"
        )

    return np.asarray(items, dtype=float)


def as_record_table(
    records: Any,
    n_records: Optional[int] = None,
    n_features: Optional[int] = None,
) -> np.ndarray:
    """
    Привести вхідні записи до масиву форми (N, D).

    Приймає:
        - numpy.ndarray форми (N, D);
        - послідовність записів (кожен - послідовність з D чисел);
        - пласку таблицю довжини N*D разом із n_records та/або n_features.

    Якщо n_records / n_features задані разом із двовимірними даними,
    вони мають збігатися з формою даних.

    Raises
    ------
    InvalidInputError
        рвані записи, невідповідність N*D, нечислові чи нескінченні значення.
    """
    try:
        if isinstance(records, np.ndarray):
            table = np.asarray(records, dtype=float)
        else:
            table = _rows_to_array(records)
    except InvalidInputError:
        raise
    except (TypeError, ValueError) as exc:
        raise InvalidInputError(f"Записи не є числовою таблицею: {exc}") from exc

    if table.ndim == 1:
        table = _reshape_flat(table, n_records, n_features)
    elif table.ndim == 2:
        if n_records is not None and table.shape[0] != n_records:
            raise InvalidInputError(
                f"Заявлено N = {n_records}, а отримано {table.shape[0]} записів"
            )
        if n_features is not None and table.shape[1] != n_features:
            raise InvalidInputError(
                f"Заявлено D = {n_features}, а записи мають {table.shape[1]} ознак"
            )
    else:
        raise InvalidInputError(
            f"Очікувалась таблиця (N, D), отримано масив розмірності {table.ndim}"
        )

    if not np.all(np.isfinite(table)):
        raise InvalidInputError("Записи містять NaN або нескінченні значення")

    result = np.array(table, dtype=float, copy=True)
    result.setflags(write=False)
    return result


def _reshape_flat(
    flat: np.ndarray,
    n_records: Optional[int],
    n_features: Optional[int],
) -> np.ndarray:
    size = flat.size

    if n_records is None and n_features is None:
        if size == 0:
            return flat.reshape(0, 0)
        raise InvalidInputError(
            "Для плаского списку значень потрібно вказати N та/або D"
        )

    for label, value in (("N", n_records), ("D", n_features)):
        if value is None:
            continue
        try:
            valid = int(value) == value and value >= 0
        except (TypeError, ValueError) as exc:
            raise InvalidInputError(
                f"{label} має бути невід'ємним цілим, отримано {value!r}"
            ) from exc
        if not valid:
            raise InvalidInputError(f"{label} має бути невід'ємним цілим, отримано {value!r}")

    if n_records is None:
        if n_features == 0:
            if size != 0:
                raise InvalidInputError("D = 0, але таблиця не порожня")
            return flat.reshape(0, 0)
        if size % n_features != 0:
            raise InvalidInputError(
                f"Довжина таблиці {size} не ділиться на D = {n_features}"
            )
        n_records = size // n_features
    elif n_features is None:
        if n_records == 0:
            if size != 0:
                raise InvalidInputError("N = 0, але таблиця не порожня")
            return flat.reshape(0, 0)
        if size % n_records != 0:
            raise InvalidInputError(
                f"Довжина таблиці {size} не ділиться на N = {n_records}"
            )
        n_features = size // n_records

    if int(n_records) * int(n_features) != size:
        raise InvalidInputError(
            f"Довжина таблиці {size} не дорівнює N*D = {n_records}*{n_features}"
        )

    return flat.reshape(int(n_records), int(n_features))


# ---------------------------------------------------------------------------
# Попарні відстані
# ---------------------------------------------------------------------------

def pairwise_distances(points: ArrayLike) -> np.ndarray:
    """
    Стиснутий вектор евклідових відстаней між усіма парами i < j.

    Для кожної пари: sqrt(сума квадратів різниць по ознаках).
    Працює для довільної розмірності точок, у т.ч. D = 0 (усі відстані 0).
    """
    pts = np.asarray(points, dtype=float)
    if pts.ndim != 2:
        raise InvalidInputError(
            f"Очікувався масив точок (N, D), отримано форму {pts.shape}"
        )

    n = pts.shape[0]
    out = np.empty(n * (n - 1) // 2, dtype=float)

    offset = 0
    for i in range(n - 1):
        diff = pts[i + 1:] - pts[i]
        count = n - i - 1
        out[offset:offset + count] = np.sqrt(np.sum(diff * diff, axis=1))
        offset += count

    return out


class DistanceMatrix:
    """
    Симетрична матриця відстаней N x N, що зберігає лише пари i < j.

    Використання:
        dm = build_distance_matrix(records)
        dm[0, 3] == dm[3, 0]   # симетрія
        dm[2, 2] == 0.0        # діагональ
        dm.values              # стиснутий вектор, тільки для читання
    """

    def __init__(self, n: int, values: ArrayLike) -> None:
        vals = np.array(values, dtype=float, copy=True).reshape(-1)
        expected = n * (n - 1) // 2
        if vals.size != expected:
            raise InvalidInputError(
                f"Для N = {n} потрібно {expected} відстаней, отримано {vals.size}"
            )
        if np.any(vals < 0) or not np.all(np.isfinite(vals)):
            raise InvalidInputError("Відстані мають бути скінченними та невід'ємними")

        vals.setflags(write=False)
        self._n = int(n)
        self._values = vals

    @property
    def n(self) -> int:
        """Кількість записів N."""
        return self._n

    @property
    def values(self) -> np.ndarray:
        """Стиснутий верхній трикутник (тільки для читання)."""
        return self._values

    def __len__(self) -> int:
        return self._values.size

    def __repr__(self) -> str:
        return f"DistanceMatrix(n={self._n}, pairs={self._values.size})"

    def condensed_index(self, i: int, j: int) -> int:
        """Позиція пари (i, j), i < j, у стиснутому векторі."""
        if not 0 <= i < j < self._n:
            raise IndexError(f"Пара ({i}, {j}) поза верхнім трикутником N = {self._n}")
        return self._n * i - i * (i + 1) // 2 + (j - i - 1)

    def __getitem__(self, key: Tuple[int, int]) -> float:
        i, j = key
        if not (0 <= i < self._n and 0 <= j < self._n):
            raise IndexError(f"Індекс ({i}, {j}) поза межами N = {self._n}")
        if i == j:
            return 0.0
        if i > j:
            i, j = j, i
        return float(self._values[self.condensed_index(i, j)])

    def max(self) -> float:
        """Найбільша відстань (0.0, якщо пар немає)."""
        if self._values.size == 0:
            return 0.0
        return float(self._values.max())

    def pairs(self) -> Iterator[Tuple[int, int, float]]:
        """Пари (i, j, D_ij) у порядку зростання i, потім j."""
        k = 0
        for i in range(self._n - 1):
            for j in range(i + 1, self._n):
                yield i, j, float(self._values[k])
                k += 1

    def to_square(self) -> np.ndarray:
        """Повна симетрична матриця N x N (нова копія)."""
        square = np.zeros((self._n, self._n), dtype=float)
        upper = np.triu_indices(self._n, k=1)
        square[upper] = self._values
        return square + square.T


def build_distance_matrix(records: Any) -> DistanceMatrix:
    """
    Обчислити матрицю відстаней для записів форми (N, D).

    O(N^2 * D) часу, O(N^2) пам'яті. N = 0 дає порожню матрицю,
    D = 0 - матрицю з нулів; обидва випадки не є помилкою.
    """
    table = as_record_table(records)
    return DistanceMatrix(table.shape[0], pairwise_distances(table))


__all__ = [
    "ArrayLike",
    "DistanceMatrix",
    "as_record_table",
    "build_distance_matrix",
    "pairwise_distances",
]
