"""Спільні фікстури для тестів проєктора."""

import numpy as np
import pytest

from sammonAPP.core.distances import DistanceMatrix


@pytest.fixture
def line_distances():
    """D01 = 1, D02 = 2, D12 = 1 - три точки на прямій."""
    return DistanceMatrix(3, [1.0, 2.0, 1.0])


@pytest.fixture
def line_positions():
    """Розміщення, яке точно відтворює line_distances."""
    return np.array([[0.0, 0.0], [1.0, 0.0], [2.0, 0.0]])


@pytest.fixture
def planar_records():
    """
    10 точок, що лежать у двовимірній площині всередині 4D.

    Точне двовимірне вкладення існує, тож stress можна суттєво зменшити.
    """
    rng = np.random.default_rng(0)
    basis, _ = np.linalg.qr(rng.normal(size=(4, 4)))
    plane = np.random.default_rng(1).uniform(-3.0, 3.0, size=(10, 2))
    return plane @ basis[:2]


@pytest.fixture
def small_records():
    """6 записів з 3 ознаками."""
    return np.array(
        [
            [0.0, 0.0, 0.0],
            [1.0, 0.0, 2.0],
            [0.5, 1.5, 0.0],
            [2.0, 2.0, 1.0],
            [3.0, 0.5, 0.5],
            [1.0, 3.0, 2.5],
        ]
    )
