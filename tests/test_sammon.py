"""Тести машини станів та варіантів проходу Саммона."""

import numpy as np
import pytest

from sammonAPP.core.distances import DistanceMatrix, build_distance_matrix
from sammonAPP.core.errors import InvalidInputError
from sammonAPP.core.initializer import initialize_positions
from sammonAPP.core.sammon import (
    CLAMPED_DISTANCE,
    GaussSeidelSammon,
    JacobiSammon,
    create_optimizer,
)
from sammonAPP.core.stress import raw_stress

VARIANTS = [GaussSeidelSammon, JacobiSammon]


def _optimizer_for(records, seed=0, cls=GaussSeidelSammon):
    dm = build_distance_matrix(records)
    return cls(dm, initialize_positions(dm, seed))


# ---------------------------------------------------------------------------
# Прохід
# ---------------------------------------------------------------------------

@pytest.mark.parametrize("cls", VARIANTS)
@pytest.mark.parametrize("learning_rate", [0.1, 0.8, 1.0])
def test_exact_layout_does_not_move(cls, learning_rate, line_distances, line_positions):
    opt = cls(line_distances, line_positions)
    opt.start(10, learning_rate, 0.999)

    result = opt.step()

    assert np.allclose(opt.positions, line_positions, atol=1e-12)
    assert result.step_norm == pytest.approx(0.0, abs=1e-12)


@pytest.mark.parametrize("cls", VARIANTS)
def test_single_pair_update(cls):
    opt = cls(DistanceMatrix(2, [2.0]), [[0.0, 0.0], [1.0, 0.0]])
    opt.start(1, 0.25, 1.0)
    opt.step()

    # f = 0.25 * (2 - 1) / 1, delta = f * (P0 - P1)
    np.testing.assert_allclose(opt.positions, [[-0.25, 0.0], [1.25, 0.0]])


def test_gauss_seidel_sees_updates_from_the_same_sweep():
    dm = DistanceMatrix(3, [2.0, 2.0, 2.0])
    start = np.array([[0.0, 0.0], [1.0, 0.0], [0.0, 1.0]])
    lr = 0.25

    expected = start.copy()
    for i, j in [(0, 1), (0, 2), (1, 2)]:
        diff = expected[i] - expected[j]
        current = np.linalg.norm(diff)
        delta = lr * (2.0 - current) / current * diff
        expected[i] += delta
        expected[j] -= delta

    gauss_seidel = GaussSeidelSammon(dm, start)
    gauss_seidel.start(1, lr, 1.0)
    gauss_seidel.step()

    jacobi = JacobiSammon(dm, start)
    jacobi.start(1, lr, 1.0)
    jacobi.step()

    assert np.allclose(gauss_seidel.positions, expected)
    assert not np.allclose(jacobi.positions, expected)


@pytest.mark.parametrize("cls", VARIANTS)
def test_coincident_records_stay_finite(cls):
    records = np.array([[1.0, 2.0, 3.0], [1.0, 2.0, 3.0]])
    opt = _optimizer_for(records, cls=cls)
    assert np.array_equal(opt.positions[0], opt.positions[1])

    opt.start(200, 0.8, 0.999)
    for _ in range(200):
        result = opt.step()
        assert np.all(np.isfinite(opt.positions))

    assert result.meta["clamped"] == 1
    assert opt.state.finished


def test_partially_coincident_records_stay_finite():
    records = np.array([[0.0, 0.0], [0.0, 0.0], [3.0, 4.0]])
    opt = _optimizer_for(records, seed=4)
    opt.start(300, 0.8, 0.999)
    while opt.state.running:
        opt.step()
        assert np.all(np.isfinite(opt.positions))


def test_gauss_seidel_halves_stress(planar_records):
    opt = _optimizer_for(planar_records, seed=42)
    before = raw_stress(opt.distances, opt.positions)

    opt.start(1000, 0.3, 0.999)
    while opt.state.running:
        opt.step()

    after = raw_stress(opt.distances, opt.positions)
    assert opt.state.iteration == 1000
    assert after <= 0.5 * before


def test_jacobi_reduces_stress(small_records):
    opt = _optimizer_for(small_records, seed=7, cls=JacobiSammon)
    before = raw_stress(opt.distances, opt.positions)

    opt.start(1000, 0.05, 1.0)
    while opt.state.running:
        opt.step()

    after = raw_stress(opt.distances, opt.positions)
    assert np.all(np.isfinite(opt.positions))
    assert after <= 0.5 * before


def test_reproducible_with_same_seed(planar_records):
    first = _optimizer_for(planar_records, seed=9)
    second = _optimizer_for(planar_records, seed=9)
    for opt in (first, second):
        opt.start(50, 0.8, 0.999)
        while opt.state.running:
            opt.step()

    assert np.array_equal(first.positions, second.positions)


def test_clamped_distance_value():
    assert CLAMPED_DISTANCE == 1e-3


# ---------------------------------------------------------------------------
# Машина станів
# ---------------------------------------------------------------------------

def test_step_is_noop_until_started(line_distances, line_positions):
    opt = GaussSeidelSammon(line_distances, line_positions)
    assert opt.state.status == "idle"
    assert opt.step() is None
    assert opt.state.iteration == 0


def test_max_iterations_steps_reach_finished(small_records):
    opt = _optimizer_for(small_records)
    opt.start(5, 0.8, 0.999)

    results = [opt.step() for _ in range(5)]

    assert all(r is not None for r in results)
    assert [r.iteration for r in results] == [1, 2, 3, 4, 5]
    assert results[-1].meta["finished"] is True
    assert opt.state.finished and not opt.state.running
    assert opt.state.iteration == 5

    frozen = opt.positions.copy()
    assert opt.step() is None
    assert opt.state.iteration == 5
    assert np.array_equal(opt.positions, frozen)


def test_learning_rate_decays_geometrically(small_records):
    opt = _optimizer_for(small_records)
    opt.start(20, 0.8, 0.9)

    used = []
    for _ in range(7):
        used.append(opt.step().learning_rate)

    assert opt.state.learning_rate == pytest.approx(0.8 * 0.9 ** 7)
    assert used == pytest.approx([0.8 * 0.9 ** k for k in range(7)])


@pytest.mark.parametrize(
    "max_iterations, learning_rate, decay",
    [
        (0, 0.8, 0.999),
        (-3, 0.8, 0.999),
        (2.5, 0.8, 0.999),
        (True, 0.8, 0.999),
        (10, 0.0, 0.999),
        (10, -1.0, 0.999),
        (10, float("nan"), 0.999),
        (10, "fast", 0.999),
        (10, 0.8, 0.0),
        (10, 0.8, 1.5),
        (10, 0.8, float("inf")),
    ],
)
def test_start_rejects_invalid_parameters(small_records, max_iterations, learning_rate, decay):
    opt = _optimizer_for(small_records)
    before = opt.state.copy()

    with pytest.raises(InvalidInputError):
        opt.start(max_iterations, learning_rate, decay)

    assert opt.state == before


def test_decay_of_one_is_allowed(small_records):
    opt = _optimizer_for(small_records)
    opt.start(3, 0.5, 1.0)
    opt.step()
    assert opt.state.learning_rate == 0.5


def test_start_while_running_is_rejected(small_records):
    opt = _optimizer_for(small_records)
    opt.start(10, 0.8, 0.999)
    with pytest.raises(InvalidInputError):
        opt.start(10, 0.5, 0.999)
    assert opt.state.learning_rate == 0.8


def test_start_without_records_is_rejected():
    opt = GaussSeidelSammon(DistanceMatrix(0, []), np.zeros((0, 2)))
    with pytest.raises(InvalidInputError):
        opt.start(10, 0.8, 0.999)


def test_single_record_finishes_without_moving():
    opt = GaussSeidelSammon(DistanceMatrix(1, []), [[0.5, 0.5]])
    opt.start(3, 0.8, 0.999)
    while opt.state.running:
        result = opt.step()
        assert result.meta["pairs"] == 0

    assert opt.state.iteration == 3
    assert opt.positions.tolist() == [[0.5, 0.5]]


def test_stop_freezes_layout(small_records):
    opt = _optimizer_for(small_records)
    opt.stop()
    assert opt.state.status == "idle"

    opt.start(100, 0.8, 0.999)
    opt.step()
    opt.stop()
    frozen = opt.positions.copy()

    assert opt.state.status == "finished"
    assert opt.state.iteration == 1
    assert opt.step() is None
    assert np.array_equal(opt.positions, frozen)


def test_reset_restores_defaults_and_keeps_layout(small_records):
    opt = _optimizer_for(small_records)
    opt.start(4, 0.8, 0.9)
    while opt.state.running:
        opt.step()
    layout = opt.positions.copy()

    opt.reset(1.0, 0.999)

    assert opt.state.iteration == 0
    assert opt.state.learning_rate == 1.0
    assert opt.state.decay == 0.999
    assert opt.state.finished and not opt.state.running
    assert np.array_equal(opt.positions, layout)


def test_reset_is_ignored_while_running(small_records):
    opt = _optimizer_for(small_records)
    opt.start(10, 0.8, 0.9)
    opt.step()

    opt.reset(1.0, 0.999)

    assert opt.state.running
    assert opt.state.iteration == 1
    assert opt.state.learning_rate == pytest.approx(0.72)


def test_reset_rejects_invalid_defaults(small_records):
    opt = _optimizer_for(small_records)
    with pytest.raises(InvalidInputError):
        opt.reset(1.0, 0.0)


def test_restart_resumes_from_last_layout(small_records):
    opt = _optimizer_for(small_records)
    opt.start(3, 0.8, 0.999)
    while opt.state.running:
        opt.step()
    layout = opt.positions.copy()

    opt.reset(0.5, 0.999)
    opt.start(2, 0.5, 0.999)
    assert np.array_equal(opt.positions, layout)

    result = opt.step()
    assert result.learning_rate == 0.5
    assert result.iteration == 1


def test_restart_at_limit_without_reset_finishes_immediately(small_records):
    opt = _optimizer_for(small_records)
    opt.start(2, 0.8, 0.999)
    while opt.state.running:
        opt.step()
    layout = opt.positions.copy()

    opt.start(2, 0.8, 0.999)
    assert opt.state.running
    assert opt.step() is None
    assert opt.state.finished
    assert np.array_equal(opt.positions, layout)


def test_positions_are_read_only(small_records):
    opt = _optimizer_for(small_records)
    with pytest.raises(ValueError):
        opt.positions[0, 0] = 1.0


def test_wrong_positions_shape_is_rejected(line_distances):
    with pytest.raises(InvalidInputError):
        GaussSeidelSammon(line_distances, np.zeros((2, 2)))


def test_registry_lookup(line_distances, line_positions):
    assert isinstance(create_optimizer("gauss-seidel", line_distances, line_positions), GaussSeidelSammon)
    assert isinstance(create_optimizer("Jacobi", line_distances, line_positions), JacobiSammon)
    with pytest.raises(InvalidInputError):
        create_optimizer("adam", line_distances, line_positions)
