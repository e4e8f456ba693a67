import numpy as np
import pytest

from imgseg.engine.ranking import (
    crowding_distance,
    dominates,
    fast_non_dominated_sort,
    rank_and_crowding,
)
from imgseg.foundation.exceptions import EmptyFrontError


def test_dominates_is_antisymmetric():
    rng = np.random.default_rng(0)
    F = rng.integers(0, 4, size=(30, 3)).astype(float)
    for a in F:
        assert not dominates(a, a)
        for b in F:
            assert not (dominates(a, b) and dominates(b, a))


def test_dominates_basic():
    assert dominates([1, 2, 3], [1, 2, 4])
    assert not dominates([1, 2, 3], [1, 2, 3])
    assert not dominates([0, 5, 0], [1, 1, 1])


def test_fronts_partition_population():
    F = np.array([[1.0, 2.0], [2.0, 1.0], [3.0, 3.0], [4.0, 4.0], [2.0, 2.0]])
    fronts, rank = fast_non_dominated_sort(F)
    assert [sorted(f.tolist()) for f in fronts] == [[0, 1], [4], [2], [3]]
    np.testing.assert_array_equal(rank, [0, 0, 2, 3, 1])


def test_first_front_is_non_dominated_set():
    rng = np.random.default_rng(5)
    F = rng.random((40, 3))
    fronts, rank = fast_non_dominated_sort(F)
    covered = np.sort(np.concatenate(fronts))
    np.testing.assert_array_equal(covered, np.arange(40))
    nd = [i for i in range(40) if not any(dominates(F[j], F[i]) for j in range(40))]
    assert sorted(fronts[0].tolist()) == nd
    # Every member of front k > 0 is dominated by someone in front k-1.
    for k in range(1, len(fronts)):
        for i in fronts[k]:
            assert any(dominates(F[j], F[i]) for j in fronts[k - 1])


def test_empty_population_raises():
    with pytest.raises(EmptyFrontError):
        fast_non_dominated_sort(np.empty((0, 3)))
    with pytest.raises(EmptyFrontError):
        crowding_distance(np.empty((0, 3)))
    with pytest.raises(EmptyFrontError):
        rank_and_crowding(np.empty((0, 3)))


def test_crowding_interior_uses_normalized_gap():
    F = np.array([[0.0, 0.0], [1.0, 1.0], [2.0, 2.0]])
    d = crowding_distance(F)
    assert np.isinf(d[0]) and np.isinf(d[2])
    assert d[1] == pytest.approx(2.0)


def test_crowding_skips_zero_spread_objective():
    F = np.array([[1.0, 5.0], [1.0, 3.0], [1.0, 4.0], [1.0, 7.0]])
    d = crowding_distance(F)
    assert np.isinf(d[1]) and np.isinf(d[3])
    assert np.isfinite(d).sum() <= 2
    assert not np.isnan(d).any()


@pytest.mark.parametrize("size", [1, 2])
def test_small_fronts_are_all_infinite(size):
    F = np.arange(size * 3, dtype=float).reshape(size, 3)
    assert np.isinf(crowding_distance(F)).all()


def test_crowding_extremes_are_infinite():
    rng = np.random.default_rng(2)
    F = rng.random((12, 3))
    d = crowding_distance(F)
    for m in range(3):
        assert np.isinf(d[np.argmin(F[:, m])])
        assert np.isinf(d[np.argmax(F[:, m])])


def test_rank_and_crowding_is_per_front():
    F = np.array([[0.0, 2.0], [1.0, 1.0], [2.0, 0.0], [3.0, 3.0]])
    fronts, rank, crowding = rank_and_crowding(F)
    assert len(fronts) == 2
    np.testing.assert_array_equal(rank, [0, 0, 0, 1])
    assert crowding[1] == pytest.approx(2.0)
    assert np.isinf(crowding[3])
