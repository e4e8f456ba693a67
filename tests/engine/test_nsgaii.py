import numpy as np
import pytest

from imgseg.engine.config import SegmentationConfig
from imgseg.engine.nsgaii import SegmentationNSGAII, first_front
from imgseg.engine.ranking import dominates
from imgseg.foundation.eval.backends import SerialEvalBackend, ThreadPoolEvalBackend
from imgseg.foundation.exceptions import InvalidOperatorError


def _config(**overrides):
    base = {
        "pop_size": 8,
        "generations": 3,
        "segments": (2, 5),
        "selection": ("tournament", {"size": 2, "replacement": True}),
        "mutation": ("single_gene", {"prob": 0.9}),
    }
    base.update(overrides)
    return SegmentationConfig.from_dict(base)


@pytest.mark.smoke
def test_run_produces_consistent_result(make_graph):
    graph = make_graph(6, 7)
    result = SegmentationNSGAII(_config()).run(graph, seed=0)

    assert result.mode == "nsga2"
    assert len(result.history) == 4
    assert [s.generation for s in result.history] == [1, 2, 3, 4]
    assert 1 <= len(result.population) <= 8
    assert result.F.shape == (len(result.population), 3)

    keys = {ind.chromosome.tobytes() for ind in result.population}
    assert len(keys) == len(result.population)

    genes = np.arange(graph.size)
    for ind, row in zip(result.population, result.F):
        assert graph.valid_symbols[genes, ind.chromosome].all()
        np.testing.assert_allclose(row, ind.objectives.minimization_vector())

    assert result.front
    front_F = [ind.objectives.minimization_vector() for ind in result.front]
    for a in front_F:
        assert not any(dominates(b, a) for b in result.F)


@pytest.mark.smoke
def test_same_seed_same_result(make_graph):
    graph = make_graph(5, 5)
    a = SegmentationNSGAII(_config()).run(graph, seed=11)
    b = SegmentationNSGAII(_config()).run(graph, seed=11)
    np.testing.assert_array_equal(a.population.chromosomes, b.population.chromosomes)
    np.testing.assert_array_equal(a.F, b.F)


@pytest.mark.smoke
def test_thread_backend_matches_serial(make_graph):
    graph = make_graph(5, 6)
    serial = SegmentationNSGAII(_config(), eval_backend=SerialEvalBackend()).run(graph, seed=3)
    backend = ThreadPoolEvalBackend(n_workers=2)
    try:
        threaded = SegmentationNSGAII(_config(), eval_backend=backend).run(graph, seed=3)
    finally:
        backend.close()
    np.testing.assert_allclose(serial.F, threaded.F)


@pytest.mark.smoke
def test_best_objective_values_never_regress(make_graph):
    graph = make_graph(6, 6)
    initial = SegmentationNSGAII(_config(generations=0)).run(graph, seed=5)
    evolved = SegmentationNSGAII(_config(generations=4)).run(graph, seed=5)
    assert len(initial.history) == 1
    assert (evolved.F.min(axis=0) <= initial.F.min(axis=0) + 1e-9).all()


@pytest.mark.smoke
def test_elitist_parent_selection_and_two_point(make_graph):
    graph = make_graph(4, 5)
    cfg = _config(selection="elitist", crossover=("two_point", {"prob": 1.0}))
    result = SegmentationNSGAII(cfg).run(graph, seed=2)
    assert len(result.history) == 4
    assert result.front


def test_unknown_operator_fails_at_construction():
    with pytest.raises(InvalidOperatorError):
        SegmentationNSGAII(_config(crossover="uniform"))
    with pytest.raises(InvalidOperatorError):
        SegmentationNSGAII(_config(selection="roulette"))


def test_first_front_of_population(make_graph):
    graph = make_graph(4, 4)
    result = SegmentationNSGAII(_config(generations=1)).run(graph, seed=1)
    front = first_front(result.population)
    assert [id(ind) for ind in front] == [id(ind) for ind in result.front]
