import numpy as np
import pytest

from imgseg.engine.config import SegmentationConfig
from imgseg.engine.weighted import WeightedSegmentationGA, fitness_order, random_distinct_pairs


def _config(**overrides):
    base = {
        "pop_size": 10,
        "generations": 3,
        "segments": (2, 5),
        "mode": "weighted",
        "offspring_factor": 2,
        "mutation": ("single_gene", {"prob": 0.9}),
    }
    base.update(overrides)
    return SegmentationConfig.from_dict(base)


def test_random_distinct_pairs():
    rng = np.random.default_rng(0)
    pairs = random_distinct_pairs(5, 500, rng)
    assert pairs.shape == (500, 2)
    assert (pairs[:, 0] != pairs[:, 1]).all()
    assert pairs.min() >= 0 and pairs.max() <= 4
    assert set(np.unique(pairs).tolist()) == set(range(5))


def test_random_distinct_pairs_needs_two_individuals():
    with pytest.raises(ValueError):
        random_distinct_pairs(1, 3, np.random.default_rng(0))


def test_pair_count_follows_offspring_factor():
    assert WeightedSegmentationGA(_config()).n_pairs == 10
    assert WeightedSegmentationGA(_config(pop_size=3, offspring_factor=1)).n_pairs == 1


@pytest.mark.smoke
def test_weighted_run(make_graph):
    graph = make_graph(5, 6)
    cfg = _config()
    result = WeightedSegmentationGA(cfg).run(graph, seed=4)

    assert result.mode == "weighted"
    assert len(result.history) == 3
    best = [s.best_fitness for s in result.history]
    assert all(later >= earlier for earlier, later in zip(best, best[1:]))

    fitness = [ind.weighted_fitness(cfg.weights) for ind in result.population]
    assert fitness == sorted(fitness, reverse=True)
    assert len(result.front) == 1
    assert result.front[0] is result.population[0]
    assert fitness[0] == pytest.approx(best[-1])


def test_fitness_order_is_descending(make_graph):
    from imgseg.engine.population import initialize_population

    graph = make_graph(4, 4)
    cfg = _config()
    population = initialize_population(graph, 6, (1, 4), np.random.default_rng(0))
    order, fitness = fitness_order(population, cfg.weights)
    assert np.all(np.diff(fitness[order]) <= 0)
