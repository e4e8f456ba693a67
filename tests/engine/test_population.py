import numpy as np

from imgseg.engine.population import Population, initial_tree_counts, initialize_population, unique_individuals
from imgseg.foundation.genotype import Individual


def test_tree_counts_stay_in_half_open_range():
    rng = np.random.default_rng(0)
    counts = initial_tree_counts(200, (3, 6), rng)
    assert counts.min() >= 3
    assert counts.max() <= 5


def test_tree_counts_with_equal_bounds():
    counts = initial_tree_counts(5, (4, 4), np.random.default_rng(0))
    assert counts.tolist() == [4] * 5


def test_initialize_population(make_graph):
    graph = make_graph(5, 6)
    population = initialize_population(graph, 6, (2, 5), np.random.default_rng(1))
    assert len(population) == 6
    assert population.F.shape == (6, 3)
    assert population.chromosomes.shape == (6, graph.size)
    for ind, row in zip(population, population.F):
        assert 2 <= ind.n_segments <= 4
        np.testing.assert_allclose(row, ind.objectives.minimization_vector())


def test_merge_and_subset(make_graph):
    graph = make_graph(4, 4)
    rng = np.random.default_rng(2)
    a = initialize_population(graph, 3, (1, 3), rng)
    b = initialize_population(graph, 2, (1, 3), rng)
    merged = a.merge(b)
    assert len(merged) == 5
    assert merged[3] is b[0]
    np.testing.assert_array_equal(merged.F[3:], b.F)

    sub = merged.subset([4, 0])
    assert sub[0] is b[1]
    assert sub[1] is a[0]
    np.testing.assert_array_equal(sub.F, np.vstack([b.F[1], a.F[0]]))


def test_empty_population_chromosomes():
    population = Population(individuals=(), F=np.empty((0, 3)))
    assert population.chromosomes.shape == (0, 0)


def test_unique_individuals_keeps_first_occurrence(make_graph):
    graph = make_graph(3, 3)
    rng = np.random.default_rng(3)
    a = Individual.seeded(graph, 2, rng)
    b = Individual.seeded(graph, 1, rng)
    twin = a.with_chromosome(a.chromosome.copy())
    result = unique_individuals([a, b, twin, b])
    assert result == [a, b]


def test_seeding_on_thread_pool_matches_serial(make_graph):
    from imgseg.foundation.eval.backends import ThreadPoolEvalBackend

    graph = make_graph(6, 6)
    serial = initialize_population(graph, 8, (2, 6), np.random.default_rng(9))
    backend = ThreadPoolEvalBackend(n_workers=3)
    try:
        pooled = initialize_population(graph, 8, (2, 6), np.random.default_rng(9), backend)
    finally:
        backend.close()
    np.testing.assert_array_equal(serial.chromosomes, pooled.chromosomes)
    np.testing.assert_allclose(serial.F, pooled.F)
