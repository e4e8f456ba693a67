import numpy as np
import pytest

from imgseg.foundation.genotype import Individual
from imgseg.operators.mutation import (
    SingleGeneMutation,
    creep_mutation,
    random_reset_mutation,
    sample_legal_symbols,
    single_gene_mutation,
)
from imgseg.operators.registry import resolve_mutation


def _chromosomes(graph, n=6, seed=0):
    rng = np.random.default_rng(seed)
    return np.vstack([Individual.seeded(graph, 3, rng).chromosome for _ in range(n)])


def _all_legal(X, graph):
    genes = np.arange(graph.size)
    return all(graph.valid_symbols[genes, row].all() for row in X)


def test_sample_legal_symbols_only_draws_legal(make_graph):
    graph = make_graph(3, 4)
    rng = np.random.default_rng(0)
    genes = np.repeat(np.arange(graph.size), 50)
    symbols = sample_legal_symbols(graph.valid_symbols, genes, rng)
    assert graph.valid_symbols[genes, symbols].all()
    # The corner pixel has exactly four legal symbols: none, right, down, bottom right.
    assert set(symbols[genes == 0].tolist()) == {0, 1, 4, 6}


def test_random_reset_full_probability_stays_legal(make_graph):
    graph = make_graph(5, 5)
    X = _chromosomes(graph)
    random_reset_mutation(X, 1.0, graph.valid_symbols, np.random.default_rng(1))
    assert _all_legal(X, graph)


def test_creep_stays_legal_and_in_range(make_graph):
    graph = make_graph(5, 5)
    X = _chromosomes(graph)
    creep_mutation(X, 1.0, 4.0, graph.valid_symbols, np.random.default_rng(2))
    assert X.min() >= 0 and X.max() <= 8
    assert _all_legal(X, graph)


def test_single_gene_changes_at_most_one_gene(make_graph):
    graph = make_graph(5, 5)
    X = _chromosomes(graph)
    before = X.copy()
    single_gene_mutation(X, 1.0, graph.valid_symbols, np.random.default_rng(3))
    assert ((X != before).sum(axis=1) <= 1).all()
    assert _all_legal(X, graph)


@pytest.mark.parametrize(
    "mutate",
    [
        lambda X, valid, rng: random_reset_mutation(X, 0.0, valid, rng),
        lambda X, valid, rng: creep_mutation(X, 0.0, 4.0, valid, rng),
        lambda X, valid, rng: single_gene_mutation(X, 0.0, valid, rng),
    ],
)
def test_zero_probability_is_identity(make_graph, mutate):
    graph = make_graph(4, 4)
    X = _chromosomes(graph)
    before = X.copy()
    mutate(X, graph.valid_symbols, np.random.default_rng(4))
    np.testing.assert_array_equal(X, before)


def test_shape_mismatch_is_rejected(make_graph):
    graph = make_graph(4, 4)
    X = np.zeros((2, graph.size + 1), dtype=np.int8)
    with pytest.raises(ValueError):
        random_reset_mutation(X, 0.5, graph.valid_symbols, np.random.default_rng(5))


def test_adapter_requires_symbol_table(make_graph):
    graph = make_graph(3, 3)
    X = _chromosomes(graph, n=2)
    with pytest.raises(ValueError):
        SingleGeneMutation(prob=1.0)(X, np.random.default_rng(6))
    SingleGeneMutation(prob=1.0)(X, np.random.default_rng(6), valid=graph.valid_symbols)
    assert _all_legal(X, graph)


def test_registry_builds_configured_operators():
    op = resolve_mutation("creep", {"prob": 0.3, "step": 2})
    assert (op.prob, op.step) == (0.3, 2.0)
    assert resolve_mutation("single_gene").prob == 0.2
