# tests/test_graph.py
import pytest

from teamsched.domain.errors import (
    CycleDetectedError,
    DuplicateEdgeError,
    SelfReferenceError,
)
from teamsched.engine.graph import DependencyEdge, validate_new_edge, would_create_cycle

CHAIN = [DependencyEdge("A", "B"), DependencyEdge("B", "C")]


class _ExplodingEdges:
    """Edge source that fails if anyone looks at it."""

    def __iter__(self):
        raise AssertionError("edges must not be read")


def test_closing_a_chain_is_a_cycle():
    assert would_create_cycle(CHAIN, "C", "A")
    assert would_create_cycle(CHAIN, "B", "A")


def test_unrelated_or_forward_edges_are_fine():
    assert not would_create_cycle(CHAIN, "A", "D")
    assert not would_create_cycle(CHAIN, "A", "C")  # shortcut, still a DAG
    assert not would_create_cycle([], "A", "B")


def test_plain_tuples_are_accepted_as_edges():
    assert would_create_cycle([("A", "B"), ("B", "C")], "C", "A")


def test_self_loop_is_rejected_without_reading_edges():
    assert would_create_cycle(_ExplodingEdges(), "X", "X")
    with pytest.raises(SelfReferenceError) as err:
        validate_new_edge(_ExplodingEdges(), "X", "X")
    assert err.value.code == "SELF_REFERENCE"


def test_search_terminates_on_an_already_cyclic_snapshot():
    edges = [DependencyEdge("X", "Y"), DependencyEdge("Y", "X"), DependencyEdge("Y", "Z")]
    assert not would_create_cycle(edges, "Q", "X")


def test_diamond_graph():
    edges = [
        DependencyEdge("A", "B"),
        DependencyEdge("A", "C"),
        DependencyEdge("B", "D"),
        DependencyEdge("C", "D"),
    ]
    assert would_create_cycle(edges, "D", "A")
    assert not would_create_cycle(edges, "B", "C")


def test_validate_new_edge_rejects_cycles():
    with pytest.raises(CycleDetectedError) as err:
        validate_new_edge(CHAIN, "C", "A")
    assert err.value.details == {"predecessor_id": "C", "successor_id": "A"}


def test_validate_new_edge_rejects_duplicates():
    with pytest.raises(DuplicateEdgeError):
        validate_new_edge(CHAIN, "A", "B")


def test_validate_new_edge_accepts_new_edge():
    validate_new_edge(CHAIN, "C", "D")
