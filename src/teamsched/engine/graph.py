# src/teamsched/engine/graph.py
from __future__ import annotations

from collections import defaultdict, deque
from typing import Iterable, NamedTuple

from teamsched.domain.errors import (
    CycleDetectedError,
    DuplicateEdgeError,
    SelfReferenceError,
)


class DependencyEdge(NamedTuple):
    """predecessor_id must happen before successor_id."""
    predecessor_id: str
    successor_id: str


def _successors(edges: Iterable[DependencyEdge]) -> dict[str, list[str]]:
    adjacency: dict[str, list[str]] = defaultdict(list)
    for predecessor_id, successor_id in edges:
        adjacency[predecessor_id].append(successor_id)
    return adjacency


def would_create_cycle(
    edges: Iterable[DependencyEdge],
    predecessor_id: str,
    successor_id: str,
) -> bool:
    """
    Would inserting predecessor_id -> successor_id close a cycle?

    A self loop is a cycle without searching. Otherwise walk forward
    (predecessor -> successor) from successor_id over the existing edges;
    reaching predecessor_id means the new edge closes a loop.

    The edge snapshot is supplied by the caller on every call.
    """
    if predecessor_id == successor_id:
        return True

    adjacency = _successors(edges)
    seen = {successor_id}
    queue = deque([successor_id])

    while queue:
        current = queue.popleft()
        for nxt in adjacency.get(current, ()):
            if nxt == predecessor_id:
                return True
            if nxt not in seen:
                seen.add(nxt)
                queue.append(nxt)

    return False


def validate_new_edge(
    edges: Iterable[DependencyEdge],
    predecessor_id: str,
    successor_id: str,
) -> None:
    """
    Raises the first applicable rejection for a proposed edge:
    SelfReferenceError, CycleDetectedError, then DuplicateEdgeError.
    """
    if predecessor_id == successor_id:
        raise SelfReferenceError(
            "A task cannot depend on itself",
            details={"task_id": successor_id},
        )

    edges = [DependencyEdge(*e) for e in edges]
    details = {"predecessor_id": predecessor_id, "successor_id": successor_id}

    if would_create_cycle(edges, predecessor_id, successor_id):
        raise CycleDetectedError(
            f"Adding {predecessor_id} as a predecessor of {successor_id} would create a cycle",
            details=details,
        )

    if DependencyEdge(predecessor_id, successor_id) in set(edges):
        raise DuplicateEdgeError(
            f"{predecessor_id} is already a predecessor of {successor_id}",
            details=details,
        )
