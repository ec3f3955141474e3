"""Search utilities for facility graphs.

Functions here accept any object exposing ``vertices`` (mapping of ID to
vertex), ``get_neighbors(id)`` and ``weight_between(a, b)``. They never raise
for unknown IDs: an empty path means "no route".
"""

from __future__ import annotations

import heapq
from collections import deque
from itertools import count
from typing import TYPE_CHECKING, Dict, List, Optional, Sequence

if TYPE_CHECKING:  # pragma: no cover
    from .graph import Graph

# Sentinel returned by Graph.distance_between when no path exists.
NO_PATH = -1.0


def bfs_path(graph: "Graph", start: str, goal: str) -> List[str]:
    """Return vertex IDs from start to goal with the fewest hops.

    Uses breadth-first search with parent pointers. Returns an empty list if
    either endpoint is unknown or the goal is unreachable. Path includes both
    start and goal.
    """

    if start not in graph.vertices or goal not in graph.vertices:
        return []
    # Trivial case: already at goal. Return single-node path.
    if start == goal:
        return [start]

    parent: Dict[str, str] = {}
    visited = {start}
    queue: deque[str] = deque([start])

    while queue:
        node = queue.popleft()
        # Sorted so equal-length routes resolve the same way on every run
        for neighbor in sorted(graph.get_neighbors(node)):
            if neighbor in visited:
                continue
            visited.add(neighbor)
            parent[neighbor] = node
            # BFS explores layer by layer, so the first hit is a shortest path
            if neighbor == goal:
                return _unwind(parent, start, goal)
            queue.append(neighbor)
    return []


def dijkstra_path(graph: "Graph", start: str, goal: str) -> List[str]:
    """Return vertex IDs from start to goal minimizing total edge weight.

    Binary-heap Dijkstra; weights are assumed non-negative. Ties between
    equally light routes go to whichever vertex is settled first. Returns an
    empty list when unreachable or when either endpoint is unknown.
    """

    if start not in graph.vertices or goal not in graph.vertices:
        return []

    dist: Dict[str, float] = {start: 0.0}
    parent: Dict[str, str] = {}
    settled = set()
    # Counter breaks heap ties so vertex IDs are never compared
    order = count()
    heap = [(0.0, next(order), start)]

    while heap:
        d, _, node = heapq.heappop(heap)
        if node in settled:
            continue
        settled.add(node)
        if node == goal:
            break
        for neighbor in graph.get_neighbors(node):
            weight = graph.weight_between(node, neighbor)
            if weight is None:
                continue
            candidate = d + weight
            if candidate < dist.get(neighbor, float("inf")):
                dist[neighbor] = candidate
                parent[neighbor] = node
                heapq.heappush(heap, (candidate, next(order), neighbor))

    if goal not in settled:
        return []
    return _unwind(parent, start, goal)


def path_distance(graph: "Graph", path: Sequence[str]) -> Optional[float]:
    """Sum the edge weights along ``path``; None for an empty path.

    A single-vertex path has distance 0. Consecutive vertices without a
    direct edge also yield None.
    """

    if not path:
        return None
    total = 0.0
    for a, b in zip(path, path[1:]):
        weight = graph.weight_between(a, b)
        if weight is None:
            return None
        total += weight
    return total


def is_connected(graph: "Graph") -> bool:
    """True if every vertex is reachable from an arbitrary start vertex.

    The empty graph counts as connected.
    """

    if not graph.vertices:
        return True
    start = next(iter(graph.vertices))
    visited = {start}
    queue: deque[str] = deque([start])
    while queue:
        node = queue.popleft()
        for neighbor in graph.get_neighbors(node):
            if neighbor not in visited:
                visited.add(neighbor)
                queue.append(neighbor)
    return len(visited) == len(graph.vertices)


def _unwind(parent: Dict[str, str], start: str, goal: str) -> List[str]:
    path = [goal]
    while path[-1] != start:
        path.append(parent[path[-1]])
    path.reverse()
    return path
