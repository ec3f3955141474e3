"""Weighted undirected graph over opaque vertex IDs.

Vertices are keyed by ``id``; edges are stored once per direction so
neighbor lookup never has to consider orientation. All queries are total:
unknown IDs produce empty results or ``False`` rather than exceptions.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Set
from uuid import uuid4

from .helpers import NO_PATH, bfs_path, dijkstra_path, is_connected, path_distance


def new_id() -> str:
    return str(uuid4())


@dataclass(eq=False)
class Vertex:
    """Graph node identified by an immutable string ID."""

    id: str = field(default_factory=new_id)


@dataclass(frozen=True)
class Edge:
    """One direction of a weighted connection between two vertices."""

    from_id: str
    to_id: str
    weight: float = 0.0

    def touches(self, vertex_id: str) -> bool:
        return self.from_id == vertex_id or self.to_id == vertex_id

    def joins(self, a: str, b: str) -> bool:
        """True if this edge connects ``a`` and ``b`` in either direction."""
        return (self.from_id == a and self.to_id == b) or (
            self.from_id == b and self.to_id == a
        )


@dataclass
class Graph:
    """Vertex map plus a flat list of directed edge records."""

    vertices: Dict[str, Vertex] = field(default_factory=dict)
    edges: List[Edge] = field(default_factory=list)

    # ------------------------------------------------------------------
    # Vertices
    # ------------------------------------------------------------------

    def add_vertex(self, vertex: Vertex) -> None:
        # Same ID replaces the previous vertex (last write wins)
        self.vertices[vertex.id] = vertex

    def get_vertex(self, vertex_id: str) -> Optional[Vertex]:
        return self.vertices.get(vertex_id)

    def has_vertex(self, vertex_id: str) -> bool:
        return vertex_id in self.vertices

    def remove_vertex(self, vertex_id: str) -> bool:
        """Drop the vertex and every edge touching it. No-op when absent."""
        if vertex_id not in self.vertices:
            return False
        del self.vertices[vertex_id]
        self.edges = [edge for edge in self.edges if not edge.touches(vertex_id)]
        return True

    # ------------------------------------------------------------------
    # Edges
    # ------------------------------------------------------------------

    def add_edge(self, from_id: str, to_id: str, weight: float) -> bool:
        """Connect two existing vertices. Returns False if either is missing."""
        if from_id not in self.vertices or to_id not in self.vertices:
            return False
        self.edges.append(Edge(from_id, to_id, weight))
        self.edges.append(Edge(to_id, from_id, weight))
        return True

    def remove_edge(self, from_id: str, to_id: str) -> int:
        """Remove every record for the unordered pair; returns how many went."""
        before = len(self.edges)
        self.edges = [edge for edge in self.edges if not edge.joins(from_id, to_id)]
        return before - len(self.edges)

    def get_edge(self, from_id: str, to_id: str) -> Optional[Edge]:
        for edge in self.edges:
            if edge.joins(from_id, to_id):
                return edge
        return None

    def get_neighbors(self, vertex_id: str) -> Set[str]:
        neighbors: Set[str] = set()
        for edge in self.edges:
            if edge.from_id == vertex_id:
                neighbors.add(edge.to_id)
            elif edge.to_id == vertex_id:
                neighbors.add(edge.from_id)
        return neighbors

    def weight_between(self, a: str, b: str) -> Optional[float]:
        """Lightest direct edge weight between two vertices, if any."""
        weights = [edge.weight for edge in self.edges if edge.joins(a, b)]
        return min(weights) if weights else None

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def find_path(self, start_id: str, end_id: str) -> List[str]:
        return bfs_path(self, start_id, end_id)

    def find_shortest_path_by_weight(self, start_id: str, end_id: str) -> List[str]:
        return dijkstra_path(self, start_id, end_id)

    def try_distance(self, from_id: str, to_id: str) -> Optional[float]:
        """Total weight of the lightest path, or None when unreachable."""
        return path_distance(self, self.find_shortest_path_by_weight(from_id, to_id))

    def distance_between(self, from_id: str, to_id: str) -> float:
        """Total weight of the lightest path; ``NO_PATH`` (-1.0) when unreachable."""
        distance = self.try_distance(from_id, to_id)
        return NO_PATH if distance is None else distance

    def check_connectivity(self) -> bool:
        return is_connected(self)
