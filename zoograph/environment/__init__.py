"""Graph layer for zoograph facilities."""

from .graph import Edge, Graph, Vertex, new_id
from .schemas import EnclosureState, FacilityGraphState, PathState
from .helpers import (
    NO_PATH,
    bfs_path,
    dijkstra_path,
    is_connected,
    path_distance,
)

__all__ = [
    "Edge",
    "Graph",
    "Vertex",
    "new_id",
    "EnclosureState",
    "FacilityGraphState",
    "PathState",
    "NO_PATH",
    "bfs_path",
    "dijkstra_path",
    "is_connected",
    "path_distance",
]
