"""Tests for the weighted undirected graph and its search helpers."""

from zoograph.environment import (
    NO_PATH,
    Graph,
    Vertex,
    bfs_path,
    dijkstra_path,
    path_distance,
)


def make_graph(*ids: str) -> Graph:
    graph = Graph()
    for vertex_id in ids:
        graph.add_vertex(Vertex(id=vertex_id))
    return graph


def test_shortest_path_and_distance_follow_weights():
    graph = make_graph("A1", "A2", "A3")
    graph.add_edge("A1", "A2", 10)
    graph.add_edge("A2", "A3", 5)

    assert graph.find_shortest_path_by_weight("A1", "A3") == ["A1", "A2", "A3"]
    assert graph.distance_between("A1", "A3") == 15
    assert graph.distance_between("A3", "A1") == 15


def test_dijkstra_prefers_lighter_detour_over_fewer_hops():
    graph = make_graph("a", "b", "c", "d")
    graph.add_edge("a", "d", 50)
    graph.add_edge("a", "b", 5)
    graph.add_edge("b", "c", 5)
    graph.add_edge("c", "d", 5)

    assert graph.find_path("a", "d") == ["a", "d"]  # BFS counts hops
    assert graph.find_shortest_path_by_weight("a", "d") == ["a", "b", "c", "d"]
    assert graph.try_distance("a", "d") == 15


def test_unreachable_distance_uses_sentinel_not_exception():
    graph = make_graph("x", "y")

    assert graph.distance_between("x", "y") == NO_PATH == -1.0
    assert graph.try_distance("x", "y") is None
    assert graph.find_path("x", "y") == []
    assert graph.find_shortest_path_by_weight("x", "y") == []


def test_unknown_ids_are_total():
    graph = make_graph("x")

    assert graph.get_neighbors("ghost") == set()
    assert graph.find_path("x", "ghost") == []
    assert graph.distance_between("ghost", "x") == NO_PATH
    assert graph.remove_vertex("ghost") is False
    assert graph.remove_edge("x", "ghost") == 0
    assert graph.get_edge("x", "ghost") is None


def test_path_to_self_is_single_vertex():
    graph = make_graph("solo")

    assert bfs_path(graph, "solo", "solo") == ["solo"]
    assert dijkstra_path(graph, "solo", "solo") == ["solo"]
    assert graph.distance_between("solo", "solo") == 0


def test_add_edge_requires_both_vertices():
    graph = make_graph("a")

    assert graph.add_edge("a", "missing", 3) is False
    assert graph.edges == []


def test_edges_are_stored_in_both_directions():
    graph = make_graph("a", "b")
    graph.add_edge("a", "b", 7)

    assert len(graph.edges) == 2
    assert graph.get_neighbors("a") == {"b"}
    assert graph.get_neighbors("b") == {"a"}
    assert graph.get_edge("b", "a").weight == 7

    assert graph.remove_edge("b", "a") == 2
    assert graph.get_edge("a", "b") is None


def test_remove_vertex_drops_touching_edges():
    graph = make_graph("hub", "n1", "n2")
    graph.add_edge("hub", "n1", 1)
    graph.add_edge("hub", "n2", 1)
    graph.add_edge("n1", "n2", 1)

    assert graph.remove_vertex("hub") is True
    assert not graph.has_vertex("hub")
    for other in ("n1", "n2"):
        assert graph.get_edge("hub", other) is None
    assert graph.get_neighbors("n1") == {"n2"}


def test_add_vertex_with_same_id_replaces():
    graph = make_graph("a")
    replacement = Vertex(id="a")
    graph.add_vertex(replacement)

    assert len(graph.vertices) == 1
    assert graph.get_vertex("a") is replacement


def test_connectivity():
    assert Graph().check_connectivity() is True
    assert make_graph("only").check_connectivity() is True

    graph = make_graph("a", "b", "c")
    assert graph.check_connectivity() is False  # no edges, three vertices

    graph.add_edge("a", "b", 1)
    assert graph.check_connectivity() is False
    graph.add_edge("b", "c", 1)
    assert graph.check_connectivity() is True


def test_path_distance_helper():
    graph = make_graph("a", "b", "c")
    graph.add_edge("a", "b", 2.5)

    assert path_distance(graph, []) is None
    assert path_distance(graph, ["a"]) == 0
    assert path_distance(graph, ["a", "b"]) == 2.5
    assert path_distance(graph, ["a", "c"]) is None
