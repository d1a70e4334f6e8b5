"""Tests for the pure graph analysis helpers."""

import math

import pytest

from netmind.graph import (
    APPROXIMATION_NOTE,
    articulation_points,
    articulation_points_and_bridges,
    as_number,
    bridges,
    build_adjacency,
    connected_components,
    cost_efficiency,
    degree_distribution,
    estimate_fiber_latency,
    haversine_km,
    link_disjoint_paths,
    link_label,
    redundancy_score,
)
from netmind.graph.degree import min_connected_degree
from netmind.graph.geo import EARTH_RADIUS_KM, FIBER_MS_PER_KM
from netmind.graph.numeric import tidy
from netmind.models import NetworkSnapshot


def _snapshot(node_ids, pairs):
    return NetworkSnapshot.from_dict({
        "nodes": [{"id": n, "label": n.upper()} for n in node_ids],
        "links": [
            {"id": f"l{i}", "source": s, "target": t}
            for i, (s, t) in enumerate(pairs)
        ],
    })


class TestNumeric:

    @pytest.mark.parametrize("value", [None, "5", float("nan"), float("inf"), True, [1]])
    def test_unusable_values_fall_back(self, value):
        assert as_number(value) == 0.0
        assert as_number(value, default=7.0) == 7.0

    def test_numbers_pass_through(self):
        assert as_number(3) == 3.0
        assert as_number(2.5) == 2.5

    def test_tidy_turns_whole_floats_into_ints(self):
        assert tidy(10.0) == 10
        assert isinstance(tidy(10.0), int)
        assert tidy(2.5) == 2.5


class TestAdjacency:

    def test_isolated_nodes_have_an_entry(self):
        adj = build_adjacency(_snapshot("abc", [("a", "b")]))
        assert adj["c"] == []

    def test_links_to_unknown_nodes_are_ignored(self):
        adj = build_adjacency(_snapshot("ab", [("a", "ghost"), ("a", "b")]))
        assert [n.node for n in adj["a"]] == ["b"]
        assert "ghost" not in adj

    def test_legacy_endpoint_fields(self):
        snapshot = NetworkSnapshot.from_dict({
            "nodes": [{"id": "a"}, {"id": "b"}],
            "links": [{"id": "l", "a": "a", "b": "b"}],
        })
        adj = build_adjacency(snapshot)
        assert [n.node for n in adj["b"]] == ["a"]

    def test_malformed_snapshot_fields_are_dropped(self):
        snapshot = NetworkSnapshot.from_dict({"nodes": 5, "links": "l1", "groups": [{"id": "g"}, 3]})
        assert snapshot.nodes == ()
        assert snapshot.links == ()
        assert snapshot.groups == ({"id": "g"},)
        assert NetworkSnapshot.from_dict(["not", "a", "dict"]) == NetworkSnapshot()

    def test_link_label(self):
        link = {"source": "a", "target": "b", "label": "Atlantic"}
        labels = {"a": "Lisbon", "b": "New York"}
        assert link_label(link, labels) == "Lisbon ↔ New York"
        assert link_label(link, labels, with_name=True) == "Lisbon ↔ New York (Atlantic)"


class TestConnectivity:

    def test_components(self):
        adj = build_adjacency(_snapshot("abcde", [("a", "b"), ("c", "d")]))
        components = connected_components(adj)
        assert sorted(sorted(c) for c in components) == [["a", "b"], ["c", "d"], ["e"]]

    def test_path_has_one_cut_node_and_two_bridges(self, path_snapshot):
        adj = build_adjacency(path_snapshot)
        cuts = articulation_points_and_bridges(adj)

        assert cuts.articulation_points == ["b"]
        assert sorted(link["id"] for link in cuts.bridges) == ["l1", "l2"]

    def test_four_node_path_has_two_cut_nodes_and_three_bridges(self):
        adj = build_adjacency(_snapshot("abcd", [("a", "b"), ("b", "c"), ("c", "d")]))
        cuts = articulation_points_and_bridges(adj)

        assert sorted(cuts.articulation_points) == ["b", "c"]
        assert sorted(link["id"] for link in cuts.bridges) == ["l0", "l1", "l2"]

    def test_ring_has_no_single_point_of_failure(self, ring_snapshot):
        adj = build_adjacency(ring_snapshot)
        assert articulation_points(adj) == []
        assert bridges(adj) == []

    def test_root_with_two_children_is_a_cut_node(self):
        adj = build_adjacency(_snapshot("bac", [("b", "a"), ("b", "c")]))
        assert articulation_points(adj) == ["b"]

    def test_parallel_links_are_not_bridges(self):
        adj = build_adjacency(_snapshot("abc", [("a", "b"), ("a", "b"), ("b", "c")]))
        cuts = articulation_points_and_bridges(adj)

        assert cuts.articulation_points == ["b"]
        assert [link["id"] for link in cuts.bridges] == ["l2"]

    def test_disconnected_graph_is_analysed_per_component(self):
        adj = build_adjacency(_snapshot("abcxyz", [("a", "b"), ("b", "c"), ("x", "y"), ("y", "z")]))
        assert sorted(articulation_points(adj)) == ["b", "y"]
        assert len(bridges(adj)) == 4

    def test_long_chain_does_not_hit_recursion_limit(self):
        ids = [f"n{i}" for i in range(3000)]
        snapshot = NetworkSnapshot.from_dict({
            "nodes": [{"id": n} for n in ids],
            "links": [{"source": s, "target": t} for s, t in zip(ids, ids[1:])],
        })
        cuts = articulation_points_and_bridges(build_adjacency(snapshot))
        assert len(cuts.articulation_points) == 2998
        assert len(cuts.bridges) == 2999


class TestDegree:

    def test_path_distribution(self, path_snapshot):
        dist = degree_distribution(build_adjacency(path_snapshot))

        assert (dist.min, dist.max, dist.average) == (1, 2, 1.3)
        assert dist.leaf_nodes == ["a", "c"]
        assert dist.to_dict() == {
            "min": 1, "max": 2, "average": 1.3, "leaf_nodes": 2, "isolated_nodes": 0,
        }

    def test_redundancy_scores(self, path_snapshot, ring_snapshot):
        assert redundancy_score(degree_distribution(build_adjacency(ring_snapshot))) == "good"
        assert redundancy_score(degree_distribution(build_adjacency(path_snapshot))) == "partial"
        assert redundancy_score(degree_distribution(build_adjacency(_snapshot("ab", [])))) == "none"

    def test_isolated_node_beside_a_ring(self):
        ring = [("a", "b"), ("b", "c"), ("c", "d"), ("d", "a")]
        dist = degree_distribution(build_adjacency(_snapshot("abcde", ring)))

        assert dist.isolated_nodes == ["e"]
        assert dist.to_dict()["isolated_nodes"] == 1
        assert dist.min == 0
        assert min_connected_degree(dist) == 2
        assert redundancy_score(dist) == "good"

    def test_empty_graph(self):
        dist = degree_distribution({})
        assert dist.to_dict()["average"] == 0.0


class TestDisjointPaths:

    def test_ring_has_two_paths(self, ring_snapshot):
        assert link_disjoint_paths(build_adjacency(ring_snapshot), "a", "c") == 2

    def test_chain_has_one_path(self, path_snapshot):
        assert link_disjoint_paths(build_adjacency(path_snapshot), "a", "c") == 1

    def test_parallel_links_count_separately(self):
        adj = build_adjacency(_snapshot("ab", [("a", "b"), ("a", "b")]))
        assert link_disjoint_paths(adj, "a", "b") == 2

    def test_degenerate_endpoints(self, ring_snapshot):
        adj = build_adjacency(ring_snapshot)
        assert link_disjoint_paths(adj, "a", "a") == 0
        assert link_disjoint_paths(adj, "a", "ghost") == 0

    def test_attempts_are_bounded(self):
        adj = build_adjacency(_snapshot("ab", [("a", "b")] * 30))
        assert link_disjoint_paths(adj, "a", "b") == 20
        assert link_disjoint_paths(adj, "a", "b", max_attempts=5) == 5

    def test_note_mentions_approximation(self):
        assert "Approximate" in APPROXIMATION_NOTE


class TestCost:

    def test_rows_sorted_cheapest_first(self):
        links = [
            {"source": "a", "target": "b", "price_usd": 1000, "bandwidth_gbps": 10},
            {"source": "b", "target": "c", "price_usd": 1000, "bandwidth_gbps": 100},
            {"source": "c", "target": "a", "price_usd": 500},
        ]
        rows = cost_efficiency(links, {"a": "A", "b": "B", "c": "C"})

        assert [r["cost_per_gbps"] for r in rows] == [10.0, 100.0]
        assert rows[0]["link"] == "B ↔ C"


class TestGeo:

    def test_zero_distance(self):
        result = estimate_fiber_latency(40.0, -3.7, 40.0, -3.7)
        assert result["straight_line_km"] == 0
        assert result["one_way_latency_ms"] == 0
        assert result["round_trip_latency_ms"] == 0

    def test_london_paris(self):
        straight = haversine_km(51.5074, -0.1278, 48.8566, 2.3522)
        result = estimate_fiber_latency(51.5074, -0.1278, 48.8566, 2.3522)

        assert 330 < straight < 350
        assert result["route_factor"] == 1.3
        assert result["straight_line_km"] == round(straight)
        assert result["cable_route_km"] == round(straight * 1.3)
        assert result["one_way_latency_ms"] == round(straight * 1.3 * FIBER_MS_PER_KM, 1)
        assert result["round_trip_latency_ms"] == round(straight * 1.3 * FIBER_MS_PER_KM * 2, 1)

    def test_route_factor_selection(self):
        assert estimate_fiber_latency(0, 0, 0, 10, route="subsea")["route_factor"] == 1.5
        assert estimate_fiber_latency(0, 0, 0, 10, route_factor=2.0)["route_factor"] == 2.0
        assert estimate_fiber_latency(0, 0, 0, 10, route_factor=0)["route_factor"] == 1.3

    def test_missing_coordinates_stay_finite(self):
        result = estimate_fiber_latency(None, "x", float("nan"), 10)
        assert all(math.isfinite(v) for v in result.values())

    def test_antipodal_points(self):
        straight = haversine_km(-82, -180, 82, 0)
        assert straight == pytest.approx(math.pi * EARTH_RADIUS_KM)

        result = estimate_fiber_latency(-82, -180, 82, 0)
        assert result["straight_line_km"] == round(math.pi * EARTH_RADIUS_KM)

    @pytest.mark.parametrize("lat", [-89.5, -82, -45.25, -1e-9, 0, 33.3, 82])
    def test_antipodal_sweep_stays_in_domain(self, lat):
        for lon in range(-180, 181, 15):
            assert math.isfinite(haversine_km(lat, lon, -lat, lon + 180))
