#  SPDX-License-Identifier: MPL-2.0
#  Copyright 2020-2022 John Mille <john@compose-x.io>

from pytest import raises

from ecs_topology.exceptions import CycleError
from ecs_topology.ordering import DependencyOrderer


def test_order_namespace_first():
    nodes = ["ui", "app", "ns", "db"]
    edges = [("ns", "ui"), ("ns", "app"), ("ns", "db")]
    ordered = DependencyOrderer().order(nodes, edges)
    assert ordered[0] == "ns"
    assert set(ordered[1:]) == {"ui", "app", "db"}


def test_order_respects_every_edge():
    nodes = ["rule", "svc_a", "svc_b", "td_a", "td_b", "ns"]
    edges = [
        ("ns", "svc_a"),
        ("ns", "svc_b"),
        ("td_a", "svc_a"),
        ("td_b", "svc_b"),
        ("svc_a", "rule"),
        ("svc_b", "rule"),
    ]
    ordered = DependencyOrderer().order(nodes, edges)
    assert len(ordered) == len(nodes)
    for before, after in edges:
        assert ordered.index(before) < ordered.index(after)


def test_order_keeps_declaration_order_for_independent_nodes():
    assert DependencyOrderer().order(["c", "a", "b"], []) == ["c", "a", "b"]


def test_order_is_deterministic():
    nodes = ["ns", "ui", "app", "db", "cache"]
    edges = [("ns", node) for node in nodes[1:]] + [("app", "ui")]
    first = DependencyOrderer().order(nodes, edges)
    assert first == ["ns", "app", "db", "cache", "ui"]
    for _ in range(5):
        assert DependencyOrderer().order(nodes, edges) == first


def test_duplicate_nodes_and_edges():
    ordered = DependencyOrderer().order(["a", "b", "a"], [("a", "b"), ("a", "b")])
    assert ordered == ["a", "b"]


def test_cycle():
    with raises(CycleError) as error:
        DependencyOrderer().order(
            ["ns", "a", "b", "c"], [("ns", "a"), ("a", "b"), ("b", "c"), ("c", "a")]
        )
    assert set(error.value.nodes) == {"a", "b", "c"}


def test_self_dependency():
    with raises(CycleError):
        DependencyOrderer().order(["a"], [("a", "a")])


def test_unknown_node():
    with raises(ValueError):
        DependencyOrderer().order(["a"], [("a", "b")])
