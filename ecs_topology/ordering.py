#  SPDX-License-Identifier: MPL-2.0
#  Copyright 2020-2022 John Mille <john@compose-x.io>

"""
Orders the resources creation so that every declared dependency is created first.
"""

from __future__ import annotations

from collections import deque

from ecs_topology.common.logging import LOG
from ecs_topology.exceptions import CycleError


class DependencyOrderer:
    """
    Topological sort (Kahn) of the creation steps. Nodes without dependency between them keep their
    declaration order, which makes the result deterministic for a given input.
    """

    def order(self, nodes, edges) -> list:
        """
        :param nodes: the hashable nodes, in declaration order
        :param edges: (before, after) pairs. `before` must be created prior to `after`
        :return: the nodes in creation order
        :rtype: list
        :raises: ValueError if an edge references an unknown node
        :raises: CycleError if the dependencies cannot be satisfied
        """
        nodes = list(dict.fromkeys(nodes))
        position = {node: index for index, node in enumerate(nodes)}
        successors = {node: [] for node in nodes}
        in_degree = {node: 0 for node in nodes}
        for before, after in dict.fromkeys(edges):
            for node in (before, after):
                if node not in position:
                    raise ValueError("Dependency references an unknown node", node)
            successors[before].append(after)
            in_degree[after] += 1

        ready = deque(node for node in nodes if not in_degree[node])
        ordered = []
        while ready:
            node = ready.popleft()
            ordered.append(node)
            released = []
            for successor in successors[node]:
                in_degree[successor] -= 1
                if not in_degree[successor]:
                    released.append(successor)
            for successor in sorted(released, key=position.get):
                ready.append(successor)

        if len(ordered) != len(nodes):
            remaining = [node for node in nodes if in_degree[node]]
            LOG.error(f"Cannot order {remaining}")
            raise CycleError(remaining)
        return ordered
