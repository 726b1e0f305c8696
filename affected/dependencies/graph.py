"""
Module Dependency Graph

Adjacency structure derived from the Module Registry. Edges point from a
dependency to its dependent (A -> B when B depends on A), so dependents
are successors and dependencies are predecessors.

The graph is expected to be a DAG, but every traversal terminates on
cyclic input as well.
"""

from __future__ import annotations
from collections import deque
from typing import Any, Dict, Iterable, List, Optional, Set
import logging

import networkx as nx

from affected.core.registry import ModuleRegistry
from affected.errors.aggregator import NoticeCollector
from affected.errors.taxonomy import Notice, NoticeKind, unknown_dependency

logger = logging.getLogger(__name__)


class DependencyGraph:
    """
    Immutable module dependency graph.

    Edges naming unknown modules are dropped at build time (and reported),
    so the graph never references a module outside the registry.
    """

    def __init__(self, graph: nx.DiGraph):
        self._graph = graph

    @classmethod
    def from_registry(
        cls,
        registry: ModuleRegistry,
        notices: Optional[NoticeCollector] = None,
    ) -> "DependencyGraph":
        """Build the graph from declared dependency edges."""
        collector = notices if notices is not None else NoticeCollector(logger)
        graph = nx.DiGraph()

        for module in registry.modules():
            graph.add_node(module.id, directory=module.directory)

        for module in registry.modules():
            for dep in sorted(module.dependencies):
                if dep not in registry:
                    collector.add(unknown_dependency(module.id, dep))
                    continue
                graph.add_edge(dep, module.id)

        try:
            cycle = nx.find_cycle(graph)
        except nx.NetworkXNoCycle:
            cycle = None

        if cycle:
            path = [edge[0] for edge in cycle] + [cycle[-1][1]]
            collector.add(Notice(
                kind=NoticeKind.DEPENDENCY_CYCLE,
                subject=path[0],
                message=f"Cyclic dependency detected: {' -> '.join(path)}",
                context={"cycle": path},
            ))

        logger.debug(
            f"Dependency graph built: {graph.number_of_nodes()} modules, "
            f"{graph.number_of_edges()} edges"
        )
        return cls(graph)

    # -------------------------------------------------------------------------
    # Traversal
    # -------------------------------------------------------------------------

    def dependents_of(self, seeds: Iterable[str], include_seeds: bool = False) -> Set[str]:
        """
        Get all modules depending on any seed (transitive closure).

        Breadth-first over reverse-dependency edges. Seeds are left out of
        the result unless include_seeds is set.
        """
        seed_set = {s for s in seeds if s in self._graph}
        visited: Set[str] = set(seed_set)
        queue = deque(sorted(seed_set))

        while queue:
            current = queue.popleft()
            for dependent in sorted(self._graph.successors(current)):
                if dependent not in visited:
                    visited.add(dependent)
                    queue.append(dependent)

        if include_seeds:
            return visited
        return visited - seed_set

    def dependencies_of(self, module_id: str) -> Set[str]:
        """Modules this module directly depends on."""
        if module_id not in self._graph:
            return set()
        return set(self._graph.predecessors(module_id))

    def direct_dependents(self, module_id: str) -> Set[str]:
        """Modules that directly depend on this module."""
        if module_id not in self._graph:
            return set()
        return set(self._graph.successors(module_id))

    def build_order(self, module_ids: Iterable[str]) -> List[str]:
        """
        Order modules so dependencies come before dependents.

        Falls back to id order when the graph has a cycle.
        """
        wanted = set(module_ids)
        try:
            ordered = list(nx.lexicographical_topological_sort(self._graph))
        except nx.NetworkXUnfeasible:
            return sorted(wanted)
        return [m for m in ordered if m in wanted] + sorted(wanted - set(self._graph.nodes))

    # -------------------------------------------------------------------------
    # Introspection
    # -------------------------------------------------------------------------

    def has_module(self, module_id: str) -> bool:
        return module_id in self._graph

    def modules(self) -> List[str]:
        return sorted(self._graph.nodes)

    def is_acyclic(self) -> bool:
        return nx.is_directed_acyclic_graph(self._graph)

    def __len__(self) -> int:
        return self._graph.number_of_nodes()

    def to_dict(self) -> Dict[str, Any]:
        """Serialize for debug output."""
        return {
            "modules": {
                m: {
                    "dependencies": sorted(self.dependencies_of(m)),
                    "dependents": sorted(self.direct_dependents(m)),
                }
                for m in self.modules()
            },
            "edges": sorted([list(e) for e in self._graph.edges]),
        }
