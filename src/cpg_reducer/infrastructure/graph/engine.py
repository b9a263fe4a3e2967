"""CpgGraph — AttributedGraph backed by a NetworkX MultiDiGraph.

Nodes iterate in creation order. Out-edges iterate by head creation order,
then by edge creation order, matching graphviz. Iteration works on a
snapshot of handles, so a caller may delete the node or edge it is
standing on (or the one it is about to visit) without invalidating the
walk. Handles deleted after the snapshot was taken are skipped.
"""

from __future__ import annotations

import itertools
from collections.abc import Iterator
from typing import Any

import networkx as nx

from cpg_reducer.infrastructure.graph.protocol import EdgeHandle, Handle, NodeHandle

type _Graph = nx.MultiDiGraph


class CpgGraph:
    """In-memory attributed directed multigraph.

    Attributes:
        strict: When True, creating an edge between an already connected
            ordered pair returns the existing edge instead of adding a
            parallel one (graphviz ``strict`` semantics).
    """

    def __init__(self, name: str = "G", *, strict: bool = False) -> None:
        self._graph: _Graph = nx.MultiDiGraph(name=name)
        self.strict = strict
        self._sequence: dict[NodeHandle, int] = {}
        self._counter = itertools.count()

    def __repr__(self) -> str:
        return (
            f"CpgGraph(name={self.name!r}, nodes={self.number_of_nodes()}, "
            f"edges={self.number_of_edges()}, strict={self.strict})"
        )

    @property
    def name(self) -> str:
        return str(self._graph.graph.get("name", ""))

    # ── Mutation ─────────────────────────────────────────────────────

    def create_node(self, name: str) -> NodeHandle:
        """Return the node called *name*, creating it on first use."""
        if name not in self._graph:
            self._graph.add_node(name)
            self._sequence[name] = next(self._counter)
        return name

    def create_edge(self, tail: NodeHandle, head: NodeHandle) -> EdgeHandle:
        """Add a directed edge, creating missing endpoints."""
        self.create_node(tail)
        self.create_node(head)
        if self.strict:
            existing = self._graph.get_edge_data(tail, head)
            if existing:
                return (tail, head, next(iter(existing)))
        key = self._graph.add_edge(tail, head)
        return (tail, head, key)

    def delete_node(self, node: NodeHandle) -> None:
        self._graph.remove_node(node)
        del self._sequence[node]

    def delete_edge(self, edge: EdgeHandle) -> None:
        self._graph.remove_edge(*edge)

    # ── Traversal ────────────────────────────────────────────────────

    def iterate_nodes(self) -> Iterator[NodeHandle]:
        for node in list(self._graph.nodes):
            if node in self._graph:
                yield node

    def iterate_outgoing_edges(self, node: NodeHandle) -> Iterator[EdgeHandle]:
        if node not in self._graph:
            return
        edges = sorted(
            self._graph.out_edges(node, keys=True),
            key=lambda edge: self._sequence[edge[1]],
        )
        for edge in edges:
            if self._graph.has_edge(*edge):
                yield edge

    def head(self, edge: EdgeHandle) -> NodeHandle:
        return edge[1]

    def degree(self, node: NodeHandle) -> int:
        """Number of incident edges, incoming plus outgoing."""
        return int(self._graph.in_degree(node)) + int(self._graph.out_degree(node))

    def has_node(self, node: NodeHandle) -> bool:
        return node in self._graph

    def number_of_nodes(self) -> int:
        return int(self._graph.number_of_nodes())

    def number_of_edges(self) -> int:
        return int(self._graph.number_of_edges())

    # ── Attributes ───────────────────────────────────────────────────

    def get_attribute(self, handle: Handle, key: str) -> str | None:
        """Return the attribute value, or None if it was never declared."""
        value = self._attributes(handle).get(key)
        return None if value is None else str(value)

    def set_attribute(self, handle: Handle, key: str, value: str) -> None:
        self._attributes(handle)[key] = value

    def _attributes(self, handle: Handle) -> dict[str, Any]:
        if isinstance(handle, tuple):
            return self._graph.edges[handle]
        return self._graph.nodes[handle]
