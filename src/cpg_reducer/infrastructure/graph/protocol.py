"""AttributedGraph — the storage capabilities the pipeline stages rely on.

Reduce, merge and emit only talk to this protocol, never to NetworkX
directly. Node handles are node names; edge handles are
``(tail, head, key)`` triples so parallel edges stay distinguishable.
"""

from __future__ import annotations

from collections.abc import Iterator
from typing import Protocol, runtime_checkable

type NodeHandle = str
type EdgeHandle = tuple[str, str, int]
type Handle = NodeHandle | EdgeHandle


@runtime_checkable
class AttributedGraph(Protocol):
    """Directed multigraph with string-keyed node and edge attributes."""

    @property
    def name(self) -> str: ...

    def create_node(self, name: str) -> NodeHandle: ...

    def create_edge(self, tail: NodeHandle, head: NodeHandle) -> EdgeHandle: ...

    def delete_node(self, node: NodeHandle) -> None: ...

    def delete_edge(self, edge: EdgeHandle) -> None: ...

    def iterate_nodes(self) -> Iterator[NodeHandle]: ...

    def iterate_outgoing_edges(self, node: NodeHandle) -> Iterator[EdgeHandle]: ...

    def head(self, edge: EdgeHandle) -> NodeHandle: ...

    def degree(self, node: NodeHandle) -> int: ...

    def has_node(self, node: NodeHandle) -> bool: ...

    def get_attribute(self, handle: Handle, key: str) -> str | None: ...

    def set_attribute(self, handle: Handle, key: str, value: str) -> None: ...

    def number_of_nodes(self) -> int: ...

    def number_of_edges(self) -> int: ...
