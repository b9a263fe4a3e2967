"""DOT input — turn a graph description file into CpgGraph instances.

pydot does the parsing; conversion reproduces how graphviz itself stores
what it read, because the CPG extractor writes its attributes with
graphviz in mind:

- Outer DOT quotes are removed and ``\\"`` becomes ``"``. Every other
  escape (notably a literal ``\\n``) is kept as written.
- ``node [...]`` / ``edge [...]`` defaults apply to objects created after
  the statement. At the root, a key's first declaration also reaches the
  objects created before it.
- An attribute set on any node (or edge) is declared for all of them, so
  objects that never set it read back ``""`` rather than nothing.
- Nodes referenced only by an edge are created on first reference.
- Subgraphs are flattened into the root graph in statement order and
  endpoint ports are dropped. A subgraph endpoint (``a -> {b c}``) stands
  for its members, one edge per tail/head pair.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from pathlib import Path
from typing import Any

import pydot

from cpg_reducer.errors import DotParseError
from cpg_reducer.infrastructure.graph.engine import CpgGraph

logger = logging.getLogger(__name__)

_DEFAULT_STATEMENTS = frozenset({"node", "edge", "graph"})


def read_dot_graphs(path: Path) -> Iterator[CpgGraph]:
    """Yield one CpgGraph per graph in *path*, converting lazily.

    An empty (or whitespace-only) file yields nothing.

    Raises:
        DotParseError: The file cannot be read or is not valid DOT.
    """
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise DotParseError(path, str(exc)) from exc

    if not text.strip():
        logger.debug("Empty input file %s", path)
        return

    try:
        parsed = pydot.graph_from_dot_data(text)
    except Exception as exc:
        raise DotParseError(path, str(exc)) from exc
    if not parsed:
        raise DotParseError(path, "not a valid DOT graph")

    for index, dot in enumerate(parsed):
        graph = _DotConverter(dot).convert()
        logger.debug(
            "Read graph %d (%s) from %s: %d nodes, %d edges",
            index,
            graph.name,
            path,
            graph.number_of_nodes(),
            graph.number_of_edges(),
        )
        yield graph


def unquote(text: str) -> str:
    """Strip one level of DOT quoting from an ID or attribute value."""
    if len(text) >= 2 and text[0] == '"' and text[-1] == '"':
        text = text[1:-1]
    return text.replace('\\"', '"').replace("\\\n", "")


def _endpoint_name(raw: str) -> str:
    """Return the node ID of an edge endpoint, dropping any port."""
    if raw.startswith('"'):
        index = 1
        while index < len(raw):
            if raw[index] == "\\":
                index += 2
                continue
            if raw[index] == '"':
                return unquote(raw[: index + 1])
            index += 1
        return unquote(raw)
    return raw.split(":", 1)[0]


def _statements(
    graph: pydot.Graph, *, root: bool = True
) -> Iterator[tuple[pydot.Node | pydot.Edge, bool]]:
    """Yield ``(statement, at_root)`` in source order, subgraphs inlined."""
    children: list[Any] = [
        *graph.get_node_list(),
        *graph.get_edge_list(),
        *graph.get_subgraph_list(),
    ]
    children.sort(key=lambda child: child.obj_dict.get("sequence", 0))
    for child in children:
        if isinstance(child, pydot.Graph):
            yield from _statements(child, root=False)
        else:
            yield child, root


def _as_subgraph(endpoint: Any) -> pydot.Graph:
    """pydot hands out ``{a b}`` endpoints as a graph or its frozen obj_dict."""
    if isinstance(endpoint, pydot.Graph):
        return endpoint
    return pydot.Subgraph(obj_dict=endpoint)


class _DotConverter:
    """Builds a CpgGraph from one parsed pydot graph."""

    def __init__(self, dot: pydot.Dot) -> None:
        self._dot = dot
        self._graph = CpgGraph(
            unquote(dot.get_name() or ""),
            strict=bool(dot.obj_dict.get("strict")),
        )
        self._node_defaults: dict[str, str] = {}
        self._edge_defaults: dict[str, str] = {}
        self._node_keys: set[str] = set()
        self._edge_keys: set[str] = set()

    def convert(self) -> CpgGraph:
        self._apply(_statements(self._dot))
        self._declare_missing()
        return self._graph

    def _apply(self, statements: Iterator[tuple[pydot.Node | pydot.Edge, bool]]) -> list[str]:
        """Apply *statements* and return the nodes they mention, in order."""
        mentioned: list[str] = []
        for statement, at_root in statements:
            if isinstance(statement, pydot.Edge):
                mentioned.extend(self._add_edge(statement))
            else:
                node = self._add_node(statement, at_root=at_root)
                if node is not None:
                    mentioned.append(node)
        return list(dict.fromkeys(mentioned))

    @staticmethod
    def _attributes(statement: pydot.Node | pydot.Edge) -> dict[str, str]:
        return {
            str(key): unquote(str(value)) for key, value in statement.get_attributes().items()
        }

    def _ensure_node(self, name: str) -> str:
        if not self._graph.has_node(name):
            node = self._graph.create_node(name)
            for key, value in self._node_defaults.items():
                self._graph.set_attribute(node, key, value)
        return name

    def _add_node(self, statement: pydot.Node, *, at_root: bool) -> str | None:
        raw_name = statement.get_name()
        attributes = self._attributes(statement)
        if raw_name in _DEFAULT_STATEMENTS:
            if raw_name == "node":
                self._declare_defaults(attributes, at_root=at_root, edges=False)
            elif raw_name == "edge":
                self._declare_defaults(attributes, at_root=at_root, edges=True)
            return None

        node = self._ensure_node(unquote(raw_name))
        for key, value in attributes.items():
            self._graph.set_attribute(node, key, value)
        self._node_keys.update(attributes)
        return node

    def _declare_defaults(self, attributes: dict[str, str], *, at_root: bool, edges: bool) -> None:
        """Record ``node``/``edge`` defaults.

        A root-level statement that declares a key for the first time also
        gives that value to every object created before it; anywhere else
        earlier objects read back ``""``.
        """
        keys = self._edge_keys if edges else self._node_keys
        defaults = self._edge_defaults if edges else self._node_defaults
        if at_root:
            for key, value in attributes.items():
                if key not in keys:
                    self._backfill(key, value, edges=edges)
        defaults.update(attributes)
        keys.update(attributes)

    def _backfill(self, key: str, value: str, *, edges: bool) -> None:
        for node in self._graph.iterate_nodes():
            if not edges:
                self._graph.set_attribute(node, key, value)
                continue
            for edge in self._graph.iterate_outgoing_edges(node):
                self._graph.set_attribute(edge, key, value)

    def _endpoint_nodes(self, endpoint: Any) -> list[str]:
        if isinstance(endpoint, str):
            return [self._ensure_node(_endpoint_name(endpoint))]
        return self._apply(_statements(_as_subgraph(endpoint), root=False))

    def _add_edge(self, statement: pydot.Edge) -> list[str]:
        """Create one edge per tail/head pair; ``{a b}`` endpoints expand to members."""
        tails = self._endpoint_nodes(statement.get_source())
        heads = self._endpoint_nodes(statement.get_destination())

        attributes = {**self._edge_defaults, **self._attributes(statement)}
        for tail in tails:
            for head in heads:
                edge = self._graph.create_edge(tail, head)
                for key, value in attributes.items():
                    self._graph.set_attribute(edge, key, value)
        self._edge_keys.update(attributes)
        return [*tails, *heads]

    def _declare_missing(self) -> None:
        for node in self._graph.iterate_nodes():
            for key in self._node_keys:
                if self._graph.get_attribute(node, key) is None:
                    self._graph.set_attribute(node, key, "")
            for edge in self._graph.iterate_outgoing_edges(node):
                for key in self._edge_keys:
                    if self._graph.get_attribute(edge, key) is None:
                        self._graph.set_attribute(edge, key, "")
