"""d3-arc output — node and link lists for an arc-diagram renderer.

Labels and file names reach us wrapped in the CPG extractor's quoting.
The stripping below reproduces what existing visualization pages expect:

- ``id`` / ``source`` / ``target``: drop the first and last character of
  the label (empty when the label is two characters or shorter).
- ``group``: ``"NONE"`` for an empty file, otherwise drop the first and
  the last three characters (empty when four characters or shorter).

With ``raw_labels`` the stored strings are emitted unchanged.
"""

from __future__ import annotations

import json

from pydantic import BaseModel, Field

from cpg_reducer.infrastructure.graph.protocol import AttributedGraph, NodeHandle
from cpg_reducer.services._attributes import LABEL_ATTR, VALUE_ATTR, require_file

UNGROUPED = "NONE"

# graphviz placeholder meaning "use the node name"
_NAME_PLACEHOLDER = "\\N"


class ArcNode(BaseModel):
    """One entry of ``nodes``."""

    model_config = {"frozen": True}

    id: str
    group: str


class ArcLink(BaseModel):
    """One entry of ``links``."""

    model_config = {"frozen": True}

    source: str
    target: str
    value: str


class ArcDocument(BaseModel):
    """A complete d3-arc document for one graph."""

    nodes: list[ArcNode] = Field(default_factory=list)
    links: list[ArcLink] = Field(default_factory=list)

    def to_json(self) -> str:
        return json.dumps(self.model_dump(mode="json"), indent=2) + "\n"


def strip_label(label: str) -> str:
    return label[1:-1] if len(label) > 2 else ""


def strip_group(file: str) -> str:
    if not file:
        return UNGROUPED
    return file[1:-3] if len(file) > 4 else ""


def build_arc_document(graph: AttributedGraph, *, raw_labels: bool = False) -> ArcDocument:
    """Walk *graph* in its native order and collect nodes, then links.

    Raises:
        MissingAttributeError: A node has no ``file`` attribute.
    """
    doc = ArcDocument()

    for node in graph.iterate_nodes():
        file = require_file(graph, node)
        if raw_labels:
            group = file or UNGROUPED
        else:
            group = strip_group(file)
        doc.nodes.append(ArcNode(id=_display_label(graph, node, raw_labels), group=group))

    for node in graph.iterate_nodes():
        source = _display_label(graph, node, raw_labels)
        for edge in graph.iterate_outgoing_edges(node):
            doc.links.append(
                ArcLink(
                    source=source,
                    target=_display_label(graph, graph.head(edge), raw_labels),
                    value=graph.get_attribute(edge, VALUE_ATTR) or "",
                )
            )

    return doc


def render_d3_arc(graph: AttributedGraph, *, raw_labels: bool = False) -> str:
    """Serialize *graph* as a d3-arc JSON document."""
    return build_arc_document(graph, raw_labels=raw_labels).to_json()


def _display_label(graph: AttributedGraph, node: NodeHandle, raw_labels: bool) -> str:
    label = graph.get_attribute(node, LABEL_ATTR)
    if label is None or label == _NAME_PLACEHOLDER:
        label = node
    return label if raw_labels else strip_label(label)
