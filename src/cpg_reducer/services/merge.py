"""Compartment merging — collapse the reduced graph to one node per file.

The input graph is only read. A fresh strict graph is returned in which
each distinct non-empty ``file`` becomes a compartment node, and every
inter-file edge becomes (or is folded into) a single weighted link
between the two compartments.
"""

from __future__ import annotations

import logging

from cpg_reducer.config.models import WeightPolicy
from cpg_reducer.infrastructure.graph.engine import CpgGraph
from cpg_reducer.infrastructure.graph.protocol import AttributedGraph, EdgeHandle, NodeHandle
from cpg_reducer.services._attributes import (
    FILE_ATTR,
    LABEL_ATTR,
    VALUE_ATTR,
    require_file,
)

logger = logging.getLogger(__name__)


def merge_compartments(
    graph: AttributedGraph,
    *,
    policy: WeightPolicy = WeightPolicy.SUM,
) -> CpgGraph:
    """Build the file-level graph of *graph*.

    Compartments appear in the order their file is first seen while
    walking the nodes. Nodes with an empty ``file`` have no compartment,
    so their edges are dropped. Edges inside one compartment are not
    re-created.

    Args:
        graph: The (normally already reduced) function-level graph.
        policy: ``sum`` adds up the edges' ``value`` (an edge without a
            numeric value counts as 1); ``count`` counts the edges.

    Raises:
        MissingAttributeError: A node has no ``file`` attribute.
    """
    merged = CpgGraph(graph.name, strict=True)
    compartments: dict[str, NodeHandle] = {}

    for node in graph.iterate_nodes():
        file = require_file(graph, node)
        if not file or file in compartments:
            continue
        compartment = merged.create_node(file)
        merged.set_attribute(compartment, LABEL_ATTR, file)
        merged.set_attribute(compartment, FILE_ATTR, file)
        compartments[file] = compartment
        logger.debug("Created compartment label=%s file=%s", file, file)

    weights: dict[EdgeHandle, float] = {}
    dropped = 0
    for node in graph.iterate_nodes():
        file_n = require_file(graph, node)
        for edge in graph.iterate_outgoing_edges(node):
            file_m = require_file(graph, graph.head(edge))
            if not file_n or not file_m or file_n == file_m:
                dropped += 1
                continue
            link = merged.create_edge(compartments[file_n], compartments[file_m])
            weights[link] = weights.get(link, 0.0) + _edge_weight(graph, edge, policy)

    for link, weight in weights.items():
        merged.set_attribute(link, VALUE_ATTR, format_weight(weight))

    logger.debug(
        "Merged graph %s into %d compartments with %d links (%d edges dropped)",
        graph.name,
        merged.number_of_nodes(),
        merged.number_of_edges(),
        dropped,
    )
    return merged


def _edge_weight(graph: AttributedGraph, edge: EdgeHandle, policy: WeightPolicy) -> float:
    if policy is WeightPolicy.COUNT:
        return 1.0
    raw = graph.get_attribute(edge, VALUE_ATTR)
    if not raw:
        return 1.0
    try:
        return float(raw)
    except ValueError:
        logger.warning("Non-numeric edge value %r on %s -> %s, counting it as 1", raw, *edge[:2])
        return 1.0


def format_weight(weight: float) -> str:
    """Render an aggregated weight, without a fraction when integral."""
    if weight.is_integer():
        return str(int(weight))
    return repr(weight)
