"""Intra-edge reduction — drop call edges that never leave a file.

The graph is mutated in place while it is walked. ``iterate_nodes`` and
``iterate_outgoing_edges`` hand out snapshots that skip deleted handles,
so removing the current edge, its head node, or the current node is safe.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from cpg_reducer.infrastructure.graph.protocol import AttributedGraph
from cpg_reducer.services._attributes import is_intra_file, require_file

logger = logging.getLogger(__name__)


@dataclass
class ReductionStats:
    """Counters collected by one reduction pass."""

    edges_removed: int = 0
    nodes_removed: int = 0
    isolated_kept: int = 0


def remove_intra_edges(graph: AttributedGraph) -> ReductionStats:
    """Remove every edge whose endpoints share a non-empty ``file``.

    A head node left without edges is removed straight away. The tail node
    is removed after its outgoing edges were processed, but only if at
    least one of them was removed and nothing is left. A node that had no
    edges to begin with is kept: it points at a problem in the input and
    must stay visible.

    Raises:
        MissingAttributeError: A visited node has no ``file`` attribute.
    """
    stats = ReductionStats()

    for node in graph.iterate_nodes():
        reduced = False
        file_n = require_file(graph, node)

        for edge in graph.iterate_outgoing_edges(node):
            head = graph.head(edge)
            file_m = require_file(graph, head)
            if not is_intra_file(file_n, file_m):
                continue

            graph.delete_edge(edge)
            stats.edges_removed += 1
            reduced = True

            if graph.degree(head) > 0:
                continue
            graph.delete_node(head)
            stats.nodes_removed += 1

        if not graph.has_node(node):
            # Removed as the head of its own self-loop.
            continue
        if graph.degree(node) > 0:
            continue
        if reduced:
            graph.delete_node(node)
            stats.nodes_removed += 1
        else:
            stats.isolated_kept += 1
            logger.debug("Keeping isolated node %s (file=%r)", node, file_n)

    logger.debug(
        "Reduced graph %s: %d edges and %d nodes removed, %d isolated nodes kept",
        graph.name,
        stats.edges_removed,
        stats.nodes_removed,
        stats.isolated_kept,
    )
    return stats
