"""Pipeline — reduce, optionally merge, then render every input graph.

Each graph is read, processed and rendered before the next one is read,
and nothing is shared between graphs.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator
from dataclasses import dataclass
from pathlib import Path

from cpg_reducer.config.models import NodeGranularity, OutputFormat, WeightPolicy
from cpg_reducer.infrastructure.dot import read_dot_graphs
from cpg_reducer.infrastructure.graph.protocol import AttributedGraph
from cpg_reducer.output.d3_arc import render_d3_arc
from cpg_reducer.services.merge import merge_compartments
from cpg_reducer.services.reduce import remove_intra_edges

logger = logging.getLogger(__name__)

type Formatter = Callable[..., str]

FORMATTERS: dict[OutputFormat, Formatter] = {
    OutputFormat.D3_ARC: render_d3_arc,
}


@dataclass(frozen=True)
class PipelineOptions:
    """Everything that selects what the pipeline does to a graph."""

    node_type: NodeGranularity = NodeGranularity.COMPARTMENT
    output_format: OutputFormat = OutputFormat.D3_ARC
    weight_policy: WeightPolicy = WeightPolicy.SUM
    raw_labels: bool = False


def process_graph(graph: AttributedGraph, options: PipelineOptions) -> str:
    """Run all stages on one graph and return the rendered document.

    *graph* is reduced in place; in compartment mode the rendered graph
    is a new one built from it.
    """
    remove_intra_edges(graph)

    current: AttributedGraph = graph
    if options.node_type is NodeGranularity.COMPARTMENT:
        current = merge_compartments(graph, policy=options.weight_policy)

    formatter = FORMATTERS[options.output_format]
    return formatter(current, raw_labels=options.raw_labels)


def run_pipeline(path: Path, options: PipelineOptions) -> Iterator[str]:
    """Yield one rendered document per graph found in *path*.

    Raises:
        DotParseError: *path* is not readable DOT.
        StructuralError: A graph breaks a structural precondition.
    """
    count = 0
    for graph in read_dot_graphs(path):
        yield process_graph(graph, options)
        count += 1
    logger.debug("Processed %d graph(s) from %s", count, path)
