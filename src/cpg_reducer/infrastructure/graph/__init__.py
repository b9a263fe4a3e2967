from cpg_reducer.infrastructure.graph.engine import CpgGraph
from cpg_reducer.infrastructure.graph.protocol import AttributedGraph, EdgeHandle, NodeHandle

__all__ = ["AttributedGraph", "CpgGraph", "EdgeHandle", "NodeHandle"]
