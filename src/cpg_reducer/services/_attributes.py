"""Attribute names and accessors shared by the pipeline stages."""

from __future__ import annotations

from cpg_reducer.errors import MissingAttributeError
from cpg_reducer.infrastructure.graph.protocol import AttributedGraph, NodeHandle

FILE_ATTR = "file"
LABEL_ATTR = "label"
VALUE_ATTR = "value"


def require_file(graph: AttributedGraph, node: NodeHandle) -> str:
    """Return the node's ``file`` attribute ("" means no file).

    Raises:
        MissingAttributeError: The attribute is not declared at all.
    """
    file = graph.get_attribute(node, FILE_ATTR)
    if file is None:
        raise MissingAttributeError(node, FILE_ATTR)
    return file


def is_intra_file(file_tail: str, file_head: str) -> bool:
    """True when both endpoints belong to the same, named file."""
    return bool(file_tail) and file_tail == file_head
