"""Exception hierarchy for cpg-reducer.

Structural errors mean the input graph broke an assumption the upstream
extraction step guarantees. They are never recovered from: the CLI
aborts the whole run when one escapes the pipeline.
"""

from __future__ import annotations

from pathlib import Path


class CpgReducerError(Exception):
    """Base class for all cpg-reducer errors."""


class StructuralError(CpgReducerError):
    """The input graph violates a structural precondition."""


class MissingAttributeError(StructuralError):
    """A node lacks an attribute every node must carry."""

    def __init__(self, node: str, attribute: str) -> None:
        self.node = node
        self.attribute = attribute
        super().__init__(f"node '{node}' has no '{attribute}' attribute")


class DotParseError(CpgReducerError):
    """The input file could not be read as DOT."""

    def __init__(self, path: Path, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"cannot parse {path}: {reason}")
