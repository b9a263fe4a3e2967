"""Shared pytest fixtures and test helpers for cpg-reducer tests."""

from __future__ import annotations

import logging
import os
from collections.abc import Callable, Generator, Sequence
from pathlib import Path

import pytest
from click.testing import CliRunner

from cpg_reducer.infrastructure.graph.engine import CpgGraph

type EdgeSpec = tuple[str, str] | tuple[str, str, str]
type GraphFactory = Callable[..., CpgGraph]


def quoted(name: str) -> str:
    """A label as the CPG extractor writes it: ``"name"``."""
    return f'"{name}"'


def cpg_file(name: str) -> str:
    """A file attribute as the CPG extractor writes it: ``"name"\\n``."""
    return f'"{name}"\\n'


def build_graph(
    nodes: dict[str, str | None],
    edges: Sequence[EdgeSpec] = (),
    *,
    name: str = "cpg",
) -> CpgGraph:
    """Build a function-level graph.

    *nodes* maps node names to their raw ``file`` value (None leaves the
    attribute unset). Labels are the quoted node names. An optional third
    element of an edge tuple becomes its ``value``.
    """
    graph = CpgGraph(name)
    for node, file in nodes.items():
        graph.create_node(node)
        graph.set_attribute(node, "label", quoted(node))
        if file is not None:
            graph.set_attribute(node, "file", file)
    for edge_spec in edges:
        edge = graph.create_edge(edge_spec[0], edge_spec[1])
        if len(edge_spec) == 3:
            graph.set_attribute(edge, "value", edge_spec[2])
    return graph


def edge_pairs(graph: CpgGraph) -> list[tuple[str, str]]:
    return [
        (node, graph.head(edge))
        for node in graph.iterate_nodes()
        for edge in graph.iterate_outgoing_edges(node)
    ]


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def make_graph() -> GraphFactory:
    return build_graph


@pytest.fixture
def example_graph() -> CpgGraph:
    """A(a.c) -> B(a.c) -> C(b.c): one intra-file and one inter-file call."""
    return build_graph(
        {"A": cpg_file("a.c"), "B": cpg_file("a.c"), "C": cpg_file("b.c")},
        [("A", "B"), ("B", "C")],
    )


@pytest.fixture
def write_dot(tmp_path: Path) -> Callable[[str], Path]:
    """Write DOT source to a temp file and return its path."""

    def _write(source: str, name: str = "cpg.dot") -> Path:
        path = tmp_path / name
        path.write_text(source, encoding="utf-8")
        return path

    return _write


EXAMPLE_DOT = r"""digraph cpg {
  A [label="\"A\"", file="\"a.c\"\n"];
  B [label="\"B\"", file="\"a.c\"\n"];
  C [label="\"C\"", file="\"b.c\"\n"];
  D [label="\"D\"", file="\"b.c\"\n"];
  L [label="\"L\"", file=""];
  A -> B;
  B -> C [value="2"];
  B -> D [value="3"];
  C -> D;
}
"""


@pytest.fixture
def example_dot(write_dot: Callable[[str], Path]) -> Path:
    return write_dot(EXAMPLE_DOT)


@pytest.fixture(autouse=True)
def _restore_logging() -> Generator[None]:
    """Undo configure_logging() so handlers never outlive a CliRunner stream."""
    root = logging.getLogger()
    original_handlers = root.handlers[:]
    original_level = root.level
    pkg = logging.getLogger("cpg_reducer")
    pkg_level = pkg.level
    yield
    root.handlers = original_handlers
    root.setLevel(original_level)
    pkg.setLevel(pkg_level)


@pytest.fixture
def _no_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Run from an empty directory with no config file or env overrides.

    Use via ``@pytest.mark.usefixtures("_no_config")``.
    """
    for name in list(os.environ):
        if name.startswith("CPG_REDUCER_"):
            monkeypatch.delenv(name)
    monkeypatch.chdir(tmp_path)
