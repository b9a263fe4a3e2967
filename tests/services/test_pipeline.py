"""Tests for the reduce → merge → render pipeline."""

from __future__ import annotations

import json
from collections.abc import Callable
from pathlib import Path

import pytest

from cpg_reducer.config.models import NodeGranularity, WeightPolicy
from cpg_reducer.errors import MissingAttributeError
from cpg_reducer.infrastructure.graph.engine import CpgGraph
from cpg_reducer.services.pipeline import PipelineOptions, process_graph, run_pipeline

FUNCTION = PipelineOptions(node_type=NodeGranularity.FUNCTION)
COMPARTMENT = PipelineOptions()


class TestProcessGraph:
    def test_function_mode(self, example_graph: CpgGraph) -> None:
        data = json.loads(process_graph(example_graph, FUNCTION))
        assert data["nodes"] == [{"id": "B", "group": "a.c"}, {"id": "C", "group": "b.c"}]
        assert data["links"] == [{"source": "B", "target": "C", "value": ""}]

    def test_compartment_mode(self, example_graph: CpgGraph) -> None:
        data = json.loads(process_graph(example_graph, COMPARTMENT))
        assert [node["group"] for node in data["nodes"]] == ["a.c", "b.c"]
        assert len(data["links"]) == 1
        ids = [node["id"] for node in data["nodes"]]
        assert data["links"][0]["source"] == ids[0]
        assert data["links"][0]["target"] == ids[1]
        assert data["links"][0]["value"] == "1"

    def test_input_graph_is_reduced_in_place(self, example_graph: CpgGraph) -> None:
        process_graph(example_graph, COMPARTMENT)
        assert list(example_graph.iterate_nodes()) == ["B", "C"]

    def test_structural_error_propagates(self) -> None:
        g = CpgGraph()
        g.create_node("nofile")
        with pytest.raises(MissingAttributeError):
            process_graph(g, FUNCTION)


class TestRunPipeline:
    def test_function_mode(self, example_dot: Path) -> None:
        [document] = list(run_pipeline(example_dot, FUNCTION))
        data = json.loads(document)
        assert [node["id"] for node in data["nodes"]] == ["B", "C", "D", "L"]
        assert data["nodes"][-1] == {"id": "L", "group": "NONE"}
        assert [(lk["source"], lk["target"], lk["value"]) for lk in data["links"]] == [
            ("B", "C", "2"),
            ("B", "D", "3"),
        ]

    def test_compartment_mode_sums_values(self, example_dot: Path) -> None:
        [document] = list(run_pipeline(example_dot, COMPARTMENT))
        data = json.loads(document)
        assert [node["group"] for node in data["nodes"]] == ["a.c", "b.c"]
        assert [link["value"] for link in data["links"]] == ["5"]

    def test_compartment_mode_counts(self, example_dot: Path) -> None:
        options = PipelineOptions(weight_policy=WeightPolicy.COUNT)
        [document] = list(run_pipeline(example_dot, options))
        assert [link["value"] for link in json.loads(document)["links"]] == ["2"]

    def test_one_document_per_graph(self, write_dot: Callable[[str], Path]) -> None:
        path = write_dot(
            'digraph g1 { a [label="\\"a\\"", file=""]; }\n'
            'digraph g2 { b [label="\\"b\\"", file=""]; }\n'
        )
        documents = [json.loads(doc) for doc in run_pipeline(path, FUNCTION)]
        assert [doc["nodes"][0]["id"] for doc in documents] == ["a", "b"]

    def test_empty_input(self, write_dot: Callable[[str], Path]) -> None:
        assert list(run_pipeline(write_dot(""), COMPARTMENT)) == []
