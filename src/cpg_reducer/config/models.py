"""Pydantic configuration models with code-baked defaults.

Sparse TOML contract: defaults baked here, cpg-reducer.toml only
contains overrides.
"""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel


class NodeGranularity(StrEnum):
    """What one node of the emitted diagram stands for."""

    FUNCTION = "function"
    COMPARTMENT = "compartment"


class OutputFormat(StrEnum):
    D3_ARC = "d3-arc"


class WeightPolicy(StrEnum):
    """How parallel inter-file edges combine into one compartment link."""

    SUM = "sum"
    COUNT = "count"


class MergeConfig(BaseModel):
    """[merge] section."""

    model_config = {"frozen": True}

    weight_policy: WeightPolicy = WeightPolicy.SUM


class EmitConfig(BaseModel):
    """[emit] section."""

    model_config = {"frozen": True}

    raw_labels: bool = False
