"""cpg-reducer — reduce code property graphs to file-level arc diagrams."""

__version__ = "0.1.0"
