"""
multiscale - Reliability analysis across multiple scales
=========================================================

Aggregates per-scale reliability analyses into one report, with the
correlation matrix between scale scores and principal-component /
principal-axis analyses on top.

Subpackages:
------------
- analysis: Scale reliability, inter-scale correlation, factor extraction
- report: Hierarchical report tree and display labels
- core: Configuration and exceptions
- utils: Logging
"""

from .analysis import MultiScaleAnalysis, ScaleAnalysis

__version__ = "0.1.0"

__all__ = [
    "MultiScaleAnalysis",
    "ScaleAnalysis",
]
