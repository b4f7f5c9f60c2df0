"""
``multiscale.analysis`` — reliability of several scales and the structure between them.

Quick-start
-----------
>>> from multiscale.analysis import MultiScaleAnalysis
>>>
>>> msa = MultiScaleAnalysis({"name": "Scales", "summary_correlation_matrix": True})
>>> msa.add_scale("s1", ds[["x1", "x2"]])
>>> msa.add_scale("s2", ds[["x3", "x4"]])
>>> msa.correlation_matrix()      # Result, scale codes as labels
>>> msa.pca({"n_components": 1})  # PCA across scales
>>> print(msa.summary())

Classes
-------
MultiScaleAnalysis
    Registry of scales with correlation, PCA, principal-axis and report.
ScaleRegistry
    Ordered mapping of scale code to scale analysis.
ScaleAnalysis
    Cronbach's alpha and item statistics for one scale.
PCA, PrincipalAxis
    Factor extraction from a correlation matrix.
Result
    Labelled array returned by ``correlation_matrix``.
"""

from .correlation import correlation_matrix
from .factor import PCA, PrincipalAxis
from .multiscale import MultiScaleAnalysis, build_correlation_matrix
from .registry import ScaleRegistry
from .reliability import ScaleAnalysis
from .result import Result

__all__ = [
    "MultiScaleAnalysis",
    "build_correlation_matrix",
    "ScaleRegistry",
    "ScaleAnalysis",
    "correlation_matrix",
    "PCA",
    "PrincipalAxis",
    "Result",
]
