"""
Section titles and default names used by the multi-scale report.

The analysis never hard-codes display text.  It asks a *labels* callable
for a template key plus interpolation values, so a caller can plug in a
translated catalogue::

    >>> def spanish(key, **values):
    ...     return {"pca_section": "ACP para {name}"}.get(
    ...         key, DEFAULT_LABELS[key]).format(**values)
    >>> MultiScaleAnalysis({"summary_pca": True}, labels=spanish)
"""

from __future__ import annotations

from typing import Callable

DEFAULT_LABELS = {
    "analysis_name": "Multiple Scale analysis",
    "scale_name": "Scale {code}",
    "reliability_section": "Reliability analysis of scales",
    "correlation_section": "Correlation matrix for {name}",
    "pca_section": "PCA for {name}",
    "principal_axis_section": "Principal Axis for {name}",
}

Labels = Callable[..., str]


def default_labels(key: str, **values) -> str:
    """Look up *key* in ``DEFAULT_LABELS`` and interpolate *values*."""
    return DEFAULT_LABELS[key].format(**values)
