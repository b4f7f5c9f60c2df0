"""
``multiscale.report`` — hierarchical report tree and display labels.
"""

from .builder import ReportBuilder, Section, Table, Text
from .labels import DEFAULT_LABELS, default_labels

__all__ = [
    "ReportBuilder",
    "Section",
    "Table",
    "Text",
    "DEFAULT_LABELS",
    "default_labels",
]
