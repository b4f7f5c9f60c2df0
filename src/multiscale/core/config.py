"""
Configuration for ``MultiScaleAnalysis``.

Options arrive as a plain mapping.  Only the keys named by the fields of
``MultiScaleConfig`` are recognised; anything else is logged and dropped.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from typing import Any, Mapping, Optional

from ..utils.logging import get_logger
from .exceptions import ConfigurationError

logger = get_logger("multiscale.config")

DUPLICATE_POLICIES = ("overwrite", "error")


@dataclass
class MultiScaleConfig:
    """Recognised options of a multi-scale analysis.

    Parameters
    ----------
    name : str or None
        Title of the analysis.  ``None`` means "use the localized default".
    summary_correlation_matrix, summary_pca, summary_principal_axis : bool
        Which derived sections the report includes.
    pca_options, principal_axis_options : dict
        Options handed to the PCA and principal-axis collaborators when no
        call-site override is given.
    duplicate_policy : ``"overwrite"`` | ``"error"``
        What registering an already known scale code does.
    """

    name: Optional[str] = None
    summary_correlation_matrix: bool = False
    summary_pca: bool = False
    summary_principal_axis: bool = False
    pca_options: dict = field(default_factory=dict)
    principal_axis_options: dict = field(default_factory=dict)
    duplicate_policy: str = "overwrite"

    def __post_init__(self):
        self.summary_correlation_matrix = bool(self.summary_correlation_matrix)
        self.summary_pca = bool(self.summary_pca)
        self.summary_principal_axis = bool(self.summary_principal_axis)
        self.pca_options = dict(self.pca_options or {})
        self.principal_axis_options = dict(self.principal_axis_options or {})
        if self.duplicate_policy not in DUPLICATE_POLICIES:
            raise ConfigurationError(
                f"Unknown duplicate_policy '{self.duplicate_policy}'. "
                f"Choose from {list(DUPLICATE_POLICIES)}."
            )

    @classmethod
    def keys(cls) -> tuple:
        return tuple(f.name for f in fields(cls))

    @classmethod
    def from_options(cls, options: Optional[Mapping[str, Any]] = None) -> "MultiScaleConfig":
        """Build a config from *options*, ignoring unrecognised keys."""
        options = dict(options or {})
        known = cls.keys()
        ignored = sorted(str(k) for k in options if k not in known)
        if ignored:
            logger.debug(f"Ignoring unrecognised options: {ignored}")
        return cls(**{k: v for k, v in options.items() if k in known})
