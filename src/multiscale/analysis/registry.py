"""
Ordered registry of named scales.

Iteration order is registration order.  Re-registering a known code either
replaces the scale in place (keeping its position) or raises, depending on
the duplicate policy.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Callable, Dict, Hashable, Iterator, Optional

from ..core.config import DUPLICATE_POLICIES
from ..core.exceptions import ConfigurationError, DuplicateScaleError
from ..report.labels import Labels, default_labels
from ..utils.logging import get_logger
from .reliability import ScaleAnalysis

logger = get_logger("multiscale.registry")

ScaleFactory = Callable[[Any, Optional[Mapping[str, Any]]], Any]


class ScaleRegistry(Mapping):
    """Mapping of scale code to scale analysis, in registration order.

    Parameters
    ----------
    scale_factory : callable
        ``factory(dataset, options)`` building the per-scale analysis.
    duplicate_policy : ``"overwrite"`` | ``"error"``
        Behaviour when :meth:`add` receives a code already present.
    labels : callable
        Label lookup used for the default scale name.
    """

    def __init__(
            self,
            scale_factory: ScaleFactory = ScaleAnalysis,
            duplicate_policy: str = "overwrite",
            labels: Labels = default_labels,
    ):
        self._scales: Dict[Hashable, Any] = {}
        self._factory = scale_factory
        self._labels = labels
        self.duplicate_policy = duplicate_policy

    @property
    def duplicate_policy(self) -> str:
        return self._duplicate_policy

    @duplicate_policy.setter
    def duplicate_policy(self, value: str):
        if value not in DUPLICATE_POLICIES:
            raise ConfigurationError(
                f"Unknown duplicate_policy '{value}'. Choose from {list(DUPLICATE_POLICIES)}."
            )
        self._duplicate_policy = value

    # ── mutation ───────────────────────────────────────────────────────

    def add(self, code: Hashable, dataset, options: Optional[Mapping[str, Any]] = None):
        """Build a scale analysis for *dataset* and store it under *code*.

        When *options* is omitted the scale is named after its code
        (``"Scale {code}"``).
        """
        if code in self._scales and self.duplicate_policy == "error":
            raise DuplicateScaleError(f"Scale code {code!r} is already registered.")
        if options is None:
            options = {"name": self._labels("scale_name", code=code)}

        scale = self._factory(dataset, options)
        replaced = code in self._scales
        self._scales[code] = scale
        logger.debug(f"{'Replaced' if replaced else 'Registered'} scale {code!r}")
        return scale

    def remove(self, code: Hashable):
        """Remove and return the scale under *code*, or ``None`` if unknown."""
        scale = self._scales.pop(code, None)
        if scale is not None:
            logger.debug(f"Removed scale {code!r}")
        return scale

    # ── lookup ─────────────────────────────────────────────────────────

    def get(self, code: Hashable, default=None):
        """Scale under *code*, or *default* (``None``) if unknown."""
        return self._scales.get(code, default)

    def codes(self) -> list:
        return list(self._scales)

    def __getitem__(self, code: Hashable):
        return self._scales[code]

    def __iter__(self) -> Iterator[Hashable]:
        return iter(self._scales)

    def __len__(self) -> int:
        return len(self._scales)

    def __repr__(self) -> str:
        return f"ScaleRegistry(codes={self.codes()!r})"
