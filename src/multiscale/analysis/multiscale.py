"""
Reliability analysis across several scales.

``MultiScaleAnalysis`` keeps one ``ScaleAnalysis`` per named scale and gives
quick access to what is computed *between* scales: the correlation matrix
of their composite scores, a PCA and a principal-axis factoring of that
matrix, and a report that strings everything together.

Nothing derived is cached.  Every call to ``correlation_matrix``, ``pca``,
``principal_axis`` or the report reflects the scales registered at that
moment.

Example
-------
>>> msa = MultiScaleAnalysis({"name": "Wellbeing",
...                           "summary_correlation_matrix": True,
...                           "summary_pca": True})
>>> msa.add_scale("s1", ds[["x1", "x2"]])
>>> msa.add_scale("s2", ds[["x3", "x4"]], {"name": "Scale 2"})
>>> print(msa.summary())

Scales can also be registered while the object is built, either on the
instance passed to the callback::

    MultiScaleAnalysis(opts, lambda m: m.scale("s1", ds[["x1", "x2"]]))

or, with a callback that takes no arguments, through the module helpers,
which act on the analysis being built::

    def setup():
        scale("s1", ds[["x1", "x2"]])
        configure(summary_pca=True)

    MultiScaleAnalysis(opts, setup)
"""

from __future__ import annotations

import contextvars
import inspect
from typing import Any, Callable, Hashable, Mapping, Optional

from ..core.config import MultiScaleConfig
from ..core.exceptions import DuplicateScaleError, MultiScaleError
from ..report.builder import ReportBuilder, Section
from ..report.labels import Labels, default_labels
from ..utils.logging import get_logger
from .correlation import correlation_matrix
from .factor import PCA, PrincipalAxis
from .registry import ScaleFactory, ScaleRegistry
from .reliability import ScaleAnalysis
from .result import Result

logger = get_logger("multiscale.analysis")

_CURRENT: contextvars.ContextVar = contextvars.ContextVar("multiscale_current_analysis")


# ═══════════════════════════════════════════════════════════════════════════
#  Correlation between scales
# ═══════════════════════════════════════════════════════════════════════════

def build_correlation_matrix(scales: Mapping[Hashable, Any], correlate=correlation_matrix) -> Result:
    """Correlate the composite scores of *scales*.

    Parameters
    ----------
    scales : ordered mapping of code to scale analysis
        Each value must expose ``composite`` (one value per case).
    correlate : callable
        ``correlate({str(code): composite, ...})`` returning the matrix.

    Raises
    ------
    DimensionMismatchError
        Propagated from *correlate* when scales have different case counts.
    """
    vectors = {str(code): scale.composite for code, scale in scales.items()}
    if len(vectors) != len(scales):
        raise DuplicateScaleError(
            f"Scale codes {list(scales)} are not distinct once converted to text."
        )
    return correlate(vectors)


# ═══════════════════════════════════════════════════════════════════════════
#  MultiScaleAnalysis
# ═══════════════════════════════════════════════════════════════════════════

def _takes_argument(func: Callable) -> bool:
    try:
        params = inspect.signature(func).parameters.values()
    except (TypeError, ValueError):
        return True
    positional = (
        inspect.Parameter.POSITIONAL_ONLY,
        inspect.Parameter.POSITIONAL_OR_KEYWORD,
        inspect.Parameter.VAR_POSITIONAL,
    )
    return any(p.kind in positional for p in params)


class MultiScaleAnalysis:
    """Reliability of several scales plus correlation and factor analysis between them.

    Parameters
    ----------
    options : dict, optional
        Any of ``name``, ``summary_correlation_matrix``, ``summary_pca``,
        ``summary_principal_axis``, ``pca_options``,
        ``principal_axis_options`` and ``duplicate_policy``.  Other keys
        are ignored.
    setup : callable, optional
        Run once before the constructor returns.  Called with the new
        instance when it accepts a positional argument; otherwise called
        with no arguments while the module helpers (``scale``,
        ``add_scale``, ``configure``, …) point at the new instance.
    labels : callable, optional
        ``labels(key, **values) -> str`` used for section titles and
        default names.  Defaults to English text.
    scale_factory, correlate, pca_factory, principal_axis_factory : callable
        Collaborators for per-scale reliability, the correlation matrix,
        PCA and principal-axis factoring.
    """

    def __init__(
            self,
            options: Optional[Mapping[str, Any]] = None,
            setup: Optional[Callable] = None,
            *,
            labels: Optional[Labels] = None,
            scale_factory: ScaleFactory = ScaleAnalysis,
            correlate: Callable[[Mapping[str, Any]], Any] = correlation_matrix,
            pca_factory: Callable = PCA,
            principal_axis_factory: Callable = PrincipalAxis,
    ):
        self._labels = labels or default_labels
        self._correlate = correlate
        self._pca_factory = pca_factory
        self._principal_axis_factory = principal_axis_factory

        config = MultiScaleConfig.from_options(options)
        self._registry = ScaleRegistry(scale_factory, config.duplicate_policy, self._labels)
        self._apply(config)

        if setup is not None:
            self._run_setup(setup)

    # ── configuration ──────────────────────────────────────────────────

    def _apply(self, config: MultiScaleConfig) -> None:
        self.name = config.name if config.name is not None else self._labels("analysis_name")
        self.summary_correlation_matrix = config.summary_correlation_matrix
        self.summary_pca = config.summary_pca
        self.summary_principal_axis = config.summary_principal_axis
        self.pca_options = config.pca_options
        self.principal_axis_options = config.principal_axis_options
        self._registry.duplicate_policy = config.duplicate_policy

    @property
    def duplicate_policy(self) -> str:
        return self._registry.duplicate_policy

    @duplicate_policy.setter
    def duplicate_policy(self, value: str):
        self._registry.duplicate_policy = value

    @property
    def config(self) -> MultiScaleConfig:
        """Snapshot of the current options."""
        return MultiScaleConfig(
            name=self.name,
            summary_correlation_matrix=self.summary_correlation_matrix,
            summary_pca=self.summary_pca,
            summary_principal_axis=self.summary_principal_axis,
            pca_options=self.pca_options,
            principal_axis_options=self.principal_axis_options,
            duplicate_policy=self.duplicate_policy,
        )

    def configure(self, **options) -> "MultiScaleAnalysis":
        """Update recognised options in place and return ``self``."""
        current = vars(self.config)
        self._apply(MultiScaleConfig.from_options({**current, **options}))
        return self

    def _run_setup(self, setup: Callable) -> None:
        if _takes_argument(setup):
            setup(self)
            return
        token = _CURRENT.set(self)
        try:
            setup()
        finally:
            _CURRENT.reset(token)

    # ── scale registry ─────────────────────────────────────────────────

    @property
    def scales(self) -> ScaleRegistry:
        """Registered scales, keyed by code, in registration order."""
        return self._registry

    def add_scale(self, code: Hashable, dataset, options: Optional[Mapping[str, Any]] = None):
        """Register a reliability analysis of *dataset* under *code* and return it."""
        return self._registry.add(code, dataset, options)

    def get_scale(self, code: Hashable):
        """Scale registered under *code*, or ``None``."""
        return self._registry.get(code)

    def remove_scale(self, code: Hashable):
        """Remove and return the scale under *code*, or ``None`` if unknown."""
        return self._registry.remove(code)

    delete_scale = remove_scale

    def scale(self, code: Hashable, dataset=None, options: Optional[Mapping[str, Any]] = None):
        """Retrieve the scale *code*, or register it when *dataset* is given."""
        if dataset is None:
            return self.get_scale(code)
        return self.add_scale(code, dataset, options)

    # ── derived analyses (never cached) ────────────────────────────────

    def correlation_matrix(self) -> Result:
        """Correlation matrix between the composite scores of all scales."""
        return build_correlation_matrix(self._registry, self._correlate)

    def pca(self, options: Optional[Mapping[str, Any]] = None):
        """PCA of the current correlation matrix.

        *options*, when given, replaces ``pca_options`` entirely; the two
        are never merged.
        """
        effective = self.pca_options if options is None else options
        logger.debug(f"Running PCA over {len(self._registry)} scales")
        return self._pca_factory(self.correlation_matrix(), dict(effective))

    def principal_axis(self, options: Optional[Mapping[str, Any]] = None):
        """Principal-axis factoring of the current correlation matrix.

        *options*, when given, replaces ``principal_axis_options`` entirely;
        the two are never merged.
        """
        effective = self.principal_axis_options if options is None else options
        logger.debug(f"Running principal axis factoring over {len(self._registry)} scales")
        return self._principal_axis_factory(self.correlation_matrix(), dict(effective))

    principal_axis_analysis = principal_axis

    # ── report ─────────────────────────────────────────────────────────

    def report_building(self, builder) -> None:
        """Add this analysis as one section of *builder*.

        The section is attached only after every part of it was built, so a
        failing computation leaves *builder* untouched.
        """
        label = self._labels
        with builder.section(self.name) as s:
            with s.section(label("reliability_section")) as s2:
                for scale in self._registry.values():
                    s2.parse_element(scale)
            if self.summary_correlation_matrix:
                with s.section(label("correlation_section", name=self.name)) as s2:
                    s2.parse_element(self.correlation_matrix())
            if self.summary_pca:
                with s.section(label("pca_section", name=self.name)) as s2:
                    s2.parse_element(self.pca())
            if self.summary_principal_axis:
                with s.section(label("principal_axis_section", name=self.name)) as s2:
                    s2.parse_element(self.principal_axis())

    def build_report(self) -> Section:
        """Report tree of this analysis (a fresh ``Section``)."""
        builder = ReportBuilder()
        self.report_building(builder)
        return builder.sections[0]

    def summary(self) -> str:
        """Plain-text report."""
        builder = ReportBuilder()
        builder.parse_element(self)
        return builder.to_text()

    def __repr__(self) -> str:
        return f"MultiScaleAnalysis(name='{self.name}', scales={self._registry.codes()!r})"


# ═══════════════════════════════════════════════════════════════════════════
#  Helpers for argument-less setup callbacks
# ═══════════════════════════════════════════════════════════════════════════

def current_analysis() -> MultiScaleAnalysis:
    """The analysis whose argument-less setup callback is running."""
    try:
        return _CURRENT.get()
    except LookupError:
        raise MultiScaleError(
            "No analysis is being set up; call this from a setup callback "
            "passed to MultiScaleAnalysis."
        ) from None


def scale(code: Hashable, dataset=None, options: Optional[Mapping[str, Any]] = None):
    return current_analysis().scale(code, dataset, options)


def add_scale(code: Hashable, dataset, options: Optional[Mapping[str, Any]] = None):
    return current_analysis().add_scale(code, dataset, options)


def get_scale(code: Hashable):
    return current_analysis().get_scale(code)


def remove_scale(code: Hashable):
    return current_analysis().remove_scale(code)


def configure(**options) -> MultiScaleAnalysis:
    return current_analysis().configure(**options)
