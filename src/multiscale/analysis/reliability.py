"""
Reliability analysis of a single scale.

A scale is a set of items (survey questions, test parts, …) that are meant
to measure one construct.  ``ScaleAnalysis`` summarises how consistently the
items do so.

Classes
-------
ScaleAnalysis
    Composite score, Cronbach's alpha, standardized alpha, corrected
    item-total correlations and alpha-if-item-deleted.

Example
-------
>>> from multiscale.analysis.reliability import ScaleAnalysis
>>> sa = ScaleAnalysis({"q1": [1, 2, 3, 4], "q2": [2, 2, 4, 5]},
...                    {"name": "Anxiety"})
>>> sa.composite          # per-case total score
>>> sa.alpha              # Cronbach's alpha
>>> sa.alpha_if_deleted   # one value per item
"""

from __future__ import annotations

from typing import Any, Mapping, Optional

import numpy as np

from ..core.exceptions import DimensionMismatchError
from ..utils.logging import get_logger
from .correlation import _pairwise_pearson
from .result import _require_pandas

logger = get_logger("multiscale.reliability")

_OPTION_DEFAULTS = {
    "name": "Scale",
    "summary_item_statistics": True,
}

# ═══════════════════════════════════════════════════════════════════════════
#  Input handling
# ═══════════════════════════════════════════════════════════════════════════

def _coerce_items(dataset):
    """Turn *dataset* into item names plus a ``(cases, items)`` array.

    Accepts a ``pandas.DataFrame``, a mapping of item name to sequence, or
    anything ``np.asarray`` understands (1-D means a single item).
    """
    if hasattr(dataset, "columns") and hasattr(dataset, "to_numpy"):
        names = [str(c) for c in dataset.columns]
        items = dataset.to_numpy(dtype=np.float64)
    elif isinstance(dataset, Mapping):
        names = [str(k) for k in dataset]
        columns = [np.asarray(v, dtype=np.float64).ravel() for v in dataset.values()]
        lengths = {n: len(c) for n, c in zip(names, columns)}
        if len(set(lengths.values())) > 1:
            raise DimensionMismatchError(
                f"All items of a scale must have the same number of cases, got {lengths}."
            )
        items = np.column_stack(columns) if columns else np.empty((0, 0))
    else:
        items = np.asarray(dataset, dtype=np.float64)
        if items.ndim == 1:
            items = items[:, np.newaxis]
        names = None

    if items.ndim != 2:
        raise ValueError(f"Scale data must be 2-D (cases, items), got ndim={items.ndim}.")
    if items.shape[1] < 1:
        raise ValueError("A scale needs at least one item.")

    if names is None:
        names = [f"item_{i + 1}" for i in range(items.shape[1])]
    return names, items


# ═══════════════════════════════════════════════════════════════════════════
#  Computation helpers
# ═══════════════════════════════════════════════════════════════════════════

def _cronbach_alpha(items: np.ndarray) -> float:
    """Cronbach's alpha of a ``(cases, items)`` array.

    Undefined (NaN) for fewer than two items or cases, and when the total
    score has no variance.
    """
    n, k = items.shape
    if k < 2 or n < 2:
        return float("nan")
    item_vars = items.var(axis=0, ddof=1)
    total_var = items.sum(axis=1).var(ddof=1)
    if not total_var > 0:
        return float("nan")
    return float(k / (k - 1) * (1.0 - item_vars.sum() / total_var))


def _pearson(a: np.ndarray, b: np.ndarray) -> float:
    am = a - a.mean()
    bm = b - b.mean()
    denom = np.sqrt(np.sum(am ** 2) * np.sum(bm ** 2))
    if not denom > 0:
        return float("nan")
    return float(np.sum(am * bm) / denom)


# ═══════════════════════════════════════════════════════════════════════════
#  ScaleAnalysis
# ═══════════════════════════════════════════════════════════════════════════

class ScaleAnalysis:
    """Reliability diagnostics for one scale.

    Parameters
    ----------
    dataset : DataFrame, mapping or array-like, shape (cases, items)
        Item scores.  Every item must have the same number of cases.
    options : dict, optional
        ``name`` (display name, default ``"Scale"``) and
        ``summary_item_statistics`` (include the per-item table in the
        report, default ``True``).  Other keys are ignored.

    Attributes (item statistics lazily computed on first access)
    -------------------------------------------------------------
    composite : np.ndarray
        Row-wise sum of the items, one value per case.
    alpha : float
        Cronbach's alpha.
    alpha_standardized : float
        Alpha from the mean inter-item correlation.
    item_total_correlation : np.ndarray
        Correlation of each item with the sum of the *other* items.
    alpha_if_deleted : np.ndarray
        Alpha of the scale with each item removed in turn.
    """

    def __init__(self, dataset, options: Optional[Mapping[str, Any]] = None):
        options = dict(options or {})
        ignored = sorted(str(k) for k in options if k not in _OPTION_DEFAULTS)
        if ignored:
            logger.debug(f"Ignoring unrecognised scale options: {ignored}")
        merged = {**_OPTION_DEFAULTS, **{k: v for k, v in options.items() if k in _OPTION_DEFAULTS}}

        self.name = str(merged["name"])
        self.summary_item_statistics = bool(merged["summary_item_statistics"])
        self._item_names, self._items = _coerce_items(dataset)

        # lazy caches
        self._item_total: Optional[np.ndarray] = None
        self._alpha_if_deleted: Optional[np.ndarray] = None

    # ── shape ──────────────────────────────────────────────────────────

    @property
    def n_items(self) -> int:
        return self._items.shape[1]

    @property
    def n_cases(self) -> int:
        return self._items.shape[0]

    @property
    def item_names(self) -> list[str]:
        return list(self._item_names)

    @property
    def items(self) -> np.ndarray:
        """Copy of the ``(cases, items)`` score array."""
        return self._items.copy()

    # ── composite score ────────────────────────────────────────────────

    @property
    def composite(self) -> np.ndarray:
        """Total score per case (sum across items)."""
        return self._items.sum(axis=1)

    @property
    def mean(self) -> float:
        return float(self.composite.mean()) if self.n_cases else float("nan")

    @property
    def sd(self) -> float:
        return float(self.composite.std(ddof=1)) if self.n_cases > 1 else float("nan")

    @property
    def item_means(self) -> np.ndarray:
        return self._items.mean(axis=0)

    @property
    def item_sds(self) -> np.ndarray:
        if self.n_cases < 2:
            return np.full(self.n_items, np.nan)
        return self._items.std(axis=0, ddof=1)

    # ── reliability ────────────────────────────────────────────────────

    @property
    def alpha(self) -> float:
        return _cronbach_alpha(self._items)

    @property
    def alpha_standardized(self) -> float:
        k = self.n_items
        if k < 2 or self.n_cases < 2:
            return float("nan")
        r_mat, _, _ = _pairwise_pearson(self._items)
        off_diag = r_mat[~np.eye(k, dtype=bool)]
        if not np.all(np.isfinite(off_diag)):
            return float("nan")
        r_bar = off_diag.mean()
        return float(k * r_bar / (1.0 + (k - 1) * r_bar))

    @property
    def item_total_correlation(self) -> np.ndarray:
        """Corrected item-total correlation (item vs. sum of the rest)."""
        if self._item_total is None:
            total = self.composite
            self._item_total = np.array([
                _pearson(self._items[:, i], total - self._items[:, i])
                for i in range(self.n_items)
            ])
        return self._item_total

    @property
    def alpha_if_deleted(self) -> np.ndarray:
        if self._alpha_if_deleted is None:
            self._alpha_if_deleted = np.array([
                _cronbach_alpha(np.delete(self._items, i, axis=1))
                for i in range(self.n_items)
            ])
        return self._alpha_if_deleted

    # ── export ─────────────────────────────────────────────────────────

    def to_dataframe(self):
        """Per-item statistics as a ``pandas.DataFrame`` indexed by item."""
        pd = _require_pandas()
        return pd.DataFrame(
            {
                "mean": self.item_means,
                "sd": self.item_sds,
                "item_total_correlation": self.item_total_correlation,
                "alpha_if_deleted": self.alpha_if_deleted,
            },
            index=self.item_names,
        )

    def report_building(self, section) -> None:
        with section.section(self.name) as s:
            s.table(
                ["statistic", "value"],
                [
                    ["Items", self.n_items],
                    ["Valid cases", self.n_cases],
                    ["Mean", self.mean],
                    ["SD", self.sd],
                    ["Cronbach's alpha", self.alpha],
                    ["Standardized alpha", self.alpha_standardized],
                ],
            )
            if self.summary_item_statistics:
                s.table(
                    ["item", "mean", "sd", "item-total r", "alpha if deleted"],
                    [
                        [name, m, sd, r, a]
                        for name, m, sd, r, a in zip(
                            self._item_names,
                            self.item_means,
                            self.item_sds,
                            self.item_total_correlation,
                            self.alpha_if_deleted,
                        )
                    ],
                )

    def summary(self) -> str:
        """Quick diagnostic string."""
        return (
            f"{self.name}  |  items={self.n_items}, cases={self.n_cases}, "
            f"alpha={self.alpha:.3f}"
        )

    def __repr__(self) -> str:
        return (
            f"ScaleAnalysis(name='{self.name}', n_items={self.n_items}, "
            f"n_cases={self.n_cases})"
        )
