"""
Result container for multiscale analyses.

Correlation matrices (and any other labelled array a collaborator wants to
expose) come back as a ``Result`` rather than a bare NumPy array.  The
container keeps direct array access for downstream code while adding
labelled export, significance filtering and report rendering.

Classes
-------
Result
    Labelled 1-D or 2-D array with optional p-values.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Sequence

import numpy as np

# ---------------------------------------------------------------------------
# Lazy optional imports – pandas / matplotlib are not needed at import time
# ---------------------------------------------------------------------------

def _require_pandas():
    try:
        import pandas as pd
        return pd
    except ImportError:
        raise ImportError(
            "pandas is required for .to_dataframe(). "
            "Install it with: pip install multiscale[pandas]"
        )


def _require_matplotlib():
    try:
        import matplotlib.pyplot as plt
        return plt
    except ImportError:
        raise ImportError(
            "matplotlib is required for .plot(). "
            "Install it with: pip install multiscale[plot]"
        )


# ═══════════════════════════════════════════════════════════════════════════
#  Multiple-comparison correction helpers
# ═══════════════════════════════════════════════════════════════════════════

def _bonferroni(p: np.ndarray) -> np.ndarray:
    """Bonferroni correction: multiply p-values by the number of tests."""
    return np.minimum(p * p.size, 1.0)


def _fdr_bh(p: np.ndarray) -> np.ndarray:
    """Benjamini–Hochberg FDR correction."""
    n = p.size
    flat = p.ravel().astype(np.float64)
    order = np.argsort(flat)
    ranked = np.empty_like(flat)
    ranked[order] = np.arange(1, n + 1)
    corrected = np.minimum(flat * n / ranked, 1.0)
    # step-up monotonicity
    rev = order[::-1]
    corrected[rev] = np.minimum.accumulate(corrected[rev])
    return corrected.reshape(p.shape)


_CORRECTIONS = {
    "bonferroni": _bonferroni,
    "fdr_bh": _fdr_bh,
    "none": lambda p: p,
}


def _correct_finite(p: np.ndarray, correct) -> np.ndarray:
    """Apply *correct* to the finite entries of a 1-D array only.

    NaN p-values (undefined tests) are not counted as tests and stay NaN.
    """
    out = np.full(p.shape, np.nan)
    finite = np.isfinite(p)
    if finite.any():
        out[finite] = correct(p[finite])
    return out


def _stars(p: float) -> str:
    if p <= 0.001:
        return "***"
    elif p <= 0.01:
        return "**"
    elif p <= 0.05:
        return "*"
    return ""


# ═══════════════════════════════════════════════════════════════════════════
#  Result
# ═══════════════════════════════════════════════════════════════════════════

@dataclass
class Result:
    """Labelled array returned by the correlation primitive.

    Parameters
    ----------
    metric : str
        Name of the metric (e.g. ``"correlation"``).
    values : np.ndarray
        ``(N,)`` per-scale scores or ``(N, N)`` pairwise matrix.
    p_values : np.ndarray or None
        Uncorrected two-sided p-values, same shape as *values*.
    channel_names : list[str] or None
        Row / column labels, normally the scale codes.
    extra : dict
        Additional data the producer wants to keep (e.g. ``n_cases``).

    Examples
    --------
    >>> res = correlation_matrix({"s1": a, "s2": b})
    >>> res.values          # raw (2, 2) array
    >>> res["s1", "s2"]     # lookup by label
    >>> res.significant()   # boolean mask at alpha=0.05
    >>> res.to_latex()
    """

    metric: str
    values: np.ndarray
    p_values: Optional[np.ndarray] = None
    channel_names: Optional[Sequence[str]] = None
    extra: dict = field(default_factory=dict)

    # ── array-like access ──────────────────────────────────────────────

    @property
    def matrix(self) -> np.ndarray:
        """Alias for ``values`` (convenient for pairwise results)."""
        return self.values

    @property
    def shape(self) -> tuple:
        return self.values.shape

    def __array__(self, dtype=None, copy=None):
        """Allow ``np.asarray(result)``."""
        return np.asarray(self.values, dtype=dtype)

    def __len__(self):
        return len(self.values)

    def _index(self, key):
        if isinstance(key, str):
            return self._channel_labels().index(key)
        return key

    def __getitem__(self, idx):
        if isinstance(idx, tuple):
            idx = tuple(self._index(k) for k in idx)
        else:
            idx = self._index(idx)
        return self.values[idx]

    # ── statistical helpers ────────────────────────────────────────────

    def p_values_corrected(self, method: str = "fdr_bh") -> np.ndarray:
        """Return p-values after multiple-comparison correction.

        Parameters
        ----------
        method : ``"bonferroni"`` | ``"fdr_bh"`` | ``"none"``
        """
        if self.p_values is None:
            raise ValueError(f"No p-values available for metric '{self.metric}'.")
        if method not in _CORRECTIONS:
            raise ValueError(
                f"Unknown correction method '{method}'. "
                f"Choose from {list(_CORRECTIONS.keys())}."
            )
        correct = _CORRECTIONS[method]
        p = np.asarray(self.p_values, dtype=np.float64)

        if p.ndim == 2 and p.shape[0] == p.shape[1]:
            # each pair is one test: correct the upper triangle, then mirror
            n = p.shape[0]
            upper = np.triu_indices(n, 1)
            out = np.zeros_like(p)
            out[upper] = _correct_finite(p[upper], correct)
            out = out + out.T
            np.fill_diagonal(out, np.diag(p))
            return out

        return _correct_finite(p.ravel(), correct).reshape(p.shape)

    def significant(
            self,
            alpha: float = 0.05,
            correction: str = "fdr_bh",
    ) -> np.ndarray:
        """Boolean mask of entries surviving the significance threshold.

        Undefined (NaN) p-values never count as significant.
        """
        return self.p_values_corrected(correction) < alpha

    # ── repr ───────────────────────────────────────────────────────────

    def _summary_stats(self) -> dict:
        v = self.values
        stats = {"shape": v.shape}
        if v.size and np.any(np.isfinite(v)):
            stats["mean"] = float(np.nanmean(v))
            stats["max"] = float(np.nanmax(v))
            stats["min"] = float(np.nanmin(v))
        if self.p_values is not None:
            n_sig = int(np.sum(self.p_values < 0.05))
            stats["significant_005"] = f"{n_sig}/{self.p_values.size}"
        return stats

    def __repr__(self) -> str:
        parts = [f"Result(metric='{self.metric}'"]
        for k, v in self._summary_stats().items():
            if isinstance(v, float):
                parts.append(f"  {k}={v:.4f}")
            else:
                parts.append(f"  {k}={v}")
        return ",\n".join(parts) + "\n)"

    def _channel_labels(self) -> list[str]:
        if self.channel_names is not None:
            return [str(n) for n in self.channel_names]
        return [f"ch_{i}" for i in range(self.values.shape[0])]

    # ── export: DataFrame ──────────────────────────────────────────────

    def to_dataframe(self, channel_names: Optional[Sequence[str]] = None):
        """Export to a ``pandas.DataFrame`` labelled by scale code."""
        pd = _require_pandas()

        names = list(channel_names) if channel_names is not None else self._channel_labels()
        v = self.values

        if v.ndim == 1:
            data = {"channel": names, self.metric: v}
            if self.p_values is not None:
                data["p_value"] = self.p_values
                data["p_corrected_fdr"] = self.p_values_corrected("fdr_bh")
            return pd.DataFrame(data)

        if v.ndim == 2:
            return pd.DataFrame(v, index=names, columns=names)

        return pd.DataFrame(v)

    # ── export: LaTeX ──────────────────────────────────────────────────

    def to_latex(
            self,
            stars: bool = True,
            caption: Optional[str] = None,
            label: Optional[str] = None,
    ) -> str:
        r"""Generate a LaTeX table string.

        Off-diagonal cells of a pairwise matrix carry significance stars when
        p-values are available and *stars* is true.
        """
        v = self.values
        if v.ndim not in (1, 2):
            raise ValueError("LaTeX export supports 1-D and 2-D results only.")

        names = [n.replace("_", r"\_") for n in self._channel_labels()]
        if v.ndim == 1:
            header = ["Scale", self.metric.replace("_", r"\_")]
        else:
            header = [""] + names

        lines = [r"\begin{table}[ht]", r"\centering"]
        if caption:
            lines.append(rf"\caption{{{caption}}}")
        if label:
            lines.append(rf"\label{{{label}}}")
        col_spec = "l" + "r" * (len(header) - 1)
        lines += [
            rf"\begin{{tabular}}{{{col_spec}}}",
            r"\toprule",
            " & ".join(header) + r" \\",
            r"\midrule",
        ]

        for i, name in enumerate(names):
            if v.ndim == 1:
                cells = [self._latex_cell(i, stars)]
            else:
                cells = [self._latex_cell((i, j), stars and i != j) for j in range(len(names))]
            lines.append(" & ".join([name] + cells) + r" \\")

        lines += [r"\bottomrule", r"\end{tabular}", r"\end{table}"]
        return "\n".join(lines)

    def _latex_cell(self, idx, show_stars: bool) -> str:
        cell = f"{self.values[idx]:.4f}"
        if show_stars and self.p_values is not None and np.isfinite(self.p_values[idx]):
            cell += _stars(self.p_values[idx])
        return cell

    # ── report ─────────────────────────────────────────────────────────

    def report_building(self, section) -> None:
        """Render as a table into a report ``Section``."""
        names = self._channel_labels()
        v = self.values
        if v.ndim == 2:
            section.table([""] + names, [[n] + list(v[i]) for i, n in enumerate(names)])
        else:
            header = ["scale", self.metric]
            rows = [[n, v[i]] for i, n in enumerate(names)]
            if self.p_values is not None:
                header.append("p")
                rows = [r + [self.p_values[i]] for i, r in enumerate(rows)]
            section.table(header, rows)
        if "n_cases" in self.extra:
            section.text(f"n = {self.extra['n_cases']}")

    # ── plotting ───────────────────────────────────────────────────────

    def plot(self, ax=None, **kwargs):
        """Heatmap for pairwise matrices, bar chart for per-scale vectors.

        Returns
        -------
        matplotlib.axes.Axes
        """
        plt = _require_matplotlib()
        labels = self._channel_labels()

        if self.values.ndim == 2:
            if ax is None:
                fig, ax = plt.subplots(figsize=kwargs.pop("figsize", (6, 5)))
            cmap = kwargs.pop("cmap", "RdBu_r")
            im = ax.imshow(self.values, cmap=cmap, vmin=-1, vmax=1, aspect="auto", **kwargs)
            ax.set_xticks(range(len(labels)))
            ax.set_yticks(range(len(labels)))
            ax.set_xticklabels(labels, rotation=45, ha="right", fontsize=8)
            ax.set_yticklabels(labels, fontsize=8)
            ax.set_title(f"{self.metric} matrix")
            plt.colorbar(im, ax=ax, shrink=0.8)
        else:
            if ax is None:
                fig, ax = plt.subplots(figsize=kwargs.pop("figsize", (8, 4)))
            x_pos = np.arange(len(labels))
            ax.bar(x_pos, self.values, **kwargs)
            ax.set_xticks(x_pos)
            ax.set_xticklabels(labels, rotation=45, ha="right", fontsize=8)
            ax.set_ylabel(self.metric)
            ax.axhline(0, color="k", linewidth=0.5)
        plt.tight_layout()
        return ax
