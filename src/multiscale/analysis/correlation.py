"""
Pearson correlation matrix between named vectors.

This is the correlation primitive consumed by ``MultiScaleAnalysis``: it
takes an ordered mapping ``name -> vector`` and returns the symmetric
matrix of pairwise Pearson coefficients as a ``Result`` labelled by name.

Example
-------
>>> from multiscale.analysis.correlation import correlation_matrix
>>> res = correlation_matrix({"s1": [5, 7, 9, 4], "s2": [3, 4, 2, 1]})
>>> res.values        # (2, 2) Pearson matrix, unit diagonal
>>> res.p_values      # two-sided p-values, 0 on the diagonal
"""

from __future__ import annotations

import warnings
from typing import Mapping, Sequence

import numpy as np
from scipy import stats

from ..core.exceptions import DimensionMismatchError
from ..utils.logging import get_logger
from .result import Result

logger = get_logger("multiscale.correlation")

# ═══════════════════════════════════════════════════════════════════════════
#  Input validation
# ═══════════════════════════════════════════════════════════════════════════

def _validate_vectors(named_vectors: Mapping[str, Sequence[float]]):
    """Stack named vectors into a ``(T, N)`` array.

    Returns
    -------
    names : list[str]
    data : np.ndarray, shape (T, N)
    """
    names = [str(k) for k in named_vectors]
    columns = [np.asarray(v, dtype=np.float64).ravel() for v in named_vectors.values()]

    lengths = {name: len(col) for name, col in zip(names, columns)}
    if len(set(lengths.values())) > 1:
        raise DimensionMismatchError(
            f"All vectors must have the same number of observations, got {lengths}."
        )

    if not columns:
        return names, np.empty((0, 0))
    return names, np.column_stack(columns)


# ═══════════════════════════════════════════════════════════════════════════
#  Computation helpers
# ═══════════════════════════════════════════════════════════════════════════

def _pairwise_pearson(data: np.ndarray):
    """Full N×N Pearson matrix with p-values.

    Pairs involving a zero-variance column are undefined and come back as
    NaN in both matrices.  The diagonal is 1.0 (p = 0) regardless.

    Returns
    -------
    r_matrix : (N, N)
    p_matrix : (N, N)
    constant : (N,) bool mask of zero-variance columns
    """
    T, N = data.shape
    centred = data - data.mean(axis=0)
    norms = np.sqrt(np.sum(centred ** 2, axis=0))
    constant = ~(norms > 0)

    with np.errstate(invalid="ignore", divide="ignore"):
        r_matrix = (centred.T @ centred) / np.outer(norms, norms)
    r_matrix[constant, :] = np.nan
    r_matrix[:, constant] = np.nan
    r_matrix = np.clip(r_matrix, -1.0, 1.0)

    p_matrix = np.full((N, N), np.nan)
    for i in range(N):
        for j in range(i + 1, N):
            if constant[i] or constant[j] or T < 3:
                continue
            _, p = stats.pearsonr(data[:, i], data[:, j])
            p_matrix[i, j] = p
            p_matrix[j, i] = p

    np.fill_diagonal(r_matrix, 1.0)
    np.fill_diagonal(p_matrix, 0.0)
    return r_matrix, p_matrix, constant


# ═══════════════════════════════════════════════════════════════════════════
#  Public primitive
# ═══════════════════════════════════════════════════════════════════════════

def correlation_matrix(named_vectors: Mapping[str, Sequence[float]]) -> Result:
    """Pearson correlation matrix of *named_vectors*.

    Parameters
    ----------
    named_vectors : mapping of str to sequence of float
        Ordered mapping; its order becomes the row / column order.

    Returns
    -------
    Result
        ``metric="correlation"``, symmetric ``(N, N)`` values with a unit
        diagonal, p-values and ``extra["n_cases"]``.

    Raises
    ------
    DimensionMismatchError
        If the vectors do not all have the same length.
    """
    names, data = _validate_vectors(named_vectors)
    N = len(names)
    T = data.shape[0] if N else 0

    if N == 0:
        r_mat, p_mat = np.empty((0, 0)), np.empty((0, 0))
    else:
        r_mat, p_mat, constant = _pairwise_pearson(data)
        if N > 1 and constant.any():
            flat = [names[i] for i in np.flatnonzero(constant)]
            warnings.warn(
                f"Vectors {flat} have zero variance; their correlations are "
                f"undefined and reported as NaN.",
                UserWarning,
                stacklevel=2,
            )

    logger.debug(f"Correlation matrix computed for {N} vectors over {T} cases")
    return Result(
        metric="correlation",
        values=r_mat,
        p_values=p_mat,
        channel_names=names,
        extra={"n_cases": T},
    )
