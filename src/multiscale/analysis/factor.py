"""
Factor extraction from a correlation matrix.

Both classes take a correlation matrix (a ``Result`` or any square array)
plus an options dict, and expose their output lazily.  Labels are taken
from ``Result.channel_names`` when available.

Classes
-------
PCA
    Principal component analysis (eigen-decomposition of the full matrix).
PrincipalAxis
    Iterative principal-axis factoring with communality re-estimation.

Example
-------
>>> from multiscale.analysis.factor import PCA, PrincipalAxis
>>> pca = PCA(corr, {"n_components": 2})
>>> pca.eigenvalues          # all eigenvalues, descending
>>> pca.component_matrix     # (p, 2) loadings
>>> paf = PrincipalAxis(corr, {"n_factors": 1, "max_iterations": 50})
>>> paf.communalities
"""

from __future__ import annotations

import warnings
from typing import Any, Mapping, Optional

import numpy as np
from scipy import linalg

from ..core.exceptions import CalculationError
from ..utils.logging import get_logger

logger = get_logger("multiscale.factor")

# ═══════════════════════════════════════════════════════════════════════════
#  Shared helpers
# ═══════════════════════════════════════════════════════════════════════════

def _validate_matrix(matrix) -> tuple[np.ndarray, list[str]]:
    """Coerce *matrix* to a finite, square, symmetric float array."""
    R = np.asarray(matrix, dtype=np.float64)
    if R.ndim != 2 or R.shape[0] != R.shape[1]:
        raise CalculationError(f"Correlation matrix must be square, got shape {R.shape}.")
    if R.shape[0] == 0:
        raise CalculationError("Factor extraction needs at least one variable.")
    if not np.all(np.isfinite(R)):
        raise CalculationError(
            "Correlation matrix contains undefined (NaN or infinite) entries; "
            "check for constant scales."
        )
    if not np.allclose(R, R.T, atol=1e-8):
        raise CalculationError("Correlation matrix must be symmetric.")

    names = getattr(matrix, "channel_names", None)
    if names is None:
        names = [f"v_{i + 1}" for i in range(R.shape[0])]
    return R, [str(n) for n in names]


def _resolve_options(options: Optional[Mapping[str, Any]], defaults: dict, owner: str) -> dict:
    options = dict(options or {})
    ignored = sorted(str(k) for k in options if k not in defaults)
    if ignored:
        logger.debug(f"{owner}: ignoring unrecognised options {ignored}")
    return {**defaults, **{k: v for k, v in options.items() if k in defaults}}


def _sorted_eigh(R: np.ndarray):
    """Eigen-decomposition with eigenvalues in descending order.

    Each eigenvector is oriented so its largest absolute entry is positive.
    """
    eigenvalues, eigenvectors = linalg.eigh(R)
    idx = np.argsort(eigenvalues)[::-1]
    eigenvalues = eigenvalues[idx]
    eigenvectors = eigenvectors[:, idx]

    pivots = np.argmax(np.abs(eigenvectors), axis=0)
    signs = np.sign(eigenvectors[pivots, np.arange(eigenvectors.shape[1])])
    signs[signs == 0] = 1.0
    return eigenvalues, eigenvectors * signs


def _kaiser(eigenvalues: np.ndarray) -> int:
    """Number of eigenvalues above 1 (at least one)."""
    return max(int(np.sum(eigenvalues > 1.0)), 1)


def _n_retained(requested, eigenvalues: np.ndarray, option: str) -> int:
    p = len(eigenvalues)
    if requested is None:
        return _kaiser(eigenvalues)
    requested = int(requested)
    if not 1 <= requested <= p:
        raise ValueError(f"{option} must be between 1 and {p}, got {requested}.")
    return requested


def _loadings(eigenvalues: np.ndarray, eigenvectors: np.ndarray, m: int) -> np.ndarray:
    return eigenvectors[:, :m] * np.sqrt(np.maximum(eigenvalues[:m], 0.0))


def _loading_rows(names, loadings, communalities):
    return [[n] + list(loadings[i]) + [communalities[i]] for i, n in enumerate(names)]


# ═══════════════════════════════════════════════════════════════════════════
#  PCA
# ═══════════════════════════════════════════════════════════════════════════

class PCA:
    """Principal component analysis of a correlation matrix.

    Parameters
    ----------
    matrix : Result or array-like, shape (p, p)
        Correlation matrix.  Must be finite and symmetric.
    options : dict, optional
        ``name`` (default ``"PCA"``) and ``n_components`` (default: Kaiser
        criterion, eigenvalues greater than 1).  Other keys are ignored.
    """

    DEFAULTS = {"name": "PCA", "n_components": None}

    def __init__(self, matrix, options: Optional[Mapping[str, Any]] = None):
        self._R, self.variable_names = _validate_matrix(matrix)
        self.options = _resolve_options(options, self.DEFAULTS, "PCA")
        self.name = str(self.options["name"])

        # lazy caches
        self._eigenvalues: Optional[np.ndarray] = None
        self._eigenvectors: Optional[np.ndarray] = None
        self._n_components: Optional[int] = None

    def _compute(self):
        if self._eigenvalues is None:
            self._eigenvalues, self._eigenvectors = _sorted_eigh(self._R)
            self._n_components = _n_retained(
                self.options["n_components"], self._eigenvalues, "n_components"
            )
            logger.debug(f"PCA retained {self._n_components} of {len(self._eigenvalues)} components")

    @property
    def n_variables(self) -> int:
        return self._R.shape[0]

    @property
    def n_components(self) -> int:
        self._compute()
        return self._n_components

    @property
    def eigenvalues(self) -> np.ndarray:
        """All eigenvalues, sorted descending."""
        self._compute()
        return self._eigenvalues

    @property
    def eigenvectors(self) -> np.ndarray:
        self._compute()
        return self._eigenvectors

    @property
    def component_matrix(self) -> np.ndarray:
        """Loadings of the retained components, shape ``(p, n_components)``."""
        return _loadings(self.eigenvalues, self.eigenvectors, self.n_components)

    @property
    def communalities(self) -> np.ndarray:
        return np.sum(self.component_matrix ** 2, axis=1)

    @property
    def explained_variance_ratio(self) -> np.ndarray:
        return self.eigenvalues / self.n_variables

    def report_building(self, section) -> None:
        ratio = self.explained_variance_ratio
        cumulative = np.cumsum(ratio)
        section.table(
            ["component", "eigenvalue", "% variance", "cumulative %"],
            [
                [i + 1, ev, 100 * r, 100 * c]
                for i, (ev, r, c) in enumerate(zip(self.eigenvalues, ratio, cumulative))
            ],
        )
        section.table(
            ["variable"] + [f"PC{i + 1}" for i in range(self.n_components)] + ["h2"],
            _loading_rows(self.variable_names, self.component_matrix, self.communalities),
        )

    def __repr__(self) -> str:
        return f"PCA(name='{self.name}', n_variables={self.n_variables})"


# ═══════════════════════════════════════════════════════════════════════════
#  Principal axis
# ═══════════════════════════════════════════════════════════════════════════

def _initial_communalities(R: np.ndarray, smc: bool) -> np.ndarray:
    """Starting communality estimates.

    Squared multiple correlations when *smc* is true, falling back to the
    largest absolute off-diagonal correlation per variable when the matrix
    cannot be inverted.  Without *smc* every variable starts at 1.0.
    """
    p = R.shape[0]
    if not smc:
        return np.ones(p)
    try:
        inv_diag = np.diag(np.linalg.inv(R))
        h2 = 1.0 - 1.0 / inv_diag
        if np.all(np.isfinite(h2)) and np.all(inv_diag > 0):
            return h2
    except np.linalg.LinAlgError:
        pass

    warnings.warn(
        "Correlation matrix is singular; using max |r| as initial "
        "communalities for principal axis factoring.",
        UserWarning,
        stacklevel=4,
    )
    if p == 1:
        return np.ones(1)
    off = np.abs(R - np.eye(p))
    return off.max(axis=1)


class PrincipalAxis:
    """Principal-axis factoring of a correlation matrix.

    The diagonal of the matrix is replaced by communality estimates, the
    reduced matrix is eigen-decomposed, and communalities are re-estimated
    from the retained loadings until they change by less than ``epsilon``.

    Parameters
    ----------
    matrix : Result or array-like, shape (p, p)
        Correlation matrix.  Must be finite and symmetric.
    options : dict, optional
        ``name`` (``"Principal Axis"``), ``n_factors`` (Kaiser criterion on
        the unreduced matrix), ``max_iterations`` (25), ``epsilon`` (1e-6),
        ``smc`` (``True``).  Other keys are ignored.
    """

    DEFAULTS = {
        "name": "Principal Axis",
        "n_factors": None,
        "max_iterations": 25,
        "epsilon": 1e-6,
        "smc": True,
    }

    def __init__(self, matrix, options: Optional[Mapping[str, Any]] = None):
        self._R, self.variable_names = _validate_matrix(matrix)
        self.options = _resolve_options(options, self.DEFAULTS, "PrincipalAxis")
        self.name = str(self.options["name"])

        # lazy caches
        self._initial: Optional[np.ndarray] = None
        self._communalities: Optional[np.ndarray] = None
        self._eigenvalues: Optional[np.ndarray] = None
        self._loadings: Optional[np.ndarray] = None
        self._iterations = 0
        self._converged = False

    def _iterate(self):
        if self._loadings is not None:
            return
        R = self._R
        m = _n_retained(
            self.options["n_factors"], linalg.eigvalsh(R)[::-1], "n_factors"
        )
        epsilon = float(self.options["epsilon"])
        max_iterations = max(int(self.options["max_iterations"]), 1)

        h2 = _initial_communalities(R, bool(self.options["smc"]))
        self._initial = h2.copy()

        for _ in range(max_iterations):
            reduced = R.copy()
            np.fill_diagonal(reduced, h2)
            eigenvalues, eigenvectors = _sorted_eigh(reduced)
            loadings = _loadings(eigenvalues, eigenvectors, m)
            new_h2 = np.sum(loadings ** 2, axis=1)
            self._iterations += 1
            change = np.max(np.abs(new_h2 - h2))
            h2 = new_h2
            if change < epsilon:
                self._converged = True
                break

        if not self._converged:
            warnings.warn(
                f"Principal axis factoring did not converge after "
                f"{max_iterations} iterations.",
                UserWarning,
                stacklevel=3,
            )
        logger.debug(
            f"Principal axis: {m} factors, {self._iterations} iterations, "
            f"converged={self._converged}"
        )
        self._communalities = h2
        self._eigenvalues = eigenvalues
        self._loadings = loadings

    @property
    def n_variables(self) -> int:
        return self._R.shape[0]

    @property
    def n_factors(self) -> int:
        return self.component_matrix.shape[1]

    @property
    def initial_communalities(self) -> np.ndarray:
        self._iterate()
        return self._initial

    @property
    def communalities(self) -> np.ndarray:
        self._iterate()
        return self._communalities

    @property
    def eigenvalues(self) -> np.ndarray:
        """Eigenvalues of the final reduced matrix, sorted descending."""
        self._iterate()
        return self._eigenvalues

    @property
    def component_matrix(self) -> np.ndarray:
        """Factor loadings, shape ``(p, n_factors)``."""
        self._iterate()
        return self._loadings

    @property
    def iterations(self) -> int:
        self._iterate()
        return self._iterations

    @property
    def converged(self) -> bool:
        self._iterate()
        return self._converged

    def report_building(self, section) -> None:
        section.text(
            f"Iterations: {self.iterations} "
            f"({'converged' if self.converged else 'not converged'})"
        )
        section.table(
            ["variable", "initial h2", "extracted h2"],
            [
                [n, i, e]
                for n, i, e in zip(self.variable_names, self.initial_communalities, self.communalities)
            ],
        )
        section.table(
            ["variable"] + [f"F{i + 1}" for i in range(self.n_factors)] + ["h2"],
            _loading_rows(self.variable_names, self.component_matrix, self.communalities),
        )

    def __repr__(self) -> str:
        return f"PrincipalAxis(name='{self.name}', n_variables={self.n_variables})"
