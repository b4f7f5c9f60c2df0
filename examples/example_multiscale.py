"""
===============================================================================
multiscale — Complete Walkthrough
===============================================================================

This example simulates a short questionnaire answered by 300 people:

    trait A  →  items x1, x2, x3
    trait B  →  items x4, x5, x6      (B partly driven by A)

Each trait is measured as one scale.  We then inspect the reliability of
every scale, the correlation between scale scores, and a PCA / principal
axis factoring across scales, exactly as a researcher would after data
collection.

Run:
    python example_multiscale.py
"""

from pathlib import Path

import matplotlib.pyplot as plt
import numpy as np

from multiscale import MultiScaleAnalysis
from multiscale.analysis.multiscale import configure, scale
from multiscale.utils import setup_file_logging

setup_file_logging(Path("logs"))

np.random.seed(2025)

N = 300
trait_a = np.random.randn(N)
trait_b = 0.6 * trait_a + np.random.randn(N)
trait_c = np.random.randn(N)

ds = {
    "x1": trait_a + 0.5 * np.random.randn(N),
    "x2": trait_a + 0.5 * np.random.randn(N),
    "x3": trait_a + 0.7 * np.random.randn(N),
    "x4": trait_b + 0.5 * np.random.randn(N),
    "x5": trait_b + 0.6 * np.random.randn(N),
    "x6": trait_b + 0.8 * np.random.randn(N),
    "x7": trait_c + 0.5 * np.random.randn(N),
    "x8": trait_c + 0.5 * np.random.randn(N),
}


def pick(*names):
    return {n: ds[n] for n in names}


# ─── 1. Setup with the instance passed in ───────────────────────────────────

msa = MultiScaleAnalysis(
    {
        "name": "Wellbeing questionnaire",
        "summary_correlation_matrix": True,
        "summary_pca": True,
        "pca_options": {"n_components": 2},
    },
    lambda m: (
        m.scale("a", pick("x1", "x2", "x3")),
        m.scale("b", pick("x4", "x5", "x6"), {"name": "Social scale"}),
        m.scale("c", pick("x7", "x8")),
    ),
)

print(msa.summary())

# ─── 2. Direct access to the pieces ─────────────────────────────────────────

corr = msa.correlation_matrix()
print(corr)
print(corr.to_latex(caption="Correlation between scales"))

pca = msa.pca()                       # uses pca_options
print("PCA eigenvalues:", np.round(pca.eigenvalues, 3))

pca_one = msa.pca({"n_components": 1})  # override replaces pca_options
print("One-component loadings:", np.round(pca_one.component_matrix[:, 0], 3))

paf = msa.principal_axis({"n_factors": 1})
print(f"Principal axis: {paf.iterations} iterations, converged={paf.converged}")

# ─── 3. Setup without arguments, through the module helpers ─────────────────


def setup():
    scale("a", pick("x1", "x2", "x3"))
    scale("b", pick("x4", "x5", "x6"))
    configure(summary_principal_axis=True)


msa2 = MultiScaleAnalysis({"name": "Two traits"}, setup)
print(msa2.summary())

# ─── 4. Heatmap ─────────────────────────────────────────────────────────────

corr.plot()
plt.savefig("scale_correlations.png", dpi=150)
