import numpy as np
import pytest


@pytest.fixture
def rng():
    return np.random.default_rng(2025)


@pytest.fixture
def survey(rng):
    """Six items driven by two correlated latent traits, 200 respondents."""
    n = 200
    trait_a = rng.normal(size=n)
    trait_b = 0.5 * trait_a + rng.normal(size=n)
    noise = lambda: 0.6 * rng.normal(size=n)
    return {
        "x1": trait_a + noise(),
        "x2": trait_a + noise(),
        "x3": trait_a + noise(),
        "x4": trait_b + noise(),
        "x5": trait_b + noise(),
        "x6": trait_b + noise(),
    }
