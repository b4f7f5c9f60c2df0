"""
Tests for the Pearson correlation primitive.
"""

import numpy as np
import pytest

from multiscale.analysis.correlation import correlation_matrix
from multiscale.core.exceptions import DimensionMismatchError, MultiScaleError


def test_matches_numpy_corrcoef(rng):
    data = rng.normal(size=(40, 4))
    named = {f"v{i}": data[:, i] for i in range(4)}

    res = correlation_matrix(named)

    np.testing.assert_allclose(res.values, np.corrcoef(data, rowvar=False), atol=1e-12)
    assert res.channel_names == ["v0", "v1", "v2", "v3"]
    assert res.extra["n_cases"] == 40


def test_symmetric_with_unit_diagonal(rng):
    data = rng.normal(size=(25, 5))
    res = correlation_matrix({str(i): data[:, i] for i in range(5)})

    assert res.shape == (5, 5)
    np.testing.assert_allclose(np.diag(res.values), 1.0)
    np.testing.assert_allclose(res.values, res.values.T)
    np.testing.assert_allclose(np.diag(res.p_values), 0.0)
    np.testing.assert_allclose(res.p_values, res.p_values.T)


def test_known_coefficient():
    """[5, 7, 9] against [3, 1, 2] has r = -0.5."""
    res = correlation_matrix({"a": [5, 7, 9], "b": [3, 1, 2]})
    assert res["a", "b"] == pytest.approx(-0.5)
    assert res["b", "a"] == pytest.approx(-0.5)


def test_order_follows_mapping_order(rng):
    data = rng.normal(size=(10, 3))
    res = correlation_matrix({"z": data[:, 0], "a": data[:, 1], "m": data[:, 2]})
    assert res.channel_names == ["z", "a", "m"]
    assert res[0, 1] == pytest.approx(np.corrcoef(data[:, 0], data[:, 1])[0, 1])


def test_single_vector_is_one_by_one():
    res = correlation_matrix({"only": [1.0, 2.0, 4.0]})
    assert res.shape == (1, 1)
    assert res.values[0, 0] == 1.0


def test_no_vectors_is_empty_matrix():
    res = correlation_matrix({})
    assert res.shape == (0, 0)


def test_length_mismatch_raises():
    with pytest.raises(DimensionMismatchError):
        correlation_matrix({"a": [1, 2, 3], "b": [1, 2]})


def test_mismatch_is_value_error_and_package_error():
    with pytest.raises(ValueError):
        correlation_matrix({"a": [1, 2, 3], "b": [1, 2, 3, 4]})
    with pytest.raises(MultiScaleError):
        correlation_matrix({"a": [1, 2, 3], "b": [1, 2, 3, 4]})


def test_constant_vector_gives_nan_and_warns():
    with pytest.warns(UserWarning, match="zero variance"):
        res = correlation_matrix({"a": [5, 7, 9], "b": [3, 3, 3]})

    assert res.values[0, 0] == 1.0
    assert res.values[1, 1] == 1.0
    assert np.isnan(res.values[0, 1])
    assert np.isnan(res.values[1, 0])
    assert np.isnan(res.p_values[0, 1])
