"""
Tests for the Result container.
"""

import numpy as np
import pytest

from multiscale.analysis.correlation import correlation_matrix
from multiscale.analysis.result import Result
from multiscale.report import ReportBuilder


@pytest.fixture
def pairwise(rng):
    data = rng.normal(size=(30, 3))
    data[:, 1] += 2 * data[:, 0]
    return correlation_matrix({"s1": data[:, 0], "s2": data[:, 1], "s3": data[:, 2]})


def test_label_and_integer_lookup_agree(pairwise):
    assert pairwise["s1", "s2"] == pairwise[0, 1]
    np.testing.assert_array_equal(pairwise["s3"], pairwise.values[2])


def test_array_protocol(pairwise):
    np.testing.assert_array_equal(np.asarray(pairwise), pairwise.values)
    assert len(pairwise) == 3
    assert pairwise.matrix is pairwise.values


def test_significant_marks_strong_pair(pairwise):
    mask = pairwise.significant(alpha=0.05, correction="bonferroni")
    assert mask[0, 1]
    assert mask[1, 0]


def test_each_pair_counts_once_in_bonferroni(pairwise):
    raw = pairwise.p_values
    corrected = pairwise.p_values_corrected("bonferroni")

    upper = np.triu_indices(3, 1)
    np.testing.assert_allclose(corrected[upper], np.minimum(raw[upper] * 3, 1.0))
    np.testing.assert_array_equal(corrected, corrected.T)
    np.testing.assert_array_equal(np.diag(corrected), [0.0, 0.0, 0.0])


def test_fdr_keeps_largest_p_value(pairwise):
    upper = np.triu_indices(3, 1)
    raw = pairwise.p_values[upper]
    corrected = pairwise.p_values_corrected("fdr_bh")[upper]
    assert corrected[np.argmax(raw)] == pytest.approx(raw.max())
    assert np.all(corrected >= raw)


def test_constant_vector_does_not_mask_other_pairs(rng):
    x = rng.normal(size=50)
    with pytest.warns(UserWarning, match="zero variance"):
        res = correlation_matrix({"a": x, "b": 3 * x + rng.normal(size=50), "c": np.ones(50)})

    raw = res.p_values[0, 1]
    assert raw < 1e-10
    for method in ("fdr_bh", "bonferroni"):
        corrected = res.p_values_corrected(method)
        # a-b is the only defined test
        assert corrected[0, 1] == pytest.approx(raw)
        assert corrected[1, 0] == pytest.approx(raw)
        assert np.isnan(corrected[0, 2]) and np.isnan(corrected[2, 1])
        np.testing.assert_array_equal(np.diag(corrected), [0.0, 0.0, 0.0])

    mask = res.significant(correction="fdr_bh")
    assert mask[0, 1] and mask[1, 0]
    assert not mask[0, 2] and not mask[1, 2]


def test_vector_correction_skips_nan():
    res = Result(
        metric="r",
        values=np.array([0.5, 0.3, np.nan]),
        p_values=np.array([0.01, 0.04, np.nan]),
    )
    fdr = res.p_values_corrected("fdr_bh")
    np.testing.assert_allclose(fdr[:2], [0.02, 0.04])
    assert np.isnan(fdr[2])
    np.testing.assert_allclose(res.p_values_corrected("bonferroni")[:2], [0.02, 0.08])
    np.testing.assert_array_equal(res.significant(), [True, True, False])


def test_unknown_correction_rejected(pairwise):
    with pytest.raises(ValueError, match="Unknown correction"):
        pairwise.p_values_corrected("holm")


def test_missing_p_values_rejected():
    res = Result(metric="alpha", values=np.array([0.8, 0.7]))
    with pytest.raises(ValueError, match="No p-values"):
        res.significant()


def test_latex_has_labels_and_stars(pairwise):
    latex = pairwise.to_latex(caption="Scales", label="tab:scales")
    assert r"\caption{Scales}" in latex
    assert r"\label{tab:scales}" in latex
    assert "s1 & 1.0000" in latex
    assert "*" in latex


def test_report_building_renders_table(pairwise):
    builder = ReportBuilder("r")
    builder.parse_element(pairwise)

    text = builder.to_text()
    assert "| s1" in text
    assert "n = 30" in text


def test_vector_report_building_includes_p_values():
    res = Result(
        metric="r",
        values=np.array([0.5, 0.1]),
        p_values=np.array([0.01, 0.6]),
        channel_names=["a", "b"],
    )
    builder = ReportBuilder("r")
    builder.parse_element(res)
    table = builder.root.elements[0]
    assert table.header == ["scale", "r", "p"]
    assert table.rows[1][0] == "b"


def test_repr_survives_nan_matrix():
    res = Result(metric="correlation", values=np.array([[1.0, np.nan], [np.nan, 1.0]]))
    assert "correlation" in repr(res)


def test_to_dataframe_is_labelled(pairwise):
    pytest.importorskip("pandas")
    df = pairwise.to_dataframe()
    assert list(df.index) == ["s1", "s2", "s3"]
    assert list(df.columns) == ["s1", "s2", "s3"]
    assert df.loc["s1", "s2"] == pytest.approx(pairwise["s1", "s2"])
