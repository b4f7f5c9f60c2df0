"""
Tests for single-scale reliability analysis.
"""

import numpy as np
import pytest

from multiscale.analysis.reliability import ScaleAnalysis
from multiscale.core.exceptions import DimensionMismatchError
from multiscale.report import ReportBuilder


def test_composite_is_row_sum():
    sa = ScaleAnalysis({"a": [1, 2, 3], "b": [4, 5, 6]})
    np.testing.assert_array_equal(sa.composite, [5, 7, 9])
    assert sa.n_items == 2
    assert sa.n_cases == 3
    assert sa.item_names == ["a", "b"]


def test_identical_items_have_perfect_alpha():
    x = [1, 3, 2, 5, 4]
    sa = ScaleAnalysis({"a": x, "b": x, "c": x})

    assert sa.alpha == pytest.approx(1.0)
    assert sa.alpha_standardized == pytest.approx(1.0)
    np.testing.assert_allclose(sa.item_total_correlation, 1.0)
    np.testing.assert_allclose(sa.alpha_if_deleted, 1.0)


def test_uncorrelated_items_have_zero_alpha():
    sa = ScaleAnalysis({"a": [1, 1, -1, -1], "b": [1, -1, 1, -1]})
    assert sa.alpha == pytest.approx(0.0)


def test_known_alpha(survey):
    """Alpha from the textbook variance formula."""
    data = np.column_stack([survey["x1"], survey["x2"], survey["x3"]])
    k = 3
    expected = k / (k - 1) * (1 - data.var(axis=0, ddof=1).sum() / data.sum(axis=1).var(ddof=1))

    sa = ScaleAnalysis(data)
    assert sa.alpha == pytest.approx(expected)
    assert 0.7 < sa.alpha < 1.0


def test_single_item_alpha_is_undefined():
    sa = ScaleAnalysis([1.0, 2.0, 3.0])
    assert sa.n_items == 1
    assert np.isnan(sa.alpha)
    assert np.isnan(sa.alpha_standardized)


def test_constant_total_alpha_is_undefined():
    sa = ScaleAnalysis({"a": [2, 2, 2], "b": [1, 1, 1]})
    assert np.isnan(sa.alpha)


def test_array_input_gets_generated_item_names():
    sa = ScaleAnalysis(np.ones((4, 3)))
    assert sa.item_names == ["item_1", "item_2", "item_3"]


def test_unequal_item_lengths_raise():
    with pytest.raises(DimensionMismatchError):
        ScaleAnalysis({"a": [1, 2, 3], "b": [1, 2]})


def test_three_dimensional_data_rejected():
    with pytest.raises(ValueError, match="2-D"):
        ScaleAnalysis(np.zeros((2, 2, 2)))


def test_options_name_and_unknown_keys():
    sa = ScaleAnalysis({"a": [1, 2], "b": [2, 1]}, {"name": "Mood", "colour": "red"})
    assert sa.name == "Mood"
    assert not hasattr(sa, "colour")


def test_items_returns_a_copy():
    sa = ScaleAnalysis({"a": [1, 2], "b": [2, 1]})
    sa.items[0, 0] = 99
    assert sa.composite[0] == 3


def test_report_building_adds_named_section(survey):
    sa = ScaleAnalysis({"x1": survey["x1"], "x2": survey["x2"]}, {"name": "Trait A"})
    builder = ReportBuilder("report")
    builder.parse_element(sa)

    section = builder.sections[0]
    assert section.name == "Trait A"
    summary, item_table = section.elements
    assert summary.rows[0] == ["Items", 2]
    assert [row[0] for row in item_table.rows] == ["x1", "x2"]


def test_item_table_can_be_switched_off():
    sa = ScaleAnalysis({"a": [1, 2, 4], "b": [2, 1, 3]}, {"summary_item_statistics": False})
    builder = ReportBuilder()
    builder.parse_element(sa)
    assert len(builder.sections[0].elements) == 1


def test_dataframe_round_trip(survey):
    pd = pytest.importorskip("pandas")
    df = pd.DataFrame({"x1": survey["x1"], "x2": survey["x2"]})

    sa = ScaleAnalysis(df)
    assert sa.item_names == ["x1", "x2"]
    np.testing.assert_allclose(sa.composite, df.sum(axis=1).to_numpy())

    stats = sa.to_dataframe()
    assert list(stats.index) == ["x1", "x2"]
    assert "alpha_if_deleted" in stats.columns
