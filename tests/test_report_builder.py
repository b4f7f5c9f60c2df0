"""
Tests for the hierarchical report tree.
"""

import pytest

from multiscale.report import ReportBuilder, Section, Table, Text


class Renders:
    def report_building(self, section):
        section.text("rendered by element")


def test_nested_sections_and_text_rendering():
    builder = ReportBuilder("Title")
    with builder.section("Outer") as outer:
        outer.text("hello")
        with outer.section("Inner") as inner:
            inner.table(["k", "v"], [["alpha", 0.81234], ["n", 12]])

    text = builder.to_text()
    assert text.startswith("# Title")
    assert "## Outer" in text
    assert "### Inner" in text
    assert "| alpha | 0.812 |" in text
    assert "| n     | 12    |" in text


def test_section_is_attached_only_on_success():
    builder = ReportBuilder()
    with pytest.raises(RuntimeError):
        with builder.section("Broken") as s:
            s.text("partial")
            raise RuntimeError("boom")
    assert builder.sections == []


def test_parse_element_delegates_or_falls_back():
    section = Section("root")
    section.parse_element(Renders())
    section.parse_element(42)
    section.parse_element(Text("raw"))

    assert [e.content for e in section.elements] == ["rendered by element", "42", "raw"]


def test_find_searches_depth_first():
    root = Section("root")
    with root.section("a") as a:
        with a.section("target") as t:
            t.text("deep")
    with root.section("target") as t2:
        t2.text("shallow")

    assert root.find("target").elements[0].content == "deep"
    assert root.find("missing") is None


def test_anonymous_builder_renders_children_only():
    builder = ReportBuilder()
    with builder.section("Only") as s:
        s.text("body")
    assert builder.to_text() == "# Only\n\nbody\n"


def test_table_pads_short_rows():
    section = Section("t")
    section.table(["a", "b"], [["x"]])
    assert isinstance(section.elements[0], Table)
    assert "| x |   |" in section.to_text()
