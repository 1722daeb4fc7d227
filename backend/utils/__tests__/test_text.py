"""
Unit tests for the text helpers used by source adapters.

Run: python3 -m pytest utils/__tests__/test_text.py -v
"""

import pytest

from utils.text import (
    company_slug,
    extract_tech_tags,
    format_salary,
    normalize_location,
    remove_nul,
    strip_html,
    truncate,
    unique_tags,
)


class TestStripHtml:
    """Tests for strip_html() and truncate()."""

    def test_removes_tags_and_entities(self):
        assert strip_html("<p>Hello&nbsp;<b>world</b> &amp; more</p>") == "Hello world & more"

    def test_empty(self):
        assert strip_html("") == ""
        assert strip_html(None) == ""

    def test_truncates_at_word_boundary(self):
        assert truncate("alpha beta gamma", 12) == "alpha beta..."
        assert truncate("short", 12) == "short"

    def test_strip_with_max_length(self):
        assert strip_html("<div>alpha beta gamma</div>", 12) == "alpha beta..."

    def test_removes_nul_characters(self):
        assert strip_html("<p>Py\x00thon\x00</p>\x00") == "Python"

    def test_remove_nul_nested(self):
        value = {"a\x00": ["x\x00y", 3, None], "b": {"c": "\x00"}}

        assert remove_nul(value) == {"a": ["xy", 3, None], "b": {"c": ""}}
        assert remove_nul(None) is None


class TestNormalizeLocation:
    """Tests for normalize_location()."""

    @pytest.mark.parametrize("raw,expected", [
        (None, "Remote"),
        ("", "Remote"),
        ("Worldwide", "Remote"),
        ("WFH", "Remote"),
        ("Remote - US", "Remote (US)"),
        ("Remote / Europe", "Remote (Europe)"),
        ("  Berlin,   Germany ", "Berlin, Germany"),
    ])
    def test_labels(self, raw, expected):
        assert normalize_location(raw) == expected


class TestFormatSalary:
    """Tests for format_salary()."""

    @pytest.mark.parametrize("minimum,maximum,kwargs,expected", [
        (80000, 120000, {}, "$80k - $120k/yr"),
        (80000, None, {}, "$80k+/yr"),
        (None, 120000, {}, "Up to $120k/yr"),
        (None, None, {}, None),
        (0, 0, {}, None),
        (25, 40, {"period": "hour"}, "$25 - $40/hr"),
        (50000.0, 65000.0, {"currency": "£"}, "£50k - £65k/yr"),
    ])
    def test_ranges(self, minimum, maximum, kwargs, expected):
        assert format_salary(minimum, maximum, **kwargs) == expected


class TestTags:
    """Tests for extract_tech_tags(), unique_tags() and company_slug()."""

    def test_whole_word_matches_only(self):
        tags = extract_tech_tags("Go and PostgreSQL on AWS, plus Google Docs")

        assert tags == ["Go", "AWS", "PostgreSQL"]

    def test_symbols_in_keywords(self):
        assert extract_tech_tags("We write C++ and C#") == ["C#", "C++"]

    def test_custom_keywords(self):
        assert extract_tech_tags("Senior Platform Engineer", ["Senior", "Staff", "Platform"]) == ["Senior", "Platform"]

    def test_unique_tags(self):
        assert unique_tags(["Python", "python", "", None, "Go"]) == ["Python", "Go"]
        assert len(unique_tags([f"t{i}" for i in range(10)])) == 6
        assert unique_tags(["a", "b", "c"], limit=2) == ["a", "b"]

    def test_company_slug(self):
        assert company_slug("Hugging Face, Inc.") == "huggingfaceinc"
