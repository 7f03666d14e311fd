"""Unit tests for markup normalisation and regex extraction helpers."""

import pytest

from patentradar.services.ingestion.patterns import find_all, find_first, window_after
from patentradar.services.ingestion.text import merge_description, normalize


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("<p>Hello&nbsp;<b>world</b></p>", "Hello world"),
        ("Fish &amp; Chips", "Fish & Chips"),
        ("&quot;Quoted&quot; and NASA&#039;s", "\"Quoted\" and NASA's"),
        ("  lots \n\t of   space  ", "lots of space"),
        ("line one\\nline two", "line one line two"),
        ("", ""),
        (None, ""),
    ],
)
def test_normalize_strips_markup_and_entities(raw, expected):
    assert normalize(raw) == expected


@pytest.mark.parametrize(
    "raw",
    [
        "&amp;amp;",
        "&amp;lt;b&amp;gt;bold&amp;lt;/b&amp;gt;",
        "&lt;i&gt;x&lt;/i&gt;",
        "<div>  A&nbsp;&nbsp;B </div>",
        "a < b > c",
        "plain text",
    ],
)
def test_normalize_is_idempotent(raw):
    once = normalize(raw)
    assert normalize(once) == once


def test_normalize_keeps_escaped_comparisons():
    text = normalize("Operates at &lt;100 K and &gt;50 K")
    assert text == "Operates at &lt;100 K and &gt;50 K"
    assert normalize(text) == text
    assert normalize("&amp;lt;b&amp;gt;") == "&lt;b&gt;"


def test_merge_description_drops_abstract_repeated_at_start_of_tech_desc():
    abstract = "A device for X."
    technical = "A device for X. It works by Y."
    assert merge_description(abstract, technical) == technical


def test_merge_description_joins_distinct_paragraphs():
    merged = merge_description("Short abstract.", "Completely different technical text.")
    assert merged == "Short abstract.\n\nCompletely different technical text."


def test_merge_description_skips_tech_desc_already_in_abstract():
    abstract = "The invention is a lightweight radiation shield made of layered polymer composites."
    technical = "The invention is a lightweight radiation shield made of layered polymer"
    assert merge_description(abstract, technical) == abstract


def test_merge_description_handles_missing_parts():
    assert merge_description("", "Only tech.") == "Only tech."
    assert merge_description("Only abstract.", None) == "Only abstract."


def test_find_first_returns_first_group():
    html = "<h1>First</h1><h1>Second</h1>"
    assert find_first(html, r"<h1>(.*?)</h1>") == "First"
    assert find_first(html, r"<h2>(.*?)</h2>") is None


def test_find_all_is_lazy_and_ordered():
    matches = find_all("<li>a</li><li>b</li><li>c</li>", r"<li>(.*?)</li>")
    assert next(matches) == "a"
    assert list(matches) == ["b", "c"]


def test_invalid_patterns_yield_empty_results():
    assert find_first("text", r"(unclosed") is None
    assert list(find_all("text", r"[bad")) == []


def test_window_after_is_case_insensitive_and_bounded():
    text = "intro BENEFITS: lighter, stronger, cheaper"
    assert window_after(text, "benefits", 12) == "BENEFITS: li"
    assert window_after(text, "benefits", 1000) == "BENEFITS: lighter, stronger, cheaper"
    assert window_after(text, "applications", 10) is None
