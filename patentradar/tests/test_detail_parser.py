"""Tests for the heuristic detail-page scraper."""

from __future__ import annotations

from patentradar.services.ingestion import detail as detail_module
from patentradar.services.ingestion.detail import (
    extract_images,
    extract_patent_numbers,
    extract_section_items,
    extract_videos,
    parse_detail,
)


DETAIL_HTML = """
<html>
<head><meta name="description" content="Meta fallback text"></head>
<body>
  <h1>Lightweight <em>Radiation</em> Shield</h1>
  <div class="abstract">A device for X.</div>
  <div class="tech_desc"><p>A device for X. It works by Y.</p></div>
  <section class="benefits">
    <h2>Benefits</h2>
    <ul><li>Reduces weight</li><li>Improves durability</li><li>  </li></ul>
  </section>
  <section class="applications">
    <h2>Applications</h2>
    <ul>
      <li>Spacecraft &amp; habitats</li>
      <li>Medical imaging rooms</li>
    </ul>
  </section>
  <img src="/t2media/tops/img/ARC-12345/shield.jpg">
  <img src="https://technology.nasa.gov/t2media/tops/img/ARC-12345/layers.png">
  <img src="/t2media/tops/img/ARC-12345/shield.jpg">
  <img src="/assets/logo.png">
  <iframe src="https://www.youtube.com/embed/dQw4w9WgXcQ"></iframe>
  <a href="https://youtu.be/dQw4w9WgXcQ">Watch</a>
  <a href="https://www.youtube.com/watch?feature=share&amp;v=abcdefghijk">Demo</a>
  <a href="https://example.org/clip.mp4">Clip</a>
  <div class="patent-info">Patent Numbers: <span>7,654,321</span>; 8,765,432; 12,345</div>
  <div class="related-technologies">
    <h3>Related Technologies</h3>
    <a href="/patent/ARC-12345">Self</a>
    <a href="/patent/LAR-TOPS-1">One</a>
    <a href="https://technology.nasa.gov/patent/GSC-99">Two</a>
    <a href="/patent/LAR-TOPS-1">Dup</a>
  </div>
</body>
</html>
"""


def test_parse_detail_extracts_every_section():
    detail = parse_detail(DETAIL_HTML, "ARC-12345")

    assert detail.id == "ARC-12345"
    assert detail.case_number == "ARC-12345"
    assert detail.title == "Lightweight Radiation Shield"
    assert detail.full_description == "A device for X. It works by Y."
    assert detail.benefits == ("Reduces weight", "Improves durability")
    assert detail.applications == ("Spacecraft & habitats", "Medical imaging rooms")
    assert detail.images == (
        "https://technology.nasa.gov/t2media/tops/img/ARC-12345/shield.jpg",
        "https://technology.nasa.gov/t2media/tops/img/ARC-12345/layers.png",
    )
    assert detail.videos == (
        "https://www.youtube.com/watch?v=dQw4w9WgXcQ",
        "https://www.youtube.com/watch?v=abcdefghijk",
    )
    assert detail.patent_numbers == ("7654321", "8765432")
    assert detail.related_technologies == ("LAR-TOPS-1", "GSC-99")
    assert detail.has_rich_content
    assert detail.has_media


def test_missing_h1_falls_back_to_case_number():
    detail = parse_detail("<p>No heading here</p>", "ARC-12345")
    assert detail.title == "ARC-12345"


def test_empty_page_yields_empty_fields():
    detail = parse_detail("", "GSC-1")
    assert detail.title == "GSC-1"
    assert detail.full_description == ""
    assert detail.benefits == ()
    assert detail.applications == ()
    assert detail.images == ()
    assert detail.videos == ()
    assert detail.patent_numbers == ()
    assert detail.related_technologies == ()
    assert not detail.has_rich_content
    assert not detail.has_media


def test_benefits_fall_back_to_window_after_heading():
    html = "<p><strong>Benefits</strong></p><div><ul><li>Cheap</li><li>Fast</li></ul></div>"
    assert extract_section_items(html, "benefits") == ["Cheap", "Fast"]


def test_meta_description_used_when_no_blocks():
    html = '<meta name="description" content="Only &amp; meta">'
    assert parse_detail(html, "X").full_description == "Only & meta"


def test_direct_video_files_are_optional():
    html = '<a href="https://example.org/clip.mp4">Clip</a>'
    assert extract_videos(html) == []
    assert extract_videos(html, include_direct_files=True) == ["https://example.org/clip.mp4"]


def test_patent_numbers_are_length_filtered_and_deduplicated():
    html = (
        "Patent No. 1,234,567 and patent number 1234567. "
        '<a href="https://patents.google.com/patent/US10123456B2">US</a> Patent # 99'
    )
    assert extract_patent_numbers(html) == ["1234567", "10123456"]


def test_related_technologies_are_capped():
    links = "".join(f'<a href="/patent/TOP-{index}">x</a>' for index in range(15))
    detail = parse_detail(f"<div class='related'>{links}</div>", "TOP-0")
    assert len(detail.related_technologies) == 10
    assert "TOP-0" not in detail.related_technologies


def test_failing_step_does_not_block_others(monkeypatch):
    def explode(html):
        raise RuntimeError("markup drift")

    monkeypatch.setattr(detail_module, "extract_images", lambda html, origin: explode(html))

    detail = parse_detail(DETAIL_HTML, "ARC-12345")

    assert detail.images == ()
    assert detail.benefits == ("Reduces weight", "Improves durability")
    assert detail.title == "Lightweight Radiation Shield"


def test_section_without_list_does_not_borrow_next_section():
    html = (
        '<div class="benefits"><p>Lighter than steel</p></div>'
        '<div class="applications"><ul><li>Aviation</li><li>Rail</li></ul></div>'
    )
    detail = parse_detail(html, "LAR-1")
    assert detail.benefits == ()
    assert detail.applications == ("Aviation", "Rail")


def test_heading_section_stops_at_next_heading():
    html = "<h3>Benefits</h3><p>See below.</p><h3>Applications</h3><ul><li>Mining</li></ul>"
    assert extract_section_items(html, "benefits") == []
    assert extract_section_items(html, "applications") == ["Mining"]


def test_images_come_from_every_portal_media_location():
    html = """
    <img src="/t2media/tops/img/GSC-1/a.png">
    <img src="/t2_images/GSC-1/b.jpg">
    <img src="https://technology.nasa.gov/t2_images/GSC-1/c.gif">
    <img src="/uploads/GSC-1/d.webp">
    <img src="https://technology.nasa.gov/uploads/GSC-1/e.jpeg">
    <img src="https://cdn.example.org/uploads/f.png">
    <img src="/t2_images/GSC-1/brochure.pdf">
    """
    assert extract_images(html) == [
        "https://technology.nasa.gov/t2media/tops/img/GSC-1/a.png",
        "https://technology.nasa.gov/t2_images/GSC-1/b.jpg",
        "https://technology.nasa.gov/t2_images/GSC-1/c.gif",
        "https://technology.nasa.gov/uploads/GSC-1/d.webp",
        "https://technology.nasa.gov/uploads/GSC-1/e.jpeg",
    ]
