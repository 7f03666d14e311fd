from __future__ import annotations

import pytest

from patentradar.core.errors import MalformedUpstreamResponse
from patentradar.schemas import Patent
from patentradar.services.ingestion.category import merge_by_id, to_patents


def hit(identifier, title="Thermal Coating", **source):
    payload = {
        "title": title,
        "abstract": "A coating for re-entry vehicles.",
        "tech_desc": "",
        "category": "materials and coatings",
        "client_record_id": f"LAR-{identifier}",
        "center": "LaRC",
        "patent_number": "9,123,456",
        "trl": "6",
        "img1": "/t2media/tops/img/coating.jpg",
    }
    payload.update(source)
    return {"_id": identifier, "_source": payload}


def test_hit_fields_are_normalised():
    patent = to_patents([hit("1", title="<b>Thermal</b> Coating")])[0]
    assert patent.id == "1"
    assert patent.title == "Thermal Coating"
    assert patent.case_number == "LAR-1"
    assert patent.category == "materials and coatings"
    assert patent.center == "LaRC"
    assert patent.trl == "6"
    assert patent.patent_number == "9,123,456"
    assert patent.image_url == "https://technology.nasa.gov/t2media/tops/img/coating.jpg"


def test_absolute_image_urls_are_kept():
    patent = to_patents([hit("1", img1="https://cdn.example.org/a.png")])[0]
    assert patent.image_url == "https://cdn.example.org/a.png"


def test_hits_without_title_are_excluded():
    patents = to_patents([hit("1", title=""), hit("2", title=None), hit("3")])
    assert [patent.id for patent in patents] == ["3"]


def test_tech_desc_is_appended_after_blank_line():
    patent = to_patents([hit("1", tech_desc="It uses a ceramic matrix.")])[0]
    assert patent.description == "A coating for re-entry vehicles.\n\nIt uses a ceramic matrix."


def test_tech_desc_repeating_abstract_is_not_duplicated():
    patent = to_patents(
        [hit("1", abstract="A device for X.", tech_desc="A device for X. It works by Y.")]
    )[0]
    assert patent.description == "A device for X. It works by Y."


def test_case_number_falls_back_to_id():
    patent = to_patents([hit("TOP2-101", client_record_id=None)])[0]
    assert patent.case_number == "TOP2-101"


def test_non_dict_items_are_skipped():
    assert len(to_patents(["junk", 3, {"_id": "x"}, hit("4")])) == 1


@pytest.mark.parametrize("payload", [{"hits": []}, "text", None])
def test_non_array_payload_is_malformed(payload):
    with pytest.raises(MalformedUpstreamResponse):
        to_patents(payload)


def make_patent(identifier: str, title: str) -> Patent:
    return Patent(id=identifier, title=title)


def test_merge_by_id_keeps_first_seen_and_sorts_by_title():
    first = [make_patent("X1", "Zeta"), make_patent("A", "alpha")]
    second = [make_patent("X1", "Beta"), make_patent("B", "Gamma")]

    merged = merge_by_id([first, second])

    assert [patent.id for patent in merged] == ["B", "X1", "A"]
    assert next(patent for patent in merged if patent.id == "X1").title == "Zeta"
    titles = [patent.title for patent in merged]
    assert titles == sorted(titles)


def test_merge_by_id_is_stable_for_equal_titles():
    merged = merge_by_id([[make_patent("2", "Same"), make_patent("1", "Same")]])
    assert [patent.id for patent in merged] == ["2", "1"]
