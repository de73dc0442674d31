import pytest

from backend.app.errors import MalformedResponse
from backend.app.normalizer import (
    extract_json,
    get_float,
    get_list,
    get_str,
    get_str_list,
    parse_json,
)


@pytest.mark.parametrize(
    "raw, expected",
    [
        ('```json\n{"a":1}\n```', '{"a":1}'),
        ("no braces here", "{}"),
        ('prefix {"x":[{"y":1}]} suffix', '{"x":[{"y":1}]}'),
        ("", "{}"),
        ("} backwards {", "{}"),
        ('Sure! Here you go:\n```json\n{"winner": "1"}\n```\nHope it helps.', '{"winner": "1"}'),
    ],
)
def test_extract_json(raw, expected):
    assert extract_json(raw) == expected


def test_parse_json_returns_object():
    assert parse_json('```json\n{"score1": 7.5}\n```') == {"score1": 7.5}


def test_parse_json_without_object_is_empty():
    assert parse_json("the model only wrote prose") == {}


def test_parse_json_broken_interior_is_malformed():
    with pytest.raises(MalformedResponse) as exc:
        parse_json('{"winner": "1", "score1": }')
    assert "valid JSON" in str(exc.value)


def test_accessors_default_on_absence():
    doc = {"score1": "8.5", "flag": True, "name": None, "items": "nope", "tags": ["a", " ", 3]}

    assert get_float(doc, "score1") == 8.5
    assert get_float(doc, "score2") == 0.0
    assert get_float(doc, "flag", default=1.0) == 1.0
    assert get_str(doc, "name", default="n/a") == "n/a"
    assert get_list(doc, "items") == []
    assert get_str_list(doc, "tags") == ["a", "3"]


def test_accessors_accept_alternate_keys():
    doc = {"search_volume": "10K"}
    assert get_str(doc, "searchVolume", "search_volume") == "10K"


@pytest.mark.parametrize("value", [float("nan"), float("inf"), "nan", "-inf", "Infinity"])
def test_get_float_rejects_non_finite(value):
    assert get_float({"score1": value}) == 0.0


def test_non_finite_scores_do_not_become_perfect():
    raw = parse_json('{"winner": "1", "score1": NaN, "score2": "inf"}')
    assert get_float(raw, "score1") == 0.0
    assert get_float(raw, "score2") == 0.0
