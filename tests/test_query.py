"""
tests.test_query

Query-string serialization.
"""

from __future__ import annotations

from unified_api_client.client.query import stringify_query


def test_none_is_empty() -> None:
    assert stringify_query(None) == ""


def test_raw_string_gets_question_mark_once() -> None:
    assert stringify_query("a=1&b=2") == "?a=1&b=2"
    assert stringify_query("?a=1") == "?a=1"


def test_mapping_repeats_key_per_list_element_in_order() -> None:
    assert stringify_query({"id": [3, 1, 2], "q": "x"}) == "?id=3&id=1&id=2&q=x"


def test_scalars_are_stringified_and_none_dropped() -> None:
    assert stringify_query({"n": 5, "f": 1.5, "flag": True, "skip": None}) == "?n=5&f=1.5&flag=true"


def test_values_are_url_encoded() -> None:
    assert stringify_query({"name": "a b&c"}) == "?name=a+b%26c"


# --- Module Notes -----------------------------------------------------------
# Booleans follow the JS convention ("true"/"false") so servers see the same values.
