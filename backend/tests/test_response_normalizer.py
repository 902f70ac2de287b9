"""
Tests for engine response normalization.
"""

import pytest

from app.schemas.search import SearchParams
from app.services.response_normalizer import (
    HIGHLIGHTS_KEY,
    normalize_response,
    total_pages,
)
from tests.fakes import engine_hit, engine_response


@pytest.fixture
def params() -> SearchParams:
    return SearchParams(query="q", page=1, per_page=10)


def test_zero_hits(params):
    response = normalize_response(engine_response([], total=0), params)
    assert response.results == []
    assert response.total == 0
    assert response.total_pages == 0


def test_total_pages_rounds_up(params):
    hits = [engine_hit("quckapp_messages", str(i)) for i in range(10)]
    response = normalize_response(engine_response(hits, total=23), params)
    assert response.total == 23
    assert response.total_pages == 3
    assert len(response.results) == 10
    assert response.page == 1
    assert response.per_page == 10


def test_total_pages_helper():
    assert total_pages(0, 20) == 0
    assert total_pages(1, 20) == 1
    assert total_pages(40, 20) == 2
    assert total_pages(41, 20) == 3


@pytest.mark.parametrize(
    "raw",
    [
        None,
        "not a dict",
        [],
        {},
        {"hits": None},
        {"hits": "oops"},
        {"hits": {"total": "many", "hits": "nope"}},
        {"hits": {"hits": [None, 5, "x", {"_source": {"a": 1}}]}},
    ],
)
def test_malformed_responses_degrade_to_empty(raw, params):
    response = normalize_response(raw, params)
    assert response.results == []
    assert response.total == 0
    assert response.total_pages == 0


def test_bare_number_total(params):
    raw = {"hits": {"total": 7, "hits": [engine_hit("quckapp_files", "f1", 2.5, filename="a.txt")]}}
    response = normalize_response(raw, params)
    assert response.total == 7
    hit = response.results[0]
    assert hit.index == "quckapp_files"
    assert hit.id == "f1"
    assert hit.score == 2.5
    assert hit.source == {"filename": "a.txt"}


def test_highlights_merged_into_source(params):
    hit = engine_hit("quckapp_messages", "m1", content="hello world")
    hit["highlight"] = {"content": ["<em>hello</em> world"]}
    response = normalize_response(engine_response([hit]), params)

    source = response.results[0].source
    assert source["content"] == "hello world"
    assert source[HIGHLIGHTS_KEY] == {"content": ["<em>hello</em> world"]}


def test_highlight_without_source(params):
    hit = {"_index": "quckapp_messages", "_id": "m2", "_score": None, "highlight": {"content": ["x"]}}
    response = normalize_response(engine_response([hit]), params)
    result = response.results[0]
    assert result.score == 0.0
    assert result.source == {HIGHLIGHTS_KEY: {"content": ["x"]}}
