import threading

import pytest
from elasticsearch import ConnectionError as ESConnectionError

from conftest import RecordingElasticsearch
from reporting.errors import SearchEngineError
from reporting.query_expression import QueryExpression, terms
from reporting.query_templates import (
    count_template,
    date_histogram_template,
    filters_template,
    polarity_filters,
    range_template,
    search_template,
    terms_aggregation,
)

QUERY = QueryExpression.of(terms("source", ["Twitter"]))


def test_count_and_search_share_the_must_list():
    count = count_template(QUERY, "2023-01-01", "2023-01-31")
    search = search_template(QUERY, "2023-01-01", "2023-01-31")

    assert count["query"]["bool"]["must"] == search["query"]["bool"]["must"]
    assert count["query"]["bool"]["must"] == [
        {"query_string": {"query": 'source:("Twitter")'}},
        {"range": {"p_created_time": {"gte": "2023-01-01", "lte": "2023-01-31"}}},
        {"range": {"created_at": {"gte": "2023-01-01", "lte": "2023-01-31"}}},
    ]
    assert search["size"] == 30
    assert search["sort"] == [{"p_created_time": {"order": "desc"}}]


def test_range_template_appends_one_range():
    body = range_template(QUERY, "a", "b", {"u_followers": {"gte": 1000}})
    assert body["query"]["bool"]["must"][-1] == {"range": {"u_followers": {"gte": 1000}}}
    assert len(body["query"]["bool"]["must"]) == 4


def test_histogram_and_filters_templates():
    histogram = date_histogram_template(
        QUERY, "a", "b", {"sentiments": terms_aggregation("predicted_sentiment_value.keyword", 3)}, interval="5d"
    )
    assert histogram["size"] == 0
    outer = histogram["aggs"]["time_series"]
    assert outer["date_histogram"] == {
        "field": "p_created_time", "fixed_interval": "5d", "format": "yyyy-MM-dd", "min_doc_count": 0,
    }
    assert outer["aggs"]["sentiments"]["terms"]["size"] == 3

    filtered = filters_template(QUERY, "a", "b", polarity_filters())
    assert filtered["aggs"]["filtered"]["filters"]["filters"]["negative"] == {"range": {"llm_polarity": {"lt": 0}}}


def test_count_targets_print_index(executor_for):
    es = RecordingElasticsearch(count=4)
    executor = executor_for(es)

    assert executor.count(count_template(QUERY, "a", "b"), print_media=True) == 4
    assert es.calls[0][1] == "print_media"


def test_engine_failure_is_wrapped(executor_for):
    es = RecordingElasticsearch(count=ESConnectionError("down"))
    executor = executor_for(es)

    with pytest.raises(SearchEngineError) as raised:
        executor.count(count_template(QUERY, "a", "b"))
    assert raised.value.query == 'source:("Twitter")'


def test_fan_out_isolates_failing_branch(executor_for):
    def count(index, body):
        if "Facebook" in body["query"]["bool"]["must"][0]["query_string"]["query"]:
            return ESConnectionError("boom")
        return 5

    executor = executor_for(RecordingElasticsearch(count=count))
    bodies = {
        source: count_template(QueryExpression.of(terms("source", [source])), "a", "b")
        for source in ("Twitter", "Facebook", "Instagram")
    }
    assert executor.count_many(bodies, isolate=True) == {"Twitter": 5, "Facebook": 0, "Instagram": 5}


def test_fan_out_deadline_uses_default(executor_for):
    release = threading.Event()

    def slow():
        release.wait(2)
        return 9

    executor = executor_for(RecordingElasticsearch(), timeout=0.05)
    try:
        results = executor.fan_out({"fast": lambda: 1, "slow": slow}, default=0)
    finally:
        release.set()
    assert results == {"fast": 1, "slow": 0}


def test_fan_out_keeps_task_order(executor_for):
    executor = executor_for(RecordingElasticsearch())
    results = executor.fan_out({key: (lambda key=key: key * 2) for key in (3, 1, 2)})
    assert list(results) == [3, 1, 2]
    assert executor.fan_out({}) == {}


def test_search_many_defaults_to_none(executor_for):
    def search(index, body):
        return ESConnectionError("bad") if body.get("size") == 1 else {"hits": {"hits": []}}

    executor = executor_for(RecordingElasticsearch(search=search))
    results = executor.search_many({"ok": {"size": 0, "query": {}}, "bad": {"size": 1, "query": {}}}, isolate=True)
    assert results == {"ok": {"hits": {"hits": []}}, "bad": None}


def test_fan_out_fails_whole_call_by_default(executor_for):
    def count(index, body):
        if "Facebook" in body["query"]["bool"]["must"][0]["query_string"]["query"]:
            return ESConnectionError("boom")
        return 5

    executor = executor_for(RecordingElasticsearch(count=count))
    bodies = {
        source: count_template(QueryExpression.of(terms("source", [source])), "a", "b")
        for source in ("Twitter", "Facebook")
    }
    with pytest.raises(SearchEngineError):
        executor.count_many(bodies)
