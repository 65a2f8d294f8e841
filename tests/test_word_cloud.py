import random
from datetime import datetime, timedelta

from conftest import RecordingElasticsearch
from db.models import OmitWord, WordCloudTopic
from reporting.query_expression import QueryExpression, terms
from reporting.word_cloud import WordCloudService, extract_tags, fisher_yates, word_cloud_response

QUERY = QueryExpression.of(terms("source", ["Twitter"]))
NOW = datetime(2023, 3, 15, 12, 0, 0)


def tagcloud(*pairs):
    return {"aggregations": {"tagcloud": {"buckets": [{"key": k, "doc_count": n} for k, n in pairs]}}}


def service_for(es, store, executor_for):
    return WordCloudService(executor_for(es), store, rng=random.Random(1), clock=lambda: NOW)


def test_extract_tags_filters_and_sorts(store, seed):
    seed(OmitWord(word="bank"))
    buckets = [
        {"key": "2023", "doc_count": 50},
        {"key": "bank", "doc_count": 40},
        {"key": "atm", "doc_count": 30},
        {"key": "service", "doc_count": 5},
        {"key": "queue", "doc_count": 9},
        {"key": "it's", "doc_count": 7},
    ]
    tags = extract_tags(buckets, store.get_omit_words())
    assert [(t.tag, t.count) for t in tags] == [("queue", 9), ("its", 7), ("service", 5)]


def test_fisher_yates_returns_a_copy():
    items = list(range(20))
    shuffled = fisher_yates(items, random.Random(3))
    assert items == list(range(20))
    assert sorted(shuffled) == items


def test_miss_computes_and_stores_once(store, session_factory, executor_for):
    es = RecordingElasticsearch(search=tagcloud(("flood", 4), ("relief", 9)))
    service = service_for(es, store, executor_for)

    result = service.get(QUERY, "a", "b", key=7)
    assert [t.tag for t in result.sorted] == ["relief", "flood"]
    assert len(es.calls) == 1

    cached = service.get(QUERY, "a", "b", key=7)
    assert [t.tag for t in cached.sorted] == ["relief", "flood"]
    assert len(es.calls) == 1

    with session_factory() as session:
        assert session.query(WordCloudTopic).count() == 1


def test_refresh_recomputes_without_duplicating_rows(store, session_factory, executor_for):
    es = RecordingElasticsearch(search=tagcloud(("flood", 4)))
    service = service_for(es, store, executor_for)

    service.get(QUERY, "a", "b", key=7)
    service.get(QUERY, "a", "b", key=7, refresh=True)
    assert len(es.calls) == 2
    with session_factory() as session:
        assert session.query(WordCloudTopic).count() == 1


def test_stale_or_malformed_entries_are_recomputed(store, seed, executor_for):
    seed(
        WordCloudTopic(wc_tid=1, wc_str="[]", wc_str_sorted="not json", wc_time=NOW),
        WordCloudTopic(wc_tid=2, wc_str="[]", wc_str_sorted='[{"tag": "old", "count": 1}]',
                       wc_time=NOW - timedelta(days=8)),
    )
    es = RecordingElasticsearch(search=tagcloud(("fresh", 3)))
    service = service_for(es, store, executor_for)

    assert [t.tag for t in service.get(QUERY, "a", "b", key=1).sorted] == ["fresh"]
    assert [t.tag for t in service.get(QUERY, "a", "b", key=2).sorted] == ["fresh"]
    assert len(es.calls) == 2


def test_response_views(store, executor_for):
    es = RecordingElasticsearch(search=tagcloud(("flood", 4), ("relief", 9)))
    result = service_for(es, store, executor_for).get(QUERY, "a", "b", key=3, by_subtopic=True)

    body = word_cloud_response(result)["wc_array"]
    assert body["sorted"] == [{"tag": "relief", "count": 9}, {"tag": "flood", "count": 4}]
    assert sorted(t["tag"] for t in body["shuffeled"]) == ["flood", "relief"]
    assert body["list_view"] == "relief, 9, flood, 4"
