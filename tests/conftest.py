import re
from datetime import datetime

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from db import Base, ConfigStore
from db.models import (
    CustomerTopic, CustomerExperience, TouchPointRow, CxTouchPoint
)
from reporting.executor import SearchExecutor


# Elasticsearch fakes

def query_text(body):
    for clause in body["query"]["bool"]["must"]:
        if "query_string" in clause:
            return clause["query_string"]["query"]
    return ""


class RecordingElasticsearch:
    """Records every call; answers counts and searches from callables"""

    def __init__(self, count=0, search=None):
        self.calls = []
        self._count = count
        self._search = search

    def count(self, index=None, **body):
        self.calls.append(("count", index, body))
        value = self._count(index, body) if callable(self._count) else self._count
        if isinstance(value, Exception):
            raise value
        return {"count": value}

    def search(self, index=None, **body):
        self.calls.append(("search", index, body))
        if callable(self._search):
            value = self._search(index, body)
        else:
            value = self._search
        if isinstance(value, Exception):
            raise value
        return value or {"hits": {"total": {"value": 0}, "hits": []}, "aggregations": {}}

    def queries(self, kind=None):
        return [query_text(body) for k, _, body in self.calls if kind is None or k == kind]


def split_top_level(text, separator):
    """Split on ``separator`` outside quotes and parentheses"""
    parts, depth, in_quote, start, i = [], 0, False, 0, 0
    while i < len(text):
        char = text[i]
        if char == '\\' and in_quote:
            i += 2
            continue
        if char == '"':
            in_quote = not in_quote
        elif not in_quote and char == '(':
            depth += 1
        elif not in_quote and char == ')':
            depth -= 1
        elif not in_quote and depth == 0 and text.startswith(separator, i):
            parts.append(text[start:i])
            i += len(separator)
            start = i
            continue
        i += 1
    parts.append(text[start:])
    return [p.strip() for p in parts if p.strip()]


CLAUSE_PATTERN = re.compile(r'^([\w.]+):\((.*)\)$', re.S)
PHRASE_PATTERN = re.compile(r'"((?:[^"\\]|\\.)*)"')


def _values(doc, field):
    value = doc.get(field)
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return [str(v) for v in value]
    return [str(value)]


def _phrase_matches(doc, field, phrase):
    for value in _values(doc, field):
        if field in ("p_message_text", "p_message"):
            if phrase.lower() in value.lower():
                return True
        elif value.lower() == phrase.lower():
            return True
    return False


def matches_query(doc, text):
    """Evaluate the subset of query_string the reporting layer renders"""
    text = text.strip()
    if not text:
        return True
    conjuncts = split_top_level(text, " AND ")
    if len(conjuncts) > 1:
        return all(matches_query(doc, part) for part in conjuncts)
    if text.startswith("NOT "):
        return not matches_query(doc, text[4:])
    if text.startswith("(") and text.endswith(")"):
        return any(matches_query(doc, part) for part in split_top_level(text[1:-1], " OR "))

    match = CLAUSE_PATTERN.match(text)
    if match is None:
        raise ValueError(f"Unsupported query fragment: {text}")
    field, body = match.groups()
    phrases = [p.replace('\\"', '"') for p in PHRASE_PATTERN.findall(body)]
    if not phrases:
        return False
    if ' AND ' in body and ' OR ' not in body:
        return all(_phrase_matches(doc, field, p) for p in phrases)
    return any(_phrase_matches(doc, field, p) for p in phrases)


def matches_range(doc, field, bounds):
    value = doc.get(field)
    if value is None:
        return False
    for op, bound in bounds.items():
        if isinstance(bound, str) and bound.startswith("now"):
            continue
        left, right = (value, bound) if not isinstance(bound, str) else (str(value)[:len(bound)], bound)
        if op == "gt" and not left > right:
            return False
        if op == "gte" and not left >= right:
            return False
        if op == "lt" and not left < right:
            return False
        if op == "lte" and not left <= right:
            return False
    return True


def matches_filter(doc, clause):
    if "query_string" in clause:
        return matches_query(doc, clause["query_string"]["query"])
    if "range" in clause:
        return all(matches_range(doc, f, b) for f, b in clause["range"].items())
    raise ValueError(f"Unsupported filter: {clause}")


class CorpusElasticsearch(RecordingElasticsearch):
    """Evaluates counts and the aggregations used by reports over in-memory documents"""

    def __init__(self, docs, print_docs=None, print_index="print_media"):
        super().__init__()
        self.docs = docs
        self.print_docs = print_docs or []
        self.print_index = print_index

    def _corpus(self, index):
        return self.print_docs if index == self.print_index else self.docs

    def _matched(self, index, body):
        must = body["query"]["bool"]["must"]
        return [d for d in self._corpus(index) if all(matches_filter(d, c) for c in must)]

    def count(self, index=None, **body):
        self.calls.append(("count", index, body))
        return {"count": len(self._matched(index, body))}

    def search(self, index=None, **body):
        self.calls.append(("search", index, body))
        matched = self._matched(index, body)
        response = {
            "hits": {
                "total": {"value": len(matched)},
                "hits": [{"_id": d.get("_id"), "_source": d} for d in matched[:body.get("size", 10)]],
            }
        }
        if "aggs" in body:
            response["aggregations"] = {
                name: self._aggregate(spec, matched) for name, spec in body["aggs"].items()
            }
        return response

    def _aggregate(self, spec, docs):
        if "filters" in spec:
            return {"buckets": {
                name: {"doc_count": sum(1 for d in docs if matches_filter(d, clause))}
                for name, clause in spec["filters"]["filters"].items()
            }}
        if "terms" in spec:
            field = spec["terms"]["field"].replace(".keyword", "")
            counts = {}
            for doc in docs:
                for value in _values(doc, field):
                    counts[value] = counts.get(value, 0) + 1
            ordered = sorted(counts.items(), key=lambda kv: kv[1], reverse=True)[:spec["terms"].get("size", 10)]
            return {"buckets": [{"key": k, "doc_count": n} for k, n in ordered]}
        if "date_histogram" in spec:
            field = spec["date_histogram"]["field"]
            days = sorted({str(d[field])[:10] for d in docs if d.get(field)})
            buckets = []
            for day in days:
                in_day = [d for d in docs if str(d.get(field, ""))[:10] == day]
                bucket = {"key_as_string": day, "doc_count": len(in_day)}
                for name, sub_spec in spec.get("aggs", {}).items():
                    bucket[name] = self._aggregate(sub_spec, in_day)
                buckets.append(bucket)
            return {"buckets": buckets}
        raise ValueError(f"Unsupported aggregation: {spec}")


# Cache fake

class FakeCache:
    def __init__(self):
        self.values = {}
        self.gets = []

    def generate_cache_key(self, prefix, **kwargs):
        return f"{prefix}:" + "_".join(f"{k}:{v}" for k, v in sorted(kwargs.items()))

    def get(self, key):
        self.gets.append(key)
        return self.values.get(key)

    def set_with_ttl(self, key, value, ttl_seconds=300):
        self.values[key] = value


# Store fixtures

@pytest.fixture
def session_factory():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine, expire_on_commit=False)


@pytest.fixture
def store(session_factory):
    return ConfigStore(session_factory)


@pytest.fixture
def seed(session_factory):
    """Insert rows into the configuration store"""
    def add(*rows):
        with session_factory() as session:
            session.add_all(rows)
            session.commit()
    return add


@pytest.fixture
def flood_topic(seed):
    seed(CustomerTopic(
        topic_id=7,
        topic_keywords='flood,relief',
        topic_hash_tags='',
        topic_urls='',
        topic_user_id=11,
        customer_portal='D24',
        topic_is_deleted='N',
    ))
    return 7


@pytest.fixture
def subtopic_with_touchpoints(seed):
    seed(
        CustomerExperience(exp_id=3, exp_keywords='branch', exp_type='cx_monitoring'),
        TouchPointRow(tp_id=1, tp_name='ATM', tp_keywords='atm'),
        TouchPointRow(tp_id=2, tp_name='Mobile App', tp_keywords='app'),
        CxTouchPoint(cx_tp_id=1, cx_tp_cx_id=3, cx_tp_tp_id=1),
        CxTouchPoint(cx_tp_id=2, cx_tp_cx_id=3, cx_tp_tp_id=2),
    )
    return 3


@pytest.fixture
def executor_for():
    def build(es, timeout=5):
        return SearchExecutor(es, index="social_mentions", print_index="print_media", max_workers=4, timeout=timeout)
    return build


@pytest.fixture
def now():
    return datetime(2023, 3, 15, 12, 0, 0)

