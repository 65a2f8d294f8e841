"""
Word clouds with a 7-day cache in the configuration store

A cloud is the top terms of ``p_message`` over the matched documents,
filtered and sorted by frequency. The sorted list and a shuffled display
copy are stored together, one row per topic or sub-topic.
"""

import json
import math
import random
import logging
from datetime import datetime, timedelta
from typing import Any, Dict, Iterable, List, Optional, Set

from models.types import CachedWordCloud, WordCloudResult, WordCloudTag
from reporting.query_templates import Query, aggregation_template, terms_aggregation

logger = logging.getLogger(__name__)

FRESHNESS_WINDOW = timedelta(days=7)
MAX_TAGS = 60
MIN_TAG_LENGTH = 4
TAG_FIELD = "p_message"


def is_numeric(token: str) -> bool:
    try:
        return math.isfinite(float(token))
    except (TypeError, ValueError):
        return False


def extract_tags(buckets: Iterable[Dict[str, Any]], omit_words: Set[str]) -> List[WordCloudTag]:
    """Filter raw term buckets into tags sorted by count, most frequent first"""
    tags = []
    for bucket in buckets:
        key = bucket.get("key")
        if not key or not isinstance(key, str):
            continue
        if is_numeric(key) or key in omit_words or len(key) < MIN_TAG_LENGTH:
            continue
        tags.append(WordCloudTag(tag=key.replace("'", "", 1), count=int(bucket.get("doc_count", 0))))
    return sorted(tags, key=lambda t: t.count, reverse=True)[:MAX_TAGS]


def fisher_yates(items: List[Any], rng: random.Random = None) -> List[Any]:
    """Shuffled copy of ``items``; the input list is left untouched"""
    rng = rng or random.Random()
    shuffled = list(items)
    for i in range(len(shuffled) - 1, 0, -1):
        j = rng.randrange(i + 1)
        shuffled[i], shuffled[j] = shuffled[j], shuffled[i]
    return shuffled


def _dump(tags: List[WordCloudTag]) -> str:
    return json.dumps([t.to_dict() for t in tags])


def _load(payload: Optional[str]) -> Optional[List[WordCloudTag]]:
    if not payload:
        return None
    try:
        data = json.loads(payload)
        return [WordCloudTag(tag=str(item["tag"]), count=int(item["count"])) for item in data]
    except (ValueError, TypeError, KeyError) as e:
        logger.warning(f"Malformed cached word cloud, recomputing: {e}")
        return None


def word_cloud_response(result: WordCloudResult) -> Dict[str, Any]:
    return {
        "wc_array": {
            "sorted": [t.to_dict() for t in result.sorted],
            "shuffeled": [t.to_dict() for t in result.shuffled],
            "list_view": result.list_view(),
        }
    }


class WordCloudService:
    def __init__(self, executor, store, rng: random.Random = None, clock=None):
        self.executor = executor
        self.store = store
        self.rng = rng or random.Random()
        self.clock = clock or datetime.now

    def cached(self, key: int, by_subtopic: bool = False) -> Optional[WordCloudResult]:
        """Fresh, well-formed and non-empty cache entry for ``key``, else None"""
        entry: Optional[CachedWordCloud] = self.store.get_word_cloud(key, by_subtopic)
        if entry is None:
            logger.info(f"No cached word cloud for {key}")
            return None
        if entry.computed_at is None or entry.computed_at < self.clock() - FRESHNESS_WINDOW:
            logger.info(f"Cached word cloud for {key} is stale")
            return None

        sorted_tags = _load(entry.sorted_json)
        if not sorted_tags:
            return None
        shuffled_tags = _load(entry.shuffled_json) or list(sorted_tags)
        return WordCloudResult(sorted=sorted_tags, shuffled=shuffled_tags)

    def compute(self, query: Query, gte, lte) -> WordCloudResult:
        body = aggregation_template(query, gte, lte, {"tagcloud": terms_aggregation(TAG_FIELD, MAX_TAGS)})
        response = self.executor.search(body)
        buckets = ((response.get("aggregations") or {}).get("tagcloud") or {}).get("buckets", [])
        sorted_tags = extract_tags(buckets, self.store.get_omit_words())
        return WordCloudResult(sorted=sorted_tags, shuffled=fisher_yates(sorted_tags, self.rng))

    def get(self, query: Query, gte, lte, key: int, by_subtopic: bool = False,
            refresh: bool = False) -> WordCloudResult:
        """
        Cached cloud for ``key``, recomputed on a miss or when ``refresh`` is set

        Parameters:
        -----------
        query : QueryExpression or str
            Matched set the terms are counted over
        key : int
            Topic id, or sub-topic id when ``by_subtopic`` is true
        refresh : bool
            Skip the cache, used for requests carrying a filter override
        """
        if not refresh:
            hit = self.cached(key, by_subtopic)
            if hit is not None:
                return hit

        result = self.compute(query, gte, lte)
        self.store.upsert_word_cloud(
            key, _dump(result.sorted), _dump(result.shuffled),
            by_subtopic=by_subtopic, computed_at=self.clock(),
        )
        return result
