"""
query_builder.py
Topic query construction

Translates a saved topic (keywords, hashtags, URLs, exclusions and
allow-lists) and the optional per-request filter override into a
QueryExpression for Elasticsearch ``query_string``.
"""

import logging
from typing import List, Optional, Sequence, Tuple

from models.types import Topic
from reporting.constants import EXCLUDED_ENTRY_TYPES, EXCLUDED_SOURCES, GOOGLE_TAB
from reporting.query_expression import (
    AnyOf, PhraseSet, QueryExpression, Terms, exclude, field_terms, terms
)

logger = logging.getLogger(__name__)


def is_google_url(url: str) -> bool:
    return "google" in url.lower()


def select_urls(urls: Sequence[str], scad_mode: bool, selected_tab: Optional[str],
                restrict_urls_by_tab: bool = True) -> List[str]:
    """
    Keep the URL terms that apply to the current mode

    In SCAD mode the Google tab keeps only Google URLs and every other tab
    keeps only non-Google URLs. Outside SCAD mode, or when the restriction
    is disabled, every URL is kept.
    """
    if not (scad_mode and restrict_urls_by_tab):
        return list(urls)
    if selected_tab == GOOGLE_TAB:
        return [u for u in urls if is_google_url(u)]
    return [u for u in urls if not is_google_url(u)]


def topic_expression(topic: Optional[Topic], scad_mode: bool = False,
                     selected_tab: Optional[str] = None,
                     restrict_urls_by_tab: bool = True) -> QueryExpression:
    """
    Build the base expression of one topic

    Parameters:
    -----------
    topic : Topic or None
        Topic configuration. None yields the empty expression, which callers
        treat as "no topic constraint".
    scad_mode : bool
        Whether the SCAD source split is active for this request
    selected_tab : str, optional
        "GOOGLE" or any other tab name
    restrict_urls_by_tab : bool
        False for the cross-topic total, which keeps every URL

    Returns:
    --------
    QueryExpression
    """
    if topic is None:
        return QueryExpression()

    phrases = [p for p in list(topic.hashtags) + list(topic.keywords) if p]
    urls = select_urls(topic.urls, scad_mode, selected_tab, restrict_urls_by_tab)

    if urls:
        base = AnyOf((
            field_terms("p_message_text", phrases),
            field_terms("u_fullname", phrases),
            field_terms("u_source", urls),
            field_terms("p_url", urls),
        ))
    elif topic.gmaps_url:
        base = AnyOf((
            field_terms("p_message_text", phrases),
            field_terms("place_url", [topic.gmaps_url]),
        ))
    else:
        base = field_terms("p_message_text", phrases)

    return QueryExpression.of(base).and_(
        terms("p_message_text", topic.exclude_words, negated=True),
        *exclude(("u_username", "u_source"), topic.exclude_accounts),
        terms("source", topic.sources),
        terms("u_location", topic.locations),
        terms("lange_detect", topic.languages),
        terms("source", EXCLUDED_SOURCES, negated=True),
        terms("manual_entry_type", EXCLUDED_ENTRY_TYPES, negated=True),
    )


def build_query_string(store, topic_id: int, scad_mode: bool = False,
                       selected_tab: Optional[str] = None) -> QueryExpression:
    """Expression for one topic, URLs restricted by tab in SCAD mode"""
    topic = store.get_topic(topic_id)
    if topic is None:
        logger.info(f"Topic {topic_id} not found, using empty expression")
    return topic_expression(topic, scad_mode, selected_tab, restrict_urls_by_tab=True)


def build_query_for_all_keywords_string(store, topic_id: int, scad_mode: bool = False,
                                        selected_tab: Optional[str] = None) -> QueryExpression:
    """Expression for one topic keeping every URL; used for cross-topic totals"""
    topic = store.get_topic(topic_id)
    return topic_expression(topic, scad_mode, selected_tab, restrict_urls_by_tab=False)


# Filter override

def split_tags(tags: str) -> Tuple[List[str], List[str]]:
    """Split comma-separated override tags into (keywords, urls)"""
    keywords, urls = [], []
    for tag in (tags or "").split(","):
        tag = tag.strip()
        if not tag:
            continue
        (urls if tag.startswith("http") else keywords).append(tag)
    return keywords, urls


def tag_override_clause(tags: str, operator: str = "OR") -> Optional[AnyOf]:
    """
    Replacement base clause for ad-hoc tags

    Keywords search text, names and usernames; URLs search text and the
    author source. Phrases inside each group are joined with ``operator``.
    """
    keywords, urls = split_tags(tags)
    if not keywords and not urls:
        return None
    keyword_set = PhraseSet(tuple(keywords), operator)
    url_set = PhraseSet(tuple(urls), operator)

    if keywords and urls:
        return AnyOf((
            Terms("p_message_text", (keyword_set, url_set)),
            Terms("u_username", (keyword_set,)),
            Terms("u_fullname", (keyword_set,)),
            Terms("u_source", (url_set,)),
        ))
    if keywords:
        return AnyOf((
            Terms("p_message_text", (keyword_set,)),
            Terms("u_fullname", (keyword_set,)),
        ))
    return AnyOf((Terms("u_source", (url_set,)),))


def _csv(value: Optional[str]) -> List[str]:
    if not value or value == "null":
        return []
    return [v.strip() for v in value.split(",") if v.strip()]


def apply_filter_override(expression: QueryExpression, override) -> QueryExpression:
    """
    Apply the query part of a filter override

    Tags replace the whole topic expression; sentiment, source, location
    and language allow-lists each add one clause.
    """
    if override is None:
        return expression

    replacement = tag_override_clause(override.tags, override.operator) if override.tags else None
    if replacement is not None:
        expression = QueryExpression.of(replacement)

    return expression.and_(
        terms("predicted_sentiment_value", _csv(override.sentimentType)),
        terms("source", _csv(override.dataSource)),
        terms("u_country", _csv(override.location)),
        terms("lange_detect", _csv(override.language)),
    )
