"""
Sub-topic and touch point scoping clauses

Both refiners return a QueryExpression that the caller ANDs onto the topic
expression. A missing entity yields the empty expression (no constraint).
"""

import logging
from typing import Optional

from models.types import SubTopic, TouchPoint
from reporting.constants import MONITORING_TYPE_SOURCES
from reporting.query_expression import AnyOf, QueryExpression, exclude, field_terms, terms

logger = logging.getLogger(__name__)


def subtopic_expression(subtopic: Optional[SubTopic]) -> QueryExpression:
    if subtopic is None:
        return QueryExpression()

    keywords = subtopic.keywords
    base = AnyOf((
        field_terms("p_message_text", keywords),
        field_terms("u_source", keywords),
        field_terms("u_fullname", keywords),
    ))

    sources = subtopic.sources or MONITORING_TYPE_SOURCES.get(subtopic.monitoring_type or "", ())

    return QueryExpression.of(base).and_(
        terms("p_message_text", subtopic.exclude_keywords, negated=True),
        terms("source", sources),
        *exclude(("u_username", "u_source", "u_profile_photo"), subtopic.exclude_accounts),
    )


def touchpoint_expression(touchpoint: Optional[TouchPoint]) -> QueryExpression:
    if touchpoint is None:
        return QueryExpression()
    return QueryExpression.of(field_terms("p_message_text", touchpoint.keywords))


def build_subtopic_query_string(store, subtopic_id: int) -> QueryExpression:
    subtopic = store.get_subtopic(subtopic_id)
    if subtopic is None:
        logger.info(f"Sub-topic {subtopic_id} not found, no scoping applied")
    return subtopic_expression(subtopic)


def build_touchpoint_query_string(store, touchpoint_id: int) -> QueryExpression:
    touchpoint = store.get_touchpoint(touchpoint_id)
    if touchpoint is None:
        logger.info(f"Touch point {touchpoint_id} not found, no scoping applied")
    return touchpoint_expression(touchpoint)
