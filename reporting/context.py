"""
Request context

Everything a metric needs to know about one request, frozen once it has
been resolved. Metrics never mutate it; they derive new contexts with extra
clauses or a different window.
"""

import logging
from dataclasses import dataclass, replace
from datetime import date, datetime, timedelta
from typing import Optional, Tuple

from reporting import settings
from reporting.constants import GOOGLE_TAB
from reporting.errors import BadRequestError
from reporting.query_builder import apply_filter_override, build_query_string
from reporting.query_expression import Clause, QueryExpression
from reporting.scope_refiners import build_subtopic_query_string, build_touchpoint_query_string

logger = logging.getLogger(__name__)

Window = Tuple[str, str]


@dataclass(frozen=True)
class RequestContext:
    topic_id: int
    query: QueryExpression
    gte: str
    lte: str
    subtopic_id: Optional[int] = None
    touchpoint_id: Optional[int] = None
    scad_mode: bool = False
    selected_tab: Optional[str] = None
    filters_applied: bool = False
    parent_account_id: Optional[str] = None
    aid_type: Optional[str] = None
    un_topic: bool = False
    user_id: Optional[int] = None

    @property
    def is_google_tab(self) -> bool:
        return self.selected_tab == GOOGLE_TAB

    def with_clauses(self, *clauses: Optional[Clause]) -> "RequestContext":
        return replace(self, query=self.query.and_(*clauses))

    def with_query(self, query: QueryExpression) -> "RequestContext":
        return replace(self, query=query)

    def with_window(self, window: Optional[Window]) -> "RequestContext":
        if not window:
            return self
        return replace(self, gte=window[0], lte=window[1])


def parse_topic_id(raw) -> int:
    """Numeric topic id, or BadRequestError with the message shown to callers"""
    if raw is None or (isinstance(raw, str) and not raw.strip()):
        raise BadRequestError("ID is required")
    if isinstance(raw, bool):
        raise BadRequestError("Invalid ID")
    try:
        return int(str(raw).strip())
    except ValueError:
        raise BadRequestError("Invalid ID")


def _day(value: date) -> str:
    return value.strftime('%Y-%m-%d')


def resolve_time_slot(override, now: datetime = None) -> Optional[Window]:
    """
    Window selected by an override's ``timeSlot``

    Parameters:
    -----------
    override : FilterOverride
        Parsed override; only timeSlot, startDate and endDate are read
    now : datetime, optional
        Reference time, defaults to the current local time

    Returns:
    --------
    tuple or None
        (gte, lte) as yyyy-MM-dd, or None when the slot is not set
    """
    slot = getattr(override, 'timeSlot', None)
    if not slot:
        return None

    now = now or datetime.now()
    today = now.date()

    if slot == 'Custom Dates':
        start = override.startDate[:10] if override.startDate else _day(today - timedelta(days=90))
        end = override.endDate[:10] if override.endDate else _day(today)
        return start, end
    if slot == 'today':
        return _day(today), _day(today)
    if slot == '24h':
        return _day((now - timedelta(hours=24)).date()), _day(today)
    return _day(today - timedelta(days=int(slot))), _day(today)


def build_context(request, store, now: datetime = None) -> RequestContext:
    """
    Resolve a validated report request into a RequestContext

    The topic expression comes first, then the filter override (window and
    clauses), then the sub-topic and touch point refiners.
    """
    topic_id = parse_topic_id(request.topicId)
    scad_mode = bool(request.isScadUser)

    query = build_query_string(store, topic_id, scad_mode, request.selectedTab)
    gte = request.greaterThanTime or settings.DATA_FETCH_FROM_TIME
    lte = request.lessThanTime or settings.DATA_FETCH_TO_TIME

    override = request.filter_override
    if override is not None:
        window = resolve_time_slot(override, now)
        if window:
            gte, lte = window
        query = apply_filter_override(query, override)
        logger.info(f"Filter override applied for topic {topic_id}")

    if request.subtopicId:
        query = query.extend(build_subtopic_query_string(store, request.subtopicId))
    if request.touchId:
        query = query.extend(build_touchpoint_query_string(store, request.touchId))

    return RequestContext(
        topic_id=topic_id,
        query=query,
        gte=gte,
        lte=lte,
        subtopic_id=request.subtopicId,
        touchpoint_id=request.touchId,
        scad_mode=scad_mode,
        selected_tab=request.selectedTab,
        filters_applied=override is not None,
        parent_account_id=request.parentAccountId,
        aid_type=request.aidType,
        un_topic=bool(request.unTopic),
        user_id=request.userId,
    )
