from datetime import datetime
from urllib.parse import quote

import pytest
from pydantic import ValidationError

from models.requests import FeedRequest, FilterOverride, ReportRequest
from reporting import settings
from reporting.context import build_context, parse_topic_id, resolve_time_slot
from reporting.errors import BadRequestError

NOW = datetime(2023, 3, 15, 12, 0, 0)


@pytest.mark.parametrize("raw,message", [
    (None, "ID is required"),
    ("", "ID is required"),
    ("  ", "ID is required"),
    ("abc", "Invalid ID"),
    ("1.5", "Invalid ID"),
])
def test_parse_topic_id_rejects(raw, message):
    with pytest.raises(BadRequestError) as raised:
        parse_topic_id(raw)
    assert str(raised.value) == message


def test_parse_topic_id_accepts_numeric_strings():
    assert parse_topic_id(" 42 ") == 42
    assert parse_topic_id(7) == 7


@pytest.mark.parametrize("override,expected", [
    (FilterOverride(timeSlot="today"), ("2023-03-15", "2023-03-15")),
    (FilterOverride(timeSlot="24h"), ("2023-03-14", "2023-03-15")),
    (FilterOverride(timeSlot="7"), ("2023-03-08", "2023-03-15")),
    (FilterOverride(timeSlot="Custom Dates", startDate="2023-01-01T00:00:00", endDate="2023-01-31"),
     ("2023-01-01", "2023-01-31")),
    (FilterOverride(timeSlot="Custom Dates"), ("2022-12-15", "2023-03-15")),
    (FilterOverride(), None),
])
def test_resolve_time_slot(override, expected):
    assert resolve_time_slot(override, NOW) == expected


def test_invalid_time_slot_is_rejected():
    with pytest.raises(ValidationError):
        FilterOverride(timeSlot="yesterday")


def test_context_defaults_window_and_topic_query(store, flood_topic):
    request = ReportRequest(topicId=str(flood_topic), type="mentions")
    ctx = build_context(request, store, NOW)

    assert ctx.topic_id == 7
    assert (ctx.gte, ctx.lte) == (settings.DATA_FETCH_FROM_TIME, settings.DATA_FETCH_TO_TIME)
    assert ctx.query.render().startswith('p_message_text:("flood" OR "relief")')
    assert ctx.filters_applied is False


def test_filter_data_is_ignored_unless_filters_flag_is_set(store, flood_topic):
    encoded = quote('{"timeSlot": "today", "sentimentType": "Positive"}')
    request = ReportRequest(topicId=7, type="mentions", filterData=encoded)
    assert request.filterData.sentimentType == "Positive"

    ctx = build_context(request, store, NOW)
    assert ctx.filters_applied is False
    assert "predicted_sentiment_value" not in ctx.query.render()


def test_filter_override_sets_window_and_clauses(store, flood_topic):
    encoded = quote('{"timeSlot": "today", "sentimentType": "Positive"}')
    request = ReportRequest(topicId=7, type="mentions", filters=True, filterData=encoded)
    ctx = build_context(request, store, NOW)

    assert ctx.filters_applied is True
    assert (ctx.gte, ctx.lte) == ("2023-03-15", "2023-03-15")
    assert ctx.query.render().endswith('predicted_sentiment_value:("Positive")')


def test_malformed_filter_data_is_a_validation_error():
    with pytest.raises(ValidationError):
        ReportRequest(topicId=7, type="mentions", filters=True, filterData="%7Bnot-json")


def test_refiners_are_appended(store, flood_topic, subtopic_with_touchpoints):
    request = ReportRequest(topicId=7, type="mentions", subtopicId=3, touchId=1)
    rendered = build_context(request, store, NOW).query.render()

    assert rendered.startswith('p_message_text:("flood" OR "relief")')
    assert 'p_message_text:("branch")' in rendered
    assert rendered.endswith('p_message_text:("atm")')


def test_empty_optional_ids_become_none():
    request = ReportRequest(topicId=7, type="mentions", subtopicId="", touchId="null", userId="undefined")
    assert (request.subtopicId, request.touchId, request.userId) == (None, None, None)


def test_context_derivations_do_not_mutate(store, flood_topic):
    ctx = build_context(ReportRequest(topicId=7, type="mentions"), store, NOW)
    narrowed = ctx.with_window(("2023-01-01", "2023-01-02"))

    assert ctx.gte == settings.DATA_FETCH_FROM_TIME
    assert narrowed.gte == "2023-01-01"
    assert ctx.with_window(None) is ctx


def test_feed_request_requires_category():
    with pytest.raises(ValidationError):
        FeedRequest(topicId=7, type="touchpointsIdentification")
    assert FeedRequest(topicId=7, type="x", category="ATM").size == 30
