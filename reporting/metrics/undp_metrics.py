"""
Humanitarian (UNDP) report family
"""

import logging
from typing import Any, Dict

from reporting import settings
from reporting.constants import (
    AID_CHARTS,
    BANKING_TOUCHPOINTS,
    CHURN_LEVEL_BANDS,
    CHURN_QUARTER_BANDS,
    CHURN_SUMMARY_BANDS,
    COMPLAINT_CLOUD_TOUCHPOINTS,
    CUSTOMER_JOURNEY_STAGES,
    IGO_ENTITIES,
    MENTION_TYPES,
    PRODUCT_REFERENCES,
    SATISFACTION_BANDS,
    SATISFACTION_SUMMARY_BANDS,
    SENTIMENTS,
    SOCIAL_TRIPLE_SOURCES,
    UN_ANNOUNCEMENTS,
    UN_TOUCHPOINTS,
)
from reporting.context import RequestContext
from reporting.metrics import outputs
from reporting.metrics.registry import (
    SENTIMENT_COLUMNS,
    SOCIAL_COLUMNS,
    Metric,
    MetricRegistry,
    ReportRuntime,
    Slice,
    field_slices,
    fixed_scope,
    range_slices,
    source_slices,
)
from reporting.query_expression import terms
from reporting.query_templates import count_template, date_histogram_template, terms_aggregation
from reporting.shapers import date_series, histogram_buckets
from reporting.word_cloud import word_cloud_response

logger = logging.getLogger(__name__)

UNDP_METRICS = MetricRegistry("undp")

SOCIAL_SOURCE = terms("source", SOCIAL_TRIPLE_SOURCES)
MENTION_TYPE = terms("llm_mention_type", MENTION_TYPES)
UN_KEYWORDS = terms("un_keywords", ("Yes",))
KEYWORDS_FLAG = terms("Keywords", ("Yes",))

mention_scope = fixed_scope(SOCIAL_SOURCE, MENTION_TYPE)


def _settings_window(name: str):
    def resolve(ctx: RequestContext):
        return getattr(settings, name)
    return resolve


un_window = _settings_window("UN_WINDOW")
un_sentiment_window = _settings_window("UN_SENTIMENT_WINDOW")
igo_window = _settings_window("IGO_WINDOW")


UNDP_METRICS.register(Metric(
    name="mentions",
    categories=(Slice("mentions"),),
    shaper=outputs.scalar,
))


# Histograms

def run_touchpoint_area_graph(metric: Metric, ctx: RequestContext, runtime: ReportRuntime) -> Dict[str, Any]:
    """Daily series for every touch point with at least one mention"""
    ctx = metric.prepare(ctx)
    counts = runtime.executor.count_many({d.key: metric.query_builder(ctx, d) for d in metric.dimensions})
    tracked = [name for name, count in counts.items() if count > 0]
    if not tracked:
        return {"touchpointArray": []}

    body = date_histogram_template(
        ctx.query, ctx.gte, ctx.lte,
        {"touchpoints": terms_aggregation("llm_mention_touchpoint.keyword", 10)},
        interval="1d",
    )
    series = date_series(histogram_buckets(runtime.executor.search(body), "time_series"), "touchpoints", tracked)
    return {"touchpointArray": [{name: series[name]} for name in tracked]}


UNDP_METRICS.register(Metric(
    name="TouchpointMentionsAreaGraph",
    categories=field_slices("llm_mention_touchpoint", BANKING_TOUCHPOINTS),
    scope=mention_scope,
    runner=run_touchpoint_area_graph,
))


def sentiment_area_runner(interval: str):
    def run(metric: Metric, ctx: RequestContext, runtime: ReportRuntime) -> Dict[str, Any]:
        ctx = metric.prepare(ctx)
        body = date_histogram_template(
            ctx.query, ctx.gte, ctx.lte,
            {"sentiments": terms_aggregation("predicted_sentiment_value.keyword", 3)},
            interval=interval,
        )
        buckets = histogram_buckets(runtime.executor.search(body), "time_series")
        series = date_series(buckets, "sentiments", SENTIMENTS)
        return {
            "dates_array": {
                "positive_data": series["Positive"],
                "negative_data": series["Negative"],
                "neutral_data": series["Neutral"],
            }
        }
    return run


UNDP_METRICS.register(Metric(
    name="sentimentAreaGraph",
    categories=field_slices("predicted_sentiment_value", SENTIMENTS),
    scope=mention_scope,
    runner=sentiment_area_runner("5d"),
))

UNDP_METRICS.register(Metric(
    name="sentimentAreaGraphUn",
    categories=field_slices("predicted_sentiment_value", SENTIMENTS),
    scope=fixed_scope(KEYWORDS_FLAG),
    window=un_window,
    runner=sentiment_area_runner("1d"),
))


# Category count maps

UNDP_METRICS.register(Metric(
    name="complaintTouchpoints",
    categories=field_slices("llm_mention_touchpoint", BANKING_TOUCHPOINTS),
    shaper=outputs.category_map,
    scope=fixed_scope(SOCIAL_SOURCE, terms("llm_mention_type", ("Customer Complaint",))),
))

UNDP_METRICS.register(Metric(
    name="UNDPtouchpoints",
    categories=field_slices("llm_mention_touchpoint", UN_TOUCHPOINTS),
    shaper=outputs.category_map,
    scope=fixed_scope(KEYWORDS_FLAG),
    window=un_window,
))

UNDP_METRICS.register(Metric(
    name="UNDPAnnoucement",
    categories=field_slices("announcement", UN_ANNOUNCEMENTS),
    shaper=outputs.category_map,
    scope=fixed_scope(UN_KEYWORDS),
    window=un_window,
))

UNDP_METRICS.register(Metric(
    name="touchpointsIdentification",
    categories=field_slices("touchpoint_un", UN_TOUCHPOINTS),
    shaper=outputs.category_map,
    window=un_window,
))

UNDP_METRICS.register(Metric(
    name="IGOEntities",
    categories=field_slices("igo_entities", IGO_ENTITIES),
    shaper=outputs.category_map,
    window=igo_window,
))


# Category sentiment maps

UNDP_METRICS.register(Metric(
    name="touchpointSentimentsChartUNtopic",
    categories=field_slices("touchpoint_un", UN_TOUCHPOINTS),
    columns=SENTIMENT_COLUMNS,
    shaper=outputs.matrix,
    scope=fixed_scope(UN_KEYWORDS),
    window=un_sentiment_window,
))

UNDP_METRICS.register(Metric(
    name="IGOSentimentsChartUNtopic",
    categories=field_slices("igo_entities", IGO_ENTITIES),
    columns=SENTIMENT_COLUMNS,
    shaper=outputs.matrix,
    window=igo_window,
))

UNDP_METRICS.register(Metric(
    name="touchpointSentimentsChart",
    categories=field_slices("llm_mention_touchpoint", BANKING_TOUCHPOINTS),
    columns=SENTIMENT_COLUMNS,
    shaper=outputs.matrix,
    scope=mention_scope,
))

UNDP_METRICS.register(Metric(
    name="productReferenceSentimentChart",
    categories=field_slices("product_ref_ind", PRODUCT_REFERENCES),
    columns=SENTIMENT_COLUMNS,
    shaper=outputs.matrix,
    scope=mention_scope,
))

UNDP_METRICS.register(Metric(
    name="customerJourneySentimentsChart",
    categories=field_slices("customer_journey", CUSTOMER_JOURNEY_STAGES),
    columns=tuple(c for c in SENTIMENT_COLUMNS if c.label in ("positiveContent", "negativeContent")),
    shaper=outputs.journey_sentiment,
    scope=mention_scope,
))


# Category x social triple

UNDP_METRICS.register(Metric(
    name="touchpointIndustry",
    categories=field_slices("llm_mention_touchpoint", BANKING_TOUCHPOINTS),
    columns=SOCIAL_COLUMNS,
    shaper=outputs.matrix,
    scope=fixed_scope(MENTION_TYPE),
))

UNDP_METRICS.register(Metric(
    name="customerJourneyChart",
    categories=field_slices("customer_journey", CUSTOMER_JOURNEY_STAGES),
    columns=SOCIAL_COLUMNS,
    shaper=outputs.matrix,
    scope=fixed_scope(MENTION_TYPE),
))

UNDP_METRICS.register(Metric(
    name="productReferenceChart",
    categories=field_slices("product_ref_ind", PRODUCT_REFERENCES),
    columns=SOCIAL_COLUMNS,
    shaper=outputs.matrix,
    scope=fixed_scope(MENTION_TYPE),
))


# Aid chart

def run_aids_chart(metric: Metric, ctx: RequestContext, runtime: ReportRuntime) -> Dict[str, Any]:
    chart = AID_CHARTS.get(ctx.aid_type or "")
    if chart is None:
        logger.info(f"Unknown aid type {ctx.aid_type!r}")
        return {"dataArray": []}

    ctx = metric.prepare(ctx)
    field_name, first, second = chart
    bodies = {
        value: count_template(ctx.query.and_(terms(field_name, (value,))), ctx.gte, ctx.lte)
        for value in (first, second)
    }
    counts = runtime.executor.count_many(bodies)
    return {"dataArray": [counts[first], counts[second]]}


def _aid_slices():
    seen = {}
    for field_name, first, second in AID_CHARTS.values():
        for value in (first, second):
            seen.setdefault(value, Slice(value, (terms(field_name, (value,)),)))
    return tuple(seen.values())


UNDP_METRICS.register(Metric(
    name="unAidsChart",
    categories=_aid_slices(),
    window=un_window,
    runner=run_aids_chart,
))


# Score bands

SATISFACTION_SOURCES = ("Twitter", "Instagram", "Facebook")

UNDP_METRICS.register(Metric(
    name="customerSatisfactoryScore",
    categories=source_slices(SATISFACTION_SOURCES),
    columns=range_slices("satisfaction_score", SATISFACTION_BANDS),
    shaper=outputs.matrix,
    scope=fixed_scope(MENTION_TYPE),
))

UNDP_METRICS.register(Metric(
    name="churnProbabilityChart",
    categories=source_slices(SATISFACTION_SOURCES),
    columns=range_slices("churn_prob", CHURN_QUARTER_BANDS),
    shaper=outputs.matrix,
    scope=fixed_scope(MENTION_TYPE),
))

UNDP_METRICS.register(Metric(
    name="ProductChurnProbabilityChart",
    categories=field_slices("product_ref_ind", PRODUCT_REFERENCES),
    columns=range_slices("churn_prob", CHURN_LEVEL_BANDS),
    shaper=outputs.matrix,
    scope=mention_scope,
))

UNDP_METRICS.register(Metric(
    name="churnProbabilitySentimentChart",
    categories=field_slices("llm_mention_touchpoint", BANKING_TOUCHPOINTS),
    columns=range_slices("churn_prob", CHURN_LEVEL_BANDS),
    shaper=outputs.matrix,
    scope=mention_scope,
))

UNDP_METRICS.register(Metric(
    name="satisfactionSentimentSummary",
    categories=range_slices("satisfaction_score", SATISFACTION_SUMMARY_BANDS),
    shaper=outputs.summary,
    scope=mention_scope,
))

UNDP_METRICS.register(Metric(
    name="churnSentimentSummary",
    categories=range_slices("churn_prob", CHURN_SUMMARY_BANDS),
    shaper=outputs.summary,
    scope=mention_scope,
))


# Word clouds

def run_word_cloud(metric: Metric, ctx: RequestContext, runtime: ReportRuntime) -> Dict[str, Any]:
    """
    Cached cloud keyed by the sub-topic when one is given, else the topic

    Requests carrying a filter override always recompute.
    """
    ctx = metric.prepare(ctx)
    by_subtopic = bool(ctx.subtopic_id)
    # ComplaintClouds and the sentiment clouds share one cached row per key
    key = ctx.subtopic_id if by_subtopic else ctx.topic_id
    result = runtime.word_clouds.get(
        ctx.query, ctx.gte, ctx.lte, key,
        by_subtopic=by_subtopic,
        refresh=ctx.filters_applied,
    )
    return word_cloud_response(result)


UNDP_METRICS.register(Metric(
    name="ComplaintClouds",
    scope=fixed_scope(
        SOCIAL_SOURCE,
        terms("llm_mention_type", ("Customer Complaint",)),
        terms("llm_mention_touchpoint", COMPLAINT_CLOUD_TOUCHPOINTS),
    ),
    runner=run_word_cloud,
    cacheable=False,
))

UNDP_METRICS.register(Metric(
    name="PositiveSentimentsClouds",
    scope=fixed_scope(UN_KEYWORDS, terms("predicted_sentiment_value", ("Positive",))),
    window=un_sentiment_window,
    runner=run_word_cloud,
    cacheable=False,
))

UNDP_METRICS.register(Metric(
    name="NegativeSentimentsClouds",
    scope=fixed_scope(UN_KEYWORDS, terms("predicted_sentiment_value", ("Negative",))),
    window=un_sentiment_window,
    runner=run_word_cloud,
    cacheable=False,
))
