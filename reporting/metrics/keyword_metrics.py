"""
Keyword / social report family

Most types are plain count fan-outs declared as Metric entries. The
channel, keyword, polarity and cross-topic types need store lookups or
aggregations and carry their own runners.
"""

import logging
from datetime import datetime, timedelta
from functools import partial
from typing import Any, Dict, List, Optional

from reporting import settings
from reporting.constants import (
    ACTIONS_REQUIRED,
    AUDIENCE_GROUPS,
    AVE_CONVENTIONAL_MULTIPLIER,
    AVE_DIGITAL_MULTIPLIER,
    AVE_SOURCES,
    BANKING_TOUCHPOINTS,
    CHANNEL_SENTIMENT_SOURCES,
    CHANNEL_SOURCES,
    EMOTIONS,
    EXTENDED_MENTION_TYPES,
    INDUSTRY_CATEGORIES,
    INFLUENCER_FOLLOWERS,
    INFLUENCER_TIERS,
    LANGUAGE_TONES,
    MENTIONS_SOCIAL_SOURCES,
    NORMAL_USER_FOLLOWERS,
    PRINT_MESSAGE_FIELD,
    RECURRENCE_GROUPS,
    REVIEW_CUSTOMER_IDS,
    REVIEW_RATING_BANDS,
    REVIEW_SENTIMENT_SOURCES,
    REVIEW_SOURCES,
    REVIEW_SOURCES_SKIPPED,
    SCAD_EXTENDED_SOCIAL_SOURCES,
    SCAD_GOOGLE_CHANNEL_SOURCES,
    SCAD_GOOGLE_SOURCES,
    SCAD_SOCIAL_CHANNEL_SOURCES,
    SCAD_SOCIAL_SENTIMENT_SOURCES,
    SENTIMENTS,
    SOCIAL_TRIPLE_SOURCES,
    TOTAL_MENTIONS_SOCIAL_SOURCES,
    TOUCHPOINT_REFERENCE_TYPES,
    URGENCY_LEVELS,
    URGENCY_MENTION_TYPES,
    source_values,
)
from reporting.context import RequestContext
from reporting.errors import BadRequestError
from reporting.metrics import outputs
from reporting.metrics.registry import (
    SOCIAL_COLUMNS,
    Metric,
    MetricRegistry,
    ReportRuntime,
    Slice,
    field_slices,
    fixed_scope,
    scad_scope,
    scad_sources,
)
from reporting.query_builder import build_query_for_all_keywords_string
from reporting.query_expression import QueryExpression, terms
from reporting.query_templates import (
    aggregation_template,
    count_template,
    date_histogram,
    filters_aggregation,
    polarity_filters,
    range_template,
    terms_aggregation,
)
from reporting.scope_refiners import touchpoint_expression
from reporting.shapers import (
    bucket_date,
    category_matrix,
    filters_bucket_counts,
    histogram_buckets,
    percentage,
    pipe_series,
    ranked,
)

logger = logging.getLogger(__name__)

KEYWORD_METRICS = MetricRegistry("keywords")

GOOGLE_REVIEW_SOURCES = SCAD_GOOGLE_SOURCES
KEYWORD_LIMIT = 10
TOTAL_MENTIONS_DAYS = 90


def _un_window(ctx: RequestContext):
    return settings.UN_WINDOW if ctx.un_topic else None


def review_key(ctx: RequestContext, store) -> Optional[str]:
    """Review index key of the parent account, only for review customers"""
    if ctx.parent_account_id not in REVIEW_CUSTOMER_IDS:
        return None
    return store.get_customer_review_key(ctx.parent_account_id)


def review_query(source: str, key: str) -> QueryExpression:
    return QueryExpression.of(
        terms("source", (source,)),
        terms("manual_entry_type", ("review",)),
        terms("review_customer", (key,)),
    )


# Count metrics

KEYWORD_METRICS.register(Metric(
    name="mentions",
    categories=(Slice("mentions"),),
    shaper=outputs.scalar,
    scope=scad_scope(MENTIONS_SOCIAL_SOURCES),
    window=_un_window,
))

KEYWORD_METRICS.register(Metric(
    name="typeofMentions",
    categories=field_slices("llm_mention_type", EXTENDED_MENTION_TYPES),
    columns=SOCIAL_COLUMNS,
    shaper=outputs.matrix,
))

KEYWORD_METRICS.register(Metric(
    name="categoryMentions",
    categories=field_slices("predicted_category", INDUSTRY_CATEGORIES),
    columns=SOCIAL_COLUMNS,
    shaper=outputs.matrix,
))

KEYWORD_METRICS.register(Metric(
    name="touchpointReference",
    categories=field_slices("llm_mention_touchpoint", BANKING_TOUCHPOINTS),
    columns=field_slices("llm_mention_type", TOUCHPOINT_REFERENCE_TYPES),
    shaper=outputs.matrix,
    scope=fixed_scope(terms("source", SOCIAL_TRIPLE_SOURCES)),
))

KEYWORD_METRICS.register(Metric(
    name="languageToneMentions",
    categories=field_slices("llm_mention_tone", LANGUAGE_TONES),
    columns=SOCIAL_COLUMNS,
    shaper=outputs.matrix,
    scope=fixed_scope(terms("llm_mention_type", URGENCY_MENTION_TYPES)),
))

KEYWORD_METRICS.register(Metric(
    name="actionRequiredMentions",
    categories=field_slices("llm_mention_action", ACTIONS_REQUIRED),
    columns=SOCIAL_COLUMNS,
    shaper=outputs.matrix,
))

KEYWORD_METRICS.register(Metric(
    name="audienceMentions",
    categories=tuple(
        Slice(source, (terms("source", source_values(source)),)) for source in CHANNEL_SENTIMENT_SOURCES
    ),
    columns=field_slices("llm_mention_audience", AUDIENCE_GROUPS),
    shaper=outputs.matrix,
))

KEYWORD_METRICS.register(Metric(
    name="urgencyMentions",
    categories=field_slices("llm_mention_urgency", URGENCY_LEVELS),
    shaper=outputs.summary,
    scope=scad_scope(
        SOCIAL_TRIPLE_SOURCES,
        SOCIAL_TRIPLE_SOURCES + GOOGLE_REVIEW_SOURCES,
        terms("llm_mention_type", URGENCY_MENTION_TYPES),
    ),
))

KEYWORD_METRICS.register(Metric(
    name="sentimentSummary",
    categories=field_slices("predicted_sentiment_value", SENTIMENTS),
    shaper=outputs.summary,
    scope=scad_scope(SOCIAL_TRIPLE_SOURCES),
))

KEYWORD_METRICS.register(Metric(
    name="recurrenceMentions",
    categories=field_slices(
        "llm_mention_recurrence",
        tuple(zip(("firstTime", "repeated", "ongoing"), RECURRENCE_GROUPS)),
    ),
    # consumers read this list under the coverage key
    shaper=outputs.counts_list("influencersCoverage"),
    scope=fixed_scope(terms("source", SOCIAL_TRIPLE_SOURCES)),
))

KEYWORD_METRICS.register(Metric(
    name="influencersCoverage",
    categories=(
        Slice("normal", field_range={"u_followers": NORMAL_USER_FOLLOWERS}),
        Slice("influencer", field_range={"u_followers": INFLUENCER_FOLLOWERS}),
    ),
    shaper=outputs.counts_list("influencersCoverage"),
    scope=scad_scope(SOCIAL_TRIPLE_SOURCES),
))

KEYWORD_METRICS.register(Metric(
    name="influencersCategory",
    categories=tuple(Slice(tier, field_range={"u_followers": band}) for tier, band in INFLUENCER_TIERS),
    shaper=outputs.record("infArray"),
    scope=scad_scope(SCAD_EXTENDED_SOCIAL_SOURCES),
))

KEYWORD_METRICS.register(Metric(
    name="languages",
    categories=(
        Slice("total"),
        Slice("en", (terms("lange_detect", ("en",)),)),
        Slice("ar", (terms("lange_detect", ("ar",)),)),
    ),
    shaper=outputs.languages,
))

EMOTION_SLICES = field_slices("emotion_detector", tuple((e.capitalize(), e) for e in EMOTIONS))

KEYWORD_METRICS.register(Metric(
    name="emotions",
    categories=EMOTION_SLICES,
    shaper=outputs.emotions,
))


# Channel metrics

def channel_source_list(ctx: RequestContext):
    if ctx.scad_mode:
        return SCAD_GOOGLE_CHANNEL_SOURCES if ctx.is_google_tab else SCAD_SOCIAL_CHANNEL_SOURCES
    return CHANNEL_SOURCES


def channel_source_series(counts: Dict[str, int]) -> str:
    """
    ``Label,count,pct`` entries, Web first

    The Web entry folds in Blogs and News; percentages are over the plain
    sum of the per-source counts.
    """
    total = sum(counts.values())
    web = (counts.get("Web") or 0) + counts.get("Blogs", 0) + counts.get("News", 0)

    rows = []
    if web > 0:
        rows.append(("Web", web, percentage(web, total)))
    for label, count in counts.items():
        if label != "Web" and count > 0:
            rows.append((label, count, percentage(count, total)))
    return pipe_series(rows)


def run_channel_source(metric: Metric, ctx: RequestContext, runtime: ReportRuntime) -> Dict[str, Any]:
    executor = runtime.executor
    bodies = {
        label: count_template(ctx.query.and_(terms("source", values)), ctx.gte, ctx.lte)
        for label, values in channel_source_list(ctx)
    }
    counts = executor.count_many(bodies)
    series = channel_source_series(counts)

    print_query = ctx.query.renamed(*PRINT_MESSAGE_FIELD)
    print_count = executor.count_many(
        {"Printmedia": count_template(print_query, ctx.gte, ctx.lte)}, print_media=True, isolate=True,
    )["Printmedia"]

    key = review_key(ctx, runtime.store)
    if key:
        review_bodies = {
            source: count_template(review_query(source, key), ctx.gte, ctx.lte)
            for source in REVIEW_SOURCES
            if source not in REVIEW_SOURCES_SKIPPED
        }
        review_rows = [(s, n) for s, n in executor.count_many(review_bodies, isolate=True).items() if n > 0]
        if review_rows:
            series = "|".join(part for part in (series, pipe_series(review_rows)) if part)

    return {
        "channelSourceCount": series,
        "printMediaCount": f"Printmedia,{print_count}" if print_count > 0 else None,
    }


KEYWORD_METRICS.register(Metric(
    name="channelSource",
    categories=tuple(Slice(label, (terms("source", values),)) for label, values in CHANNEL_SOURCES),
    runner=run_channel_source,
))


def channel_sentiment_sources(ctx: RequestContext):
    if ctx.scad_mode:
        return SCAD_GOOGLE_SOURCES if ctx.is_google_tab else SCAD_SOCIAL_SENTIMENT_SOURCES
    return CHANNEL_SENTIMENT_SOURCES


def run_channel_sentiments(metric: Metric, ctx: RequestContext, runtime: ReportRuntime) -> Dict[str, Any]:
    key = review_key(ctx, runtime.store)
    bodies = {}
    for source in channel_sentiment_sources(ctx):
        if key and source in REVIEW_SENTIMENT_SOURCES:
            if source in REVIEW_SOURCES_SKIPPED:
                continue
            query = review_query(source, key)
            for label, band in REVIEW_RATING_BANDS:
                bodies[(source, label)] = range_template(query, ctx.gte, ctx.lte, {"p_likes": band})
            continue
        query = ctx.query.and_(terms("source", source_values(source)))
        for sentiment in SENTIMENTS:
            bodies[(source, sentiment.lower())] = count_template(
                query.and_(terms("predicted_sentiment_value", (sentiment,))), ctx.gte, ctx.lte
            )

    counts = runtime.executor.count_many(bodies)
    nested: Dict[str, Dict[str, int]] = {}
    for (source, label), count in counts.items():
        nested.setdefault(source, {})[label] = count
    return {"responseOutput": category_matrix(nested)}


KEYWORD_METRICS.register(Metric(
    name="channelSentiments",
    categories=tuple(
        Slice(source, (terms("source", source_values(source)),)) for source in CHANNEL_SENTIMENT_SOURCES
    ),
    columns=field_slices("predicted_sentiment_value", tuple((s.lower(), s) for s in SENTIMENTS)),
    runner=run_channel_sentiments,
))


def run_ave(metric: Metric, ctx: RequestContext, runtime: ReportRuntime) -> Dict[str, Any]:
    """Advertising value equivalent of digital and print coverage"""
    executor = runtime.executor
    digital = executor.count(count_template(ctx.query.and_(terms("source", AVE_SOURCES)), ctx.gte, ctx.lte))
    conventional = executor.count(
        count_template(ctx.query.renamed(*PRINT_MESSAGE_FIELD), ctx.gte, ctx.lte), print_media=True
    )
    return {
        "formattedDigitalMentions": round(digital * AVE_DIGITAL_MULTIPLIER, 2),
        "formattedConventionalMentions": outputs.intl_number(conventional * AVE_CONVENTIONAL_MULTIPLIER),
    }


KEYWORD_METRICS.register(Metric(name="ave", runner=run_ave))


# Touch point and keyword metrics

def subtopic_touchpoints(ctx: RequestContext, store):
    if not ctx.subtopic_id:
        return []
    return store.get_subtopic_touchpoints(ctx.subtopic_id)


def run_emotion_touchpoints(metric: Metric, ctx: RequestContext, runtime: ReportRuntime) -> Dict[str, Any]:
    bodies = {}
    for touchpoint in subtopic_touchpoints(ctx, runtime.store):
        query = ctx.query.extend(touchpoint_expression(touchpoint))
        for emotion in EMOTION_SLICES:
            bodies[(touchpoint.name, emotion.label)] = count_template(
                query.and_(terms("emotion_detector", (emotion.label,))), ctx.gte, ctx.lte
            )

    nested: Dict[str, Dict[str, int]] = {}
    for (name, emotion), count in runtime.executor.count_many(bodies).items():
        nested.setdefault(name, {})[emotion] = count
    return {"responseOutput": category_matrix(nested)}


KEYWORD_METRICS.register(Metric(name="emotionTouchpointChart", runner=run_emotion_touchpoints))


def keyword_context(ctx: RequestContext, extended_social=SOCIAL_TRIPLE_SOURCES) -> RequestContext:
    """SCAD source restriction plus the UN keyword window for UN topics"""
    ctx = ctx.with_clauses(terms("source", scad_sources(ctx, extended_social)))
    if ctx.un_topic:
        ctx = ctx.with_window(settings.UNDP_KEYWORD_WINDOW).with_clauses(terms("un_keywords", ("Yes",)))
    return ctx


def topic_keywords(ctx: RequestContext, store) -> List[str]:
    topic = store.get_topic(ctx.topic_id)
    if topic is None:
        raise BadRequestError("keywords not found")
    return (list(topic.keywords) + list(topic.hashtags))[:KEYWORD_LIMIT]


def touchpoint_rows(ctx: RequestContext, runtime: ReportRuntime) -> List[Dict[str, Any]]:
    touchpoints = subtopic_touchpoints(ctx, runtime.store)
    bodies = {
        i: count_template(ctx.query.extend(touchpoint_expression(tp)), ctx.gte, ctx.lte)
        for i, tp in enumerate(touchpoints)
    }
    counts = runtime.executor.count_many(bodies)
    return ranked([{"key_count": counts[i], "keyword": tp.name} for i, tp in enumerate(touchpoints)], "key_count")


def run_keywords_chart(metric: Metric, ctx: RequestContext, runtime: ReportRuntime) -> Dict[str, Any]:
    ctx = keyword_context(ctx)
    if ctx.subtopic_id:
        return {"responseArray": touchpoint_rows(ctx, runtime), "success": True}

    keywords = topic_keywords(ctx, runtime.store)
    bodies = {
        keyword: count_template(ctx.query.and_(terms("p_message_text", (keyword,))), ctx.gte, ctx.lte)
        for keyword in keywords
    }
    counts = runtime.executor.count_many(bodies)
    rows = [{"key_count": counts[keyword], "keyword": keyword} for keyword in keywords]
    return {"responseArray": ranked(rows, "key_count"), "success": True}


KEYWORD_METRICS.register(Metric(name="keywordsChart", runner=run_keywords_chart))


def sentiment_group_counts(response: Optional[Dict[str, Any]]) -> Dict[str, int]:
    sentiment_counts = {"Positive": 0, "Neutral": 0, "Negative": 0}
    aggregation = ((response or {}).get("aggregations") or {}).get("sentiment_group") or {}
    for bucket in aggregation.get("buckets", []):
        sentiment_counts[bucket.get("key") or "Neutral"] = int(bucket.get("doc_count", 0))
    return sentiment_counts


def run_keywords_sentiment(metric: Metric, ctx: RequestContext, runtime: ReportRuntime) -> Dict[str, Any]:
    ctx = keyword_context(ctx, TOTAL_MENTIONS_SOCIAL_SOURCES)
    if ctx.subtopic_id:
        return {"responseArray": touchpoint_rows(ctx, runtime)}

    keywords = topic_keywords(ctx, runtime.store)
    aggs = {"sentiment_group": terms_aggregation("predicted_sentiment_value.keyword")}
    bodies = {
        keyword: aggregation_template(
            ctx.query.and_(terms("p_message_text", (keyword,))), ctx.gte, ctx.lte, aggs
        )
        for keyword in keywords
    }
    responses = runtime.executor.search_many(bodies)
    return {
        "responseArray": [
            {"keyword_name": keyword, "sentiment_counts": sentiment_group_counts(responses[keyword])}
            for keyword in keywords
        ]
    }


KEYWORD_METRICS.register(Metric(name="keywordsSentimentChart", runner=run_keywords_sentiment))


# Polarity

def _polarities(counts: Dict[str, int]) -> List[Dict[str, Any]]:
    return [
        {"name": "positive", "count": counts.get("positive", 0)},
        {"name": "negative", "count": counts.get("negative", 0)},
    ]


def run_polarity_breakdown(metric: Metric, ctx: RequestContext, runtime: ReportRuntime) -> Dict[str, Any]:
    aggs = {
        "polarity": filters_aggregation(polarity_filters()),
        "time_series": date_histogram(
            field="created_at",
            interval="day",
            interval_kind="calendar_interval",
            sub_aggs={"polarity": filters_aggregation(polarity_filters())},
        ),
    }
    response = runtime.executor.search(aggregation_template(ctx.query, ctx.gte, ctx.lte, aggs))

    totals = filters_bucket_counts((response.get("aggregations") or {}).get("polarity"))
    intervals = [
        {"date": bucket_date(bucket), "polarities": _polarities(filters_bucket_counts(bucket.get("polarity")))}
        for bucket in histogram_buckets(response, "time_series")
    ]
    return {
        "polarities": _polarities(totals),
        "totalCount": totals.get("positive", 0) + totals.get("negative", 0),
        "timeIntervals": intervals,
    }


KEYWORD_METRICS.register(Metric(
    name="polarityBreakdown",
    categories=(
        Slice("positive", field_range={"llm_polarity": {"gt": 0}}),
        Slice("negative", field_range={"llm_polarity": {"lt": 0}}),
    ),
    runner=run_polarity_breakdown,
))


# Cross-topic totals

def _topic_totals(store, executor, topic_id: int, gte: str, lte: str):
    query = build_query_for_all_keywords_string(store, topic_id)
    mentions = executor.count(count_template(query.and_(terms("source", TOTAL_MENTIONS_SOCIAL_SOURCES)), gte, lte))
    reviews = executor.count(count_template(query.and_(terms("source", GOOGLE_REVIEW_SOURCES)), gte, lte))
    return mentions, reviews


def run_total_mentions(metric: Metric, ctx: RequestContext, runtime: ReportRuntime) -> Dict[str, int]:
    """Mentions and Google reviews over all of a user's topics for the last 90 days"""
    if ctx.user_id is None:
        raise BadRequestError("userId is required")

    now = datetime.now()
    gte = (now - timedelta(days=TOTAL_MENTIONS_DAYS)).isoformat()
    lte = now.isoformat()

    topic_ids = runtime.store.list_user_topic_ids(ctx.user_id)
    if not topic_ids:
        logger.info(f"No topics for user {ctx.user_id}")
        return {"mentions": 0, "googleReviews": 0}

    totals = runtime.executor.fan_out(
        {tid: partial(_topic_totals, runtime.store, runtime.executor, tid, gte, lte) for tid in topic_ids},
        default=(0, 0),
        isolate=True,
    )
    return {
        "mentions": sum(mentions for mentions, _ in totals.values()),
        "googleReviews": sum(reviews for _, reviews in totals.values()),
    }


KEYWORD_METRICS.register(Metric(
    name="totalMentions",
    runner=run_total_mentions,
    extras={"topic_required": False},
))
