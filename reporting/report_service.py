"""
Report service

Entry point used by the routes: resolves the request context, looks up the
metric in a family registry, runs it and caches the shaped response.
"""

import logging
from typing import Any, Dict, Optional

from reporting import settings
from reporting.card_formatter import to_card
from reporting.context import RequestContext, build_context
from reporting.metrics import KEYWORD_METRICS, UNDP_METRICS, Metric, MetricRegistry, ReportRuntime
from reporting.query_expression import QueryExpression
from reporting.query_templates import search_template
from reporting.word_cloud import WordCloudService

logger = logging.getLogger(__name__)

FEED_FAMILIES = (UNDP_METRICS, KEYWORD_METRICS)


def _hits_total(hits: Dict[str, Any]) -> int:
    total = hits.get("total", 0)
    if isinstance(total, dict):
        return int(total.get("value", 0))
    return int(total or 0)


class ReportService:
    def __init__(self, executor, store, cache=None, word_clouds: Optional[WordCloudService] = None):
        self.executor = executor
        self.store = store
        self.cache = cache
        self.word_clouds = word_clouds or WordCloudService(executor, store)
        self.runtime = ReportRuntime(executor, store, self.word_clouds)

    def context(self, metric: Metric, request) -> RequestContext:
        """Request context; user-level metrics may run without a topic"""
        if not metric.extras.get("topic_required", True) and request.topicId in (None, ""):
            return RequestContext(
                topic_id=0,
                query=QueryExpression(),
                gte=request.greaterThanTime or settings.DATA_FETCH_FROM_TIME,
                lte=request.lessThanTime or settings.DATA_FETCH_TO_TIME,
                user_id=request.userId,
            )
        return build_context(request, self.store)

    def report(self, registry: MetricRegistry, request) -> Any:
        """
        Shaped response for ``request.type`` in one report family

        Parameters:
        -----------
        registry : MetricRegistry
            KEYWORD_METRICS or UNDP_METRICS
        request : ReportRequest
            Validated request body

        Returns:
        --------
        dict
            The metric's response body
        """
        metric = registry.get(request.type)
        ctx = self.context(metric, request)

        use_cache = self.cache is not None and metric.cacheable and not ctx.filters_applied
        cache_key = None
        if use_cache:
            cache_key = self.cache.generate_cache_key(
                f"report_{registry.family}",
                **request.model_dump(exclude_none=True, exclude={"filterData", "filters"}),
            )
            cached = self.cache.get(cache_key)
            if cached is not None:
                logger.info(f"Returning cached {registry.family} report {request.type}")
                return cached

        logger.info(f"Running {registry.family} report {request.type} for topic {ctx.topic_id}")
        result = metric.run(ctx, self.runtime)

        if use_cache:
            self.cache.set_with_ttl(cache_key, result, ttl_seconds=settings.REPORT_CACHE_TTL_SECONDS)
        return result

    def feed_metric(self, metric_type: str) -> Metric:
        for registry in FEED_FAMILIES:
            if metric_type in registry:
                return registry.get(metric_type)
        return UNDP_METRICS.get(metric_type)

    def feed(self, request) -> Dict[str, Any]:
        """Document cards for one category of a categorical metric"""
        metric = self.feed_metric(request.type)
        selected = metric.category(request.category)
        ctx = metric.prepare(self.context(metric, request))

        body = search_template(ctx.query.and_(*selected.clauses), ctx.gte, ctx.lte, size=request.size)
        if selected.field_range:
            body["query"]["bool"]["must"].append({"range": selected.field_range})

        response = self.executor.search(body)
        hits = response.get("hits") or {}
        cards = [to_card(hit, self.store.get_label_override) for hit in hits.get("hits", [])]
        return {"success": True, "responseArray": cards, "total": _hits_total(hits)}
