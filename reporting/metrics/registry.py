"""
Metric registry

A metric is a list of dimensions, a query builder that turns one dimension
into a request body, and a shaper that turns the joined counts into the
response. Dimensions are the product of the metric's categories and its
optional columns (e.g. touch point x source). Metrics whose output needs
lookups, histograms or word clouds supply a custom runner instead.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Hashable, Optional, Sequence, Tuple

from reporting.constants import SCAD_GOOGLE_SOURCES, SENTIMENTS, SOCIAL_TRIPLE, source_values
from reporting.context import RequestContext, Window
from reporting.errors import BadRequestError, UnknownMetricError
from reporting.query_expression import Clause, terms
from reporting.query_templates import count_template, range_template

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Slice:
    """One labelled constraint: extra clauses and/or one extra range"""
    label: str
    clauses: Tuple[Optional[Clause], ...] = ()
    field_range: Optional[Dict[str, Dict[str, Any]]] = None


@dataclass(frozen=True)
class Dimension:
    key: Hashable
    category: Slice
    column: Optional[Slice] = None

    @property
    def clauses(self) -> Tuple[Optional[Clause], ...]:
        return self.category.clauses + (self.column.clauses if self.column else ())

    @property
    def field_range(self) -> Optional[Dict[str, Dict[str, Any]]]:
        if self.column is not None and self.column.field_range:
            return self.column.field_range
        return self.category.field_range


@dataclass(frozen=True)
class ReportRuntime:
    """Collaborators handed to runners"""
    executor: Any
    store: Any
    word_clouds: Any = None


def count_query(ctx: RequestContext, dimension: Dimension) -> Dict[str, Any]:
    """Count body for one dimension; a range slice uses the range template"""
    query = ctx.query.and_(*dimension.clauses)
    if dimension.field_range:
        return range_template(query, ctx.gte, ctx.lte, dimension.field_range)
    return count_template(query, ctx.gte, ctx.lte)


def no_scope(ctx: RequestContext) -> Tuple[Clause, ...]:
    return ()


@dataclass(frozen=True)
class Metric:
    name: str
    categories: Tuple[Slice, ...] = ()
    columns: Tuple[Slice, ...] = ()
    shaper: Optional[Callable[["Metric", Dict[Hashable, int]], Any]] = None
    query_builder: Callable[[RequestContext, Dimension], Dict[str, Any]] = count_query
    scope: Callable[[RequestContext], Tuple[Optional[Clause], ...]] = no_scope
    window: Optional[Callable[[RequestContext], Optional[Window]]] = None
    runner: Optional[Callable[["Metric", RequestContext, ReportRuntime], Any]] = None
    print_media: bool = False
    cacheable: bool = True
    extras: Dict[str, Any] = field(default_factory=dict)

    @property
    def dimensions(self) -> Tuple[Dimension, ...]:
        if not self.columns:
            return tuple(Dimension(c.label, c) for c in self.categories)
        return tuple(
            Dimension((c.label, col.label), c, col)
            for c in self.categories
            for col in self.columns
        )

    def prepare(self, ctx: RequestContext) -> RequestContext:
        """Context narrowed by the metric's scope clauses and window"""
        ctx = ctx.with_clauses(*self.scope(ctx))
        if self.window is not None:
            ctx = ctx.with_window(self.window(ctx))
        return ctx

    def category(self, label: str) -> Slice:
        for candidate in self.categories:
            if candidate.label == label:
                return candidate
        raise BadRequestError(f"Unknown category '{label}' for {self.name}")

    def run(self, ctx: RequestContext, runtime: ReportRuntime) -> Any:
        if self.runner is not None:
            return self.runner(self, ctx, runtime)
        return run_counts(self, ctx, runtime)


def run_counts(metric: Metric, ctx: RequestContext, runtime: ReportRuntime) -> Any:
    """Default runner: one concurrent count per dimension, then the shaper"""
    ctx = metric.prepare(ctx)
    bodies = {d.key: metric.query_builder(ctx, d) for d in metric.dimensions}
    counts = runtime.executor.count_many(bodies, print_media=metric.print_media)
    return metric.shaper(metric, counts)


class MetricRegistry:
    def __init__(self, family: str):
        self.family = family
        self._metrics: Dict[str, Metric] = {}

    def register(self, metric: Metric) -> Metric:
        if metric.name in self._metrics:
            raise ValueError(f"Metric {metric.name} registered twice in {self.family}")
        self._metrics[metric.name] = metric
        return metric

    def get(self, name: str) -> Metric:
        try:
            return self._metrics[name]
        except KeyError:
            raise UnknownMetricError(name)

    def __contains__(self, name) -> bool:
        return name in self._metrics

    def names(self) -> Sequence[str]:
        return list(self._metrics)


# Slice and scope helpers

def field_slices(field_name: str, values: Sequence, *extra: Optional[Clause]) -> Tuple[Slice, ...]:
    """
    One slice per value, constraining ``field_name`` to it

    A value is either a plain label or a (label, matched values) pair.
    """
    slices = []
    for value in values:
        if isinstance(value, tuple):
            label, matched = value
        else:
            label, matched = value, value
        if isinstance(matched, str):
            matched = (matched,)
        slices.append(Slice(label, (terms(field_name, matched),) + extra))
    return tuple(slices)


def source_slices(sources: Sequence[str], labels: Sequence[str] = None) -> Tuple[Slice, ...]:
    """One slice per display source, expanding the Youtube and Web aliases"""
    labels = labels or sources
    return tuple(Slice(label, (terms("source", source_values(s)),)) for label, s in zip(labels, sources))


def range_slices(field_name: str, bands: Sequence[Tuple[str, Any, Any]]) -> Tuple[Slice, ...]:
    return tuple(Slice(label, field_range={field_name: {"gte": low, "lte": high}}) for label, low, high in bands)


def scad_sources(ctx: RequestContext, social: Sequence[str], default: Sequence[str] = ()) -> Sequence[str]:
    """Source restriction for SCAD users: Google tab vs the social set"""
    if ctx.scad_mode:
        return SCAD_GOOGLE_SOURCES if ctx.is_google_tab else social
    return default


def scad_scope(social: Sequence[str], default: Sequence[str] = (), *extra: Optional[Clause]):
    def scope(ctx: RequestContext):
        return (terms("source", scad_sources(ctx, social, default)),) + extra
    return scope


def fixed_scope(*clauses: Optional[Clause]):
    def scope(ctx: RequestContext):
        return clauses
    return scope


# Shared columns

SOCIAL_COLUMNS = tuple(Slice(key, (terms("source", (source,)),)) for key, source in SOCIAL_TRIPLE)
SENTIMENT_COLUMNS = field_slices(
    "predicted_sentiment_value", tuple((f"{s.lower()}Content", s) for s in SENTIMENTS)
)
