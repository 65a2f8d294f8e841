from reporting.metrics.registry import Metric, MetricRegistry, ReportRuntime, Slice
from reporting.metrics.keyword_metrics import KEYWORD_METRICS
from reporting.metrics.undp_metrics import UNDP_METRICS

__all__ = [
    "Metric",
    "MetricRegistry",
    "ReportRuntime",
    "Slice",
    "KEYWORD_METRICS",
    "UNDP_METRICS",
]
