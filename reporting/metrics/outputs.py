"""
Metric shapers

Each shaper takes the metric and the joined counts (dimension key -> count)
and returns the response body for one report type.
"""

from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Callable, Dict, Hashable, List

from reporting.shapers import category_counts, category_matrix, labelled_counts, percentage_triple

Counts = Dict[Hashable, int]


def scalar(metric, counts: Counts) -> Dict[str, int]:
    return {"count": sum(counts.values())}


def category_map(metric, counts: Counts) -> Dict[str, Any]:
    return {"responseOutput": category_counts(counts)}


def _nest(metric, counts: Counts) -> Dict[str, Dict[str, int]]:
    nested: Dict[str, Dict[str, int]] = {}
    for category in metric.categories:
        nested[category.label] = {
            column.label: counts.get((category.label, column.label), 0) for column in metric.columns
        }
    return nested


def matrix(metric, counts: Counts) -> Dict[str, Any]:
    """Category -> column counts; all-zero categories are left out"""
    return {"responseOutput": category_matrix(_nest(metric, counts))}


def journey_sentiment(metric, counts: Counts) -> Dict[str, Any]:
    """Matrix with negative counts flipped below the axis"""
    output = {}
    for category, sub_counts in category_matrix(_nest(metric, counts)).items():
        output[category] = {
            "negativeContent": -sub_counts.get("negativeContent", 0),
            "positiveContent": sub_counts.get("positiveContent", 0),
        }
    return {"responseOutput": output}


def summary(metric, counts: Counts) -> Dict[str, Any]:
    return labelled_counts([c.label for c in metric.categories], counts)


def counts_list(key: str) -> Callable[[Any, Counts], Dict[str, List[int]]]:
    """Counts in category order under ``key``"""
    def shape(metric, counts: Counts):
        return {key: [counts.get(c.label, 0) for c in metric.categories]}
    return shape


def record(key: str) -> Callable[[Any, Counts], Dict[str, Dict[str, int]]]:
    """Every category present, zeros included"""
    def shape(metric, counts: Counts):
        return {key: {c.label: counts.get(c.label, 0) for c in metric.categories}}
    return shape


def languages(metric, counts: Counts) -> Dict[str, str]:
    """``ar,en,other`` percentages of the total"""
    triple = percentage_triple([counts.get("ar", 0), counts.get("en", 0)], counts.get("total", 0))
    return {"response": ",".join(triple)}


def emotions(metric, counts: Counts) -> Dict[str, Any]:
    labels = [c.label for c in metric.categories]
    return {"emoData": {"emos": labels, "counts": [counts.get(label, 0) for label in labels]}}


def intl_number(value: float, max_fraction_digits: int = 3) -> str:
    """
    en-US grouping with up to three fraction digits and no trailing zeros

    1234.5 -> "1,234.5", 3276.45 * 3 -> "9,829.35"
    """
    quantum = Decimal(1).scaleb(-max_fraction_digits)
    rounded = Decimal(str(value)).quantize(quantum, rounding=ROUND_HALF_UP)
    text = f"{rounded:,f}"
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text
