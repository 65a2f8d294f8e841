"""
Result shaping policies

Consumers parse these formats literally, so separators, ordering and the
two-decimal percentages must stay exactly as produced here.
"""

from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple


def to_fixed(value: float, digits: int = 2) -> str:
    return f"{value:.{digits}f}"


def percentage(part: int, total: int) -> str:
    """Share of ``total`` as a two-decimal string; a zero total counts as 1"""
    return to_fixed((part / (total or 1)) * 100)


def percentage_triple(parts: Sequence[int], total: int) -> List[str]:
    """
    Percentages of the explicit parts plus the remainder

    The remainder is ``100 - sum(explicit)`` and is never queried, so the
    emitted values always add up to 100.
    """
    explicit = [percentage(p, total) for p in parts]
    remainder = 100 - sum(float(p) for p in explicit)
    return explicit + [to_fixed(remainder)]


def pipe_series(rows: Iterable[Sequence[Any]]) -> str:
    """``Label,Count|Label,Count`` without a trailing delimiter"""
    return "|".join(",".join(str(v) for v in row) for row in rows)


def labelled_counts(labels: Sequence[str], counts: Mapping[str, int]) -> Dict[str, Any]:
    """Pipe series in label order plus the total, as used by summaries"""
    return {
        "responseOutput": pipe_series((label, counts.get(label, 0)) for label in labels),
        "totalSentiments": sum(counts.get(label, 0) for label in labels),
    }


def category_counts(counts: Mapping[str, int]) -> Dict[str, int]:
    """Category -> count, dropping zero categories"""
    return {category: count for category, count in counts.items() if count > 0}


def category_matrix(counts: Mapping[str, Mapping[str, int]]) -> Dict[str, Dict[str, int]]:
    """Category -> sub-counts, dropping categories whose sub-counts are all zero"""
    return {
        category: dict(sub_counts)
        for category, sub_counts in counts.items()
        if any(v != 0 for v in sub_counts.values())
    }


def ranked(rows: List[Dict[str, Any]], key: str) -> List[Dict[str, Any]]:
    """Rows sorted descending by ``key``; ties keep their input order"""
    return sorted(rows, key=lambda row: row[key], reverse=True)


# Bucket readers

def terms_bucket_counts(aggregation: Optional[Mapping[str, Any]]) -> Dict[str, int]:
    if not aggregation:
        return {}
    return {str(b.get("key")): int(b.get("doc_count", 0)) for b in aggregation.get("buckets", [])}


def filters_bucket_counts(aggregation: Optional[Mapping[str, Any]]) -> Dict[str, int]:
    if not aggregation:
        return {}
    buckets = aggregation.get("buckets", {})
    if isinstance(buckets, list):
        return {str(b.get("key")): int(b.get("doc_count", 0)) for b in buckets}
    return {name: int(b.get("doc_count", 0)) for name, b in buckets.items()}


def bucket_date(bucket: Mapping[str, Any]) -> str:
    """yyyy-MM-dd of a histogram bucket"""
    return str(bucket.get("key_as_string", ""))[:10]


def date_series(buckets: Sequence[Mapping[str, Any]], sub_aggregation: str,
                tracked: Sequence[str], reader=terms_bucket_counts) -> Dict[str, str]:
    """
    ``date~count|date~count`` per tracked sub-dimension

    Every histogram bucket contributes one segment to every tracked series,
    zero when the sub-dimension is absent from that bucket.
    """
    segments: Dict[str, List[str]] = {key: [] for key in tracked}
    for bucket in buckets:
        date = bucket_date(bucket)
        counts = reader(bucket.get(sub_aggregation))
        for key in tracked:
            segments[key].append(f"{date}~{counts.get(key, 0)}")
    return {key: "|".join(parts) for key, parts in segments.items()}


def histogram_buckets(response: Mapping[str, Any], name: str) -> List[Mapping[str, Any]]:
    return ((response or {}).get("aggregations") or {}).get(name, {}).get("buckets", []) or []


def split_pipe_series(series: str) -> List[Tuple[str, str]]:
    """Inverse of pipe_series for two-column rows"""
    if not series:
        return []
    return [tuple(item.split(",", 1)) for item in series.split("|")]
