"""
query_templates.py
Request body templates

Pure functions that wrap a query expression and a time window into the
request bodies sent to Elasticsearch. Every template shares the same
must-list (query_string plus a range on both time fields), so count and
search calls for one metric always filter identically.
"""

from typing import Any, Dict, List, Optional, Union

from reporting.query_expression import QueryExpression

Query = Union[str, QueryExpression]


def render_query(query: Query) -> str:
    if isinstance(query, QueryExpression):
        return query.render()
    return query or ""


def base_must(query: Query, gte, lte) -> List[Dict[str, Any]]:
    """
    Must-list shared by all templates

    Both p_created_time and created_at are range filtered; depending on the
    source, only one of them may be populated.
    """
    return [
        {"query_string": {"query": render_query(query)}},
        {"range": {"p_created_time": {"gte": gte, "lte": lte}}},
        {"range": {"created_at": {"gte": gte, "lte": lte}}},
    ]


def count_template(query: Query, gte, lte) -> Dict[str, Any]:
    return {"query": {"bool": {"must": base_must(query, gte, lte)}}}


def search_template(query: Query, gte, lte, size: int = 30,
                    sort: Optional[List[Dict[str, Any]]] = None) -> Dict[str, Any]:
    """Bounded search returning documents, newest first by default"""
    return {
        "size": size,
        "sort": sort if sort is not None else [{"p_created_time": {"order": "desc"}}],
        "query": {"bool": {"must": base_must(query, gte, lte)}},
    }


def range_template(query: Query, gte, lte, field_range: Dict[str, Dict[str, Any]]) -> Dict[str, Any]:
    """Count template with one extra range clause, e.g. {"u_followers": {"gte": 1000}}"""
    must = base_must(query, gte, lte)
    must.append({"range": field_range})
    return {"query": {"bool": {"must": must}}}


def band_template(query: Query, gte, lte, field: str, low, high) -> Dict[str, Any]:
    """Range template for an inclusive score band"""
    return range_template(query, gte, lte, {field: {"gte": low, "lte": high}})


def aggregation_template(query: Query, gte, lte, aggs: Dict[str, Any], size: int = 0) -> Dict[str, Any]:
    return {
        "size": size,
        "query": {"bool": {"must": base_must(query, gte, lte)}},
        "aggs": aggs,
    }


def terms_aggregation(field: str, size: int = 10) -> Dict[str, Any]:
    return {"terms": {"field": field, "size": size}}


def filters_aggregation(named_filters: Dict[str, Dict[str, Any]]) -> Dict[str, Any]:
    return {"filters": {"filters": named_filters}}


def polarity_filters() -> Dict[str, Dict[str, Any]]:
    """Strict sign filters on llm_polarity; zero belongs to neither bucket"""
    return {
        "positive": {"range": {"llm_polarity": {"gt": 0}}},
        "negative": {"range": {"llm_polarity": {"lt": 0}}},
    }


def filters_template(query: Query, gte, lte, named_filters: Dict[str, Dict[str, Any]],
                     name: str = "filtered") -> Dict[str, Any]:
    return aggregation_template(query, gte, lte, {name: filters_aggregation(named_filters)})


def date_histogram(field: str = "p_created_time", interval: str = "1d",
                   interval_kind: str = "fixed_interval", fmt: str = "yyyy-MM-dd",
                   extended_bounds: Optional[Dict[str, Any]] = None,
                   sub_aggs: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    histogram = {
        "field": field,
        interval_kind: interval,
        "format": fmt,
        "min_doc_count": 0,
    }
    if extended_bounds:
        histogram["extended_bounds"] = extended_bounds
    aggregation = {"date_histogram": histogram}
    if sub_aggs:
        aggregation["aggs"] = sub_aggs
    return aggregation


def date_histogram_template(query: Query, gte, lte, sub_aggs: Dict[str, Any],
                            name: str = "time_series", **histogram_kwargs) -> Dict[str, Any]:
    """
    Histogram over the matched set with one breakdown per bucket

    Parameters:
    -----------
    sub_aggs : dict
        Named inner aggregation (terms or filters) keyed by the dimension
        being broken out
    histogram_kwargs :
        field, interval, interval_kind ("fixed_interval" or
        "calendar_interval"), fmt and extended_bounds
    """
    return aggregation_template(
        query, gte, lte, {name: date_histogram(sub_aggs=sub_aggs, **histogram_kwargs)}
    )
