"""
Aggregation executor

Runs count and search requests against the primary or the print-media
index. A failing primary call is logged with its query and re-raised as
SearchEngineError. Fan-out calls fail as a whole on the first branch error,
unless asked to isolate failures; a branch that misses the deadline
contributes its default value.
"""

import logging
from concurrent.futures import ALL_COMPLETED, FIRST_EXCEPTION, ThreadPoolExecutor, wait
from typing import Any, Callable, Dict, Hashable, Mapping, Optional, TypeVar

from elasticsearch import ApiError, TransportError

from reporting import settings
from reporting.errors import SearchEngineError

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _query_text(body: Mapping[str, Any]) -> str:
    try:
        for clause in body["query"]["bool"]["must"]:
            if "query_string" in clause:
                return clause["query_string"]["query"]
    except (KeyError, TypeError):
        pass
    return ""


def _as_dict(response) -> Dict[str, Any]:
    return getattr(response, "body", response) or {}


class SearchExecutor:
    def __init__(self, es, index: str = None, print_index: str = None,
                 max_workers: int = None, timeout: float = None):
        self.es = es
        self.index = index or settings.DEFAULT_INDEX
        self.print_index = print_index or settings.PRINT_MEDIA_INDEX
        self.max_workers = max_workers or settings.FANOUT_MAX_WORKERS
        self.timeout = timeout if timeout is not None else settings.FANOUT_TIMEOUT_SECONDS

    def count(self, body: Dict[str, Any], print_media: bool = False) -> int:
        """Number of documents matching ``body``"""
        index = self.print_index if print_media else self.index
        try:
            response = self.es.count(index=index, **body)
        except (ApiError, TransportError) as e:
            logger.error(f"Elasticsearch count error on {index} for query [{_query_text(body)}]: {e}")
            raise SearchEngineError("Elasticsearch count failed", _query_text(body)) from e
        return int(_as_dict(response).get("count", 0) or 0)

    def search(self, body: Dict[str, Any], print_media: bool = False) -> Dict[str, Any]:
        """Raw search response with ``hits`` and ``aggregations``"""
        index = self.print_index if print_media else self.index
        try:
            response = self.es.search(index=index, **body)
        except (ApiError, TransportError) as e:
            logger.error(f"Elasticsearch search error on {index} for query [{_query_text(body)}]: {e}")
            raise SearchEngineError("Elasticsearch search failed", _query_text(body)) from e
        return _as_dict(response)

    def fan_out(self, tasks: Mapping[Hashable, Callable[[], T]], default: Any = 0,
                isolate: bool = False) -> Dict[Hashable, T]:
        """
        Run independent calls concurrently and join them

        Parameters:
        -----------
        tasks : mapping
            Key -> zero-argument callable
        default :
            Value used for a branch that misses the deadline, or that raises
            when ``isolate`` is set
        isolate : bool
            Degrade a failing branch to ``default`` instead of failing the
            whole call. Without it the first branch error is re-raised and
            the remaining branches are cancelled.

        Returns:
        --------
        dict
            Key -> result, in the order of ``tasks``
        """
        if not tasks:
            return {}

        results: Dict[Hashable, Any] = {}
        pool = ThreadPoolExecutor(max_workers=max(1, min(self.max_workers, len(tasks))))
        try:
            futures = {pool.submit(fn): key for key, fn in tasks.items()}
            done, pending = wait(
                futures,
                timeout=self.timeout,
                return_when=ALL_COMPLETED if isolate else FIRST_EXCEPTION,
            )

            for future in done:
                key = futures[future]
                try:
                    results[key] = future.result()
                except Exception as e:
                    if not isolate:
                        logger.error(f"Fan-out branch {key!r} failed, aborting: {e}")
                        raise
                    logger.warning(f"Fan-out branch {key!r} failed, using {default!r}: {e}")
                    results[key] = default

            for future in pending:
                key = futures[future]
                future.cancel()
                logger.warning(f"Fan-out branch {key!r} timed out after {self.timeout}s, using {default!r}")
                results[key] = default
        finally:
            pool.shutdown(wait=False, cancel_futures=True)

        return {key: results[key] for key in tasks}

    def count_many(self, bodies: Mapping[Hashable, Dict[str, Any]], print_media: bool = False,
                   isolate: bool = False) -> Dict[Hashable, int]:
        """Concurrent counts; with ``isolate`` a failed branch counts as zero"""
        return self.fan_out(
            {key: (lambda body=body: self.count(body, print_media)) for key, body in bodies.items()},
            default=0,
            isolate=isolate,
        )

    def search_many(self, bodies: Mapping[Hashable, Dict[str, Any]],
                    isolate: bool = False) -> Dict[Hashable, Optional[Dict[str, Any]]]:
        """Concurrent searches; with ``isolate`` a failed branch yields None"""
        return self.fan_out(
            {key: (lambda body=body: self.search(body)) for key, body in bodies.items()},
            default=None,
            isolate=isolate,
        )
