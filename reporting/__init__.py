"""
Reporting core: query building, aggregation fan-out and result shaping
"""

from functools import lru_cache

from reporting.executor import SearchExecutor
from reporting.report_service import ReportService


@lru_cache(maxsize=1)
def get_report_service() -> ReportService:
    """Process-wide service wired to the shared clients"""
    from db import ConfigStore, get_session_factory
    from reporting.es_client import get_shared_client
    from reporting.redis_client import redis_client

    executor = SearchExecutor(get_shared_client())
    return ReportService(executor, ConfigStore(get_session_factory()), cache=redis_client)


__all__ = [
    'SearchExecutor',
    'ReportService',
    'get_report_service'
]
