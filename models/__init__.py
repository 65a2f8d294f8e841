"""
Models package for data types and request schemas
"""

from models.types import (
    ElasticsearchConfig,
    Topic,
    SubTopic,
    TouchPoint,
    WordCloudTag,
    WordCloudResult,
    CachedWordCloud
)
from models.requests import FilterOverride, ReportRequest, FeedRequest

__all__ = [
    'ElasticsearchConfig',
    'Topic',
    'SubTopic',
    'TouchPoint',
    'WordCloudTag',
    'WordCloudResult',
    'CachedWordCloud',
    'FilterOverride',
    'ReportRequest',
    'FeedRequest'
]
