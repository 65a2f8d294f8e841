"""
Type definitions shared by the store, the query layer and the shapers
"""

from typing import Optional, List, Dict, Any
from dataclasses import dataclass, field
from datetime import datetime


@dataclass
class ElasticsearchConfig:
    """Elasticsearch connection configuration"""
    host: str = "localhost:9200"
    username: Optional[str] = None
    password: Optional[str] = None
    use_ssl: bool = False
    verify_certs: bool = False
    ca_certs: Optional[str] = None


@dataclass(frozen=True)
class Topic:
    """Saved social-listening configuration, already split into lists"""
    topic_id: int
    keywords: List[str] = field(default_factory=list)
    hashtags: List[str] = field(default_factory=list)
    urls: List[str] = field(default_factory=list)
    exclude_words: List[str] = field(default_factory=list)
    exclude_accounts: List[str] = field(default_factory=list)
    sources: List[str] = field(default_factory=list)
    locations: List[str] = field(default_factory=list)
    languages: List[str] = field(default_factory=list)
    gmaps_url: Optional[str] = None


@dataclass(frozen=True)
class SubTopic:
    """Keyword-scoped slice of a topic (customer experience theme)"""
    subtopic_id: int
    keywords: List[str] = field(default_factory=list)
    exclude_keywords: List[str] = field(default_factory=list)
    exclude_accounts: List[str] = field(default_factory=list)
    sources: List[str] = field(default_factory=list)
    monitoring_type: Optional[str] = None


@dataclass(frozen=True)
class TouchPoint:
    touchpoint_id: int
    name: str
    keywords: List[str] = field(default_factory=list)


@dataclass
class WordCloudTag:
    """Word cloud data item"""
    tag: str
    count: int

    def to_dict(self) -> Dict[str, Any]:
        return {"tag": self.tag, "count": self.count}


@dataclass
class WordCloudResult:
    """The two views of one computed word cloud"""
    sorted: List[WordCloudTag]
    shuffled: List[WordCloudTag]

    def list_view(self) -> str:
        return ", ".join(f"{t.tag}, {t.count}" for t in self.sorted)


@dataclass
class CachedWordCloud:
    """A stored word cloud row as read from the configuration store"""
    key: int
    sorted_json: Optional[str]
    shuffled_json: Optional[str]
    computed_at: datetime
