"""
Runtime configuration

All values are read from the environment (a local .env file is loaded
first) so the same image can serve every deployment.
"""

import os
from dotenv import load_dotenv

from models.types import ElasticsearchConfig

# Load environment variables
load_dotenv()


def _as_bool(value, default=False):
    if value is None:
        return default
    return str(value).strip().lower() in ("1", "true", "yes", "on")


def get_elasticsearch_config() -> ElasticsearchConfig:
    """Build the Elasticsearch connection settings from ES_* variables"""
    return ElasticsearchConfig(
        host=os.getenv('ES_HOST', 'localhost:9200'),
        username=os.getenv('ES_USERNAME'),
        password=os.getenv('ES_PASSWORD'),
        use_ssl=_as_bool(os.getenv('USE_SSL'), False),
        verify_certs=_as_bool(os.getenv('VERIFY_CERTS'), False),
        ca_certs=os.getenv('CA_CERTS'),
    )


# Indices
DEFAULT_INDEX = os.getenv('ELASTICSEARCH_DEFAULTINDEX', 'social_mentions')
PRINT_MEDIA_INDEX = os.getenv('PRINTMEDIA_ELASTIC_INDEX', 'print_media')

# Configuration store
DATABASE_URL = os.getenv('DATABASE_URL', 'sqlite:///./reporting.db')

# Default report window when the request carries none
DATA_FETCH_FROM_TIME = os.getenv('DATA_FETCH_FROM_TIME', 'now-90d')
DATA_FETCH_TO_TIME = os.getenv('DATA_FETCH_TO_TIME', 'now')

# Fixed windows of the humanitarian dataset
UN_WINDOW = (
    os.getenv('UN_WINDOW_FROM', '2023-01-01'),
    os.getenv('UN_WINDOW_TO', '2023-04-30'),
)
UN_SENTIMENT_WINDOW = (
    os.getenv('UN_SENTIMENT_WINDOW_FROM', '2023-02-05'),
    os.getenv('UN_SENTIMENT_WINDOW_TO', '2023-02-21'),
)
IGO_WINDOW = (
    os.getenv('IGO_WINDOW_FROM', '2023-01-01'),
    os.getenv('IGO_WINDOW_TO', '2024-12-03'),
)
# Window used by keyword charts on UN topics
UNDP_KEYWORD_WINDOW = (
    os.getenv('GREATER_THEN_TIME_UNDP', '2023-01-01'),
    os.getenv('LESS_THEN_TIME_UNDP', '2023-04-30'),
)

PUBLIC_IMAGES_PATH = os.getenv('PUBLIC_IMAGES_PATH', '/images/')

# Fan-out
FANOUT_MAX_WORKERS = int(os.getenv('FANOUT_MAX_WORKERS', 16))
FANOUT_TIMEOUT_SECONDS = float(os.getenv('FANOUT_TIMEOUT_SECONDS', 25))

# Short-lived response cache (Redis)
REPORT_CACHE_TTL_SECONDS = int(os.getenv('REPORT_CACHE_TTL_SECONDS', 300))
