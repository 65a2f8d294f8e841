"""
Elasticsearch Client Utilities

This module provides functions for establishing and managing
connections to Elasticsearch.
"""

import logging
import warnings
from functools import lru_cache

import urllib3
from elasticsearch import Elasticsearch

from models.types import ElasticsearchConfig
from reporting.settings import get_elasticsearch_config

logger = logging.getLogger(__name__)

# Suppress TLS warnings for self-signed clusters
urllib3.disable_warnings()
warnings.filterwarnings("ignore", module="elasticsearch")


def get_elasticsearch_client(config: ElasticsearchConfig = None):
    """
    Create connection to Elasticsearch

    Parameters:
    -----------
    config : ElasticsearchConfig, optional
        Connection settings. Read from the environment when omitted.

    Returns:
    --------
    Elasticsearch
        Elasticsearch client instance
    """
    config = config or get_elasticsearch_config()
    es_host = config.host

    # Check if URL already has protocol
    if not es_host.startswith(('http://', 'https://')):
        protocol = "https" if config.use_ssl else "http"
        es_host = f"{protocol}://{es_host}"

    es_config = {
        "hosts": [es_host],
        "verify_certs": config.verify_certs,
        "ssl_show_warn": False,
    }

    # Add authentication if needed
    if config.username and config.password:
        es_config["basic_auth"] = (config.username, config.password)

    # Add CA certificates if provided
    if config.ca_certs:
        es_config["ca_certs"] = config.ca_certs

    es = Elasticsearch(**es_config)
    logger.info(f"Elasticsearch client configured for {es_host}")
    return es


@lru_cache(maxsize=1)
def get_shared_client():
    """Process-wide client; connections are pooled by the transport"""
    return get_elasticsearch_client()
