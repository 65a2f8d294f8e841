"""
Configuration store package (SQLAlchemy)
"""

from db.config_store import ConfigStore, split_setting
from db.models import Base
from db.session import make_session_factory, get_session_factory

__all__ = [
    'ConfigStore',
    'split_setting',
    'Base',
    'make_session_factory',
    'get_session_factory'
]
