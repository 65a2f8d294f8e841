import logging
from functools import lru_cache

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from reporting.settings import DATABASE_URL

logger = logging.getLogger(__name__)


def make_session_factory(database_url: str = None, **engine_kwargs) -> sessionmaker:
    """Create an engine and a session factory bound to it"""
    url = database_url or DATABASE_URL
    engine = create_engine(url, pool_pre_ping=True, future=True, **engine_kwargs)
    logger.info(f"Configuration store engine created for {engine.url.render_as_string(hide_password=True)}")
    return sessionmaker(bind=engine, expire_on_commit=False, future=True)


@lru_cache(maxsize=1)
def get_session_factory() -> sessionmaker:
    return make_session_factory()
