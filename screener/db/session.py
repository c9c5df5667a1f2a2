# screener/db/session.py
from functools import lru_cache
from typing import Optional

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from screener.config import settings


@lru_cache(maxsize=1)
def get_session_factory() -> Optional[sessionmaker]:
    """
    Session factory for the direct Postgres connection, or None when
    DATABASE_URL is not configured (PostgREST is used instead).
    """
    if not settings.DATABASE_URL:
        return None

    # Keep the pool small: the hosted project caps total connections.
    engine = create_engine(
        settings.DATABASE_URL,
        pool_pre_ping=True,
        pool_size=2,
        max_overflow=1,
        pool_recycle=1800
    )
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)
