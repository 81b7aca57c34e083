"""Database URL and engine construction from environment settings."""
from __future__ import annotations
import os
from typing import Any, Dict, Mapping
from urllib.parse import quote_plus

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.pool import StaticPool

DEFAULT_POOL_SIZE = 10
DEFAULT_POOL_TIMEOUT = 30


def database_url_from_env(env: Mapping[str, str] = os.environ) -> str:
    """DATABASE_URL wins; otherwise assemble a MySQL URL from DB_* parts."""
    url = env.get('DATABASE_URL')
    if url:
        return url
    if not env.get('DB_HOST'):
        return 'sqlite:///dev.db'
    user = quote_plus(env.get('DB_USER', 'wkshop_user'))
    password = quote_plus(env.get('DB_PASSWORD', ''))
    host = env['DB_HOST']
    port = env.get('DB_PORT', '3306')
    name = env.get('DB_NAME', 'wkshop_db')
    return f"mysql+pymysql://{user}:{password}@{host}:{port}/{name}?charset=utf8mb4"


def build_engine(db_url: str, pool_size: int = DEFAULT_POOL_SIZE, pool_timeout: int = DEFAULT_POOL_TIMEOUT) -> Engine:
    kwargs: Dict[str, Any] = {'echo': False, 'future': True}
    if db_url.endswith(':memory:'):
        # Single shared in-memory SQLite database across all sessions
        kwargs.update(connect_args={'check_same_thread': False}, poolclass=StaticPool)
    elif db_url.startswith('sqlite'):
        kwargs.update(connect_args={'check_same_thread': False})
    else:
        kwargs.update(pool_size=pool_size, max_overflow=0, pool_timeout=pool_timeout, pool_pre_ping=True)
    return create_engine(db_url, **kwargs)
