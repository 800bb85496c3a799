from __future__ import annotations

import logging
from urllib.parse import parse_qsl, urlencode, urlparse, urlunparse

from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker, create_async_engine

from zenplan_api.settings import get_settings

logger = logging.getLogger(__name__)

ASYNC_DRIVERS = {
    "sqlite": "sqlite+aiosqlite",
    "postgres": "postgresql+asyncpg",
    "postgresql": "postgresql+asyncpg",
    "postgresql+psycopg2": "postgresql+asyncpg",
}
LOCAL_HOSTS = {"localhost", "127.0.0.1"}

_engine: AsyncEngine | None = None
_session_factory: async_sessionmaker | None = None


def _asyncpg_query(query: str) -> str:
    # asyncpg rejects libpq's sslmode/channel_binding; it takes ssl=true instead.
    params = parse_qsl(query, keep_blank_values=True)
    wants_ssl = any(key == "sslmode" for key, _ in params)
    kept = [(key, value) for key, value in params if key not in {"sslmode", "channel_binding", "ssl"}]
    if wants_ssl:
        kept.append(("ssl", "true"))
    return urlencode(kept)


def normalize_database_url(database_url: str) -> str:
    """Rewrite sync driver URLs to their async SQLAlchemy dialects."""
    url = str(database_url or "").strip()
    scheme, sep, rest = url.partition("://")
    if not sep:
        return url
    scheme = ASYNC_DRIVERS.get(scheme, scheme)
    url = f"{scheme}://{rest}"
    if scheme != "postgresql+asyncpg":
        return url
    try:
        parsed = urlparse(url)
    except ValueError:
        logger.warning("Could not parse DATABASE_URL; using it as given")
        return url
    return urlunparse(parsed._replace(query=_asyncpg_query(parsed.query)))


def _engine_options(db_url: str) -> dict:
    if db_url.startswith("sqlite"):
        return {"future": True}
    options = {"pool_pre_ping": True, "future": True, "pool_size": 20, "max_overflow": 10}
    host = urlparse(db_url).hostname or ""
    if host and host not in LOCAL_HOSTS:
        options["connect_args"] = {"ssl": True}
    return options


def get_engine() -> AsyncEngine:
    global _engine
    if _engine is None:
        db_url = normalize_database_url(get_settings().database_url)
        _engine = create_async_engine(db_url, **_engine_options(db_url))
        logger.info("Document store engine ready (%s)", db_url.split("://", 1)[0])
    return _engine


def get_sessionmaker() -> async_sessionmaker:
    global _session_factory
    if _session_factory is None:
        _session_factory = async_sessionmaker(get_engine(), expire_on_commit=False)
    return _session_factory


async def dispose_engine() -> None:
    global _engine, _session_factory
    if _engine is not None:
        await _engine.dispose()
    _engine = None
    _session_factory = None
