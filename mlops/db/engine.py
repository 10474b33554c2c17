"""Database engine and session factories."""

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from mlops.settings import get_settings

_engine = None


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def create_db_engine(
    url: str,
    echo: bool = False,
    pool_pre_ping: bool = True,
    sqlite_busy_timeout_s: float = 30.0,
) -> Engine:
    """Create an engine for ``url``.

    SQLite engines get foreign key enforcement and a busy timeout so that
    concurrent writers wait for the lock instead of failing immediately.
    In-memory SQLite shares one connection across the pool.
    """
    kwargs = {"echo": echo, "pool_pre_ping": pool_pre_ping}
    parsed = make_url(url)
    is_sqlite = parsed.get_backend_name() == "sqlite"

    if is_sqlite:
        kwargs["connect_args"] = {
            "timeout": sqlite_busy_timeout_s,
            "check_same_thread": False,
        }
        if parsed.database in (None, "", ":memory:"):
            kwargs["poolclass"] = StaticPool

    engine = create_engine(url, **kwargs)
    if is_sqlite:
        event.listen(engine, "connect", _enable_sqlite_foreign_keys)
    return engine


def get_engine() -> Engine:
    """Get or create the process-wide engine configured from settings."""
    global _engine
    if _engine is None:
        settings = get_settings()
        _engine = create_db_engine(
            settings.database_url,
            echo=settings.database_echo,
            pool_pre_ping=settings.pool_pre_ping,
            sqlite_busy_timeout_s=settings.sqlite_busy_timeout_s,
        )
    return _engine


def get_session_factory(engine: Engine = None) -> sessionmaker:
    return sessionmaker(bind=engine or get_engine(), expire_on_commit=False)
