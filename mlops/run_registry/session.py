"""Run registry - Session factory.

Every repository operation runs inside exactly one short-lived session
obtained from :meth:`SessionFactory.scope`.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Iterator, Optional

from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from mlops.db.base import Base
from mlops.db.engine import create_db_engine, get_engine, get_session_factory
from mlops.settings import Settings

logger = logging.getLogger(__name__)


class SessionFactory:
    """Produces isolated persistence sessions bound to one engine."""

    def __init__(self, session_maker: sessionmaker) -> None:
        self._session_maker = session_maker

    @classmethod
    def from_engine(cls, engine: Engine) -> "SessionFactory":
        return cls(get_session_factory(engine))

    @classmethod
    def from_url(cls, url: str, **engine_kwargs) -> "SessionFactory":
        return cls.from_engine(create_db_engine(url, **engine_kwargs))

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "SessionFactory":
        """Build a factory from settings, or the process-wide engine if none given."""
        if settings is None:
            return cls.from_engine(get_engine())
        return cls.from_url(
            settings.database_url,
            echo=settings.database_echo,
            pool_pre_ping=settings.pool_pre_ping,
            sqlite_busy_timeout_s=settings.sqlite_busy_timeout_s,
        )

    @property
    def engine(self) -> Engine:
        return self._session_maker.kw["bind"]

    def new_session(self) -> Session:
        """Return a new session. The caller owns commit and close."""
        return self._session_maker()

    @contextmanager
    def scope(self) -> Iterator[Session]:
        """Yield one session; commit on success, roll back on any exit by exception.

        The session is closed on every path, including cancellation of the
        surrounding call (``KeyboardInterrupt``, ``GeneratorExit``).
        """
        session = self.new_session()
        try:
            yield session
            session.commit()
        except BaseException:
            session.rollback()
            raise
        finally:
            session.close()

    def create_schema(self) -> None:
        """Create all run registry tables that do not exist yet."""
        Base.metadata.create_all(self.engine)
        logger.info("Created run registry schema on %s", self.engine.url.render_as_string())

    def dispose(self) -> None:
        self.engine.dispose()
