from __future__ import annotations

import logging
from typing import Generator

from fastapi import Request
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, sessionmaker

from church_registry.core.config import Settings
from church_registry.core.errors import DuplicateError

logger = logging.getLogger(__name__)


def _is_sqlite(url: str) -> bool:
    return url.startswith("sqlite")


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):  # noqa: ARG001
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


class Database:
    """Engine and session factory with an explicit connect/dispose lifecycle.

    One instance is built by the application lifespan and stored on
    ``app.state.database``; scripts build their own.
    """

    def __init__(self, url: str, echo: bool = False):
        self.url = url
        self.echo = echo
        self._engine: Engine | None = None
        self._sessionmaker: sessionmaker[Session] | None = None

    @classmethod
    def from_settings(cls, settings: Settings) -> "Database":
        return cls(settings.database_url, echo=settings.database_echo)

    @property
    def engine(self) -> Engine:
        if self._engine is None:
            raise RuntimeError("Database is not connected")
        return self._engine

    def connect(self) -> None:
        if self._engine is not None:
            return
        if _is_sqlite(self.url):
            engine = create_engine(
                self.url,
                echo=self.echo,
                connect_args={"check_same_thread": False},
            )
            event.listen(engine, "connect", _enable_sqlite_foreign_keys)
        else:
            engine = create_engine(
                self.url, echo=self.echo, pool_pre_ping=True, future=True
            )
        self._engine = engine
        self._sessionmaker = sessionmaker(
            bind=engine, autoflush=False, autocommit=False, future=True
        )
        logger.info("Database engine created for %s", engine.url.render_as_string())

    def dispose(self) -> None:
        if self._engine is not None:
            self._engine.dispose()
            logger.info("Database engine disposed")
        self._engine = None
        self._sessionmaker = None

    def session(self) -> Session:
        if self._sessionmaker is None:
            raise RuntimeError("Database is not connected")
        return self._sessionmaker()


def get_db(request: Request) -> Generator[Session, None, None]:
    db = request.app.state.database.session()
    try:
        yield db
    finally:
        db.close()


def commit_or_duplicate(db: Session, message: str) -> None:
    """Commit the session, turning a unique-constraint violation into a 400.

    Every duplicate pre-check in the services is backed by a unique
    constraint; a concurrent writer that slips past the pre-check ends here.
    """
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        logger.info("Integrity error on commit: %s", e.orig)
        raise DuplicateError(message) from e
