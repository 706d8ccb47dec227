import logging
from contextlib import contextmanager
from typing import Iterator

from fastapi import Request
from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from app.kwanza.core.config import Settings
from app.kwanza.core.db_timing import instrument_engine
from app.kwanza.core.logging import log_json

logger = logging.getLogger(__name__)


def _connect_args(settings: Settings) -> dict:
    if settings.DATABASE_URL.startswith("sqlite"):
        return {"check_same_thread": False, "timeout": settings.DB_COMMAND_TIMEOUT_SEC}
    return {}


class Database:
    """Owns the engine and session factory for one configured store.

    Built by the application factory and shared through ``app.state``;
    nothing in the package keeps a module-level engine.
    """

    def __init__(self, settings: Settings, engine: Engine | None = None):
        self.settings = settings
        self.engine = engine or create_engine(
            settings.DATABASE_URL,
            echo=False,
            future=True,
            pool_pre_ping=True,
            connect_args=_connect_args(settings),
        )
        instrument_engine(self.engine)
        self._session_factory = sessionmaker(
            bind=self.engine,
            autoflush=False,
            autocommit=False,
            expire_on_commit=False,
            future=True,
        )

    def session(self) -> Session:
        return self._session_factory()

    @contextmanager
    def transaction(self) -> Iterator[Session]:
        db = self.session()
        try:
            yield db
            db.commit()
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()

    def test_connection(self) -> bool:
        try:
            with self.engine.connect() as conn:
                conn.execute(text("SELECT 1"))
        except SQLAlchemyError as exc:
            log_json(logger, {"event": "db.connection_failed", "error": exc.__class__.__name__})
            return False
        return True

    def dispose(self) -> None:
        self.engine.dispose()


def get_db(request: Request) -> Iterator[Session]:
    database: Database = request.app.state.database
    db = database.session()
    try:
        yield db
    finally:
        db.close()
