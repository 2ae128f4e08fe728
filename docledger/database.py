"""Database configuration and session management.

The storage handle is an explicit ``Database`` object rather than a
module-level engine: the application factory constructs one, the lifespan
opens it on startup and closes it on shutdown, and tests build their own
against a throwaway SQLite file.
"""

import logging
from contextlib import contextmanager
from typing import Iterator, Optional

from fastapi import Request
from sqlalchemy import Engine, create_engine, event
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from .exceptions import DatabaseError, LedgerException

logger = logging.getLogger(__name__)

# Create base class for models
Base = declarative_base()


class Database:
    """Owns the engine and session factory for one database URL.

    Args:
        url: SQLAlchemy database URL.
        pool_size / max_overflow / pool_timeout / pool_recycle: PostgreSQL
            pool tuning, ignored for SQLite.
    """

    def __init__(
        self,
        url: str,
        pool_size: int = 5,
        max_overflow: int = 10,
        pool_timeout: int = 30,
        pool_recycle: int = 1800,
    ):
        self.url = url
        self._pool_options = {
            "pool_size": pool_size,
            "max_overflow": max_overflow,
            "pool_timeout": pool_timeout,
            "pool_recycle": pool_recycle,
        }
        self._engine: Optional[Engine] = None
        self._session_factory: Optional[sessionmaker] = None

    @property
    def is_postgresql(self) -> bool:
        return self.url.startswith("postgresql")

    @property
    def engine(self) -> Engine:
        if self._engine is None:
            raise DatabaseError("Database is not open")
        return self._engine

    def open(self) -> "Database":
        """Create the engine and session factory. Idempotent."""
        if self._engine is not None:
            return self

        if self.url.startswith("sqlite"):
            engine = create_engine(self.url, connect_args={"check_same_thread": False})

            # SQLite defaults foreign_keys to OFF; enable on every connection.
            @event.listens_for(engine, "connect")
            def _set_sqlite_pragma(dbapi_connection, connection_record):
                cursor = dbapi_connection.cursor()
                cursor.execute("PRAGMA foreign_keys=ON")
                cursor.close()
        else:
            engine = create_engine(
                self.url,
                pool_pre_ping=True,
                **self._pool_options,
            )

        self._engine = engine
        self._session_factory = sessionmaker(autocommit=False, autoflush=False, bind=engine)
        logger.info("Database opened", extra={"dialect": engine.dialect.name})
        return self

    def close(self) -> None:
        """Dispose of the connection pool. Safe to call twice."""
        if self._engine is None:
            return
        self._engine.dispose()
        self._engine = None
        self._session_factory = None
        logger.info("Database closed")

    def create_schema(self) -> None:
        """Create all tables that do not exist yet."""
        from . import models  # noqa: F401  (registers tables on Base.metadata)

        Base.metadata.create_all(bind=self.engine)

    def session(self) -> Session:
        if self._session_factory is None:
            raise DatabaseError("Database is not open")
        return self._session_factory()

    @contextmanager
    def session_scope(self) -> Iterator[Session]:
        """Session for scripts and tests: commits on success, rolls back on error."""
        session = self.session()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()


@contextmanager
def transaction(db: Session) -> Iterator[Session]:
    """Run one unit of work: commit on success, roll back on any failure.

    Domain exceptions propagate unchanged. Any other SQLAlchemy failure is
    wrapped into ``DatabaseError`` so callers can tell an invalid request from
    an unavailable store.
    """
    try:
        yield db
        db.commit()
    except LedgerException:
        db.rollback()
        raise
    except SQLAlchemyError as e:
        db.rollback()
        logger.error("Database operation failed: %s", e)
        raise DatabaseError("Database operation failed", original_error=e) from e
    except Exception:
        db.rollback()
        raise


def get_db(request: Request) -> Iterator[Session]:
    """Dependency for FastAPI routes to get a database session.

    Rolls back the transaction on unhandled exceptions so that the
    connection is returned to the pool in a clean state.
    """
    database: Database = request.app.state.database
    db = database.session()
    try:
        yield db
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()
