"""SQLAlchemy engine and session handling shared by the durable stores."""

from contextlib import contextmanager
from pathlib import Path
from typing import Iterator
import logging

from sqlalchemy import create_engine
from sqlalchemy.engine import make_url
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import declarative_base, sessionmaker, Session
from sqlalchemy.pool import StaticPool

from ..exceptions import StorageUnavailable

logger = logging.getLogger(__name__)

Base = declarative_base()


class Database:
    """Database connection for face rows and trained model blobs.

    Attributes:
        url: SQLAlchemy database URL
    """

    def __init__(self, url: str):
        """Initialize database and create tables.

        Args:
            url: SQLAlchemy database URL, e.g. 'sqlite:///faces.db'

        Raises:
            StorageUnavailable: If the database cannot be opened
        """
        self.url = url
        parsed = make_url(url)

        engine_args = {}
        if parsed.get_backend_name() == 'sqlite':
            engine_args['connect_args'] = {'check_same_thread': False}  # Shared across request threads
            if parsed.database and parsed.database != ':memory:':
                Path(parsed.database).parent.mkdir(parents=True, exist_ok=True)
            else:
                # Single connection, otherwise every thread sees its own empty database
                engine_args['poolclass'] = StaticPool

        try:
            self.engine = create_engine(url, echo=False, **engine_args)
            self.SessionLocal = sessionmaker(bind=self.engine, expire_on_commit=False)

            # Import models so their tables are registered on Base
            from . import face_store, model_store  # noqa: F401
            Base.metadata.create_all(self.engine)
        except SQLAlchemyError as e:
            raise StorageUnavailable(
                f"Cannot open database {parsed.render_as_string(hide_password=True)}: {e}",
                details={'url': parsed.render_as_string(hide_password=True)}
            ) from e

        logger.info(f"Database initialized: {parsed.render_as_string(hide_password=True)}")

    @contextmanager
    def session_scope(self) -> Iterator[Session]:
        """Provide a transactional scope for database operations.

        Usage:
            with database.session_scope() as session:
                session.add(record)
                # Commit happens automatically on success
                # Rollback happens automatically on exception

        Raises:
            StorageUnavailable: If the database fails; the original
                SQLAlchemyError is chained
        """
        session = self.SessionLocal()
        try:
            yield session
            session.commit()
        except SQLAlchemyError as e:
            session.rollback()
            logger.error(f"Database error: {e}")
            raise StorageUnavailable(f"Database error: {e}") from e
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def dispose(self) -> None:
        """Close all pooled connections."""
        self.engine.dispose()

    def __repr__(self) -> str:
        """String representation."""
        return f"Database(url='{make_url(self.url).render_as_string(hide_password=True)}')"
