"""
Database - the transaction boundary for all storage operations.

Usage:
    db = Database("sqlite:///mocktrade.db")
    db.create_schema()
    with db.transaction() as session:
        AccountRepository(session).add(account)
"""

from collections.abc import Iterator
from contextlib import contextmanager

from loguru import logger
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from mocktrade.core.exceptions.trading import PersistenceFailureError

from .tables import Base


def _is_sqlite_memory(url: str) -> bool:
    return url in ("sqlite://", "sqlite:///:memory:")


class Database:
    """Owns the SQLAlchemy engine and hands out transactional sessions."""

    def __init__(self, url: str = "sqlite:///mocktrade.db", echo: bool = False) -> None:
        self.url = url
        self._engine = self._create_engine(url, echo)
        self._session_factory = sessionmaker(bind=self._engine, expire_on_commit=False)

    @staticmethod
    def _create_engine(url: str, echo: bool) -> Engine:
        if _is_sqlite_memory(url):
            # One shared connection so every thread sees the same in-memory database
            return create_engine(
                url,
                echo=echo,
                connect_args={"check_same_thread": False},
                poolclass=StaticPool,
            )
        return create_engine(url, echo=echo)

    @property
    def engine(self) -> Engine:
        return self._engine

    def create_schema(self) -> None:
        """Create all tables that do not exist yet."""
        Base.metadata.create_all(self._engine)
        logger.debug(f"Schema ready on {self._engine.url}")

    @contextmanager
    def transaction(self) -> Iterator[Session]:
        """Run a unit of work that commits as a whole or not at all.

        Raises:
            PersistenceFailureError: If the storage engine rejects any write;
                the transaction has been rolled back
        """
        session = self._session_factory()
        try:
            yield session
            session.commit()
        except SQLAlchemyError as e:
            session.rollback()
            logger.error(f"Transaction rolled back: {e}")
            raise PersistenceFailureError(f"Storage transaction failed: {e}") from e
        except BaseException:
            session.rollback()
            raise
        finally:
            session.close()

    def dispose(self) -> None:
        self._engine.dispose()
