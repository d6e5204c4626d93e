"""Database access object for the expense tracker backend."""
from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator
from contextlib import contextmanager
from types import TracebackType

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from .config import DEFAULT_CATEGORIES, Settings
from .errors import StorageError

LOG = logging.getLogger(__name__)

Base = declarative_base()


def _build_engine(url: str, echo: bool) -> Engine:
    parsed = make_url(url)
    kwargs: dict[str, object] = {"echo": echo, "future": True}
    if parsed.get_backend_name() == "sqlite":
        kwargs["connect_args"] = {"check_same_thread": False}
        if parsed.database in (None, "", ":memory:"):
            # One shared connection, otherwise every session sees an empty database.
            kwargs["poolclass"] = StaticPool
    return create_engine(url, **kwargs)


class Database:
    """Owns the engine and hands out transactional sessions.

    The object is constructed explicitly and passed to whoever needs it.
    :meth:`open` creates the schema and seeds the category lookup table,
    :meth:`close` releases every pooled connection. It can also be used as a
    context manager.
    """

    def __init__(
        self,
        url: str,
        *,
        default_categories: Iterable[str] = DEFAULT_CATEGORIES,
        seed_samples: bool = False,
        echo: bool = False,
    ) -> None:
        self.url = url
        self.default_categories = tuple(default_categories)
        self.seed_samples = seed_samples
        self._echo = echo
        self._engine: Engine | None = None
        self._sessionmaker: sessionmaker[Session] | None = None

    @classmethod
    def from_settings(cls, settings: Settings) -> "Database":
        return cls(
            settings.database_url,
            default_categories=settings.default_categories,
            seed_samples=settings.seed_samples,
        )

    @property
    def is_open(self) -> bool:
        return self._engine is not None

    @property
    def engine(self) -> Engine:
        if self._engine is None:
            raise StorageError("Database is not open")
        return self._engine

    def open(self) -> "Database":
        """Connect, create missing tables and seed defaults into empty tables."""

        if self._engine is not None:
            return self
        from . import crud, models  # noqa: F401  # register models on the metadata

        engine = _build_engine(self.url, self._echo)
        try:
            Base.metadata.create_all(bind=engine)
        except SQLAlchemyError as exc:
            engine.dispose()
            raise StorageError(str(exc)) from exc
        self._engine = engine
        self._sessionmaker = sessionmaker(bind=engine, autocommit=False, autoflush=False, future=True)
        LOG.info("Opened expense store at %s", make_url(self.url).render_as_string(hide_password=True))

        with self.session_scope() as session:
            inserted = crud.seed_categories(session, self.default_categories)
            if inserted:
                LOG.info("Inserted %d default categories", inserted)
            if self.seed_samples:
                samples = crud.seed_sample_expenses(session)
                if samples:
                    LOG.info("Inserted %d sample expenses", samples)
        return self

    def close(self) -> None:
        if self._engine is None:
            return
        self._engine.dispose()
        self._engine = None
        self._sessionmaker = None
        LOG.info("Closed expense store")

    def __enter__(self) -> "Database":
        return self.open()

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        self.close()

    @contextmanager
    def session_scope(self) -> Iterator[Session]:
        """Provide a transactional scope around a series of operations.

        Query failures are rolled back and re-raised as :class:`StorageError`.
        """

        if self._sessionmaker is None:
            raise StorageError("Database is not open")
        session = self._sessionmaker()
        try:
            yield session
            session.commit()
        except SQLAlchemyError as exc:
            session.rollback()
            raise StorageError(str(exc)) from exc
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()
