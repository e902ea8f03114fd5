"""SQLAlchemy-backed units of work for the catalog.

The adapter owns one engine per process. ``startup()`` maps the domain classes,
migrates the schema to head, and binds the session factory; every unit of work then
opens its own session from that factory and closes it on exit.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING, Literal

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from homeplans.adapters.sqlalchemy.mappings import start_mappers
from homeplans.adapters.sqlalchemy.migrations import upgrade_head
from homeplans.adapters.sqlalchemy.repositories import (
    SqlAlchemyCommunityCompanyRepository,
    SqlAlchemyCommunityRepository,
    SqlAlchemyCompanyRepository,
    SqlAlchemyPlanRepository,
    SqlAlchemyPriceHistoryRepository,
    SqlAlchemyProductSegmentRepository,
    SqlAlchemySegmentCompanyRepository,
)
from homeplans.config import get_database_config
from homeplans.domain.ports.unit_of_work import CatalogRepositories, RepositoryCollection

if TYPE_CHECKING:
    from types import TracebackType

    from sqlalchemy.engine import Engine

log = logging.getLogger(__name__)


class StartupError(RuntimeError):
    """Raised when the SQLAlchemy adapter is misused (not started, started twice, ...)."""


@dataclass(slots=True)
class _AdapterState:
    engine: Engine | None = None
    sessions: sessionmaker[Session] | None = None

    def bind(self, engine: Engine) -> None:
        self.engine = engine
        self.sessions = sessionmaker(bind=engine, expire_on_commit=False)

    def reset(self) -> None:
        if self.engine is not None:
            self.engine.dispose()
        self.engine = None
        self.sessions = None

    def require_sessions(self) -> sessionmaker[Session]:
        if self.sessions is None:
            raise StartupError(
                "SQLAlchemy adapter not started; call "
                "homeplans.adapters.sqlalchemy.unit_of_work.startup() first"
            )
        return self.sessions


_STATE = _AdapterState()


def startup(
    *,
    engine: Engine | None = None,
    database_uri: str | None = None,
    force: bool = False,
) -> None:
    """Map the model, migrate to head, and bind the session factory."""

    if _STATE.engine is not None and not force:
        raise StartupError("SQLAlchemy adapter already started; pass force=True to rebind")

    target = engine or create_engine(database_uri or get_database_config().uri, future=True)
    start_mappers()
    upgrade_head(engine=target)
    _STATE.bind(target)
    log.info("SQLAlchemy adapter started on %s", target.url.render_as_string())


def ensure_started() -> None:
    """Start with configured defaults unless the adapter is already running."""

    if not is_started():
        startup()


def configured_engine() -> Engine | None:
    return _STATE.engine


def is_started() -> bool:
    return _STATE.engine is not None


def shutdown() -> None:
    """Dispose the engine and forget it (used by tests and on process exit)."""

    _STATE.reset()


class BaseSqlAlchemyUnitOfWork[TRepositories: RepositoryCollection](ABC):
    """One session per ``with`` block; repositories are rebuilt on every entry.

    Leaving the block closes the session. Uncommitted work is discarded, and an
    exception rolls back and propagates.
    """

    def __init__(self) -> None:
        self._sessions = _STATE.require_sessions()
        self._session: Session | None = None
        self._repositories: TRepositories | None = None

    @abstractmethod
    def _build_repositories(self, session: Session) -> TRepositories: ...

    def __enter__(self) -> BaseSqlAlchemyUnitOfWork[TRepositories]:
        if self._session is not None:
            raise StartupError("Unit of work is already active")
        self._session = self._sessions()
        self._repositories = self._build_repositories(self._session)
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> Literal[False]:
        try:
            if exc_type is not None:
                self.rollback()
        finally:
            self.session.close()
            self._session = None
            self._repositories = None
        return False

    @property
    def session(self) -> Session:
        if self._session is None:
            raise StartupError("Unit of work is not active; use it as a context manager")
        return self._session

    @property
    def repositories(self) -> TRepositories:
        if self._repositories is None:
            raise StartupError("Unit of work is not active; use it as a context manager")
        return self._repositories

    def commit(self) -> None:
        self.session.commit()

    def rollback(self) -> None:
        self.session.rollback()


class SqlAlchemyCatalogUnitOfWork(BaseSqlAlchemyUnitOfWork[CatalogRepositories]):
    """Unit of work for resolution, price tracking, and plan projection."""

    def _build_repositories(self, session: Session) -> CatalogRepositories:
        return CatalogRepositories(
            communities=SqlAlchemyCommunityRepository(session),
            companies=SqlAlchemyCompanyRepository(session),
            segments=SqlAlchemyProductSegmentRepository(session),
            community_links=SqlAlchemyCommunityCompanyRepository(session),
            segment_links=SqlAlchemySegmentCompanyRepository(session),
            plans=SqlAlchemyPlanRepository(session),
            price_history=SqlAlchemyPriceHistoryRepository(session),
        )


if TYPE_CHECKING:
    from homeplans.domain.ports.unit_of_work import CatalogUnitOfWork

    _uow_check: CatalogUnitOfWork = SqlAlchemyCatalogUnitOfWork()
