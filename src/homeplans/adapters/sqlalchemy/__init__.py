"""SQLAlchemy adapter package for homeplans."""

from __future__ import annotations

from .mappings import (
    mapper_registry,
    start_mappers,
)
from .repositories import (
    SqlAlchemyCommunityCompanyRepository,
    SqlAlchemyCommunityRepository,
    SqlAlchemyCompanyRepository,
    SqlAlchemyPlanRepository,
    SqlAlchemyPriceHistoryRepository,
    SqlAlchemyProductSegmentRepository,
    SqlAlchemySegmentCompanyRepository,
)
from .unit_of_work import (
    SqlAlchemyCatalogUnitOfWork,
    StartupError,
    shutdown,
    startup,
)

__all__ = [
    "SqlAlchemyCatalogUnitOfWork",
    "SqlAlchemyCommunityCompanyRepository",
    "SqlAlchemyCommunityRepository",
    "SqlAlchemyCompanyRepository",
    "SqlAlchemyPlanRepository",
    "SqlAlchemyPriceHistoryRepository",
    "SqlAlchemyProductSegmentRepository",
    "SqlAlchemySegmentCompanyRepository",
    "StartupError",
    "mapper_registry",
    "shutdown",
    "start_mappers",
    "startup",
]
