"""Domain port definitions for adapters."""

from __future__ import annotations

from .persistence import (
    CommunityCompanyRepository,
    CommunityRepository,
    CompanyRepository,
    NamedEntityRepository,
    PlanRepository,
    PriceHistoryRepository,
    ProductSegmentRepository,
    Repository,
    SegmentCompanyRepository,
)
from .unit_of_work import (
    CatalogRepositories,
    CatalogUnitOfWork,
    RepositoryCollection,
    UnitOfWork,
)

__all__ = [
    "CatalogRepositories",
    "CatalogUnitOfWork",
    "CommunityCompanyRepository",
    "CommunityRepository",
    "CompanyRepository",
    "NamedEntityRepository",
    "PlanRepository",
    "PriceHistoryRepository",
    "ProductSegmentRepository",
    "Repository",
    "RepositoryCollection",
    "SegmentCompanyRepository",
    "UnitOfWork",
]
