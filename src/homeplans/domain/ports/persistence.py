"""Ports for persisting catalog aggregates and price history."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

from homeplans.domain.model import (
    Community,
    CommunityCompany,
    Company,
    Plan,
    PlanKey,
    PriceHistory,
    ProductSegment,
    SegmentCompany,
)

if TYPE_CHECKING:
    from collections.abc import Collection, Sequence
    from datetime import datetime
    from uuid import UUID


@runtime_checkable
class Repository[TEntity](Protocol):
    """Minimal repository contract for a persistent aggregate store."""

    def add(self, entity: TEntity) -> None: ...


@runtime_checkable
class NamedEntityRepository[TEntity](Repository[TEntity], Protocol):
    """Lookup by id, or by whole name compared case-insensitively."""

    def get(self, entity_id: UUID) -> TEntity | None: ...

    def find_by_name(self, name: str) -> TEntity | None: ...


@runtime_checkable
class CommunityRepository(NamedEntityRepository[Community], Protocol):
    """Repository contract for communities."""

    def list_children(self, parent_id: UUID) -> Sequence[Community]: ...


@runtime_checkable
class CompanyRepository(NamedEntityRepository[Company], Protocol):
    """Repository contract for companies."""


@runtime_checkable
class ProductSegmentRepository(Repository[ProductSegment], Protocol):
    """Repository contract for product segments."""

    def get(self, segment_id: UUID) -> ProductSegment | None: ...

    def find_in_community(self, community_id: UUID, name: str) -> ProductSegment | None: ...

    def list_for_community(
        self, community_id: UUID, *, only_active: bool = False
    ) -> Sequence[ProductSegment]: ...


@runtime_checkable
class CommunityCompanyRepository(Repository[CommunityCompany], Protocol):
    """Repository contract for community alias links."""

    def get_link(self, community_id: UUID, company_id: UUID) -> CommunityCompany | None: ...


@runtime_checkable
class SegmentCompanyRepository(Repository[SegmentCompany], Protocol):
    """Repository contract for segment alias links."""

    def get_link(self, segment_id: UUID, company_id: UUID) -> SegmentCompany | None: ...


@runtime_checkable
class PlanRepository(Repository[Plan], Protocol):
    """Repository contract for plans."""

    def get(self, plan_id: UUID) -> Plan | None: ...

    def find_by_natural_key(self, key: PlanKey) -> Plan | None: ...

    def list_complete_for_community(self, community_id: UUID) -> Sequence[Plan]:
        """Plans with name, price, company and community set, newest ``last_updated`` first."""
        ...


@runtime_checkable
class PriceHistoryRepository(Repository[PriceHistory], Protocol):
    """Append-only store of price-change events. There is no update or delete."""

    def plan_ids_changed_since(
        self, plan_ids: Collection[UUID], since: datetime
    ) -> set[UUID]: ...

    def list_for_plan(self, plan_id: UUID) -> Sequence[PriceHistory]: ...
