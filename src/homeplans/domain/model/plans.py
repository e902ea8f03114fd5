"""Plan listings and their append-only price history."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, ClassVar, NamedTuple

from homeplans.domain.model.entity import Entity
from homeplans.domain.model.enums import EntityType, PlanType

if TYPE_CHECKING:
    from datetime import datetime
    from uuid import UUID

    from homeplans.domain.model.registry import Community, Company, ProductSegment


@dataclass(frozen=True, slots=True)
class CompanyRef:
    id: UUID
    name: str

    def as_payload(self) -> dict[str, str]:
        return {"_id": str(self.id), "name": self.name}


@dataclass(frozen=True, slots=True)
class CommunityRef:
    id: UUID
    name: str
    location: str | None = None

    def as_payload(self) -> dict[str, str | None]:
        return {"_id": str(self.id), "name": self.name, "location": self.location}


@dataclass(frozen=True, slots=True)
class SegmentRef:
    id: UUID
    name: str
    label: str

    def as_payload(self) -> dict[str, str]:
        return {"_id": str(self.id), "name": self.name, "label": self.label}


class PlanKey(NamedTuple):
    """Natural key: the upstream source identifies plans by names, not database ids."""

    plan_name: str
    company_name: str
    community_name: str
    type: PlanType


@dataclass(eq=False, kw_only=True)
class Plan(Entity):
    """A floor plan or spec-home listing.

    Company, community and segment are embedded as name snapshots taken at write
    time, so a plan keeps its identity when the canonical entity is renamed later.
    Display fields are optional at the storage level; incomplete rows are never
    projected.
    """

    ENTITY_TYPE: ClassVar[EntityType] = EntityType.PLAN

    plan_name: str | None = None
    price: float | None = None
    type: PlanType = PlanType.PLAN

    sqft: int | None = None
    stories: str | None = None
    price_per_sqft: float | None = None
    beds: str | None = None
    baths: str | None = None
    address: str | None = None
    design_number: str | None = None

    company_id: UUID | None = None
    company_name: str | None = None
    community_id: UUID | None = None
    community_name: str | None = None
    community_location: str | None = None
    segment_id: UUID | None = None
    segment_name: str | None = None
    segment_label: str | None = None

    last_updated: datetime | None = None

    @property
    def company(self) -> CompanyRef | None:
        if self.company_id is None or self.company_name is None:
            return None
        return CompanyRef(id=self.company_id, name=self.company_name)

    @property
    def community(self) -> CommunityRef | None:
        if self.community_id is None or self.community_name is None:
            return None
        return CommunityRef(
            id=self.community_id,
            name=self.community_name,
            location=self.community_location,
        )

    @property
    def segment(self) -> SegmentRef | None:
        if self.segment_id is None or self.segment_name is None or self.segment_label is None:
            return None
        return SegmentRef(id=self.segment_id, name=self.segment_name, label=self.segment_label)

    @property
    def is_complete(self) -> bool:
        return (
            self.plan_name is not None
            and self.price is not None
            and self.company_name is not None
            and self.community_name is not None
        )

    @property
    def natural_key(self) -> PlanKey | None:
        if self.plan_name is None or self.company_name is None or self.community_name is None:
            return None
        return PlanKey(self.plan_name, self.company_name, self.community_name, self.type)

    def snapshot_company(self, company: Company) -> None:
        self.company_id = company.id
        self.company_name = company.name

    def snapshot_community(self, community: Community) -> None:
        self.community_id = community.id
        self.community_name = community.name
        self.community_location = community.location

    def snapshot_segment(self, segment: ProductSegment | None) -> None:
        if segment is None:
            self.segment_id = None
            self.segment_name = None
            self.segment_label = None
            return
        self.segment_id = segment.id
        self.segment_name = segment.name
        self.segment_label = segment.label


@dataclass(eq=False, kw_only=True)
class PriceHistory(Entity):
    """One observed price change. Append-only: never updated or deleted."""

    ENTITY_TYPE: ClassVar[EntityType] = EntityType.PRICE_HISTORY

    plan_id: UUID
    old_price: float
    new_price: float
    changed_at: datetime
