"""Alias links between registry entities and the companies that name them."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, ClassVar

from homeplans.domain.model.entity import Entity
from homeplans.domain.model.enums import EntityType, KeyType, SegmentRole

if TYPE_CHECKING:
    from datetime import datetime
    from uuid import UUID


def _clean_alias(value: str | None) -> str | None:
    if value is None:
        return None
    stripped = value.strip()
    return stripped or None


@dataclass(eq=False, kw_only=True)
class CommunityCompany(Entity):
    """Links a company to a community.

    ``name_used_by_company`` is the name this company's own material uses for the
    community (e.g. "Elevon at Lavon" vs. canonical "Elevon").
    """

    ENTITY_TYPE: ClassVar[EntityType] = EntityType.COMMUNITY_COMPANY

    community_id: UUID
    company_id: UUID
    name_used_by_company: str | None = None

    created_at: datetime | None = None
    updated_at: datetime | None = None

    def name_for_scrape(self, canonical_name: str) -> str:
        return _clean_alias(self.name_used_by_company) or canonical_name

    def set_alias(self, alias: str | None) -> None:
        self.name_used_by_company = _clean_alias(alias)


@dataclass(eq=False, kw_only=True)
class SegmentCompany(Entity):
    """Per-company configuration of a product segment."""

    ENTITY_TYPE: ClassVar[EntityType] = EntityType.SEGMENT_COMPANY

    segment_id: UUID
    company_id: UUID
    segment_label_as_company: str | None = None
    role: SegmentRole = SegmentRole.COMPETITOR
    source_community_id: UUID | None = None
    notes: str | None = None
    key_type: KeyType = KeyType.PLAN_NAMES
    values: list[str] = field(default_factory=list[str])
    plan_names: list[str] | None = None

    created_at: datetime | None = None
    updated_at: datetime | None = None

    def label_for_scrape(self, segment_label: str) -> str:
        return _clean_alias(self.segment_label_as_company) or segment_label

    def set_alias(self, alias: str | None) -> None:
        self.segment_label_as_company = _clean_alias(alias)
