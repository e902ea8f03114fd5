"""Canonical registry entities: communities, companies, product segments."""

from __future__ import annotations

import unicodedata
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, ClassVar

from homeplans.domain.errors import CommunityHierarchyError
from homeplans.domain.model.entity import Entity
from homeplans.domain.model.enums import EntityType

if TYPE_CHECKING:
    from datetime import datetime
    from uuid import UUID


def normalize_name(value: str) -> str:
    """Fold a registry name for case-insensitive whole-name comparison.

    NFKC first so composed and decomposed spellings agree, then a full Unicode
    casefold ("Église" and "ÉGLISE" share a key).
    """

    return unicodedata.normalize("NFKC", value).casefold()


@dataclass(eq=False, kw_only=True)
class Community(Entity):
    """Canonical identity of a physical development."""

    ENTITY_TYPE: ClassVar[EntityType] = EntityType.COMMUNITY

    name: str
    # lookup key derived from ``name``; refreshed by the persistence layer on flush
    name_key: str = field(default="", init=False, repr=False)
    slug: str | None = None
    description: str | None = None
    location: str | None = None
    city: str | None = None
    state: str | None = None
    parent_id: UUID | None = None

    # denormalized summaries, not authoritative
    total_plans: int = 0
    total_quick_move_ins: int = 0

    created_at: datetime | None = None
    updated_at: datetime | None = None

    def assign_parent(self, parent: Community | None) -> None:
        """Set or clear the parent community.

        Only direct self-parenting is rejected; longer cycles are not detected.
        """
        if parent is None:
            self.parent_id = None
            return
        if parent.id == self.id:
            raise CommunityHierarchyError("A community cannot be its own parent")
        self.parent_id = parent.id


@dataclass(eq=False, kw_only=True)
class Company(Entity):
    """Canonical identity of a builder."""

    ENTITY_TYPE: ClassVar[EntityType] = EntityType.COMPANY

    name: str
    name_key: str = field(default="", init=False, repr=False)
    slug: str | None = None
    description: str | None = None
    website: str | None = None
    headquarters: str | None = None
    founded: str | None = None

    # denormalized summaries, not authoritative
    total_communities: int = 0
    total_plans: int = 0

    created_at: datetime | None = None
    updated_at: datetime | None = None


@dataclass(eq=False, kw_only=True)
class ProductSegment(Entity):
    """A named product line (e.g. "40' Lots") within one community."""

    ENTITY_TYPE: ClassVar[EntityType] = EntityType.PRODUCT_SEGMENT

    community_id: UUID
    name: str
    label: str
    description: str | None = None
    is_active: bool = True
    display_order: int = 0
