"""Public domain model surface."""

from __future__ import annotations

from homeplans.domain.model.associations import CommunityCompany, SegmentCompany
from homeplans.domain.model.entity import Entity, new_id, parse_identifier
from homeplans.domain.model.enums import EntityType, KeyType, PlanType, SegmentRole
from homeplans.domain.model.plans import (
    CommunityRef,
    CompanyRef,
    Plan,
    PlanKey,
    PriceHistory,
    SegmentRef,
)
from homeplans.domain.model.registry import (
    Community,
    Company,
    ProductSegment,
    normalize_name,
)

__all__ = [  # noqa: RUF022
    # base
    "Entity",
    "new_id",
    "parse_identifier",
    # enums
    "EntityType",
    "KeyType",
    "PlanType",
    "SegmentRole",
    # registry
    "Community",
    "Company",
    "ProductSegment",
    "normalize_name",
    # alias links
    "CommunityCompany",
    "SegmentCompany",
    # plans
    "CommunityRef",
    "CompanyRef",
    "Plan",
    "PlanKey",
    "PriceHistory",
    "SegmentRef",
]
