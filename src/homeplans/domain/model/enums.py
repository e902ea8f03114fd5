"""Domain enums (pure, dependency-light)."""

from __future__ import annotations

from enum import StrEnum


class EntityType(StrEnum):
    """Discriminator used in error reporting and typed references."""

    COMMUNITY = "community"
    COMPANY = "company"
    PRODUCT_SEGMENT = "product_segment"

    # Alias links:
    COMMUNITY_COMPANY = "community_company"
    SEGMENT_COMPANY = "segment_company"

    PLAN = "plan"
    PRICE_HISTORY = "price_history"


class PlanType(StrEnum):
    """Listing kind: a buildable floor plan or a quick move-in spec home."""

    PLAN = "plan"
    NOW = "now"


class SegmentRole(StrEnum):
    PRIMARY = "primary"
    COMPETITOR = "competitor"
    CROSS_COMMUNITY_COMP = "cross_community_comp"


class KeyType(StrEnum):
    """How a segment link selects plans: by explicit plan names or by series name."""

    PLAN_NAMES = "Plan_Names"
    SERIES_NAME = "Series_Name"
