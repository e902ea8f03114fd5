"""Maintenance operations on the canonical registry and alias link store."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from homeplans.domain.errors import (
    DuplicateEntityError,
    EntityNotFoundError,
    InvalidReferenceError,
)
from homeplans.domain.model import (
    CommunityCompany,
    EntityType,
    KeyType,
    ProductSegment,
    SegmentCompany,
    SegmentRole,
    parse_identifier,
)
from homeplans.domain.resolution import clean_name

if TYPE_CHECKING:
    from collections.abc import Sequence
    from uuid import UUID

    from homeplans.domain.model import Community, Company
    from homeplans.domain.ports.unit_of_work import CatalogRepositories

log = logging.getLogger(__name__)


def require_identifier(value: str | UUID | None, entity_type: EntityType) -> UUID:
    """Parse a required identifier, raising ``InvalidReferenceError`` when malformed."""

    parsed = parse_identifier(value)
    if parsed is None:
        raise InvalidReferenceError(entity_type, value)
    return parsed


def _require_community(repositories: CatalogRepositories, value: str | UUID) -> Community:
    community_id = require_identifier(value, EntityType.COMMUNITY)
    community = repositories.communities.get(community_id)
    if community is None:
        raise EntityNotFoundError(EntityType.COMMUNITY, community_id)
    return community


def _require_company(repositories: CatalogRepositories, value: str | UUID) -> Company:
    company_id = require_identifier(value, EntityType.COMPANY)
    company = repositories.companies.get(company_id)
    if company is None:
        raise EntityNotFoundError(EntityType.COMPANY, company_id)
    return company


def assign_parent_community(
    repositories: CatalogRepositories,
    community_id: str | UUID,
    parent_id: str | UUID | None,
) -> Community:
    """Set (or with ``None``/blank, clear) a community's parent."""

    community = _require_community(repositories, community_id)
    if parent_id is None or (isinstance(parent_id, str) and not parent_id.strip()):
        community.assign_parent(None)
        return community

    parent = _require_community(repositories, parent_id)
    # TODO: reject longer cycles (A -> B -> A) once hierarchy rules are confirmed.
    community.assign_parent(parent)
    log.info("Community %s now has parent %s", community.id, parent.id)
    return community


def list_child_communities(
    repositories: CatalogRepositories,
    parent_id: str | UUID,
) -> Sequence[Community]:
    parent = _require_community(repositories, parent_id)
    return repositories.communities.list_children(parent.id)


def link_company_to_community(
    repositories: CatalogRepositories,
    community_id: str | UUID,
    company_id: str | UUID,
    name_used_by_company: str | None = None,
) -> CommunityCompany:
    """Upsert the alias link; a blank alias clears any stored override."""

    community = _require_community(repositories, community_id)
    company = _require_company(repositories, company_id)

    link = repositories.community_links.get_link(community.id, company.id)
    if link is None:
        link = CommunityCompany(community_id=community.id, company_id=company.id)
        repositories.community_links.add(link)
    link.set_alias(name_used_by_company)
    return link


def create_product_segment(  # noqa: PLR0913
    repositories: CatalogRepositories,
    community_id: str | UUID,
    name: str,
    label: str,
    *,
    description: str | None = None,
    is_active: bool = True,
    display_order: int = 0,
) -> ProductSegment:
    community = _require_community(repositories, community_id)
    clean_segment_name = clean_name(name)
    clean_label = clean_name(label)
    if clean_segment_name is None or clean_label is None:
        raise ValueError("Segment name and label are required")
    if repositories.segments.find_in_community(community.id, clean_segment_name) is not None:
        raise DuplicateEntityError(
            f"A segment named {clean_segment_name!r} already exists in this community"
        )

    segment = ProductSegment(
        community_id=community.id,
        name=clean_segment_name,
        label=clean_label,
        description=description,
        is_active=is_active,
        display_order=display_order,
    )
    repositories.segments.add(segment)
    return segment


def list_product_segments(
    repositories: CatalogRepositories,
    community_id: str | UUID,
    *,
    only_active: bool = False,
) -> Sequence[ProductSegment]:
    community = _require_community(repositories, community_id)
    return repositories.segments.list_for_community(community.id, only_active=only_active)


def link_company_to_segment(  # noqa: PLR0913
    repositories: CatalogRepositories,
    segment_id: str | UUID,
    company_id: str | UUID,
    *,
    label_as_company: str | None = None,
    role: SegmentRole = SegmentRole.COMPETITOR,
    key_type: KeyType = KeyType.PLAN_NAMES,
    values: Sequence[str] = (),
    plan_names: Sequence[str] | None = None,
    source_community_id: str | UUID | None = None,
    notes: str | None = None,
) -> SegmentCompany:
    """Upsert a company's configuration for one segment."""

    parsed_segment_id = require_identifier(segment_id, EntityType.PRODUCT_SEGMENT)
    segment = repositories.segments.get(parsed_segment_id)
    if segment is None:
        raise EntityNotFoundError(EntityType.PRODUCT_SEGMENT, parsed_segment_id)
    company = _require_company(repositories, company_id)
    source_community = (
        _require_community(repositories, source_community_id)
        if source_community_id is not None
        else None
    )

    link = repositories.segment_links.get_link(segment.id, company.id)
    if link is None:
        link = SegmentCompany(segment_id=segment.id, company_id=company.id)
        repositories.segment_links.add(link)
    link.set_alias(label_as_company)
    link.role = role
    link.key_type = key_type
    link.values = [value.strip() for value in values if value.strip()]
    link.plan_names = list(plan_names) if plan_names is not None else None
    link.source_community_id = source_community.id if source_community else None
    link.notes = notes
    return link
