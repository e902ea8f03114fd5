"""Cross-source entity resolution.

Responsibilities:
- resolve a loose (community, company, segment?) reference to canonical entities,
  by id first and by case-insensitive whole name second
- pick the name each company's source uses for the community (alias links)
- fail as a whole with ``EntityNotFoundError``; never hand back partial identification

Out of scope:
- creating entities for unknown names
- fuzzy or substring matching
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from homeplans.domain.errors import EntityNotFoundError
from homeplans.domain.model import EntityType, parse_identifier

if TYPE_CHECKING:
    from uuid import UUID

    from homeplans.domain.model import Company, Community
    from homeplans.domain.ports.persistence import NamedEntityRepository
    from homeplans.domain.ports.unit_of_work import CatalogRepositories

log = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ResolutionRequest:
    """Identifying fragments supplied by an ingestion job or admin tool.

    Ids are kept as raw strings: a malformed id is treated as absent, never as an error.
    """

    community_id: str | UUID | None = None
    community_name: str | None = None
    company_id: str | UUID | None = None
    company_name: str | None = None
    segment_id: str | UUID | None = None


@dataclass(frozen=True, slots=True)
class ResolvedEntities:
    community_id: UUID
    company_id: UUID
    community_name: str
    company_name: str
    community_name_for_scrape: str
    segment_id: UUID | None = None
    segment_label_for_scrape: str | None = None

    def as_payload(self) -> dict[str, str | None]:
        return {
            "communityId": str(self.community_id),
            "companyId": str(self.company_id),
            "communityName": self.community_name,
            "companyName": self.company_name,
            "communityNameForScrape": self.community_name_for_scrape,
            "segmentLabelForScrape": self.segment_label_for_scrape,
        }


def clean_name(value: str | None) -> str | None:
    if value is None:
        return None
    stripped = value.strip()
    return stripped or None


class EntityResolver:
    """Resolve references against the canonical registry and alias link store."""

    def __init__(self, repositories: CatalogRepositories) -> None:
        self._repositories = repositories

    def resolve(self, request: ResolutionRequest) -> ResolvedEntities:
        repos = self._repositories

        community = self._lookup(
            repos.communities,
            EntityType.COMMUNITY,
            request.community_id,
            request.community_name,
        )
        company = self._lookup(
            repos.companies,
            EntityType.COMPANY,
            request.company_id,
            request.company_name,
        )

        link = repos.community_links.get_link(community.id, company.id)
        name_for_scrape = (
            link.name_for_scrape(community.name) if link is not None else community.name
        )

        segment_id, segment_label = self._resolve_segment(request.segment_id, company)

        log.debug(
            "Resolved community=%s company=%s name_for_scrape=%r segment_label=%r",
            community.id,
            company.id,
            name_for_scrape,
            segment_label,
        )
        return ResolvedEntities(
            community_id=community.id,
            company_id=company.id,
            community_name=community.name,
            company_name=company.name,
            community_name_for_scrape=name_for_scrape,
            segment_id=segment_id,
            segment_label_for_scrape=segment_label,
        )

    def resolve_community(
        self,
        community_id: str | UUID | None = None,
        community_name: str | None = None,
    ) -> Community:
        """Resolve a community alone, with the same id-then-name rules."""
        return self._lookup(
            self._repositories.communities,
            EntityType.COMMUNITY,
            community_id,
            community_name,
        )

    def _lookup[TEntity](
        self,
        repository: NamedEntityRepository[TEntity],
        entity_type: EntityType,
        raw_id: str | UUID | None,
        raw_name: str | None,
    ) -> TEntity:
        entity_id = parse_identifier(raw_id)
        if entity_id is not None:
            found = repository.get(entity_id)
            if found is not None:
                return found
            log.debug("No %s with id %s, falling back to name", entity_type, entity_id)
        elif raw_id is not None:
            log.debug("Ignoring malformed %s id %r", entity_type, raw_id)

        name = clean_name(raw_name)
        if name is not None:
            found = repository.find_by_name(name)
            if found is not None:
                return found

        raise EntityNotFoundError(entity_type, name if name is not None else raw_id)

    def _resolve_segment(
        self,
        raw_segment_id: str | UUID | None,
        company: Company,
    ) -> tuple[UUID | None, str | None]:
        segment_id = parse_identifier(raw_segment_id)
        if segment_id is None:
            if raw_segment_id is not None:
                log.debug("Skipping malformed segment id %r", raw_segment_id)
            return None, None

        segment = self._repositories.segments.get(segment_id)
        if segment is None:
            log.debug("Skipping unknown segment id %s", segment_id)
            return None, None

        link = self._repositories.segment_links.get_link(segment.id, company.id)
        label = link.label_for_scrape(segment.label) if link is not None else segment.label
        return segment.id, label
