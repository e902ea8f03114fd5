"""Application orchestration entry points."""

from __future__ import annotations

from collections.abc import Callable
from logging import getLogger
from typing import TYPE_CHECKING

from homeplans.adapters.sqlalchemy.unit_of_work import SqlAlchemyCatalogUnitOfWork, ensure_started
from homeplans.config import get_ledger_config
from homeplans.domain.catalog import (
    assign_parent_community,
    create_product_segment,
    link_company_to_community,
    link_company_to_segment,
    list_child_communities,
    list_product_segments,
    require_identifier,
)
from homeplans.domain.errors import EntityNotFoundError
from homeplans.domain.model import EntityType, KeyType, SegmentRole
from homeplans.domain.plan_ingest import PlanIngestResult, ingest_plan_observations
from homeplans.domain.plan_projection import PlanProjector, PlanView
from homeplans.domain.ports.unit_of_work import CatalogUnitOfWork
from homeplans.domain.price_ledger import PriceLedger
from homeplans.domain.resolution import EntityResolver, ResolutionRequest, ResolvedEntities
from homeplans.domain.time_windows import Clock, utcnow

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence
    from datetime import timedelta
    from uuid import UUID

    from homeplans.domain.model import (
        Community,
        CommunityCompany,
        PriceHistory,
        ProductSegment,
        SegmentCompany,
    )
    from homeplans.domain.plan_ingest import PlanObservation

UnitOfWorkFactory = Callable[[], CatalogUnitOfWork]


log = getLogger(__name__)


def _unit_of_work_factory(factory: UnitOfWorkFactory | None) -> UnitOfWorkFactory:
    if factory is not None:
        return factory
    ensure_started()
    return SqlAlchemyCatalogUnitOfWork


def identify_for_scrape(
    request: ResolutionRequest,
    *,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> ResolvedEntities:
    """Resolve canonical ids and the names a scraper should search for."""

    with _unit_of_work_factory(unit_of_work_factory)() as uow:
        return EntityResolver(uow.repositories).resolve(request)


def project_community_plans(
    community_id: str | UUID,
    *,
    window: timedelta | None = None,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
    clock: Clock = utcnow,
) -> list[PlanView]:
    """Plans of one community with their price-changed-recently flags.

    ``window`` defaults to the configured price change window.
    """

    effective_window = window if window is not None else get_ledger_config().price_change_window
    with _unit_of_work_factory(unit_of_work_factory)() as uow:
        repositories = uow.repositories
        projector = PlanProjector(
            repositories.communities,
            repositories.plans,
            PriceLedger(repositories.price_history, clock=clock),
        )
        views = projector.project_for_community(community_id, effective_window)

    log.debug("Projected %s plans for community %s", len(views), community_id)
    return views


def ingest_plans(
    observations: Iterable[PlanObservation],
    *,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
    clock: Clock = utcnow,
) -> PlanIngestResult:
    """Persist a batch of plan observations in one unit of work."""

    effective_uow = _unit_of_work_factory(unit_of_work_factory)
    log.info("Starting plan ingest")
    return ingest_plan_observations(
        observations,
        unit_of_work_factory=effective_uow,
        clock=clock,
    )


def link_community_alias(
    community_id: str | UUID,
    company_id: str | UUID,
    name_used_by_company: str | None,
    *,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> CommunityCompany:
    """Record the name ``company_id`` uses for ``community_id``; blank clears it."""

    with _unit_of_work_factory(unit_of_work_factory)() as uow:
        link = link_company_to_community(
            uow.repositories, community_id, company_id, name_used_by_company
        )
        uow.commit()

    log.info(
        "Alias for community %s / company %s set to %r",
        link.community_id,
        link.company_id,
        link.name_used_by_company,
    )
    return link


def assign_community_parent(
    community_id: str | UUID,
    parent_id: str | UUID | None,
    *,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> Community:
    with _unit_of_work_factory(unit_of_work_factory)() as uow:
        community = assign_parent_community(uow.repositories, community_id, parent_id)
        uow.commit()
    return community


def plan_price_history(
    plan_id: str | UUID,
    *,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> Sequence[PriceHistory]:
    """Price-change events for one plan, oldest first."""

    parsed_id = require_identifier(plan_id, EntityType.PLAN)
    with _unit_of_work_factory(unit_of_work_factory)() as uow:
        repositories = uow.repositories
        if repositories.plans.get(parsed_id) is None:
            raise EntityNotFoundError(EntityType.PLAN, parsed_id)
        return list(PriceLedger(repositories.price_history).history(parsed_id))


def community_children(
    community_id: str | UUID,
    *,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> list[Community]:
    with _unit_of_work_factory(unit_of_work_factory)() as uow:
        return list(list_child_communities(uow.repositories, community_id))


def create_segment(  # noqa: PLR0913
    community_id: str | UUID,
    name: str,
    label: str,
    *,
    description: str | None = None,
    is_active: bool = True,
    display_order: int = 0,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> ProductSegment:
    """Add a product segment to a community; names are unique per community."""

    with _unit_of_work_factory(unit_of_work_factory)() as uow:
        segment = create_product_segment(
            uow.repositories,
            community_id,
            name,
            label,
            description=description,
            is_active=is_active,
            display_order=display_order,
        )
        uow.commit()

    log.info("Created segment %r in community %s", segment.name, segment.community_id)
    return segment


def community_segments(
    community_id: str | UUID,
    *,
    only_active: bool = False,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> list[ProductSegment]:
    """Segments of one community in display order."""

    with _unit_of_work_factory(unit_of_work_factory)() as uow:
        return list(list_product_segments(uow.repositories, community_id, only_active=only_active))


def link_segment_alias(  # noqa: PLR0913
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
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> SegmentCompany:
    """Store how ``company_id`` labels and selects plans for ``segment_id``.

    ``label_as_company`` overrides the segment label handed to scrapers; a blank
    value clears the override.
    """

    with _unit_of_work_factory(unit_of_work_factory)() as uow:
        link = link_company_to_segment(
            uow.repositories,
            segment_id,
            company_id,
            label_as_company=label_as_company,
            role=role,
            key_type=key_type,
            values=values,
            plan_names=plan_names,
            source_community_id=source_community_id,
            notes=notes,
        )
        uow.commit()

    log.info(
        "Segment %s / company %s configured as %s with label %r",
        link.segment_id,
        link.company_id,
        link.role,
        link.segment_label_as_company,
    )
    return link
