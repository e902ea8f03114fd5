"""Application service for persisting plan observations from ingestion jobs."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from homeplans.domain.errors import EntityNotFoundError
from homeplans.domain.model import EntityType, Plan, PlanKey, PlanType
from homeplans.domain.price_ledger import PriceLedger
from homeplans.domain.resolution import EntityResolver, ResolutionRequest, clean_name
from homeplans.domain.time_windows import Clock, utcnow

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable
    from datetime import datetime
    from uuid import UUID

    from homeplans.domain.ports.unit_of_work import CatalogRepositories, CatalogUnitOfWork
    from homeplans.domain.resolution import ResolvedEntities

log = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class PlanObservation:
    """One plan as seen by a scraper, manual entry, or AI extraction step."""

    plan_name: str | None
    price: float | None
    community_id: str | UUID | None = None
    community_name: str | None = None
    company_id: str | UUID | None = None
    company_name: str | None = None
    type: PlanType = PlanType.PLAN
    sqft: int | None = None
    stories: str | None = None
    price_per_sqft: float | None = None
    beds: str | None = None
    baths: str | None = None
    address: str | None = None
    design_number: str | None = None
    segment_id: str | UUID | None = None
    observed_at: datetime | None = None

    @property
    def has_references(self) -> bool:
        has_community = self.community_id is not None or clean_name(self.community_name)
        has_company = self.company_id is not None or clean_name(self.company_name)
        return bool(has_community and has_company)


@dataclass(slots=True)
class PlanIngestResult:
    """Outcome of a plan ingest batch."""

    created: int = 0
    updated: int = 0
    price_changes: int = 0
    skipped: int = 0
    unresolved: int = 0


def ingest_plan_observations(
    observations: Iterable[PlanObservation],
    *,
    unit_of_work_factory: Callable[[], CatalogUnitOfWork],
    clock: Clock = utcnow,
) -> PlanIngestResult:
    """Upsert plans by natural key, recording price history before price updates."""

    result = PlanIngestResult()
    with unit_of_work_factory() as uow:
        repositories = uow.repositories
        resolver = EntityResolver(repositories)
        ledger = PriceLedger(repositories.price_history, clock=clock)
        for observation in observations:
            _ingest_one(observation, repositories, resolver, ledger, result, clock)
        uow.commit()

    log.info(
        "Plan ingest finished: created=%s, updated=%s, price_changes=%s, skipped=%s, "
        "unresolved=%s",
        result.created,
        result.updated,
        result.price_changes,
        result.skipped,
        result.unresolved,
    )
    return result


def _ingest_one(
    observation: PlanObservation,
    repositories: CatalogRepositories,
    resolver: EntityResolver,
    ledger: PriceLedger,
    result: PlanIngestResult,
    clock: Clock,
) -> None:
    plan_name = clean_name(observation.plan_name)
    if plan_name is None or observation.price is None or not observation.has_references:
        result.skipped += 1
        return

    try:
        resolved = resolver.resolve(
            ResolutionRequest(
                community_id=observation.community_id,
                community_name=observation.community_name,
                company_id=observation.company_id,
                company_name=observation.company_name,
                segment_id=observation.segment_id,
            )
        )
    except EntityNotFoundError as exc:
        log.warning("Skipping plan %r: %s", plan_name, exc)
        result.unresolved += 1
        return

    observed_at = observation.observed_at or clock()
    key = PlanKey(plan_name, resolved.company_name, resolved.community_name, observation.type)
    plan = repositories.plans.find_by_natural_key(key)
    if plan is None:
        plan = Plan(plan_name=plan_name, type=observation.type)
        ledger.observe_price(plan, observation.price, at=observed_at)
        _apply_details(plan, observation)
        _apply_snapshots(plan, resolved, repositories)
        repositories.plans.add(plan)
        result.created += 1
        return

    if ledger.observe_price(plan, observation.price, at=observed_at):
        result.price_changes += 1
    _apply_details(plan, observation)
    _apply_snapshots(plan, resolved, repositories)
    result.updated += 1


def _apply_details(plan: Plan, observation: PlanObservation) -> None:
    if observation.sqft is not None:
        plan.sqft = observation.sqft
    if observation.stories is not None:
        plan.stories = observation.stories
    if observation.price_per_sqft is not None:
        plan.price_per_sqft = observation.price_per_sqft
    if observation.beds is not None:
        plan.beds = observation.beds
    if observation.baths is not None:
        plan.baths = observation.baths
    if observation.address is not None:
        plan.address = observation.address
    if observation.design_number is not None:
        plan.design_number = observation.design_number


def _apply_snapshots(
    plan: Plan,
    resolved: ResolvedEntities,
    repositories: CatalogRepositories,
) -> None:
    community = repositories.communities.get(resolved.community_id)
    if community is None:
        raise EntityNotFoundError(EntityType.COMMUNITY, resolved.community_id)
    company = repositories.companies.get(resolved.company_id)
    if company is None:
        raise EntityNotFoundError(EntityType.COMPANY, resolved.company_id)
    plan.snapshot_community(community)
    plan.snapshot_company(company)
    if resolved.segment_id is not None:
        plan.snapshot_segment(repositories.segments.get(resolved.segment_id))
