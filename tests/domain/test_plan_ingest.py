from __future__ import annotations

from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING, cast

import pytest

from homeplans.domain.model import CommunityCompany, PlanType, ProductSegment, SegmentRef
from homeplans.domain.plan_ingest import PlanObservation, ingest_plan_observations
from tests.helpers.catalog import (
    FakeCatalogUnitOfWork,
    FakePlanRepository,
    FakePriceHistoryRepository,
    FixedClock,
    add_community,
    add_company,
)

if TYPE_CHECKING:
    from homeplans.domain.model import Community, Company

NOW = datetime(2025, 6, 1, 12, 0, tzinfo=UTC)


@pytest.fixture
def uow() -> FakeCatalogUnitOfWork:
    return FakeCatalogUnitOfWork()


@pytest.fixture
def catalog(uow: FakeCatalogUnitOfWork) -> tuple[Community, Company]:
    return (
        add_community(uow.repositories, "Elevon", location="Lavon, TX"),
        add_company(uow.repositories, "BuilderCo"),
    )


def _plans(uow: FakeCatalogUnitOfWork) -> FakePlanRepository:
    return cast("FakePlanRepository", uow.repositories.plans)


def _history(uow: FakeCatalogUnitOfWork) -> FakePriceHistoryRepository:
    return cast("FakePriceHistoryRepository", uow.repositories.price_history)


def _observe(price: float | None = 425_000.0, **overrides: object) -> PlanObservation:
    fields: dict[str, object] = {
        "plan_name": "The Magnolia",
        "price": price,
        "community_name": "Elevon",
        "company_name": "BuilderCo",
    }
    fields.update(overrides)
    return PlanObservation(**fields)  # type: ignore[arg-type]


@pytest.mark.usefixtures("catalog")
def test_new_plan_is_created_with_canonical_snapshot(uow: FakeCatalogUnitOfWork) -> None:
    result = ingest_plan_observations(
        [_observe(community_name="ELEVON", sqft=2150)],
        unit_of_work_factory=lambda: uow,
        clock=FixedClock(NOW),
    )

    assert result.created == 1
    assert uow.commits == 1
    (plan,) = _plans(uow).items.values()
    assert plan.community_name == "Elevon"
    assert plan.community_location == "Lavon, TX"
    assert plan.company_name == "BuilderCo"
    assert plan.price == 425_000.0
    assert plan.sqft == 2150
    assert plan.last_updated == NOW
    assert _history(uow).items == []


@pytest.mark.usefixtures("catalog")
def test_price_change_is_recorded_once_per_change(uow: FakeCatalogUnitOfWork) -> None:
    clock = FixedClock(NOW - timedelta(days=1))
    ingest_plan_observations([_observe()], unit_of_work_factory=lambda: uow, clock=clock)

    clock.now = NOW
    result = ingest_plan_observations(
        [_observe(439_000.0)], unit_of_work_factory=lambda: uow, clock=clock
    )
    repeat = ingest_plan_observations(
        [_observe(439_000.0)], unit_of_work_factory=lambda: uow, clock=clock
    )

    assert result.updated == 1
    assert result.price_changes == 1
    assert repeat.price_changes == 0
    (event,) = _history(uow).items
    assert (event.old_price, event.new_price, event.changed_at) == (425_000.0, 439_000.0, NOW)
    (plan,) = _plans(uow).items.values()
    assert plan.price == 439_000.0


@pytest.mark.usefixtures("catalog")
def test_observed_at_overrides_clock(uow: FakeCatalogUnitOfWork) -> None:
    observed = NOW - timedelta(hours=5)

    ingest_plan_observations(
        [_observe(observed_at=observed)],
        unit_of_work_factory=lambda: uow,
        clock=FixedClock(NOW),
    )

    (plan,) = _plans(uow).items.values()
    assert plan.last_updated == observed


@pytest.mark.usefixtures("catalog")
def test_plan_and_quick_move_in_are_distinct(uow: FakeCatalogUnitOfWork) -> None:
    result = ingest_plan_observations(
        [_observe(), _observe(399_000.0, type=PlanType.NOW)],
        unit_of_work_factory=lambda: uow,
        clock=FixedClock(NOW),
    )

    assert result.created == 2


@pytest.mark.usefixtures("catalog")
@pytest.mark.parametrize(
    "observation",
    [
        PlanObservation(plan_name=None, price=1.0, community_name="Elevon", company_name="B"),
        PlanObservation(plan_name="  ", price=1.0, community_name="Elevon", company_name="B"),
        PlanObservation(plan_name="X", price=None, community_name="Elevon", company_name="B"),
        PlanObservation(plan_name="X", price=1.0, company_name="BuilderCo"),
        PlanObservation(plan_name="X", price=1.0, community_name="Elevon"),
    ],
)
def test_incomplete_observations_are_skipped(
    uow: FakeCatalogUnitOfWork, observation: PlanObservation
) -> None:
    result = ingest_plan_observations(
        [observation], unit_of_work_factory=lambda: uow, clock=FixedClock(NOW)
    )

    assert result.skipped == 1
    assert _plans(uow).items == {}


@pytest.mark.usefixtures("catalog")
def test_unresolved_references_are_counted_not_created(uow: FakeCatalogUnitOfWork) -> None:
    result = ingest_plan_observations(
        [_observe(company_name="Nobody Homes"), _observe()],
        unit_of_work_factory=lambda: uow,
        clock=FixedClock(NOW),
    )

    assert result.unresolved == 1
    assert result.created == 1
    assert len(uow.repositories.companies.items) == 1  # type: ignore[attr-defined]


def test_segment_snapshot_attached_for_valid_segment(
    uow: FakeCatalogUnitOfWork, catalog: tuple[Community, Company]
) -> None:
    community, company = catalog
    segment = ProductSegment(community_id=community.id, name="40s", label="40' Lots")
    uow.repositories.segments.add(segment)
    uow.repositories.community_links.add(
        CommunityCompany(
            community_id=community.id,
            company_id=company.id,
            name_used_by_company="Elevon at Lavon",
        )
    )

    ingest_plan_observations(
        [_observe(segment_id=str(segment.id)), _observe(plan_name="The Oak", segment_id="x")],
        unit_of_work_factory=lambda: uow,
        clock=FixedClock(NOW),
    )

    by_name = {plan.plan_name: plan for plan in _plans(uow).items.values()}
    assert by_name["The Magnolia"].segment == SegmentRef(
        id=segment.id, name=segment.name, label=segment.label
    )
    assert by_name["The Oak"].segment is None
    # snapshots hold canonical names, never the company's alias
    assert by_name["The Magnolia"].community_name == "Elevon"
