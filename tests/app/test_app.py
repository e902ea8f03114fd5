from __future__ import annotations

from uuid import uuid4

import pytest

from homeplans.app import (
    assign_community_parent,
    community_children,
    community_segments,
    create_segment,
    identify_for_scrape,
    link_community_alias,
    link_segment_alias,
    plan_price_history,
)
from homeplans.domain.errors import (
    DuplicateEntityError,
    EntityNotFoundError,
    InvalidReferenceError,
)
from homeplans.domain.model import KeyType, SegmentRole
from homeplans.domain.resolution import ResolutionRequest
from tests.helpers.catalog import FakeCatalogUnitOfWork, add_community, add_company


def test_link_alias_commits_and_is_used_by_identify() -> None:
    uow = FakeCatalogUnitOfWork()
    community = add_community(uow.repositories, "Elevon")
    company = add_company(uow.repositories, "BuilderCo")

    link_community_alias(
        community.id, company.id, "Elevon at Lavon", unit_of_work_factory=lambda: uow
    )
    resolved = identify_for_scrape(
        ResolutionRequest(community_name="elevon", company_name="builderco"),
        unit_of_work_factory=lambda: uow,
    )

    assert uow.commits == 1
    assert resolved.community_name_for_scrape == "Elevon at Lavon"


def test_failed_parent_assignment_rolls_back() -> None:
    uow = FakeCatalogUnitOfWork()
    community = add_community(uow.repositories, "Elevon")

    with pytest.raises(EntityNotFoundError):
        assign_community_parent(community.id, uuid4(), unit_of_work_factory=lambda: uow)

    assert uow.commits == 0
    assert uow.rollbacks == 1


def test_price_history_requires_valid_known_plan() -> None:
    uow = FakeCatalogUnitOfWork()

    with pytest.raises(InvalidReferenceError):
        plan_price_history("nope", unit_of_work_factory=lambda: uow)
    with pytest.raises(EntityNotFoundError):
        plan_price_history(uuid4(), unit_of_work_factory=lambda: uow)


def test_segment_alias_feeds_the_scrape_label() -> None:
    uow = FakeCatalogUnitOfWork()
    community = add_community(uow.repositories, "Elevon")
    company = add_company(uow.repositories, "BuilderCo")

    segment = create_segment(community.id, "40s", "40' Lots", unit_of_work_factory=lambda: uow)
    link = link_segment_alias(
        segment.id,
        company.id,
        label_as_company="Cottage Series",
        role=SegmentRole.PRIMARY,
        key_type=KeyType.SERIES_NAME,
        values=["Cottage", "  "],
        unit_of_work_factory=lambda: uow,
    )
    resolved = identify_for_scrape(
        ResolutionRequest(
            community_id=str(community.id),
            company_id=str(company.id),
            segment_id=str(segment.id),
        ),
        unit_of_work_factory=lambda: uow,
    )

    assert uow.commits == 2
    assert link.values == ["Cottage"]
    assert resolved.segment_label_for_scrape == "Cottage Series"


def test_segment_alias_without_label_falls_back_to_segment_label() -> None:
    uow = FakeCatalogUnitOfWork()
    community = add_community(uow.repositories, "Elevon")
    company = add_company(uow.repositories, "BuilderCo")
    segment = create_segment(community.id, "40s", "40' Lots", unit_of_work_factory=lambda: uow)

    link_segment_alias(
        segment.id, company.id, label_as_company="  ", unit_of_work_factory=lambda: uow
    )
    resolved = identify_for_scrape(
        ResolutionRequest(
            community_id=community.id,
            company_id=company.id,
            segment_id=segment.id,
        ),
        unit_of_work_factory=lambda: uow,
    )

    assert resolved.segment_label_for_scrape == "40' Lots"


def test_duplicate_segment_is_rejected_without_commit() -> None:
    uow = FakeCatalogUnitOfWork()
    community = add_community(uow.repositories, "Elevon")
    create_segment(community.id, "40s", "40' Lots", unit_of_work_factory=lambda: uow)

    with pytest.raises(DuplicateEntityError):
        create_segment(community.id, "40s", "Forties", unit_of_work_factory=lambda: uow)

    assert uow.commits == 1
    assert uow.rollbacks == 1


def test_community_segments_respects_active_filter() -> None:
    uow = FakeCatalogUnitOfWork()
    community = add_community(uow.repositories, "Elevon")
    create_segment(
        community.id, "50s", "50' Lots", display_order=2, unit_of_work_factory=lambda: uow
    )
    create_segment(
        community.id, "40s", "40' Lots", display_order=1, unit_of_work_factory=lambda: uow
    )
    create_segment(
        community.id, "old", "Closed Out", is_active=False, unit_of_work_factory=lambda: uow
    )

    active = community_segments(community.id, only_active=True, unit_of_work_factory=lambda: uow)
    everything = community_segments(community.id, unit_of_work_factory=lambda: uow)

    assert [segment.name for segment in active] == ["40s", "50s"]
    assert len(everything) == 3


def test_community_children_lists_assigned_children() -> None:
    uow = FakeCatalogUnitOfWork()
    parent = add_community(uow.repositories, "Elevon")
    child = add_community(uow.repositories, "Elevon North")
    add_community(uow.repositories, "Painted Tree")

    assign_community_parent(child.id, parent.id, unit_of_work_factory=lambda: uow)

    assert community_children(parent.id, unit_of_work_factory=lambda: uow) == [child]
    with pytest.raises(EntityNotFoundError):
        community_children(uuid4(), unit_of_work_factory=lambda: uow)
