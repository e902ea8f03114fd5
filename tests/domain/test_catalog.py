from __future__ import annotations

from uuid import uuid4

import pytest

from homeplans.domain.catalog import (
    assign_parent_community,
    create_product_segment,
    link_company_to_community,
    link_company_to_segment,
    list_child_communities,
    list_product_segments,
)
from homeplans.domain.errors import (
    CommunityHierarchyError,
    DuplicateEntityError,
    EntityNotFoundError,
    InvalidReferenceError,
)
from homeplans.domain.model import KeyType, SegmentRole
from homeplans.domain.resolution import EntityResolver, ResolutionRequest
from tests.helpers.catalog import add_community, add_company, make_repositories


def test_assign_and_clear_parent() -> None:
    repos = make_repositories()
    parent = add_community(repos, "Painted Tree")
    child = add_community(repos, "Painted Tree North")

    assign_parent_community(repos, str(child.id), str(parent.id))
    assert child.parent_id == parent.id
    assert list_child_communities(repos, parent.id) == [child]

    assign_parent_community(repos, child.id, "  ")
    assert child.parent_id is None


def test_self_parenting_is_rejected() -> None:
    repos = make_repositories()
    community = add_community(repos, "Elevon")

    with pytest.raises(CommunityHierarchyError):
        assign_parent_community(repos, community.id, community.id)
    assert community.parent_id is None


def test_parent_assignment_validates_references() -> None:
    repos = make_repositories()
    community = add_community(repos, "Elevon")

    with pytest.raises(InvalidReferenceError):
        assign_parent_community(repos, community.id, "not-an-id")
    with pytest.raises(EntityNotFoundError):
        assign_parent_community(repos, community.id, uuid4())


def test_link_company_to_community_upserts_alias() -> None:
    repos = make_repositories()
    community = add_community(repos, "Elevon")
    company = add_company(repos, "BuilderCo")

    first = link_company_to_community(repos, community.id, company.id, " Elevon at Lavon ")
    second = link_company_to_community(repos, community.id, company.id, "Elevon Lavon")

    assert first is second
    assert second.name_used_by_company == "Elevon Lavon"
    resolved = EntityResolver(repos).resolve(
        ResolutionRequest(community_id=community.id, company_id=company.id)
    )
    assert resolved.community_name_for_scrape == "Elevon Lavon"


def test_blank_alias_clears_override() -> None:
    repos = make_repositories()
    community = add_community(repos, "Elevon")
    company = add_company(repos, "BuilderCo")
    link_company_to_community(repos, community.id, company.id, "Elevon at Lavon")

    link = link_company_to_community(repos, community.id, company.id, "   ")

    assert link.name_used_by_company is None


def test_link_requires_existing_company() -> None:
    repos = make_repositories()
    community = add_community(repos, "Elevon")

    with pytest.raises(EntityNotFoundError):
        link_company_to_community(repos, community.id, uuid4(), "Alias")


def test_create_segment_trims_and_rejects_duplicates() -> None:
    repos = make_repositories()
    community = add_community(repos, "Elevon")

    segment = create_product_segment(repos, community.id, " 40s ", " 40' Lots ")

    assert (segment.name, segment.label) == ("40s", "40' Lots")
    with pytest.raises(DuplicateEntityError):
        create_product_segment(repos, community.id, "40s", "Forty")
    with pytest.raises(ValueError, match="required"):
        create_product_segment(repos, community.id, "  ", "Label")


def test_same_segment_name_allowed_in_other_community() -> None:
    repos = make_repositories()
    elevon = add_community(repos, "Elevon")
    painted_tree = add_community(repos, "Painted Tree")

    create_product_segment(repos, elevon.id, "40s", "40' Lots")
    create_product_segment(repos, painted_tree.id, "40s", "40' Lots")

    assert len(list_product_segments(repos, elevon.id)) == 1


def test_list_segments_filters_inactive_and_orders() -> None:
    repos = make_repositories()
    community = add_community(repos, "Elevon")
    create_product_segment(repos, community.id, "50s", "50' Lots", display_order=2)
    create_product_segment(repos, community.id, "40s", "40' Lots", display_order=1)
    create_product_segment(repos, community.id, "old", "Retired", is_active=False)

    active = list_product_segments(repos, community.id, only_active=True)
    everything = list_product_segments(repos, community.id)

    assert [segment.name for segment in active] == ["40s", "50s"]
    assert len(everything) == 3


def test_link_company_to_segment_upserts_configuration() -> None:
    repos = make_repositories()
    community = add_community(repos, "Elevon")
    source = add_community(repos, "Painted Tree")
    company = add_company(repos, "BuilderCo")
    segment = create_product_segment(repos, community.id, "40s", "40' Lots")

    link = link_company_to_segment(
        repos,
        str(segment.id),
        company.id,
        label_as_company="Cottage Series",
        role=SegmentRole.PRIMARY,
        values=["Magnolia", " ", " Oak "],
        source_community_id=source.id,
    )
    again = link_company_to_segment(
        repos,
        segment.id,
        company.id,
        key_type=KeyType.SERIES_NAME,
        values=["Cottage"],
        notes="series feed",
    )

    assert link is again
    assert again.key_type is KeyType.SERIES_NAME
    assert again.values == ["Cottage"]
    assert again.role is SegmentRole.COMPETITOR
    assert again.segment_label_as_company is None
    assert again.source_community_id is None
    assert again.notes == "series feed"


def test_link_company_to_segment_trims_values() -> None:
    repos = make_repositories()
    community = add_community(repos, "Elevon")
    company = add_company(repos, "BuilderCo")
    segment = create_product_segment(repos, community.id, "40s", "40' Lots")

    link = link_company_to_segment(repos, segment.id, company.id, values=["Magnolia", " ", " Oak "])

    assert link.values == ["Magnolia", "Oak"]


def test_link_company_to_unknown_segment_fails() -> None:
    repos = make_repositories()
    company = add_company(repos, "BuilderCo")

    with pytest.raises(EntityNotFoundError):
        link_company_to_segment(repos, uuid4(), company.id)
