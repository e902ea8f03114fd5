"""Read-side projection of plans annotated with recent price changes."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from homeplans.domain.errors import EntityNotFoundError
from homeplans.domain.model import EntityType, parse_identifier
from homeplans.domain.price_ledger import DEFAULT_PRICE_CHANGE_WINDOW

if TYPE_CHECKING:
    from datetime import datetime, timedelta
    from uuid import UUID

    from homeplans.domain.model import CommunityRef, CompanyRef, Plan, PlanType, SegmentRef
    from homeplans.domain.ports.persistence import CommunityRepository, PlanRepository
    from homeplans.domain.price_ledger import PriceLedger


@dataclass(frozen=True, slots=True)
class PlanView:
    """Externally visible plan record.

    Carries the flat display names for older consumers alongside the nested
    references for newer ones.
    """

    plan_id: UUID
    plan_name: str
    price: float
    type: PlanType
    company: str
    company_ref: CompanyRef
    community: str
    community_ref: CommunityRef
    last_updated: datetime | None
    price_changed_recently: bool
    sqft: int | None = None
    stories: str | None = None
    price_per_sqft: float | None = None
    beds: str | None = None
    baths: str | None = None
    address: str | None = None
    segment_ref: SegmentRef | None = None

    def as_payload(self) -> dict[str, object]:
        return {
            "_id": str(self.plan_id),
            "plan_name": self.plan_name,
            "price": self.price,
            "sqft": self.sqft,
            "stories": self.stories,
            "price_per_sqft": self.price_per_sqft,
            "last_updated": self.last_updated.isoformat() if self.last_updated else None,
            "company": self.company,
            "companyObj": self.company_ref.as_payload(),
            "community": self.community,
            "communityObj": self.community_ref.as_payload(),
            "segment": self.segment_ref.as_payload() if self.segment_ref else None,
            "type": self.type.value,
            "beds": self.beds,
            "baths": self.baths,
            "address": self.address,
            "price_changed_recently": self.price_changed_recently,
        }


def _view_for(plan: Plan, *, changed: bool) -> PlanView | None:
    company = plan.company
    community = plan.community
    if (
        company is None
        or community is None
        or plan.plan_name is None
        or plan.price is None
    ):
        return None
    return PlanView(
        plan_id=plan.id,
        plan_name=plan.plan_name,
        price=plan.price,
        type=plan.type,
        company=company.name,
        company_ref=company,
        community=community.name,
        community_ref=community,
        last_updated=plan.last_updated,
        price_changed_recently=changed,
        sqft=plan.sqft,
        stories=plan.stories,
        price_per_sqft=plan.price_per_sqft,
        beds=plan.beds,
        baths=plan.baths,
        address=plan.address,
        segment_ref=plan.segment,
    )


class PlanProjector:
    def __init__(
        self,
        communities: CommunityRepository,
        plans: PlanRepository,
        ledger: PriceLedger,
    ) -> None:
        self._communities = communities
        self._plans = plans
        self._ledger = ledger

    def project_for_community(
        self,
        community_id: str | UUID,
        window: timedelta = DEFAULT_PRICE_CHANGE_WINDOW,
    ) -> list[PlanView]:
        """Return the community's complete plans, newest first, with change flags.

        Raises ``EntityNotFoundError`` for a malformed or unknown community id so that
        "no plans" and "invalid scope" stay distinguishable.
        """

        parsed_id = parse_identifier(community_id)
        if parsed_id is None or self._communities.get(parsed_id) is None:
            raise EntityNotFoundError(EntityType.COMMUNITY, community_id)

        plans = list(self._plans.list_complete_for_community(parsed_id))
        changed_ids = self._ledger.changed_within({plan.id for plan in plans}, window)

        views: list[PlanView] = []
        for plan in plans:
            view = _view_for(plan, changed=plan.id in changed_ids)
            if view is not None:
                views.append(view)
        return views
