"""Repository implementations backed by SQLAlchemy sessions."""

from __future__ import annotations

from typing import TYPE_CHECKING, cast

from sqlalchemy import select

from homeplans.adapters.sqlalchemy.mappings import (
    community_company_table,
    community_table,
    company_table,
    plan_table,
    price_history_table,
    product_segment_table,
    segment_company_table,
)
from homeplans.domain.model import (
    Community,
    CommunityCompany,
    Company,
    Plan,
    PriceHistory,
    ProductSegment,
    SegmentCompany,
    normalize_name,
)

if TYPE_CHECKING:
    from collections.abc import Collection, Sequence
    from datetime import datetime
    from uuid import UUID

    from sqlalchemy import Table
    from sqlalchemy.orm import Session

    from homeplans.domain.model import PlanKey


class SqlAlchemyNamedRepository[TEntity: Community | Company]:
    """Shared id / case-insensitive whole-name lookup for registry entities."""

    def __init__(self, session: Session, entity_cls: type[TEntity], table: Table) -> None:
        self.session = session
        self._entity_cls = entity_cls
        self._table = table

    def add(self, entity: TEntity) -> None:
        self.session.add(entity)

    def get(self, entity_id: UUID) -> TEntity | None:
        return self.session.get(self._entity_cls, entity_id)

    def find_by_name(self, name: str) -> TEntity | None:
        # equality on the folded key: whole-name, case-insensitive, no pattern syntax
        stmt = (
            select(self._entity_cls)
            .where(self._table.c.name_key == normalize_name(name))
            .order_by(self._table.c.name, self._table.c.id)
        )
        candidates = self.session.execute(stmt).scalars().all()
        for candidate in candidates:
            if candidate.name == name:
                return candidate
        return candidates[0] if candidates else None


class SqlAlchemyCommunityRepository(SqlAlchemyNamedRepository[Community]):
    def __init__(self, session: Session) -> None:
        super().__init__(session, Community, community_table)

    def list_children(self, parent_id: UUID) -> Sequence[Community]:
        stmt = (
            select(Community)
            .where(community_table.c.parent_id == parent_id)
            .order_by(community_table.c.name)
        )
        return self.session.execute(stmt).scalars().all()


class SqlAlchemyCompanyRepository(SqlAlchemyNamedRepository[Company]):
    def __init__(self, session: Session) -> None:
        super().__init__(session, Company, company_table)


class SqlAlchemyProductSegmentRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, entity: ProductSegment) -> None:
        self.session.add(entity)

    def get(self, segment_id: UUID) -> ProductSegment | None:
        return self.session.get(ProductSegment, segment_id)

    def find_in_community(self, community_id: UUID, name: str) -> ProductSegment | None:
        stmt = (
            select(ProductSegment)
            .where(product_segment_table.c.community_id == community_id)
            .where(product_segment_table.c.name == name)
        )
        return self.session.execute(stmt).scalar_one_or_none()

    def list_for_community(
        self, community_id: UUID, *, only_active: bool = False
    ) -> Sequence[ProductSegment]:
        stmt = select(ProductSegment).where(product_segment_table.c.community_id == community_id)
        if only_active:
            stmt = stmt.where(product_segment_table.c.is_active.is_(True))
        stmt = stmt.order_by(product_segment_table.c.display_order, product_segment_table.c.label)
        return self.session.execute(stmt).scalars().all()


class SqlAlchemyCommunityCompanyRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, entity: CommunityCompany) -> None:
        self.session.add(entity)

    def get_link(self, community_id: UUID, company_id: UUID) -> CommunityCompany | None:
        stmt = (
            select(CommunityCompany)
            .where(community_company_table.c.community_id == community_id)
            .where(community_company_table.c.company_id == company_id)
        )
        return self.session.execute(stmt).scalar_one_or_none()


class SqlAlchemySegmentCompanyRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, entity: SegmentCompany) -> None:
        self.session.add(entity)

    def get_link(self, segment_id: UUID, company_id: UUID) -> SegmentCompany | None:
        stmt = (
            select(SegmentCompany)
            .where(segment_company_table.c.segment_id == segment_id)
            .where(segment_company_table.c.company_id == company_id)
        )
        return self.session.execute(stmt).scalar_one_or_none()


class SqlAlchemyPlanRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, entity: Plan) -> None:
        self.session.add(entity)

    def get(self, plan_id: UUID) -> Plan | None:
        return self.session.get(Plan, plan_id)

    def find_by_natural_key(self, key: PlanKey) -> Plan | None:
        stmt = (
            select(Plan)
            .where(plan_table.c.plan_name == key.plan_name)
            .where(plan_table.c.company_name == key.company_name)
            .where(plan_table.c.community_name == key.community_name)
            .where(plan_table.c.type == key.type)
        )
        return self.session.execute(stmt).scalar_one_or_none()

    def list_complete_for_community(self, community_id: UUID) -> Sequence[Plan]:
        stmt = (
            select(Plan)
            .where(plan_table.c.community_id == community_id)
            .where(plan_table.c.plan_name.is_not(None))
            .where(plan_table.c.price.is_not(None))
            .where(plan_table.c.company_name.is_not(None))
            .where(plan_table.c.community_name.is_not(None))
            .order_by(plan_table.c.last_updated.desc(), plan_table.c.id)
        )
        return self.session.execute(stmt).scalars().all()


class SqlAlchemyPriceHistoryRepository:
    """Append-only: exposes no update or delete."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, entity: PriceHistory) -> None:
        self.session.add(entity)

    def plan_ids_changed_since(self, plan_ids: Collection[UUID], since: datetime) -> set[UUID]:
        if not plan_ids:
            return set()
        stmt = (
            select(price_history_table.c.plan_id)
            .where(price_history_table.c.plan_id.in_(list(plan_ids)))
            .where(price_history_table.c.changed_at >= since)
            .distinct()
        )
        return set(cast("Sequence[UUID]", self.session.execute(stmt).scalars().all()))

    def list_for_plan(self, plan_id: UUID) -> Sequence[PriceHistory]:
        stmt = (
            select(PriceHistory)
            .where(price_history_table.c.plan_id == plan_id)
            .order_by(price_history_table.c.changed_at, price_history_table.c.id)
        )
        return self.session.execute(stmt).scalars().all()


if TYPE_CHECKING:
    from homeplans.domain.ports.persistence import (
        CommunityCompanyRepository,
        CommunityRepository,
        CompanyRepository,
        PlanRepository,
        PriceHistoryRepository,
        ProductSegmentRepository,
        SegmentCompanyRepository,
    )

    _session_stub = cast("Session", object())
    _community_repo: CommunityRepository = SqlAlchemyCommunityRepository(_session_stub)
    _company_repo: CompanyRepository = SqlAlchemyCompanyRepository(_session_stub)
    _segment_repo: ProductSegmentRepository = SqlAlchemyProductSegmentRepository(_session_stub)
    _link_repo: CommunityCompanyRepository = SqlAlchemyCommunityCompanyRepository(_session_stub)
    _segment_link_repo: SegmentCompanyRepository = SqlAlchemySegmentCompanyRepository(
        _session_stub
    )
    _plan_repo: PlanRepository = SqlAlchemyPlanRepository(_session_stub)
    _history_repo: PriceHistoryRepository = SqlAlchemyPriceHistoryRepository(_session_stub)
