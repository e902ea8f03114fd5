"""SQLAlchemy mapping metadata for the homeplans domain model."""

from __future__ import annotations

import logging
import uuid
from datetime import UTC, datetime
from functools import cache
from typing import TYPE_CHECKING

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    Dialect,
    Enum,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Table,
    TypeDecorator,
    UniqueConstraint,
    Uuid,
    event,
    orm,
)
from sqlalchemy.orm import configure_mappers

from homeplans.domain.model import (
    Community,
    CommunityCompany,
    Company,
    KeyType,
    Plan,
    PlanType,
    PriceHistory,
    ProductSegment,
    SegmentCompany,
    SegmentRole,
    normalize_name,
)

if TYPE_CHECKING:
    from sqlalchemy.engine import Connection

log = logging.getLogger(__name__)

UUIDColumnType = Uuid[uuid.UUID]


class UTCDateTime(TypeDecorator[datetime]):
    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        if value.tzinfo is None:
            value = value.replace(tzinfo=UTC)
        return value.astimezone(UTC)

    def process_result_value(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        return value if value.tzinfo else value.replace(tzinfo=UTC)


def _utcnow() -> datetime:
    return datetime.now(UTC)


def _refresh_name_key(
    mapper: orm.Mapper[Community | Company],
    connection: Connection,
    target: Community | Company,
) -> None:
    _ = mapper, connection
    target.name_key = normalize_name(target.name)


mapper_registry = orm.registry()
mapper_registry.metadata.naming_convention = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_label)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_label)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

# Canonical registry ----------------------------------------------------------

community_table = Table(
    "community",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column("name", String, nullable=False, index=True),
    Column("name_key", String, nullable=False, index=True),
    Column("slug", String, nullable=True, index=True),
    Column("description", String, nullable=True),
    Column("location", String, nullable=True),
    Column("city", String, nullable=True),
    Column("state", String, nullable=True),
    Column(
        "parent_id",
        UUIDColumnType,
        ForeignKey("community.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    ),
    Column("total_plans", Integer, nullable=False, default=0),
    Column("total_quick_move_ins", Integer, nullable=False, default=0),
    Column("created_at", UTCDateTime(), nullable=True, default=_utcnow),
    Column("updated_at", UTCDateTime(), nullable=True, default=_utcnow, onupdate=_utcnow),
)

company_table = Table(
    "company",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column("name", String, nullable=False, unique=True),
    Column("name_key", String, nullable=False, index=True),
    Column("slug", String, nullable=True, index=True),
    Column("description", String, nullable=True),
    Column("website", String, nullable=True),
    Column("headquarters", String, nullable=True),
    Column("founded", String, nullable=True),
    Column("total_communities", Integer, nullable=False, default=0),
    Column("total_plans", Integer, nullable=False, default=0),
    Column("created_at", UTCDateTime(), nullable=True, default=_utcnow),
    Column("updated_at", UTCDateTime(), nullable=True, default=_utcnow, onupdate=_utcnow),
)

product_segment_table = Table(
    "product_segment",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column(
        "community_id",
        UUIDColumnType,
        ForeignKey("community.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    ),
    Column("name", String, nullable=False),
    Column("label", String, nullable=False),
    Column("description", String, nullable=True),
    Column("is_active", Boolean, nullable=False, default=True),
    Column("display_order", Integer, nullable=False, default=0),
    UniqueConstraint("community_id", "name"),
)

# Alias links -----------------------------------------------------------------

community_company_table = Table(
    "community_company",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column(
        "community_id",
        UUIDColumnType,
        ForeignKey("community.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    ),
    Column(
        "company_id",
        UUIDColumnType,
        ForeignKey("company.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    ),
    Column("name_used_by_company", String, nullable=True),
    Column("created_at", UTCDateTime(), nullable=True, default=_utcnow),
    Column("updated_at", UTCDateTime(), nullable=True, default=_utcnow, onupdate=_utcnow),
    UniqueConstraint("community_id", "company_id"),
)

segment_company_table = Table(
    "segment_company",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column(
        "segment_id",
        UUIDColumnType,
        ForeignKey("product_segment.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    ),
    Column(
        "company_id",
        UUIDColumnType,
        ForeignKey("company.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    ),
    Column("segment_label_as_company", String, nullable=True),
    Column("role", Enum(SegmentRole, native_enum=False), nullable=False),
    Column(
        "source_community_id",
        UUIDColumnType,
        ForeignKey("community.id", ondelete="SET NULL"),
        nullable=True,
    ),
    Column("notes", String, nullable=True),
    Column("key_type", Enum(KeyType, native_enum=False), nullable=False),
    Column("values", JSON, nullable=False, default=list),
    Column("plan_names", JSON, nullable=True),
    Column("created_at", UTCDateTime(), nullable=True, default=_utcnow),
    Column("updated_at", UTCDateTime(), nullable=True, default=_utcnow, onupdate=_utcnow),
    UniqueConstraint("segment_id", "company_id"),
)

# Plans and price history -----------------------------------------------------

# company/community/segment columns are write-time name snapshots, not live joins;
# the natural key is built from the snapshot names.
plan_table = Table(
    "plan",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column("plan_name", String, nullable=True, index=True),
    Column("price", Float, nullable=True, index=True),
    Column("type", Enum(PlanType, native_enum=False), nullable=False),
    Column("sqft", Integer, nullable=True),
    Column("stories", String, nullable=True),
    Column("price_per_sqft", Float, nullable=True),
    Column("beds", String, nullable=True),
    Column("baths", String, nullable=True),
    Column("address", String, nullable=True),
    Column("design_number", String, nullable=True),
    Column("company_id", UUIDColumnType, nullable=True),
    Column("company_name", String, nullable=True),
    Column("community_id", UUIDColumnType, nullable=True),
    Column("community_name", String, nullable=True),
    Column("community_location", String, nullable=True),
    Column("segment_id", UUIDColumnType, nullable=True),
    Column("segment_name", String, nullable=True),
    Column("segment_label", String, nullable=True),
    Column("last_updated", UTCDateTime(), nullable=True, index=True),
    UniqueConstraint("plan_name", "company_name", "community_name", "type"),
    Index("ix_plan_community_type", "community_id", "type"),
    Index("ix_plan_company_community_type", "company_id", "community_id", "type"),
)

# No foreign key to plan: history is kept for audit even if a plan row is pruned.
price_history_table = Table(
    "price_history",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column("plan_id", UUIDColumnType, nullable=False),
    Column("old_price", Float, nullable=False),
    Column("new_price", Float, nullable=False),
    Column("changed_at", UTCDateTime(), nullable=False),
    Index("ix_price_history_plan_changed_at", "plan_id", "changed_at"),
    Index("ix_price_history_changed_at", "changed_at"),
)


@cache
def start_mappers() -> orm.registry:
    """Configure SQLAlchemy mappers for the domain model."""

    log.info("Starting SQLAlchemy mappers")

    mapper_registry.map_imperatively(Community, community_table)
    mapper_registry.map_imperatively(Company, company_table)
    mapper_registry.map_imperatively(ProductSegment, product_segment_table)
    mapper_registry.map_imperatively(CommunityCompany, community_company_table)
    mapper_registry.map_imperatively(SegmentCompany, segment_company_table)
    mapper_registry.map_imperatively(Plan, plan_table)
    mapper_registry.map_imperatively(PriceHistory, price_history_table)

    # SQLite's lower() only folds ASCII, so name lookups compare a stored key instead.
    for entity_cls in (Community, Company):
        event.listen(entity_cls, "before_insert", _refresh_name_key)
        event.listen(entity_cls, "before_update", _refresh_name_key)

    configure_mappers()
    return mapper_registry
