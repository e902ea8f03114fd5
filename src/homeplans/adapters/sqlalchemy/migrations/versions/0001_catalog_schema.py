"""Catalog, alias link, plan, and price history tables.

Revision ID: 0001_catalog_schema
Revises:
Create Date: 2026-10-19 09:00:00

"""

from __future__ import annotations

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

revision: str = "0001_catalog_schema"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None

_SEGMENT_ROLES = ("PRIMARY", "COMPETITOR", "CROSS_COMMUNITY_COMP")
_KEY_TYPES = ("PLAN_NAMES", "SERIES_NAME")
_PLAN_TYPES = ("PLAN", "NOW")


def _timestamps() -> list[sa.Column[object]]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    ]


def upgrade() -> None:
    op.create_table(
        "community",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("slug", sa.String(), nullable=True),
        sa.Column("description", sa.String(), nullable=True),
        sa.Column("location", sa.String(), nullable=True),
        sa.Column("city", sa.String(), nullable=True),
        sa.Column("state", sa.String(), nullable=True),
        sa.Column("parent_id", sa.Uuid(), nullable=True),
        sa.Column("total_plans", sa.Integer(), nullable=False),
        sa.Column("total_quick_move_ins", sa.Integer(), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(
            ["parent_id"],
            ["community.id"],
            name="fk_community_community_parent_id_community",
            ondelete="SET NULL",
        ),
        sa.PrimaryKeyConstraint("id", name="pk_community"),
    )
    op.create_index("ix_community_name", "community", ["name"])
    op.create_index("ix_community_slug", "community", ["slug"])
    op.create_index("ix_community_parent_id", "community", ["parent_id"])

    op.create_table(
        "company",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("slug", sa.String(), nullable=True),
        sa.Column("description", sa.String(), nullable=True),
        sa.Column("website", sa.String(), nullable=True),
        sa.Column("headquarters", sa.String(), nullable=True),
        sa.Column("founded", sa.String(), nullable=True),
        sa.Column("total_communities", sa.Integer(), nullable=False),
        sa.Column("total_plans", sa.Integer(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id", name="pk_company"),
        sa.UniqueConstraint("name", name="uq_company_company_name"),
    )
    op.create_index("ix_company_slug", "company", ["slug"])

    op.create_table(
        "product_segment",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("community_id", sa.Uuid(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("label", sa.String(), nullable=False),
        sa.Column("description", sa.String(), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("display_order", sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(
            ["community_id"],
            ["community.id"],
            name="fk_product_segment_product_segment_community_id_community",
            ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("id", name="pk_product_segment"),
        sa.UniqueConstraint(
            "community_id", "name", name="uq_product_segment_product_segment_community_id"
        ),
    )
    op.create_index("ix_product_segment_community_id", "product_segment", ["community_id"])

    op.create_table(
        "community_company",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("community_id", sa.Uuid(), nullable=False),
        sa.Column("company_id", sa.Uuid(), nullable=False),
        sa.Column("name_used_by_company", sa.String(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(
            ["community_id"],
            ["community.id"],
            name="fk_community_company_community_company_community_id_community",
            ondelete="CASCADE",
        ),
        sa.ForeignKeyConstraint(
            ["company_id"],
            ["company.id"],
            name="fk_community_company_community_company_company_id_company",
            ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("id", name="pk_community_company"),
        sa.UniqueConstraint(
            "community_id",
            "company_id",
            name="uq_community_company_community_company_community_id",
        ),
    )
    op.create_index("ix_community_company_community_id", "community_company", ["community_id"])
    op.create_index("ix_community_company_company_id", "community_company", ["company_id"])

    op.create_table(
        "segment_company",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("segment_id", sa.Uuid(), nullable=False),
        sa.Column("company_id", sa.Uuid(), nullable=False),
        sa.Column("segment_label_as_company", sa.String(), nullable=True),
        sa.Column(
            "role",
            sa.Enum(*_SEGMENT_ROLES, name="segmentrole", native_enum=False),
            nullable=False,
        ),
        sa.Column("source_community_id", sa.Uuid(), nullable=True),
        sa.Column("notes", sa.String(), nullable=True),
        sa.Column(
            "key_type",
            sa.Enum(*_KEY_TYPES, name="keytype", native_enum=False),
            nullable=False,
        ),
        sa.Column("values", sa.JSON(), nullable=False),
        sa.Column("plan_names", sa.JSON(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(
            ["segment_id"],
            ["product_segment.id"],
            name="fk_segment_company_segment_company_segment_id_product_segment",
            ondelete="CASCADE",
        ),
        sa.ForeignKeyConstraint(
            ["company_id"],
            ["company.id"],
            name="fk_segment_company_segment_company_company_id_company",
            ondelete="CASCADE",
        ),
        sa.ForeignKeyConstraint(
            ["source_community_id"],
            ["community.id"],
            name="fk_segment_company_segment_company_source_community_id_community",
            ondelete="SET NULL",
        ),
        sa.PrimaryKeyConstraint("id", name="pk_segment_company"),
        sa.UniqueConstraint(
            "segment_id",
            "company_id",
            name="uq_segment_company_segment_company_segment_id",
        ),
    )
    op.create_index("ix_segment_company_segment_id", "segment_company", ["segment_id"])
    op.create_index("ix_segment_company_company_id", "segment_company", ["company_id"])

    op.create_table(
        "plan",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("plan_name", sa.String(), nullable=True),
        sa.Column("price", sa.Float(), nullable=True),
        sa.Column(
            "type",
            sa.Enum(*_PLAN_TYPES, name="plantype", native_enum=False),
            nullable=False,
        ),
        sa.Column("sqft", sa.Integer(), nullable=True),
        sa.Column("stories", sa.String(), nullable=True),
        sa.Column("price_per_sqft", sa.Float(), nullable=True),
        sa.Column("beds", sa.String(), nullable=True),
        sa.Column("baths", sa.String(), nullable=True),
        sa.Column("address", sa.String(), nullable=True),
        sa.Column("design_number", sa.String(), nullable=True),
        sa.Column("company_id", sa.Uuid(), nullable=True),
        sa.Column("company_name", sa.String(), nullable=True),
        sa.Column("community_id", sa.Uuid(), nullable=True),
        sa.Column("community_name", sa.String(), nullable=True),
        sa.Column("community_location", sa.String(), nullable=True),
        sa.Column("segment_id", sa.Uuid(), nullable=True),
        sa.Column("segment_name", sa.String(), nullable=True),
        sa.Column("segment_label", sa.String(), nullable=True),
        sa.Column("last_updated", sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("id", name="pk_plan"),
        sa.UniqueConstraint(
            "plan_name",
            "company_name",
            "community_name",
            "type",
            name="uq_plan_plan_plan_name",
        ),
    )
    op.create_index("ix_plan_plan_name", "plan", ["plan_name"])
    op.create_index("ix_plan_price", "plan", ["price"])
    op.create_index("ix_plan_last_updated", "plan", ["last_updated"])
    op.create_index("ix_plan_community_type", "plan", ["community_id", "type"])
    op.create_index(
        "ix_plan_company_community_type", "plan", ["company_id", "community_id", "type"]
    )

    op.create_table(
        "price_history",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("plan_id", sa.Uuid(), nullable=False),
        sa.Column("old_price", sa.Float(), nullable=False),
        sa.Column("new_price", sa.Float(), nullable=False),
        sa.Column("changed_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id", name="pk_price_history"),
    )
    op.create_index(
        "ix_price_history_plan_changed_at", "price_history", ["plan_id", "changed_at"]
    )
    op.create_index("ix_price_history_changed_at", "price_history", ["changed_at"])


def downgrade() -> None:
    op.drop_table("price_history")
    op.drop_table("plan")
    op.drop_table("segment_company")
    op.drop_table("community_company")
    op.drop_table("product_segment")
    op.drop_table("company")
    op.drop_table("community")
