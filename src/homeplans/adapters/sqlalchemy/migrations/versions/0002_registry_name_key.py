"""Folded name keys for community and company lookups.

Revision ID: 0002_registry_name_key
Revises: 0001_catalog_schema
Create Date: 2026-10-19 15:00:00

"""

from __future__ import annotations

import unicodedata
from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

revision: str = "0002_registry_name_key"
down_revision: str | None = "0001_catalog_schema"
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None

_TABLES = ("community", "company")


def _fold(name: str) -> str:
    # frozen copy of the fold used at write time when this revision was cut
    return unicodedata.normalize("NFKC", name).casefold()


def upgrade() -> None:
    bind = op.get_bind()
    for table_name in _TABLES:
        with op.batch_alter_table(table_name) as batch_op:
            batch_op.add_column(sa.Column("name_key", sa.String(), nullable=True))

        table = sa.table(
            table_name,
            sa.column("id", sa.Uuid()),
            sa.column("name", sa.String()),
            sa.column("name_key", sa.String()),
        )
        for row_id, name in bind.execute(sa.select(table.c.id, table.c.name)).all():
            bind.execute(
                table.update().where(table.c.id == row_id).values(name_key=_fold(name))
            )

        with op.batch_alter_table(table_name) as batch_op:
            batch_op.alter_column("name_key", existing_type=sa.String(), nullable=False)
            batch_op.create_index(f"ix_{table_name}_name_key", ["name_key"])


def downgrade() -> None:
    for table_name in reversed(_TABLES):
        with op.batch_alter_table(table_name) as batch_op:
            batch_op.drop_index(f"ix_{table_name}_name_key")
            batch_op.drop_column("name_key")
