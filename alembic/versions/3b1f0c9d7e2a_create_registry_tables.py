"""create credential registry tables

Revision ID: 3b1f0c9d7e2a
Revises:
Create Date: 2026-10-19 00:00:00.000000

"""

from collections.abc import Sequence

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "3b1f0c9d7e2a"
down_revision: str | Sequence[str] | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    op.create_table(
        "credential_types",
        sa.Column("id", sa.String(length=66), primary_key=True),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("creator", sa.String(length=42), nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
    )
    op.create_table(
        "credential_records",
        sa.Column("seq", sa.BigInteger(), primary_key=True, autoincrement=True),
        sa.Column("owner", sa.String(length=42), nullable=False),
        sa.Column(
            "type_id",
            sa.String(length=66),
            sa.ForeignKey("credential_types.id"),
            nullable=False,
        ),
        sa.Column("metadata_hash", sa.String(length=66), nullable=False),
        sa.Column("issuer", sa.String(length=42), nullable=False),
    )
    op.create_index(
        "ix_credential_records_owner", "credential_records", ["owner"]
    )


def downgrade() -> None:
    op.drop_index("ix_credential_records_owner", table_name="credential_records")
    op.drop_table("credential_records")
    op.drop_table("credential_types")
