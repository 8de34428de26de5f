"""Jobs

Revision ID: 0002
Revises: 0001
Create Date: 2026-10-18

Changes:
- jobs: new table
- profiles: Add pending_job_id (custom job whose onboarding is open)
- transactions: Add job_id
"""
from typing import Sequence, Union

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "0002"
down_revision: Union[str, None] = "0001"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create jobs and link profiles and transactions to them."""

    op.create_table(
        "jobs",
        sa.Column("tenant_id", sa.Integer(), nullable=False),
        sa.Column("id", sa.Integer(), autoincrement=False, nullable=False),
        sa.Column("uuid", sa.String(36), nullable=False),
        sa.Column("name", sa.String(120), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("rate", sa.Numeric(12, 2), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default="1"),
        sa.Column("is_custom", sa.Boolean(), nullable=False, server_default="0"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("deleted_at", sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("tenant_id", "id"),
        sa.ForeignKeyConstraint(["tenant_id"], ["tenants.id"], ondelete="CASCADE"),
        sa.UniqueConstraint("tenant_id", "uuid", name="uq_jobs_tenant_uuid"),
    )
    op.create_index("ix_jobs_tenant_id", "jobs", ["tenant_id"])
    op.create_index("ix_jobs_uuid", "jobs", ["uuid"])
    op.create_index("ix_jobs_tenant_name", "jobs", ["tenant_id", "name"])

    op.add_column("profiles", sa.Column("pending_job_id", sa.Integer(), nullable=True))

    op.add_column("transactions", sa.Column("job_id", sa.Integer(), nullable=True))
    op.create_index("ix_transactions_job", "transactions", ["tenant_id", "job_id"])


def downgrade() -> None:
    """Drop jobs and the columns referring to them."""
    op.drop_index("ix_transactions_job", table_name="transactions")
    op.drop_column("transactions", "job_id")
    op.drop_column("profiles", "pending_job_id")
    op.drop_table("jobs")
