"""Initial schema for PayHub

Revision ID: 0001
Revises:
Create Date: 2026-10-18

Creates all tables for:
- Tenants (tenants, tenant_companies, beneficial_owners)
- Profiles (profiles, funding_sources)
- Transactions (transactions)
- Documents (documents)
"""
from typing import Sequence, Union

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "0001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _tenant_key_columns() -> list[sa.Column]:
    return [
        sa.Column("tenant_id", sa.Integer(), nullable=False),
        sa.Column("id", sa.Integer(), autoincrement=False, nullable=False),
        sa.Column("uuid", sa.String(36), nullable=False),
    ]


def _timestamp_columns(soft_delete: bool = True) -> list[sa.Column]:
    columns = [
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    ]
    if soft_delete:
        columns.append(sa.Column("deleted_at", sa.DateTime(timezone=True), nullable=True))
    return columns


def _tenant_key_indexes(table: str) -> None:
    op.create_index(f"ix_{table}_tenant_id", table, ["tenant_id"])
    op.create_index(f"ix_{table}_uuid", table, ["uuid"])


def upgrade() -> None:
    """Create all tables."""

    # tenants - top-level organization
    op.create_table(
        "tenants",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("uuid", sa.String(36), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default="1"),
        *_timestamp_columns(soft_delete=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("uuid"),
    )

    # tenant_companies - business identity submitted to Dwolla
    op.create_table(
        "tenant_companies",
        *_tenant_key_columns(),
        sa.Column("first_name", sa.String(120), nullable=False),
        sa.Column("last_name", sa.String(120), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("phone", sa.String(50), nullable=True),
        sa.Column("address1", sa.String(50), nullable=False),
        sa.Column("address2", sa.String(50), nullable=True),
        sa.Column("city", sa.String(120), nullable=False),
        sa.Column("state", sa.String(2), nullable=False),
        sa.Column("postal_code", sa.String(20), nullable=False),
        sa.Column("country", sa.String(2), nullable=False, server_default="US"),
        sa.Column("business_name", sa.String(255), nullable=False),
        sa.Column("doing_business_as", sa.String(255), nullable=True),
        sa.Column("business_type", sa.String(50), nullable=False),
        sa.Column("business_classification", sa.String(64), nullable=False),
        sa.Column("website", sa.String(255), nullable=True),
        sa.Column("controller_first_name", sa.String(120), nullable=True),
        sa.Column("controller_last_name", sa.String(120), nullable=True),
        sa.Column("controller_title", sa.String(120), nullable=True),
        sa.Column("dwolla_uri", sa.String(255), nullable=True),
        sa.Column("dwolla_status", sa.String(50), nullable=True),
        sa.Column("dwolla_type", sa.String(50), nullable=True),
        *_timestamp_columns(),
        sa.PrimaryKeyConstraint("tenant_id", "id"),
        sa.ForeignKeyConstraint(["tenant_id"], ["tenants.id"], ondelete="CASCADE"),
        sa.UniqueConstraint("tenant_id", "uuid", name="uq_tenant_companies_tenant_uuid"),
        sa.UniqueConstraint("tenant_id", name="uq_tenant_companies_tenant"),
    )
    _tenant_key_indexes("tenant_companies")
    op.create_index("ix_tenant_companies_dwolla_uri", "tenant_companies", ["dwolla_uri"])

    # beneficial_owners - controlling parties of a tenant company
    op.create_table(
        "beneficial_owners",
        *_tenant_key_columns(),
        sa.Column("company_id", sa.Integer(), nullable=False),
        sa.Column("first_name", sa.String(120), nullable=False),
        sa.Column("last_name", sa.String(120), nullable=False),
        sa.Column("title", sa.String(120), nullable=True),
        sa.Column("address1", sa.String(50), nullable=False),
        sa.Column("address2", sa.String(50), nullable=True),
        sa.Column("city", sa.String(120), nullable=False),
        sa.Column("state_province_region", sa.String(50), nullable=False),
        sa.Column("postal_code", sa.String(20), nullable=True),
        sa.Column("country", sa.String(2), nullable=False),
        sa.Column("dwolla_uri", sa.String(255), nullable=True),
        sa.Column("verification_status", sa.String(50), nullable=True),
        *_timestamp_columns(),
        sa.PrimaryKeyConstraint("tenant_id", "id"),
        sa.ForeignKeyConstraint(["tenant_id"], ["tenants.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(
            ["tenant_id", "company_id"],
            ["tenant_companies.tenant_id", "tenant_companies.id"],
            ondelete="CASCADE",
        ),
        sa.UniqueConstraint("tenant_id", "uuid", name="uq_beneficial_owners_tenant_uuid"),
    )
    _tenant_key_indexes("beneficial_owners")
    op.create_index("ix_beneficial_owners_company", "beneficial_owners", ["tenant_id", "company_id"])
    op.create_index("ix_beneficial_owners_dwolla_uri", "beneficial_owners", ["dwolla_uri"])

    # profiles - contractors
    op.create_table(
        "profiles",
        *_tenant_key_columns(),
        sa.Column("first_name", sa.String(120), nullable=False),
        sa.Column("last_name", sa.String(120), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("phone", sa.String(50), nullable=True),
        sa.Column("business_name", sa.String(255), nullable=True),
        sa.Column("address1", sa.String(50), nullable=True),
        sa.Column("address2", sa.String(50), nullable=True),
        sa.Column("city", sa.String(120), nullable=True),
        sa.Column("state", sa.String(2), nullable=True),
        sa.Column("postal_code", sa.String(20), nullable=True),
        sa.Column("country", sa.String(2), nullable=True),
        sa.Column(
            "status",
            sa.Enum("INVITED", "PROFILE", "BANK", "DOCUMENT", "ACTIVE", "JOB", name="profilestatus"),
            nullable=False,
            server_default="INVITED",
        ),
        sa.Column("payments_uri", sa.String(255), nullable=True),
        sa.Column("payments_status", sa.String(50), nullable=True),
        sa.Column("payments_type", sa.String(50), nullable=True),
        *_timestamp_columns(),
        sa.PrimaryKeyConstraint("tenant_id", "id"),
        sa.ForeignKeyConstraint(["tenant_id"], ["tenants.id"], ondelete="CASCADE"),
        sa.UniqueConstraint("tenant_id", "uuid", name="uq_profiles_tenant_uuid"),
    )
    _tenant_key_indexes("profiles")
    op.create_index("ix_profiles_tenant_email", "profiles", ["tenant_id", "email"], unique=True)
    op.create_index("ix_profiles_status", "profiles", ["tenant_id", "status"])
    op.create_index("ix_profiles_payments_uri", "profiles", ["payments_uri"])

    # funding_sources - contractor bank accounts
    op.create_table(
        "funding_sources",
        *_tenant_key_columns(),
        sa.Column("profile_id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(50), nullable=False),
        sa.Column("bank_account_type", sa.String(20), nullable=False),
        sa.Column("account_last4", sa.String(4), nullable=True),
        sa.Column("dwolla_uri", sa.String(255), nullable=False),
        sa.Column("dwolla_status", sa.String(50), nullable=True),
        *_timestamp_columns(),
        sa.PrimaryKeyConstraint("tenant_id", "id"),
        sa.ForeignKeyConstraint(["tenant_id"], ["tenants.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(
            ["tenant_id", "profile_id"],
            ["profiles.tenant_id", "profiles.id"],
            ondelete="CASCADE",
        ),
        sa.UniqueConstraint("tenant_id", "uuid", name="uq_funding_sources_tenant_uuid"),
    )
    _tenant_key_indexes("funding_sources")
    op.create_index("ix_funding_sources_profile", "funding_sources", ["tenant_id", "profile_id"])

    # transactions - payments to contractors, never deleted
    op.create_table(
        "transactions",
        *_tenant_key_columns(),
        sa.Column("profile_id", sa.Integer(), nullable=False),
        sa.Column("funding_source_id", sa.Integer(), nullable=False),
        sa.Column("amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("currency", sa.String(3), nullable=False, server_default="USD"),
        sa.Column("description", sa.String(255), nullable=True),
        sa.Column("external_id", sa.String(255), nullable=False),
        sa.Column(
            "status",
            sa.Enum("PENDING", "COMPLETED", "CANCELLED", "FAILED", "RECLAIMED", name="transferstatus"),
            nullable=False,
            server_default="PENDING",
        ),
        *_timestamp_columns(soft_delete=False),
        sa.PrimaryKeyConstraint("tenant_id", "id"),
        sa.ForeignKeyConstraint(["tenant_id"], ["tenants.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(
            ["tenant_id", "profile_id"],
            ["profiles.tenant_id", "profiles.id"],
        ),
        sa.UniqueConstraint("tenant_id", "uuid", name="uq_transactions_tenant_uuid"),
        sa.UniqueConstraint("external_id", name="uq_transactions_external_id"),
    )
    _tenant_key_indexes("transactions")
    op.create_index("ix_transactions_profile", "transactions", ["tenant_id", "profile_id"])
    op.create_index("ix_transactions_status", "transactions", ["tenant_id", "status"])

    # documents - verification documents and their blobs
    op.create_table(
        "documents",
        *_tenant_key_columns(),
        sa.Column("owner_type", sa.Enum("COMPANY", "OWNER", "PROFILE", name="documentownertype"), nullable=False),
        sa.Column("owner_id", sa.Integer(), nullable=False),
        sa.Column(
            "document_type",
            sa.Enum("PASSPORT", "LICENSE", "ID_CARD", "OTHER", name="documenttype"),
            nullable=False,
        ),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("ext", sa.String(20), nullable=False, server_default=""),
        sa.Column("content_type", sa.String(100), nullable=True),
        sa.Column("size", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("storage_key", sa.String(500), nullable=False),
        sa.Column("dwolla_uri", sa.String(255), nullable=True),
        sa.Column(
            "verification_status",
            sa.Enum("PENDING", "REVIEWED", "APPROVED", "FAILED", name="documentverificationstatus"),
            nullable=False,
            server_default="PENDING",
        ),
        sa.Column("failure_reason", sa.Text(), nullable=True),
        *_timestamp_columns(),
        sa.PrimaryKeyConstraint("tenant_id", "id"),
        sa.ForeignKeyConstraint(["tenant_id"], ["tenants.id"], ondelete="CASCADE"),
        sa.UniqueConstraint("tenant_id", "uuid", name="uq_documents_tenant_uuid"),
    )
    _tenant_key_indexes("documents")
    op.create_index("ix_documents_owner", "documents", ["tenant_id", "owner_type", "owner_id"])
    op.create_index("ix_documents_dwolla_uri", "documents", ["dwolla_uri"])


def downgrade() -> None:
    """Drop all tables."""
    op.drop_table("documents")
    op.drop_table("transactions")
    op.drop_table("funding_sources")
    op.drop_table("profiles")
    op.drop_table("beneficial_owners")
    op.drop_table("tenant_companies")
    op.drop_table("tenants")
