"""SQLAlchemy table definitions - dialect-agnostic (works with SQLite and PostgreSQL)."""

from sqlalchemy import (
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    MetaData,
    String,
    Table,
    UniqueConstraint,
)
from sqlalchemy.types import JSON

# Metadata object for all tables
metadata = MetaData()

# ============================================================================
# ACCOUNTS TABLE
# ============================================================================
accounts_table = Table(
    "accounts",
    metadata,
    Column("id", String, primary_key=True),  # UUID as string
    Column("display_name", String(255), nullable=True),
    Column("email", String(320), nullable=True),  # Linking hint, deliberately not unique
    Column("role", String(32), nullable=False),  # Role name: "standard", "administrator"
    Column("created_at", DateTime(timezone=True), nullable=False),
    Column("updated_at", DateTime(timezone=True), nullable=True),
)

Index("ix_accounts_email", accounts_table.c.email)


# ============================================================================
# ACCOUNT PROVIDERS TABLE (one row per linked provider identity)
# ============================================================================
account_providers_table = Table(
    "account_providers",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("account_id", String, ForeignKey("accounts.id", ondelete="CASCADE"), nullable=False),
    Column("provider", String(50), nullable=False),  # "github", "orcid"
    Column("external_id", String(255), nullable=False),
    Column("created_at", DateTime(timezone=True), nullable=False),
    UniqueConstraint("provider", "external_id", name="uq_account_provider_external"),
)

Index("ix_account_providers_account_id", account_providers_table.c.account_id)


# ============================================================================
# FLOW SESSIONS TABLE (in-flight login attempts)
# ============================================================================
flow_sessions_table = Table(
    "flow_sessions",
    metadata,
    Column("key", String(64), primary_key=True),
    Column("state", JSON, nullable=True),  # {"csrf_token", "return_to", "phase"}
    Column("created_at", DateTime(timezone=True), nullable=False),
    Column("expires_at", DateTime(timezone=True), nullable=False),
)

Index("ix_flow_sessions_expires_at", flow_sessions_table.c.expires_at)
