"""Initial migration: accounts, election record, transition log, registry tables.

Revision ID: 001
Revises: None
Create Date: 2026-10-19
"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects.postgresql import JSONB, UUID

revision: str = "001"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None

_PHASES = (
    "uninitialized",
    "clean",
    "created",
    "nominating",
    "nominations_closed",
    "voting",
    "voting_concluded",
    "cleaning",
)


def _phase_column(name: str) -> sa.Column:
    return sa.Column(
        name,
        sa.Enum(*_PHASES, name="election_phase", native_enum=False, length=24),
        nullable=False,
    )


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    ]


def upgrade() -> None:
    op.create_table(
        "accounts",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("identity", sa.String(64), nullable=False),
        sa.Column("hashed_password", sa.String(255), nullable=False),
        sa.Column("role", sa.String(20), nullable=False),
        sa.Column("is_active", sa.Boolean, nullable=False, server_default="true"),
        sa.Column("last_login_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.CheckConstraint("role IN ('operator', 'member')", name="ck_account_role"),
    )
    op.create_index("ix_accounts_identity", "accounts", ["identity"], unique=True)

    op.create_table(
        "election_records",
        sa.Column("id", sa.Integer, primary_key=True),
        sa.Column("ballot_id", sa.Integer, nullable=False, server_default="0"),
        _phase_column("phase"),
        sa.Column("title", sa.Text, nullable=False, server_default=""),
        sa.Column("description", sa.Text, nullable=False, server_default=""),
        sa.Column("content", sa.Text, nullable=False, server_default=""),
        sa.Column("nomination_count", sa.SmallInteger, nullable=False, server_default="0"),
        sa.Column("pending_voters", JSONB, nullable=False, server_default=sa.text("'[]'::jsonb")),
        sa.Column("synced_voters", JSONB, nullable=False, server_default=sa.text("'[]'::jsonb")),
        sa.Column("nomination_open", sa.DateTime(timezone=True), nullable=True),
        sa.Column("nomination_close", sa.DateTime(timezone=True), nullable=True),
        sa.Column("voting_open", sa.DateTime(timezone=True), nullable=True),
        sa.Column("voting_close", sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint("id = 1", name="ck_election_record_singleton"),
        sa.CheckConstraint("nomination_count BETWEEN 0 AND 255", name="ck_election_nomination_count"),
    )

    op.create_table(
        "election_events",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("occurred_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("ballot_id", sa.Integer, nullable=False),
        _phase_column("from_phase"),
        _phase_column("to_phase"),
        sa.Column("actor", sa.String(64), nullable=True),
        sa.Column("detail", JSONB, nullable=True),
    )
    op.create_index("idx_election_events_occurred_at", "election_events", ["occurred_at"])
    op.create_index("idx_election_events_ballot_id", "election_events", ["ballot_id"])

    op.create_table(
        "nominations",
        sa.Column("nominee", sa.String(64), primary_key=True),
        sa.Column("nominator", sa.String(64), nullable=False),
        sa.Column("accepted", sa.Boolean, nullable=False, server_default="false"),
        *_timestamps(),
    )

    op.create_table(
        "nominee_profiles",
        sa.Column("owner", sa.String(64), primary_key=True),
        sa.Column("name", sa.String(99), nullable=False),
        sa.Column("descriptor", sa.Text, nullable=False, server_default=""),
        sa.Column("picture", sa.String(256), nullable=False, server_default=""),
        sa.Column("telegram", sa.String(99), nullable=False, server_default=""),
        sa.Column("twitter", sa.String(99), nullable=False, server_default=""),
        sa.Column("wechat", sa.String(99), nullable=False, server_default=""),
        *_timestamps(),
    )

    op.create_table(
        "voter_registrations",
        sa.Column("voter", sa.String(64), primary_key=True),
        sa.Column("referrer", sa.String(64), primary_key=True),
        sa.Column("treasury", sa.String(32), nullable=False),
        sa.Column("registered_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )


def downgrade() -> None:
    op.drop_table("voter_registrations")
    op.drop_table("nominee_profiles")
    op.drop_table("nominations")
    op.drop_index("idx_election_events_ballot_id", table_name="election_events")
    op.drop_index("idx_election_events_occurred_at", table_name="election_events")
    op.drop_table("election_events")
    op.drop_table("election_records")
    op.drop_index("ix_accounts_identity", table_name="accounts")
    op.drop_table("accounts")
