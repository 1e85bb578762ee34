"""Account model: the identities that may nominate, be nominated and vote."""

from datetime import datetime

from sqlalchemy import Boolean, CheckConstraint, String
from sqlalchemy.orm import Mapped, mapped_column

from election_cycle.models.base import Base, TimestampMixin, UTCDateTime, UUIDMixin


class Account(Base, UUIDMixin, TimestampMixin):
    """A verifiable identity with role-based access control."""

    __tablename__ = "accounts"

    identity: Mapped[str] = mapped_column(String(64), unique=True, nullable=False, index=True)
    hashed_password: Mapped[str] = mapped_column(String(255), nullable=False)
    role: Mapped[str] = mapped_column(String(20), nullable=False, default="member")
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True, server_default="true")
    last_login_at: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)

    __table_args__ = (CheckConstraint("role IN ('operator', 'member')", name="ck_account_role"),)
