"""Nomination registry and nominee profile ORM models."""

from sqlalchemy import Boolean, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from election_cycle.models.base import Base, TimestampMixin


class Nomination(Base, TimestampMixin):
    """A candidacy for the current cycle, keyed by nominee."""

    __tablename__ = "nominations"

    nominee: Mapped[str] = mapped_column(String(64), primary_key=True)
    nominator: Mapped[str] = mapped_column(String(64), nullable=False)
    accepted: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, server_default="false")


class NomineeProfile(Base, TimestampMixin):
    """Public-facing details an accepted nominee chose to publish."""

    __tablename__ = "nominee_profiles"

    owner: Mapped[str] = mapped_column(String(64), primary_key=True)
    name: Mapped[str] = mapped_column(String(99), nullable=False)
    descriptor: Mapped[str] = mapped_column(Text, nullable=False, default="")
    picture: Mapped[str] = mapped_column(String(256), nullable=False, default="")
    telegram: Mapped[str] = mapped_column(String(99), nullable=False, default="")
    twitter: Mapped[str] = mapped_column(String(99), nullable=False, default="")
    wechat: Mapped[str] = mapped_column(String(99), nullable=False, default="")
