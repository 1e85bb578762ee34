"""Voter registration ORM model."""

from datetime import datetime

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from election_cycle.models.base import Base, UTCDateTime, utcnow


class VoterRegistration(Base):
    """Marks a voter as enrolled under ``referrer``'s treasury. Never mutated."""

    __tablename__ = "voter_registrations"

    voter: Mapped[str] = mapped_column(String(64), primary_key=True)
    referrer: Mapped[str] = mapped_column(String(64), primary_key=True)
    treasury: Mapped[str] = mapped_column(String(32), nullable=False)
    registered_at: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False, default=utcnow)
