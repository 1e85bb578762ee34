"""ORM model registry — import all models so Alembic autogenerate discovers them."""

from election_cycle.models.account import Account
from election_cycle.models.election import ElectionEvent, ElectionRecord
from election_cycle.models.nomination import Nomination, NomineeProfile
from election_cycle.models.voter_registration import VoterRegistration

__all__ = [
    "Account",
    "ElectionEvent",
    "ElectionRecord",
    "Nomination",
    "NomineeProfile",
    "VoterRegistration",
]
