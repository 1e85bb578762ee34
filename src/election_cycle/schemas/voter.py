"""Voter registration Pydantic v2 schemas."""

from datetime import datetime

from pydantic import BaseModel


class VoterRegistrationResponse(BaseModel):
    """Registration state of one voter."""

    voter: str
    referrer: str
    treasury: str
    registered_at: datetime
    newly_registered: bool = False

    model_config = {"from_attributes": True}
