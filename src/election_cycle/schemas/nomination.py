"""Nomination and nominee profile Pydantic v2 schemas."""

from datetime import datetime

from pydantic import BaseModel, Field


class NominationRequest(BaseModel):
    """Nominate an identity (possibly the caller)."""

    nominee: str = Field(min_length=1, max_length=64)


class NominationDecisionRequest(BaseModel):
    """Accept or decline the caller's own nomination."""

    accept: bool


class NominationResponse(BaseModel):
    """A nomination in the registry."""

    nominee: str
    nominator: str
    accepted: bool
    created_at: datetime

    model_config = {"from_attributes": True}


class NomineeProfileRequest(BaseModel):
    """Profile fields; lengths are enforced by the profile service."""

    name: str
    descriptor: str = ""
    picture: str = ""
    telegram: str = ""
    twitter: str = ""
    wechat: str = ""


class NomineeProfileResponse(BaseModel):
    """Published nominee profile."""

    owner: str
    name: str
    descriptor: str
    picture: str
    telegram: str
    twitter: str
    wechat: str
    updated_at: datetime

    model_config = {"from_attributes": True}
