from pydantic import AwareDatetime, BaseModel, Field, field_validator, model_validator
from typing import Optional, List

from app.core.datetime_utils import timestamptz_to_zoned_datetime


class Group(BaseModel):
    id: Optional[int] = None
    title: str
    description: Optional[str] = ""


class GroupPair(BaseModel):
    group_a: Group = Field(alias="groupA")
    group_b: Group = Field(alias="groupB")

    class Config:
        populate_by_name = True

    def group_ids(self) -> List[int]:
        return [g.id for g in (self.group_a, self.group_b) if g.id is not None]


class EventCreate(BaseModel):
    title: str = Field(min_length=1)
    description: Optional[str] = ""
    header_image: Optional[str] = None
    datetime: AwareDatetime
    location: str
    max_participants: int = Field(gt=0)
    uses_groups: bool = False
    event_groups: Optional[GroupPair] = None

    @model_validator(mode="after")
    def require_groups_when_used(self):
        if self.uses_groups and not self.event_groups:
            raise ValueError("Event is indicated to use groups, but no groups were provided")
        return self


class EventResponse(BaseModel):
    id: int
    organizer: Optional[str] = None
    title: str
    description: Optional[str] = None
    header_image: Optional[str] = None
    datetime: AwareDatetime
    location: Optional[str] = None
    max_participants: Optional[int] = None
    event_groups: Optional[GroupPair] = None
    is_ended: bool = False
    is_cancelled: bool = False

    class Config:
        from_attributes = True
        populate_by_name = True

    @field_validator("datetime", mode="after")
    @classmethod
    def to_display_zone(cls, value):
        return timestamptz_to_zoned_datetime(value)

    @property
    def uses_groups(self) -> bool:
        return self.event_groups is not None


class EventCreateResponse(BaseModel):
    message: str
    event_id: Optional[int] = None
    header_image: Optional[str] = None


class RegistrationCreate(BaseModel):
    group_id: Optional[int] = None


class EventRegistrationResponse(BaseModel):
    id: int
    user_id: str
    event_id: int
    group_id: Optional[int] = None
    present: bool = False

    class Config:
        from_attributes = True


class RegistrationStatusResponse(BaseModel):
    event_id: int
    is_registered: bool
