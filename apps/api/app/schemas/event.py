"""Event API schemas."""

from datetime import datetime

from pydantic import BaseModel, Field


class EventPayload(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    description: str = Field(min_length=1)
    location: str = Field(min_length=1, max_length=200)
    date_time: datetime


class CreateEventRequest(EventPayload):
    pass


class UpdateEventRequest(EventPayload):
    pass


class Event(BaseModel):
    id: int
    name: str
    description: str
    location: str
    date_time: datetime
    user_id: int
    created_at: datetime


class Registration(BaseModel):
    event_id: int
    user_id: int
    created_at: datetime
