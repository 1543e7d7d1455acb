from __future__ import annotations

from typing import Optional
from sqlmodel import SQLModel, Field


class Event(SQLModel, table=True):
    __tablename__ = "events"

    id: str = Field(primary_key=True)
    name: str
    description: Optional[str] = Field(default=None)
    event_date: str
    location: Optional[str] = Field(default=None)
    is_active: int = Field(default=1)
    created_by: Optional[str] = Field(default=None)
    created_at: str


class EventRsvp(SQLModel, table=True):
    __tablename__ = "event_rsvps"

    id: str = Field(primary_key=True)
    event_id: str = Field(foreign_key="events.id", index=True)
    character_id: str = Field(foreign_key="characters.id", index=True)
    xp_purchases: int = Field(default=0)  # 0..2
    xp_candle_purchases: int = Field(default=0)  # 0..2
    attended: Optional[int] = Field(default=None)  # NULL until marked
    user_id: Optional[str] = Field(default=None)
    created_at: str
    updated_at: str
