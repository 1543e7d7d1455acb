from __future__ import annotations

from typing import List, Optional
from pydantic import BaseModel, Field


class PageOut(BaseModel):
    offset: int
    limit: int
    total: int
    has_more: bool


class EventCreateIn(BaseModel):
    name: str = Field(min_length=1)
    description: Optional[str] = None
    event_date: str = Field(min_length=1)  # ISO date or datetime
    location: Optional[str] = None
    is_active: bool = True
    created_by: Optional[str] = None


class EventPatchIn(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    event_date: Optional[str] = None
    location: Optional[str] = None
    is_active: Optional[bool] = None


class EventOut(BaseModel):
    id: str
    name: str
    description: Optional[str] = None
    event_date: str
    location: Optional[str] = None
    is_active: bool = True
    created_by: Optional[str] = None
    created_at: Optional[str] = None
    rsvp_count: int = 0


class EventsListOut(BaseModel):
    items: List[EventOut]
    page: PageOut


class EventDeleteOut(BaseModel):
    id: str
    deleted: bool = True
    rsvps_removed: int = 0


class RsvpCreateIn(BaseModel):
    character_id: str = Field(min_length=1)
    xp_purchases: int = Field(default=0, ge=0, le=2)
    xp_candle_purchases: int = Field(default=0, ge=0, le=2)
    user_id: Optional[str] = None


class RsvpPatchIn(BaseModel):
    xp_purchases: Optional[int] = Field(default=None, ge=0, le=2)
    xp_candle_purchases: Optional[int] = Field(default=None, ge=0, le=2)


class AttendanceIn(BaseModel):
    attended: bool
    awarded_by: Optional[str] = None


class RsvpOut(BaseModel):
    id: str
    event_id: str
    character_id: str
    character_name: Optional[str] = None
    xp_purchases: int = 0
    xp_candle_purchases: int = 0
    attended: Optional[bool] = None
    user_id: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


class AttendanceOut(BaseModel):
    rsvp: RsvpOut
    xp_awarded: int = 0
    entry_id: Optional[str] = None
    experience: int = 0
    total_xp_spent: int = 0


class RsvpDeleteOut(BaseModel):
    id: str
    deleted: bool = True
    entries_removed: int = 0
