from __future__ import annotations

from typing import List, Optional
from pydantic import BaseModel, Field


class EventRefOut(BaseModel):
    id: Optional[str] = None
    name: Optional[str] = None
    event_date: Optional[str] = None


class ExperienceEntryCreateIn(BaseModel):
    amount: int  # signed; negative = documented deduction
    reason: str = Field(min_length=1)
    event_id: Optional[str] = None
    awarded_by: Optional[str] = None


class ExperienceEntryPatchIn(BaseModel):
    amount: Optional[int] = None
    reason: Optional[str] = None


class ExperienceEntryOut(BaseModel):
    id: str
    character_id: str
    amount: int
    reason: str
    event_id: Optional[str] = None
    rsvp_id: Optional[str] = None
    awarded_by: Optional[str] = None
    created_at: Optional[str] = None
    event: Optional[EventRefOut] = None


class ExperienceListOut(BaseModel):
    items: List[ExperienceEntryOut]
    total_awarded: int = 0
    total_spent: int = 0


class ExperienceEntryDeleteOut(BaseModel):
    id: str
    character_id: str
    experience: int
    total_xp_spent: int


class AttendanceXpOut(BaseModel):
    items: List[ExperienceEntryOut]
    events_attended: int = 0
    total_xp: int = 0
