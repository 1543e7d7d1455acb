from __future__ import annotations

from typing import Optional
from sqlmodel import SQLModel, Field


# append-only in normal use; admin corrections may UPDATE/DELETE
class ExperienceEntry(SQLModel, table=True):
    __tablename__ = "experience_entries"

    id: str = Field(primary_key=True)
    character_id: str = Field(foreign_key="characters.id", index=True)
    amount: int  # signed: awards > 0, purchases/deductions < 0
    reason: str
    event_id: Optional[str] = Field(default=None, foreign_key="events.id", index=True)
    rsvp_id: Optional[str] = Field(default=None, foreign_key="event_rsvps.id", index=True)
    awarded_by: Optional[str] = Field(default=None)
    created_at: str
