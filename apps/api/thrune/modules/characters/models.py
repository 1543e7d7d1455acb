from __future__ import annotations

from typing import Optional
from sqlmodel import SQLModel, Field


class Character(SQLModel, table=True):
    __tablename__ = "characters"

    id: str = Field(primary_key=True)
    name: str
    player_name: str = Field(default="")
    user_id: Optional[str] = Field(default=None, index=True)

    heritage_id: str
    culture_id: str
    primary_archetype_id: str
    secondary_archetype_id: Optional[str] = Field(default=None)

    body: int
    stamina: int
    # JSON array; purchase order kept for display
    skills_json: str = Field(default="[]")

    # materialized from experience_entries on every ledger write
    experience: int = Field(default=0)
    total_xp_spent: int = Field(default=0)

    is_active: int = Field(default=1)
    is_retired: int = Field(default=0)
    retired_at: Optional[str] = Field(default=None)
    retirement_reason: Optional[str] = Field(default=None)

    created_at: str
    updated_at: str
