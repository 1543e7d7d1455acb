from __future__ import annotations

from typing import List, Optional
from pydantic import BaseModel, Field


class HeritageOut(BaseModel):
    id: str
    name: str
    body: int
    stamina: int
    secondary_skills: List[str] = Field(default_factory=list)
    description: str = ""


class CultureOut(BaseModel):
    id: str
    name: str
    heritage_id: str


class ArchetypeOut(BaseModel):
    id: str
    name: str
    primary_skills: List[str] = Field(default_factory=list)
    secondary_skills: List[str] = Field(default_factory=list)
    description: str = ""


class SkillsOut(BaseModel):
    items: List[str]
    total: int


class SkillValidateIn(BaseModel):
    skills: List[str] = Field(min_length=1)


class SkillValidateOut(BaseModel):
    valid: bool
    invalid: List[str] = Field(default_factory=list)


class SkillCostQuoteOut(BaseModel):
    skill: str
    cost: int
    tier: str
    heritage_id: Optional[str] = None
    primary_archetype_id: Optional[str] = None
    secondary_archetype_id: Optional[str] = None
