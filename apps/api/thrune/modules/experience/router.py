from __future__ import annotations

from fastapi import APIRouter
from .schemas import (
    AttendanceXpOut,
    ExperienceEntryCreateIn,
    ExperienceEntryDeleteOut,
    ExperienceEntryOut,
    ExperienceEntryPatchIn,
    ExperienceListOut,
)
from .service import create_entry, delete_entry, list_entries, update_entry

router = APIRouter(tags=["experience"])


@router.get("/characters/{character_id}/experience", response_model=ExperienceListOut)
def api_list_experience(character_id: str) -> ExperienceListOut:
    items = list_entries(character_id)
    awarded = sum(i["amount"] for i in items if i["amount"] > 0)
    spent = -sum(i["amount"] for i in items if i["amount"] < 0)
    return ExperienceListOut(items=items, total_awarded=awarded, total_spent=spent)


@router.post("/characters/{character_id}/experience", response_model=ExperienceEntryOut, status_code=201)
def api_create_experience(character_id: str, body: ExperienceEntryCreateIn) -> ExperienceEntryOut:
    return create_entry(
        character_id=character_id,
        amount=body.amount,
        reason=body.reason,
        event_id=body.event_id,
        awarded_by=body.awarded_by,
    )


@router.get("/characters/{character_id}/attendance_xp", response_model=AttendanceXpOut)
def api_attendance_xp(character_id: str) -> AttendanceXpOut:
    items = list_entries(character_id, only_events=True)
    events = {i["event_id"] for i in items if i["amount"] > 0}
    return AttendanceXpOut(items=items, events_attended=len(events), total_xp=sum(i["amount"] for i in items))


@router.patch("/experience/{entry_id}", response_model=ExperienceEntryOut)
def api_patch_experience(entry_id: str, body: ExperienceEntryPatchIn) -> ExperienceEntryOut:
    return update_entry(entry_id, body.model_dump(exclude_unset=True))


@router.delete("/experience/{entry_id}", response_model=ExperienceEntryDeleteOut)
def api_delete_experience(entry_id: str) -> ExperienceEntryDeleteOut:
    return ExperienceEntryDeleteOut(**delete_entry(entry_id))
