from __future__ import annotations

from typing import List

from fastapi import APIRouter, Query
from .schemas import (
    AttendanceIn,
    AttendanceOut,
    EventCreateIn,
    EventDeleteOut,
    EventOut,
    EventPatchIn,
    EventsListOut,
    PageOut,
    RsvpCreateIn,
    RsvpDeleteOut,
    RsvpOut,
    RsvpPatchIn,
)
from .service import (
    create_event,
    create_rsvp,
    delete_event,
    delete_rsvp,
    get_event,
    get_rsvp,
    list_events,
    list_rsvps,
    mark_attendance,
    patch_event,
    patch_rsvp,
)

router = APIRouter(tags=["events"])


def _clamp_limit(raw: int | None) -> int:
    if raw is None:
        return 50
    try:
        v = int(raw)
    except Exception:
        return 50
    return min(max(v, 1), 200)


def _clamp_offset(raw: int | None) -> int:
    if raw is None:
        return 0
    try:
        v = int(raw)
    except Exception:
        return 0
    return max(v, 0)


@router.get("/events", response_model=EventsListOut)
def api_list_events(
    limit: int | None = Query(None),
    offset: int | None = Query(None),
    include_inactive: bool = Query(False),
) -> EventsListOut:
    lim = _clamp_limit(limit)
    off = _clamp_offset(offset)
    items, total = list_events(limit=lim, offset=off, include_inactive=include_inactive)
    return EventsListOut(items=items, page=PageOut(offset=off, limit=lim, total=total, has_more=(off + lim) < total))


@router.post("/events", response_model=EventOut, status_code=201)
def api_create_event(body: EventCreateIn) -> EventOut:
    return create_event(body.model_dump())


@router.get("/events/{event_id}", response_model=EventOut)
def api_get_event(event_id: str) -> EventOut:
    return get_event(event_id)


@router.patch("/events/{event_id}", response_model=EventOut)
def api_patch_event(event_id: str, body: EventPatchIn) -> EventOut:
    return patch_event(event_id, body.model_dump(exclude_unset=True))


@router.delete("/events/{event_id}", response_model=EventDeleteOut)
def api_delete_event(event_id: str) -> EventDeleteOut:
    return EventDeleteOut(**delete_event(event_id))


@router.get("/events/{event_id}/rsvps", response_model=List[RsvpOut])
def api_list_rsvps(event_id: str) -> List[RsvpOut]:
    return list_rsvps(event_id)


@router.post("/events/{event_id}/rsvps", response_model=RsvpOut, status_code=201)
def api_create_rsvp(event_id: str, body: RsvpCreateIn) -> RsvpOut:
    return create_rsvp(
        event_id=event_id,
        character_id=body.character_id,
        xp_purchases=body.xp_purchases,
        xp_candle_purchases=body.xp_candle_purchases,
        user_id=body.user_id,
    )


@router.get("/rsvps/{rsvp_id}", response_model=RsvpOut)
def api_get_rsvp(rsvp_id: str) -> RsvpOut:
    return get_rsvp(rsvp_id)


@router.patch("/rsvps/{rsvp_id}", response_model=RsvpOut)
def api_patch_rsvp(rsvp_id: str, body: RsvpPatchIn) -> RsvpOut:
    return patch_rsvp(rsvp_id, body.model_dump(exclude_unset=True))


@router.delete("/rsvps/{rsvp_id}", response_model=RsvpDeleteOut)
def api_delete_rsvp(rsvp_id: str) -> RsvpDeleteOut:
    return RsvpDeleteOut(**delete_rsvp(rsvp_id))


@router.post("/rsvps/{rsvp_id}/attendance", response_model=AttendanceOut)
def api_mark_attendance(rsvp_id: str, body: AttendanceIn) -> AttendanceOut:
    return AttendanceOut(**mark_attendance(rsvp_id, body.attended, awarded_by=body.awarded_by))
