from __future__ import annotations

import sqlite3
from typing import Any, Dict, List, Optional, Tuple

from fastapi import HTTPException

from thrune.core.db import connect, insert_row, now_iso
from thrune.modules.experience.service import append_entry, refresh_totals
from thrune.rules.ledger import (
    MAX_CANDLE_PURCHASES_PER_EVENT,
    MAX_XP_PURCHASES_PER_EVENT,
    attendance_reason,
    event_attendance_xp,
)


def _not_found(what: str) -> HTTPException:
    return HTTPException(status_code=404, detail={"error": "not_found", "message": f"{what} not found"})


def _internal_error(e: Exception) -> HTTPException:
    return HTTPException(
        status_code=500,
        detail={"error": "internal_error", "message": "internal server error", "details": {"type": type(e).__name__}},
    )


def _check_purchases(xp_purchases: int, candle_purchases: int) -> None:
    if not (0 <= xp_purchases <= MAX_XP_PURCHASES_PER_EVENT) or not (0 <= candle_purchases <= MAX_CANDLE_PURCHASES_PER_EVENT):
        raise HTTPException(
            status_code=400,
            detail={
                "error": "bad_request",
                "message": "purchases per event are limited",
                "details": {
                    "xp_purchases_max": MAX_XP_PURCHASES_PER_EVENT,
                    "xp_candle_purchases_max": MAX_CANDLE_PURCHASES_PER_EVENT,
                },
            },
        )


# -------------------------
# Events
# -------------------------
def _row_to_event(row: sqlite3.Row) -> Dict[str, Any]:
    d = dict(row)
    d["is_active"] = bool(d.get("is_active"))
    d["rsvp_count"] = int(d.get("rsvp_count") or 0)
    return d


_EVENT_SELECT = (
    "SELECT ev.*, (SELECT COUNT(1) FROM event_rsvps r WHERE r.event_id = ev.id) AS rsvp_count FROM events ev "
)


def list_events(limit: int, offset: int, include_inactive: bool = False) -> Tuple[List[Dict[str, Any]], int]:
    conn = connect()
    try:
        clause = "" if include_inactive else "WHERE ev.is_active=1 "
        total = int(conn.execute(f"SELECT COUNT(1) AS n FROM events ev {clause};").fetchone()["n"])
        rows = conn.execute(
            f"{_EVENT_SELECT}{clause}ORDER BY ev.event_date DESC, ev.rowid DESC LIMIT ? OFFSET ?;",
            (limit, offset),
        ).fetchall()
        return [_row_to_event(r) for r in rows], total
    finally:
        conn.close()


def get_event(event_id: str) -> Dict[str, Any]:
    conn = connect()
    try:
        row = conn.execute(f"{_EVENT_SELECT}WHERE ev.id=?;", (event_id,)).fetchone()
        if not row:
            raise _not_found("event")
        return _row_to_event(row)
    finally:
        conn.close()


def create_event(data: Dict[str, Any]) -> Dict[str, Any]:
    conn = connect()
    try:
        event_id = insert_row(
            conn,
            "events",
            {
                "name": data["name"].strip(),
                "description": data.get("description"),
                "event_date": data["event_date"],
                "location": data.get("location"),
                "is_active": 1 if data.get("is_active", True) else 0,
                "created_by": data.get("created_by"),
                "created_at": now_iso(),
            },
        )
        conn.commit()
    finally:
        conn.close()
    return get_event(event_id)


def patch_event(event_id: str, patch: Dict[str, Any]) -> Dict[str, Any]:
    sets: List[str] = []
    args: List[Any] = []
    for col in ("name", "event_date"):
        if patch.get(col) is not None:
            if not str(patch[col]).strip():
                raise HTTPException(status_code=400, detail={"error": "bad_request", "message": f"{col} may not be empty"})
            sets.append(f"{col}=?")
            args.append(str(patch[col]).strip())
    for col in ("description", "location"):
        if col in patch:
            sets.append(f"{col}=?")
            args.append(patch[col])
    if patch.get("is_active") is not None:
        sets.append("is_active=?")
        args.append(1 if patch["is_active"] else 0)

    conn = connect()
    try:
        if not conn.execute("SELECT id FROM events WHERE id=?;", (event_id,)).fetchone():
            raise _not_found("event")
        if sets:
            args.append(event_id)
            conn.execute(f"UPDATE events SET {', '.join(sets)} WHERE id=?;", args)
            conn.commit()
    finally:
        conn.close()
    return get_event(event_id)


def delete_event(event_id: str) -> Dict[str, Any]:
    conn = connect()
    try:
        conn.execute("BEGIN IMMEDIATE;")
        if not conn.execute("SELECT id FROM events WHERE id=?;", (event_id,)).fetchone():
            raise _not_found("event")
        linked = int(
            conn.execute("SELECT COUNT(1) AS n FROM experience_entries WHERE event_id=?;", (event_id,)).fetchone()["n"]
        )
        if linked:
            raise HTTPException(
                status_code=409,
                detail={
                    "error": "event_has_experience",
                    "message": "event has awarded experience; mark attendees absent first",
                    "details": {"experience_entries": linked},
                },
            )
        rsvps = conn.execute("DELETE FROM event_rsvps WHERE event_id=?;", (event_id,)).rowcount
        conn.execute("DELETE FROM events WHERE id=?;", (event_id,))
        conn.commit()
        return {"id": event_id, "deleted": True, "rsvps_removed": rsvps}
    except HTTPException:
        conn.rollback()
        raise
    except Exception as e:
        conn.rollback()
        raise _internal_error(e)
    finally:
        conn.close()


# -------------------------
# RSVPs
# -------------------------
def _row_to_rsvp(row: sqlite3.Row) -> Dict[str, Any]:
    d = dict(row)
    d["attended"] = None if d.get("attended") is None else bool(d["attended"])
    return d


_RSVP_SELECT = "SELECT r.*, c.name AS character_name FROM event_rsvps r LEFT JOIN characters c ON c.id = r.character_id "


def _load_rsvp(conn: sqlite3.Connection, rsvp_id: str) -> sqlite3.Row:
    row = conn.execute(f"{_RSVP_SELECT}WHERE r.id=?;", (rsvp_id,)).fetchone()
    if not row:
        raise _not_found("rsvp")
    return row


def get_rsvp(rsvp_id: str) -> Dict[str, Any]:
    conn = connect()
    try:
        return _row_to_rsvp(_load_rsvp(conn, rsvp_id))
    finally:
        conn.close()


def list_rsvps(event_id: str) -> List[Dict[str, Any]]:
    conn = connect()
    try:
        if not conn.execute("SELECT id FROM events WHERE id=?;", (event_id,)).fetchone():
            raise _not_found("event")
        rows = conn.execute(f"{_RSVP_SELECT}WHERE r.event_id=? ORDER BY r.created_at ASC, r.rowid ASC;", (event_id,)).fetchall()
        return [_row_to_rsvp(r) for r in rows]
    finally:
        conn.close()


def create_rsvp(
    event_id: str,
    character_id: str,
    xp_purchases: int = 0,
    xp_candle_purchases: int = 0,
    user_id: Optional[str] = None,
) -> Dict[str, Any]:
    _check_purchases(xp_purchases, xp_candle_purchases)
    conn = connect()
    try:
        conn.execute("BEGIN IMMEDIATE;")
        if not conn.execute("SELECT id FROM events WHERE id=?;", (event_id,)).fetchone():
            raise _not_found("event")
        if not conn.execute("SELECT id FROM characters WHERE id=?;", (character_id,)).fetchone():
            raise _not_found("character")
        dup = conn.execute(
            "SELECT id FROM event_rsvps WHERE event_id=? AND character_id=?;", (event_id, character_id)
        ).fetchone()
        if dup:
            raise HTTPException(
                status_code=409,
                detail={"error": "rsvp_exists", "message": "character already has an rsvp for this event", "details": {"rsvp_id": dup["id"]}},
            )
        ts = now_iso()
        rsvp_id = insert_row(
            conn,
            "event_rsvps",
            {
                "event_id": event_id,
                "character_id": character_id,
                "xp_purchases": xp_purchases,
                "xp_candle_purchases": xp_candle_purchases,
                "attended": None,
                "user_id": user_id,
                "created_at": ts,
                "updated_at": ts,
            },
        )
        conn.commit()
    except HTTPException:
        conn.rollback()
        raise
    except Exception as e:
        conn.rollback()
        raise _internal_error(e)
    finally:
        conn.close()
    return get_rsvp(rsvp_id)


def _sync_attendance_award(conn: sqlite3.Connection, rsvp: sqlite3.Row, awarded_by: Optional[str]) -> Tuple[int, Optional[str]]:
    """
    Make the RSVP-linked ledger award match the RSVP's current state.

    Returns (xp awarded, entry id). An absent or unmarked RSVP carries no award.
    """
    existing = conn.execute(
        "SELECT id, amount, reason FROM experience_entries WHERE rsvp_id=? ORDER BY rowid ASC;", (rsvp["id"],)
    ).fetchall()

    if not rsvp["attended"]:
        if existing:
            conn.execute("DELETE FROM experience_entries WHERE rsvp_id=?;", (rsvp["id"],))
        return 0, None

    # position of this event among the character's attended events, by event date
    attended = int(
        conn.execute(
            "SELECT COUNT(1) AS n FROM event_rsvps r JOIN events ev ON ev.id = r.event_id "
            "JOIN events cur ON cur.id = ? "
            "WHERE r.character_id=? AND r.attended=1 "
            "AND (ev.event_date < cur.event_date OR (ev.event_date = cur.event_date AND r.id <= ?));",
            (rsvp["event_id"], rsvp["character_id"], rsvp["id"]),
        ).fetchone()["n"]
    )
    base = event_attendance_xp(attended)
    purchased = int(rsvp["xp_purchases"]) + int(rsvp["xp_candle_purchases"])
    amount = base + purchased

    if len(existing) == 1 and int(existing[0]["amount"]) == amount:
        return amount, existing[0]["id"]

    if existing:
        conn.execute("DELETE FROM experience_entries WHERE rsvp_id=?;", (rsvp["id"],))
    entry_id = append_entry(
        conn,
        character_id=rsvp["character_id"],
        amount=amount,
        reason=attendance_reason(base, purchased),
        event_id=rsvp["event_id"],
        rsvp_id=rsvp["id"],
        awarded_by=awarded_by,
    )
    return amount, entry_id


def patch_rsvp(rsvp_id: str, patch: Dict[str, Any]) -> Dict[str, Any]:
    conn = connect()
    try:
        conn.execute("BEGIN IMMEDIATE;")
        row = _load_rsvp(conn, rsvp_id)
        xp = row["xp_purchases"] if patch.get("xp_purchases") is None else int(patch["xp_purchases"])
        candle = row["xp_candle_purchases"] if patch.get("xp_candle_purchases") is None else int(patch["xp_candle_purchases"])
        _check_purchases(xp, candle)
        conn.execute(
            "UPDATE event_rsvps SET xp_purchases=?, xp_candle_purchases=?, updated_at=? WHERE id=?;",
            (xp, candle, now_iso(), rsvp_id),
        )
        if row["attended"]:
            # purchases feed the attendance award
            _sync_attendance_award(conn, _load_rsvp(conn, rsvp_id), awarded_by=None)
            refresh_totals(conn, row["character_id"])
        conn.commit()
    except HTTPException:
        conn.rollback()
        raise
    except Exception as e:
        conn.rollback()
        raise _internal_error(e)
    finally:
        conn.close()
    return get_rsvp(rsvp_id)


def mark_attendance(rsvp_id: str, attended: bool, awarded_by: Optional[str] = None) -> Dict[str, Any]:
    conn = connect()
    try:
        conn.execute("BEGIN IMMEDIATE;")
        _load_rsvp(conn, rsvp_id)
        conn.execute(
            "UPDATE event_rsvps SET attended=?, updated_at=? WHERE id=?;",
            (1 if attended else 0, now_iso(), rsvp_id),
        )
        row = _load_rsvp(conn, rsvp_id)
        xp, entry_id = _sync_attendance_award(conn, row, awarded_by)
        experience, spent = refresh_totals(conn, row["character_id"])
        conn.commit()
    except HTTPException:
        conn.rollback()
        raise
    except Exception as e:
        conn.rollback()
        raise _internal_error(e)
    finally:
        conn.close()
    return {
        "rsvp": get_rsvp(rsvp_id),
        "xp_awarded": xp,
        "entry_id": entry_id,
        "experience": experience,
        "total_xp_spent": spent,
    }


def delete_rsvp(rsvp_id: str) -> Dict[str, Any]:
    conn = connect()
    try:
        conn.execute("BEGIN IMMEDIATE;")
        row = _load_rsvp(conn, rsvp_id)
        removed = conn.execute("DELETE FROM experience_entries WHERE rsvp_id=?;", (rsvp_id,)).rowcount
        conn.execute("DELETE FROM event_rsvps WHERE id=?;", (rsvp_id,))
        refresh_totals(conn, row["character_id"])
        conn.commit()
        return {"id": rsvp_id, "deleted": True, "entries_removed": removed}
    except HTTPException:
        conn.rollback()
        raise
    except Exception as e:
        conn.rollback()
        raise _internal_error(e)
    finally:
        conn.close()
