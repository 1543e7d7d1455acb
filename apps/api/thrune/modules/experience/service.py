from __future__ import annotations

import sqlite3
from typing import Any, Dict, List, Optional, Tuple

from fastapi import HTTPException

from thrune.core.db import connect, insert_row, now_iso
from thrune.rules.ledger import ledger_totals


# -------------------------
# ledger primitives (caller owns the transaction)
# -------------------------
def character_exists(conn: sqlite3.Connection, character_id: str) -> bool:
    row = conn.execute("SELECT id FROM characters WHERE id=?;", (character_id,)).fetchone()
    return row is not None


def append_entry(
    conn: sqlite3.Connection,
    *,
    character_id: str,
    amount: int,
    reason: str,
    event_id: Optional[str] = None,
    rsvp_id: Optional[str] = None,
    awarded_by: Optional[str] = None,
    created_at: Optional[str] = None,
) -> str:
    return insert_row(
        conn,
        "experience_entries",
        {
            "character_id": character_id,
            "amount": int(amount),
            "reason": reason,
            "event_id": event_id,
            "rsvp_id": rsvp_id,
            "awarded_by": awarded_by,
            "created_at": created_at or now_iso(),
        },
    )


def ledger_amounts(conn: sqlite3.Connection, character_id: str) -> List[int]:
    rows = conn.execute("SELECT amount FROM experience_entries WHERE character_id=?;", (character_id,)).fetchall()
    return [int(r["amount"]) for r in rows]


def refresh_totals(conn: sqlite3.Connection, character_id: str) -> Tuple[int, int]:
    """
    Re-derive experience/total_xp_spent from the ledger and store them.

    Raises 409 when the ledger would leave the character with negative XP;
    the caller rolls back.
    """
    experience, spent = ledger_totals(ledger_amounts(conn, character_id))
    if experience < 0:
        raise HTTPException(
            status_code=409,
            detail={
                "error": "negative_experience",
                "message": "ledger change would leave character with negative experience",
                "details": {"character_id": character_id, "experience": experience},
            },
        )
    conn.execute(
        "UPDATE characters SET experience=?, total_xp_spent=?, updated_at=? WHERE id=?;",
        (experience, spent, now_iso(), character_id),
    )
    return experience, spent


def _internal_error(e: Exception) -> HTTPException:
    return HTTPException(
        status_code=500,
        detail={"error": "internal_error", "message": "internal server error", "details": {"type": type(e).__name__}},
    )


# -------------------------
# Experience entries
# -------------------------
def _row_to_entry(row: sqlite3.Row) -> Dict[str, Any]:
    d = dict(row)
    event_name = d.pop("event_name", None)
    event_date = d.pop("event_date", None)
    d["event"] = {"id": d.get("event_id"), "name": event_name, "event_date": event_date} if event_name else None
    return d


_ENTRY_SELECT = (
    "SELECT e.*, ev.name AS event_name, ev.event_date AS event_date "
    "FROM experience_entries e LEFT JOIN events ev ON ev.id = e.event_id "
)


def list_entries(character_id: str, only_events: bool = False) -> List[Dict[str, Any]]:
    conn = connect()
    try:
        if not character_exists(conn, character_id):
            raise HTTPException(status_code=404, detail={"error": "not_found", "message": "character not found"})
        where = "WHERE e.character_id=?"
        if only_events:
            where += " AND e.event_id IS NOT NULL"
            order = "ORDER BY e.created_at ASC, e.rowid ASC"
        else:
            order = "ORDER BY e.created_at DESC, e.rowid DESC"
        rows = conn.execute(f"{_ENTRY_SELECT}{where} {order};", (character_id,)).fetchall()
        return [_row_to_entry(r) for r in rows]
    finally:
        conn.close()


def get_entry(entry_id: str) -> Dict[str, Any]:
    conn = connect()
    try:
        row = conn.execute(f"{_ENTRY_SELECT}WHERE e.id=?;", (entry_id,)).fetchone()
        if not row:
            raise HTTPException(status_code=404, detail={"error": "not_found", "message": "experience entry not found"})
        return _row_to_entry(row)
    finally:
        conn.close()


def create_entry(
    character_id: str,
    amount: int,
    reason: str,
    event_id: Optional[str] = None,
    awarded_by: Optional[str] = None,
) -> Dict[str, Any]:
    if not reason.strip():
        raise HTTPException(status_code=400, detail={"error": "bad_request", "message": "reason is required"})

    conn = connect()
    try:
        conn.execute("BEGIN IMMEDIATE;")
        if not character_exists(conn, character_id):
            raise HTTPException(status_code=404, detail={"error": "not_found", "message": "character not found"})
        if event_id:
            ev = conn.execute("SELECT id FROM events WHERE id=?;", (event_id,)).fetchone()
            if not ev:
                raise HTTPException(status_code=404, detail={"error": "not_found", "message": "event not found"})

        entry_id = append_entry(
            conn,
            character_id=character_id,
            amount=amount,
            reason=reason.strip(),
            event_id=event_id,
            awarded_by=awarded_by,
        )
        refresh_totals(conn, character_id)
        conn.commit()
    except HTTPException:
        conn.rollback()
        raise
    except Exception as e:
        conn.rollback()
        raise _internal_error(e)
    finally:
        conn.close()
    return get_entry(entry_id)


def update_entry(entry_id: str, patch: Dict[str, Any]) -> Dict[str, Any]:
    conn = connect()
    try:
        conn.execute("BEGIN IMMEDIATE;")
        row = conn.execute("SELECT * FROM experience_entries WHERE id=?;", (entry_id,)).fetchone()
        if not row:
            raise HTTPException(status_code=404, detail={"error": "not_found", "message": "experience entry not found"})

        sets: List[str] = []
        args: List[Any] = []
        if patch.get("amount") is not None:
            sets.append("amount=?")
            args.append(int(patch["amount"]))
        if patch.get("reason") is not None:
            if not str(patch["reason"]).strip():
                raise HTTPException(status_code=400, detail={"error": "bad_request", "message": "reason is required"})
            sets.append("reason=?")
            args.append(str(patch["reason"]).strip())

        if sets:
            args.append(entry_id)
            conn.execute(f"UPDATE experience_entries SET {', '.join(sets)} WHERE id=?;", args)
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
    return get_entry(entry_id)


def delete_entry(entry_id: str) -> Dict[str, Any]:
    conn = connect()
    try:
        conn.execute("BEGIN IMMEDIATE;")
        row = conn.execute("SELECT * FROM experience_entries WHERE id=?;", (entry_id,)).fetchone()
        if not row:
            raise HTTPException(status_code=404, detail={"error": "not_found", "message": "experience entry not found"})
        conn.execute("DELETE FROM experience_entries WHERE id=?;", (entry_id,))
        experience, spent = refresh_totals(conn, row["character_id"])
        conn.commit()
        return {"id": entry_id, "character_id": row["character_id"], "experience": experience, "total_xp_spent": spent}
    except HTTPException:
        conn.rollback()
        raise
    except Exception as e:
        conn.rollback()
        raise _internal_error(e)
    finally:
        conn.close()
