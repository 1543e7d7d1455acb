from __future__ import annotations

import json
import sqlite3
from dataclasses import asdict
from typing import Any, Dict, List, Optional, Tuple

from fastapi import HTTPException

from thrune.core.db import connect, insert_row, now_iso
from thrune.modules.achievements.service import load_definitions, snapshot_from_row, unlocked_ids
from thrune.modules.experience.service import append_entry, ledger_amounts, refresh_totals
from thrune.rules.catalog import Catalog
from thrune.rules.costs import InvalidSkillError, attribute_step_cost, classify_skill, resolve_skill_cost
from thrune.rules.ledger import (
    CHARACTER_CREATION_XP,
    REASON_CREATION,
    REASON_SKILL_PREFIX,
    SECOND_ARCHETYPE_COST,
    attribute_reason,
    expected_total_xp_spent,
    ledger_totals,
    second_archetype_reason,
    skill_from_reason,
    skill_reason,
)
from thrune.rules.progression import summarize_progression


def _bad_request(error: str, message: str, details: Optional[Dict[str, Any]] = None) -> HTTPException:
    detail: Dict[str, Any] = {"error": error, "message": message}
    if details is not None:
        detail["details"] = details
    return HTTPException(status_code=400, detail=detail)


def _not_found(what: str = "character") -> HTTPException:
    return HTTPException(status_code=404, detail={"error": "not_found", "message": f"{what} not found"})


def _internal_error(e: Exception) -> HTTPException:
    return HTTPException(
        status_code=500,
        detail={"error": "internal_error", "message": "internal server error", "details": {"type": type(e).__name__}},
    )


def _insufficient_xp(cost: int, available: int) -> HTTPException:
    return _bad_request(
        "insufficient_xp",
        f"purchase costs {cost} XP but only {available} XP is available",
        {"cost": cost, "available": available},
    )


def _row_to_character(row: sqlite3.Row) -> Dict[str, Any]:
    d = dict(row)
    d["skills"] = json.loads(d.pop("skills_json") or "[]")
    d["is_active"] = bool(d.get("is_active"))
    d["is_retired"] = bool(d.get("is_retired"))
    return d


def _load_row(conn: sqlite3.Connection, character_id: str) -> sqlite3.Row:
    row = conn.execute("SELECT * FROM characters WHERE id=?;", (character_id,)).fetchone()
    if not row:
        raise _not_found()
    return row


def _load_for_purchase(conn: sqlite3.Connection, character_id: str) -> sqlite3.Row:
    row = _load_row(conn, character_id)
    if row["is_retired"]:
        raise HTTPException(
            status_code=409,
            detail={"error": "character_retired", "message": "retired characters cannot make purchases"},
        )
    return row


def _check_attribute_points(points: int, available: int) -> None:
    # each step costs at least 1 XP; bail out before pricing the steps
    if points > available:
        raise _bad_request(
            "insufficient_xp",
            f"{points} attribute points cost at least {points} XP but only {available} XP is available",
            {"min_cost": points, "available": available},
        )


def _attribute_steps(attribute: str, start: int, end: int) -> List[Tuple[str, int]]:
    # one (reason, cost) per point; the band is looked up at every step
    return [(attribute_reason(attribute, v), attribute_step_cost(v)) for v in range(start, end)]


# -------------------------
# Characters
# -------------------------
def list_characters(
    limit: int,
    offset: int,
    user_id: Optional[str] = None,
    include_retired: bool = False,
) -> Tuple[List[Dict[str, Any]], int]:
    conn = connect()
    try:
        where: List[str] = []
        args: List[Any] = []
        if user_id:
            where.append("user_id=?")
            args.append(user_id)
        if not include_retired:
            where.append("is_retired=0")
        clause = f"WHERE {' AND '.join(where)} " if where else ""

        total = int(conn.execute(f"SELECT COUNT(1) AS n FROM characters {clause};", args).fetchone()["n"])
        rows = conn.execute(
            f"SELECT * FROM characters {clause}ORDER BY created_at DESC, rowid DESC LIMIT ? OFFSET ?;",
            args + [limit, offset],
        ).fetchall()
        return [_row_to_character(r) for r in rows], total
    finally:
        conn.close()


def get_character(character_id: str) -> Dict[str, Any]:
    conn = connect()
    try:
        return _row_to_character(_load_row(conn, character_id))
    finally:
        conn.close()


def _validate_build(catalog: Catalog, data: Dict[str, Any]) -> Tuple[int, int]:
    heritage = catalog.heritage(data["heritage_id"])
    if heritage is None:
        raise _bad_request("invalid_heritage", "unknown heritage", {"heritage_id": data["heritage_id"]})

    culture = catalog.culture(data["culture_id"])
    if culture is None or culture.heritage_id != heritage.id:
        raise _bad_request(
            "invalid_culture",
            "culture does not belong to heritage",
            {"culture_id": data["culture_id"], "heritage_id": heritage.id},
        )

    if catalog.archetype(data["primary_archetype_id"]) is None:
        raise _bad_request("invalid_archetype", "unknown archetype", {"archetype_id": data["primary_archetype_id"]})
    second = data.get("secondary_archetype_id")
    if second:
        if catalog.archetype(second) is None:
            raise _bad_request("invalid_archetype", "unknown archetype", {"archetype_id": second})
        if second == data["primary_archetype_id"]:
            raise _bad_request("invalid_archetype", "second archetype must differ from the primary archetype")

    skills = data.get("skills") or []
    for s in skills:
        if not catalog.is_valid_skill(s):
            raise InvalidSkillError(s)
    dupes = sorted({s for s in skills if skills.count(s) > 1})
    if dupes:
        raise _bad_request("duplicate_skill", "skills may only be listed once", {"skills": dupes})

    base_body, base_stamina = catalog.attribute_bases(heritage.id)
    body = base_body if data.get("body") is None else int(data["body"])
    stamina = base_stamina if data.get("stamina") is None else int(data["stamina"])
    if body < base_body or stamina < base_stamina:
        raise _bad_request(
            "invalid_attributes",
            "starting attributes may not be below the heritage base",
            {"base_body": base_body, "base_stamina": base_stamina, "body": body, "stamina": stamina},
        )
    return body, stamina


def create_character(catalog: Catalog, data: Dict[str, Any]) -> Dict[str, Any]:
    """
    Validate a new build and record it on the ledger: the creation award,
    then one debit per attribute step, per starting skill and for a second
    archetype. The whole build must be affordable from the creation award.
    """
    body, stamina = _validate_build(catalog, data)
    base_body, base_stamina = catalog.attribute_bases(data["heritage_id"])
    second = data.get("secondary_archetype_id") or None
    skills: List[str] = list(data.get("skills") or [])
    _check_attribute_points((body - base_body) + (stamina - base_stamina), CHARACTER_CREATION_XP)

    debits: List[Tuple[str, int]] = []
    debits += _attribute_steps("body", base_body, body)
    debits += _attribute_steps("stamina", base_stamina, stamina)
    for s in skills:
        cost = int(classify_skill(catalog, s, data["heritage_id"], data["primary_archetype_id"], second))
        debits.append((skill_reason(s), cost))
    if second:
        debits.append((second_archetype_reason(second), SECOND_ARCHETYPE_COST))

    cost = sum(c for _, c in debits)
    if cost > CHARACTER_CREATION_XP:
        raise _insufficient_xp(cost, CHARACTER_CREATION_XP)

    conn = connect()
    try:
        conn.execute("BEGIN IMMEDIATE;")
        ts = now_iso()
        character_id = insert_row(
            conn,
            "characters",
            {
                "name": data["name"].strip(),
                "player_name": data.get("player_name") or "",
                "user_id": data.get("user_id"),
                "heritage_id": data["heritage_id"],
                "culture_id": data["culture_id"],
                "primary_archetype_id": data["primary_archetype_id"],
                "secondary_archetype_id": second,
                "body": body,
                "stamina": stamina,
                "skills_json": json.dumps(skills, ensure_ascii=False),
                "experience": 0,
                "total_xp_spent": 0,
                "is_active": 1,
                "is_retired": 0,
                "created_at": ts,
                "updated_at": ts,
            },
        )
        append_entry(conn, character_id=character_id, amount=CHARACTER_CREATION_XP, reason=REASON_CREATION, created_at=ts)
        for reason, c in debits:
            append_entry(conn, character_id=character_id, amount=-c, reason=reason, created_at=ts)
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
    return get_character(character_id)


def patch_character(character_id: str, patch: Dict[str, Any]) -> Dict[str, Any]:
    sets: List[str] = []
    args: List[Any] = []
    if patch.get("name") is not None:
        if not patch["name"].strip():
            raise _bad_request("bad_request", "name may not be empty")
        sets.append("name=?")
        args.append(patch["name"].strip())
    if patch.get("player_name") is not None:
        sets.append("player_name=?")
        args.append(patch["player_name"])

    conn = connect()
    try:
        _load_row(conn, character_id)
        if sets:
            sets.append("updated_at=?")
            args.append(now_iso())
            args.append(character_id)
            conn.execute(f"UPDATE characters SET {', '.join(sets)} WHERE id=?;", args)
            conn.commit()
        return _row_to_character(_load_row(conn, character_id))
    finally:
        conn.close()


def retire_character(character_id: str, reason: Optional[str] = None) -> Dict[str, Any]:
    conn = connect()
    try:
        row = _load_row(conn, character_id)
        if row["is_retired"]:
            raise HTTPException(status_code=409, detail={"error": "already_retired", "message": "character already retired"})
        ts = now_iso()
        conn.execute(
            "UPDATE characters SET is_retired=1, is_active=0, retired_at=?, retirement_reason=?, updated_at=? WHERE id=?;",
            (ts, reason, ts, character_id),
        )
        conn.commit()
        return _row_to_character(_load_row(conn, character_id))
    finally:
        conn.close()


def delete_character(character_id: str) -> Dict[str, Any]:
    conn = connect()
    try:
        conn.execute("BEGIN IMMEDIATE;")
        _load_row(conn, character_id)
        entries = conn.execute("DELETE FROM experience_entries WHERE character_id=?;", (character_id,)).rowcount
        rsvps = conn.execute("DELETE FROM event_rsvps WHERE character_id=?;", (character_id,)).rowcount
        conn.execute("DELETE FROM character_achievements WHERE character_id=?;", (character_id,))
        conn.execute("DELETE FROM characters WHERE id=?;", (character_id,))
        conn.commit()
        return {"id": character_id, "deleted": True, "experience_entries_removed": entries, "rsvps_removed": rsvps}
    except HTTPException:
        conn.rollback()
        raise
    except Exception as e:
        conn.rollback()
        raise _internal_error(e)
    finally:
        conn.close()


# -------------------------
# Purchases
# -------------------------
def purchase_skill(catalog: Catalog, character_id: str, skill: str) -> Dict[str, Any]:
    conn = connect()
    try:
        conn.execute("BEGIN IMMEDIATE;")
        row = _load_for_purchase(conn, character_id)
        skills = json.loads(row["skills_json"] or "[]")
        if skill in skills:
            raise HTTPException(
                status_code=409,
                detail={"error": "skill_owned", "message": "character already has this skill", "details": {"skill": skill}},
            )
        cost = int(
            classify_skill(catalog, skill, row["heritage_id"], row["primary_archetype_id"], row["secondary_archetype_id"])
        )
        if cost > int(row["experience"]):
            raise _insufficient_xp(cost, int(row["experience"]))

        entry_id = append_entry(conn, character_id=character_id, amount=-cost, reason=skill_reason(skill))
        skills.append(skill)
        conn.execute(
            "UPDATE characters SET skills_json=?, updated_at=? WHERE id=?;",
            (json.dumps(skills, ensure_ascii=False), now_iso(), character_id),
        )
        refresh_totals(conn, character_id)
        conn.commit()
    except HTTPException:
        conn.rollback()
        raise
    except InvalidSkillError:
        conn.rollback()
        raise
    except Exception as e:
        conn.rollback()
        raise _internal_error(e)
    finally:
        conn.close()
    return {"character": get_character(character_id), "cost": cost, "entry_ids": [entry_id]}


def refund_skill(character_id: str, skill: str) -> Dict[str, Any]:
    """Admin correction: drop the skill and its most recent purchase debit."""
    conn = connect()
    try:
        conn.execute("BEGIN IMMEDIATE;")
        row = _load_row(conn, character_id)
        skills = json.loads(row["skills_json"] or "[]")
        if skill not in skills:
            raise _not_found("skill")

        refunded = 0
        removed: List[str] = []
        debit = conn.execute(
            "SELECT id, amount FROM experience_entries WHERE character_id=? AND reason=? AND amount<0 "
            "ORDER BY created_at DESC, rowid DESC LIMIT 1;",
            (character_id, skill_reason(skill)),
        ).fetchone()
        if debit:
            conn.execute("DELETE FROM experience_entries WHERE id=?;", (debit["id"],))
            refunded = -int(debit["amount"])
            removed.append(debit["id"])

        skills.remove(skill)
        conn.execute(
            "UPDATE characters SET skills_json=?, updated_at=? WHERE id=?;",
            (json.dumps(skills, ensure_ascii=False), now_iso(), character_id),
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
    return {"character": get_character(character_id), "cost": -refunded, "entry_ids": removed}


def purchase_attribute(character_id: str, attribute: str, points: int) -> Dict[str, Any]:
    if attribute not in ("body", "stamina"):
        raise _bad_request("bad_request", "attribute must be body or stamina", {"attribute": attribute})
    if points < 1:
        raise _bad_request("bad_request", "points must be at least 1", {"points": points})

    conn = connect()
    try:
        conn.execute("BEGIN IMMEDIATE;")
        row = _load_for_purchase(conn, character_id)
        current = int(row[attribute])
        _check_attribute_points(points, int(row["experience"]))
        steps = _attribute_steps(attribute, current, current + points)
        cost = sum(c for _, c in steps)
        if cost > int(row["experience"]):
            raise _insufficient_xp(cost, int(row["experience"]))

        entry_ids = [append_entry(conn, character_id=character_id, amount=-c, reason=reason) for reason, c in steps]
        conn.execute(
            f"UPDATE characters SET {attribute}=?, updated_at=? WHERE id=?;",
            (current + points, now_iso(), character_id),
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
    return {"character": get_character(character_id), "cost": cost, "entry_ids": entry_ids}


def purchase_second_archetype(catalog: Catalog, character_id: str, archetype_id: str) -> Dict[str, Any]:
    if catalog.archetype(archetype_id) is None:
        raise _bad_request("invalid_archetype", "unknown archetype", {"archetype_id": archetype_id})

    conn = connect()
    try:
        conn.execute("BEGIN IMMEDIATE;")
        row = _load_for_purchase(conn, character_id)
        if row["secondary_archetype_id"]:
            raise HTTPException(
                status_code=409,
                detail={"error": "second_archetype_owned", "message": "character already has a second archetype"},
            )
        if archetype_id == row["primary_archetype_id"]:
            raise _bad_request("invalid_archetype", "second archetype must differ from the primary archetype")
        if SECOND_ARCHETYPE_COST > int(row["experience"]):
            raise _insufficient_xp(SECOND_ARCHETYPE_COST, int(row["experience"]))

        entry_id = append_entry(
            conn, character_id=character_id, amount=-SECOND_ARCHETYPE_COST, reason=second_archetype_reason(archetype_id)
        )
        conn.execute(
            "UPDATE characters SET secondary_archetype_id=?, updated_at=? WHERE id=?;",
            (archetype_id, now_iso(), character_id),
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
    return {"character": get_character(character_id), "cost": SECOND_ARCHETYPE_COST, "entry_ids": [entry_id]}


def recalculate_skill_costs(catalog: Catalog, character_id: str) -> Dict[str, Any]:
    """
    Admin correction after a catalog change: re-price every skill purchase
    debit at what the character's current build would pay today, then
    re-derive the totals. Debits for skills the catalog no longer knows are
    left as they were.
    """
    conn = connect()
    try:
        conn.execute("BEGIN IMMEDIATE;")
        row = _load_row(conn, character_id)
        before = int(row["total_xp_spent"])
        debits = conn.execute(
            "SELECT id, amount, reason FROM experience_entries WHERE character_id=? AND reason LIKE ? AND amount<0 "
            "ORDER BY created_at ASC, rowid ASC;",
            (character_id, f"{REASON_SKILL_PREFIX}%"),
        ).fetchall()

        updated: List[Dict[str, Any]] = []
        for d in debits:
            skill = skill_from_reason(d["reason"])
            if skill is None or not catalog.is_valid_skill(skill):
                continue
            cost = resolve_skill_cost(
                catalog, skill, row["heritage_id"], row["primary_archetype_id"], row["secondary_archetype_id"]
            )
            previous = -int(d["amount"])
            if cost == previous:
                continue
            conn.execute("UPDATE experience_entries SET amount=? WHERE id=?;", (-cost, d["id"]))
            updated.append({"entry_id": d["id"], "skill": skill, "previous_cost": previous, "cost": cost})

        _, after = refresh_totals(conn, character_id)
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
        "character": get_character(character_id),
        "previous_total_xp_spent": before,
        "total_xp_spent": after,
        "entries_updated": updated,
    }


# -------------------------
# Read models
# -------------------------
def skill_costs(catalog: Catalog, character_id: str) -> Dict[str, Any]:
    c = get_character(character_id)
    owned = set(c["skills"])
    items = []
    for s in catalog.skills:
        tier = classify_skill(catalog, s, c["heritage_id"], c["primary_archetype_id"], c["secondary_archetype_id"])
        items.append(
            {
                "skill": s,
                "cost": int(tier),
                "tier": tier.name.lower(),
                "owned": s in owned,
                "affordable": s not in owned and int(tier) <= c["experience"],
            }
        )
    return {
        "character_id": character_id,
        "experience": c["experience"],
        "items": items,
        "body_step_cost": attribute_step_cost(c["body"]),
        "stamina_step_cost": attribute_step_cost(c["stamina"]),
    }


def progression(catalog: Catalog, character_id: str) -> Dict[str, Any]:
    conn = connect()
    try:
        row = _load_row(conn, character_id)
        snapshot = snapshot_from_row(row, unlocked_ids(conn, character_id))
        milestones, achievements = load_definitions(conn)
    finally:
        conn.close()

    summary = summarize_progression(catalog, snapshot, milestones, achievements)
    out = asdict(summary)
    out["character_id"] = character_id
    return out


def audit(catalog: Catalog, character_id: str) -> Dict[str, Any]:
    conn = connect()
    try:
        row = _load_row(conn, character_id)
        amounts = ledger_amounts(conn, character_id)
    finally:
        conn.close()

    c = _row_to_character(row)
    ledger_experience, ledger_spent = ledger_totals(amounts)
    expected = expected_total_xp_spent(
        catalog,
        skills=c["skills"],
        body=c["body"],
        stamina=c["stamina"],
        heritage_id=c["heritage_id"],
        primary_archetype_id=c["primary_archetype_id"],
        secondary_archetype_id=c["secondary_archetype_id"],
    )
    return {
        "character_id": character_id,
        "recorded_experience": c["experience"],
        "recorded_total_xp_spent": c["total_xp_spent"],
        "ledger_experience": ledger_experience,
        "ledger_total_xp_spent": ledger_spent,
        "expected_total_xp_spent": expected,
        "ledger_consistent": (ledger_experience, ledger_spent) == (c["experience"], c["total_xp_spent"]),
        "spend_matches_rules": expected == ledger_spent,
        "unknown_skills": [s for s in c["skills"] if not catalog.is_valid_skill(s)],
    }
