from __future__ import annotations

import json
import sqlite3
from dataclasses import replace
from typing import Any, Dict, List, Optional, Tuple

from fastapi import HTTPException

from thrune.core.db import connect, insert_row, now_iso
from thrune.rules.progression import (
    CONDITION_TYPES,
    DEFAULT_ACHIEVEMENTS,
    DEFAULT_MILESTONES,
    DEFAULT_RARITY_SETTINGS,
    Achievement,
    CharacterSnapshot,
    Milestone,
    rarity_for_completion,
)

RARITY_SETTINGS_KEY = "achievement_rarity_settings"


def _not_found(what: str) -> HTTPException:
    return HTTPException(status_code=404, detail={"error": "not_found", "message": f"{what} not found"})


def _internal_error(e: Exception) -> HTTPException:
    return HTTPException(
        status_code=500,
        detail={"error": "internal_error", "message": "internal server error", "details": {"type": type(e).__name__}},
    )


def _check_condition(condition_type: Optional[str], condition_value: Optional[int]) -> None:
    if condition_type is None:
        return
    if condition_type not in CONDITION_TYPES:
        raise HTTPException(
            status_code=400,
            detail={
                "error": "bad_request",
                "message": "unknown condition_type",
                "details": {"condition_type": condition_type, "allowed": list(CONDITION_TYPES)},
            },
        )
    if condition_type != "manual" and condition_value is None:
        raise HTTPException(
            status_code=400,
            detail={"error": "bad_request", "message": "condition_value is required for automatic achievements"},
        )


# -------------------------
# Definitions used by the progression aggregator
# -------------------------
def _static_milestones(conn: sqlite3.Connection) -> List[Milestone]:
    overrides = {
        int(r["milestone_index"]): r for r in conn.execute("SELECT * FROM static_milestone_overrides;").fetchall()
    }
    out: List[Milestone] = []
    for idx, m in enumerate(DEFAULT_MILESTONES):
        o = overrides.get(idx)
        if o is not None:
            m = Milestone(int(o["threshold"]), o["title"], o["description"], o["icon_name"], o["color"])
        out.append(replace(m, id=f"static-{idx}"))
    return out


def _static_achievements(conn: sqlite3.Connection) -> List[Achievement]:
    overrides = {
        int(r["achievement_index"]): r for r in conn.execute("SELECT * FROM static_achievement_overrides;").fetchall()
    }
    out: List[Achievement] = []
    for idx, a in enumerate(DEFAULT_ACHIEVEMENTS):
        o = overrides.get(idx)
        if o is not None:
            a = Achievement(
                id=a.id,
                title=o["title"],
                description=o["description"],
                icon=o["icon_name"],
                rarity=o["rarity"],
                condition_type=o["condition_type"],
                condition_value=o["condition_value"],
            )
        out.append(a)
    return out


def _custom_achievement(row: sqlite3.Row) -> Achievement:
    return Achievement(
        id=row["id"],
        title=row["title"],
        description=row["description"],
        icon=row["icon_name"],
        rarity=row["rarity"],
        condition_type=row["condition_type"],
        condition_value=row["condition_value"],
    )


def load_definitions(conn: sqlite3.Connection) -> Tuple[List[Milestone], List[Achievement]]:
    """Static defaults with overrides applied, followed by active custom definitions."""
    milestones = _static_milestones(conn)
    for r in conn.execute("SELECT * FROM custom_milestones WHERE is_active=1 ORDER BY threshold ASC;").fetchall():
        milestones.append(Milestone(int(r["threshold"]), r["title"], r["description"], r["icon_name"], r["color"], id=r["id"]))
    milestones.sort(key=lambda m: m.threshold)

    achievements = _static_achievements(conn)
    for r in conn.execute("SELECT * FROM custom_achievements WHERE is_active=1 ORDER BY created_at ASC;").fetchall():
        achievements.append(_custom_achievement(r))
    return milestones, achievements


def unlocked_ids(conn: sqlite3.Connection, character_id: str) -> frozenset:
    rows = conn.execute("SELECT achievement_id FROM character_achievements WHERE character_id=?;", (character_id,)).fetchall()
    return frozenset(r["achievement_id"] for r in rows)


# -------------------------
# Static overrides
# -------------------------
def list_static_milestones() -> List[Dict[str, Any]]:
    conn = connect()
    try:
        overridden = {int(r["milestone_index"]) for r in conn.execute("SELECT milestone_index FROM static_milestone_overrides;")}
        out = []
        for idx, m in enumerate(_static_milestones(conn)):
            out.append(
                {
                    "index": idx,
                    "threshold": m.threshold,
                    "title": m.title,
                    "description": m.description,
                    "icon_name": m.icon,
                    "color": m.color,
                    "overridden": idx in overridden,
                }
            )
        return out
    finally:
        conn.close()


def list_static_achievements() -> List[Dict[str, Any]]:
    conn = connect()
    try:
        overridden = {
            int(r["achievement_index"]) for r in conn.execute("SELECT achievement_index FROM static_achievement_overrides;")
        }
        out = []
        for idx, a in enumerate(_static_achievements(conn)):
            out.append(
                {
                    "index": idx,
                    "id": a.id,
                    "title": a.title,
                    "description": a.description,
                    "icon_name": a.icon,
                    "rarity": a.rarity,
                    "condition_type": a.condition_type,
                    "condition_value": a.condition_value,
                    "overridden": idx in overridden,
                }
            )
        return out
    finally:
        conn.close()


def _check_index(index: int, size: int, what: str) -> None:
    if index < 0 or index >= size:
        raise HTTPException(
            status_code=404,
            detail={"error": "not_found", "message": f"{what} not found", "details": {"index": index, "count": size}},
        )


def put_static_milestone(index: int, data: Dict[str, Any]) -> Dict[str, Any]:
    _check_index(index, len(DEFAULT_MILESTONES), "static milestone")
    conn = connect()
    try:
        conn.execute("BEGIN;")
        conn.execute("DELETE FROM static_milestone_overrides WHERE milestone_index=?;", (index,))
        insert_row(
            conn,
            "static_milestone_overrides",
            {
                "milestone_index": index,
                "title": data["title"],
                "description": data.get("description") or "",
                "threshold": int(data["threshold"]),
                "icon_name": data.get("icon_name") or "trophy",
                "color": data.get("color") or "text-blue-600",
                "updated_at": now_iso(),
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
    return list_static_milestones()[index]


def put_static_achievement(index: int, data: Dict[str, Any]) -> Dict[str, Any]:
    _check_index(index, len(DEFAULT_ACHIEVEMENTS), "static achievement")
    _check_condition(data.get("condition_type"), data.get("condition_value"))
    conn = connect()
    try:
        conn.execute("BEGIN;")
        conn.execute("DELETE FROM static_achievement_overrides WHERE achievement_index=?;", (index,))
        insert_row(
            conn,
            "static_achievement_overrides",
            {
                "achievement_index": index,
                "title": data["title"],
                "description": data.get("description") or "",
                "icon_name": data.get("icon_name") or "trophy",
                "rarity": data.get("rarity") or "common",
                "condition_type": data["condition_type"],
                "condition_value": data.get("condition_value"),
                "updated_at": now_iso(),
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
    return list_static_achievements()[index]


def reset_static_milestone(index: int) -> Dict[str, Any]:
    _check_index(index, len(DEFAULT_MILESTONES), "static milestone")
    conn = connect()
    try:
        conn.execute("DELETE FROM static_milestone_overrides WHERE milestone_index=?;", (index,))
        conn.commit()
    finally:
        conn.close()
    return list_static_milestones()[index]


def reset_static_achievement(index: int) -> Dict[str, Any]:
    _check_index(index, len(DEFAULT_ACHIEVEMENTS), "static achievement")
    conn = connect()
    try:
        conn.execute("DELETE FROM static_achievement_overrides WHERE achievement_index=?;", (index,))
        conn.commit()
    finally:
        conn.close()
    return list_static_achievements()[index]


# -------------------------
# Custom achievements
# -------------------------
def _achievement_row(row: sqlite3.Row) -> Dict[str, Any]:
    d = dict(row)
    d["is_active"] = bool(d.get("is_active"))
    return d


def list_custom_achievements(include_inactive: bool = False) -> List[Dict[str, Any]]:
    conn = connect()
    try:
        where = "" if include_inactive else "WHERE is_active=1 "
        rows = conn.execute(f"SELECT * FROM custom_achievements {where}ORDER BY created_at ASC, rowid ASC;").fetchall()
        return [_achievement_row(r) for r in rows]
    finally:
        conn.close()


def get_custom_achievement(achievement_id: str) -> Dict[str, Any]:
    conn = connect()
    try:
        row = conn.execute("SELECT * FROM custom_achievements WHERE id=?;", (achievement_id,)).fetchone()
        if not row:
            raise _not_found("achievement")
        return _achievement_row(row)
    finally:
        conn.close()


def create_custom_achievement(data: Dict[str, Any]) -> Dict[str, Any]:
    _check_condition(data["condition_type"], data.get("condition_value"))
    conn = connect()
    try:
        ts = now_iso()
        achievement_id = insert_row(
            conn,
            "custom_achievements",
            {
                "title": data["title"],
                "description": data.get("description") or "",
                "icon_name": data.get("icon_name") or "trophy",
                "rarity": data.get("rarity") or "common",
                "condition_type": data["condition_type"],
                "condition_value": data.get("condition_value"),
                "is_active": 1 if data.get("is_active", True) else 0,
                "created_by": data.get("created_by"),
                "created_at": ts,
                "updated_at": ts,
            },
        )
        conn.commit()
    finally:
        conn.close()
    return get_custom_achievement(achievement_id)


def patch_custom_achievement(achievement_id: str, patch: Dict[str, Any]) -> Dict[str, Any]:
    current = get_custom_achievement(achievement_id)
    ct = patch.get("condition_type") or current["condition_type"]
    cv = patch["condition_value"] if "condition_value" in patch else current["condition_value"]
    _check_condition(ct, cv)

    sets: List[str] = []
    args: List[Any] = []
    for col in ("title", "description", "icon_name", "rarity", "condition_type"):
        if patch.get(col) is not None:
            sets.append(f"{col}=?")
            args.append(patch[col])
    if "condition_value" in patch:
        sets.append("condition_value=?")
        args.append(patch["condition_value"])
    if "is_active" in patch and patch["is_active"] is not None:
        sets.append("is_active=?")
        args.append(1 if patch["is_active"] else 0)
    if not sets:
        return current

    sets.append("updated_at=?")
    args.append(now_iso())
    args.append(achievement_id)
    conn = connect()
    try:
        conn.execute(f"UPDATE custom_achievements SET {', '.join(sets)} WHERE id=?;", args)
        conn.commit()
    finally:
        conn.close()
    return get_custom_achievement(achievement_id)


def delete_custom_achievement(achievement_id: str) -> Dict[str, Any]:
    conn = connect()
    try:
        conn.execute("BEGIN;")
        row = conn.execute("SELECT id FROM custom_achievements WHERE id=?;", (achievement_id,)).fetchone()
        if not row:
            raise _not_found("achievement")
        cur = conn.execute("DELETE FROM character_achievements WHERE achievement_id=?;", (achievement_id,))
        unlocks = cur.rowcount
        conn.execute("DELETE FROM custom_achievements WHERE id=?;", (achievement_id,))
        conn.commit()
        return {"id": achievement_id, "deleted": True, "unlocks_removed": unlocks}
    except HTTPException:
        conn.rollback()
        raise
    except Exception as e:
        conn.rollback()
        raise _internal_error(e)
    finally:
        conn.close()


# -------------------------
# Custom milestones
# -------------------------
def list_custom_milestones(include_inactive: bool = False) -> List[Dict[str, Any]]:
    conn = connect()
    try:
        where = "" if include_inactive else "WHERE is_active=1 "
        rows = conn.execute(f"SELECT * FROM custom_milestones {where}ORDER BY threshold ASC, rowid ASC;").fetchall()
        return [_achievement_row(r) for r in rows]
    finally:
        conn.close()


def get_custom_milestone(milestone_id: str) -> Dict[str, Any]:
    conn = connect()
    try:
        row = conn.execute("SELECT * FROM custom_milestones WHERE id=?;", (milestone_id,)).fetchone()
        if not row:
            raise _not_found("milestone")
        return _achievement_row(row)
    finally:
        conn.close()


def create_custom_milestone(data: Dict[str, Any]) -> Dict[str, Any]:
    conn = connect()
    try:
        ts = now_iso()
        milestone_id = insert_row(
            conn,
            "custom_milestones",
            {
                "title": data["title"],
                "description": data.get("description") or "",
                "threshold": int(data["threshold"]),
                "icon_name": data.get("icon_name") or "trophy",
                "color": data.get("color") or "text-blue-600",
                "is_active": 1 if data.get("is_active", True) else 0,
                "created_by": data.get("created_by"),
                "created_at": ts,
                "updated_at": ts,
            },
        )
        conn.commit()
    finally:
        conn.close()
    return get_custom_milestone(milestone_id)


def patch_custom_milestone(milestone_id: str, patch: Dict[str, Any]) -> Dict[str, Any]:
    current = get_custom_milestone(milestone_id)
    sets: List[str] = []
    args: List[Any] = []
    for col in ("title", "description", "threshold", "icon_name", "color"):
        if patch.get(col) is not None:
            sets.append(f"{col}=?")
            args.append(patch[col])
    if patch.get("is_active") is not None:
        sets.append("is_active=?")
        args.append(1 if patch["is_active"] else 0)
    if not sets:
        return current

    sets.append("updated_at=?")
    args.append(now_iso())
    args.append(milestone_id)
    conn = connect()
    try:
        conn.execute(f"UPDATE custom_milestones SET {', '.join(sets)} WHERE id=?;", args)
        conn.commit()
    finally:
        conn.close()
    return get_custom_milestone(milestone_id)


def delete_custom_milestone(milestone_id: str) -> Dict[str, Any]:
    conn = connect()
    try:
        cur = conn.execute("DELETE FROM custom_milestones WHERE id=?;", (milestone_id,))
        if cur.rowcount == 0:
            raise _not_found("milestone")
        conn.commit()
        return {"id": milestone_id, "deleted": True}
    finally:
        conn.close()


# -------------------------
# Manual unlocks
# -------------------------
def list_unlocks(character_id: str) -> List[Dict[str, Any]]:
    conn = connect()
    try:
        if not conn.execute("SELECT id FROM characters WHERE id=?;", (character_id,)).fetchone():
            raise _not_found("character")
        rows = conn.execute(
            "SELECT * FROM character_achievements WHERE character_id=? ORDER BY unlocked_at ASC, rowid ASC;",
            (character_id,),
        ).fetchall()
        return [dict(r) for r in rows]
    finally:
        conn.close()


def _known_achievement_ids(conn: sqlite3.Connection) -> set:
    ids = {a.id for a in DEFAULT_ACHIEVEMENTS}
    ids.update(r["id"] for r in conn.execute("SELECT id FROM custom_achievements;").fetchall())
    return ids


def unlock_achievement(character_id: str, achievement_id: str) -> Tuple[Dict[str, Any], bool]:
    """Returns (unlock row, already_unlocked)."""
    conn = connect()
    try:
        conn.execute("BEGIN;")
        if not conn.execute("SELECT id FROM characters WHERE id=?;", (character_id,)).fetchone():
            raise _not_found("character")
        if achievement_id not in _known_achievement_ids(conn):
            raise _not_found("achievement")

        existing = conn.execute(
            "SELECT * FROM character_achievements WHERE character_id=? AND achievement_id=?;",
            (character_id, achievement_id),
        ).fetchone()
        if existing:
            conn.commit()
            return dict(existing), True

        unlock_id = insert_row(
            conn,
            "character_achievements",
            {"character_id": character_id, "achievement_id": achievement_id, "unlocked_at": now_iso()},
        )
        row = conn.execute("SELECT * FROM character_achievements WHERE id=?;", (unlock_id,)).fetchone()
        conn.commit()
        return dict(row), False
    except HTTPException:
        conn.rollback()
        raise
    except Exception as e:
        conn.rollback()
        raise _internal_error(e)
    finally:
        conn.close()


def revoke_achievement(character_id: str, achievement_id: str) -> Dict[str, Any]:
    conn = connect()
    try:
        cur = conn.execute(
            "DELETE FROM character_achievements WHERE character_id=? AND achievement_id=?;",
            (character_id, achievement_id),
        )
        if cur.rowcount == 0:
            raise _not_found("unlock")
        conn.commit()
        return {"character_id": character_id, "achievement_id": achievement_id, "revoked": True}
    finally:
        conn.close()


# -------------------------
# Rarity settings
# -------------------------
def _read_settings(conn: sqlite3.Connection) -> Dict[str, Any]:
    s = dict(DEFAULT_RARITY_SETTINGS)
    row = conn.execute("SELECT value FROM system_settings WHERE key=?;", (RARITY_SETTINGS_KEY,)).fetchone()
    if row:
        s.update(json.loads(row["value"]))
    return s


def get_rarity_settings() -> Dict[str, Any]:
    conn = connect()
    try:
        return _read_settings(conn)
    finally:
        conn.close()


def put_rarity_settings(patch: Dict[str, Any]) -> Dict[str, Any]:
    conn = connect()
    try:
        conn.execute("BEGIN;")
        s = _read_settings(conn)
        s.update({k: v for k, v in patch.items() if v is not None})
        if not (s["common_threshold"] > s["rare_threshold"] > s["epic_threshold"] > s["legendary_threshold"]):
            raise HTTPException(
                status_code=400,
                detail={
                    "error": "bad_request",
                    "message": "thresholds must be descending: common > rare > epic > legendary",
                    "details": s,
                },
            )
        value = json.dumps(s, sort_keys=True)
        ts = now_iso()
        row = conn.execute("SELECT id FROM system_settings WHERE key=?;", (RARITY_SETTINGS_KEY,)).fetchone()
        if row:
            conn.execute("UPDATE system_settings SET value=?, updated_at=? WHERE id=?;", (value, ts, row["id"]))
        else:
            insert_row(conn, "system_settings", {"key": RARITY_SETTINGS_KEY, "value": value, "updated_at": ts})
        conn.commit()
        return s
    except HTTPException:
        conn.rollback()
        raise
    except Exception as e:
        conn.rollback()
        raise _internal_error(e)
    finally:
        conn.close()


def snapshot_from_row(row: sqlite3.Row, unlocked: frozenset) -> CharacterSnapshot:
    return CharacterSnapshot(
        experience=int(row["experience"]),
        total_xp_spent=int(row["total_xp_spent"]),
        skills=tuple(json.loads(row["skills_json"] or "[]")),
        body=int(row["body"]),
        stamina=int(row["stamina"]),
        heritage_id=row["heritage_id"],
        primary_archetype_id=row["primary_archetype_id"],
        secondary_archetype_id=row["secondary_archetype_id"],
        unlocked_achievement_ids=unlocked,
    )


def recalculate_rarity() -> Dict[str, Any]:
    """
    Re-rate every active custom achievement by the share of active characters
    that hold it. Static achievements keep their configured rarity.
    """
    conn = connect()
    try:
        conn.execute("BEGIN;")
        settings = _read_settings(conn)
        out: Dict[str, Any] = {"enabled": bool(settings["enable_dynamic_rarity"]), "characters_considered": 0, "items": []}
        if not settings["enable_dynamic_rarity"]:
            conn.commit()
            return out

        chars = conn.execute("SELECT * FROM characters WHERE is_active=1 AND is_retired=0;").fetchall()
        out["characters_considered"] = len(chars)
        if not chars:
            conn.commit()
            return out

        snapshots = [snapshot_from_row(c, unlocked_ids(conn, c["id"])) for c in chars]
        rows = conn.execute("SELECT * FROM custom_achievements WHERE is_active=1 ORDER BY created_at ASC;").fetchall()
        ts = now_iso()
        for r in rows:
            a = _custom_achievement(r)
            holders = sum(1 for s in snapshots if a.is_unlocked(s))
            pct = holders / len(snapshots) * 100.0
            rarity = rarity_for_completion(pct, settings)
            if rarity != r["rarity"]:
                conn.execute("UPDATE custom_achievements SET rarity=?, updated_at=? WHERE id=?;", (rarity, ts, r["id"]))
            out["items"].append(
                {
                    "id": r["id"],
                    "title": r["title"],
                    "previous_rarity": r["rarity"],
                    "rarity": rarity,
                    "holders": holders,
                    "completion_percent": pct,
                }
            )
        conn.commit()
        return out
    except HTTPException:
        conn.rollback()
        raise
    except Exception as e:
        conn.rollback()
        raise _internal_error(e)
    finally:
        conn.close()
