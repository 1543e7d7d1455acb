"""
DB utilities (sqlite default).

Defaults:
- DATABASE_URL: sqlite:///./data/app.db (relative paths resolve from the repo root)
- AUTO_CREATE_TABLES: 1 -> create missing tables on startup; 0 -> rely on alembic
"""
from __future__ import annotations

import os
import sqlite3
import time
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlmodel import SQLModel

DEFAULT_DATABASE_URL = "sqlite:///./data/app.db"
_CROCKFORD32 = "0123456789ABCDEFGHJKMNPQRSTVWXYZ"


def get_database_url() -> str:
    return os.getenv("DATABASE_URL", DEFAULT_DATABASE_URL)


def _repo_root() -> Path:
    # apps/api/thrune/core/db.py -> repo root = parents[4]
    return Path(__file__).resolve().parents[4]


def resolve_sqlite_path(database_url: str) -> Optional[Path]:
    if not database_url.startswith("sqlite:///"):
        return None
    p = database_url[len("sqlite:///") :]

    # absolute unix
    if p.startswith("/"):
        return Path(p)

    # absolute windows drive, both C:/ and C:\ forms
    if len(p) >= 3 and p[1] == ":" and (p[2] == "/" or p[2] == "\\"):
        return Path(p)

    # relative -> repo root
    return (_repo_root() / p).resolve()


def _sqlite_path() -> Path:
    url = get_database_url()
    sp = resolve_sqlite_path(url)
    if sp is None:
        raise ValueError(f"Only sqlite supported for now, got DATABASE_URL={url!r}")
    sp.parent.mkdir(parents=True, exist_ok=True)
    return sp


_engine: Optional[Engine] = None
_engine_url: Optional[str] = None


def get_engine() -> Engine:
    global _engine, _engine_url
    url = "sqlite:///" + _sqlite_path().as_posix()
    # DATABASE_URL may change between test runs; rebuild when it does
    if _engine is not None and _engine_url == url:
        return _engine

    _engine = create_engine(url, future=True, connect_args={"check_same_thread": False})
    _engine_url = url
    return _engine


def init_db() -> None:
    # table models register themselves on SQLModel.metadata at import time
    from thrune.modules.characters import models as _characters  # noqa: F401
    from thrune.modules.experience import models as _experience  # noqa: F401
    from thrune.modules.events import models as _events  # noqa: F401
    from thrune.modules.achievements import models as _achievements  # noqa: F401

    SQLModel.metadata.create_all(get_engine())


def auto_create_tables() -> bool:
    v = os.getenv("AUTO_CREATE_TABLES", "1").strip().lower()
    return v not in ("0", "false", "no", "")


def connect() -> sqlite3.Connection:
    conn = sqlite3.connect(str(_sqlite_path()), check_same_thread=False, timeout=10)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys=ON;")
    return conn


def db_health() -> Dict[str, Any]:
    url = get_database_url()
    kind = "sqlite" if url.startswith("sqlite") else "unknown"
    sp = resolve_sqlite_path(url)
    path = str(sp.as_posix()) if sp is not None else url

    try:
        eng = get_engine()
        with eng.connect() as conn:
            conn.execute(text("SELECT 1"))
        return {"status": "ok", "kind": kind, "path": path}
    except Exception as e:
        return {"status": "error", "kind": kind, "path": path, "error": str(e)}


# -------------------------
# row helpers shared by services
# -------------------------
def _encode_crockford(value: int, length: int) -> str:
    chars: List[str] = []
    for _ in range(length):
        chars.append(_CROCKFORD32[value & 31])
        value >>= 5
    return "".join(reversed(chars))


def new_ulid() -> str:
    # 48-bit time (ms) + 80-bit randomness
    ms = int(time.time() * 1000) & ((1 << 48) - 1)
    rnd = int.from_bytes(os.urandom(10), "big")
    v = (ms << 80) | rnd
    return _encode_crockford(v, 26)


def now_iso() -> str:
    return datetime.now(timezone.utc).replace(microsecond=0).isoformat().replace("+00:00", "Z")


def insert_row(conn: sqlite3.Connection, table: str, row: Dict[str, Any]) -> str:
    data = dict(row)
    if "id" not in data:
        data["id"] = new_ulid()
    keys = sorted(data.keys())
    sql = f"INSERT INTO {table} ({','.join(keys)}) VALUES ({','.join(['?'] * len(keys))});"
    conn.execute(sql, [data[k] for k in keys])
    return str(data["id"])
