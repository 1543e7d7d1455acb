from __future__ import annotations

import os
from contextlib import asynccontextmanager

from fastapi import FastAPI

from thrune.core import observability
from thrune.core.db import auto_create_tables, db_health, init_db
from thrune.modules.achievements.router import router as achievements_router
from thrune.modules.catalog.router import router as catalog_router
from thrune.modules.characters.router import router as characters_router
from thrune.modules.events.router import router as events_router
from thrune.modules.experience.router import router as experience_router
from thrune.rules.catalog import default_catalog

APP_VERSION = os.getenv("APP_VERSION", "0.1.0")


@asynccontextmanager
async def lifespan(app: FastAPI):
    if auto_create_tables():
        init_db()
    observability.emit("info", "app.startup", f"thrune api {APP_VERSION}", None, __name__)
    yield


app = FastAPI(title="Thrune LARP API", version=APP_VERSION, lifespan=lifespan)
app.state.catalog = default_catalog()
observability.install(app)

app.include_router(catalog_router)
app.include_router(characters_router)
app.include_router(experience_router)
app.include_router(events_router)
app.include_router(achievements_router)


@app.get("/health")
def health():
    db = db_health()
    catalog = app.state.catalog
    return {
        "status": "ok" if db["status"] == "ok" else "degraded",
        "version": os.getenv("APP_VERSION", APP_VERSION),
        "db": db,
        "catalog": {
            "skills": len(catalog.skills),
            "heritages": len(catalog.heritages),
            "archetypes": len(catalog.archetypes),
        },
        "last_error_summary": db.get("error"),
    }
