"""
Observability foundations shared by every router.

Contract:
- X-Request-Id in/out (missing -> generated; always echoed back; also on errors)
- Error envelope keys: error, message, request_id, details
- One JSON line per request start/end/exception on stdout
"""
from __future__ import annotations

import datetime
import json
import logging
import os
import uuid
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from thrune.rules.costs import InvalidSkillError

_log = logging.getLogger("thrune")
if not _log.handlers:
    logging.basicConfig(level=os.getenv("LOG_LEVEL", "INFO"))


def _now_iso() -> str:
    return datetime.datetime.now(datetime.timezone.utc).isoformat()


def emit(level: str, event: str, message: str, request_id: Optional[str], module: str, **extra: Any) -> None:
    payload: Dict[str, Any] = {
        "ts": _now_iso(),
        "level": level.lower(),
        "message": message,
        "request_id": request_id,
        "event": event,
        "module": module,
    }
    payload.update(extra)
    print(json.dumps(payload, ensure_ascii=False), flush=True)


def err_envelope(error: str, message: str, request_id: Optional[str], details: Any, status_code: int) -> JSONResponse:
    headers = {}
    if request_id:
        headers["X-Request-Id"] = request_id
    return JSONResponse(
        status_code=status_code,
        content={
            "error": error,
            "message": message,
            "request_id": request_id,
            "details": details,
        },
        headers=headers,
    )


def _request_id(request: Request) -> Optional[str]:
    return getattr(request.state, "request_id", None)


def install(app: FastAPI) -> None:
    @app.middleware("http")
    async def _request_id_mw(request: Request, call_next):
        rid = request.headers.get("X-Request-Id") or uuid.uuid4().hex.upper()
        request.state.request_id = rid
        emit("info", "http.request.start", f"{request.method} {request.url.path}", rid, __name__)
        try:
            resp = await call_next(request)
        except Exception as e:
            emit("error", "http.request.exception", str(e), rid, __name__)
            raise
        resp.headers["X-Request-Id"] = rid
        emit("info", "http.request.end", f"{request.method} {request.url.path} -> {getattr(resp, 'status_code', None)}", rid, __name__)
        return resp

    @app.exception_handler(StarletteHTTPException)
    async def _http_exc_handler(request: Request, exc: StarletteHTTPException):
        rid = _request_id(request)
        # services raise detail={"error", "message", "details"?}; plain strings are wrapped
        if isinstance(exc.detail, dict):
            d = exc.detail
            details = d.get("details", {"status_code": exc.status_code})
            return err_envelope(str(d.get("error", "http_error")), str(d.get("message", "")), rid, details, exc.status_code)
        return err_envelope("http_error", str(exc.detail), rid, {"status_code": exc.status_code}, exc.status_code)

    @app.exception_handler(RequestValidationError)
    async def _validation_exc_handler(request: Request, exc: RequestValidationError):
        rid = _request_id(request)
        return err_envelope("validation_error", "request validation failed", rid, jsonable_errors(exc), 422)

    @app.exception_handler(InvalidSkillError)
    async def _invalid_skill_handler(request: Request, exc: InvalidSkillError):
        rid = _request_id(request)
        emit("warning", "rules.invalid_skill", str(exc), rid, __name__, skill=exc.skill)
        return err_envelope("invalid_skill", str(exc), rid, {"skill": exc.skill}, 400)

    @app.exception_handler(Exception)
    async def _unhandled_exc_handler(request: Request, exc: Exception):
        rid = _request_id(request)
        _log.exception("unhandled error (request_id=%s)", rid)
        return err_envelope("internal_error", "internal server error", rid, {"type": type(exc).__name__}, 500)


def jsonable_errors(exc: RequestValidationError) -> Any:
    # pydantic error contexts may hold exception objects
    out = []
    for e in exc.errors():
        item = dict(e)
        if "ctx" in item:
            item["ctx"] = {k: str(v) for k, v in item["ctx"].items()}
        out.append(item)
    return out
