# one JSON line per API call: who asked for what, with which outcome
# does not block or alter the response; never touches the database

import json
import logging
import time

from fastapi import Request

logger = logging.getLogger("listing_api.audit")

SKIP_PATHS = ("/health",)


def build_audit_record(request: Request, status_code: int, started: float) -> dict:
    caller = request.headers.get("X-User-Id")
    return {
        "ts": int(started),
        "method": request.method,
        "path": request.url.path,
        "query": request.url.query or None,
        "status": status_code,
        "user_id": int(caller) if caller and caller.isdigit() else None,
        "ip": request.headers.get("X-Real-IP") or (request.client.host if request.client else None),
        "duration_ms": int((time.time() - started) * 1000),
    }


async def audit_middleware(request: Request, call_next):
    if request.url.path in SKIP_PATHS:
        return await call_next(request)

    started = time.time()
    try:
        response = await call_next(request)
    except Exception:
        record = build_audit_record(request, 500, started)
        logger.error(json.dumps(record, ensure_ascii=False))
        raise

    record = build_audit_record(request, response.status_code, started)
    level = logging.WARNING if response.status_code >= 400 else logging.INFO
    logger.log(level, json.dumps(record, ensure_ascii=False))

    return response
