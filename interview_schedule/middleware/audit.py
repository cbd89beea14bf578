# interview_schedule/middleware/audit.py
"""
Request audit log: one JSON line per request on the "interview_schedule.audit"
logger.

The public schedule token is the only credential of /schedule/* routes, so
it is masked in the logged path. Server errors are logged at WARNING.
"""

import re
import time
import json
import logging

from fastapi import Request

from ..utils.client_detect import get_client_ip

logger = logging.getLogger("interview_schedule.audit")

_SCHEDULE_TOKEN_RE = re.compile(r"^/schedule/[^/]+")


def mask_path(path: str) -> str:
    """/schedule/<token>/book -> /schedule/***/book"""
    return _SCHEDULE_TOKEN_RE.sub("/schedule/***", path)


async def audit_middleware(request: Request, call_next):
    started = time.perf_counter()

    response = await call_next(request)

    record = {
        "ts": int(time.time()),
        "method": request.method,
        "path": mask_path(request.url.path),
        "status": response.status_code,
        "ip": get_client_ip(request),
        "user_id": request.headers.get("X-User-Id"),
        "ua": request.headers.get("User-Agent", ""),
        "duration_ms": int((time.perf_counter() - started) * 1000),
    }

    level = logging.WARNING if response.status_code >= 500 else logging.INFO
    logger.log(level, json.dumps(record, ensure_ascii=False))

    return response
