"""
Event logger utility for gate and store events.
"""
from typing import Optional
from fastapi import Request
import sys
import logging
import os

from ..config import settings

# Configure file and stdout logging
handlers = [logging.StreamHandler(sys.stdout)]

# Try to add file handler, but continue without it if directory creation fails
if settings.LOG_DIR:
    try:
        os.makedirs(settings.LOG_DIR, exist_ok=True)
        handlers.append(logging.FileHandler(os.path.join(settings.LOG_DIR, "gate_events.log")))
    except (OSError, PermissionError) as e:
        print(f"WARNING: Could not set up file logging: {e}", file=sys.stderr)

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s:%(name)s:%(message)s",
    handlers=handlers
)

logger = logging.getLogger(__name__)


AUTH_FAILURE_EVENTS = {
    "auth_error",
    "auth_missing",
    "auth_invalid",
    "auth_unreachable",
}

STORE_FAILURE_EVENTS = {
    "task_service_error",
    "store_error",
    "store_write_error",
    "store_read_error",
    "store_corruption",
}

ALLOWED_EVENT_TYPES = AUTH_FAILURE_EVENTS | STORE_FAILURE_EVENTS | {
    "auth_success",
    "task_stored",
    "tasks_loaded",
}


def client_ip(request: Request) -> Optional[str]:
    """Client address with X-Forwarded-For fallback."""
    if request.client:
        return request.client.host
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return None


def log_gate_event(
    event_type: str,
    request: Request,
    detail: Optional[str] = None,
    principal: Optional[str] = None
) -> None:
    """
    Log one gate or store event.

    Auth failures are logged at WARNING and store failures at ERROR so the
    sub-case hidden from the caller is still visible to operators.

    Args:
        event_type: One of ALLOWED_EVENT_TYPES
        request: FastAPI Request object
        detail: Optional human readable context
        principal: uid resolved by the auth service, if any

    Raises:
        ValueError: If event_type is invalid
    """
    if event_type not in ALLOWED_EVENT_TYPES:
        raise ValueError(
            f"Invalid event_type '{event_type}'. Must be one of: {', '.join(sorted(ALLOWED_EVENT_TYPES))}"
        )

    if event_type in STORE_FAILURE_EVENTS:
        level = logging.ERROR
    elif event_type in AUTH_FAILURE_EVENTS:
        level = logging.WARNING
    else:
        level = logging.INFO

    logger.log(
        level,
        "GATE %s method=%s path=%s ip=%s principal=%s detail=%s",
        event_type, request.method, request.url.path, client_ip(request), principal, detail
    )
