"""
Request logger – before/after-request hooks that log every API call
(method, path, status, duration). Health checks are skipped.
"""

import logging
import time

from flask import g, request

logger = logging.getLogger("pillgraph.http")

_SKIPPED_PATHS = ("/health", "/api/health")


def start_timer():
    g.request_started = time.monotonic()


def log_after_request(response):
    """Log the finished API request; never alters the response."""
    if not request.path.startswith("/api/") or request.path in _SKIPPED_PATHS:
        return response

    started = getattr(g, "request_started", None)
    duration_ms = int((time.monotonic() - started) * 1000) if started else -1
    log = logger.warning if response.status_code >= 500 else logger.info
    log(
        "%s %s -> %d (%dms)",
        request.method, request.full_path.rstrip("?"), response.status_code, duration_ms,
    )
    return response


def init_request_logging(app) -> None:
    app.before_request(start_timer)
    app.after_request(log_after_request)
