# dotacion/logging/middleware.py
import getpass
import logging
import platform
import socket
import time
from datetime import datetime
from typing import Callable, Optional

from fastapi import Request
from starlette.background import BackgroundTask
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from dotacion.logging.models import Log

logger = logging.getLogger(__name__)

# Request bodies larger than this are truncated in the log
MAX_LOGGED_BODY = 10000


def current_username() -> str:
    try:
        return getpass.getuser() or "unknown_user"
    except (KeyError, OSError):
        return "unknown_user"


def current_hostname() -> str:
    return socket.gethostname() or platform.node() or "unknown_host"


def write_log(session_factory, **fields) -> None:
    """Persist one request log row. Logging failures never break the request."""
    try:
        with session_factory() as session:
            session.add(Log(timestamp=datetime.now(), **fields))
            session.commit()
    except Exception as e:
        logger.warning("Error writing request log: %s", e)


class LoggingMiddleware(BaseHTTPMiddleware):
    """Records every API request in the log database."""

    excluded_paths = ("/api/health", "/api/docs", "/api/openapi.json", "/api/redoc")

    def __init__(self, app: ASGIApp, application_id: str = "dotacion"):
        super().__init__(app)
        self.username = current_username()
        self.hostname = current_hostname()
        self.application_id = application_id
        logger.info(
            "Logging middleware initialized with username: %s on host: %s, App ID: %s",
            self.username,
            self.hostname,
            self.application_id,
        )

    async def dispatch(self, request: Request, call_next: Callable):
        if not request.app.state.settings.log_requests or request.url.path.startswith(self.excluded_paths):
            return await call_next(request)

        start_time = time.time()

        # Only JSON bodies (builder queries) are worth keeping
        request_body: Optional[str] = None
        if "application/json" in request.headers.get("content-type", ""):
            body_bytes = await request.body()
            request_body = body_bytes.decode("utf-8", errors="ignore")[:MAX_LOGGED_BODY]

        response = await call_next(request)
        duration_ms = (time.time() - start_time) * 1000

        fields = dict(
            method=request.method,
            path=str(request.url.path),
            query_string=str(request.url.query) or None,
            status_code=response.status_code,
            client_ip=request.client.host if request.client else None,
            request_body=request_body,
            processing_time=duration_ms,
            user_agent=request.headers.get("user-agent"),
            username=self.username,
            hostname=self.hostname,
            application_id=self.application_id,
        )
        log_task = BackgroundTask(write_log, request.app.state.log_session_factory, **fields)

        if response.background is None:
            response.background = log_task
        else:
            # Keep any task the endpoint already attached
            previous = response.background

            async def run_both() -> None:
                await previous()
                await log_task()

            response.background = BackgroundTask(run_both)

        return response
