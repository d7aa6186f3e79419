from __future__ import annotations

from contextvars import ContextVar
from uuid import uuid4

from fastapi import Request
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.base import BaseHTTPMiddleware

from .settings import settings

# Context variable for request ID (accessible throughout the request lifecycle)
request_id_ctx: ContextVar[str] = ContextVar("request_id", default="")

def add_cors(app):
    origins = settings.allow_origins
    if not origins:
        # Default is explicit opt-in; skip middleware when nothing configured
        return
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["*"],
    )

class RequestIDMiddleware(BaseHTTPMiddleware):
    """
    Middleware to add request ID tracing.

    Uses the caller's X-Request-ID header when present, otherwise generates one,
    and echoes it on the response. Route sessions started during the request
    inherit it through the context variable.
    """

    async def dispatch(self, request: Request, call_next):  # type: ignore[override]
        request_id = request.headers.get("X-Request-ID")
        if not request_id:
            request_id = str(uuid4())

        request_id_ctx.set(request_id)
        request.state.request_id = request_id

        response = await call_next(request)
        response.headers["X-Request-ID"] = request_id
        return response


def add_request_id_tracing(app):
    """Add request ID middleware; logging_config reads the ID from the context."""
    app.add_middleware(RequestIDMiddleware)
