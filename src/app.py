"""Quality & Notifications FastAPI application.

Multi-domain web server that processes commands synchronously via HTTP.
Each request is wrapped in the correct domain context based on URL prefix.

Usage:
    uvicorn app:app --app-dir src --host 0.0.0.0 --port 8000 --reload
"""

# ---------------------------------------------------------------------------
# Domain initialization
# ---------------------------------------------------------------------------
# Domains are initialized at module level so uvicorn workers share them.
# PROTEAN_ENV controls which config overlay is applied:
#   - default      → event_processing = "sync"  (handlers fire in the request)
#   - "production" → event_processing = "async" (handlers fire via Engine)
import asyncio
from contextlib import asynccontextmanager, suppress

import review_relay
import structlog
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from notifications.domain import notifications  # noqa: E402
from notifications.realtime.fanout import fanout_url, listen
from quality.domain import quality  # noqa: E402

from shared.exceptions import register_error_handlers
from shared.logging import add_context, clear_context, configure_logging

configure_logging()
logger = structlog.get_logger(__name__)

# The relay must be registered before Quality initializes; it only acts when
# event processing is synchronous.
review_relay.enable()
quality.init()
notifications.init()

# ---------------------------------------------------------------------------
# Route-to-domain mapping
# ---------------------------------------------------------------------------
_ROUTE_DOMAIN_MAP = {
    "/quality": quality,
    "/notifications": notifications,
}


def _resolve_domain(path: str):
    """Return the domain for the given request path, or None."""
    for prefix, domain in _ROUTE_DOMAIN_MAP.items():
        if path.startswith(prefix):
            return domain
    return None


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Relay fan-out from the Notifications Engine while Redis is configured."""
    listener = None
    url = fanout_url()
    if url:
        listener = asyncio.create_task(listen(url))
    yield
    if listener is not None:
        listener.cancel()
        with suppress(asyncio.CancelledError):
            await listener


# ---------------------------------------------------------------------------
# FastAPI app
# ---------------------------------------------------------------------------
app = FastAPI(
    lifespan=lifespan,
    title="Quality & Notifications API",
    description="Content quality review workflow and real-time notification delivery",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_error_handlers(app)


@app.middleware("http")
async def domain_context_middleware(request: Request, call_next):
    """Push the correct Protean domain context for each request."""
    domain = _resolve_domain(request.url.path)
    if domain is None:
        # No domain match — pass through (health check, docs, etc.)
        return await call_next(request)

    clear_context()
    add_context(
        domain=domain.name,
        method=request.method,
        path=request.url.path,
        user_id=request.headers.get("x-user-id"),
    )
    with domain.domain_context():
        response = await call_next(request)
    return response


# ---------------------------------------------------------------------------
# Routers
# ---------------------------------------------------------------------------
from notifications.api.routes import router as notifications_router  # noqa: E402
from notifications.realtime.routes import router as realtime_router  # noqa: E402
from quality.api.routes import router as quality_router  # noqa: E402

app.include_router(quality_router)
app.include_router(realtime_router)
app.include_router(notifications_router)


# ---------------------------------------------------------------------------
# Health / root
# ---------------------------------------------------------------------------
@app.get("/health")
async def health():
    return JSONResponse(
        content={
            "status": "ok",
            "domains": {
                "quality": {"name": quality.name},
                "notifications": {"name": notifications.name},
            },
        }
    )
