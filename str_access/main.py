# str_access/main.py

import structlog
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from str_access.config import ALLOWED_ORIGINS, ENABLE_DEBUG_ROUTES
from str_access.logging_config import setup_logging
from str_access.middleware import RequestIDMiddleware
from str_access.routes.debug import router as debug_router
from str_access.routes.health import router as health_router
from str_access.routes.metrics import router as metrics_router
from str_access.routes.reservations import router as reservations_router
from str_access.routes.unlock import router as unlock_router
from str_access.routes.webhook import router as webhook_router

# Initialize structured logging
setup_logging()
logger = structlog.get_logger(__name__)

app = FastAPI(
    title="STR Access API",
    description="Guest digital-key API: reservation lookup by access code and door unlocks",
    version="1.0.0",
)

app.add_middleware(RequestIDMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS if "*" not in ALLOWED_ORIGINS else ["*"],
    allow_credentials="*" not in ALLOWED_ORIGINS,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
)

# Register routers
app.include_router(health_router, tags=["Health"])
app.include_router(metrics_router, tags=["Metrics"])
app.include_router(reservations_router, prefix="/api", tags=["Reservations"])
app.include_router(unlock_router, prefix="/api", tags=["Unlock"])
app.include_router(webhook_router, tags=["Webhooks"])
if ENABLE_DEBUG_ROUTES:
    app.include_router(debug_router, prefix="/debug", tags=["Debug"])


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("unhandled_exception", path=request.url.path, error=str(exc))
    return JSONResponse(status_code=500, content={"ok": False, "error": "Internal server error"})


@app.on_event("startup")
def startup_event() -> None:
    """Initialize application on startup."""
    from str_access.dependencies import get_reservation_store

    logger.info("FastAPI application starting up...")

    # Builds the store (and SQL tables when DATABASE_URL is set)
    get_reservation_store()

    logger.info(
        "FastAPI application initialized",
        allowed_origins=ALLOWED_ORIGINS,
        debug_routes=ENABLE_DEBUG_ROUTES,
    )
