# parkdesk/main.py
"""
FastAPI application entry point.
Includes security middleware, global error handlers, and all routers.
Startup builds the store, loads every collection and subscribes to changes.
"""

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.base import BaseHTTPMiddleware
from parkdesk.routers import users, parking_spaces, payments, reports, changes, health
from parkdesk.config import settings
from parkdesk.services.app_state import AppState
from parkdesk.services.data_service import DataService
from parkdesk.store.factory import build_store
from parkdesk.utils.logger import get_logger
import time

logger = get_logger(__name__)

app = FastAPI(
    title="Parkdesk API",
    description="Parking facility management: spaces, users, vehicles, monthly payments and reports.",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
)

# ── CORS (allow the dashboard to call the API) ──────────────────────────────
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],   # Restrict to dashboard origin in production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ── API Key Middleware ───────────────────────────────────────────────────────
class APIKeyMiddleware(BaseHTTPMiddleware):
    """
    Optional lightweight API key auth.
    The change webhook and health check are excluded; the webhook has its own secret.
    Set API_KEY in .env. Leave empty to disable auth.
    """
    async def dispatch(self, request: Request, call_next):
        open_paths = {"/api/v1/changes", "/api/v1/health", "/docs", "/redoc", "/openapi.json"}
        if request.url.path in open_paths or not settings.API_KEY:
            return await call_next(request)

        api_key = request.headers.get("X-API-Key") or request.query_params.get("api_key")
        if api_key != settings.API_KEY:
            return JSONResponse(
                status_code=status.HTTP_401_UNAUTHORIZED,
                content={"detail": "Invalid or missing API key"},
            )
        return await call_next(request)


if settings.API_KEY:
    app.add_middleware(APIKeyMiddleware)


# ── Request Timing Middleware ────────────────────────────────────────────────
@app.middleware("http")
async def log_requests(request: Request, call_next):
    start = time.time()
    response = await call_next(request)
    duration = round((time.time() - start) * 1000, 2)
    logger.debug(f"{request.method} {request.url.path} → {response.status_code} ({duration}ms)")
    return response


# ── Global Exception Handler ─────────────────────────────────────────────────
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled exception on {request.url.path}: {exc}", exc_info=True)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal server error"},
    )


# ── Routers ──────────────────────────────────────────────────────────────────
app.include_router(users.router,          prefix="/api/v1", tags=["Users"])
app.include_router(parking_spaces.router, prefix="/api/v1", tags=["Parking Spaces"])
app.include_router(payments.router,       prefix="/api/v1", tags=["Payments"])
app.include_router(reports.router,        prefix="/api/v1", tags=["Reports"])
app.include_router(changes.router,        prefix="/api/v1", tags=["Change Webhook"])
app.include_router(health.router,         prefix="/api/v1", tags=["Health"])


# ── Startup ───────────────────────────────────────────────────────────────────
@app.on_event("startup")
async def startup():
    logger.info("Parkdesk backend starting up...")
    store = build_store()
    service = DataService(store, AppState())
    service.subscribe_to_changes()
    app.state.data_service = service

    await service.load_all()
    if service.state.error:
        logger.warning(f"Initial load finished with error: {service.state.error}")
    logger.info(f"Monthly rates: {settings.MONTHLY_RATES}")
    logger.info(f"Listening on http://{settings.BACKEND_IP}:{settings.BACKEND_PORT}")
    logger.info("API docs at /docs")


@app.on_event("shutdown")
async def shutdown():
    logger.info("Parkdesk backend shutting down...")
    service = getattr(app.state, "data_service", None)
    if service is not None:
        service.store.unsubscribe_all()
        await service.store.close()
