from __future__ import annotations
import uuid
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from app.config import settings
from app.db import engine, init_models
from app.deps import get_ledger
from app.errors import LedgerError
from app.logging_setup import configure_logging
from app.routes.system import router as system_router
from app.routes.submissions import router as submissions_router
from app.routes.pool import router as pool_router, fallback_router
from app.routes.wallet import router as wallet_router
import structlog

configure_logging()
log = structlog.get_logger()

@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    log.info("startup", env=settings.environment, version=settings.app_version, git_sha=settings.git_sha)
    if settings.auto_create_schema:
        await init_models(engine)
    if settings.guard_identity:
        await get_ledger().initialize(settings.guard_identity)
    else:
        log.warning("guard_identity_missing", hint="set GUARD_IDENTITY; ledger operations fail until initialized")
    yield
    # Shutdown
    await engine.dispose()
    log.info("shutdown")

app = FastAPI(
    title=f"{settings.app_display_name} API",
    version=settings.app_version,
    lifespan=lifespan,
    description=f"{settings.app_display_name} API: submission registry with a custodied reward pool",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"] if settings.environment == "dev" else settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(system_router)
app.include_router(submissions_router)
app.include_router(pool_router)
app.include_router(wallet_router)
app.include_router(fallback_router)  # must stay last

@app.exception_handler(LedgerError)
async def ledger_error_handler(request: Request, exc: LedgerError):
    return JSONResponse(status_code=exc.status_code, content={"detail": str(exc), "error": exc.code})

@app.middleware("http")
async def add_request_id(request: Request, call_next):
    rid = request.headers.get("x-request-id") or str(uuid.uuid4())
    request.state.request_id = rid
    structlog.contextvars.bind_contextvars(request_id=rid)
    response: Response = await call_next(request)
    response.headers["X-Request-ID"] = rid
    structlog.contextvars.clear_contextvars()
    return response
