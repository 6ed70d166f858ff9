import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from health_wallet.config import get_settings
from health_wallet.database import engine, Base
from health_wallet.exceptions import (
    AccessDenied,
    DuplicateGrant,
    DuplicateUser,
    ExtractionUnavailable,
    HealthWalletError,
    InvalidCredentials,
    InvalidGrant,
    NotFound,
    PersistenceFailure,
)
from health_wallet.logging_config import setup_logging
from health_wallet.routers import reports, share, vitals
from health_wallet.routers import auth as auth_router
import health_wallet.models  # noqa: F401  (registers tables on Base.metadata)

logger = logging.getLogger(__name__)

ERROR_STATUS = {
    ExtractionUnavailable: 422,
    PersistenceFailure: 503,
    DuplicateGrant: 409,
    DuplicateUser: 409,
    NotFound: 404,
    AccessDenied: 403,
    InvalidCredentials: 401,
    InvalidGrant: 400,
}


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_json)
    # Startup: create tables
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Health wallet API started (OCR provider: %s)", settings.ocr_provider)
    yield
    # Shutdown
    await engine.dispose()


app = FastAPI(
    title="Health Wallet",
    description="Medical report ingestion, vital extraction and report sharing",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(HealthWalletError)
async def health_wallet_error_handler(request: Request, exc: HealthWalletError):
    status_code = ERROR_STATUS.get(type(exc), 500)
    if status_code >= 500:
        logger.error("%s on %s %s: %s", type(exc).__name__, request.method, request.url.path, exc.reason)
    return JSONResponse(
        status_code=status_code,
        content={"error": type(exc).__name__, "detail": exc.reason},
    )


app.include_router(auth_router.router, prefix="/api/auth", tags=["Auth"])
app.include_router(reports.router, prefix="/api/reports", tags=["Reports"])
app.include_router(share.router, prefix="/api/share", tags=["Sharing"])
app.include_router(vitals.router, prefix="/api/vitals", tags=["Vitals"])


@app.get("/api/health")
async def health_check():
    return {"status": "healthy", "service": "health-wallet"}
