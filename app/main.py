from fastapi import FastAPI, Depends
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
from slowapi.errors import RateLimitExceeded
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.limits import limiter, rate_limit_handler
from app.core.init_db import init_database
from app.core.error_handlers import setup_exception_handlers
from app.core.database import db_manager, get_session
from app.core.middleware import setup_middleware
from app.core.logging_utils import (
    setup_logging,
    get_logger,
    log_business_event,
    error_tracker,
)
from app.core.config import (
    validate_config,
    APP_NAME,
    APP_VERSION,
    DEBUG,
    ENVIRONMENT,
    LOG_LEVEL,
    LOG_FORMAT,
    CORS_ORIGINS,
)

from app.desk.routers import memberships_router as desk_memberships
from app.desk.routers import classes_router as desk_classes
from app.portal.routers import classes_router as portal_classes
from app.portal.routers import checkin_router as portal_checkin
from app.portal.routers import memberships_router as portal_memberships

# Настройка системы логирования
setup_logging(LOG_LEVEL, LOG_FORMAT)
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Управление жизненным циклом приложения"""

    # Startup
    logger.info(f"Starting {APP_NAME} v{APP_VERSION}")

    try:
        # Валидация конфигурации
        validate_config()
        logger.info("✅ Configuration validated")

        # Проверка соединения с БД
        await db_manager.check_connection()
        logger.info("✅ Database connection established")

        # Инициализация базы данных
        await init_database()
        logger.info("✅ Database initialized")

        log_business_event(
            "application_started",
            "system",
            0,
            {"version": APP_VERSION, "environment": ENVIRONMENT},
        )

        logger.info("🚀 Application startup completed")

    except Exception as e:
        logger.error(f"❌ Application startup failed: {str(e)}")
        error_tracker.track_error(
            "STARTUP_ERROR",
            str(e),
            {"component": "application_startup", "version": APP_VERSION},
        )
        raise

    yield

    # Shutdown
    logger.info("🛑 Shutting down application...")

    try:
        await db_manager.close_connections()
        logger.info("✅ Database connections closed")

    except Exception as e:
        logger.error(f"❌ Error during shutdown: {str(e)}")

    logger.info("👋 Application shutdown completed")


app = FastAPI(
    title=APP_NAME,
    description="Memberships and class bookings for gyms",
    version=APP_VERSION,
    lifespan=lifespan,
    debug=DEBUG,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

setup_exception_handlers(app)

setup_middleware(
    app,
    {
        "slow_request_threshold": 5.0,
        "exclude_paths": [
            "/health",
            "/docs",
            "/openapi.json",
            "/redoc",
            "/favicon.ico",
        ],
    },
)

# Add rate limiter to app state
app.state.limiter = limiter

# Add rate limit exception handler
app.add_exception_handler(RateLimitExceeded, rate_limit_handler)

# Include routers with API version prefix
app.include_router(desk_memberships, prefix="/api/v1")
app.include_router(desk_classes, prefix="/api/v1")
app.include_router(portal_classes, prefix="/api/v1")
app.include_router(portal_checkin, prefix="/api/v1")
app.include_router(portal_memberships, prefix="/api/v1")


@app.get("/health", tags=["System"])
async def health(db: AsyncSession = Depends(get_session)):
    """Liveness plus a database round trip"""
    await db.execute(text("SELECT 1"))
    stats = error_tracker.get_stats()
    return {
        "status": "ok",
        "version": APP_VERSION,
        "environment": ENVIRONMENT,
        "errors_tracked": stats["total_errors"],
    }
