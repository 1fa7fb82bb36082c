import logging
import os

logger = logging.getLogger(__name__)

# Настройки PostgreSQL
POSTGRES_USER = os.getenv("POSTGRES_USER", "postgres")
POSTGRES_PASSWORD = os.getenv("POSTGRES_PASSWORD", "postgres")
POSTGRES_DB = os.getenv("POSTGRES_DB", "gymdesk")
POSTGRES_HOST = os.getenv("POSTGRES_HOST", "db")
POSTGRES_PORT = os.getenv("POSTGRES_PORT", "5432")

# DATABASE_URL overrides the assembled PostgreSQL URL (sqlite+aiosqlite for local runs)
DATABASE_URL = os.getenv(
    "DATABASE_URL",
    f"postgresql+asyncpg://{POSTGRES_USER}:{POSTGRES_PASSWORD}@{POSTGRES_HOST}:{POSTGRES_PORT}/{POSTGRES_DB}",
)

# Настройки среды
ENVIRONMENT = os.getenv("ENVIRONMENT", "production").lower()
DEBUG = ENVIRONMENT in ["development", "dev"]

# Настройки retry для базы данных (только проверки соединения при старте)
DB_RETRY_ATTEMPTS = int(os.getenv("DB_RETRY_ATTEMPTS", "3"))
DB_RETRY_DELAY = float(os.getenv("DB_RETRY_DELAY", "1.0"))
DB_RETRY_BACKOFF_FACTOR = float(os.getenv("DB_RETRY_BACKOFF_FACTOR", "2.0"))

# Seconds a SQLite writer waits for the database lock
SQLITE_BUSY_TIMEOUT = float(os.getenv("SQLITE_BUSY_TIMEOUT", "30"))

# Настройки логирования
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO" if not DEBUG else "DEBUG")
LOG_FORMAT = os.getenv("LOG_FORMAT", "json" if not DEBUG else "text")

# Настройки приложения
APP_NAME = os.getenv("APP_NAME", "Gym Desk API")
APP_VERSION = os.getenv("APP_VERSION", "1.0.0")

# Бизнес-правила
BUSINESS_TIMEZONE = os.getenv("BUSINESS_TIMEZONE", "UTC")
CHECKIN_DEDUP_MINUTES = int(os.getenv("CHECKIN_DEDUP_MINUTES", "60"))
EXPIRING_WINDOW_DAYS = int(os.getenv("EXPIRING_WINDOW_DAYS", "7"))

RATE_LIMIT_ENABLED = os.getenv("RATE_LIMIT_ENABLED", "true").lower() == "true"

# Comma-separated list of allowed origins for the desk and portal frontends
CORS_ORIGINS = [
    origin.strip()
    for origin in os.getenv(
        "CORS_ORIGINS", "http://localhost:3000,http://localhost:8080"
    ).split(",")
    if origin.strip()
]


# Валидация критичных настроек
def validate_config():
    """Валидация конфигурации при запуске"""
    errors = []

    if not DATABASE_URL:
        errors.append("DATABASE_URL is required")

    if DB_RETRY_ATTEMPTS < 1:
        errors.append("DB_RETRY_ATTEMPTS must be >= 1")

    if DB_RETRY_DELAY < 0:
        errors.append("DB_RETRY_DELAY must be >= 0")

    if DB_RETRY_BACKOFF_FACTOR < 1:
        errors.append("DB_RETRY_BACKOFF_FACTOR must be >= 1")

    if CHECKIN_DEDUP_MINUTES < 0:
        errors.append("CHECKIN_DEDUP_MINUTES must be >= 0")

    if EXPIRING_WINDOW_DAYS < 0:
        errors.append("EXPIRING_WINDOW_DAYS must be >= 0")

    try:
        from zoneinfo import ZoneInfo

        ZoneInfo(BUSINESS_TIMEZONE)
    except Exception:
        errors.append(f"BUSINESS_TIMEZONE '{BUSINESS_TIMEZONE}' is not a valid zone")

    if errors:
        raise ValueError(f"Configuration errors: {'; '.join(errors)}")


# Автоматическая валидация при импорте (опционально)
if os.getenv("VALIDATE_CONFIG_ON_IMPORT", "true").lower() == "true":
    try:
        validate_config()
    except ValueError as e:
        logger.warning(f"Configuration warning: {e}")
