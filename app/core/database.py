import asyncio
import logging
from functools import wraps
from typing import Callable, TypeVar, Any, AsyncGenerator
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.sql import text
from sqlalchemy.exc import (
    SQLAlchemyError,
    OperationalError,
    DisconnectionError,
    TimeoutError,
)
from asyncpg.exceptions import (
    ConnectionFailureError,
    ConnectionDoesNotExistError,
)

from .config import (
    DATABASE_URL,
    DB_RETRY_ATTEMPTS,
    DB_RETRY_BACKOFF_FACTOR,
    DB_RETRY_DELAY,
    SQLITE_BUSY_TIMEOUT,
)
from .exceptions import (
    BaseAppException,
    ConfigurationError,
    DatabaseConnectionError,
    DatabaseTimeoutError,
)

logger = logging.getLogger(__name__)


def _enable_sqlite_serialized_writes(engine: AsyncEngine) -> None:
    """
    SQLite: every transaction starts with BEGIN IMMEDIATE.

    The driver's implicit BEGIN is disabled so that the write lock is taken
    before the first read of a transaction; concurrent transactions queue on
    the busy timeout instead of failing on lock upgrade.
    """

    @event.listens_for(engine.sync_engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine.sync_engine, "begin")
    def _on_begin(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")


def build_engine(url: str = DATABASE_URL, **kwargs) -> AsyncEngine:
    """Создать async engine для PostgreSQL (asyncpg) или SQLite (aiosqlite)"""
    if url.startswith("sqlite"):
        engine = create_async_engine(
            url,
            echo=False,
            connect_args={"timeout": SQLITE_BUSY_TIMEOUT},
            **kwargs,
        )
        _enable_sqlite_serialized_writes(engine)
        return engine

    return create_async_engine(
        url,
        echo=False,  # Отключаем echo в production
        pool_size=20,
        max_overflow=10,
        pool_timeout=30,
        pool_recycle=3600,  # Переподключение каждый час
        pool_pre_ping=True,  # Проверка соединения перед использованием
        # count-after-lock in the booking ledger needs a fresh snapshot per statement
        isolation_level="READ COMMITTED",
        **kwargs,
    )


def build_sessionmaker(bind: AsyncEngine) -> sessionmaker:
    return sessionmaker(
        bind,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,  # Отключаем автофлаш для лучшего контроля
    )


engine = build_engine()

async_session = build_sessionmaker(engine)

Base = declarative_base()

# Типы для retry decorator
F = TypeVar("F", bound=Callable[..., Any])


def db_retry(
    max_attempts: int = None,
    delay: float = None,
    backoff_factor: float = None,
    exceptions: tuple = None,
) -> Callable[[F], F]:
    """
    Decorator для повторных попыток операций с базой данных.

    Only startup/maintenance operations use it; booking and membership
    transitions never retry.

    Args:
        max_attempts: Максимальное количество попыток (по умолчанию из config)
        delay: Начальная задержка между попытками (по умолчанию из config)
        backoff_factor: Множитель для увеличения задержки (по умолчанию из config)
        exceptions: Кортеж исключений для повтора
    """
    if max_attempts is None:
        max_attempts = DB_RETRY_ATTEMPTS

    if delay is None:
        delay = DB_RETRY_DELAY

    if backoff_factor is None:
        backoff_factor = DB_RETRY_BACKOFF_FACTOR

    if exceptions is None:
        exceptions = (
            OperationalError,
            DisconnectionError,
            TimeoutError,
            ConnectionFailureError,
            ConnectionDoesNotExistError,
        )

    def decorator(func: F) -> F:
        @wraps(func)
        async def async_wrapper(*args, **kwargs):
            current_delay = delay
            last_exception = None

            for attempt in range(max_attempts):
                try:
                    return await func(*args, **kwargs)

                except exceptions as e:
                    last_exception = e

                    if attempt == max_attempts - 1:
                        break

                    logger.warning(
                        f"Database operation failed (attempt {attempt + 1}/{max_attempts}): {str(e)}",
                        extra={
                            "function": func.__name__,
                            "attempt": attempt + 1,
                            "max_attempts": max_attempts,
                            "exception_type": type(e).__name__,
                        },
                    )

                    await asyncio.sleep(current_delay)
                    current_delay *= backoff_factor

            logger.error(
                f"Database operation failed after {max_attempts} attempts: {str(last_exception)}",
                extra={
                    "function": func.__name__,
                    "max_attempts": max_attempts,
                    "final_exception": str(last_exception),
                },
            )

            # Преобразуем в наше исключение
            if isinstance(
                last_exception,
                (
                    ConnectionFailureError,
                    ConnectionDoesNotExistError,
                    DisconnectionError,
                ),
            ):
                raise DatabaseConnectionError(
                    f"Database connection failed after {max_attempts} attempts"
                )
            elif isinstance(last_exception, TimeoutError):
                raise DatabaseTimeoutError(func.__name__, 30)
            else:
                raise last_exception

        return async_wrapper

    return decorator


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """
    Dependency для получения сессии базы данных
    """
    session = async_session()
    try:
        yield session
    except BaseAppException:
        await session.rollback()
        raise
    except Exception as e:
        await session.rollback()
        logger.error(f"Session error: {str(e)}")
        raise
    finally:
        await session.close()


async def acquire_occurrence_lock(session: AsyncSession, key1: int, key2: int) -> None:
    """
    Take a transaction-scoped lock on the pair (key1, key2).

    PostgreSQL: pg_advisory_xact_lock, released on commit/rollback; distinct
    keys never block each other. SQLite: the transaction already holds the
    database write lock (BEGIN IMMEDIATE), nothing to do.
    """
    dialect = session.bind.dialect.name

    if dialect == "postgresql":
        await session.execute(
            text("SELECT pg_advisory_xact_lock(:key1, :key2)"),
            {"key1": key1, "key2": key2},
        )
    elif dialect != "sqlite":
        raise ConfigurationError(
            "DATABASE_URL", f"Unsupported database dialect for locking: {dialect}"
        )


class DatabaseManager:
    """Менеджер для управления операциями с базой данных"""

    @staticmethod
    @db_retry()
    async def create_tables():
        """Создание всех таблиц в базе данных"""
        try:
            async with engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)
            logger.info("Database tables created successfully")
        except Exception as e:
            logger.error(f"Failed to create database tables: {str(e)}")
            raise

    @staticmethod
    @db_retry()
    async def check_connection():
        """Проверка соединения с базой данных"""
        try:
            async with engine.begin() as conn:
                await conn.execute(text("SELECT 1"))
            logger.info("Database connection check successful")
            return True
        except Exception as e:
            logger.error(f"Database connection check failed: {str(e)}")
            raise DatabaseConnectionError("Database connection check failed")

    @staticmethod
    async def close_connections():
        """Закрытие всех соединений с базой данных"""
        try:
            await engine.dispose()
            logger.info("Database connections closed successfully")
        except Exception as e:
            logger.error(f"Error closing database connections: {str(e)}")


db_manager = DatabaseManager()


# Декораторы для CRUD операций
def db_operation(func: F) -> F:
    """
    Декоратор для CRUD операций с логированием
    """

    @wraps(func)
    async def wrapper(*args, **kwargs):
        operation_name = func.__name__

        try:
            logger.debug(f"Starting database operation: {operation_name}")
            result = await func(*args, **kwargs)
            logger.debug(f"Database operation completed: {operation_name}")
            return result

        except SQLAlchemyError as e:
            logger.error(
                f"SQLAlchemy error in {operation_name}: {str(e)}",
                extra={"operation": operation_name, "exception_type": type(e).__name__},
            )
            raise

    return wrapper
