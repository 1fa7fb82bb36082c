import asyncio
import logging

from sqlalchemy import inspect

from app.core.config import ENVIRONMENT
from app.core.database import DatabaseManager, engine, Base
from app.core.exceptions import DatabaseError, ConfigurationError

# Register every mapped table on Base.metadata
from app.desk import models as desk_models  # noqa: F401
from app.portal import models as portal_models  # noqa: F401

logger = logging.getLogger(__name__)
db_manager = DatabaseManager()


async def init_database():
    """Initialize database with tables"""
    try:
        logger.info("Starting database initialization...")

        # Проверяем соединение с базой данных
        await db_manager.check_connection()
        logger.info("✅ Database connection verified")

        # Create all tables with retry mechanism
        await db_manager.create_tables()
        logger.info("✅ Database tables created/verified")

        logger.info("🎉 Database initialization completed successfully")

    except DatabaseError:
        # Наши ошибки БД - просто перебрасываем
        raise
    except Exception as e:
        logger.error(f"Unexpected error during database initialization: {e}")
        raise DatabaseError(f"Database initialization failed: {str(e)}")


async def verify_database_setup():
    """Verify that every mapped table exists"""
    try:
        logger.info("Verifying database setup...")

        async with engine.connect() as conn:
            existing = await conn.run_sync(lambda sync_conn: set(inspect(sync_conn).get_table_names()))

        missing = sorted(set(Base.metadata.tables) - existing)
        if missing:
            raise DatabaseError(f"Missing tables: {', '.join(missing)}")

        logger.info(f"✅ Database verification passed: {len(existing)} tables found")
        return True

    except DatabaseError:
        raise
    except Exception as e:
        logger.error(f"Database verification failed: {e}")
        raise DatabaseError(f"Database verification failed: {str(e)}")


async def reset_database():
    """Reset database (for development/testing only)"""
    if ENVIRONMENT not in ["development", "dev", "test"]:
        raise ConfigurationError(
            "ENVIRONMENT",
            "Database reset is only allowed in development or test environments",
        )

    try:
        logger.warning("🚨 RESETTING DATABASE - ALL DATA WILL BE LOST!")

        # Drop all tables
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)

        logger.info("✅ All tables dropped")

        await init_database()

        logger.info("✅ Database reset completed")

    except Exception as e:
        logger.error(f"Database reset failed: {e}")
        raise DatabaseError(f"Database reset failed: {str(e)}")


if __name__ == "__main__":
    import sys

    async def main():
        if len(sys.argv) > 1:
            command = sys.argv[1]

            if command == "init":
                await init_database()
            elif command == "verify":
                await verify_database_setup()
            elif command == "reset":
                await reset_database()
            else:
                print(f"Unknown command: {command}")
                print("Available commands: init, verify, reset")
                sys.exit(1)
        else:
            await init_database()

    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        logger.info("Database initialization cancelled by user")
    except Exception as e:
        logger.error(f"Database initialization failed: {e}")
        sys.exit(1)
