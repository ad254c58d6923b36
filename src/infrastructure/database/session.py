"""Async database engine and session lifecycle management.

The process owns exactly one :class:`Database` handle. The application
factory builds it from the settings, keeps it on ``app.state.database`` and
disposes it at shutdown; request handlers receive it (or sessions opened
from it) through FastAPI dependencies.

Features:
- **Connection pooling**: Configurable pool with overflow and recycling
- **Session lifecycle**: Commit on success, rollback on error, always close
- **Health checks**: ``SELECT 1`` connectivity probe
- **Query monitoring**: Optional slow query logging via engine events
"""

import time
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any
from weakref import WeakKeyDictionary

from loguru import logger
from sqlalchemy import event, text
from sqlalchemy.engine import Connection
from sqlalchemy.engine.interfaces import DBAPICursor, ExecutionContext
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from src.core.config import DatabaseConfig, LogConfig
from src.core.context import RequestContext
from src.core.error_context import sanitize_sql_params
from src.infrastructure.constants import COMMAND_TIMEOUT_SECONDS, POOL_RECYCLE_SECONDS

# Store query start times for execution contexts
_query_start_times: WeakKeyDictionary[ExecutionContext, float] = WeakKeyDictionary()


class SlowQueryListener:
    """Engine event hooks that log statements slower than a threshold."""

    def __init__(self, threshold_ms: int) -> None:
        self.threshold_ms = threshold_ms

    def before_cursor_execute(
        self,
        _conn: Connection,
        _cursor: DBAPICursor,
        _statement: str,
        _parameters: Any,  # noqa: ANN401 - driver-specific parameter container
        context: ExecutionContext,
        _executemany: bool,
    ) -> None:
        """Record the start time of the statement."""
        _query_start_times[context] = time.perf_counter()

    def after_cursor_execute(
        self,
        _conn: Connection,
        cursor: DBAPICursor,
        statement: str,
        parameters: Any,  # noqa: ANN401 - driver-specific parameter container
        context: ExecutionContext,
        executemany: bool,
    ) -> None:
        """Log the statement when it exceeded the threshold."""
        start_time = _query_start_times.pop(context, None)
        if start_time is None:
            return

        duration_ms = (time.perf_counter() - start_time) * 1000
        if duration_ms < self.threshold_ms:
            return

        clean_statement = " ".join(statement.split())[:500]
        logger.warning(
            "Slow query detected: {}... Duration: {:.2f}ms",
            clean_statement[:100],
            duration_ms,
            query=clean_statement,
            duration_ms=round(duration_ms, 2),
            rows_affected=getattr(cursor, "rowcount", -1),
            parameters=sanitize_sql_params(parameters),
            correlation_id=RequestContext.get_correlation_id(),
            executemany=executemany,
            threshold_ms=self.threshold_ms,
        )


def create_database_engine(
    db_config: DatabaseConfig, log_config: LogConfig | None = None
) -> AsyncEngine:
    """Create an async SQLAlchemy engine.

    PostgreSQL gets a tuned pool plus asyncpg connection options; SQLite
    (used for local runs and tests) keeps SQLAlchemy's default pool.

    Args:
        db_config: Database section of the settings.
        log_config: Logging section; enables slow query logging when asked.

    Returns:
        AsyncEngine: Configured async engine instance.
    """
    engine_options: dict[str, Any] = {"echo": db_config.echo}
    if not db_config.is_sqlite:
        engine_options.update(
            pool_size=db_config.pool_size,
            max_overflow=db_config.max_overflow,
            pool_timeout=db_config.pool_timeout,
            pool_pre_ping=db_config.pool_pre_ping,
            pool_recycle=POOL_RECYCLE_SECONDS,
            connect_args={
                "server_settings": {"jit": "off"},
                "command_timeout": COMMAND_TIMEOUT_SECONDS,
            },
        )

    engine = create_async_engine(db_config.database_url, **engine_options)

    if log_config is not None and log_config.enable_sql_logging:
        listener = SlowQueryListener(log_config.slow_query_threshold_ms)
        event.listen(
            engine.sync_engine, "before_cursor_execute", listener.before_cursor_execute
        )
        event.listen(
            engine.sync_engine, "after_cursor_execute", listener.after_cursor_execute
        )
        logger.info("Registered slow query event listeners")

    logger.info(
        "Created database engine - dialect: {}, sql_logging: {}",
        engine.dialect.name,
        bool(log_config and log_config.enable_sql_logging),
    )

    return engine


class Database:
    """Engine plus session factory, owned by the application.

    Args:
        engine: The async engine every session is bound to.

    Example:
        database = Database.from_config(settings.database_config)
        async with database.session() as session:
            await session.execute(select(Producer))
    """

    def __init__(self, engine: AsyncEngine) -> None:
        self.engine = engine
        self.session_factory = async_sessionmaker(
            engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    @classmethod
    def from_config(
        cls, db_config: DatabaseConfig, log_config: LogConfig | None = None
    ) -> "Database":
        """Build the handle from the settings sections."""
        return cls(create_database_engine(db_config, log_config))

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession]:
        """Open a session that commits on success and rolls back on error.

        Yields:
            AsyncSession: Session bound to this database.

        Raises:
            Exception: Anything raised inside the block, after rollback.
        """
        async with self.session_factory() as session:
            logger.debug("Created new database session")
            try:
                yield session
                await session.commit()
                logger.debug("Database session committed successfully")
            except Exception:
                await session.rollback()
                logger.debug("Database session rolled back due to error")
                raise

    async def check_connection(self) -> tuple[bool, str | None]:
        """Probe the database with ``SELECT 1``.

        Returns:
            tuple[bool, str | None]: Health flag and the error message, if any.
        """
        try:
            async with self.engine.connect() as conn:
                result = await conn.execute(text("SELECT 1"))
                _ = result.scalar()
        # Refused connections surface as OSError from the driver
        except (SQLAlchemyError, OSError) as e:
            return False, str(e)
        else:
            return True, None

    async def dispose(self) -> None:
        """Close every pooled connection."""
        await self.engine.dispose()
        logger.info("Database engine disposed")
