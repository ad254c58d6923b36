"""FastAPI dependency injection for the database handle and sessions.

The :class:`Database` lives on ``app.state``; these dependencies hand it,
or a request-scoped session opened from it, to route handlers.
"""

from collections.abc import AsyncGenerator
from typing import Annotated

from fastapi import Depends, Request
from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from src.infrastructure.database.session import Database


def get_database(request: Request) -> Database:
    """Return the process-wide database handle."""
    database: Database = request.app.state.database
    return database


async def get_db(
    database: Annotated[Database, Depends(get_database)],
) -> AsyncGenerator[AsyncSession]:
    """Provide a request-scoped session.

    The session is committed when the handler returns and rolled back
    when it raises.

    Yields:
        AsyncGenerator[AsyncSession]: Session bound to the application database.
    """
    async with database.session() as session:
        logger.debug("Providing database session for request")
        yield session


DatabaseHandle = Annotated[Database, Depends(get_database)]
DatabaseSession = Annotated[AsyncSession, Depends(get_db)]
