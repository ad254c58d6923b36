"""Base repository pattern implementation for database operations.

This module provides a generic repository base class that implements
common CRUD operations for SQLAlchemy models using async patterns.
"""

from collections.abc import Mapping

from loguru import logger
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from src.infrastructure.database.base import BaseModel


class BaseRepository[T: BaseModel]:
    """Base repository class providing common CRUD operations.

    Changes are flushed, not committed; the session owner commits.

    Args:
        session: The async SQLAlchemy session to use for operations.
        model_class: The SQLAlchemy model class this repository manages.

    Example:
        class ProducerRepository(BaseRepository[Producer]):
            def __init__(self, session: AsyncSession) -> None:
                super().__init__(session, Producer)
    """

    def __init__(self, session: AsyncSession, model_class: type[T]) -> None:
        self.session = session
        self.model_class = model_class

    async def get_by_id(self, entity_id: int) -> T | None:
        """Retrieve a model instance by its ID.

        Args:
            entity_id: The primary key ID of the model to retrieve.

        Returns:
            T | None: The model instance if found, None otherwise.
        """
        logger.debug("Fetching {} by ID: {}", self.model_class.__name__, entity_id)

        stmt = select(self.model_class).where(self.model_class.id == entity_id)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_all(self, skip: int, limit: int) -> list[T]:
        """Retrieve one page of instances in creation order.

        Args:
            skip: Number of records to skip.
            limit: Maximum number of records to return.

        Returns:
            list[T]: List of model instances.
        """
        logger.debug(
            "Fetching {} page - skip: {}, limit: {}",
            self.model_class.__name__,
            skip,
            limit,
        )

        stmt = (
            select(self.model_class)
            .order_by(self.model_class.id)
            .offset(skip)
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def create(self, obj: T) -> T:
        """Persist a new instance.

        Args:
            obj: The model instance to create.

        Returns:
            T: The created model instance with populated ID and timestamps.
        """
        self.session.add(obj)
        await self.session.flush()

        # Refresh to get server-generated values (ID, timestamps)
        await self.session.refresh(obj)

        logger.info(
            "Created {} instance with ID: {}", self.model_class.__name__, obj.id
        )
        return obj

    async def update(self, entity_id: int, data: Mapping[str, object]) -> T | None:
        """Update an instance by its ID with partial data.

        Args:
            entity_id: The primary key ID of the model to update.
            data: Mapping of column names to new values.

        Returns:
            T | None: The updated model instance if found, None otherwise.
        """
        instance = await self.get_by_id(entity_id)
        if instance is None:
            return None

        for key, value in data.items():
            if hasattr(instance, key):
                setattr(instance, key, value)
            else:
                logger.warning(
                    "Attempted to update non-existent field '{}' on {}",
                    key,
                    self.model_class.__name__,
                )

        await self.session.flush()
        await self.session.refresh(instance)

        logger.info(
            "Updated {} instance ID {} - fields: {}",
            self.model_class.__name__,
            entity_id,
            list(data.keys()),
        )
        return instance

    async def delete(self, entity_id: int) -> T | None:
        """Delete an instance by its ID.

        Args:
            entity_id: The primary key ID of the model to delete.

        Returns:
            T | None: The removed instance, or None if it did not exist.
        """
        instance = await self.get_by_id(entity_id)
        if instance is None:
            return None

        await self.session.delete(instance)
        await self.session.flush()

        logger.info(
            "Deleted {} instance with ID: {}", self.model_class.__name__, entity_id
        )
        return instance

    async def count(self) -> int:
        """Count all instances of the model."""
        stmt = select(func.count()).select_from(self.model_class)
        result = await self.session.execute(stmt)
        return result.scalar() or 0
