"""Producer use cases on top of the repository.

Creation validates the tax identifier and then the area invariant before
anything is written. Updates persist the supplied fields as-is unless
``producer_config.validate_on_update`` is enabled.
"""

from collections.abc import Mapping
from typing import Any

from loguru import logger

from src.core.config import ProducerConfig
from src.core.error_context import mask_tax_id
from src.core.exceptions import NotFoundError, ValidationError
from src.domain.producers.validation import validate_area, validate_tax_id
from src.infrastructure.constants import MAX_BIGINT
from src.infrastructure.database.models import Producer
from src.infrastructure.database.producer_repository import ProducerRepository

NOT_FOUND_MESSAGE = "Producer not found"

AREA_FIELDS = ("total_area", "agricultural_area", "vegetation_area")


class ProducerService:
    """Create, read, update, delete and list producers.

    Args:
        repository: Repository bound to the current request's session.
        producer_config: Pagination limits and update validation switch.
    """

    def __init__(
        self, repository: ProducerRepository, producer_config: ProducerConfig
    ) -> None:
        self.repository = repository
        self.config = producer_config

    async def create(self, data: Mapping[str, Any]) -> Producer:
        """Validate and persist a new producer.

        Raises:
            ValidationError: Invalid CPF/CNPJ, or areas exceeding the total.
        """
        try:
            validate_tax_id(data["tax_id"])
            validate_area(
                data["total_area"], data["agricultural_area"], data["vegetation_area"]
            )
        except ValidationError as e:
            logger.info(
                "Producer rejected: {}",
                e.message,
                error_code=e.error_code,
                tax_id_masked=mask_tax_id(data["tax_id"]),
            )
            raise

        producer = await self.repository.create(Producer(**data))
        logger.info(
            "Producer created",
            producer_id=producer.id,
            state=producer.state,
            tax_id_masked=mask_tax_id(producer.tax_id),
        )
        return producer

    async def get(self, producer_id: int) -> Producer:
        """Fetch one producer.

        Raises:
            NotFoundError: No producer has this id.
        """
        producer = await self.repository.get_by_id(producer_id)
        if producer is None:
            raise NotFoundError(NOT_FOUND_MESSAGE, context={"producer_id": producer_id})
        return producer

    async def list(self, page: int, limit: int) -> list[Producer]:
        """One page of producers in creation order.

        ``limit`` is clamped to ``max_page_limit``.
        """
        if page < 1 or limit < 1:
            raise ValidationError(
                "page and limit must be positive integers",
                context={"page": page, "limit": limit},
            )

        limit = min(limit, self.config.max_page_limit)
        skip = (page - 1) * limit
        if skip > MAX_BIGINT:
            raise ValidationError(
                "page is out of range", context={"page": page, "limit": limit}
            )

        producers = await self.repository.get_all(skip=skip, limit=limit)
        logger.debug(
            "Listed producers - page: {}, limit: {}, returned: {}",
            page,
            limit,
            len(producers),
        )
        return producers

    async def update(self, producer_id: int, changes: Mapping[str, Any]) -> Producer:
        """Apply a partial update.

        Raises:
            NotFoundError: No producer has this id.
            ValidationError: Only with ``validate_on_update``, when the new
                tax id or the merged areas are invalid.
        """
        if self.config.validate_on_update:
            await self._validate_changes(producer_id, changes)

        producer = await self.repository.update(producer_id, changes)
        if producer is None:
            raise NotFoundError(NOT_FOUND_MESSAGE, context={"producer_id": producer_id})

        logger.info(
            "Producer updated",
            producer_id=producer.id,
            fields=sorted(changes),
        )
        return producer

    async def delete(self, producer_id: int) -> Producer:
        """Remove a producer and return the removed record.

        Raises:
            NotFoundError: No producer has this id.
        """
        producer = await self.repository.delete(producer_id)
        if producer is None:
            raise NotFoundError(NOT_FOUND_MESSAGE, context={"producer_id": producer_id})

        logger.info("Producer deleted", producer_id=producer_id)
        return producer

    async def _validate_changes(
        self, producer_id: int, changes: Mapping[str, Any]
    ) -> None:
        current = await self.get(producer_id)

        if "tax_id" in changes and changes["tax_id"] != current.tax_id:
            validate_tax_id(changes["tax_id"])

        if any(field in changes for field in AREA_FIELDS):
            merged = {
                field: changes.get(field, getattr(current, field))
                for field in AREA_FIELDS
            }
            validate_area(**merged)
