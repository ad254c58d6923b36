"""Producer CRUD and dashboard endpoints under ``/producer``."""

from typing import Annotated, Any

from fastapi import APIRouter, Path, Query, status

from src.api.constants import PRODUCER_PREFIX
from src.api.dependencies import AppSettings, ProducerServiceDep
from src.api.schemas.errors import ErrorResponse
from src.api.schemas.producers import ProducerCreate, ProducerRead, ProducerUpdate
from src.domain.producers.dashboards import compute_dashboards
from src.infrastructure.constants import MAX_BIGINT
from src.infrastructure.database.dependencies import DatabaseHandle

router = APIRouter(
    prefix=PRODUCER_PREFIX,
    tags=["producer"],
    responses={
        status.HTTP_400_BAD_REQUEST: {"model": ErrorResponse},
        status.HTTP_500_INTERNAL_SERVER_ERROR: {"model": ErrorResponse},
    },
)

NOT_FOUND_RESPONSE: dict[int | str, dict[str, Any]] = {
    status.HTTP_404_NOT_FOUND: {"model": ErrorResponse}
}

ProducerId = Annotated[int, Path(ge=1, le=MAX_BIGINT, description="Producer id")]


@router.get("", response_model=list[ProducerRead])
async def list_producers(
    service: ProducerServiceDep,
    settings: AppSettings,
    page: Annotated[int, Query(ge=1, description="Page number")] = 1,
    limit: Annotated[int | None, Query(ge=1, description="Items per page")] = None,
) -> list[ProducerRead]:
    """Return one page of producers in creation order."""
    if limit is None:
        limit = settings.producer_config.default_page_limit
    producers = await service.list(page, limit)
    return [ProducerRead.model_validate(producer) for producer in producers]


@router.get("/dashboards")
async def get_dashboards(database: DatabaseHandle) -> list[dict[str, Any]]:
    """Return the five dashboard aggregates in their fixed order."""
    return await compute_dashboards(database)


@router.get(
    "/{producer_id}", response_model=ProducerRead, responses=NOT_FOUND_RESPONSE
)
async def get_producer(
    producer_id: ProducerId, service: ProducerServiceDep
) -> ProducerRead:
    """Return one producer."""
    return ProducerRead.model_validate(await service.get(producer_id))


@router.post("", response_model=ProducerRead, status_code=status.HTTP_201_CREATED)
async def create_producer(
    producer_in: ProducerCreate, service: ProducerServiceDep
) -> ProducerRead:
    """Create a producer after validating its CPF/CNPJ and areas."""
    producer = await service.create(producer_in.model_dump())
    return ProducerRead.model_validate(producer)


@router.put(
    "/{producer_id}", response_model=ProducerRead, responses=NOT_FOUND_RESPONSE
)
async def update_producer(
    producer_id: ProducerId, producer_in: ProducerUpdate, service: ProducerServiceDep
) -> ProducerRead:
    """Update the supplied fields of a producer."""
    producer = await service.update(
        producer_id, producer_in.model_dump(exclude_unset=True)
    )
    return ProducerRead.model_validate(producer)


@router.delete(
    "/{producer_id}", response_model=ProducerRead, responses=NOT_FOUND_RESPONSE
)
async def delete_producer(
    producer_id: ProducerId, service: ProducerServiceDep
) -> ProducerRead:
    """Delete a producer and return the removed record."""
    return ProducerRead.model_validate(await service.delete(producer_id))
