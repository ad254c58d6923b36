"""Producer persistence and the aggregate queries behind the dashboards."""

from dataclasses import dataclass

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from src.infrastructure.database.models import Producer
from src.infrastructure.database.repository import BaseRepository


@dataclass(frozen=True)
class AreaTotals:
    """Summed areas across all producers; None when there are no rows."""

    total_area: float | None
    agricultural_area: float | None
    vegetation_area: float | None


class ProducerRepository(BaseRepository[Producer]):
    """Repository for :class:`Producer` records."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, Producer)

    async def sum_total_area(self) -> float | None:
        """Sum of ``total_area`` over all producers (None when empty)."""
        result = await self.session.execute(select(func.sum(Producer.total_area)))
        return result.scalar()

    async def count_by_state(self) -> list[tuple[str, int]]:
        """Number of producers per state, ordered by state."""
        stmt = (
            select(Producer.state, func.count(Producer.id))
            .group_by(Producer.state)
            .order_by(Producer.state)
        )
        result = await self.session.execute(stmt)
        return [(state, count) for state, count in result.all()]

    async def list_crops(self) -> list[list[str]]:
        """Crop list of every producer, in creation order."""
        result = await self.session.execute(
            select(Producer.crops).order_by(Producer.id)
        )
        return [list(crops or []) for crops in result.scalars().all()]

    async def sum_areas(self) -> AreaTotals:
        """Summed total, agricultural and vegetation areas."""
        stmt = select(
            func.sum(Producer.total_area),
            func.sum(Producer.agricultural_area),
            func.sum(Producer.vegetation_area),
        )
        result = await self.session.execute(stmt)
        total, agricultural, vegetation = result.one()
        return AreaTotals(
            total_area=total,
            agricultural_area=agricultural,
            vegetation_area=vegetation,
        )
