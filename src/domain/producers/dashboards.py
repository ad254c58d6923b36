"""Dashboard aggregates over every stored producer.

The dashboard is a fixed-order list of five single-key objects::

    [
        {"count": 2},
        {"totalArea": 200.0},
        {"byState": [{"state": "MG", "count": 1}, ...]},
        {"byCrop": [{"crop": "Soja", "count": 2}, ...]},
        {"bySoil": {"agriculturalAreaPct": 55, "vegetationAreaPct": 25}},
    ]

Panels are independent and run concurrently, each in its own session.
"""

import asyncio
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Any

from loguru import logger

from src.infrastructure.database.producer_repository import ProducerRepository
from src.infrastructure.database.session import Database

type PanelCompute = Callable[[ProducerRepository], Awaitable[Any]]


@dataclass(frozen=True)
class DashboardPanel:
    """One dashboard entry: its output key and the query producing its value."""

    key: str
    compute: PanelCompute


def percentage(part: float | None, total: float | None) -> int | None:
    """``100 * part / total`` rounded half up; None when total is empty or zero."""
    if not total:
        return None
    ratio = Decimal(str(part or 0)) * 100 / Decimal(str(total))
    return int(ratio.quantize(Decimal(1), rounding=ROUND_HALF_UP))


async def count_producers(repository: ProducerRepository) -> int:
    return await repository.count()


async def total_area(repository: ProducerRepository) -> float | None:
    return await repository.sum_total_area()


async def producers_by_state(repository: ProducerRepository) -> list[dict[str, Any]]:
    return [
        {"state": state, "count": count}
        for state, count in await repository.count_by_state()
    ]


async def producers_by_crop(repository: ProducerRepository) -> list[dict[str, Any]]:
    """Producers per crop; crops appear in the order they were first seen."""
    counts: dict[str, int] = {}
    for crops in await repository.list_crops():
        # A crop listed twice on one farm still counts that farm once
        for crop in dict.fromkeys(crops):
            counts[crop] = counts.get(crop, 0) + 1
    return [{"crop": crop, "count": count} for crop, count in counts.items()]


async def soil_usage(repository: ProducerRepository) -> dict[str, int | None]:
    totals = await repository.sum_areas()
    return {
        "agriculturalAreaPct": percentage(
            totals.agricultural_area, totals.total_area
        ),
        "vegetationAreaPct": percentage(totals.vegetation_area, totals.total_area),
    }


DASHBOARD_PANELS: tuple[DashboardPanel, ...] = (
    DashboardPanel("count", count_producers),
    DashboardPanel("totalArea", total_area),
    DashboardPanel("byState", producers_by_state),
    DashboardPanel("byCrop", producers_by_crop),
    DashboardPanel("bySoil", soil_usage),
)


async def _run_panel(database: Database, panel: DashboardPanel) -> dict[str, Any]:
    async with database.session() as session:
        value = await panel.compute(ProducerRepository(session))
    return {panel.key: value}


async def compute_dashboards(
    database: Database,
    panels: tuple[DashboardPanel, ...] = DASHBOARD_PANELS,
) -> list[dict[str, Any]]:
    """Compute every panel concurrently and return them in panel order.

    Args:
        database: Handle used to open one session per panel.
        panels: Panels to compute, in output order.

    Returns:
        list[dict[str, Any]]: One single-key object per panel.
    """
    results = await asyncio.gather(
        *(_run_panel(database, panel) for panel in panels)
    )
    logger.debug("Computed {} dashboard panels", len(results))
    return list(results)
