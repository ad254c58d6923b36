"""ORM models."""

from sqlalchemy import JSON, Float, String
from sqlalchemy.orm import Mapped, mapped_column

from src.infrastructure.constants import STATE_MAX_LENGTH
from src.infrastructure.database.base import BaseModel


class Producer(BaseModel):
    """A rural producer and the farm it operates.

    Areas are in hectares. ``crops`` keeps the order the client sent.
    """

    __tablename__ = "producers"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    tax_id: Mapped[str] = mapped_column(
        String(18),
        nullable=False,
        doc="CPF or CNPJ, stored as sent by the client",
    )
    farm_name: Mapped[str] = mapped_column(String(255), nullable=False)
    city: Mapped[str] = mapped_column(String(255), nullable=False)
    state: Mapped[str] = mapped_column(
        String(STATE_MAX_LENGTH), nullable=False, index=True
    )
    total_area: Mapped[float] = mapped_column(Float, nullable=False)
    agricultural_area: Mapped[float] = mapped_column(Float, nullable=False)
    vegetation_area: Mapped[float] = mapped_column(Float, nullable=False)
    crops: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
