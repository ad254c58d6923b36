"""SQLAlchemy declarative base and common model fields.

Every table gets:

- a sequential BigInteger primary key (plain INTEGER on SQLite so the
  column aliases ROWID and autoincrements),
- timezone-aware ``created_at`` / ``updated_at`` timestamps set by the
  database.

Constraint names follow a fixed convention so Alembic migrations stay
deterministic.
"""

from datetime import datetime

from sqlalchemy import BigInteger, DateTime, Integer, MetaData, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from src.infrastructure.constants import NAMING_CONVENTION

# SQLite only autoincrements columns declared exactly as INTEGER PRIMARY KEY
IdentityType = BigInteger().with_variant(Integer(), "sqlite")


class Base(DeclarativeBase):
    """Declarative base configured with the constraint naming convention."""

    metadata = MetaData(naming_convention=NAMING_CONVENTION)


class BaseModel(Base):
    """Abstract model with id and audit timestamps."""

    __abstract__ = True

    id: Mapped[int] = mapped_column(
        IdentityType,
        primary_key=True,
        autoincrement=True,
        doc="Primary key; increases with creation order",
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
        doc="Timestamp when the record was created (UTC)",
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
        doc="Timestamp when the record was last updated (UTC)",
    )

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__}(id={self.id})>"
