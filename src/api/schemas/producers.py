"""Request and response schemas for producer records.

JSON fields are camelCase (``taxId``, ``farmName``...); Python attributes
stay snake_case. Unknown fields are rejected on both create and update.
"""

from datetime import datetime
from typing import Annotated, Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from src.infrastructure.constants import STATE_MAX_LENGTH

NonEmptyStr = Annotated[str, Field(min_length=1, max_length=255)]
TaxId = Annotated[
    str,
    Field(
        min_length=1,
        max_length=18,
        description="CPF (11 digits) or CNPJ (14 digits), punctuation allowed",
        examples=["529.982.247-25", "11.222.333/0001-81"],
    ),
]
State = Annotated[str, Field(min_length=1, max_length=STATE_MAX_LENGTH)]
Area = Annotated[
    float, Field(ge=0, allow_inf_nan=False, description="Area in hectares")
]


class ProducerSchema(BaseModel):
    """Shared configuration: camelCase aliases, names also accepted."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="forbid",
    )


class ProducerCreate(ProducerSchema):
    """Body of ``POST /producer``; every field is required."""

    name: NonEmptyStr
    tax_id: TaxId
    farm_name: NonEmptyStr
    city: NonEmptyStr
    state: State
    total_area: Area
    agricultural_area: Area
    vegetation_area: Area
    crops: list[str] = Field(examples=[["Soja", "Milho"]])

    model_config = ConfigDict(
        json_schema_extra={
            "examples": [
                {
                    "name": "João da Silva",
                    "taxId": "529.982.247-25",
                    "farmName": "Fazenda Boa Vista",
                    "city": "Uberaba",
                    "state": "MG",
                    "totalArea": 100,
                    "agriculturalArea": 60,
                    "vegetationArea": 30,
                    "crops": ["Soja", "Milho"],
                }
            ]
        }
    )


class ProducerUpdate(ProducerSchema):
    """Body of ``PUT /producer/{id}``; only the supplied fields change."""

    name: NonEmptyStr | None = None
    tax_id: TaxId | None = None
    farm_name: NonEmptyStr | None = None
    city: NonEmptyStr | None = None
    state: State | None = None
    total_area: Area | None = None
    agricultural_area: Area | None = None
    vegetation_area: Area | None = None
    crops: list[str] | None = None

    @field_validator("*", mode="before")
    @classmethod
    def reject_null(cls, v: Any) -> Any:  # noqa: ANN401 - raw JSON value
        """Fields may be omitted but not set to null."""
        if v is None:
            raise ValueError("must not be null")
        return v


class ProducerRead(ProducerSchema):
    """A stored producer as returned by the API."""

    model_config = ConfigDict(from_attributes=True, extra="ignore")

    id: int
    name: str
    tax_id: str
    farm_name: str
    city: str
    state: str
    total_area: float
    agricultural_area: float
    vegetation_area: float
    crops: list[str]
    created_at: datetime
    updated_at: datetime
