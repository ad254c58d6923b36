"""Error response schema.

Every failure, whatever its cause, reaches the client as a single-key
object carrying a human-readable message::

    {"error": "Producer not found"}
"""

from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    """Standardized error response body."""

    error: str = Field(
        ...,
        description="Human-readable error message",
        examples=["Invalid CPF or CNPJ", "Invalid total area", "Producer not found"],
    )

    model_config = {
        "json_schema_extra": {
            "examples": [
                {"error": '"taxId" is required'},
                {"error": '"invalidProperty" is not allowed'},
                {"error": "Producer not found"},
            ]
        }
    }
