"""Statement and table metadata models."""

from typing import Any

from pydantic import BaseModel, Field


class Statement(BaseModel):
    """A SQL statement with its bound parameters."""

    text: str = Field(..., description="SQL text, with :name placeholders")
    params: dict[str, Any] = Field(
        default_factory=dict, description="Values bound to the placeholders"
    )

    model_config = {"frozen": True}


class TableShape(BaseModel):
    """Row and column counts of a table."""

    rows: int = Field(..., ge=0, description="Number of rows")
    columns: int = Field(..., ge=0, description="Number of columns")

    def as_tuple(self) -> tuple[int, int]:
        """Return (rows, columns)."""
        return (self.rows, self.columns)
