"""Rows of the static tag and type lookup tables."""

from typing import Any

from pydantic import BaseModel, Field, field_validator


def _parse_int(value: Any) -> Any:
    if isinstance(value, str):
        text = value.strip()
        return int(text, 16) if text.lower().startswith("0x") else int(text)
    return value


class TagRow(BaseModel):
    """Tag table row: numeric tag id and its canonical name."""

    id: int = Field(..., description="Tag id (decimal or 0x-prefixed hex in the source table)")
    name: str = Field(..., min_length=1, description="Canonical tag name")

    @field_validator("id", mode="before")
    @classmethod
    def parse_id(cls, value: Any) -> Any:
        return _parse_int(value)


class TypeRow(BaseModel):
    """Type table row: numeric type code and its description."""

    value: int = Field(..., description="Type code")
    description: str = Field(..., min_length=1, description="Type description, e.g. RATIONAL")

    @field_validator("value", mode="before")
    @classmethod
    def parse_value(cls, value: Any) -> Any:
        return _parse_int(value)
