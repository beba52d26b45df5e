from __future__ import annotations
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from .constants import (
    CATEGORY_DESCRIPTION_MAX,
    CATEGORY_NAME_MAX,
    CATEGORY_NAME_MIN,
    HEX_COLOR_PATTERN,
)


class Category(BaseModel):
    id: Optional[int] = None
    name: str
    color: str
    description: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class CategoryIn(BaseModel):
    name: str = Field(..., min_length=CATEGORY_NAME_MIN, max_length=CATEGORY_NAME_MAX)
    color: Optional[str] = Field(None, pattern=HEX_COLOR_PATTERN)
    description: Optional[str] = Field(None, max_length=CATEGORY_DESCRIPTION_MAX)

    @field_validator("name")
    @classmethod
    def _name_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Category name is required")
        return value.strip()

    @field_validator("color", mode="before")
    @classmethod
    def _empty_color_is_absent(cls, value):
        # An empty string means "use the default color", same as omitting it.
        if isinstance(value, str) and not value.strip():
            return None
        return value


class CategoryUpdateIn(BaseModel):
    """Partial update model; at least one field must be provided."""

    name: Optional[str] = Field(
        None, min_length=CATEGORY_NAME_MIN, max_length=CATEGORY_NAME_MAX
    )
    color: Optional[str] = Field(None, pattern=HEX_COLOR_PATTERN)
    description: Optional[str] = Field(None, max_length=CATEGORY_DESCRIPTION_MAX)

    @field_validator("name")
    @classmethod
    def _name_not_blank(cls, value: Optional[str]) -> Optional[str]:
        if value is not None and not value.strip():
            raise ValueError("Category name cannot be blank")
        return value.strip() if value is not None else None

    @model_validator(mode="after")
    def _at_least_one(self) -> "CategoryUpdateIn":
        if self.name is None and self.color is None and self.description is None:
            raise ValueError("at least one field must be provided for update")
        return self
