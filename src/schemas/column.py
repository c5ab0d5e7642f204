from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, Field, ValidationInfo, field_validator

from src.schemas.card import CardResponse


class ColumnCreate(BaseModel):
    """Schema for column creation"""
    name: str = Field(..., min_length=1, max_length=40)
    wip_limit: int = Field(..., ge=0)


class ColumnUpdate(BaseModel):
    """Schema for partial column update"""
    name: Optional[str] = Field(None, min_length=1, max_length=40)
    wip_limit: Optional[int] = Field(None, ge=0)

    @field_validator("name", "wip_limit", mode="before")
    @classmethod
    def not_null(cls, value, info: ValidationInfo):
        if value is None:
            raise ValueError(f"The {info.field_name} may not be null")
        return value


class ColumnResponse(BaseModel):
    id: int
    board_id: int
    name: str
    wip_limit: int
    order: int
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class ColumnWithCards(ColumnResponse):
    cards: List[CardResponse] = []


class ColumnSummary(BaseModel):
    """Column entry of the board listing, with its live card count"""
    id: int
    name: str
    order: int
    wip_limit: int
    count: int = 0
