from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field, field_validator

from src.schemas.auth import UserBrief
from src.services.ordering import Placement


class CardCreate(BaseModel):
    """Schema for card creation"""
    title: str = Field(..., min_length=1, max_length=120)
    description: Optional[str] = None
    column_id: int


class CardUpdate(BaseModel):
    """Schema for partial card update, title and description only"""
    title: Optional[str] = Field(None, min_length=1, max_length=120)
    description: Optional[str] = None

    @field_validator("title", mode="before")
    @classmethod
    def title_not_null(cls, value):
        if value is None:
            raise ValueError("The title may not be null")
        return value


class CardMove(BaseModel):
    """Schema for moving a card to another column of its board"""
    to_column_id: int
    position: Placement = Placement.BOTTOM


class ColumnBrief(BaseModel):
    id: int
    name: str

    class Config:
        from_attributes = True


class CardResponse(BaseModel):
    id: int
    board_id: int
    column_id: int
    title: str
    description: Optional[str] = None
    position: int
    created_by: int
    created_at: datetime
    updated_at: datetime
    creator: Optional[UserBrief] = None

    class Config:
        from_attributes = True


class CardDetailResponse(CardResponse):
    column: Optional[ColumnBrief] = None
