from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, Field, field_validator

from src.schemas.auth import UserBrief
from src.schemas.card import CardResponse
from src.schemas.column import ColumnResponse, ColumnWithCards, ColumnSummary


class BoardCreate(BaseModel):
    """Schema for board creation"""
    title: str = Field(..., min_length=1, max_length=80)
    description: Optional[str] = Field(None, max_length=255)


class BoardUpdate(BaseModel):
    """Schema for partial board update"""
    title: Optional[str] = Field(None, min_length=1, max_length=80)
    description: Optional[str] = Field(None, max_length=255)

    @field_validator("title", mode="before")
    @classmethod
    def title_not_null(cls, value):
        # Omit the field to keep it; null is not a title
        if value is None:
            raise ValueError("The title may not be null")
        return value


class BoardResponse(BaseModel):
    id: int
    title: str
    description: Optional[str] = None
    owner_id: int
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class BoardWithColumns(BoardResponse):
    """Board returned on creation, with its seeded columns"""
    columns: List[ColumnResponse] = []


class BoardSummary(BoardResponse):
    """Entry of the public board listing"""
    owner: UserBrief
    columns: List[ColumnSummary] = []


class BoardCompleteResponse(BoardResponse):
    """Board with owner, ordered columns and their cards, plus a flat card list"""
    owner: UserBrief
    columns: List[ColumnWithCards] = []
    cards: List[CardResponse] = []
