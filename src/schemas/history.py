from datetime import datetime
from typing import Optional
from pydantic import BaseModel

from src.schemas.auth import UserBrief
from src.schemas.card import ColumnBrief


class HistoryEntryResponse(BaseModel):
    id: int
    card_id: int
    board_id: int
    card_title: str
    type: str
    from_column: Optional[ColumnBrief] = None
    to_column: Optional[ColumnBrief] = None
    by_user: Optional[UserBrief] = None
    at: datetime
