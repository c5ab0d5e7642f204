from typing import List
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from src.db.database import get_async_session
from src.core.exceptions import NotFound
from src.models.history import CardHistory
from src.schemas.auth import UserBrief
from src.schemas.history import HistoryEntryResponse
from src.services.board_service import BoardService
from src.services.card_service import CardService
from src.services.history_service import HistoryService

router = APIRouter(tags=["history"])


def history_entry_out(entry: CardHistory) -> HistoryEntryResponse:
    from_column = None
    if entry.from_column_id is not None:
        from_column = {"id": entry.from_column_id, "name": entry.from_column_name}
    to_column = None
    if entry.to_column_id is not None:
        to_column = {"id": entry.to_column_id, "name": entry.to_column_name}

    return HistoryEntryResponse(
        id=entry.id,
        card_id=entry.card_id,
        board_id=entry.board_id,
        card_title=entry.card_title,
        type=entry.action.value,
        from_column=from_column,
        to_column=to_column,
        by_user=UserBrief.model_validate(entry.user) if entry.user else None,
        at=entry.created_at,
    )


@router.get("/cards/{card_id}/history", response_model=List[HistoryEntryResponse])
async def get_card_history(
    card_id: int,
    db: AsyncSession = Depends(get_async_session),
):
    """History of one card, oldest first; still available after the card is deleted"""
    entries = await HistoryService.for_card(db, card_id)
    if not entries and not await CardService.get_by_id(db, card_id):
        raise NotFound("Card not found")
    return [history_entry_out(entry) for entry in entries]


@router.get("/boards/{board_id}/history", response_model=List[HistoryEntryResponse])
async def get_board_history(
    board_id: int,
    db: AsyncSession = Depends(get_async_session),
):
    """History of every card of a board, oldest first"""
    entries = await HistoryService.for_board(db, board_id)
    if not entries and not await BoardService.get_by_id(db, board_id):
        raise NotFound("Board not found")
    return [history_entry_out(entry) for entry in entries]
