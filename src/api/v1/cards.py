from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.db.database import get_async_session
from src.api.dependencies.auth import get_current_user
from src.api.dependencies.permissions import resolve_board
from src.core.exceptions import NotFound
from src.models.user import User
from src.schemas.card import CardCreate, CardUpdate, CardMove, CardResponse, CardDetailResponse
from src.services.card_service import CardService
from src.services.move_service import MoveService

router = APIRouter(
    prefix="/cards",
    tags=["cards"],
)

# Card creation lives under its board
board_cards_router = APIRouter(
    prefix="/boards/{board_id}/cards",
    tags=["cards"],
)


@board_cards_router.post("", response_model=CardResponse, status_code=status.HTTP_201_CREATED)
async def create_card(
    board_id: int,
    card_create: CardCreate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
):
    """Create a card at the bottom of a column (any authenticated user)"""
    board = await resolve_board(db, board_id=board_id)
    return await CardService.create(
        db=db,
        board_id=board.id,
        column_id=card_create.column_id,
        title=card_create.title,
        description=card_create.description,
        created_by=current_user.id,
    )


@router.get("/{card_id}", response_model=CardDetailResponse)
async def get_card(
    card_id: int,
    db: AsyncSession = Depends(get_async_session),
):
    """Get a card with its creator and column (public)"""
    card = await CardService.get_by_id(db, card_id, load_relations=True)
    if not card:
        raise NotFound("Card not found")
    return card


@router.patch("/{card_id}", response_model=CardResponse)
async def update_card(
    card_id: int,
    card_update: CardUpdate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
):
    """Update a card's title or description (any authenticated user)"""
    return await CardService.update(
        db=db,
        card_id=card_id,
        changes=card_update.model_dump(exclude_unset=True),
        user_id=current_user.id,
    )


@router.delete("/{card_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_card(
    card_id: int,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
):
    """Delete a card, keeping its history (any authenticated user)"""
    await CardService.delete(db=db, card_id=card_id, user_id=current_user.id)


@router.post("/{card_id}/move", response_model=CardResponse)
async def move_card(
    card_id: int,
    card_move: CardMove,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
):
    """Move a card to the top or bottom of another column (any authenticated user)"""
    return await MoveService.move_card(
        db=db,
        card_id=card_id,
        to_column_id=card_move.to_column_id,
        placement=card_move.position,
        user_id=current_user.id,
    )
