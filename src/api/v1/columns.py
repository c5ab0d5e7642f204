from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.db.database import get_async_session
from src.api.dependencies.auth import get_current_user
from src.api.dependencies.permissions import require_board_owner, require_column_board_owner
from src.models.board import Board
from src.models.user import User
from src.schemas.column import ColumnCreate, ColumnResponse, ColumnUpdate
from src.services.column_service import ColumnService

router = APIRouter(
    prefix="/columns",
    tags=["columns"],
)

# Column creation lives under its board
board_columns_router = APIRouter(
    prefix="/boards/{board_id}/columns",
    tags=["columns"],
)


@board_columns_router.post("", response_model=ColumnResponse, status_code=status.HTTP_201_CREATED)
async def create_column(
    board_id: int,
    column_create: ColumnCreate,
    board: Board = Depends(require_board_owner),
    db: AsyncSession = Depends(get_async_session),
):
    """Append a column to a board (owner only)"""
    return await ColumnService.create(
        db=db,
        board_id=board.id,
        name=column_create.name,
        wip_limit=column_create.wip_limit,
    )


@router.patch("/{column_id}", response_model=ColumnResponse)
async def update_column(
    column_id: int,
    column_update: ColumnUpdate,
    board: Board = Depends(require_column_board_owner),
    db: AsyncSession = Depends(get_async_session),
):
    """Rename a column or change its WIP limit (owner only)"""
    return await ColumnService.update(
        db=db,
        column_id=column_id,
        changes=column_update.model_dump(exclude_unset=True),
    )


@router.delete("/{column_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_column(
    column_id: int,
    board: Board = Depends(require_column_board_owner),
    db: AsyncSession = Depends(get_async_session),
    current_user: User = Depends(get_current_user),
):
    """Delete a column and the cards in it (owner only)"""
    await ColumnService.delete(db=db, column_id=column_id, user_id=current_user.id)
