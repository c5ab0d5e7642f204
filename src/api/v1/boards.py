from typing import List
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.db.database import get_async_session
from src.api.dependencies.auth import get_current_user
from src.api.dependencies.permissions import require_board_owner
from src.core.exceptions import NotFound
from src.models.board import Board
from src.models.user import User
from src.schemas.board import (
    BoardCreate,
    BoardUpdate,
    BoardResponse,
    BoardWithColumns,
    BoardSummary,
    BoardCompleteResponse,
)
from src.schemas.auth import UserBrief
from src.schemas.column import ColumnSummary
from src.services.board_service import BoardService

router = APIRouter(
    prefix="/boards",
    tags=["boards"],
)


def board_summary(board: Board, counts: dict) -> BoardSummary:
    """Listing entry with the live card count of every column"""
    return BoardSummary(
        id=board.id,
        title=board.title,
        description=board.description,
        owner_id=board.owner_id,
        created_at=board.created_at,
        updated_at=board.updated_at,
        owner=UserBrief.model_validate(board.owner),
        columns=[
            ColumnSummary(
                id=column.id,
                name=column.name,
                order=column.order,
                wip_limit=column.wip_limit,
                count=counts.get(column.id, 0),
            )
            for column in board.columns
        ],
    )


@router.get("", response_model=List[BoardSummary])
async def get_boards(
    db: AsyncSession = Depends(get_async_session),
):
    """List every board with its owner and column occupancy (public)"""
    boards = await BoardService.get_all(db)
    counts = await BoardService.get_card_counts(db, [board.id for board in boards])
    return [board_summary(board, counts) for board in boards]


@router.get("/{board_id}", response_model=BoardCompleteResponse)
async def get_board(
    board_id: int,
    db: AsyncSession = Depends(get_async_session),
):
    """Get a board with its columns and cards (public)"""
    board = await BoardService.get_complete(db, board_id)
    if not board:
        raise NotFound("Board not found")
    return board


@router.post("", response_model=BoardWithColumns, status_code=status.HTTP_201_CREATED)
async def create_board(
    board_create: BoardCreate,
    db: AsyncSession = Depends(get_async_session),
    current_user: User = Depends(get_current_user),
):
    """Create a new board with its three default columns"""
    return await BoardService.create(
        db=db,
        title=board_create.title,
        description=board_create.description,
        owner_id=current_user.id,
    )


@router.patch("/{board_id}", response_model=BoardResponse)
async def update_board(
    board_id: int,
    board_update: BoardUpdate,
    board: Board = Depends(require_board_owner),
    db: AsyncSession = Depends(get_async_session),
):
    """Update a board's title or description (owner only)"""
    return await BoardService.update(
        db=db,
        board_id=board.id,
        changes=board_update.model_dump(exclude_unset=True),
    )


@router.delete("/{board_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_board(
    board_id: int,
    board: Board = Depends(require_board_owner),
    db: AsyncSession = Depends(get_async_session),
    current_user: User = Depends(get_current_user),
):
    """Delete a board with all of its columns and cards (owner only)"""
    await BoardService.delete(db=db, board_id=board.id, user_id=current_user.id)
