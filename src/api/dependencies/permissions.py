"""Board ownership checks.

Routes protect a board reached in different ways: the board itself, a board
id from the path, or a column (object or id) whose board is the one to
protect. ``resolve_board`` maps every shape to one Board before
``require_ownership`` decides.
"""
from typing import Awaitable, Callable, Dict, Optional

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from src.api.dependencies.auth import get_current_user
from src.core.exceptions import Forbidden, NotFound
from src.db.database import get_async_session
from src.models.board import Board
from src.models.column import Column
from src.models.user import User
from src.services.board_service import BoardService
from src.services.column_service import ColumnService


async def _from_board(db: AsyncSession, board: Optional[Board]) -> Optional[Board]:
    return board


async def _from_board_id(db: AsyncSession, board_id: int) -> Optional[Board]:
    return await BoardService.get_by_id(db, board_id)


async def _from_column(db: AsyncSession, column: Optional[Column]) -> Optional[Board]:
    if column is None:
        return None
    return await BoardService.get_by_id(db, column.board_id)


async def _from_column_id(db: AsyncSession, column_id: int) -> Optional[Board]:
    return await _from_column(db, await ColumnService.get_by_id(db, column_id))


BOARD_RESOLVERS: Dict[str, Callable[[AsyncSession, object], Awaitable[Optional[Board]]]] = {
    "board": _from_board,
    "board_id": _from_board_id,
    "column": _from_column,
    "column_id": _from_column_id,
}


async def resolve_board(db: AsyncSession, **reference) -> Board:
    """
    Resolve exactly one board reference, e.g. ``resolve_board(db, column_id=4)``

    Raises:
        NotFound: If the reference does not lead to an existing board
    """
    if len(reference) != 1:
        raise TypeError("resolve_board takes exactly one board reference")
    (kind, value), = reference.items()
    if kind not in BOARD_RESOLVERS:
        raise TypeError(f"Unknown board reference: {kind}")

    board = await BOARD_RESOLVERS[kind](db, value)
    if not isinstance(board, Board):
        raise NotFound("Board not found")
    return board


def require_ownership(user: User, board: Board) -> Board:
    """Allow the board owner only"""
    if not board.is_owned_by(user):
        raise Forbidden()
    return board


async def require_board_owner(
    board_id: int,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
) -> Board:
    """Dependency for routes with a ``board_id`` path parameter"""
    board = await resolve_board(db, board_id=board_id)
    return require_ownership(current_user, board)


async def require_column_board_owner(
    column_id: int,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
) -> Board:
    """Dependency for routes with a ``column_id`` path parameter"""
    board = await resolve_board(db, column_id=column_id)
    return require_ownership(current_user, board)
