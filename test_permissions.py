import pytest
from unittest.mock import AsyncMock, patch
from sqlalchemy.ext.asyncio import AsyncSession

from src.api.dependencies.permissions import (
    require_board_owner,
    require_column_board_owner,
    require_ownership,
    resolve_board,
)
from src.core.exceptions import Forbidden, NotFound
from src.models.board import Board
from src.models.column import Column
from src.models.user import User
from src.services.board_service import BoardService
from src.services.column_service import ColumnService


class TestResolveBoard:
    def setup_method(self):
        self.mock_db = AsyncMock(spec=AsyncSession)
        self.board = Board(id=1, title="Board", owner_id=1)
        self.column = Column(id=4, name="Doing", order=2, wip_limit=3, board_id=1)

    @pytest.mark.asyncio
    async def test_board_object(self):
        assert await resolve_board(self.mock_db, board=self.board) is self.board

    @pytest.mark.asyncio
    async def test_board_id(self):
        with patch.object(BoardService, 'get_by_id', return_value=self.board) as mock_get:
            assert await resolve_board(self.mock_db, board_id=1) is self.board
        mock_get.assert_awaited_once_with(self.mock_db, 1)

    @pytest.mark.asyncio
    async def test_column_object(self):
        with patch.object(BoardService, 'get_by_id', return_value=self.board) as mock_get:
            assert await resolve_board(self.mock_db, column=self.column) is self.board
        mock_get.assert_awaited_once_with(self.mock_db, 1)

    @pytest.mark.asyncio
    async def test_column_id(self):
        with patch.object(ColumnService, 'get_by_id', return_value=self.column), \
             patch.object(BoardService, 'get_by_id', return_value=self.board):
            assert await resolve_board(self.mock_db, column_id=4) is self.board

    @pytest.mark.asyncio
    @pytest.mark.parametrize("reference", [
        {"board": None},
        {"board_id": 404},
        {"column": None},
        {"column_id": 404},
    ])
    async def test_unresolvable_reference(self, reference):
        with patch.object(ColumnService, 'get_by_id', return_value=None), \
             patch.object(BoardService, 'get_by_id', return_value=None):
            with pytest.raises(NotFound):
                await resolve_board(self.mock_db, **reference)

    @pytest.mark.asyncio
    async def test_reference_must_be_single_and_known(self):
        with pytest.raises(TypeError):
            await resolve_board(self.mock_db)
        with pytest.raises(TypeError):
            await resolve_board(self.mock_db, board_id=1, column_id=2)
        with pytest.raises(TypeError):
            await resolve_board(self.mock_db, card_id=1)


class TestOwnership:
    def setup_method(self):
        self.mock_db = AsyncMock(spec=AsyncSession)
        self.owner = User(id=1, name="Owner", email="owner@example.com", hashed_password="x")
        self.stranger = User(id=2, name="Other", email="other@example.com", hashed_password="x")
        self.board = Board(id=1, title="Board", owner_id=1)

    def test_owner_passes(self):
        assert require_ownership(self.owner, self.board) is self.board

    def test_other_user_is_forbidden(self):
        with pytest.raises(Forbidden) as exc_info:
            require_ownership(self.stranger, self.board)
        assert exc_info.value.status_code == 403

    @pytest.mark.asyncio
    async def test_board_owner_dependency(self):
        with patch.object(BoardService, 'get_by_id', return_value=self.board):
            assert await require_board_owner(1, current_user=self.owner, db=self.mock_db) is self.board
            with pytest.raises(Forbidden):
                await require_board_owner(1, current_user=self.stranger, db=self.mock_db)

    @pytest.mark.asyncio
    async def test_missing_board_is_not_found_before_forbidden(self):
        with patch.object(BoardService, 'get_by_id', return_value=None):
            with pytest.raises(NotFound):
                await require_board_owner(404, current_user=self.stranger, db=self.mock_db)

    @pytest.mark.asyncio
    async def test_column_board_owner_dependency(self):
        column = Column(id=4, name="Doing", order=2, wip_limit=3, board_id=1)
        with patch.object(ColumnService, 'get_by_id', return_value=column), \
             patch.object(BoardService, 'get_by_id', return_value=self.board):
            assert await require_column_board_owner(4, current_user=self.owner, db=self.mock_db) is self.board
            with pytest.raises(Forbidden):
                await require_column_board_owner(4, current_user=self.stranger, db=self.mock_db)
