import pytest
from unittest.mock import AsyncMock, MagicMock, patch
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.exceptions import NotFound, SameColumnMove, ValidationFailed, WipLimitReached
from src.models.card import Card
from src.models.column import Column
from src.models.history import CardHistory, HistoryAction
from src.services.card_service import CardService
from src.services.column_service import ColumnService
from src.services.move_service import MoveService
from src.services.ordering import Placement


class TestMoveCard:
    def setup_method(self):
        self.mock_db = AsyncMock(spec=AsyncSession)
        self.mock_db.add = MagicMock()
        self.todo = Column(id=1, name="To Do", order=1, wip_limit=999, board_id=1)
        self.doing = Column(id=2, name="Doing", order=2, wip_limit=3, board_id=1)
        self.card = Card(id=10, title="Task", position=1, board_id=1, column_id=1, created_by=7)

    def update_params(self):
        return self.mock_db.execute.call_args.args[0].compile().params

    def history_entries(self):
        return [call.args[0] for call in self.mock_db.add.call_args_list
                if isinstance(call.args[0], CardHistory)]

    @pytest.mark.asyncio
    async def test_move_to_bottom(self):
        with patch.object(CardService, 'lock', return_value=self.card), \
             patch.object(ColumnService, 'lock_many', return_value={1: self.todo, 2: self.doing}), \
             patch.object(ColumnService, 'count_cards', return_value=1), \
             patch.object(ColumnService, 'card_positions', return_value=[4]), \
             patch.object(CardService, 'get_by_id', return_value="moved") as mock_get:

            result = await MoveService.move_card(self.mock_db, 10, 2, Placement.BOTTOM, user_id=7)

        params = self.update_params()
        assert params["column_id"] == 2
        assert params["position"] == 5
        assert result == "moved"
        mock_get.assert_awaited_once_with(self.mock_db, 10, load_relations=True)
        self.mock_db.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_move_to_top_goes_above_every_card(self):
        with patch.object(CardService, 'lock', return_value=self.card), \
             patch.object(ColumnService, 'lock_many', return_value={1: self.todo, 2: self.doing}), \
             patch.object(ColumnService, 'count_cards', return_value=2), \
             patch.object(ColumnService, 'card_positions', return_value=[1, 2]), \
             patch.object(CardService, 'get_by_id', return_value=None):

            await MoveService.move_card(self.mock_db, 10, 2, Placement.TOP, user_id=7)

        assert self.update_params()["position"] < 1

    @pytest.mark.asyncio
    async def test_move_into_empty_column(self):
        with patch.object(CardService, 'lock', return_value=self.card), \
             patch.object(ColumnService, 'lock_many', return_value={1: self.todo, 2: self.doing}), \
             patch.object(ColumnService, 'count_cards', return_value=0), \
             patch.object(ColumnService, 'card_positions', return_value=[]), \
             patch.object(CardService, 'get_by_id', return_value=None):

            await MoveService.move_card(self.mock_db, 10, 2, Placement.TOP, user_id=7)

        assert self.update_params()["position"] == 1

    @pytest.mark.asyncio
    async def test_move_is_recorded_with_both_columns(self):
        with patch.object(CardService, 'lock', return_value=self.card), \
             patch.object(ColumnService, 'lock_many', return_value={1: self.todo, 2: self.doing}), \
             patch.object(ColumnService, 'count_cards', return_value=0), \
             patch.object(ColumnService, 'card_positions', return_value=[]), \
             patch.object(CardService, 'get_by_id', return_value=None):

            await MoveService.move_card(self.mock_db, 10, 2, Placement.BOTTOM, user_id=8)

        entry, = self.history_entries()
        assert entry.action == HistoryAction.MOVED
        assert (entry.from_column_id, entry.from_column_name) == (1, "To Do")
        assert (entry.to_column_id, entry.to_column_name) == (2, "Doing")
        assert entry.user_id == 8

    @pytest.mark.asyncio
    async def test_move_into_full_column_is_rejected(self):
        with patch.object(CardService, 'lock', return_value=self.card), \
             patch.object(ColumnService, 'lock_many', return_value={1: self.todo, 2: self.doing}), \
             patch.object(ColumnService, 'count_cards', return_value=3):

            with pytest.raises(WipLimitReached):
                await MoveService.move_card(self.mock_db, 10, 2, Placement.BOTTOM, user_id=7)

        self.mock_db.execute.assert_not_awaited()
        self.mock_db.add.assert_not_called()
        self.mock_db.commit.assert_not_awaited()
        self.mock_db.rollback.assert_awaited()

    @pytest.mark.asyncio
    async def test_card_can_leave_an_over_limit_column(self):
        # Doing holds 5 cards after its limit was lowered to 3
        card = Card(id=11, title="Overflow", position=5, board_id=1, column_id=2, created_by=7)
        with patch.object(CardService, 'lock', return_value=card), \
             patch.object(ColumnService, 'lock_many', return_value={1: self.todo, 2: self.doing}), \
             patch.object(ColumnService, 'count_cards', return_value=0), \
             patch.object(ColumnService, 'card_positions', return_value=[]), \
             patch.object(CardService, 'get_by_id', return_value=None):

            await MoveService.move_card(self.mock_db, 11, 1, Placement.BOTTOM, user_id=7)

        assert self.update_params()["column_id"] == 1
        self.mock_db.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_same_column_move_is_rejected_without_locking_columns(self):
        with patch.object(CardService, 'lock', return_value=self.card), \
             patch.object(ColumnService, 'lock_many') as mock_lock_many:

            with pytest.raises(SameColumnMove) as exc_info:
                await MoveService.move_card(self.mock_db, 10, 1, Placement.TOP, user_id=7)

        assert exc_info.value.status_code == 400
        mock_lock_many.assert_not_awaited()
        self.mock_db.add.assert_not_called()

    @pytest.mark.asyncio
    async def test_target_on_another_board_is_rejected(self):
        foreign = Column(id=20, name="Doing", order=2, wip_limit=3, board_id=2)
        with patch.object(CardService, 'lock', return_value=self.card), \
             patch.object(ColumnService, 'lock_many', return_value={1: self.todo, 20: foreign}):

            with pytest.raises(ValidationFailed) as exc_info:
                await MoveService.move_card(self.mock_db, 10, 20, Placement.BOTTOM, user_id=7)

        assert "to_column_id" in exc_info.value.errors
        self.mock_db.commit.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_missing_target_is_rejected(self):
        with patch.object(CardService, 'lock', return_value=self.card), \
             patch.object(ColumnService, 'lock_many', return_value={1: self.todo}):

            with pytest.raises(ValidationFailed):
                await MoveService.move_card(self.mock_db, 10, 99, Placement.BOTTOM, user_id=7)

    @pytest.mark.asyncio
    async def test_missing_card(self):
        with patch.object(CardService, 'lock', return_value=None):
            with pytest.raises(NotFound):
                await MoveService.move_card(self.mock_db, 404, 2, Placement.BOTTOM, user_id=7)


class TestLockMany:
    @pytest.mark.asyncio
    async def test_columns_are_locked_in_ascending_id_order(self):
        mock_db = AsyncMock(spec=AsyncSession)
        locked_ids = []

        async def lock(db, column_id):
            locked_ids.append(column_id)
            return Column(id=column_id, name=f"c{column_id}", order=column_id, wip_limit=999, board_id=1)

        with patch.object(ColumnService, 'lock', side_effect=lock):
            columns = await ColumnService.lock_many(mock_db, [9, 3, 9])

        assert locked_ids == [3, 9]
        assert set(columns) == {3, 9}
