from datetime import datetime
from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.exceptions import NotFound, SameColumnMove, ValidationFailed, WipLimitReached
from src.db.database import retry_on_conflict
from src.logs import debug_logger, log_function
from src.models.card import Card
from src.models.history import HistoryAction
from src.services.card_service import CardService
from src.services.column_service import ColumnService
from src.services.history_service import HistoryService
from src.services.ordering import Placement, has_capacity, next_position


class MoveService:
    """Moves cards between the columns of a board"""

    @staticmethod
    @retry_on_conflict
    @log_function()
    async def move_card(
        db: AsyncSession,
        card_id: int,
        to_column_id: int,
        placement: Placement,
        user_id: int
    ) -> Card:
        """Move a card to the top or bottom of another column of its board.

        The card, then the source and target columns, are locked for the
        whole transaction, so the WIP check, the new position and the history
        entry are committed together or not at all. Only incoming cards count
        against a WIP limit; leaving a column always succeeds.
        """
        try:
            card = await CardService.lock(db, card_id)
            if card is None:
                raise NotFound("Card not found")

            if card.column_id == to_column_id:
                raise SameColumnMove()

            columns = await ColumnService.lock_many(db, [card.column_id, to_column_id])
            source = columns.get(card.column_id)
            target = columns.get(to_column_id)
            if target is None or target.board_id != card.board_id:
                raise ValidationFailed.for_field("to_column_id", "The target column does not belong to this board")

            # The moving card is not in the target yet, so it is not counted
            if not has_capacity(await ColumnService.count_cards(db, target.id), target.wip_limit):
                raise WipLimitReached(target.id, target.wip_limit)

            position = next_position(await ColumnService.card_positions(db, target.id), placement)

            stmt = update(Card).where(Card.id == card_id).values(
                column_id=target.id,
                position=position,
                updated_at=datetime.utcnow(),
            )
            await db.execute(stmt)

            HistoryService.record(
                db,
                HistoryAction.MOVED,
                card,
                user_id,
                from_column=source,
                to_column=target,
            )
            await db.commit()
        except Exception:
            await db.rollback()
            raise

        debug_logger.info(
            f"Moved card {card_id} from column {source.id} to column {target.id} "
            f"({Placement(placement).value}, position {position})"
        )
        return await CardService.get_by_id(db, card_id, load_relations=True)
