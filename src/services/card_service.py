from typing import Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update, delete
from sqlalchemy.orm import selectinload
from datetime import datetime

from src.core.exceptions import NotFound, ValidationFailed, WipLimitReached
from src.db.database import retry_on_conflict
from src.logs import debug_logger, log_function
from src.models.card import Card
from src.models.history import HistoryAction
from src.services.column_service import ColumnService
from src.services.history_service import HistoryService
from src.services.ordering import Placement, has_capacity, next_position

CARD_FIELDS = ("title", "description")


class CardService:
    """CRUD operations service for Card model"""

    @staticmethod
    @retry_on_conflict
    @log_function()
    async def create(
        db: AsyncSession,
        board_id: int,
        column_id: int,
        title: str,
        created_by: int,
        description: Optional[str] = None,
    ) -> Card:
        """Append a card to the bottom of a column, honoring its WIP limit"""
        try:
            column = await ColumnService.lock(db, column_id)
            if column is None or column.board_id != board_id:
                raise ValidationFailed.for_field("column_id", "The selected column does not belong to this board")

            if not has_capacity(await ColumnService.count_cards(db, column.id), column.wip_limit):
                raise WipLimitReached(column.id, column.wip_limit)

            position = next_position(await ColumnService.card_positions(db, column.id), Placement.BOTTOM)
            card = Card(
                title=title,
                description=description,
                position=position,
                board_id=board_id,
                column_id=column.id,
                created_by=created_by,
            )
            db.add(card)
            await db.flush()

            HistoryService.record(db, HistoryAction.CREATED, card, created_by, to_column=column)
            await db.commit()
        except Exception:
            await db.rollback()
            raise

        debug_logger.info(f"Created card {card.id} in column {column_id} at position {position}")
        return await CardService.get_by_id(db, card.id, load_relations=True)

    @staticmethod
    async def get_by_id(
        db: AsyncSession,
        card_id: int,
        load_relations: bool = False
    ) -> Optional[Card]:
        """Get a card by ID, optionally with its creator and column"""
        query = select(Card).where(Card.id == card_id)

        if load_relations:
            query = query.options(
                selectinload(Card.creator),
                selectinload(Card.column),
            )

        query = query.execution_options(populate_existing=True)
        result = await db.execute(query)
        return result.scalars().first()

    @staticmethod
    async def lock(db: AsyncSession, card_id: int) -> Optional[Card]:
        """Fetch a card row and hold its lock until the transaction ends"""
        query = select(Card).where(Card.id == card_id).with_for_update()
        result = await db.execute(query)
        return result.scalars().first()

    @staticmethod
    @retry_on_conflict
    @log_function()
    async def update(
        db: AsyncSession,
        card_id: int,
        changes: dict,
        user_id: int
    ) -> Card:
        """Apply a partial update of title and description.

        Position and column never change here.
        """
        update_data = {key: value for key, value in changes.items() if key in CARD_FIELDS}

        try:
            card = await CardService.lock(db, card_id)
            if card is None:
                raise NotFound("Card not found")

            if update_data:
                update_data["updated_at"] = datetime.utcnow()
                stmt = update(Card).where(Card.id == card_id).values(**update_data)
                await db.execute(stmt)
                if "title" in update_data:
                    card.title = update_data["title"]

                HistoryService.record(db, HistoryAction.UPDATED, card, user_id)
            await db.commit()
        except Exception:
            await db.rollback()
            raise

        return await CardService.get_by_id(db, card_id, load_relations=True)

    @staticmethod
    @retry_on_conflict
    @log_function()
    async def delete(
        db: AsyncSession,
        card_id: int,
        user_id: int
    ) -> None:
        """Record the deletion in the ledger, then remove the card"""
        try:
            card = await CardService.lock(db, card_id)
            if card is None:
                raise NotFound("Card not found")

            column = await ColumnService.get_by_id(db, card.column_id)
            HistoryService.record(db, HistoryAction.DELETED, card, user_id, from_column=column)

            stmt = delete(Card).where(Card.id == card_id)
            await db.execute(stmt)
            await db.commit()
        except Exception:
            await db.rollback()
            raise

        debug_logger.info(f"Deleted card {card_id}")
