from typing import Dict, Iterable, List, Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update, delete, func
from sqlalchemy.orm import selectinload
from datetime import datetime

from src.core.exceptions import NotFound
from src.db.database import retry_on_conflict
from src.logs import debug_logger, log_function
from src.models.column import Column
from src.models.card import Card
from src.models.history import HistoryAction
from src.services.board_service import BoardService
from src.services.history_service import HistoryService
from src.services.ordering import next_order

COLUMN_FIELDS = ("name", "wip_limit")


class ColumnService:
    """CRUD operations service for Column model"""

    @staticmethod
    @retry_on_conflict
    @log_function()
    async def create(
        db: AsyncSession,
        board_id: int,
        name: str,
        wip_limit: int,
    ) -> Column:
        """Append a new column to the right end of a board"""
        try:
            # Serializes concurrent column creation on the same board
            board = await BoardService.lock(db, board_id)
            if board is None:
                raise NotFound("Board not found")

            query = select(Column.order).where(Column.board_id == board_id)
            result = await db.execute(query)
            order = next_order(result.scalars().all())

            column = Column(
                name=name,
                wip_limit=wip_limit,
                order=order,
                board_id=board_id,
            )
            db.add(column)
            await db.commit()
        except Exception:
            await db.rollback()
            raise

        debug_logger.info(f"Created column {column.id} on board {board_id} at order {order}")
        return column

    @staticmethod
    async def get_by_id(
        db: AsyncSession,
        column_id: int,
        load_cards: bool = False
    ) -> Optional[Column]:
        """Get column by id with optional cards loading"""
        query = select(Column).where(Column.id == column_id)

        if load_cards:
            query = query.options(selectinload(Column.cards).selectinload(Card.creator))

        result = await db.execute(query)
        return result.scalars().first()

    @staticmethod
    async def lock(db: AsyncSession, column_id: int) -> Optional[Column]:
        """Fetch a column row and hold its lock until the transaction ends"""
        query = select(Column).where(Column.id == column_id).with_for_update()
        result = await db.execute(query)
        return result.scalars().first()

    @staticmethod
    async def lock_many(db: AsyncSession, column_ids: Iterable[int]) -> Dict[int, Column]:
        """Lock several columns in ascending id order so concurrent callers never deadlock"""
        locked = {}
        for column_id in sorted(set(column_ids)):
            column = await ColumnService.lock(db, column_id)
            if column is not None:
                locked[column_id] = column
        return locked

    @staticmethod
    async def count_cards(db: AsyncSession, column_id: int) -> int:
        """Number of cards currently in a column"""
        query = select(func.count(Card.id)).where(Card.column_id == column_id)
        result = await db.execute(query)
        return result.scalar() or 0

    @staticmethod
    async def card_positions(db: AsyncSession, column_id: int) -> List[int]:
        query = select(Card.position).where(Card.column_id == column_id)
        result = await db.execute(query)
        return list(result.scalars().all())

    @staticmethod
    async def update(
        db: AsyncSession,
        column_id: int,
        changes: dict
    ) -> Optional[Column]:
        """Apply a partial update of name and WIP limit.

        Lowering the limit below the current card count keeps every card.
        """
        update_data = {key: value for key, value in changes.items() if key in COLUMN_FIELDS}

        if update_data:
            update_data["updated_at"] = datetime.utcnow()
            stmt = update(Column).where(Column.id == column_id).values(**update_data)
            await db.execute(stmt)
            await db.commit()

        query = select(Column).where(Column.id == column_id).execution_options(populate_existing=True)
        result = await db.execute(query)
        return result.scalars().first()

    @staticmethod
    @retry_on_conflict
    @log_function()
    async def delete(
        db: AsyncSession,
        column_id: int,
        user_id: int
    ) -> bool:
        """Delete a column together with its cards, recording each card deletion"""
        try:
            column = await ColumnService.lock(db, column_id)
            if column is None:
                await db.rollback()
                return False

            query = select(Card).where(Card.column_id == column_id)
            result = await db.execute(query)
            for card in result.scalars().all():
                HistoryService.record(db, HistoryAction.DELETED, card, user_id, from_column=column)

            stmt = delete(Column).where(Column.id == column_id)
            result = await db.execute(stmt)
            await db.commit()
        except Exception:
            await db.rollback()
            raise

        debug_logger.info(f"Deleted column {column_id}")
        return result.rowcount > 0
