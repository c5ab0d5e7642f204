from datetime import datetime
from typing import List, Optional
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from src.models.card import Card
from src.models.column import Column
from src.models.history import CardHistory, HistoryAction


class HistoryService:
    """Append-only ledger of card events.

    ``record`` only adds the entry to the session; the caller's commit makes
    it durable together with the mutation it describes.
    """

    @staticmethod
    def record(
        db: AsyncSession,
        action: HistoryAction,
        card: Card,
        user_id: int,
        from_column: Optional[Column] = None,
        to_column: Optional[Column] = None,
    ) -> CardHistory:
        entry = CardHistory(
            card_id=card.id,
            board_id=card.board_id,
            card_title=card.title,
            action=action,
            from_column_id=from_column.id if from_column else None,
            from_column_name=from_column.name if from_column else None,
            to_column_id=to_column.id if to_column else None,
            to_column_name=to_column.name if to_column else None,
            user_id=user_id,
            created_at=datetime.utcnow(),
        )
        db.add(entry)
        return entry

    @staticmethod
    async def for_card(db: AsyncSession, card_id: int) -> List[CardHistory]:
        """Entries of one card, oldest first"""
        query = (
            select(CardHistory)
            .options(selectinload(CardHistory.user))
            .where(CardHistory.card_id == card_id)
            .order_by(CardHistory.created_at, CardHistory.id)
        )
        result = await db.execute(query)
        return list(result.scalars().all())

    @staticmethod
    async def for_board(db: AsyncSession, board_id: int) -> List[CardHistory]:
        """Entries of every card that ever lived on a board, oldest first"""
        query = (
            select(CardHistory)
            .options(selectinload(CardHistory.user))
            .where(CardHistory.board_id == board_id)
            .order_by(CardHistory.created_at, CardHistory.id)
        )
        result = await db.execute(query)
        return list(result.scalars().all())
