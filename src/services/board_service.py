from typing import Dict, List, Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update, delete, func
from sqlalchemy.orm import selectinload
from datetime import datetime

from src.core import get_settings
from src.db.database import retry_on_conflict
from src.logs import debug_logger, log_function
from src.models.board import Board
from src.models.column import Column
from src.models.card import Card
from src.models.history import HistoryAction
from src.services.history_service import HistoryService
from src.services.ordering import default_columns

# Get application settings
settings = get_settings()

BOARD_FIELDS = ("title", "description")


class BoardService:
    """CRUD operations service for Board model"""

    @staticmethod
    @log_function()
    async def create(
        db: AsyncSession,
        title: str,
        owner_id: int,
        description: Optional[str] = None
    ) -> Board:
        """Create a new board seeded with the To Do, Doing and Done columns"""
        board = Board(
            title=title,
            description=description,
            owner_id=owner_id
        )
        db.add(board)
        try:
            await db.flush()

            for column_values in default_columns(settings.UNLIMITED_WIP_LIMIT, settings.DEFAULT_DOING_WIP_LIMIT):
                db.add(Column(board_id=board.id, **column_values))

            await db.commit()
        except Exception:
            await db.rollback()
            raise

        debug_logger.info(f"Created board {board.id} for user {owner_id}")
        return await BoardService.get_by_id(db, board.id, load_relations=True)

    @staticmethod
    async def get_by_id(
        db: AsyncSession,
        board_id: int,
        load_relations: bool = False
    ) -> Optional[Board]:
        """Get board by id, optionally with its columns"""
        query = select(Board).where(Board.id == board_id)

        if load_relations:
            query = query.options(selectinload(Board.columns))

        query = query.execution_options(populate_existing=True)
        result = await db.execute(query)
        return result.scalars().first()

    @staticmethod
    async def get_complete(
        db: AsyncSession,
        board_id: int
    ) -> Optional[Board]:
        """Board with owner, columns, their cards and every card's creator"""
        query = select(Board).where(Board.id == board_id).options(
            selectinload(Board.owner),
            selectinload(Board.columns).selectinload(Column.cards).selectinload(Card.creator),
            selectinload(Board.cards).selectinload(Card.creator),
        ).execution_options(populate_existing=True)
        result = await db.execute(query)
        return result.scalars().first()

    @staticmethod
    async def get_all(db: AsyncSession) -> List[Board]:
        """All boards, newest first, with owner and columns loaded"""
        query = select(Board).options(
            selectinload(Board.owner),
            selectinload(Board.columns),
        ).order_by(Board.created_at.desc(), Board.id.desc())
        result = await db.execute(query)
        return list(result.scalars().all())

    @staticmethod
    async def get_card_counts(db: AsyncSession, board_ids: List[int]) -> Dict[int, int]:
        """Live card count per column id for the given boards"""
        if not board_ids:
            return {}
        query = (
            select(Card.column_id, func.count(Card.id))
            .where(Card.board_id.in_(board_ids))
            .group_by(Card.column_id)
        )
        result = await db.execute(query)
        return {column_id: count for column_id, count in result.all()}

    @staticmethod
    async def lock(db: AsyncSession, board_id: int) -> Optional[Board]:
        """Fetch a board row and hold its lock until the transaction ends"""
        query = select(Board).where(Board.id == board_id).with_for_update()
        result = await db.execute(query)
        return result.scalars().first()

    @staticmethod
    async def update(
        db: AsyncSession,
        board_id: int,
        changes: dict
    ) -> Optional[Board]:
        """Apply a partial update of title and description"""
        update_data = {key: value for key, value in changes.items() if key in BOARD_FIELDS}

        if update_data:
            update_data["updated_at"] = datetime.utcnow()
            stmt = update(Board).where(Board.id == board_id).values(**update_data)
            await db.execute(stmt)
            await db.commit()

        return await BoardService.get_by_id(db, board_id, load_relations=True)

    @staticmethod
    @retry_on_conflict
    @log_function()
    async def delete(
        db: AsyncSession,
        board_id: int,
        user_id: int
    ) -> bool:
        """Delete a board with its columns and cards, recording each card deletion"""
        try:
            board = await BoardService.lock(db, board_id)
            if board is None:
                await db.rollback()
                return False

            query = select(Card).options(selectinload(Card.column)).where(Card.board_id == board_id)
            result = await db.execute(query)
            for card in result.scalars().all():
                HistoryService.record(db, HistoryAction.DELETED, card, user_id, from_column=card.column)

            stmt = delete(Board).where(Board.id == board_id)
            result = await db.execute(stmt)
            await db.commit()
        except Exception:
            await db.rollback()
            raise

        debug_logger.info(f"Deleted board {board_id}")
        return result.rowcount > 0
