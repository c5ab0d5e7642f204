from datetime import datetime
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Enum
from sqlalchemy.orm import relationship
import enum

from src.db.base import Base


class HistoryAction(enum.Enum):
    CREATED = "created"
    UPDATED = "updated"
    MOVED = "moved"
    DELETED = "deleted"


class CardHistory(Base):
    """Append-only audit record of a card lifecycle event.

    Card, board and column references are plain ids without foreign keys so
    entries outlive the rows they describe. Names are snapshotted for the
    same reason.
    """

    __tablename__ = "card_history"

    id = Column(Integer, primary_key=True, index=True)
    card_id = Column(Integer, nullable=False, index=True)
    board_id = Column(Integer, nullable=False, index=True)
    card_title = Column(String(120), nullable=False)
    action = Column(
        Enum(HistoryAction, name="history_action", values_callable=lambda e: [m.value for m in e]),
        nullable=False,
    )
    from_column_id = Column(Integer, nullable=True)
    from_column_name = Column(String(40), nullable=True)
    to_column_id = Column(Integer, nullable=True)
    to_column_name = Column(String(40), nullable=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)

    user = relationship("User")
