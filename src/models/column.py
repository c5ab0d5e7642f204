from datetime import datetime
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, UniqueConstraint, CheckConstraint
from sqlalchemy.orm import relationship

from src.db.base import Base


class Column(Base):
    """Board column with a work-in-progress limit"""

    __tablename__ = "columns"
    __table_args__ = (
        UniqueConstraint("board_id", "order", name="uq_columns_board_order"),
        CheckConstraint("wip_limit >= 0", name="ck_columns_wip_limit"),
    )

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(40), nullable=False)
    wip_limit = Column(Integer, nullable=False)
    order = Column(Integer, nullable=False)  # left-to-right position on the board
    board_id = Column(Integer, ForeignKey("boards.id", ondelete="CASCADE"), nullable=False, index=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    board = relationship("Board", back_populates="columns")

    cards = relationship(
        "Card",
        back_populates="column",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="Card.position",
    )
