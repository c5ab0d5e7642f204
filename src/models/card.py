from datetime import datetime
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Text, UniqueConstraint
from sqlalchemy.orm import relationship

from src.db.base import Base


class Card(Base):
    """Work item living in exactly one column of a board"""

    __tablename__ = "cards"
    __table_args__ = (
        UniqueConstraint("column_id", "position", name="uq_cards_column_position"),
    )

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(120), nullable=False)
    description = Column(Text, nullable=True)
    # Ascending position is top-to-bottom order inside the column
    position = Column(Integer, nullable=False)
    board_id = Column(Integer, ForeignKey("boards.id", ondelete="CASCADE"), nullable=False, index=True)
    column_id = Column(Integer, ForeignKey("columns.id", ondelete="CASCADE"), nullable=False, index=True)
    created_by = Column(Integer, ForeignKey("users.id"), nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    board = relationship("Board", back_populates="cards")
    column = relationship("Column", back_populates="cards")
    creator = relationship("User", foreign_keys=[created_by])
