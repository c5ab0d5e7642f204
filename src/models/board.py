from datetime import datetime
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey
from sqlalchemy.orm import relationship

from src.db.base import Base


class Board(Base):
    """Kanban board owned by a single user"""

    __tablename__ = "boards"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(80), nullable=False)
    description = Column(String(255), nullable=True)
    # Never updated after creation
    owner_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    owner = relationship("User", back_populates="owned_boards")

    columns = relationship(
        "Column",
        back_populates="board",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="Column.order",
    )

    cards = relationship(
        "Card",
        back_populates="board",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="Card.position",
    )

    def is_owned_by(self, user) -> bool:
        return user is not None and self.owner_id == user.id
