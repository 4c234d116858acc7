from datetime import datetime
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey
from sqlalchemy.orm import relationship

from src.db.base import Base


class BoardList(Base):
    """Модель списка (колонки) логистической доски"""
    
    __tablename__ = "logistics_lists"
    
    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False)
    position = Column(Integer, nullable=False)  # 1..N внутри доски
    board_id = Column(Integer, ForeignKey("logistics_boards.id", ondelete="CASCADE"), nullable=False, index=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
    
    # Отношение many-to-one с доской
    board = relationship("Board", back_populates="lists")
    
    # Отношение one-to-many с карточками
    cards = relationship(
        "Card",
        back_populates="list",
        order_by="Card.position",
        cascade="all, delete-orphan",
    )
