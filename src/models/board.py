from datetime import datetime
from sqlalchemy import Column, Integer, String, DateTime
from sqlalchemy.orm import relationship

from src.db.base import Base


class Board(Base):
    """Модель логистической доски"""
    
    __tablename__ = "logistics_boards"
    
    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(200), nullable=False)
    description = Column(String(2000), nullable=False, default="")
    # Необязательная связь с запланированным мероприятием (внешний каталог)
    activity_id = Column(Integer, nullable=True, index=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
    
    # Отношение one-to-many со списками, упорядоченными по позиции
    lists = relationship(
        "BoardList",
        back_populates="board",
        order_by="BoardList.position",
        cascade="all, delete-orphan",
    )
