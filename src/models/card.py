from datetime import datetime
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, JSON, Enum
from sqlalchemy.orm import relationship
import enum

from src.db.base import Base


# Статус карточки: метка без графа переходов
class CardStatus(enum.Enum):
    TODO = "todo"
    IN_PROGRESS = "in_progress"
    DONE = "done"


class Card(Base):
    """Модель карточки логистической доски"""
    
    __tablename__ = "logistics_cards"
    
    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(200), nullable=False)
    description = Column(String(2000), nullable=False, default="")
    position = Column(Integer, nullable=False)  # 1..N внутри списка
    list_id = Column(Integer, ForeignKey("logistics_lists.id", ondelete="CASCADE"), nullable=False, index=True)
    activity_id = Column(Integer, nullable=True, index=True)
    assigned_member_id = Column(String(450), nullable=True, index=True)
    status = Column(Enum(CardStatus), nullable=False, default=CardStatus.TODO)
    labels = Column(JSON(none_as_null=True), nullable=True)  # список строк
    start_date = Column(DateTime, nullable=True)
    due_date = Column(DateTime, nullable=True)
    reminder_date = Column(DateTime, nullable=True)
    checklist = Column(JSON(none_as_null=True), nullable=True)
    attachments = Column(JSON(none_as_null=True), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
    
    # Отношение many-to-one со списком
    list = relationship("BoardList", back_populates="cards")
