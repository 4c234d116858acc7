from datetime import datetime
from typing import Any, List, Optional, Union
from pydantic import BaseModel, Field, validator

from src.models.card import CardStatus
from src.services.validators import to_naive_utc


def _strip_timezone(value):
    if isinstance(value, str):
        # Заменяем 'Z' на '+00:00' для правильной обработки UTC
        try:
            value = datetime.fromisoformat(value.replace('Z', '+00:00'))
        except ValueError:
            # Некорректную строку отклонит сама pydantic
            return value
    if isinstance(value, datetime):
        return to_naive_utc(value)
    return value


class CardBase(BaseModel):
    """Base schema for card data"""
    title: str
    description: str = ""


class CardCreate(CardBase):
    """Schema for card creation"""
    position: Optional[int] = Field(default=None, ge=1)


class CardContentUpdate(CardBase):
    """Schema for card title/description update"""
    pass


class CardMove(BaseModel):
    """Schema for moving a card to a different list"""
    list_id: int
    position: int = Field(ge=1)


class CardPositionUpdate(BaseModel):
    """Schema for repositioning a card within its list"""
    position: int = Field(ge=1)


class CardOrderUpdate(BaseModel):
    """Schema for updating card order"""
    card_order: List[int]


class CardActivityUpdate(BaseModel):
    """Schema for linking a card to a scheduled activity"""
    activity_id: Optional[int] = None


class CardMemberAssignment(BaseModel):
    """Schema for assigning a member to a card"""
    member_id: Optional[str] = None


class CardStatusUpdate(BaseModel):
    status: CardStatus


class CardLabelsUpdate(BaseModel):
    labels: Optional[List[str]] = None


class CardDatesUpdate(BaseModel):
    """Schema for card schedule dates"""
    start_date: Optional[datetime] = None
    due_date: Optional[datetime] = None
    reminder_date: Optional[datetime] = None
    
    @validator('start_date', 'due_date', 'reminder_date', pre=True)
    def parse_dates(cls, value):
        return _strip_timezone(value)


class CardChecklistUpdate(BaseModel):
    checklist: Optional[Union[dict, List[Any]]] = None


class CardAttachmentsUpdate(BaseModel):
    attachments: Optional[Union[dict, List[Any]]] = None


class CardInDB(CardBase):
    """Schema for card representation in the database"""
    id: int
    list_id: int
    position: int
    activity_id: Optional[int] = None
    assigned_member_id: Optional[str] = None
    status: CardStatus
    labels: Optional[List[str]] = None
    start_date: Optional[datetime] = None
    due_date: Optional[datetime] = None
    reminder_date: Optional[datetime] = None
    checklist: Optional[Union[dict, List[Any]]] = None
    attachments: Optional[Union[dict, List[Any]]] = None
    created_at: datetime
    updated_at: datetime
    
    class Config:
        from_attributes = True


class CardResponse(CardInDB):
    """Schema for card response"""
    pass


class CardList(BaseModel):
    """Schema for list of cards"""
    cards: List[CardResponse]
