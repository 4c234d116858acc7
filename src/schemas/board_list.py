from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, Field

from src.schemas.card import CardResponse


class BoardListBase(BaseModel):
    """Base schema for list data"""
    name: str
    

class BoardListCreate(BoardListBase):
    """Schema for list creation"""
    position: Optional[int] = Field(default=None, ge=1)


class BoardListRename(BoardListBase):
    """Schema for list rename"""
    pass


class BoardListPositionUpdate(BaseModel):
    """Schema for repositioning a list within its board"""
    position: int = Field(ge=1)


class BoardListInDB(BoardListBase):
    """Schema for list representation in the database"""
    id: int
    board_id: int
    position: int
    created_at: datetime
    updated_at: datetime
    
    class Config:
        from_attributes = True


class BoardListResponse(BoardListInDB):
    """Schema for list response"""
    pass


class BoardListWithCards(BoardListInDB):
    """Schema for list response with its cards"""
    cards: List[CardResponse] = []


class BoardListCollection(BaseModel):
    """Schema for lists of a board"""
    lists: List[BoardListWithCards]


class BoardListOrderUpdate(BaseModel):
    """Schema for updating list order"""
    list_order: List[int]
