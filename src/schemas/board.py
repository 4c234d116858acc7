from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel

from src.schemas.board_list import BoardListWithCards


class BoardBase(BaseModel):
    """Base schema for board data"""
    name: str
    description: str = ""


class BoardCreate(BoardBase):
    """Schema for board creation"""
    pass


class BoardUpdate(BoardBase):
    """Schema for board update"""
    pass


class BoardActivityUpdate(BaseModel):
    """Schema for linking a board to a scheduled activity"""
    activity_id: Optional[int] = None


class BoardInDB(BoardBase):
    """Schema for board representation in the database"""
    id: int
    activity_id: Optional[int] = None
    created_at: datetime
    updated_at: datetime
    
    class Config:
        from_attributes = True


class BoardResponse(BoardInDB):
    """Schema for board response"""
    pass


class BoardPage(BaseModel):
    """Schema for a page of boards"""
    boards: List[BoardResponse]
    total: int = 0
    page: int = 1
    page_size: int = 10


class BoardCompleteResponse(BoardInDB):
    """Schema for complete board response with lists and their cards"""
    lists: List[BoardListWithCards] = []
