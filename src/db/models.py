# Import all models here for Alembic to discover them
from src.db.base import Base
from src.models.board import Board
from src.models.board_list import BoardList
from src.models.card import Card, CardStatus
