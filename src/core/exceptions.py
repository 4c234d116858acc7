from typing import Any, Optional


class BoardError(Exception):
    """Base class for logistics board domain errors"""


class NotFoundError(BoardError, LookupError):
    """Raised when a board, list or card identifier does not resolve"""

    def __init__(self, entity: str, entity_id: Any, message: Optional[str] = None):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(message or f"{entity} with ID {entity_id} not found")


class ValidationError(BoardError, ValueError):
    """Raised when input violates a field or position constraint"""


class CrossBoardMoveError(BoardError):
    """Raised when a card is moved to a list owned by another board"""

    def __init__(self, card_id: int, source_board_id: int, target_board_id: int):
        self.card_id = card_id
        self.source_board_id = source_board_id
        self.target_board_id = target_board_id
        super().__init__(
            f"Card {card_id} belongs to board {source_board_id} "
            f"and cannot be moved to board {target_board_id}"
        )
