from typing import List, Optional, Tuple
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update, delete, func, or_
from sqlalchemy.orm import selectinload
from datetime import datetime

from src.core.exceptions import NotFoundError, ValidationError
from src.db.transaction import atomic
from src.models.board import Board
from src.models.board_list import BoardList
from src.logs import debug_logger, log_function
from src.services.card_service import CardService
from src.services.collaborators import ActivityCatalog
from src.services.list_service import ListService, _lock_board
from src.services.validators import BOARD_NAME_MAX_LENGTH, optional_text, require_text


class BoardService:
    """Lifecycle operations for logistics boards"""

    @staticmethod
    async def get_by_id(
        db: AsyncSession,
        board_id: int
    ) -> Optional[Board]:
        """Get board by id"""
        query = select(Board).where(Board.id == board_id).execution_options(populate_existing=True)
        result = await db.execute(query)
        return result.scalars().first()

    @staticmethod
    async def get_all(
        db: AsyncSession
    ) -> List[Board]:
        """Get all boards, newest first"""
        query = select(Board).order_by(Board.created_at.desc(), Board.id.desc())
        result = await db.execute(query)
        return list(result.scalars().all())

    @staticmethod
    async def get_boards_paged(
        db: AsyncSession,
        page: int = 1,
        page_size: int = 10,
        search_term: Optional[str] = None
    ) -> Tuple[List[Board], int]:
        """Get a page of boards and the total match count

        Args:
            db: Database session
            page: 1-based page number
            page_size: Boards per page
            search_term: Case-insensitive substring of name or description

        Returns:
            Tuple of (boards newest first, total number of matching boards)
        """
        if page < 1 or page_size < 1:
            raise ValidationError("Page and page size must be positive")

        query = select(Board)
        if search_term and search_term.strip():
            term = search_term.strip()
            query = query.where(or_(
                Board.name.icontains(term, autoescape=True),
                Board.description.icontains(term, autoescape=True)
            ))

        count_query = select(func.count()).select_from(query.subquery())
        total_count = (await db.execute(count_query)).scalar() or 0

        query = (
            query.order_by(Board.created_at.desc(), Board.id.desc())
            .offset((page - 1) * page_size)
            .limit(page_size)
        )
        result = await db.execute(query)
        return list(result.scalars().all()), total_count

    @staticmethod
    @log_function()
    async def create(
        db: AsyncSession,
        name: str,
        description: Optional[str] = ""
    ) -> Board:
        """Create a new board"""
        board = Board(
            name=require_text(name, "Board name", BOARD_NAME_MAX_LENGTH),
            description=optional_text(description, "Board description")
        )
        async with atomic(db):
            db.add(board)
            await db.flush()

        await db.refresh(board)
        debug_logger.info(f"Создана новая доска: ID {board.id}")
        return board

    @staticmethod
    async def update_details(
        db: AsyncSession,
        board_id: int,
        name: str,
        description: Optional[str] = ""
    ) -> Board:
        """Update a board's name and description"""
        name = require_text(name, "Board name", BOARD_NAME_MAX_LENGTH)
        description = optional_text(description, "Board description")

        async with atomic(db):
            if not await BoardService.get_by_id(db, board_id):
                raise NotFoundError("Board", board_id)
            # Явно устанавливаем updated_at для предотвращения проблем с часовыми поясами
            stmt = update(Board).where(Board.id == board_id).values(
                name=name,
                description=description,
                updated_at=datetime.utcnow().replace(tzinfo=None)
            )
            await db.execute(stmt)

        return await BoardService.get_by_id(db, board_id)

    @staticmethod
    async def associate_with_activity(
        db: AsyncSession,
        board_id: int,
        activity_id: Optional[int],
        activity_catalog: Optional[ActivityCatalog] = None
    ) -> Board:
        """Link a board to a scheduled activity, None clears the link"""
        async with atomic(db):
            if not await BoardService.get_by_id(db, board_id):
                raise NotFoundError("Board", board_id)
            if activity_id is not None and activity_catalog is not None:
                if not await activity_catalog.activity_exists(activity_id):
                    raise NotFoundError("Activity", activity_id)
            stmt = update(Board).where(Board.id == board_id).values(
                activity_id=activity_id,
                updated_at=datetime.utcnow().replace(tzinfo=None)
            )
            await db.execute(stmt)

        return await BoardService.get_by_id(db, board_id)

    @staticmethod
    @log_function()
    async def delete(
        db: AsyncSession,
        board_id: int
    ) -> None:
        """Delete a board with all its lists and their cards in one transaction"""
        async with atomic(db):
            await _lock_board(db, board_id)
            result = await db.execute(select(BoardList.id).where(BoardList.board_id == board_id))
            list_ids = list(result.scalars().all())

            deleted_cards = await CardService.delete_by_list_ids(db, list_ids)
            deleted_lists = await ListService.delete_by_ids(db, list_ids)
            await db.execute(delete(Board).where(Board.id == board_id))

        debug_logger.info(
            f"Доска {board_id} удалена вместе с {deleted_lists} списками и {deleted_cards} карточками"
        )

    @staticmethod
    async def get_complete_board(
        db: AsyncSession,
        board_id: int
    ) -> Optional[Board]:
        """Get a complete board with its lists and their cards, None if absent"""
        query = (
            select(Board)
            .where(Board.id == board_id)
            .options(selectinload(Board.lists).selectinload(BoardList.cards))
            .execution_options(populate_existing=True)
        )
        result = await db.execute(query)
        return result.scalars().first()
