from typing import Dict, List, Optional, Sequence
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update, delete
from sqlalchemy.orm import selectinload
from datetime import datetime

from src.core.exceptions import NotFoundError
from src.db.transaction import atomic
from src.models.board import Board
from src.models.board_list import BoardList
from src.logs import debug_logger, log_function
from src.services import position_allocator
from src.services.card_service import CardService
from src.services.validators import LIST_NAME_MAX_LENGTH, require_text


async def _lock_board(db: AsyncSession, board_id: int) -> Board:
    """Lock a board row for the rest of the transaction (SELECT ... FOR UPDATE)"""
    query = select(Board).where(Board.id == board_id).with_for_update()
    result = await db.execute(query)
    board = result.scalars().first()
    if not board:
        debug_logger.warning(f"Доска с ID {board_id} не найдена")
        raise NotFoundError("Board", board_id)
    return board


async def _require_board_exists(db: AsyncSession, board_id: int) -> None:
    result = await db.execute(select(Board.id).where(Board.id == board_id))
    if result.scalar() is None:
        raise NotFoundError("Board", board_id)


async def _require_list(db: AsyncSession, list_id: int) -> BoardList:
    board_list = await ListService.get_by_id(db, list_id)
    if not board_list:
        debug_logger.warning(f"Список с ID {list_id} не найден")
        raise NotFoundError("List", list_id)
    return board_list


async def _current_positions(db: AsyncSession, board_id: int) -> Dict[int, int]:
    """List id -> position for a board, in display order"""
    query = (
        select(BoardList.id, BoardList.position)
        .where(BoardList.board_id == board_id)
        .order_by(BoardList.position, BoardList.id)
    )
    result = await db.execute(query)
    return {row.id: row.position for row in result}


async def _write_positions(
    db: AsyncSession,
    current: Dict[int, int],
    target: Dict[int, int]
) -> None:
    # Явно устанавливаем updated_at для предотвращения проблем с часовыми поясами
    current_time = datetime.utcnow().replace(tzinfo=None)
    for list_id, position in position_allocator.changed_positions(current, target).items():
        stmt = update(BoardList).where(BoardList.id == list_id).values(
            position=position,
            updated_at=current_time
        )
        await db.execute(stmt)


class ListService:
    """Ordering operations for lists within boards"""

    @staticmethod
    async def get_by_id(
        db: AsyncSession,
        list_id: int,
        load_cards: bool = False
    ) -> Optional[BoardList]:
        """Get list by id with optional cards loading"""
        query = select(BoardList).where(BoardList.id == list_id).execution_options(populate_existing=True)

        if load_cards:
            query = query.options(selectinload(BoardList.cards))

        result = await db.execute(query)
        return result.scalars().first()

    @staticmethod
    async def get_by_board_id(
        db: AsyncSession,
        board_id: int
    ) -> List[BoardList]:
        """Get all lists of a board ordered by position"""
        await _require_board_exists(db, board_id)
        query = (
            select(BoardList)
            .where(BoardList.board_id == board_id)
            .order_by(BoardList.position, BoardList.id)
            .execution_options(populate_existing=True)
        )
        result = await db.execute(query)
        return list(result.scalars().all())

    @staticmethod
    async def get_with_cards_by_board_id(
        db: AsyncSession,
        board_id: int
    ) -> List[BoardList]:
        """Get all lists of a board, each with its cards ordered by position"""
        await _require_board_exists(db, board_id)
        query = (
            select(BoardList)
            .where(BoardList.board_id == board_id)
            .options(selectinload(BoardList.cards))
            .order_by(BoardList.position, BoardList.id)
            .execution_options(populate_existing=True)
        )
        result = await db.execute(query)
        return list(result.scalars().all())

    @staticmethod
    async def get_all(
        db: AsyncSession,
        load_cards: bool = False
    ) -> List[BoardList]:
        """Get lists of every board ordered by position"""
        query = (
            select(BoardList)
            .order_by(BoardList.position, BoardList.id)
            .execution_options(populate_existing=True)
        )

        if load_cards:
            query = query.options(selectinload(BoardList.cards))

        result = await db.execute(query)
        return list(result.scalars().all())

    @staticmethod
    async def get_all_with_cards(
        db: AsyncSession
    ) -> List[BoardList]:
        return await ListService.get_all(db, load_cards=True)

    @staticmethod
    @log_function()
    async def create(
        db: AsyncSession,
        name: str,
        board_id: int,
        position: Optional[int] = None
    ) -> BoardList:
        """Create a new list in a board, appended when position is omitted"""
        name = require_text(name, "List name", LIST_NAME_MAX_LENGTH)
        if position is not None:
            position_allocator.validate_position(position)

        async with atomic(db):
            await _lock_board(db, board_id)
            current = await _current_positions(db, board_id)
            if position is None:
                position = position_allocator.next_position(current.values())

            target = position_allocator.insert_at(list(current), None, position)
            new_position = target.pop(None)
            await _write_positions(db, current, target)

            board_list = BoardList(
                name=name,
                board_id=board_id,
                position=new_position
            )
            db.add(board_list)
            await db.flush()

        await db.refresh(board_list)
        debug_logger.info(f"Создан новый список: ID {board_list.id}, на доске {board_id}, позиция {board_list.position}")
        return board_list

    @staticmethod
    async def update_name(
        db: AsyncSession,
        list_id: int,
        name: str
    ) -> BoardList:
        """Rename a list"""
        name = require_text(name, "List name", LIST_NAME_MAX_LENGTH)

        async with atomic(db):
            await _require_list(db, list_id)
            stmt = update(BoardList).where(BoardList.id == list_id).values(
                name=name,
                updated_at=datetime.utcnow().replace(tzinfo=None)
            )
            await db.execute(stmt)

        return await ListService.get_by_id(db, list_id)

    @staticmethod
    async def update_position(
        db: AsyncSession,
        list_id: int,
        position: int
    ) -> BoardList:
        """Reposition a list within its board, siblings are renumbered"""
        position_allocator.validate_position(position)

        async with atomic(db):
            board_list = await _require_list(db, list_id)
            await _lock_board(db, board_list.board_id)
            current = await _current_positions(db, board_list.board_id)
            target = position_allocator.insert_at(list(current), list_id, position)
            await _write_positions(db, current, target)

        return await ListService.get_by_id(db, list_id)

    @staticmethod
    async def reorder_lists(
        db: AsyncSession,
        board_id: int,
        list_order: Sequence[int]
    ) -> List[BoardList]:
        """Reorder lists in a board

        Args:
            db: Database session
            board_id: ID of the board
            list_order: List IDs in the desired order, every list exactly once

        Returns:
            The board's lists in their new order
        """
        async with atomic(db):
            await _lock_board(db, board_id)
            current = await _current_positions(db, board_id)
            position_allocator.validate_permutation(current, list_order)
            await _write_positions(db, current, position_allocator.reindex(list(list_order)))

        debug_logger.info(f"Порядок списков на доске {board_id} успешно обновлен")
        return await ListService.get_by_board_id(db, board_id)

    @staticmethod
    @log_function()
    async def delete(
        db: AsyncSession,
        list_id: int
    ) -> None:
        """Delete a list together with its cards in one transaction"""
        async with atomic(db):
            board_list = await _require_list(db, list_id)
            board_id = board_list.board_id
            await _lock_board(db, board_id)

            deleted_cards = await CardService.delete_by_list_ids(db, [list_id])
            await ListService.delete_by_ids(db, [list_id])

            current = await _current_positions(db, board_id)
            await _write_positions(db, current, position_allocator.reindex(list(current)))

        debug_logger.info(f"Список {list_id} удален вместе с {deleted_cards} карточками")

    @staticmethod
    async def delete_by_ids(
        db: AsyncSession,
        list_ids: Sequence[int]
    ) -> int:
        """Delete the given lists, the caller commits and removes their cards first"""
        if not list_ids:
            return 0
        result = await db.execute(delete(BoardList).where(BoardList.id.in_(list(list_ids))))
        return result.rowcount or 0
