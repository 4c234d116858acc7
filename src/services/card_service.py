import json
from typing import Any, Dict, Iterable, List, Optional, Sequence, Union
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update, delete
from datetime import datetime

from src.core.exceptions import CrossBoardMoveError, NotFoundError, ValidationError
from src.db.transaction import atomic
from src.models.board_list import BoardList
from src.models.card import Card, CardStatus
from src.logs import debug_logger, log_function
from src.services import position_allocator
from src.services.collaborators import ActivityCatalog, MemberDirectory, MemberInfo
from src.services.validators import (
    CARD_TITLE_MAX_LENGTH,
    normalize_labels,
    optional_text,
    require_text,
    to_naive_utc,
)


def _utcnow() -> datetime:
    # Явно убираем часовой пояс: колонки TIMESTAMP WITHOUT TIME ZONE
    return datetime.utcnow().replace(tzinfo=None)


async def _lock_list(db: AsyncSession, list_id: int) -> BoardList:
    """Lock a list row for the rest of the transaction (SELECT ... FOR UPDATE)"""
    query = select(BoardList).where(BoardList.id == list_id).with_for_update()
    result = await db.execute(query)
    board_list = result.scalars().first()
    if not board_list:
        debug_logger.warning(f"Список с ID {list_id} не найден")
        raise NotFoundError("List", list_id)
    return board_list


async def _lock_lists(db: AsyncSession, list_ids: Iterable[int]) -> Dict[int, BoardList]:
    # Блокируем в порядке возрастания ID, чтобы избежать взаимных блокировок
    return {list_id: await _lock_list(db, list_id) for list_id in sorted(set(list_ids))}


async def _require_card(db: AsyncSession, card_id: int) -> Card:
    card = await CardService.get_by_id(db, card_id)
    if not card:
        debug_logger.warning(f"Карточка с ID {card_id} не найдена")
        raise NotFoundError("Card", card_id)
    return card


async def _current_positions(db: AsyncSession, list_id: int) -> Dict[int, int]:
    """Card id -> position for a list, in display order"""
    query = (
        select(Card.id, Card.position)
        .where(Card.list_id == list_id)
        .order_by(Card.position, Card.id)
    )
    result = await db.execute(query)
    return {row.id: row.position for row in result}


async def _write_positions(
    db: AsyncSession,
    current: Dict[int, int],
    target: Dict[int, int],
    current_time: datetime
) -> None:
    for card_id, position in position_allocator.changed_positions(current, target).items():
        stmt = update(Card).where(Card.id == card_id).values(
            position=position,
            updated_at=current_time
        )
        await db.execute(stmt)


def _parse_blob(value: Union[str, Dict[str, Any], List[Any], None], field: str) -> Any:
    """Checklist/attachments are stored as JSON sub-documents"""
    if value is None:
        return None
    if isinstance(value, str):
        if not value.strip():
            return None
        try:
            value = json.loads(value)
        except json.JSONDecodeError as e:
            raise ValidationError(f"{field} is not valid JSON: {e.msg}") from e
    if not isinstance(value, (dict, list)):
        raise ValidationError(f"{field} must be a JSON object or array")
    return value


class CardService:
    """Ordering and field operations for cards within lists"""

    @staticmethod
    async def get_by_id(
        db: AsyncSession,
        card_id: int
    ) -> Optional[Card]:
        """Get a card by ID"""
        query = select(Card).where(Card.id == card_id).execution_options(populate_existing=True)
        result = await db.execute(query)
        return result.scalars().first()

    @staticmethod
    async def get_by_list_id(
        db: AsyncSession,
        list_id: int
    ) -> List[Card]:
        """Get all cards of a list ordered by position"""
        exists = await db.execute(select(BoardList.id).where(BoardList.id == list_id))
        if exists.scalar() is None:
            raise NotFoundError("List", list_id)

        query = (
            select(Card)
            .where(Card.list_id == list_id)
            .order_by(Card.position, Card.id)
            .execution_options(populate_existing=True)
        )
        result = await db.execute(query)
        return list(result.scalars().all())

    @staticmethod
    @log_function()
    async def create(
        db: AsyncSession,
        title: str,
        list_id: int,
        position: Optional[int] = None,
        description: Optional[str] = ""
    ) -> Card:
        """
        Create a new card in a list

        Without a position the card is appended after the last sibling.
        An explicit position is clamped to 1..N+1 and the cards at or after
        it move down by one.
        """
        title = require_text(title, "Card title", CARD_TITLE_MAX_LENGTH)
        description = optional_text(description, "Card description")
        if position is not None:
            position_allocator.validate_position(position)

        async with atomic(db):
            await _lock_list(db, list_id)
            current = await _current_positions(db, list_id)
            if position is None:
                position = position_allocator.next_position(current.values())

            # None - место новой карточки в расчете порядка
            target = position_allocator.insert_at(list(current), None, position)
            new_position = target.pop(None)
            current_time = _utcnow()
            await _write_positions(db, current, target, current_time)

            card = Card(
                title=title,
                description=description,
                list_id=list_id,
                position=new_position,
                status=CardStatus.TODO,
                created_at=current_time,
                updated_at=current_time
            )
            db.add(card)
            await db.flush()

        await db.refresh(card)
        debug_logger.info(f"Создана новая карточка: ID {card.id}, в списке {list_id}, позиция {card.position}")
        return card

    @staticmethod
    async def _update_fields(
        db: AsyncSession,
        card_id: int,
        **values: Any
    ) -> Card:
        async with atomic(db):
            await _require_card(db, card_id)
            values["updated_at"] = _utcnow()
            debug_logger.debug(f"Обновляемые поля карточки {card_id}: {values}")
            stmt = update(Card).where(Card.id == card_id).values(**values)
            await db.execute(stmt)

        return await CardService.get_by_id(db, card_id)

    @staticmethod
    async def update_content(
        db: AsyncSession,
        card_id: int,
        title: str,
        description: Optional[str] = ""
    ) -> Card:
        """Update title and description, position is untouched"""
        title = require_text(title, "Card title", CARD_TITLE_MAX_LENGTH)
        description = optional_text(description, "Card description")
        card = await CardService._update_fields(db, card_id, title=title, description=description)
        debug_logger.info(f"Карточка {card_id} успешно обновлена")
        return card

    @staticmethod
    @log_function()
    async def move_card(
        db: AsyncSession,
        card_id: int,
        new_list_id: int,
        new_position: int,
        enforce_same_board: bool = False
    ) -> Card:
        """
        Move a card to another list at the given position in one transaction

        The old list closes the gap, the target list shifts the cards at or
        after the new position. Positions past the end are clamped. With
        enforce_same_board the target list must belong to the card's board.
        """
        position_allocator.validate_position(new_position)

        async with atomic(db):
            card = await _require_card(db, card_id)
            lists = await _lock_lists(db, {card.list_id, new_list_id})
            # Перечитываем карточку после блокировки списков
            card = await _require_card(db, card_id)
            while card.list_id not in lists:
                # Карточку перенесли до блокировки: блокируем весь набор заново по возрастанию ID
                lists = await _lock_lists(db, set(lists) | {card.list_id})
                card = await _require_card(db, card_id)
            old_list_id = card.list_id

            if enforce_same_board and lists[old_list_id].board_id != lists[new_list_id].board_id:
                raise CrossBoardMoveError(
                    card_id,
                    lists[old_list_id].board_id,
                    lists[new_list_id].board_id
                )

            current_time = _utcnow()
            if old_list_id == new_list_id:
                current = await _current_positions(db, old_list_id)
                target = position_allocator.insert_at(list(current), card_id, new_position)
                await _write_positions(db, current, target, current_time)
            else:
                source = await _current_positions(db, old_list_id)
                await _write_positions(
                    db, source, position_allocator.remove(list(source), card_id), current_time
                )

                destination = await _current_positions(db, new_list_id)
                target = position_allocator.insert_at(list(destination), card_id, new_position)
                final_position = target.pop(card_id)
                await _write_positions(db, destination, target, current_time)

                stmt = update(Card).where(Card.id == card_id).values(
                    list_id=new_list_id,
                    position=final_position,
                    updated_at=current_time
                )
                await db.execute(stmt)

        moved_card = await CardService.get_by_id(db, card_id)
        debug_logger.info(
            f"Карточка {card_id} перемещена из списка {old_list_id} в список {new_list_id}, "
            f"позиция {moved_card.position}"
        )
        return moved_card

    @staticmethod
    async def update_position(
        db: AsyncSession,
        card_id: int,
        position: int
    ) -> Card:
        """Reposition a card within its current list"""
        position_allocator.validate_position(position)

        async with atomic(db):
            card = await _require_card(db, card_id)
            await _lock_list(db, card.list_id)
            card = await _require_card(db, card_id)
            current = await _current_positions(db, card.list_id)
            target = position_allocator.insert_at(list(current), card_id, position)
            await _write_positions(db, current, target, _utcnow())

        return await CardService.get_by_id(db, card_id)

    @staticmethod
    @log_function()
    async def reorder_cards(
        db: AsyncSession,
        list_id: int,
        card_order: Sequence[int]
    ) -> List[Card]:
        """Apply a complete new order to the cards of a list"""
        async with atomic(db):
            await _lock_list(db, list_id)
            current = await _current_positions(db, list_id)
            position_allocator.validate_permutation(current, card_order)
            target = position_allocator.reindex(list(card_order))
            await _write_positions(db, current, target, _utcnow())

        debug_logger.info(f"Порядок карточек в списке {list_id} успешно обновлен")
        return await CardService.get_by_list_id(db, list_id)

    @staticmethod
    async def associate_with_activity(
        db: AsyncSession,
        card_id: int,
        activity_id: Optional[int],
        activity_catalog: Optional[ActivityCatalog] = None
    ) -> Card:
        """Link a card to a scheduled activity, None clears the link"""
        await _require_card(db, card_id)
        if activity_id is not None and activity_catalog is not None:
            if not await activity_catalog.activity_exists(activity_id):
                raise NotFoundError("Activity", activity_id)
        return await CardService._update_fields(db, card_id, activity_id=activity_id)

    @staticmethod
    async def assign_to_member(
        db: AsyncSession,
        card_id: int,
        member_id: Optional[str],
        member_directory: Optional[MemberDirectory] = None
    ) -> Card:
        """Assign a member to a card, None unassigns"""
        await _require_card(db, card_id)
        if member_id is not None and member_directory is not None:
            if await member_directory.get_member(member_id) is None:
                raise NotFoundError("Member", member_id)
        return await CardService._update_fields(db, card_id, assigned_member_id=member_id)

    @staticmethod
    async def resolve_assignee(
        db: AsyncSession,
        card_id: int,
        member_directory: MemberDirectory
    ) -> Optional[MemberInfo]:
        """Display information of the card assignee, None when unassigned"""
        card = await _require_card(db, card_id)
        if card.assigned_member_id is None:
            return None
        return await member_directory.get_member(card.assigned_member_id)

    @staticmethod
    async def set_status(
        db: AsyncSession,
        card_id: int,
        status: Union[CardStatus, str]
    ) -> Card:
        """Set the card status, any status may follow any other"""
        if not isinstance(status, CardStatus):
            try:
                status = CardStatus(status)
            except ValueError as e:
                raise ValidationError(f"Unknown card status: {status}") from e
        return await CardService._update_fields(db, card_id, status=status)

    @staticmethod
    async def set_labels(
        db: AsyncSession,
        card_id: int,
        labels: Optional[Iterable[str]]
    ) -> Card:
        return await CardService._update_fields(db, card_id, labels=normalize_labels(labels))

    @staticmethod
    async def set_dates(
        db: AsyncSession,
        card_id: int,
        start_date: Optional[datetime] = None,
        due_date: Optional[datetime] = None,
        reminder_date: Optional[datetime] = None
    ) -> Card:
        """Set start, due and reminder dates, None clears a date"""
        start_date = to_naive_utc(start_date)
        due_date = to_naive_utc(due_date)
        reminder_date = to_naive_utc(reminder_date)
        return await CardService._update_fields(
            db,
            card_id,
            start_date=start_date,
            due_date=due_date,
            reminder_date=reminder_date
        )

    @staticmethod
    async def set_checklist(
        db: AsyncSession,
        card_id: int,
        checklist: Union[str, Dict[str, Any], List[Any], None]
    ) -> Card:
        return await CardService._update_fields(
            db, card_id, checklist=_parse_blob(checklist, "Checklist")
        )

    @staticmethod
    async def set_attachments(
        db: AsyncSession,
        card_id: int,
        attachments: Union[str, Dict[str, Any], List[Any], None]
    ) -> Card:
        return await CardService._update_fields(
            db, card_id, attachments=_parse_blob(attachments, "Attachments")
        )

    @staticmethod
    @log_function()
    async def delete(
        db: AsyncSession,
        card_id: int
    ) -> None:
        """Delete a card and close the gap it leaves in its list"""
        async with atomic(db):
            card = await _require_card(db, card_id)
            await _lock_list(db, card.list_id)
            card = await _require_card(db, card_id)
            list_id = card.list_id

            current = await _current_positions(db, list_id)
            await db.execute(delete(Card).where(Card.id == card_id))
            del current[card_id]
            target = position_allocator.reindex(list(current))
            await _write_positions(db, current, target, _utcnow())

        debug_logger.info(f"Карточка {card_id} успешно удалена из списка {list_id}")

    @staticmethod
    async def delete_by_list_ids(
        db: AsyncSession,
        list_ids: Sequence[int]
    ) -> int:
        """Delete every card of the given lists, the caller commits"""
        if not list_ids:
            return 0
        result = await db.execute(delete(Card).where(Card.list_id.in_(list(list_ids))))
        return result.rowcount or 0
