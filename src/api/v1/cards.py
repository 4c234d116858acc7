from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.core import get_settings
from src.db.database import get_async_session
from src.api.dependencies.collaborators import get_activity_catalog, get_member_directory
from src.logs import debug_logger
from src.services.card_service import CardService
from src.services.collaborators import ActivityCatalog, MemberDirectory, MemberInfo
from src.schemas.card import (
    CardActivityUpdate,
    CardAttachmentsUpdate,
    CardChecklistUpdate,
    CardContentUpdate,
    CardCreate,
    CardDatesUpdate,
    CardLabelsUpdate,
    CardList,
    CardMemberAssignment,
    CardMove,
    CardOrderUpdate,
    CardPositionUpdate,
    CardResponse,
    CardStatusUpdate,
)

# Карточки внутри списка
list_cards_router = APIRouter(
    prefix="/lists/{list_id}/cards",
    tags=["cards"],
)

# Операции над отдельной карточкой
router = APIRouter(
    prefix="/cards",
    tags=["cards"],
)


@list_cards_router.post("", response_model=CardResponse, status_code=status.HTTP_201_CREATED)
async def create_card(
    list_id: int,
    card_create: CardCreate,
    db: AsyncSession = Depends(get_async_session),
):
    """Create a new card in a list"""
    return await CardService.create(
        db=db,
        title=card_create.title,
        list_id=list_id,
        position=card_create.position,
        description=card_create.description
    )


@list_cards_router.get("", response_model=CardList)
async def get_cards(
    list_id: int,
    db: AsyncSession = Depends(get_async_session),
):
    """Get all cards of a list ordered by position"""
    cards = await CardService.get_by_list_id(db=db, list_id=list_id)
    return {"cards": cards}


@list_cards_router.put("/reorder", response_model=CardList)
async def reorder_cards(
    list_id: int,
    card_order: CardOrderUpdate,
    db: AsyncSession = Depends(get_async_session),
):
    """Reorder all cards of a list"""
    cards = await CardService.reorder_cards(
        db=db,
        list_id=list_id,
        card_order=card_order.card_order
    )
    return {"cards": cards}


@router.get("/{card_id}", response_model=CardResponse)
async def get_card(
    card_id: int,
    db: AsyncSession = Depends(get_async_session),
):
    """Get a specific card by ID"""
    card = await CardService.get_by_id(db=db, card_id=card_id)
    if not card:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Card not found"
        )
    return card


@router.put("/{card_id}", response_model=CardResponse)
async def update_card_content(
    card_id: int,
    card_update: CardContentUpdate,
    db: AsyncSession = Depends(get_async_session),
):
    """Update card title and description"""
    return await CardService.update_content(
        db=db,
        card_id=card_id,
        title=card_update.title,
        description=card_update.description
    )


@router.put("/{card_id}/move", response_model=CardResponse)
async def move_card(
    card_id: int,
    card_move: CardMove,
    db: AsyncSession = Depends(get_async_session),
):
    """Move a card to another list at the given position"""
    debug_logger.log_data("Move card request", {
        "card_id": card_id,
        "target_list": card_move.list_id,
        "new_position": card_move.position,
    })
    return await CardService.move_card(
        db=db,
        card_id=card_id,
        new_list_id=card_move.list_id,
        new_position=card_move.position,
        enforce_same_board=get_settings().ENFORCE_SAME_BOARD_MOVES
    )


@router.put("/{card_id}/position", response_model=CardResponse)
async def update_card_position(
    card_id: int,
    position_update: CardPositionUpdate,
    db: AsyncSession = Depends(get_async_session),
):
    """Move a card to another position within its list"""
    return await CardService.update_position(
        db=db,
        card_id=card_id,
        position=position_update.position
    )


@router.put("/{card_id}/activity", response_model=CardResponse)
async def associate_card_with_activity(
    card_id: int,
    activity_update: CardActivityUpdate,
    db: AsyncSession = Depends(get_async_session),
    activity_catalog: Optional[ActivityCatalog] = Depends(get_activity_catalog),
):
    """Link a card to a scheduled activity or clear the link"""
    return await CardService.associate_with_activity(
        db=db,
        card_id=card_id,
        activity_id=activity_update.activity_id,
        activity_catalog=activity_catalog
    )


@router.put("/{card_id}/assignee", response_model=CardResponse)
async def assign_card_to_member(
    card_id: int,
    assignment: CardMemberAssignment,
    db: AsyncSession = Depends(get_async_session),
    member_directory: Optional[MemberDirectory] = Depends(get_member_directory),
):
    """Assign a member to a card or unassign"""
    return await CardService.assign_to_member(
        db=db,
        card_id=card_id,
        member_id=assignment.member_id,
        member_directory=member_directory
    )


@router.get("/{card_id}/assignee", response_model=Optional[MemberInfo])
async def get_card_assignee(
    card_id: int,
    db: AsyncSession = Depends(get_async_session),
    member_directory: Optional[MemberDirectory] = Depends(get_member_directory),
):
    """Display information of the card assignee"""
    if member_directory is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Member directory is not configured"
        )
    return await CardService.resolve_assignee(
        db=db,
        card_id=card_id,
        member_directory=member_directory
    )


@router.put("/{card_id}/status", response_model=CardResponse)
async def set_card_status(
    card_id: int,
    status_update: CardStatusUpdate,
    db: AsyncSession = Depends(get_async_session),
):
    return await CardService.set_status(db=db, card_id=card_id, status=status_update.status)


@router.put("/{card_id}/labels", response_model=CardResponse)
async def set_card_labels(
    card_id: int,
    labels_update: CardLabelsUpdate,
    db: AsyncSession = Depends(get_async_session),
):
    return await CardService.set_labels(db=db, card_id=card_id, labels=labels_update.labels)


@router.put("/{card_id}/dates", response_model=CardResponse)
async def set_card_dates(
    card_id: int,
    dates_update: CardDatesUpdate,
    db: AsyncSession = Depends(get_async_session),
):
    """Set start, due and reminder dates of a card"""
    return await CardService.set_dates(
        db=db,
        card_id=card_id,
        start_date=dates_update.start_date,
        due_date=dates_update.due_date,
        reminder_date=dates_update.reminder_date
    )


@router.put("/{card_id}/checklist", response_model=CardResponse)
async def set_card_checklist(
    card_id: int,
    checklist_update: CardChecklistUpdate,
    db: AsyncSession = Depends(get_async_session),
):
    return await CardService.set_checklist(
        db=db, card_id=card_id, checklist=checklist_update.checklist
    )


@router.put("/{card_id}/attachments", response_model=CardResponse)
async def set_card_attachments(
    card_id: int,
    attachments_update: CardAttachmentsUpdate,
    db: AsyncSession = Depends(get_async_session),
):
    return await CardService.set_attachments(
        db=db, card_id=card_id, attachments=attachments_update.attachments
    )


@router.delete("/{card_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_card(
    card_id: int,
    db: AsyncSession = Depends(get_async_session),
):
    """Delete a card"""
    await CardService.delete(db=db, card_id=card_id)
