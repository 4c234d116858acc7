from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.db.database import get_async_session
from src.models.board_list import BoardList
from src.services.list_service import ListService
from src.schemas.board_list import (
    BoardListCollection,
    BoardListCreate,
    BoardListOrderUpdate,
    BoardListPositionUpdate,
    BoardListRename,
    BoardListResponse,
)

router = APIRouter(
    prefix="/boards/{board_id}/lists",
    tags=["lists"],
)


async def check_list_in_board(
    board_id: int,
    list_id: int,
    db: AsyncSession
) -> BoardList:
    """
    Check that the list exists and belongs to the board in the path

    Raises:
        HTTPException: 404 for a missing list, 400 for a list of another board
    """
    board_list = await ListService.get_by_id(db=db, list_id=list_id)
    if not board_list:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="List not found"
        )

    if board_list.board_id != board_id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="List does not belong to the specified board"
        )

    return board_list


@router.put("/reorder", response_model=BoardListCollection)
async def reorder_lists(
    board_id: int,
    list_order: BoardListOrderUpdate,
    db: AsyncSession = Depends(get_async_session),
):
    """Reorder all lists of a board"""
    await ListService.reorder_lists(
        db=db,
        board_id=board_id,
        list_order=list_order.list_order
    )
    lists = await ListService.get_with_cards_by_board_id(db=db, board_id=board_id)
    return {"lists": lists}


@router.post("", response_model=BoardListResponse, status_code=status.HTTP_201_CREATED)
async def create_list(
    board_id: int,
    list_create: BoardListCreate,
    db: AsyncSession = Depends(get_async_session),
):
    """Create a new list in a board"""
    return await ListService.create(
        db=db,
        name=list_create.name,
        board_id=board_id,
        position=list_create.position
    )


@router.get("", response_model=BoardListCollection)
async def get_lists(
    board_id: int,
    db: AsyncSession = Depends(get_async_session),
):
    """Get all lists of a board with their cards"""
    lists = await ListService.get_with_cards_by_board_id(db=db, board_id=board_id)
    return {"lists": lists}


@router.put("/{list_id}", response_model=BoardListResponse)
async def rename_list(
    board_id: int,
    list_id: int,
    list_rename: BoardListRename,
    db: AsyncSession = Depends(get_async_session),
):
    """Rename a list"""
    await check_list_in_board(board_id, list_id, db)
    return await ListService.update_name(db=db, list_id=list_id, name=list_rename.name)


@router.put("/{list_id}/position", response_model=BoardListResponse)
async def update_list_position(
    board_id: int,
    list_id: int,
    position_update: BoardListPositionUpdate,
    db: AsyncSession = Depends(get_async_session),
):
    """Move a list to another position within its board"""
    await check_list_in_board(board_id, list_id, db)
    return await ListService.update_position(
        db=db,
        list_id=list_id,
        position=position_update.position
    )


@router.delete("/{list_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_list(
    board_id: int,
    list_id: int,
    db: AsyncSession = Depends(get_async_session),
):
    """Delete a list and all its cards"""
    await check_list_in_board(board_id, list_id, db)
    await ListService.delete(db=db, list_id=list_id)
