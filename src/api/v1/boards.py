from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.core import get_settings
from src.db.database import get_async_session
from src.api.dependencies.collaborators import get_activity_catalog
from src.services.board_service import BoardService
from src.services.collaborators import ActivityCatalog
from src.schemas.board import (
    BoardActivityUpdate,
    BoardCompleteResponse,
    BoardCreate,
    BoardPage,
    BoardResponse,
    BoardUpdate,
)

router = APIRouter(
    prefix="/boards",
    tags=["boards"],
)


@router.post("", response_model=BoardResponse, status_code=status.HTTP_201_CREATED)
async def create_board(
    board_create: BoardCreate,
    db: AsyncSession = Depends(get_async_session),
):
    """Create a new board"""
    return await BoardService.create(
        db=db,
        name=board_create.name,
        description=board_create.description
    )


@router.get("", response_model=BoardPage)
async def get_boards(
    page: int = Query(1, ge=1),
    page_size: Optional[int] = Query(None, ge=1),
    search: Optional[str] = None,
    db: AsyncSession = Depends(get_async_session),
):
    """Get a page of boards, newest first, optionally filtered by name/description"""
    settings = get_settings()
    page_size = min(page_size or settings.DEFAULT_PAGE_SIZE, settings.MAX_PAGE_SIZE)

    boards, total = await BoardService.get_boards_paged(
        db=db,
        page=page,
        page_size=page_size,
        search_term=search
    )
    return {"boards": boards, "total": total, "page": page, "page_size": page_size}


@router.get("/{board_id}", response_model=BoardCompleteResponse)
async def get_board(
    board_id: int,
    db: AsyncSession = Depends(get_async_session),
):
    """Get a board with its lists and cards"""
    board = await BoardService.get_complete_board(db=db, board_id=board_id)
    if not board:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Board not found"
        )
    return board


@router.put("/{board_id}", response_model=BoardResponse)
async def update_board(
    board_id: int,
    board_update: BoardUpdate,
    db: AsyncSession = Depends(get_async_session),
):
    """Update board name and description"""
    return await BoardService.update_details(
        db=db,
        board_id=board_id,
        name=board_update.name,
        description=board_update.description
    )


@router.put("/{board_id}/activity", response_model=BoardResponse)
async def associate_board_with_activity(
    board_id: int,
    activity_update: BoardActivityUpdate,
    db: AsyncSession = Depends(get_async_session),
    activity_catalog: Optional[ActivityCatalog] = Depends(get_activity_catalog),
):
    """Link a board to a scheduled activity or clear the link"""
    return await BoardService.associate_with_activity(
        db=db,
        board_id=board_id,
        activity_id=activity_update.activity_id,
        activity_catalog=activity_catalog
    )


@router.delete("/{board_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_board(
    board_id: int,
    db: AsyncSession = Depends(get_async_session),
):
    """Delete a board with all its lists and cards"""
    await BoardService.delete(db=db, board_id=board_id)
