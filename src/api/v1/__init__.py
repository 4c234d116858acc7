from fastapi import APIRouter
from src.api.v1.boards import router as boards_router
from src.api.v1.lists import router as lists_router
from src.api.v1.cards import router as cards_router, list_cards_router

# Create main API router
api_router = APIRouter(prefix="/api/v1")

# Include routers
api_router.include_router(boards_router)
api_router.include_router(lists_router)
api_router.include_router(list_cards_router)
api_router.include_router(cards_router)
