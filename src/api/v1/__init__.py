from fastapi import APIRouter
from src.api.v1.auth import router as auth_router
from src.api.v1.boards import router as boards_router
from src.api.v1.columns import router as columns_router, board_columns_router
from src.api.v1.cards import router as cards_router, board_cards_router
from src.api.v1.history import router as history_router

# Create main API router
api_router = APIRouter(prefix="/api/v1")

# Include routers
api_router.include_router(auth_router)
api_router.include_router(boards_router)
api_router.include_router(board_columns_router)
api_router.include_router(columns_router)
api_router.include_router(board_cards_router)
api_router.include_router(cards_router)
api_router.include_router(history_router)
