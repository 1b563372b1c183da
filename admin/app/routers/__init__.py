from fastapi import APIRouter

from .chats import router as chats_router
from .comments import router as comments_router
from .payouts import router as payouts_router
from .reports import router as reports_router

# Создаем корневой роутер
api_router = APIRouter()

# Подключаем все роутеры
api_router.include_router(payouts_router, prefix="/payouts", tags=["payouts"])
api_router.include_router(comments_router, prefix="/comments", tags=["comments"])
api_router.include_router(chats_router, prefix="/chats", tags=["chats"])
api_router.include_router(reports_router, prefix="/reports", tags=["reports"])
