from fastapi import APIRouter

from app.api.routes.health import router as health_router
from app.api.routes.messenger import router as messenger_router

api_router = APIRouter()

# Public / health
api_router.include_router(health_router, tags=["health"])

# Messenger webhook (handshake + event intake)
api_router.include_router(messenger_router, tags=["messenger"])
