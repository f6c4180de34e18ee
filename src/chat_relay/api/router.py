"""
Router principal de l'API.
"""
from fastapi import APIRouter

from .routes import credit, health, websocket

# Router principal
api_router = APIRouter()

# Inclusion des sous-routers
api_router.include_router(credit.router, prefix="/api", tags=["credit"])
api_router.include_router(health.router, prefix="", tags=["health"])
api_router.include_router(websocket.router, prefix="", tags=["relay"])
