"""
Routes API pour le health check.
"""
from fastapi import APIRouter, Request

from ...services.websocket_manager import get_connection_manager

router = APIRouter()


@router.get("/health")
async def health_check(request: Request):
    """Health check avec le modèle configuré et les connexions actives."""
    settings = request.app.state.settings
    manager = get_connection_manager()

    return {
        "status": "ok",
        "model": settings.model,
        "default_key_configured": bool(settings.api_key),
        "connections": manager.get_connection_count(),
    }
