"""
Routes API par domaine.
"""

from . import credit
from . import health
from . import websocket

__all__ = [
    "credit",
    "health",
    "websocket",
]
