"""
Gestionnaire de connexions WebSocket et canal d'envoi vers le client.
"""
import logging
from typing import Dict, Optional, TYPE_CHECKING

from ..core.exceptions import ChannelClosedError

if TYPE_CHECKING:
    from fastapi import WebSocket

logger = logging.getLogger(__name__)


class WebSocketChannel:
    """
    Canal client au-dessus d'une connexion WebSocket.

    Chaque message est envoyé comme une trame texte brute, sans enveloppe.
    Une fois un envoi échoué, le canal reste fermé.
    """

    def __init__(self, websocket: "WebSocket", session_id: str = None):
        self.websocket = websocket
        self.session_id = session_id
        self.closed = False
        self.sent_count = 0

    async def send(self, message: str) -> None:
        """
        Envoie un message texte au client.

        Raises:
            ChannelClosedError: Si la connexion n'est plus utilisable
        """
        if self.closed:
            raise ChannelClosedError(session_id=self.session_id)
        try:
            await self.websocket.send_text(message)
        except Exception as e:
            self.closed = True
            raise ChannelClosedError(f"client channel closed: {e}", session_id=self.session_id) from e
        self.sent_count += 1


class ConnectionManager:
    """Gère les connexions WebSocket actives, indexées par identifiant de session."""

    def __init__(self):
        self.active_connections: Dict[str, "WebSocket"] = {}

    async def connect(self, session_id: str, websocket: "WebSocket") -> WebSocketChannel:
        """Accepte une nouvelle connexion WebSocket et retourne son canal."""
        await websocket.accept()
        previous = self.active_connections.get(session_id)
        if previous is not None and previous is not websocket:
            logger.info("[WS] Session %s remplacée par une nouvelle connexion", session_id)
        self.active_connections[session_id] = websocket
        logger.info("[WS] Connexion %s ouverte (%d active(s))", session_id, len(self.active_connections))
        return WebSocketChannel(websocket, session_id=session_id)

    def disconnect(self, session_id: str, websocket: "WebSocket" = None):
        """Déconnecte une connexion WebSocket."""
        current = self.active_connections.get(session_id)
        if current is None or (websocket is not None and current is not websocket):
            return
        del self.active_connections[session_id]
        logger.info("[WS] Connexion %s fermée (%d active(s))", session_id, len(self.active_connections))

    def get_connection_count(self) -> int:
        """Retourne le nombre de connexions actives."""
        return len(self.active_connections)

    def is_connected(self, session_id: str) -> bool:
        """Vérifie si une session est connectée."""
        return session_id in self.active_connections


# Instance globale du gestionnaire
_manager: Optional[ConnectionManager] = None


def get_connection_manager() -> ConnectionManager:
    """
    Crée ou retourne l'instance globale du gestionnaire de connexions.

    Returns:
        Instance de ConnectionManager
    """
    global _manager
    if _manager is None:
        _manager = ConnectionManager()
    return _manager
