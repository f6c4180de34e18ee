"""
Route WebSocket du relais: un message JSON entrant, des trames texte sortantes.
"""
import logging
from typing import Any, Optional

from fastapi import APIRouter, WebSocket, WebSocketDisconnect
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from ...core.exceptions import RequestValidationError, ChannelClosedError
from ...core.models import RelayRequest
from ...services.dispatcher import format_error_message
from ...services.websocket_manager import get_connection_manager

logger = logging.getLogger(__name__)

router = APIRouter()

# Type hors de RequestKind: le dispatcher répond "unknown request type"
_UNKNOWN_KIND = 0


class InboundMessage(BaseModel):
    """
    Message envoyé par le client web.

    Les noms de champs suivent le client d'origine (`id`, `apikey`, `keep`,
    `keepText`); les noms longs sont aussi acceptés.
    """
    model_config = ConfigDict(populate_by_name=True)

    kind: int = Field(alias="id")
    text: Optional[str] = ""
    api_key: Optional[str] = Field(default=None, alias="apikey")
    continuation: bool = Field(default=False, alias="keep")
    prior_context: Optional[str] = Field(default=None, alias="keepText")

    @field_validator("kind", mode="before")
    @classmethod
    def _coerce_kind(cls, value: Any) -> Any:
        if isinstance(value, int) and not isinstance(value, bool):
            return value
        if isinstance(value, str) and value.strip().lstrip("-").isdigit():
            return int(value)
        return _UNKNOWN_KIND

    @field_validator("continuation", mode="before")
    @classmethod
    def _coerce_continuation(cls, value: Any) -> bool:
        # Seul keep == 1 active le mode continu
        if isinstance(value, str):
            return value.strip() == "1"
        return value is True or value == 1

    def to_request(self) -> RelayRequest:
        return RelayRequest(
            kind=self.kind,
            text=self.text or "",
            api_key_override=self.api_key,
            continuation=self.continuation,
            prior_context=self.prior_context,
        )


def parse_inbound_message(raw: str) -> RelayRequest:
    """
    Valide une trame texte et la convertit en RelayRequest.

    Raises:
        RequestValidationError: JSON invalide ou champ manquant
    """
    try:
        message = InboundMessage.model_validate_json(raw)
    except ValidationError as e:
        first = e.errors()[0] if e.errors() else {}
        location = ".".join(str(part) for part in first.get("loc", ()))
        detail = first.get("msg", "invalid message")
        raise RequestValidationError(
            f"invalid request: {location + ': ' if location else ''}{detail}",
            field=location or None
        ) from e
    return message.to_request()


@router.websocket("/ws/{sid}")
async def relay_websocket(websocket: WebSocket, sid: str):
    """
    Endpoint WebSocket du relais.

    Reçoit:
    - Requêtes texte (id=1) et image (id=2)

    Envoie:
    - Deltas de texte, URL d'image, ou `error: ...`
    """
    manager = get_connection_manager()
    channel = await manager.connect(sid, websocket)
    dispatcher = websocket.app.state.dispatcher

    try:
        # Les requêtes d'une même connexion sont traitées l'une après l'autre
        while not channel.closed:
            message = await websocket.receive()
            if message["type"] == "websocket.disconnect":
                raise WebSocketDisconnect(message.get("code", 1000))

            raw = message.get("text")
            try:
                if raw is None:
                    raise RequestValidationError("invalid request: text frame expected")
                request = parse_inbound_message(raw)
            except RequestValidationError as e:
                logger.warning("[WS] Message invalide (session %s): %s", sid, e)
                await channel.send(format_error_message(e))
                continue

            await dispatcher.dispatch(request, channel)

    except WebSocketDisconnect:
        logger.info("[WS] Client %s déconnecté", sid)
    except ChannelClosedError as e:
        logger.info("[WS] Canal %s fermé: %s", sid, e.message)
    finally:
        manager.disconnect(sid, websocket)
