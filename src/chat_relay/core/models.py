"""
Dataclasses métier pour Chat Relay.
"""
from dataclasses import dataclass
from enum import IntEnum
from typing import Any, Dict, Optional, Protocol, Tuple, runtime_checkable


class RequestKind(IntEnum):
    """Types de requêtes reconnus par le dispatcher."""
    TEXT = 1
    IMAGE = 2


@dataclass(frozen=True)
class RelayRequest:
    """Requête reçue du client, immuable pendant tout son traitement."""
    kind: int
    text: str = ""
    api_key_override: Optional[str] = None
    continuation: bool = False
    prior_context: Optional[str] = None


@dataclass(frozen=True)
class ChatMessage:
    """Un message de conversation {role, content}."""
    role: str
    content: str

    def to_dict(self) -> Dict[str, str]:
        return {"role": self.role, "content": self.content}


@dataclass(frozen=True)
class OutboundParameters:
    """Paramètres d'un appel chat/completions, construits à chaque requête."""
    model: str
    temperature: float
    max_tokens: int
    messages: Tuple[ChatMessage, ...]
    stop: Optional[Tuple[str, ...]] = None
    stream: bool = True

    def to_payload(self) -> Dict[str, Any]:
        """Convertit les paramètres en corps JSON."""
        payload: Dict[str, Any] = {
            "stream": self.stream,
            "max_tokens": self.max_tokens,
            "model": self.model,
            "temperature": self.temperature,
            "messages": [message.to_dict() for message in self.messages],
        }
        if self.stop:
            payload["stop"] = list(self.stop)
        return payload


@dataclass(frozen=True)
class ImageParameters:
    """Paramètres d'un appel de génération d'image."""
    prompt: str
    size: str = "256x256"

    def to_payload(self) -> Dict[str, Any]:
        return {"prompt": self.prompt, "size": self.size}


@dataclass(frozen=True)
class CreditResult:
    """Résultat d'une consultation de crédit (format attendu par le client web)."""
    code: int
    html: str
    title: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convertit le résultat en dictionnaire."""
        return {
            "code": self.code,
            "title": self.title,
            "html": self.html
        }


@runtime_checkable
class MessageChannel(Protocol):
    """Canal vers le client: une seule opération, envoi ordonné de texte."""

    async def send(self, message: str) -> None:
        ...
