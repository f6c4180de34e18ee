"""
Construction des paramètres de requête vers le service distant.

Deux variantes pour le texte:
- tour unique: le texte soumis est envoyé tel quel
- conversation continue: le transcript fourni par le client remplace le
  texte, et des séquences d'arrêt coupent le modèle avant qu'il ne rédige
  le tour suivant
"""
from typing import Optional

from ..config.settings import RelaySettings
from ..core.constants import USER_KEY_MAX_TOKENS, CONTINUATION_STOP_SEQUENCES
from ..core.exceptions import RequestValidationError
from ..core.models import RelayRequest, ChatMessage, OutboundParameters, ImageParameters


def _is_blank(value: Optional[str]) -> bool:
    return value is None or not value.strip()


def resolve_api_key(override: Optional[str], default: str) -> str:
    """Retourne la clé fournie par le client si non vide, sinon la clé configurée."""
    if _is_blank(override):
        return default
    return override.strip()


def resolve_max_tokens(override: Optional[str], configured: int) -> int:
    """
    Politique de tokens: plafond fixe pour les clés fournies par le client.

    Args:
        override: Clé API fournie par le client (optionnelle)
        configured: Valeur `max_tokens` de la configuration

    Returns:
        USER_KEY_MAX_TOKENS si une clé client est fournie, sinon `configured`
    """
    if _is_blank(override):
        return configured
    return USER_KEY_MAX_TOKENS


def build_chat_parameters(
    request: RelayRequest,
    settings: RelaySettings,
    max_tokens: int
) -> OutboundParameters:
    """
    Construit les paramètres chat/completions d'une requête texte.

    Args:
        request: Requête du client
        settings: Réglages du relais (modèle, température)
        max_tokens: Limite effective, voir `resolve_max_tokens`

    Returns:
        OutboundParameters avec stream=True

    Raises:
        RequestValidationError: Mode continu sans transcript
    """
    stop = None
    content = request.text
    if request.continuation:
        if _is_blank(request.prior_context):
            raise RequestValidationError(
                "prior context is required in continuation mode",
                field="keepText"
            )
        content = request.prior_context
        stop = CONTINUATION_STOP_SEQUENCES

    return OutboundParameters(
        model=settings.model,
        temperature=settings.temperature,
        max_tokens=max_tokens,
        messages=(ChatMessage(role="user", content=content),),
        stop=stop,
        stream=True,
    )


def build_image_parameters(request: RelayRequest, settings: RelaySettings) -> ImageParameters:
    """Construit les paramètres de génération d'image."""
    return ImageParameters(prompt=request.text, size=settings.image_size)
