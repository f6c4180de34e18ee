"""
Consultation du crédit restant sur le compte du service distant.
"""
import json
import logging
from typing import Optional

from ..config.settings import RelaySettings
from ..core.constants import UPSTREAM_FAILURE_MESSAGE
from ..core.exceptions import RelayError, UpstreamPayloadError
from ..core.models import CreditResult
from ..proxy.client import RelayClient
from ..proxy.params import resolve_api_key

logger = logging.getLogger(__name__)


def parse_credit_body(body: str) -> str:
    """
    Extrait `total_available` d'une réponse de crédit.

    Raises:
        UpstreamPayloadError: Erreur serveur ou corps illisible
    """
    if "server_error" in body:
        raise UpstreamPayloadError("server_error in credit response")
    try:
        data = json.loads(body)
    except json.JSONDecodeError as e:
        raise UpstreamPayloadError(f"invalid credit response: {e}") from e
    if not isinstance(data, dict) or "total_available" not in data:
        raise UpstreamPayloadError("total_available missing from credit response")
    return str(data["total_available"])


async def query_credit(
    client: RelayClient,
    settings: RelaySettings,
    api_key_override: Optional[str] = None,
    text: Optional[str] = None
) -> CreditResult:
    """
    Interroge l'API de crédit.

    Args:
        client: Client HTTP du relais
        settings: Réglages (URL de crédit, clé par défaut)
        api_key_override: Clé fournie par le client (optionnelle)
        text: Texte d'origine, renvoyé comme titre en cas d'échec

    Returns:
        CreditResult code 200 avec le solde, ou code 400 en cas d'échec
    """
    api_key = resolve_api_key(api_key_override, settings.api_key)
    try:
        body = await client.get(settings.credit_api, api_key)
        return CreditResult(code=200, html=parse_credit_body(body))
    except RelayError as e:
        logger.warning("[CREDIT] Échec de la consultation: %s", e)
        return CreditResult(code=400, title=text, html=UPSTREAM_FAILURE_MESSAGE)
