"""
Client HTTPX vers le service distant avec timeouts configurables.

Pas de retry automatique: une erreur de transport est remontée
immédiatement au dispatcher, qui la transmet au client.
"""
import logging
from contextlib import asynccontextmanager
from typing import Dict, Any, Optional, AsyncIterator

import httpx

from ..core.exceptions import TransportError

logger = logging.getLogger(__name__)


def build_headers(api_key: str) -> Dict[str, str]:
    """En-têtes communs: JSON + authentification Bearer."""
    return {
        "Content-Type": "application/json",
        "Authorization": f"Bearer {api_key}",
    }


class RelayClient:
    """
    Client HTTP du relais.

    Gère:
    - Timeouts (lecture longue pour le streaming, connexion courte)
    - Pool de connexions partagé entre requêtes
    - Conversion des erreurs httpx en TransportError
    """

    def __init__(
        self,
        timeout: float = 120.0,
        connect_timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self.timeout = timeout
        self.connect_timeout = connect_timeout
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    async def __aenter__(self) -> "RelayClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.aclose()

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(self.timeout, connect=self.connect_timeout),
                limits=httpx.Limits(
                    max_keepalive_connections=20,
                    max_connections=50
                ),
                transport=self._transport,
            )
        return self._client

    async def aclose(self) -> None:
        """Ferme le pool de connexions."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    @asynccontextmanager
    async def stream_post(
        self,
        url: str,
        api_key: str,
        payload: Dict[str, Any]
    ) -> AsyncIterator[httpx.Response]:
        """
        Émet un POST en streaming et expose la réponse ouverte.

        La réponse est fermée à la sortie du bloc, quelle qu'en soit la
        raison (fin normale, erreur d'extraction, client déconnecté).

        Raises:
            TransportError: Si la requête n'a pas pu être émise
        """
        client = self._get_client()
        request = client.build_request("POST", url, headers=build_headers(api_key), json=payload)
        try:
            response = await client.send(request, stream=True)
        except httpx.HTTPError as e:
            logger.warning("[CLIENT] Échec POST %s: %s", url, e)
            raise TransportError(f"request failed: {e}", url=url) from e

        if response.status_code >= 400:
            logger.warning("[CLIENT] POST %s -> HTTP %d", url, response.status_code)
        try:
            yield response
        finally:
            await response.aclose()

    async def post(self, url: str, api_key: str, payload: Dict[str, Any]) -> str:
        """
        Émet un POST et retourne le corps complet.

        Raises:
            TransportError: Si la requête échoue
        """
        try:
            response = await self._get_client().post(url, headers=build_headers(api_key), json=payload)
        except httpx.HTTPError as e:
            logger.warning("[CLIENT] Échec POST %s: %s", url, e)
            raise TransportError(f"request failed: {e}", url=url) from e
        if response.status_code >= 400:
            logger.warning("[CLIENT] POST %s -> HTTP %d", url, response.status_code)
        return response.text

    async def get(self, url: str, api_key: str) -> str:
        """
        Émet un GET et retourne le corps complet.

        Raises:
            TransportError: Si la requête échoue
        """
        try:
            response = await self._get_client().get(url, headers=build_headers(api_key))
        except httpx.HTTPError as e:
            logger.warning("[CLIENT] Échec GET %s: %s", url, e)
            raise TransportError(f"request failed: {e}", url=url) from e
        return response.text


def create_relay_client(
    timeout: float = 120.0,
    connect_timeout: float = 10.0,
    transport: Optional[httpx.AsyncBaseTransport] = None
) -> RelayClient:
    """
    Crée un client relais.

    Args:
        timeout: Timeout de lecture en secondes
        connect_timeout: Timeout de connexion en secondes
        transport: Transport httpx alternatif (tests)

    Returns:
        Instance de RelayClient
    """
    return RelayClient(
        timeout=timeout,
        connect_timeout=connect_timeout,
        transport=transport
    )
