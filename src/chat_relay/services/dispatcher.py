"""
Dispatcher du relais: seul composant qui parle au canal client.

Route chaque requête selon son type (texte, image), applique la politique
de clé API et de tokens, et convertit toute erreur en un unique message
`error: ...` envoyé après la sortie déjà transmise.
"""
import logging
from contextlib import aclosing

from ..config.settings import RelaySettings
from ..core.constants import ERROR_PREFIX, UNKNOWN_REQUEST_MESSAGE
from ..core.exceptions import RelayError, ChannelClosedError, UpstreamPayloadError
from ..core.models import RelayRequest, RequestKind, MessageChannel
from ..proxy.client import RelayClient
from ..proxy.extractor import extract_content
from ..proxy.image import extract_image_url
from ..proxy.params import (
    resolve_api_key,
    resolve_max_tokens,
    build_chat_parameters,
    build_image_parameters,
)
from ..proxy.stream import iter_stream_lines

logger = logging.getLogger(__name__)


def format_error_message(error: Exception) -> str:
    """Message client pour une erreur: `error: <raison>`."""
    reason = error.message if isinstance(error, RelayError) else str(error)
    return ERROR_PREFIX + (reason or type(error).__name__)


class RelayDispatcher:
    """Relaie une requête client vers le service distant."""

    def __init__(self, settings: RelaySettings, client: RelayClient):
        self.settings = settings
        self.client = client

    async def dispatch(self, request: RelayRequest, channel: MessageChannel) -> None:
        """
        Traite une requête de bout en bout.

        Ne lève jamais: toute erreur est transformée en message client, ou
        simplement loggée si le canal est fermé.

        Args:
            request: Requête du client
            channel: Canal de réponse
        """
        api_key = resolve_api_key(request.api_key_override, self.settings.api_key)
        max_tokens = resolve_max_tokens(request.api_key_override, self.settings.max_tokens)

        try:
            if request.kind == RequestKind.TEXT:
                await self._relay_text(request, api_key, max_tokens, channel)
            elif request.kind == RequestKind.IMAGE:
                await self._relay_image(request, api_key, channel)
            else:
                logger.info("[RELAY] Type de requête inconnu: %r", request.kind)
                await channel.send(UNKNOWN_REQUEST_MESSAGE)
        except ChannelClosedError as e:
            logger.info("[RELAY] Canal client fermé, relais interrompu: %s", e.message)
        except Exception as e:
            logger.exception("[RELAY] Échec de la requête (type=%r)", request.kind)
            await self._send_error(channel, e)

    async def _relay_text(
        self,
        request: RelayRequest,
        api_key: str,
        max_tokens: int,
        channel: MessageChannel
    ) -> None:
        params = build_chat_parameters(request, self.settings, max_tokens)
        logger.debug(
            "[RELAY] Texte: modèle=%s max_tokens=%d continu=%s",
            params.model, params.max_tokens, request.continuation
        )
        payload = params.to_payload()
        async with self.client.stream_post(self.settings.chat_api, api_key, payload) as response:
            async with aclosing(iter_stream_lines(response)) as lines, \
                    aclosing(extract_content(lines)) as deltas:
                async for delta in deltas:
                    await channel.send(delta)

            # Corps d'erreur sans marqueur "error" (page HTML d'une passerelle, 429 texte)
            if response.status_code >= 400:
                raise UpstreamPayloadError(
                    f"HTTP {response.status_code}",
                    details={"url": self.settings.chat_api}
                )

    async def _relay_image(self, request: RelayRequest, api_key: str, channel: MessageChannel) -> None:
        params = build_image_parameters(request, self.settings)
        body = await self.client.post(self.settings.image_api, api_key, params.to_payload())
        await channel.send(extract_image_url(body))

    async def _send_error(self, channel: MessageChannel, error: Exception) -> None:
        try:
            await channel.send(format_error_message(error))
        except ChannelClosedError as e:
            logger.info("[RELAY] Erreur non transmise, canal fermé: %s", e.message)
