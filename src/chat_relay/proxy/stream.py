"""
Lecture ligne à ligne du corps d'une réponse HTTP streamée.

Le lecteur est paresseux et à usage unique: il suit la durée de vie
d'un seul appel HTTP. La fermeture de la réponse reste à la charge de
l'appelant (`RelayClient.stream_post`).
"""
import logging
from datetime import datetime
from typing import AsyncIterator

import httpx

from ..core.exceptions import StreamReadError

logger = logging.getLogger(__name__)


# Types d'erreurs streaming connus
STREAMING_ERROR_TYPES = {
    "read_error": "connection interrupted by the remote service",
    "timeout_error": "timed out while reading the stream",
    "decode_error": "could not decode the stream",
    "unknown": "stream read failed",
}


def classify_stream_error(error: Exception) -> str:
    """Associe une exception httpx à un type de STREAMING_ERROR_TYPES."""
    if isinstance(error, httpx.TimeoutException):
        return "timeout_error"
    if isinstance(error, httpx.DecodingError):
        return "decode_error"
    if isinstance(error, (httpx.ReadError, httpx.RemoteProtocolError)):
        return "read_error"
    return "unknown"


async def iter_stream_lines(response: httpx.Response) -> AsyncIterator[str]:
    """
    Itère sur les lignes décodées d'une réponse en streaming.

    Args:
        response: Réponse HTTPX ouverte avec `stream=True`

    Yields:
        Lignes, sans le séparateur, dans l'ordre d'arrivée

    Raises:
        StreamReadError: Si le transport échoue avant la fin normale
    """
    lines_read = 0
    start_time = datetime.now()
    try:
        async for line in response.aiter_lines():
            lines_read += 1
            yield line
    except httpx.HTTPError as e:
        error_type = classify_stream_error(e)
        _log_streaming_error(error_type, lines_read, str(e), start_time)
        raise StreamReadError(
            f"{STREAMING_ERROR_TYPES[error_type]}: {e}",
            lines_read=lines_read
        ) from e


def _log_streaming_error(
    error_type: str,
    lines_read: int,
    error: str,
    start_time: datetime
) -> None:
    """Log structuré d'une erreur streaming."""
    duration = (datetime.now() - start_time).total_seconds()
    logger.warning(
        "[STREAM_ERROR] %s | lignes reçues: %d | durée: %.2fs | détail: %s",
        STREAMING_ERROR_TYPES.get(error_type, STREAMING_ERROR_TYPES["unknown"]),
        lines_read,
        duration,
        error[:200]
    )
