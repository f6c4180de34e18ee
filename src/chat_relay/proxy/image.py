"""
Extraction de l'URL d'image depuis la réponse complète du service.
"""
import logging

from ..core.constants import URL_FIELD, IMAGE_FAILED_MESSAGE
from .fragments import find_string_field, decode_escapes

logger = logging.getLogger(__name__)


def extract_image_url(body: str) -> str:
    """
    Retourne la première URL d'image trouvée dans le corps de réponse.

    Args:
        body: Corps complet (non streamé) de la réponse

    Returns:
        L'URL, ou IMAGE_FAILED_MESSAGE si aucun champ `url` n'est présent
    """
    raw = find_string_field(body or "", URL_FIELD)
    if raw is None:
        logger.debug("[IMAGE] Aucune URL dans la réponse: %s", (body or "")[:200])
        return IMAGE_FAILED_MESSAGE
    return decode_escapes(raw)
