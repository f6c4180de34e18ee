"""
Extraction incrémentale du texte généré depuis les lignes du stream.

Chaque ligne peut porter un fragment de contenu, un objet d'erreur, ou
rien. L'extracteur:
- détecte les erreurs (drapeau collant, le stream est quand même drainé)
- extrait et normalise le champ `content`
- supprime les fragments composés uniquement de retours à la ligne tant
  qu'aucun vrai contenu n'a été vu
"""
import logging
from typing import AsyncIterable, AsyncIterator, Optional

from ..core.constants import CONTENT_FIELD, ERROR_FIELD, UPSTREAM_FAILURE_MESSAGE
from ..core.exceptions import UpstreamStreamError
from .fragments import find_string_field, has_field, decode_escapes

logger = logging.getLogger(__name__)


def is_blank_fragment(text: str) -> bool:
    """Vrai si le texte est vide ou composé uniquement de `\\n`."""
    return text.strip("\n") == ""


class ContentExtractor:
    """
    Machine à états d'une extraction, une instance par stream.

    Attributes:
        started: Le premier fragment non vide a été émis
        error_observed: Un objet d'erreur a été vu (ne repasse jamais à False)
    """

    def __init__(self):
        self.started = False
        self.error_observed = False
        self.error_lines = 0
        self.lines_seen = 0
        self.deltas_emitted = 0

    def feed(self, line: str) -> Optional[str]:
        """
        Traite une ligne et retourne le delta à transmettre, s'il y en a un.

        Args:
            line: Ligne décodée du stream

        Returns:
            Texte normalisé, ou None si la ligne ne produit rien
        """
        self.lines_seen += 1

        if not self.error_observed and has_field(line, ERROR_FIELD):
            self.error_observed = True
        if self.error_observed:
            self.error_lines += 1
            logger.error("[STREAM] %s", line)

        raw = find_string_field(line, CONTENT_FIELD)
        if raw is None:
            return None

        text = decode_escapes(raw)
        if not self.started:
            if is_blank_fragment(text):
                return None
            self.started = True

        self.deltas_emitted += 1
        return text

    def finish(self) -> None:
        """
        Clôt l'extraction une fois le stream épuisé.

        Raises:
            UpstreamStreamError: Si une erreur a été vue dans le stream
        """
        logger.debug(
            "[STREAM] Fin d'extraction: %d ligne(s), %d delta(s), erreur=%s",
            self.lines_seen, self.deltas_emitted, self.error_observed
        )
        if self.error_observed:
            raise UpstreamStreamError(UPSTREAM_FAILURE_MESSAGE, error_lines=self.error_lines)


async def extract_content(lines: AsyncIterable[str]) -> AsyncIterator[str]:
    """
    Générateur des deltas de contenu, dans l'ordre d'arrivée.

    Args:
        lines: Lignes du stream (voir `iter_stream_lines`)

    Yields:
        Deltas de texte normalisés

    Raises:
        UpstreamStreamError: Après épuisement, si une erreur a été détectée
    """
    extractor = ContentExtractor()
    async for line in lines:
        delta = extractor.feed(line)
        if delta is not None:
            yield delta
    extractor.finish()
