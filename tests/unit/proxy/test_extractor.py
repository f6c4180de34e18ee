"""
Tests unitaires de l'extraction incrémentale du contenu.

Le stream mélange des lignes sans contenu, des fragments vides en tête
de réponse et parfois des objets d'erreur: aucun ne doit casser l'ordre
ni dupliquer la sortie.
"""
import pytest

from chat_relay.core.exceptions import UpstreamStreamError
from chat_relay.proxy.extractor import ContentExtractor, extract_content, is_blank_fragment


def chunk(text: str) -> str:
    """Ligne SSE au format chat/completions (texte déjà échappé)."""
    return 'data: {"choices":[{"delta":{"content":"' + text + '"},"index":0}]}'


class TestContentExtractor:
    """Tests de la machine à états."""

    def test_emits_content(self):
        extractor = ContentExtractor()
        assert extractor.feed('{"content":"Hello"}') == "Hello"

    def test_converts_escaped_newline_and_tab(self):
        extractor = ContentExtractor()
        assert extractor.feed(r'{"content":"a\n\tb"}') == "a\n\tb"

    def test_line_without_content_is_skipped(self):
        extractor = ContentExtractor()
        assert extractor.feed('data: {"choices":[{"delta":{"role":"assistant"}}]}') is None
        assert extractor.feed("") is None
        assert extractor.feed("data: [DONE]") is None
        assert not extractor.started

    def test_leading_newlines_are_dropped(self):
        extractor = ContentExtractor()
        assert extractor.feed(chunk(r"\n")) is None
        assert extractor.feed(chunk(r"\n\n")) is None
        assert not extractor.started
        assert extractor.feed(chunk("Hi")) == "Hi"
        assert extractor.started

    def test_suppression_never_reengages(self):
        extractor = ContentExtractor()
        assert extractor.feed(chunk("Hi")) == "Hi"
        assert extractor.feed(chunk(r"\n")) == "\n"
        assert extractor.feed(chunk(r"\n\n")) == "\n\n"

    def test_first_fragment_with_leading_newline_is_kept_whole(self):
        extractor = ContentExtractor()
        assert extractor.feed(chunk(r"\nHi")) == "\nHi"

    def test_empty_fragment_before_start_is_dropped(self):
        extractor = ContentExtractor()
        assert extractor.feed(chunk("")) is None
        assert not extractor.started

    def test_tab_only_fragment_opens_gate(self):
        extractor = ContentExtractor()
        assert extractor.feed(chunk(r"\t")) == "\t"
        assert extractor.started

    def test_error_flag_is_sticky(self):
        extractor = ContentExtractor()
        extractor.feed('{"error":{"message":"boom"}}')
        assert extractor.error_observed
        extractor.feed(chunk("Hi"))
        extractor.feed("")
        assert extractor.error_observed
        assert extractor.error_lines == 3

    def test_content_still_emitted_after_error(self):
        extractor = ContentExtractor()
        extractor.feed('{"error":{"message":"boom"}}')
        assert extractor.feed(chunk("late")) == "late"

    def test_finish_raises_after_error(self):
        extractor = ContentExtractor()
        extractor.feed('{"error": {"code": "server_error"}}')
        with pytest.raises(UpstreamStreamError) as exc_info:
            extractor.finish()
        assert exc_info.value.message == "remote service error, retry later"

    def test_finish_without_error(self):
        extractor = ContentExtractor()
        extractor.feed(chunk("ok"))
        extractor.finish()

    def test_error_logged(self, caplog):
        extractor = ContentExtractor()
        with caplog.at_level("ERROR", logger="chat_relay.proxy.extractor"):
            extractor.feed('{"error":{"message":"quota exceeded"}}')
        assert "quota exceeded" in caplog.text


class TestIsBlankFragment:

    def test_newlines(self):
        assert is_blank_fragment("\n\n")

    def test_empty(self):
        assert is_blank_fragment("")

    def test_text(self):
        assert not is_blank_fragment("\na")

    def test_space_is_content(self):
        assert not is_blank_fragment(" ")


class TestExtractContent:
    """Tests du générateur asynchrone."""

    @pytest.mark.anyio
    async def test_order_preserved(self):
        lines = [chunk(r"\n"), chunk("A"), "", chunk("B"), chunk(r"\n"), chunk("C"), "data: [DONE]"]
        deltas = [d async for d in extract_content(async_iter(lines))]
        assert deltas == ["A", "B", "\n", "C"]

    @pytest.mark.anyio
    async def test_error_raised_after_drain(self):
        lines = [chunk("A"), '{"error":{"message":"x"}}', chunk("B")]
        deltas = []
        with pytest.raises(UpstreamStreamError):
            async for delta in extract_content(async_iter(lines)):
                deltas.append(delta)
        assert deltas == ["A", "B"]

    @pytest.mark.anyio
    async def test_error_only_stream(self):
        lines = ["{", '  "error": {', '    "message": "Incorrect API key"', "  }", "}"]
        with pytest.raises(UpstreamStreamError) as exc_info:
            async for _ in extract_content(async_iter(lines)):
                pass
        assert exc_info.value.error_lines == 4

    @pytest.mark.anyio
    async def test_empty_stream(self):
        deltas = [d async for d in extract_content(async_iter([]))]
        assert deltas == []


# Helper pour créer un async iterator
def async_iter(items):
    """Crée un async iterator à partir d'une liste."""
    async def _iter():
        for item in items:
            yield item
    return _iter()
