"""
Configuration des tests pytest.
"""
import json
import pytest
import sys
import os

import httpx

# Ajoute src au path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from chat_relay.config.settings import RelaySettings  # noqa: E402
from chat_relay.proxy.client import RelayClient  # noqa: E402


CHAT_URL = "http://upstream.test/v1/chat/completions"
IMAGE_URL = "http://upstream.test/v1/images/generations"
CREDIT_URL = "http://upstream.test/dashboard/billing/credit_grants"


def pytest_configure(config):
    """Déclare les marqueurs utilisés par la suite."""
    config.addinivalue_line(
        "markers", "anyio: marque un test comme asynchrone"
    )


@pytest.fixture
def settings():
    """Réglages de test pointant vers un service factice."""
    return RelaySettings(
        api_key="default-key",
        model="test-model",
        temperature=0.6,
        max_tokens=4000,
        credit_api=CREDIT_URL,
        chat_api=CHAT_URL,
        image_api=IMAGE_URL,
    )


class FakeChannel:
    """Canal client qui mémorise les messages envoyés."""

    def __init__(self, fail_after: int = None):
        self.messages = []
        self.fail_after = fail_after
        self.attempts = 0

    async def send(self, message: str) -> None:
        from chat_relay.core.exceptions import ChannelClosedError

        self.attempts += 1
        if self.fail_after is not None and self.attempts > self.fail_after:
            raise ChannelClosedError()
        self.messages.append(message)


@pytest.fixture
def channel():
    return FakeChannel()


@pytest.fixture
def closing_channel():
    """Canal qui se ferme après le premier message."""
    return FakeChannel(fail_after=1)


class Upstream:
    """
    Service distant simulé via httpx.MockTransport.

    Les lignes de `stream_lines` sont envoyées une par chunk; `fail_after`
    coupe la connexion après ce nombre de lignes.
    `stream_body` remplace le stream par un corps brut (pages d'erreur).
    """

    def __init__(self):
        self.requests = []
        self.stream_lines = []
        self.stream_status = 200
        self.stream_body = None
        self.fail_after = None
        self.image_body = '{"data": [{"url": "http://img.test/a.png"}]}'
        self.credit_body = '{"total_available": 4.2}'
        self.connect_error = False
        self.lines_served = 0

    @property
    def payloads(self):
        return [json.loads(r.content) for r in self.requests if r.content]

    async def _stream(self):
        for index, line in enumerate(self.stream_lines):
            if self.fail_after is not None and index >= self.fail_after:
                raise httpx.ReadError("connection reset")
            self.lines_served += 1
            yield (line + "\n").encode("utf-8")
        if self.fail_after is not None and self.fail_after >= len(self.stream_lines):
            raise httpx.ReadError("connection reset")

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.connect_error:
            raise httpx.ConnectError("connection refused", request=request)
        url = str(request.url)
        if url == CHAT_URL:
            if self.stream_body is not None:
                return httpx.Response(self.stream_status, text=self.stream_body)
            return httpx.Response(self.stream_status, content=self._stream())
        if url == IMAGE_URL:
            return httpx.Response(200, text=self.image_body)
        if url == CREDIT_URL:
            return httpx.Response(200, text=self.credit_body)
        return httpx.Response(404, text="not found")

    def client(self) -> RelayClient:
        return RelayClient(transport=httpx.MockTransport(self.handler))


@pytest.fixture
def upstream():
    return Upstream()

