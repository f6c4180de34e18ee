"""
Tests unitaires de la construction des paramètres sortants.
"""
import pytest

from chat_relay.core.exceptions import RequestValidationError
from chat_relay.core.models import RelayRequest
from chat_relay.proxy.params import (
    resolve_api_key,
    resolve_max_tokens,
    build_chat_parameters,
    build_image_parameters,
)


class TestResolveApiKey:

    def test_override_used(self):
        assert resolve_api_key("sk-user", "sk-default") == "sk-user"

    def test_blank_override_ignored(self):
        assert resolve_api_key("   ", "sk-default") == "sk-default"
        assert resolve_api_key("", "sk-default") == "sk-default"
        assert resolve_api_key(None, "sk-default") == "sk-default"


class TestResolveMaxTokens:

    def test_override_clamps_to_ceiling(self):
        assert resolve_max_tokens("sk-user", 4000) == 2048

    def test_default_key_keeps_configured_value(self):
        assert resolve_max_tokens(None, 4000) == 4000
        assert resolve_max_tokens(" ", 1000) == 1000


class TestBuildChatParameters:

    def test_single_turn(self, settings):
        request = RelayRequest(kind=1, text="hi")
        params = build_chat_parameters(request, settings, 4000)

        assert params.stop is None
        assert params.stream is True
        assert params.max_tokens == 4000
        assert params.model == "test-model"
        assert [m.to_dict() for m in params.messages] == [{"role": "user", "content": "hi"}]

    def test_single_turn_payload_has_no_stop(self, settings):
        payload = build_chat_parameters(RelayRequest(kind=1, text="hi"), settings, 100).to_payload()
        assert "stop" not in payload
        assert payload["stream"] is True
        assert payload["temperature"] == 0.6

    def test_continuation_uses_prior_context(self, settings):
        request = RelayRequest(
            kind=1,
            text="and then?",
            continuation=True,
            prior_context="Human: hi\nAI: hello\nHuman: and then?\nAI:",
        )
        params = build_chat_parameters(request, settings, 2048)

        assert params.messages[0].content.startswith("Human: hi")
        assert params.stop == ("Human:", "AI:")
        assert params.to_payload()["stop"] == ["Human:", "AI:"]

    def test_continuation_requires_prior_context(self, settings):
        request = RelayRequest(kind=1, text="hi", continuation=True, prior_context=" ")
        with pytest.raises(RequestValidationError):
            build_chat_parameters(request, settings, 2048)


class TestBuildImageParameters:

    def test_image_payload(self, settings):
        params = build_image_parameters(RelayRequest(kind=2, text="a cat"), settings)
        assert params.to_payload() == {"prompt": "a cat", "size": "256x256"}
