"""
Cœur métier de Chat Relay.
Modules indépendants sans dépendances externes au package.
"""

from .exceptions import (
    RelayError,
    ConfigurationError,
    RequestValidationError,
    TransportError,
    StreamReadError,
    UpstreamPayloadError,
    UpstreamStreamError,
    ChannelClosedError,
)
from .constants import (
    USER_KEY_MAX_TOKENS,
    CONTINUATION_STOP_SEQUENCES,
    ERROR_PREFIX,
    UNKNOWN_REQUEST_MESSAGE,
    IMAGE_FAILED_MESSAGE,
    UPSTREAM_FAILURE_MESSAGE,
)
from .models import (
    RequestKind,
    RelayRequest,
    ChatMessage,
    OutboundParameters,
    ImageParameters,
    CreditResult,
    MessageChannel,
)

__all__ = [
    # Exceptions
    "RelayError",
    "ConfigurationError",
    "RequestValidationError",
    "TransportError",
    "StreamReadError",
    "UpstreamPayloadError",
    "UpstreamStreamError",
    "ChannelClosedError",
    # Constants
    "USER_KEY_MAX_TOKENS",
    "CONTINUATION_STOP_SEQUENCES",
    "ERROR_PREFIX",
    "UNKNOWN_REQUEST_MESSAGE",
    "IMAGE_FAILED_MESSAGE",
    "UPSTREAM_FAILURE_MESSAGE",
    # Models
    "RequestKind",
    "RelayRequest",
    "ChatMessage",
    "OutboundParameters",
    "ImageParameters",
    "CreditResult",
    "MessageChannel",
]
