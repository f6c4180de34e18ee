"""
Logique de relais HTTP vers le service distant.
"""

from .client import create_relay_client, RelayClient, build_headers
from .params import (
    resolve_api_key,
    resolve_max_tokens,
    build_chat_parameters,
    build_image_parameters,
)
from .stream import iter_stream_lines, STREAMING_ERROR_TYPES
from .extractor import ContentExtractor, extract_content
from .image import extract_image_url

__all__ = [
    "create_relay_client",
    "RelayClient",
    "build_headers",
    "resolve_api_key",
    "resolve_max_tokens",
    "build_chat_parameters",
    "build_image_parameters",
    "iter_stream_lines",
    "STREAMING_ERROR_TYPES",
    "ContentExtractor",
    "extract_content",
    "extract_image_url",
]
