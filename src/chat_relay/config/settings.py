"""
Dataclasses pour la configuration.

Les réglages sont figés (frozen) une fois chargés: ils sont partagés en
lecture seule par toutes les requêtes concurrentes.
"""
import logging
from dataclasses import dataclass, field
from typing import Dict, Any

from ..core.constants import (
    DEFAULT_MODEL,
    DEFAULT_TEMPERATURE,
    DEFAULT_MAX_TOKENS,
    DEFAULT_IMAGE_SIZE,
    DEFAULT_HTTP_TIMEOUT,
    DEFAULT_CONNECT_TIMEOUT,
    DEFAULT_LOG_LEVEL,
    DEFAULT_ENDPOINTS,
)
from ..core.exceptions import ConfigurationError
from .loader import has_unresolved_env_var

logger = logging.getLogger(__name__)

_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


def _section(config: Dict[str, Any], name: str) -> Dict[str, Any]:
    section = config.get(name, {})
    if not isinstance(section, dict):
        raise ConfigurationError(f"La section [{name}] doit être une table", config_key=name)
    return section


def _clamp_float(value: object, *, default: float, min_value: float, max_value: float) -> float:
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        v = float(value)
    else:
        return default
    if v < min_value:
        return min_value
    if v > max_value:
        return max_value
    return v


@dataclass(frozen=True)
class HttpConfig:
    """Timeouts du client HTTP sortant."""
    timeout: float = DEFAULT_HTTP_TIMEOUT
    connect_timeout: float = DEFAULT_CONNECT_TIMEOUT

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "HttpConfig":
        """Crée une instance depuis un dictionnaire."""
        return cls(
            timeout=_clamp_float(
                data.get("timeout", DEFAULT_HTTP_TIMEOUT),
                default=DEFAULT_HTTP_TIMEOUT, min_value=1.0, max_value=3600.0
            ),
            connect_timeout=_clamp_float(
                data.get("connect_timeout", DEFAULT_CONNECT_TIMEOUT),
                default=DEFAULT_CONNECT_TIMEOUT, min_value=1.0, max_value=300.0
            ),
        )


@dataclass(frozen=True)
class RelaySettings:
    """Configuration globale du relais."""
    api_key: str = ""
    model: str = DEFAULT_MODEL
    temperature: float = DEFAULT_TEMPERATURE
    max_tokens: int = DEFAULT_MAX_TOKENS
    credit_api: str = DEFAULT_ENDPOINTS["credit_api"]
    chat_api: str = DEFAULT_ENDPOINTS["chat_api"]
    image_api: str = DEFAULT_ENDPOINTS["image_api"]
    image_size: str = DEFAULT_IMAGE_SIZE
    log_level: str = DEFAULT_LOG_LEVEL
    http: HttpConfig = field(default_factory=HttpConfig)

    @classmethod
    def from_config(cls, config: Dict[str, Any]) -> "RelaySettings":
        """
        Crée une instance depuis la configuration chargée.

        Raises:
            ConfigurationError: Si une valeur est invalide
        """
        openai = _section(config, "openai")

        api_key = str(openai.get("api_key", "") or "")
        if has_unresolved_env_var(api_key):
            logger.warning("[CONFIG] Clé API par défaut non résolue (%s), ignorée", api_key)
            api_key = ""

        temperature = openai.get("temperature", DEFAULT_TEMPERATURE)
        if isinstance(temperature, bool) or not isinstance(temperature, (int, float)) \
                or not 0.0 <= temperature <= 2.0:
            raise ConfigurationError(
                f"Température invalide: {temperature!r} (attendu entre 0 et 2)",
                config_key="openai.temperature"
            )

        max_tokens = openai.get("max_tokens", DEFAULT_MAX_TOKENS)
        if isinstance(max_tokens, bool) or not isinstance(max_tokens, int) or max_tokens < 1:
            raise ConfigurationError(
                f"max_tokens invalide: {max_tokens!r}",
                config_key="openai.max_tokens"
            )

        endpoints = {}
        for key, default in DEFAULT_ENDPOINTS.items():
            url = openai.get(key, default)
            if not isinstance(url, str) or not url.startswith(("http://", "https://")):
                raise ConfigurationError(f"URL invalide pour {key}: {url!r}", config_key=f"openai.{key}")
            endpoints[key] = url

        log_level = str(_section(config, "logging").get("level", DEFAULT_LOG_LEVEL)).upper()
        if log_level not in _LOG_LEVELS:
            log_level = DEFAULT_LOG_LEVEL

        return cls(
            api_key=api_key,
            model=str(openai.get("model", DEFAULT_MODEL)),
            temperature=float(temperature),
            max_tokens=max_tokens,
            image_size=str(openai.get("image_size", DEFAULT_IMAGE_SIZE)),
            log_level=log_level,
            http=HttpConfig.from_dict(_section(config, "http")),
            **endpoints
        )
