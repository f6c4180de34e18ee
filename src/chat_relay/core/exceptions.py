"""
Exceptions personnalisées pour Chat Relay.
"""


class RelayError(Exception):
    """Exception de base pour toutes les erreurs du relais."""

    def __init__(self, message: str, code: str = None, details: dict = None):
        super().__init__(message)
        self.message = message
        self.code = code or "unknown_error"
        self.details = details or {}

    def __str__(self):
        if self.details:
            return f"[{self.code}] {self.message} - Détails: {self.details}"
        return f"[{self.code}] {self.message}"


class ConfigurationError(RelayError):
    """Erreur de configuration (fichier manquant, valeur invalide)."""

    def __init__(self, message: str, config_key: str = None):
        super().__init__(
            message=message,
            code="config_error",
            details={"key": config_key} if config_key else {}
        )


class RequestValidationError(RelayError):
    """Message entrant invalide (JSON illisible, champ requis absent)."""

    def __init__(self, message: str, field: str = None):
        super().__init__(
            message=message,
            code="request_error",
            details={"field": field} if field else {}
        )


class TransportError(RelayError):
    """L'appel sortant n'a pas pu être émis ou a échoué côté réseau."""

    def __init__(self, message: str, url: str = None, code: str = "transport_error"):
        super().__init__(
            message=message,
            code=code,
            details={"url": url} if url else {}
        )


class StreamReadError(TransportError):
    """Le corps streamé s'est interrompu avant sa fermeture normale."""

    def __init__(self, message: str, lines_read: int = 0):
        super().__init__(message=message, code="stream_read_error")
        self.details["lines_read"] = lines_read
        self.lines_read = lines_read


class UpstreamPayloadError(RelayError):
    """Un objet d'erreur a été détecté dans une réponse du service distant."""

    def __init__(self, message: str, code: str = "upstream_error", details: dict = None):
        super().__init__(message=message, code=code, details=details)


class UpstreamStreamError(UpstreamPayloadError):
    """Erreur détectée en cours de stream, levée après épuisement du stream."""

    def __init__(self, message: str, error_lines: int = 0):
        super().__init__(
            message=message,
            code="upstream_stream_error",
            details={"error_lines": error_lines} if error_lines else {}
        )
        self.error_lines = error_lines


class ChannelClosedError(RelayError):
    """Le canal client n'accepte plus de messages (WebSocket fermé)."""

    def __init__(self, message: str = "client channel closed", session_id: str = None):
        super().__init__(
            message=message,
            code="channel_closed",
            details={"session_id": session_id} if session_id else {}
        )
