"""
Constantes globales pour Chat Relay.
"""

# ============================================================================
# POLITIQUE DE TOKENS
# ============================================================================
# Plafond appliqué quand le client fournit sa propre clé API
USER_KEY_MAX_TOKENS = 2048

# ============================================================================
# MODE CONVERSATION CONTINUE
# ============================================================================
# Marqueurs de tour: le modèle s'arrête avant de rédiger le tour suivant
CONTINUATION_STOP_SEQUENCES = ("Human:", "AI:")

# ============================================================================
# MESSAGES CLIENT
# ============================================================================
ERROR_PREFIX = "error: "
UNKNOWN_REQUEST_MESSAGE = ERROR_PREFIX + "unknown request type"
IMAGE_FAILED_MESSAGE = "image generation failed"
UPSTREAM_FAILURE_MESSAGE = "remote service error, retry later"

# ============================================================================
# VALEURS PAR DÉFAUT
# ============================================================================
DEFAULT_MODEL = "gpt-3.5-turbo"
DEFAULT_TEMPERATURE = 0.6
DEFAULT_MAX_TOKENS = 2048
DEFAULT_IMAGE_SIZE = "256x256"
DEFAULT_HTTP_TIMEOUT = 120.0
DEFAULT_CONNECT_TIMEOUT = 10.0
DEFAULT_LOG_LEVEL = "INFO"

DEFAULT_ENDPOINTS = {
    "credit_api": "https://api.openai.com/dashboard/billing/credit_grants",
    "chat_api": "https://api.openai.com/v1/chat/completions",
    "image_api": "https://api.openai.com/v1/images/generations",
}

# Champs JSON scannés dans les fragments du service distant
CONTENT_FIELD = "content"
ERROR_FIELD = "error"
URL_FIELD = "url"
