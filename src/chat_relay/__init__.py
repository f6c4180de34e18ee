"""
Chat Relay: relais WebSocket streaming vers une API de génération de texte et d'images.
"""

__version__ = "1.0.0"
