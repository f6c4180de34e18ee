"""
Chat Relay - Application FastAPI Factory.
Relais WebSocket vers une API de génération de texte et d'images.
"""
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .api.router import api_router
from .config import get_relay_settings
from .config.settings import RelaySettings
from .proxy.client import RelayClient, create_relay_client
from .services.dispatcher import RelayDispatcher

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """Configure le logging racine du processus."""
    logging.basicConfig(level=getattr(logging, level.upper(), logging.INFO), format=LOG_FORMAT)
    # Les logs httpx par requête sont trop verbeux en INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)


def create_app(
    settings: Optional[RelaySettings] = None,
    client: Optional[RelayClient] = None
) -> FastAPI:
    """
    Factory pour créer l'application FastAPI.

    Args:
        settings: Réglages figés; chargés depuis config.toml au démarrage si absents
        client: Client HTTP sortant; créé depuis les réglages si absent

    Returns:
        Instance configurée de FastAPI
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Gestion du cycle de vie de l'application."""
        # Startup
        _startup(app)
        yield
        # Shutdown
        await _shutdown(app)

    app = FastAPI(
        title="Chat Relay",
        description="Relais WebSocket streaming vers une API de génération",
        version="1.0.0",
        lifespan=lifespan
    )

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    if settings is not None:
        _install_services(app, settings, client)

    # Inclusion des routes API
    app.include_router(api_router)

    return app


def _install_services(app: FastAPI, settings: RelaySettings, client: Optional[RelayClient] = None):
    """Attache réglages, client et dispatcher à l'état de l'application."""
    if client is None:
        client = create_relay_client(
            timeout=settings.http.timeout,
            connect_timeout=settings.http.connect_timeout
        )
    app.state.settings = settings
    app.state.relay_client = client
    app.state.dispatcher = RelayDispatcher(settings, client)


def _startup(app: FastAPI):
    """Initialisation au démarrage."""
    print("🚀 Démarrage de Chat Relay...")

    settings = getattr(app.state, "settings", None)
    if settings is None:
        settings = get_relay_settings()
        _install_services(app, settings)

    configure_logging(settings.log_level)

    print(f"✅ Modèle: {settings.model} (max_tokens={settings.max_tokens})")
    if not settings.api_key:
        print("⚠️  Aucune clé API par défaut: les clients devront fournir la leur")


async def _shutdown(app: FastAPI):
    """Arrêt de l'application."""
    print("\n👋 Arrêt du relais...")

    client = getattr(app.state, "relay_client", None)
    if client is not None:
        await client.aclose()

    print("✅ Relais arrêté proprement")


# Crée l'application pour uvicorn
app = create_app()
