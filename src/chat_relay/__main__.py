"""
Point d'entrée pour `python -m chat_relay`.
"""
import os
import uvicorn

from .config.loader import CONFIG_ENV_VAR


def main():
    """Fonction principale."""
    import argparse

    parser = argparse.ArgumentParser(description="Chat Relay")
    parser.add_argument("--host", default="0.0.0.0", help="Host (défaut: 0.0.0.0)")
    parser.add_argument("--port", type=int, default=8000, help="Port (défaut: 8000)")
    parser.add_argument("--config", default=None, help="Chemin vers config.toml")
    parser.add_argument("--reload", action="store_true", help="Activer le reload auto")

    args = parser.parse_args()

    if args.config:
        # Transmis via l'environnement pour survivre au reload uvicorn
        os.environ[CONFIG_ENV_VAR] = os.path.abspath(args.config)

    print(f"🚀 Démarrage de Chat Relay sur {args.host}:{args.port}")

    uvicorn.run(
        "chat_relay.main:app",
        host=args.host,
        port=args.port,
        reload=args.reload
    )


if __name__ == "__main__":
    main()
