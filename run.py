"""Entry point for the HomeHero API server.

Launches the FastAPI application under Uvicorn.  Host and port are
read from the ``HOST`` and ``PORT`` environment variables (or a
``.env`` file in the project root); defaults are ``0.0.0.0`` and
``5000``.

Usage:
    python run.py
"""
import asyncio
import logging

from uvicorn import Config, Server

from homehero_api.app.core.config import settings
from homehero_api.app.main import app


async def main() -> None:
    """Serve the API until interrupted."""
    # log_config=None keeps the handlers installed by setup_logging.
    config = Config(app=app, host=settings.host, port=settings.port, reload=False, log_config=None)
    server = Server(config)
    logging.getLogger(__name__).info("HomeHero Server is starting on port %s", settings.port)
    await server.serve()


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except (KeyboardInterrupt, SystemExit):
        pass
