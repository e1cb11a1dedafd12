"""
Main entrypoint for the HomeHero API.

This module assembles the FastAPI application: logging, CORS, error
handlers, the store client and the routers.  ``create_app`` builds a
configured instance; the module-level ``app`` is what ASGI servers
import, e.g.::

    uvicorn homehero_api.app.main:app --reload

The store client is created once per application and initialised on
startup.  If the database cannot be opened, startup fails and the
server does not begin accepting requests.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .api.router import router
from .core.config import Settings, settings as default_settings
from .core.db import Database
from .core.errors import register_exception_handlers
from .core.logging_config import setup_logging


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Create and configure a FastAPI application.

    Parameters
    ----------
    settings : Optional[Settings]
        Configuration to use.  Defaults to the settings read from the
        environment at import time.

    Returns
    -------
    FastAPI
        A configured FastAPI application instance.
    """
    settings = settings or default_settings
    # Initialise logging before anything else so that startup can log.
    setup_logging(settings.log_level, settings.log_file or None)
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        # Raises StoreUnavailableError and aborts startup if the file is unusable.
        app.state.db.init()
        logger.info("%s %s started", settings.project_name, settings.api_version)
        yield

    app = FastAPI(title=settings.project_name, version=settings.api_version, lifespan=lifespan)
    app.state.settings = settings
    app.state.db = Database(settings.database_url)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
    )
    register_exception_handlers(app)
    app.include_router(router)

    return app


# Create the application instance at import time so that tools such as
# uvicorn can discover it without calling create_app manually.
app = create_app()
