import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI

from .core.config import Settings
from .core.database import MongoConnection
from .core.logging_config import configure_logging
from .features.reports.router import router as reports_router

logger = logging.getLogger(__name__)  # This logger will inherit from 'coffee_reporting'


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Builds the reporting application.

    The settings are fixed for the life of the process; the MongoDB
    connection is opened once in the lifespan and shared by all requests.
    """
    settings = settings or Settings.from_env()
    configure_logging(settings.verbose)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        logger.info("Starting reporting service...")
        app.state.mongo = MongoConnection.open(
            settings.mongo_uri,
            serverSelectionTimeoutMS=int(settings.db_timeout_seconds * 1000),
        )

        yield

        await app.state.mongo.close()
        logger.info("Reporting service stopped.")

    app = FastAPI(
        title="Coffee Reporting API",
        description="Recent coffee sales, employee accounts and sales totals.",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.settings = settings
    # Unset until the lifespan opens it.
    app.state.mongo = MongoConnection()

    app.include_router(reports_router)
    return app
