from __future__ import annotations

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from mockapi.core.config import Settings, get_settings
from mockapi.core.logging_config import setup_logging
from mockapi.core.middleware import MockHeadersMiddleware
from mockapi.routers import collections as collections_router
from mockapi.services.datastore import DataStore, open_datastore

logger = logging.getLogger(__name__)


def create_app(settings: Settings | None = None, datastore: DataStore | None = None) -> FastAPI:
    """
    Factory compatible with uvicorn (``uvicorn --factory mockapi.app:create_app``).

    Missing or unreadable data (MissingSchemaError, CorruptDataError) is fatal
    here, before the server starts accepting requests.
    """
    settings = settings or get_settings()
    setup_logging(settings.log_level)
    if datastore is None:
        datastore = open_datastore(settings)

    app = FastAPI(title="MockAPI")
    app.state.settings = settings
    app.state.datastore = datastore

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(MockHeadersMiddleware, latency_factor=settings.latency_factor)
    app.include_router(collections_router.router)

    logger.info(
        "Serving %d collection(s) from %s",
        len(datastore.collection_names()),
        datastore.storage.path,
    )
    return app
