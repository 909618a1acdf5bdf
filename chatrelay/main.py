from contextlib import asynccontextmanager
from pathlib import Path
from typing import Optional

import uvicorn
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from chatrelay.core.config import Settings, settings as default_settings
from chatrelay.core.error_handler import custom_exception_handler, validation_exception_handler
from chatrelay.core.exceptions import BaseAPIException
from chatrelay.core.log_config import logger, setup_logging

from chatrelay.api.auth import router as auth_router
from chatrelay.api.messages import router as message_router
from chatrelay.api.system import router as system_router
from chatrelay.api.websocket import router as websocket_router
from chatrelay.database.postgres import select_store
from chatrelay.services.broadcast_router import BroadcastRouter
from chatrelay.services.call_coordinator import CallSignalingCoordinator
from chatrelay.services.event_gateway import EventGateway
from chatrelay.services.session_directory import SessionDirectory
from chatrelay.store.base import MessageStore
from chatrelay.utils.timing_middleware import TimingMiddleware
from chatrelay.utils.websocket_manager import ConnectionManager


def create_app(settings: Optional[Settings] = None, store: Optional[MessageStore] = None) -> FastAPI:
    """
    Build the relay application.

    The store is chosen once, at startup, unless one is passed in; it is
    then shared by the HTTP routes and the WebSocket gateway until shutdown.
    """
    settings = settings or default_settings
    setup_logging(settings.log_level)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        owns_store = store is None
        if owns_store:
            app.state.store = await select_store(settings)
        mode = "durable" if app.state.store.durable else "ephemeral"
        logger.info(f"Relay starting in {mode} mode")

        app.state.gateway = EventGateway(
            store=app.state.store,
            router=BroadcastRouter(ConnectionManager()),
            sessions=SessionDirectory(),
            calls=CallSignalingCoordinator(),
        )
        yield
        await app.state.gateway.drain()
        if owns_store:
            await app.state.store.close()

    app = FastAPI(lifespan=lifespan)
    app.state.settings = settings
    if store is not None:
        app.state.store = store

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(BaseAPIException, custom_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_middleware(TimingMiddleware)

    app.include_router(auth_router)
    app.include_router(message_router)
    app.include_router(system_router)
    app.include_router(websocket_router)

    # Mounted last so it never shadows the API routes.
    if Path(settings.static_dir).is_dir():
        app.mount("/", StaticFiles(directory=settings.static_dir, html=True), name="static")

    return app


app = create_app()


def run():
    uvicorn.run(app, host=default_settings.host, port=default_settings.port)


if __name__ == "__main__":
    run()
