"""FastAPI application for pushbridge."""

import logging
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from fastapi import FastAPI

from pushbridge.server.routes import health, queue

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from pushbridge.notify import PushoverNotifier
    from pushbridge.queue import Scheduler

logger = logging.getLogger(__name__)


class BridgeServer:
    """Main server application.

    Owns the FastAPI app and ties the scheduler's lifetime to it.
    """

    def __init__(
        self,
        scheduler: "Scheduler",
        psk: str,
        notifier: "PushoverNotifier | None" = None,
    ):
        self._scheduler = scheduler
        self._psk = psk
        self._notifier = notifier
        self._app = self._create_app()

    @property
    def app(self) -> FastAPI:
        """Get the FastAPI application."""
        return self._app

    def _create_app(self) -> FastAPI:
        """Create and configure the FastAPI app."""

        @asynccontextmanager
        async def lifespan(app: FastAPI) -> "AsyncIterator[None]":
            logger.info("Starting pushbridge server")
            await self._scheduler.start()

            yield

            logger.info("Shutting down pushbridge server")
            await self._scheduler.stop()
            if self._notifier:
                await self._notifier.aclose()

        app = FastAPI(
            title="pushbridge",
            description="Delayed Pushover notification queue",
            version="0.1.0",
            lifespan=lifespan,
        )

        app.state.server = self
        app.state.scheduler = self._scheduler
        app.state.store = self._scheduler.store
        app.state.psk = self._psk

        app.include_router(health.router, tags=["health"])
        app.include_router(queue.router, tags=["queue"])

        return app


def create_app(
    scheduler: "Scheduler",
    psk: str,
    notifier: "PushoverNotifier | None" = None,
) -> FastAPI:
    """Create the FastAPI application."""
    server = BridgeServer(scheduler=scheduler, psk=psk, notifier=notifier)
    return server.app
