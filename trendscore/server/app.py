"""HTTP app: REST API mounted under /api."""

from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI

from trendscore.server.api import router
from trendscore.state import closeState, initState
from trendscore.version import __version__


@asynccontextmanager
async def lifespan(app: FastAPI):
    initState()
    yield
    closeState()


def createApp() -> FastAPI:
    app = FastAPI(title="Trendscore", version=__version__, lifespan=lifespan)
    app.include_router(router, prefix="/api")
    return app
