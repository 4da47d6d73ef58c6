from __future__ import annotations
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI

from app.api import router
from datastore.readings import build_default_store
from logging_config import configure_logging
from services.simulation import build_default_clock
from settings import get_settings


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
    clock = None
    if get_settings().simulator_enabled:
        clock = build_default_clock(sink=build_default_store())
        clock.start()
    try:
        yield
    finally:
        if clock is not None:
            clock.shutdown()
        build_default_store.cache_clear()


def create_app() -> FastAPI:
    configure_logging()
    app = FastAPI(
        title="Wildlife Telemetry",
        description="Simulated wildlife tracker feed with live position aggregation.",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.include_router(router)
    return app

app = create_app()
